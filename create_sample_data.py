#!/usr/bin/env python
"""
Create sample data for the Waste Density demonstration
"""
import os
import sys
import django
from datetime import timedelta

# Setup Django
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'wastedb.settings')
django.setup()

from django.contrib.auth import get_user_model
from django.utils import timezone

from wastelog.evaluator import KNOWN_ISOTOPES, evaluate
from wastelog.models import WasteRecord
from wastelog.store import get_store

DEMO_USERNAME = 'demo'
DEMO_PASSWORD = 'demo-waste-density'

MEASUREMENTS = [
    # (isotope, distance_m, dose_rate_usv_h, mass_g, hours_ago)
    ('F-18', 0.3, 0.08, 10000, 72),
    ('F-18', 0.3, 0.12, 8500, 48),
    ('Tc-99m', 0.5, 0.35, 12000, 30),
    ('I-131', 1.0, 0.90, 25000, 24),
    ('Tc-99m', 0.5, 0.20, 9000, 6),
    ('F-18', 0.3, 0.05, 11000, 1),
]

User = get_user_model()

print("Clearing existing demo data...")
WasteRecord.objects.filter(owner__username=DEMO_USERNAME).delete()

user, created = User.objects.get_or_create(
    username=DEMO_USERNAME,
    defaults={'email': 'demo@example.com'},
)
user.set_password(DEMO_PASSWORD)
user.save()
print(f"{'Created' if created else 'Reset'} user '{DEMO_USERNAME}' (password: {DEMO_PASSWORD})")

now = timezone.now()
timestamps = iter(now - timedelta(hours=m[4]) for m in MEASUREMENTS)

store = get_store()
store.clock = lambda: next(timestamps)

print("Creating waste records...")
with store:
    for isotope, distance, dose, mass, _ in MEASUREMENTS:
        record = store.append(user.pk, evaluate(isotope, KNOWN_ISOTOPES[isotope], distance, dose, mass))
        print(f"  {record.created_at:%Y-%m-%d %H:%M}  {record.isotope:7s}  "
              f"{record.activity_mbq:.5e} MBq  {record.density_bq_per_g:.5g} Bq/g")

print(f"\nDone. Log in as '{DEMO_USERNAME}' to browse {len(MEASUREMENTS)} calculations.")
