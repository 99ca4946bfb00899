"""
WSGI config for the waste density project
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'wastedb.settings')

application = get_wsgi_application()
