# Generated manually - initial schema for saved waste activity density calculations

from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='WasteRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('isotope', models.CharField(default='custom', help_text='Isotope label (F-18, I-131, Tc-99m or a custom label)', max_length=32)),
                ('gamma_constant', models.FloatField(help_text='Specific gamma-ray dose constant (uSv m²/MBq h), must be positive')),
                ('distance_m', models.FloatField(help_text='Measurement distance from the waste package (m)', validators=[django.core.validators.MinValueValidator(0)])),
                ('dose_rate_usv_h', models.FloatField(help_text='Measured dose rate (uSv/h)', validators=[django.core.validators.MinValueValidator(0)])),
                ('mass_g', models.FloatField(help_text='Mass of the waste (g), must be positive')),
                ('activity_mbq', models.FloatField(editable=False, help_text='Estimated activity (MBq)')),
                ('activity_bq', models.FloatField(editable=False, help_text='Estimated activity (Bq)')),
                ('density_bq_per_g', models.FloatField(editable=False, help_text='Activity per gram of waste (Bq/g)')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, editable=False, help_text='When the calculation was saved')),
                ('owner', models.ForeignKey(help_text='User who performed the calculation', on_delete=django.db.models.deletion.CASCADE, related_name='waste_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Waste Record',
                'verbose_name_plural': 'Waste Records',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['owner', '-created_at', '-id'], name='wasterecord_owner_created_idx')],
            },
        ),
    ]
