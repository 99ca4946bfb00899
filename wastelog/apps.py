from django.apps import AppConfig


class WastelogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'wastelog'
    verbose_name = 'Waste Activity Log'
