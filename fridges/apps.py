from django.apps import AppConfig


class FridgesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'fridges'
    verbose_name = 'Fridges & Temperature Logs'
