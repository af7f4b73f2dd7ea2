from django.apps import AppConfig


class ChecklistsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'checklists'
    verbose_name = 'Checklists'

    def ready(self):
        from . import signals  # noqa: F401
