from django.apps import AppConfig


class FarmsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'farms'
    verbose_name = 'Farms'

    def ready(self):
        """Import signals to keep farmer status in sync with farm captures."""
        import farms.signals  # noqa: F401
