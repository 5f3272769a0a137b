from django.apps import AppConfig


class AmcConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "amc"
    verbose_name = "Agricultural Market Committees"

    def ready(self):
        import amc.signals  # noqa: F401
