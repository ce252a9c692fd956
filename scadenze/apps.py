from django.apps import AppConfig


class ScadenzeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "scadenze"
    verbose_name = "Scadenze"
