from django.apps import AppConfig


class ComunicazioniConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "comunicazioni"
    verbose_name = "Comunicazioni"
