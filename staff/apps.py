import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class StaffConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "staff"
    verbose_name = "Staff"

    def ready(self):
        """
        Registra i modelli nel SearchRegistry quando l'app è pronta.
        """
        try:
            from core.search import SearchRegistry
            from .models import MembroStaff

            SearchRegistry.register(
                model=MembroStaff,
                category='Staff',
                icon='bi-person-badge',
                priority=7
            )

        except Exception as e:
            logger.warning(f"Errore registrazione SearchRegistry per staff: {e}")
