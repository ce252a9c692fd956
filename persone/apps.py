import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class PersoneConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "persone"
    verbose_name = "Persone"

    def ready(self):
        """
        Registra partecipanti, relatori e sponsor nel SearchRegistry.
        """
        try:
            from core.search import SearchRegistry
            from .models import Partecipante, Relatore, Sponsor

            SearchRegistry.register(
                model=Partecipante,
                category='Partecipanti',
                icon='bi-people',
                priority=8
            )
            SearchRegistry.register(
                model=Relatore,
                category='Relatori',
                icon='bi-mic',
                priority=6
            )
            SearchRegistry.register(
                model=Sponsor,
                category='Sponsor',
                icon='bi-award',
                priority=5
            )

        except Exception as e:
            logger.warning(f"Errore registrazione SearchRegistry per persone: {e}")
