import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class EventiConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "eventi"
    verbose_name = "Eventi"

    def ready(self):
        try:
            from core.search import SearchRegistry
            from .models import Evento

            SearchRegistry.register(
                model=Evento,
                category='Eventi',
                icon='bi-calendar-event',
                priority=10
            )

        except Exception as e:
            logger.warning(f"Errore registrazione SearchRegistry per eventi: {e}")
