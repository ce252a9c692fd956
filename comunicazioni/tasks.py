"""
Celery tasks per app comunicazioni.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def invia_comunicazione_task(comunicazione_id):
    """Invio di una comunicazione a tutti i suoi destinatari."""
    from .models import Comunicazione
    from .services import invia_comunicazione

    comunicazione = Comunicazione.objects.select_related('evento', 'template').filter(pk=comunicazione_id).first()
    if comunicazione is None:
        logger.warning(f"Comunicazione {comunicazione_id} non trovata")
        return {'success': False, 'message': 'Comunicazione non trovata'}

    risultato = invia_comunicazione(comunicazione)
    return {'success': risultato.success, 'message': risultato.message}


@shared_task
def invia_comunicazioni_programmate_task():
    """
    Invia le comunicazioni programmate scadute.

    Pianificato ogni 5 minuti in config.celery (beat_schedule).
    """
    from .services import invia_comunicazioni_programmate

    return invia_comunicazioni_programmate()
