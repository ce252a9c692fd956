"""
Celery tasks per app scadenze.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def aggiorna_scadenze_scadute_task():
    """Passa a overdue le scadenze aperte con data passata (beat giornaliero)."""
    from .services import aggiorna_scadenze_scadute

    return {'aggiornate': aggiorna_scadenze_scadute()}


@shared_task
def invia_promemoria_scadenze_task():
    """Promemoria email per le scadenze entro i giorni di preavviso."""
    from .services import invia_promemoria_scadenze

    return invia_promemoria_scadenze()
