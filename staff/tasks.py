"""
Celery tasks per app staff.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def aggiorna_stati_pagamento_task():
    """
    Aggiornamento notturno degli stati pagamento (pending -> overdue).

    Pianificato in config.celery (beat_schedule).
    """
    from .services import aggiorna_stati_pagamento

    aggiornate = aggiorna_stati_pagamento()
    return {'aggiornate': aggiornate}
