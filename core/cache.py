"""
Cache dei dati di pagina per percorso logico.

Le pagine pesanti (dashboard, budget evento, statistiche) leggono i dati
aggregati tramite dati_percorso(). Ogni mutazione chiama revalida_percorso()
con i percorsi che ha reso obsoleti.
"""

import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

PREFISSO_CHIAVE = "eventhub:percorso:"

PERCORSO_FINANZE = "/finanze"


def chiave_percorso(percorso):
    return f"{PREFISSO_CHIAVE}{percorso}"


def dati_percorso(percorso, calcolo, timeout=None):
    """
    Restituisce i dati in cache per il percorso, calcolandoli se mancano.

    Args:
        percorso: percorso logico (es. "/eventi/<id>/budget")
        calcolo: callable senza argomenti che produce i dati
        timeout: secondi di validità (default EVENTHUB_CACHE_TIMEOUT)
    """
    if timeout is None:
        timeout = getattr(settings, "EVENTHUB_CACHE_TIMEOUT", 300)
    return cache.get_or_set(chiave_percorso(percorso), calcolo, timeout)


def revalida_percorso(*percorsi):
    """Invalida i dati in cache dei percorsi indicati."""
    chiavi = [chiave_percorso(p) for p in percorsi if p]
    if chiavi:
        cache.delete_many(chiavi)
        logger.debug(f"Percorsi revalidati: {', '.join(percorsi)}")


def percorsi_evento(evento_id, *sezioni):
    """
    Percorsi da revalidare dopo una modifica che riguarda un evento.

    Include sempre dashboard, lista eventi e dettaglio evento.
    """
    percorsi = ["/", "/eventi", f"/eventi/{evento_id}"]
    percorsi.extend(f"/eventi/{evento_id}/{sezione}" for sezione in sezioni)
    return percorsi
