"""
Template tags EventHub: valuta, giorni mancanti, badge di stato, allegati.

Uso: {% load eventhub_tags %}
"""

from django import template
from django.contrib.contenttypes.models import ContentType
from django.utils.html import format_html

from core import utils

register = template.Library()


# Colori Bootstrap per i valori di stato di tutte le app
COLORI_STATO = {
    # eventi
    "draft": "secondary",
    "upcoming": "info",
    "active": "success",
    "completed": "primary",
    "cancelled": "dark",
    # pagamenti
    "not_due": "secondary",
    "pending": "warning",
    "overdue": "danger",
    "paid": "success",
    "partial": "info",
    # assegnazioni / relatori / partecipanti
    "requested": "warning",
    "confirmed": "success",
    "declined": "danger",
    "invited": "info",
    "registered": "info",
    "attended": "primary",
    "no_show": "danger",
    # budget
    "planned": "secondary",
    "approved": "info",
    "invoiced": "primary",
    # scadenze
    "in_progress": "info",
    # comunicazioni
    "scheduled": "info",
    "sending": "warning",
    "sent": "success",
    "failed": "danger",
    # sponsor
    "prospect": "secondary",
    "negotiating": "warning",
    # agenda
    "ongoing": "warning",
}

COLORI_PRIORITA = {
    "low": "secondary",
    "medium": "info",
    "high": "warning",
    "critical": "danger",
}


@register.filter
def valuta(importo):
    """{{ evento.budget|valuta }} -> € 1.234,56"""
    return utils.formatta_valuta(importo)


@register.filter
def giorni_mancanti(data):
    if not data:
        return ""
    return utils.formatta_giorni_mancanti(data)


@register.filter
def tronca(testo, lunghezza=50):
    return utils.tronca(testo, int(lunghezza))


@register.filter
def colore_stato(stato):
    return COLORI_STATO.get(stato, "secondary")


@register.filter
def colore_priorita(priorita):
    return COLORI_PRIORITA.get(priorita, "secondary")


@register.simple_tag
def badge_stato(obj, campo="stato"):
    """
    Badge Bootstrap per un campo choices.

    Uso: {% badge_stato assegnazione "stato_pagamento" %}
    """
    valore = getattr(obj, campo, "")
    etichetta = getattr(obj, f"get_{campo}_display", lambda: valore)()
    colore = COLORI_PRIORITA.get(valore) if campo == "priorita" else COLORI_STATO.get(valore, "secondary")
    return format_html('<span class="badge bg-{}">{}</span>', colore, etichetta)


@register.simple_tag
def get_content_type_id(obj):
    """
    ContentType ID di un oggetto, per il widget allegati.

    Uso: {% get_content_type_id object as content_type_id %}
    """
    if obj:
        return ContentType.objects.get_for_model(obj.__class__).pk
    return None
