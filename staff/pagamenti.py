"""
Regole di calcolo dei pagamenti staff.

Funzioni pure: nessun accesso al database, testabili in isolamento.
"""

from datetime import date, datetime, timedelta

from django.utils import timezone

GIORNI_PER_TERMINE = {
    'immediate': 0,
    '30_days': 30,
    '60_days': 60,
    '90_days': 90,
}

STATI_ASSEGNAZIONE_SENZA_PAGAMENTO = ('cancelled', 'declined')


def _data(valore):
    if isinstance(valore, datetime):
        if timezone.is_aware(valore):
            valore = timezone.localtime(valore)
        return valore.date()
    return valore


def calcola_data_scadenza_pagamento(fine, termini):
    """
    Scadenza del pagamento a partire dalla fine del turno.

    La base è la data di fine turno (oggi se manca). Termini immediate,
    30/60/90_days aggiungono i giorni corrispondenti; custom o termini
    sconosciuti restituiscono la base.
    """
    base = _data(fine) if fine else timezone.localdate()
    return base + timedelta(days=GIORNI_PER_TERMINE.get(termini, 0))


def calcola_stato_pagamento(data_scadenza, data_pagamento, stato_assegnazione, oggi=None):
    """
    Stato del pagamento derivato.

    - paid se esiste una data di pagamento
    - not_due se l'assegnazione è annullata o rifiutata
    - not_due se non c'è una scadenza
    - overdue se oggi è oltre la scadenza
    - pending altrimenti
    """
    if data_pagamento:
        return 'paid'

    if stato_assegnazione in STATI_ASSEGNAZIONE_SENZA_PAGAMENTO:
        return 'not_due'

    if not data_scadenza:
        return 'not_due'

    oggi = oggi or timezone.localdate()
    if oggi > _data(data_scadenza):
        return 'overdue'

    return 'pending'


def riepilogo_pagamenti(assegnazioni):
    """
    Totali per stato pagamento su una lista di assegnazioni.

    Returns:
        dict con conteggi e importi (da_pagare, scaduto, pagato, totale)
    """
    riepilogo = {
        'totale_assegnazioni': 0,
        'conteggio': {'not_due': 0, 'pending': 0, 'overdue': 0, 'paid': 0},
        'importo_totale': 0,
        'da_pagare': 0,
        'scaduto': 0,
        'pagato': 0,
    }

    for assegnazione in assegnazioni:
        importo = assegnazione.importo or 0
        riepilogo['totale_assegnazioni'] += 1
        riepilogo['conteggio'][assegnazione.stato_pagamento] = (
            riepilogo['conteggio'].get(assegnazione.stato_pagamento, 0) + 1
        )
        riepilogo['importo_totale'] += importo

        if assegnazione.stato_pagamento == 'paid':
            riepilogo['pagato'] += importo
        elif assegnazione.stato_pagamento == 'overdue':
            riepilogo['scaduto'] += importo
            riepilogo['da_pagare'] += importo
        elif assegnazione.stato_pagamento == 'pending':
            riepilogo['da_pagare'] += importo

    return riepilogo


def formatta_data_italiana(valore):
    if isinstance(valore, (date, datetime)):
        return _data(valore).strftime('%d/%m/%Y')
    return str(valore)
