"""
Funzioni di formattazione condivise (valuta, giorni mancanti, progresso).
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from django.utils import timezone


def formatta_valuta(importo):
    """
    Formatta un importo in euro con separatori italiani.

    >>> formatta_valuta(1234.5)
    '€ 1.234,50'
    """
    if importo is None:
        importo = 0
    valore = Decimal(str(importo)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    segno = "-" if valore < 0 else ""
    intero, decimali = f"{abs(valore):.2f}".split(".")
    intero = f"{int(intero):,}".replace(",", ".")
    return f"{segno}€ {intero},{decimali}"


def _come_data(valore):
    if isinstance(valore, datetime):
        if timezone.is_aware(valore):
            valore = timezone.localtime(valore)
        return valore.date()
    if isinstance(valore, date):
        return valore
    if isinstance(valore, str):
        return date.fromisoformat(valore[:10])
    raise TypeError(f"Data non valida: {valore!r}")


def giorni_mancanti(data, oggi=None):
    """Giorni tra oggi e la data (negativo se passata)."""
    oggi = oggi or timezone.localdate()
    return (_come_data(data) - oggi).days


def formatta_giorni_mancanti(data, oggi=None):
    """Testo leggibile: Oggi, Domani, Ieri, Tra N giorni, Scaduto N giorni fa."""
    giorni = giorni_mancanti(data, oggi=oggi)
    if giorni == 0:
        return "Oggi"
    if giorni == 1:
        return "Domani"
    if giorni == -1:
        return "Ieri"
    if giorni > 0:
        return f"Tra {giorni} giorni"
    return f"Scaduto {abs(giorni)} giorni fa"


def progresso_evento(inizio, fine, adesso=None):
    """Percentuale (0-100) di avanzamento di un evento rispetto a oggi."""
    adesso = adesso or timezone.now()
    if isinstance(inizio, date) and not isinstance(inizio, datetime):
        inizio = timezone.make_aware(datetime.combine(inizio, datetime.min.time()))
    if isinstance(fine, date) and not isinstance(fine, datetime):
        fine = timezone.make_aware(datetime.combine(fine, datetime.max.time()))

    if adesso < inizio:
        return 0
    if adesso > fine:
        return 100

    totale = (fine - inizio).total_seconds()
    if totale <= 0:
        return 100
    return round((adesso - inizio).total_seconds() / totale * 100)


def tronca(testo, lunghezza):
    if testo is None:
        return ""
    if len(testo) <= lunghezza:
        return testo
    return f"{testo[:lunghezza - 3]}..."


def percentuale(parte, totale):
    """Percentuale arrotondata all'intero, 0 se il totale è nullo."""
    if not totale:
        return 0
    return int(round(float(parte) / float(totale) * 100))


def formatta_data(valore, con_ora=False):
    if not valore:
        return ""
    if isinstance(valore, datetime):
        if timezone.is_aware(valore):
            valore = timezone.localtime(valore)
        return valore.strftime("%d/%m/%Y %H:%M" if con_ora else "%d/%m/%Y")
    return valore.strftime("%d/%m/%Y")
