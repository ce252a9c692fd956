"""
BUDGET SERVICES - Categorie, voci e report finanziari
=====================================================

Servizi per:
- CRUD categorie e voci di budget
- Cambio stato delle voci (pagata richiede data e costo effettivo)
- Ricalcolo degli importi spesi di categoria ed evento
- Statistiche, scadenze di pagamento e report multi-evento
"""

import logging
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.actions import RisultatoAzione, azione_server
from core.cache import PERCORSO_FINANZE, dati_percorso, percorsi_evento, revalida_percorso
from core.excel_generator import generate_excel_response

from . import aggregazioni
from .models import CategoriaBudget, VoceBudget

logger = logging.getLogger(__name__)

NOME_CATEGORIA_ENTRATE = "Entrate"
DESCRIZIONE_CATEGORIA_ENTRATE = "Sponsorizzazioni e vendita biglietti"
COLORE_CATEGORIA_ENTRATE = "#10B981"


def _revalida(evento_id):
    revalida_percorso(*percorsi_evento(evento_id, "budget"), PERCORSO_FINANZE)


def _applica(istanza, dati, user=None):
    for campo, valore in dati.items():
        setattr(istanza, campo, valore)
    if user is not None:
        if istanza._state.adding:
            istanza.created_by = user
        istanza.updated_by = user


# ============================================================================
# RICALCOLO
# ============================================================================

def ricalcola_speso_categoria(categoria):
    """
    Ricalcola importo_speso della categoria (somma dei costi effettivi delle
    voci) e poi lo speso dell'evento.

    Passano di qui tutte le modifiche alle voci, anche quelle generate da
    sponsor e staff: revalida il budget dell'evento e la pagina finanze.
    """
    totale = categoria.voci.aggregate(totale=Sum("costo_effettivo"))["totale"] or Decimal("0.00")
    categoria.importo_speso = totale
    categoria.save(update_fields=["importo_speso", "updated_at"])
    categoria.evento.ricalcola_speso()
    _revalida(categoria.evento_id)
    return totale


def categoria_entrate(evento, user=None):
    """Categoria "Entrate" dell'evento, creata se non esiste."""
    categoria = CategoriaBudget.objects.filter(
        evento=evento, nome=NOME_CATEGORIA_ENTRATE
    ).first()
    if categoria is None:
        categoria = CategoriaBudget.objects.create(
            evento=evento,
            nome=NOME_CATEGORIA_ENTRATE,
            descrizione=DESCRIZIONE_CATEGORIA_ENTRATE,
            colore=COLORE_CATEGORIA_ENTRATE,
            icona="bi-cash-coin",
            created_by=user,
        )
        logger.info(f"Creata categoria Entrate per evento {evento.codice}")
    return categoria


# ============================================================================
# CATEGORIE
# ============================================================================

@azione_server("Errore durante la creazione della categoria")
def crea_categoria(evento, dati, user=None):
    categoria = CategoriaBudget(evento=evento)
    _applica(categoria, dati, user)
    categoria.full_clean()
    categoria.save()

    _revalida(evento.pk)
    return RisultatoAzione.ok("Categoria creata con successo", data=categoria)


@azione_server("Errore durante l'aggiornamento della categoria")
def aggiorna_categoria(categoria, dati, user=None):
    _applica(categoria, dati, user)
    categoria.full_clean()
    categoria.save()

    _revalida(categoria.evento_id)
    return RisultatoAzione.ok("Categoria aggiornata con successo", data=categoria)


@azione_server("Errore durante l'eliminazione della categoria")
def elimina_categoria(categoria):
    """Elimina la categoria con tutte le sue voci."""
    evento = categoria.evento
    with transaction.atomic():
        categoria.delete()
        evento.ricalcola_speso()

    _revalida(evento.pk)
    return RisultatoAzione.ok("Categoria eliminata con successo")


# ============================================================================
# VOCI
# ============================================================================

@azione_server("Errore durante la creazione della voce")
def crea_voce(evento, dati, user=None):
    voce = VoceBudget(evento=evento)
    _applica(voce, dati, user)
    voce.full_clean()
    if not voce.costo_stimato or voce.costo_stimato <= 0:
        raise ValidationError({"costo_stimato": "Il costo stimato deve essere maggiore di 0"})

    with transaction.atomic():
        voce.save()
        ricalcola_speso_categoria(voce.categoria)

    _revalida(evento.pk)
    return RisultatoAzione.ok("Voce creata con successo", data=voce)


@azione_server("Errore durante l'aggiornamento della voce")
def aggiorna_voce(voce, dati, user=None):
    categoria_precedente_id = (
        VoceBudget.objects.filter(pk=voce.pk).values_list("categoria_id", flat=True).first()
    )
    _applica(voce, dati, user)
    voce.full_clean()

    with transaction.atomic():
        voce.save()
        ricalcola_speso_categoria(voce.categoria)
        if categoria_precedente_id and categoria_precedente_id != voce.categoria_id:
            ricalcola_speso_categoria(CategoriaBudget.objects.get(pk=categoria_precedente_id))

    _revalida(voce.evento_id)
    return RisultatoAzione.ok("Voce aggiornata con successo", data=voce)


@azione_server("Errore durante l'eliminazione della voce")
def elimina_voce(voce):
    categoria = voce.categoria
    with transaction.atomic():
        voce.delete()
        ricalcola_speso_categoria(categoria)

    _revalida(categoria.evento_id)
    return RisultatoAzione.ok("Voce eliminata con successo")


@azione_server("Errore durante l'aggiornamento dello stato")
def aggiorna_stato_voce(voce, stato, data_pagamento=None, costo_effettivo=None, user=None):
    """
    Cambia lo stato di una voce.

    Per segnare una voce come pagata servono data di pagamento e costo
    effettivo (passati o già presenti sulla voce).
    """
    if stato not in dict(VoceBudget.STATO_CHOICES):
        raise ValidationError({"stato": "Stato non valido"})

    data_pagamento = data_pagamento or voce.data_pagamento
    if costo_effettivo is None:
        costo_effettivo = voce.costo_effettivo

    if stato == "paid" and (not data_pagamento or costo_effettivo is None):
        raise ValidationError(
            "Per segnare come pagata servono data di pagamento e costo effettivo"
        )

    voce.stato = stato
    voce.data_pagamento = data_pagamento
    voce.costo_effettivo = costo_effettivo
    if user is not None:
        voce.updated_by = user

    with transaction.atomic():
        voce.save()
        ricalcola_speso_categoria(voce.categoria)

    _revalida(voce.evento_id)
    return RisultatoAzione.ok(
        f"Stato aggiornato a {voce.get_stato_display()}", data=voce
    )


# ============================================================================
# LETTURE
# ============================================================================

def statistiche_evento(evento):
    """Statistiche di budget dell'evento (in cache per percorso)."""

    def calcolo():
        categorie = evento.categorie_budget.all()
        voci = VoceBudget.objects.filter(evento=evento)
        return aggregazioni.statistiche_budget(categorie, voci)

    return dati_percorso(f"/eventi/{evento.pk}/budget", calcolo)


def prossimi_pagamenti(evento, giorni=30):
    """Voci approvate o in attesa con scadenza nei prossimi N giorni."""
    oggi = timezone.localdate()
    return (
        VoceBudget.objects.filter(
            evento=evento,
            stato__in=["approved", "pending"],
            data_scadenza__gte=oggi,
            data_scadenza__lte=oggi + timedelta(days=giorni),
        )
        .select_related("categoria")
        .order_by("data_scadenza")
    )


def report_finanziario(data_inizio=None, data_fine=None, eventi_ids=None):
    """
    Report finanziario sugli eventi non cancellati, filtrabile per periodo
    (data di inizio evento) e per elenco di eventi.
    """
    from eventi.models import Evento

    eventi = Evento.objects.attivi().order_by("data_inizio")
    if data_inizio:
        eventi = eventi.filter(data_inizio__gte=data_inizio)
    if data_fine:
        eventi = eventi.filter(data_inizio__lte=data_fine)
    if eventi_ids:
        eventi = eventi.filter(pk__in=eventi_ids)

    eventi = list(eventi)
    voci = VoceBudget.objects.filter(evento__in=eventi).select_related("categoria")
    return aggregazioni.report_finanziario(eventi, voci)


def panoramica_finanze():
    """Totali globali per la pagina finanze (in cache)."""
    return dati_percorso(PERCORSO_FINANZE, lambda: report_finanziario()["summary"])


def esporta_budget_excel(evento):
    """Export Excel del budget di un evento: voci e riepilogo per categoria."""
    voci = VoceBudget.objects.filter(evento=evento).select_related("categoria")
    righe = [
        {
            "Categoria": voce.categoria.nome,
            "Descrizione": voce.descrizione,
            "Tipo": voce.get_tipo_display(),
            "Stato": voce.get_stato_display(),
            "Costo Stimato": voce.costo_stimato,
            "Costo Effettivo": voce.costo_effettivo if voce.costo_effettivo is not None else "",
            "Quantità": voce.quantita,
            "Fornitore": voce.fornitore,
            "Numero Fattura": voce.numero_fattura,
            "Scadenza": voce.data_scadenza or "",
            "Data Pagamento": voce.data_pagamento or "",
        }
        for voce in voci
    ]
    categorie = [
        {
            "Categoria": categoria.nome,
            "Allocato": categoria.importo_allocato,
            "Speso": categoria.importo_speso,
            "Residuo": categoria.residuo,
            "Utilizzo %": categoria.percentuale_utilizzo,
        }
        for categoria in evento.categorie_budget.all()
    ]
    headers = [
        "Categoria", "Descrizione", "Tipo", "Stato", "Costo Stimato",
        "Costo Effettivo", "Quantità", "Fornitore", "Numero Fattura",
        "Scadenza", "Data Pagamento",
    ]
    return generate_excel_response(
        righe,
        filename=f"budget_{evento.codice}",
        sheet_name="Voci",
        headers=headers,
        extra_sheets={"Categorie": categorie},
    )
