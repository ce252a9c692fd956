"""
STAFF SERVICES - Anagrafica staff, assegnazioni e pagamenti
===========================================================

Servizi per:
- CRUD membri dello staff, attivazione/disattivazione
- Assegnazioni su evento con calcolo di scadenza e stato del pagamento
- Collegamento automatico con il budget (voce "Pagamento Staff")
- Registrazione, posticipo e annullamento dei pagamenti
- Aggiornamento notturno degli stati (pending -> overdue)
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.actions import RisultatoAzione, azione_server
from core.cache import percorsi_evento, revalida_percorso

from .models import AssegnazioneStaff, MembroStaff
from .pagamenti import (
    calcola_data_scadenza_pagamento,
    calcola_stato_pagamento,
    formatta_data_italiana,
)

logger = logging.getLogger(__name__)

PERCORSO_STAFF = "/persone/staff"
NOTE_VOCE_STAFF = "Generato automaticamente dal modulo Staff"

STATI_ASSEGNAZIONE_ATTIVI = ('requested', 'confirmed')


def _revalida_membro(membro_id):
    revalida_percorso(PERCORSO_STAFF, f"{PERCORSO_STAFF}/{membro_id}", "/")


def _revalida_assegnazione(assegnazione, *sezioni):
    revalida_percorso(
        PERCORSO_STAFF,
        f"{PERCORSO_STAFF}/{assegnazione.staff_id}",
        *percorsi_evento(assegnazione.evento_id, 'staff', *sezioni),
    )


def _applica(istanza, dati, user=None):
    for campo, valore in dati.items():
        setattr(istanza, campo, valore)
    if user is not None:
        if istanza._state.adding:
            istanza.created_by = user
        istanza.updated_by = user


def _aggiungi_nota(note, testo):
    return f"{note or ''}\n\n{testo}".strip()


# ============================================================================
# MEMBRI STAFF
# ============================================================================

@azione_server("Errore durante la creazione dello staff member")
def crea_membro(dati, user=None):
    membro = MembroStaff()
    _applica(membro, dati, user)
    membro.email = (membro.email or '').strip().lower()
    membro.full_clean()
    membro.save()

    _revalida_membro(membro.pk)
    logger.info(f"Creato membro staff {membro} ({membro.email})")
    return RisultatoAzione.ok("Staff member creato con successo", data=membro)


@azione_server("Errore durante l'aggiornamento dello staff member")
def aggiorna_membro(membro, dati, user=None):
    _applica(membro, dati, user)
    membro.email = (membro.email or '').strip().lower()
    membro.full_clean()
    membro.save()

    _revalida_membro(membro.pk)
    return RisultatoAzione.ok("Staff member aggiornato con successo", data=membro)


@azione_server("Errore durante l'aggiornamento dello status")
def toggle_attivo(membro, attivo, user=None):
    membro.attivo = bool(attivo)
    if user is not None:
        membro.updated_by = user
    membro.save(update_fields=['attivo', 'updated_by', 'updated_at'])

    _revalida_membro(membro.pk)
    messaggio = (
        "Staff member attivato con successo" if membro.attivo
        else "Staff member disattivato con successo"
    )
    return RisultatoAzione.ok(messaggio, data=membro)


def assegnazioni_bloccanti(membro):
    """Assegnazioni richieste o confermate su eventi non ancora conclusi."""
    return membro.assegnazioni.filter(
        stato_assegnazione__in=STATI_ASSEGNAZIONE_ATTIVI,
        evento__data_fine__gte=timezone.localdate(),
    )


@azione_server("Errore durante l'eliminazione dello staff member")
def elimina_membro(membro):
    """
    Elimina il membro e le sue assegnazioni (con le voci di budget collegate).
    Rifiuta se ha assegnazioni attive su eventi futuri o in corso.
    """
    bloccanti = assegnazioni_bloccanti(membro).count()
    if bloccanti:
        raise ValidationError(
            f"Impossibile eliminare: {bloccanti} assegnazioni attive su eventi non conclusi"
        )

    membro_id = membro.pk
    with transaction.atomic():
        for assegnazione in membro.assegnazioni.select_related('voce_budget'):
            _elimina_voce_collegata(assegnazione)
        membro.delete()

    _revalida_membro(membro_id)
    logger.info(f"Eliminato membro staff {membro_id}")
    return RisultatoAzione.ok("Staff member eliminato con successo")


# ============================================================================
# COLLEGAMENTO BUDGET
# ============================================================================

def _dati_voce(assegnazione):
    staff = assegnazione.staff
    return {
        'descrizione': f"Pagamento Staff: {staff.cognome} {staff.nome}",
        'costo_stimato': assegnazione.importo,
        'costo_effettivo': assegnazione.importo,
        'fornitore': f"{staff.nome} {staff.cognome}",
    }


def _crea_voce_collegata(assegnazione, user=None):
    """
    Crea la voce di spesa collegata all'assegnazione.

    Un errore viene registrato nel log e non blocca l'assegnazione.
    """
    from budget.models import VoceBudget
    from budget.services import ricalcola_speso_categoria

    try:
        with transaction.atomic():
            voce = VoceBudget(
                categoria=assegnazione.categoria_budget,
                evento_id=assegnazione.evento_id,
                tipo='expense',
                stato='paid' if assegnazione.stato_pagamento == 'paid' else 'approved',
                data_pagamento=assegnazione.data_pagamento,
                note=NOTE_VOCE_STAFF,
                created_by=user,
                **_dati_voce(assegnazione),
            )
            voce.full_clean()
            voce.save()
            ricalcola_speso_categoria(voce.categoria)
            return voce
    except Exception:
        logger.exception(f"Creazione voce budget fallita per assegnazione {assegnazione.pk}")
        return None


def _aggiorna_voce_collegata(assegnazione):
    from budget.services import ricalcola_speso_categoria

    voce = assegnazione.voce_budget
    try:
        with transaction.atomic():
            for campo, valore in _dati_voce(assegnazione).items():
                setattr(voce, campo, valore)
            voce.save()
            ricalcola_speso_categoria(voce.categoria)
    except Exception:
        logger.exception(f"Aggiornamento voce budget fallito per assegnazione {assegnazione.pk}")


def _segna_voce_pagata(assegnazione):
    from budget.services import ricalcola_speso_categoria

    voce = assegnazione.voce_budget
    try:
        with transaction.atomic():
            voce.stato = 'paid'
            voce.data_pagamento = assegnazione.data_pagamento
            if voce.costo_effettivo is None:
                voce.costo_effettivo = assegnazione.importo
            if assegnazione.numero_fattura:
                voce.numero_fattura = assegnazione.numero_fattura
            if assegnazione.url_fattura:
                voce.url_fattura = assegnazione.url_fattura
            voce.save()
            ricalcola_speso_categoria(voce.categoria)
    except Exception:
        logger.exception(f"Aggiornamento voce budget fallito per assegnazione {assegnazione.pk}")


def _elimina_voce_collegata(assegnazione):
    from budget.services import ricalcola_speso_categoria

    voce = assegnazione.voce_budget
    if voce is None:
        return
    try:
        with transaction.atomic():
            categoria = voce.categoria
            voce.delete()
            assegnazione.voce_budget = None
            ricalcola_speso_categoria(categoria)
    except Exception:
        logger.exception(f"Eliminazione voce budget fallita per assegnazione {assegnazione.pk}")


# ============================================================================
# ASSEGNAZIONI
# ============================================================================

@azione_server("Errore durante la creazione dell'assegnazione")
def crea_assegnazione(evento, dati, user=None):
    """
    Crea un'assegnazione. Con termini diversi da custom e un importo la
    scadenza del pagamento è calcolata dalla fine del turno.
    """
    assegnazione = AssegnazioneStaff(evento=evento)
    _applica(assegnazione, dati, user)

    if assegnazione.termini_pagamento != 'custom' and assegnazione.importo:
        assegnazione.data_scadenza_pagamento = calcola_data_scadenza_pagamento(
            assegnazione.fine, assegnazione.termini_pagamento
        )

    assegnazione.stato_pagamento = calcola_stato_pagamento(
        assegnazione.data_scadenza_pagamento,
        assegnazione.data_pagamento,
        assegnazione.stato_assegnazione,
    )
    assegnazione.full_clean()

    with transaction.atomic():
        if assegnazione.categoria_budget_id and assegnazione.importo:
            assegnazione.voce_budget = _crea_voce_collegata(assegnazione, user)
        assegnazione.save()

    _revalida_assegnazione(assegnazione, 'budget')
    logger.info(f"Creata assegnazione {assegnazione.pk} per {assegnazione.staff}")
    return RisultatoAzione.ok("Assegnazione creata con successo", data=assegnazione)


@azione_server("Errore durante l'aggiornamento")
def aggiorna_assegnazione(assegnazione, dati, user=None):
    precedente = AssegnazioneStaff.objects.get(pk=assegnazione.pk)
    _applica(assegnazione, dati, user)

    termini_o_fine_cambiati = (
        assegnazione.termini_pagamento != precedente.termini_pagamento
        or assegnazione.fine != precedente.fine
    )
    if termini_o_fine_cambiati and assegnazione.termini_pagamento != 'custom':
        assegnazione.data_scadenza_pagamento = calcola_data_scadenza_pagamento(
            assegnazione.fine, assegnazione.termini_pagamento
        )

    if (
        assegnazione.stato_assegnazione != precedente.stato_assegnazione
        or assegnazione.data_scadenza_pagamento != precedente.data_scadenza_pagamento
    ):
        assegnazione.stato_pagamento = calcola_stato_pagamento(
            assegnazione.data_scadenza_pagamento,
            assegnazione.data_pagamento,
            assegnazione.stato_assegnazione,
        )
    assegnazione.full_clean()

    with transaction.atomic():
        if assegnazione.voce_budget_id and assegnazione.importo:
            _aggiorna_voce_collegata(assegnazione)
        elif assegnazione.categoria_budget_id and assegnazione.importo and not assegnazione.voce_budget_id:
            assegnazione.voce_budget = _crea_voce_collegata(assegnazione, user)
        assegnazione.save()

    _revalida_assegnazione(assegnazione, 'budget')
    return RisultatoAzione.ok("Assegnazione aggiornata con successo", data=assegnazione)


@azione_server("Errore durante l'eliminazione")
def elimina_assegnazione(assegnazione):
    with transaction.atomic():
        _elimina_voce_collegata(assegnazione)
        assegnazione.delete()

    _revalida_assegnazione(assegnazione, 'budget')
    return RisultatoAzione.ok("Assegnazione eliminata con successo")


@azione_server("Errore durante l'aggiornamento dello status")
def aggiorna_stato_assegnazione(assegnazione, stato, user=None):
    if stato not in dict(AssegnazioneStaff.STATO_ASSEGNAZIONE_CHOICES):
        raise ValidationError({'stato_assegnazione': "Stato non valido"})

    assegnazione.stato_assegnazione = stato
    assegnazione.stato_pagamento = calcola_stato_pagamento(
        assegnazione.data_scadenza_pagamento,
        assegnazione.data_pagamento,
        stato,
    )
    if user is not None:
        assegnazione.updated_by = user
    assegnazione.save()

    _revalida_assegnazione(assegnazione)
    return RisultatoAzione.ok("Status aggiornato con successo", data=assegnazione)


def _lista_id(staff_ids):
    if isinstance(staff_ids, str):
        return [s.strip() for s in staff_ids.split(',') if s.strip()]
    return [str(s) for s in staff_ids]


@azione_server("Errore durante la creazione multipla")
def crea_assegnazioni_multiple(
    evento,
    staff_ids,
    inizio,
    fine,
    termini_pagamento='custom',
    data_scadenza_pagamento=None,
    importo=None,
    note=None,
    categoria_budget=None,
    user=None,
):
    """
    Crea un'assegnazione "requested" per ogni membro indicato.

    staff_ids può essere una lista o una stringa separata da virgole.
    Si interrompe al primo errore.
    """
    ids = _lista_id(staff_ids)
    if not ids:
        raise ValidationError({'staff_ids': "Seleziona almeno un membro dello staff"})

    if termini_pagamento != 'custom' and importo:
        data_scadenza_pagamento = calcola_data_scadenza_pagamento(fine, termini_pagamento)

    if fine <= inizio:
        return RisultatoAzione.errore("La data di fine deve essere successiva alla data di inizio")

    create = []
    for staff_id in ids:
        membro = MembroStaff.objects.get(pk=staff_id)
        risultato = crea_assegnazione(
            evento,
            {
                'staff': membro,
                'inizio': inizio,
                'fine': fine,
                'stato_assegnazione': 'requested',
                'termini_pagamento': termini_pagamento,
                'data_scadenza_pagamento': data_scadenza_pagamento,
                'importo': importo,
                'note_pagamento': note or '',
                'categoria_budget': categoria_budget,
            },
            user,
        )
        if not risultato.success:
            return RisultatoAzione.errore(
                f"Errore creazione per staff {staff_id}: {risultato.message}",
                errors=risultato.errors,
            )
        create.append(risultato.data)

    return RisultatoAzione.ok("Assegnazioni create", data={'ids': [str(a.pk) for a in create]})


# ============================================================================
# PAGAMENTI
# ============================================================================

@azione_server("Errore durante la registrazione del pagamento")
def segna_pagato(assegnazione, data_pagamento, note=None, numero_fattura=None, url_fattura=None, user=None):
    """Registra il pagamento. Note e fattura mancanti mantengono i valori esistenti."""
    if not data_pagamento:
        raise ValidationError({'data_pagamento': "La data di pagamento è obbligatoria"})

    assegnazione.stato_pagamento = 'paid'
    assegnazione.data_pagamento = data_pagamento
    assegnazione.note_pagamento = note or assegnazione.note_pagamento
    assegnazione.numero_fattura = numero_fattura or assegnazione.numero_fattura
    assegnazione.url_fattura = url_fattura or assegnazione.url_fattura
    if user is not None:
        assegnazione.updated_by = user

    with transaction.atomic():
        assegnazione.save()
        if assegnazione.voce_budget_id:
            _segna_voce_pagata(assegnazione)

    _revalida_assegnazione(assegnazione, 'budget')
    logger.info(
        f"Pagamento registrato per assegnazione {assegnazione.pk} "
        f"({assegnazione.importo} il {formatta_data_italiana(data_pagamento)})"
    )
    return RisultatoAzione.ok("Pagamento registrato con successo", data=assegnazione)


@azione_server("Errore durante il posticipo del pagamento")
def posticipa_pagamento(assegnazione, nuova_scadenza, motivo=None, user=None):
    if not nuova_scadenza:
        raise ValidationError({'nuova_scadenza': "La nuova scadenza è obbligatoria"})

    assegnazione.data_scadenza_pagamento = nuova_scadenza
    assegnazione.stato_pagamento = calcola_stato_pagamento(
        nuova_scadenza,
        assegnazione.data_pagamento,
        assegnazione.stato_assegnazione,
    )
    if motivo:
        assegnazione.note_pagamento = _aggiungi_nota(
            assegnazione.note_pagamento,
            f"Posticipato al {formatta_data_italiana(nuova_scadenza)}: {motivo}",
        )
    if user is not None:
        assegnazione.updated_by = user
    assegnazione.save()

    _revalida_assegnazione(assegnazione)
    return RisultatoAzione.ok("Scadenza pagamento posticipata con successo", data=assegnazione)


@azione_server("Errore durante la cancellazione del pagamento")
def annulla_pagamento(assegnazione, motivo=None, user=None):
    assegnazione.data_pagamento = None
    assegnazione.numero_fattura = ''
    assegnazione.url_fattura = ''
    assegnazione.stato_pagamento = calcola_stato_pagamento(
        assegnazione.data_scadenza_pagamento,
        None,
        assegnazione.stato_assegnazione,
    )
    if motivo:
        assegnazione.note_pagamento = _aggiungi_nota(
            assegnazione.note_pagamento, f"Pagamento cancellato: {motivo}"
        )
    if user is not None:
        assegnazione.updated_by = user
    assegnazione.save()

    _revalida_assegnazione(assegnazione)
    return RisultatoAzione.ok("Pagamento cancellato", data=assegnazione)


def aggiorna_stati_pagamento(oggi=None):
    """
    Ricalcola lo stato pagamento delle assegnazioni non pagate.

    Returns:
        int: numero di assegnazioni aggiornate
    """
    oggi = oggi or timezone.localdate()
    aggiornate = 0

    candidate = AssegnazioneStaff.objects.exclude(stato_pagamento='paid').filter(
        data_scadenza_pagamento__isnull=False
    )
    for assegnazione in candidate.iterator():
        nuovo_stato = calcola_stato_pagamento(
            assegnazione.data_scadenza_pagamento,
            assegnazione.data_pagamento,
            assegnazione.stato_assegnazione,
            oggi=oggi,
        )
        if nuovo_stato != assegnazione.stato_pagamento:
            AssegnazioneStaff.objects.filter(pk=assegnazione.pk).update(
                stato_pagamento=nuovo_stato, updated_at=timezone.now()
            )
            aggiornate += 1

    if aggiornate:
        revalida_percorso(PERCORSO_STAFF, "/")
    logger.info(f"Stati pagamento staff aggiornati: {aggiornate}")
    return aggiornate


def pagamenti_scaduti():
    """Assegnazioni con pagamento scaduto, dalla scadenza più vecchia."""
    return (
        AssegnazioneStaff.objects.filter(stato_pagamento='overdue')
        .select_related('staff', 'evento')
        .order_by('data_scadenza_pagamento')
    )
