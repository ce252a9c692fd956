"""
PERSONE SERVICES - Partecipanti, relatori e sponsor
===================================================

Servizi per:
- CRUD partecipanti, relatori e sponsor di un evento
- Check-in dei partecipanti via QR code (payload JSON con checksum) o manuale
- Badge PDF con QR code ed export CSV/Excel
- Sincronizzazione sponsor -> voce di entrata nel budget ("Sponsor: <nome>")
"""

import csv
import hashlib
import hmac
import io
import json
import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from core.actions import RisultatoAzione, azione_server
from core.cache import percorsi_evento, revalida_percorso
from core.excel_generator import generate_excel_response
from core.pdf_generator import genera_badge_pdf
from core.qr_code_generator import generate_qr_code
from core.utils import formatta_data, percentuale

from .models import Partecipante, Relatore, Sponsor

logger = logging.getLogger(__name__)

LUNGHEZZA_CHECKSUM = 16
CAMPI_QR = ('participantId', 'eventId', 'checksum')


def _applica(istanza, dati, user=None):
    for campo, valore in dati.items():
        setattr(istanza, campo, valore)
    if user is not None:
        if istanza._state.adding:
            istanza.created_by = user
        istanza.updated_by = user


def _revalida(evento_id, *sezioni):
    revalida_percorso(*percorsi_evento(evento_id, *sezioni))


def _verifica_email_unica(partecipante):
    duplicato = Partecipante.objects.filter(
        evento_id=partecipante.evento_id, email__iexact=partecipante.email
    ).exclude(pk=partecipante.pk)
    if duplicato.exists():
        raise ValidationError({'email': "Un partecipante con questa email è già registrato all'evento"})


# ============================================================================
# PARTECIPANTI
# ============================================================================

@azione_server("Errore durante la creazione del partecipante")
def crea_partecipante(evento, dati, user=None):
    partecipante = Partecipante(evento=evento)
    _applica(partecipante, dati, user)
    partecipante.email = (partecipante.email or '').strip().lower()
    _verifica_email_unica(partecipante)
    partecipante.full_clean()
    partecipante.save()

    _revalida(evento.pk, 'partecipanti')
    logger.info(f"Registrato partecipante {partecipante.email} all'evento {evento.codice}")
    return RisultatoAzione.ok("Partecipante creato con successo", data=partecipante)


@azione_server("Errore durante l'aggiornamento del partecipante")
def aggiorna_partecipante(partecipante, dati, user=None):
    _applica(partecipante, dati, user)
    partecipante.email = (partecipante.email or '').strip().lower()
    _verifica_email_unica(partecipante)
    partecipante.full_clean()
    partecipante.save()

    _revalida(partecipante.evento_id, 'partecipanti')
    return RisultatoAzione.ok("Partecipante aggiornato con successo", data=partecipante)


@azione_server("Errore durante l'eliminazione del partecipante")
def elimina_partecipante(partecipante):
    evento_id = partecipante.evento_id
    partecipante.delete()

    _revalida(evento_id, 'partecipanti')
    return RisultatoAzione.ok("Partecipante eliminato con successo")


# ============================================================================
# QR CODE E CHECK-IN
# ============================================================================

def genera_checksum(partecipante_id, evento_id):
    """Primi 16 caratteri esadecimali di sha256("partecipante:evento:QR_SECRET")."""
    dati = f"{partecipante_id}:{evento_id}:{settings.QR_SECRET}"
    return hashlib.sha256(dati.encode('utf-8')).hexdigest()[:LUNGHEZZA_CHECKSUM]


def payload_qr(partecipante):
    """Stringa JSON codificata nel QR code del badge."""
    partecipante_id = str(partecipante.pk)
    evento_id = str(partecipante.evento_id)
    return json.dumps({
        'participantId': partecipante_id,
        'eventId': evento_id,
        'checksum': genera_checksum(partecipante_id, evento_id),
    })


def valida_dati_qr(stringa_qr):
    """
    Verifica il payload letto dal QR code.

    Returns:
        dict: payload con participantId, eventId e checksum

    Raises:
        ValidationError: JSON non valido, campi mancanti o checksum errato
    """
    try:
        dati = json.loads(stringa_qr)
    except (TypeError, ValueError):
        raise ValidationError("Invalid QR data format")

    if not isinstance(dati, dict) or not all(dati.get(campo) for campo in CAMPI_QR):
        raise ValidationError("Missing required fields in QR data")

    atteso = genera_checksum(dati['participantId'], dati['eventId'])
    if not hmac.compare_digest(str(dati['checksum']), atteso):
        raise ValidationError("Invalid checksum - QR code may be tampered")

    return dati


def qr_code_partecipante(partecipante):
    """PNG (BytesIO) del QR code di check-in."""
    return generate_qr_code(payload_qr(partecipante))


def _esegui_checkin(partecipante, evento_id):
    if str(partecipante.evento_id) != str(evento_id):
        raise ValidationError("Participant does not belong to this event")
    if partecipante.checked_in:
        raise ValidationError(f"{partecipante.nome} {partecipante.cognome} is already checked-in")

    partecipante.registra_checkin()
    _revalida(partecipante.evento_id, 'partecipanti', 'checkin')
    logger.info(f"Check-in {partecipante.email} ({partecipante.evento_id})")
    return partecipante


@azione_server("Check-in failed")
def checkin_da_qr(stringa_qr, evento=None):
    """
    Check-in dalla lettura del QR code.

    Con evento indicato rifiuta i QR emessi per un altro evento.
    """
    dati = valida_dati_qr(stringa_qr)
    if evento is not None and str(evento.pk) != dati['eventId']:
        raise ValidationError("Participant does not belong to this event")

    try:
        partecipante = Partecipante.objects.get(pk=dati['participantId'])
    except (Partecipante.DoesNotExist, ValidationError, ValueError):
        return RisultatoAzione.errore("Participant not found")

    _esegui_checkin(partecipante, dati['eventId'])
    return RisultatoAzione.ok(f"Check-in effettuato: {partecipante.nome_completo}", data=partecipante)


@azione_server("Manual check-in failed")
def checkin_manuale(partecipante, evento):
    _esegui_checkin(partecipante, evento.pk)
    return RisultatoAzione.ok(f"Check-in effettuato: {partecipante.nome_completo}", data=partecipante)


@azione_server("Undo check-in failed")
def annulla_checkin(partecipante):
    if not partecipante.checked_in:
        raise ValidationError(f"{partecipante.nome} {partecipante.cognome} is not checked-in")

    partecipante.annulla_checkin()
    _revalida(partecipante.evento_id, 'partecipanti', 'checkin')
    return RisultatoAzione.ok(f"Check-in annullato: {partecipante.nome_completo}", data=partecipante)


def statistiche_checkin(evento):
    """Totale partecipanti (non annullati), presenti e percentuale."""
    partecipanti = evento.partecipanti.exclude(stato='cancelled')
    totale = partecipanti.count()
    checked_in = partecipanti.filter(checked_in=True).count()
    return {
        'totale': totale,
        'checked_in': checked_in,
        'da_registrare': totale - checked_in,
        'percentuale': percentuale(checked_in, totale),
    }


def badge_pdf(evento, partecipanti=None):
    """
    PDF dei badge con QR code.

    Senza elenco esplicito stampa tutti i partecipanti non annullati.
    """
    if partecipanti is None:
        partecipanti = evento.partecipanti.exclude(stato='cancelled').order_by('cognome', 'nome')

    badges = [
        {
            'nome': p.nome_completo,
            'azienda': p.azienda,
            'ruolo': p.ruolo_aziendale or p.tipo_biglietto,
            'qr': qr_code_partecipante(p),
        }
        for p in partecipanti
    ]
    logger.info(f"Generati {len(badges)} badge per evento {evento.codice}")
    return genera_badge_pdf(badges, titolo_evento=evento.nome)


# ============================================================================
# EXPORT
# ============================================================================

INTESTAZIONI_PARTECIPANTI = [
    'Nome', 'Cognome', 'Email', 'Telefono', 'Azienda', 'Ruolo',
    'Tipo Ticket', 'Stato Registrazione', 'Check-in', 'Orario Check-in',
]


def _righe_partecipanti(evento):
    for p in evento.partecipanti.order_by('cognome', 'nome'):
        yield {
            'Nome': p.nome,
            'Cognome': p.cognome,
            'Email': p.email,
            'Telefono': p.telefono,
            'Azienda': p.azienda,
            'Ruolo': p.ruolo_aziendale,
            'Tipo Ticket': p.tipo_biglietto,
            'Stato Registrazione': p.get_stato_display(),
            'Check-in': p.checked_in,
            'Orario Check-in': p.orario_checkin or '',
        }


def partecipanti_csv(evento):
    """CSV dei partecipanti dell'evento (stringa)."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=INTESTAZIONI_PARTECIPANTI, lineterminator='\n')
    writer.writeheader()
    for riga in _righe_partecipanti(evento):
        riga['Check-in'] = 'Sì' if riga['Check-in'] else 'No'
        if riga['Orario Check-in']:
            riga['Orario Check-in'] = formatta_data(riga['Orario Check-in'], con_ora=True)
        writer.writerow(riga)
    return output.getvalue()


def esporta_partecipanti_excel(evento):
    return generate_excel_response(
        list(_righe_partecipanti(evento)),
        filename=f"partecipanti_{evento.codice}",
        sheet_name="Partecipanti",
        headers=INTESTAZIONI_PARTECIPANTI,
    )


def esporta_relatori_excel(evento):
    righe = [
        {
            'Nome': r.nome,
            'Cognome': r.cognome,
            'Email': r.email,
            'Azienda': r.azienda,
            'Titolo Intervento': r.titolo_intervento,
            'Durata (min)': r.durata_intervento or '',
            'Data Intervento': r.data_intervento or '',
            'Stato Conferma': r.get_stato_display(),
        }
        for r in evento.relatori.order_by('cognome', 'nome')
    ]
    return generate_excel_response(righe, filename=f"relatori_{evento.codice}", sheet_name="Relatori")


def esporta_sponsor_excel(evento):
    righe = [
        {
            'Azienda': s.nome,
            'Contatto': s.referente,
            'Email': s.email,
            'Livello': s.get_livello_display(),
            'Importo': s.importo,
            'Contratto Firmato': s.contratto_firmato,
            'Stato': s.get_stato_display(),
            'Stato Pagamento': s.get_stato_pagamento_display(),
        }
        for s in evento.sponsor.all()
    ]
    return generate_excel_response(righe, filename=f"sponsor_{evento.codice}", sheet_name="Sponsor")


# ============================================================================
# RELATORI
# ============================================================================

@azione_server("Errore durante la creazione del relatore")
def crea_relatore(evento, dati, user=None):
    relatore = Relatore(evento=evento)
    _applica(relatore, dati, user)
    relatore.full_clean()
    relatore.save()

    _revalida(evento.pk, 'relatori')
    return RisultatoAzione.ok("Relatore creato con successo", data=relatore)


@azione_server("Errore durante l'aggiornamento del relatore")
def aggiorna_relatore(relatore, dati, user=None):
    _applica(relatore, dati, user)
    relatore.full_clean()
    relatore.save()

    _revalida(relatore.evento_id, 'relatori', 'agenda')
    return RisultatoAzione.ok("Relatore aggiornato con successo", data=relatore)


@azione_server("Errore durante l'eliminazione del relatore")
def elimina_relatore(relatore):
    evento_id = relatore.evento_id
    relatore.delete()

    _revalida(evento_id, 'relatori', 'agenda')
    return RisultatoAzione.ok("Relatore eliminato con successo")


# ============================================================================
# SPONSOR E BUDGET
# ============================================================================

def _dati_voce_sponsor(sponsor):
    return {
        'descrizione': f"Sponsor: {sponsor.nome}",
        'costo_stimato': sponsor.importo,
        'costo_effettivo': sponsor.importo_incassato,
        'stato': 'paid' if sponsor.stato_pagamento == 'paid' else 'planned',
        'data_pagamento': sponsor.data_pagamento,
        'fornitore': sponsor.nome,
    }


def _crea_voce_sponsor(sponsor, user=None):
    """
    Crea la voce di entrata collegata allo sponsor nella categoria "Entrate".

    Un errore viene registrato nel log e non blocca lo sponsor.
    """
    from budget.models import VoceBudget
    from budget.services import categoria_entrate, ricalcola_speso_categoria

    try:
        with transaction.atomic():
            voce = VoceBudget(
                categoria=categoria_entrate(sponsor.evento, user),
                evento_id=sponsor.evento_id,
                tipo='income',
                created_by=user,
                **_dati_voce_sponsor(sponsor),
            )
            voce.full_clean()
            voce.save()
            ricalcola_speso_categoria(voce.categoria)
            return voce
    except Exception:
        logger.exception(f"Creazione voce budget fallita per sponsor {sponsor.pk}")
        return None


def _aggiorna_voce_sponsor(sponsor):
    from budget.services import ricalcola_speso_categoria

    voce = sponsor.voce_budget
    try:
        with transaction.atomic():
            for campo, valore in _dati_voce_sponsor(sponsor).items():
                setattr(voce, campo, valore)
            voce.save()
            ricalcola_speso_categoria(voce.categoria)
    except Exception:
        logger.exception(f"Aggiornamento voce budget fallito per sponsor {sponsor.pk}")


def _elimina_voce_sponsor(sponsor):
    from budget.services import ricalcola_speso_categoria

    voce = sponsor.voce_budget
    if voce is None:
        return
    try:
        with transaction.atomic():
            categoria = voce.categoria
            voce.delete()
            sponsor.voce_budget = None
            ricalcola_speso_categoria(categoria)
    except Exception:
        logger.exception(f"Eliminazione voce budget fallita per sponsor {sponsor.pk}")


@azione_server("Errore durante la creazione dello sponsor")
def crea_sponsor(evento, dati, user=None):
    """Crea lo sponsor e, con importo > 0, la voce di entrata collegata."""
    sponsor = Sponsor(evento=evento)
    _applica(sponsor, dati, user)
    sponsor.full_clean()

    with transaction.atomic():
        sponsor.save()
        if sponsor.importo > Decimal('0'):
            sponsor.voce_budget = _crea_voce_sponsor(sponsor, user)
            if sponsor.voce_budget is not None:
                sponsor.save(update_fields=['voce_budget', 'updated_at'])

    _revalida(evento.pk, 'sponsor', 'budget')
    logger.info(f"Creato sponsor {sponsor.nome} per evento {evento.codice}")
    return RisultatoAzione.ok("Sponsor creato con successo", data=sponsor)


@azione_server("Errore durante l'aggiornamento dello sponsor")
def aggiorna_sponsor(sponsor, dati, user=None):
    """
    Aggiorna lo sponsor e la voce collegata; se la voce manca e l'importo
    è positivo la crea.
    """
    _applica(sponsor, dati, user)
    sponsor.full_clean()

    with transaction.atomic():
        if sponsor.voce_budget_id:
            _aggiorna_voce_sponsor(sponsor)
        elif sponsor.importo > Decimal('0'):
            sponsor.voce_budget = _crea_voce_sponsor(sponsor, user)
        sponsor.save()

    _revalida(sponsor.evento_id, 'sponsor', 'budget')
    return RisultatoAzione.ok("Sponsor aggiornato con successo", data=sponsor)


@azione_server("Errore durante l'eliminazione dello sponsor")
def elimina_sponsor(sponsor):
    evento_id = sponsor.evento_id
    with transaction.atomic():
        _elimina_voce_sponsor(sponsor)
        sponsor.delete()

    _revalida(evento_id, 'sponsor', 'budget')
    return RisultatoAzione.ok("Sponsor eliminato con successo")
