"""
SCADENZE SERVICES - Scadenze operative degli eventi
===================================================

Servizi per:
- CRUD scadenze, completamento e riapertura
- Aggiornamento giornaliero delle scadenze scadute (-> overdue)
- Scadenze urgenti per la dashboard
- Promemoria via email entro i giorni di preavviso
"""

import logging
from datetime import timedelta

from django.db.models import F, Q
from django.utils import timezone

from core.actions import RisultatoAzione, azione_server
from core.cache import percorsi_evento, revalida_percorso

from .models import Scadenza

logger = logging.getLogger(__name__)

STATI_DA_VERIFICARE = ('pending', 'in_progress')


def _applica(istanza, dati, user=None):
    for campo, valore in dati.items():
        setattr(istanza, campo, valore)
    if user is not None:
        if istanza._state.adding:
            istanza.created_by = user
        istanza.updated_by = user


def _revalida(evento_id):
    revalida_percorso(*percorsi_evento(evento_id, 'scadenze'), "/scadenze")


# ============================================================================
# CRUD
# ============================================================================

@azione_server("Errore durante la creazione della scadenza")
def crea_scadenza(evento, dati, user=None):
    scadenza = Scadenza(evento=evento)
    _applica(scadenza, dati, user)
    scadenza.full_clean()
    scadenza.save()

    _revalida(evento.pk)
    return RisultatoAzione.ok("Scadenza creata con successo", data=scadenza)


@azione_server("Errore durante l'aggiornamento della scadenza")
def aggiorna_scadenza(scadenza, dati, user=None):
    data_precedente = (
        Scadenza.objects.filter(pk=scadenza.pk).values_list('data_scadenza', flat=True).first()
    )
    _applica(scadenza, dati, user)
    if data_precedente and scadenza.data_scadenza != data_precedente:
        scadenza.notifica_inviata = False
    scadenza.full_clean()
    scadenza.save()

    _revalida(scadenza.evento_id)
    return RisultatoAzione.ok("Scadenza aggiornata con successo", data=scadenza)


@azione_server("Errore durante l'eliminazione della scadenza")
def elimina_scadenza(scadenza):
    evento_id = scadenza.evento_id
    scadenza.delete()

    _revalida(evento_id)
    return RisultatoAzione.ok("Scadenza eliminata con successo")


@azione_server("Errore durante il completamento della scadenza")
def completa_scadenza(scadenza, user=None):
    scadenza.completa(user)

    _revalida(scadenza.evento_id)
    logger.info(f"Scadenza {scadenza.pk} completata da {user}")
    return RisultatoAzione.ok("Scadenza completata", data=scadenza)


@azione_server("Errore durante la riapertura della scadenza")
def riapri_scadenza(scadenza):
    scadenza.riapri()

    _revalida(scadenza.evento_id)
    return RisultatoAzione.ok("Scadenza riaperta", data=scadenza)


# ============================================================================
# AGGIORNAMENTI PERIODICI
# ============================================================================

def aggiorna_scadenze_scadute(adesso=None):
    """
    Porta a "overdue" le scadenze da fare o in corso con data passata.

    Returns:
        int: numero di scadenze aggiornate
    """
    adesso = adesso or timezone.now()
    scadute = Scadenza.objects.filter(stato__in=STATI_DA_VERIFICARE, data_scadenza__lt=adesso)
    eventi_ids = set(scadute.values_list('evento_id', flat=True))

    aggiornate = scadute.update(stato='overdue', updated_at=timezone.now())

    for evento_id in eventi_ids:
        _revalida(evento_id)
    logger.info(f"Scadenze passate a overdue: {aggiornate}")
    return aggiornate


def scadenze_urgenti(giorni=7, evento=None):
    """Scadenze aperte entro N giorni o già scadute, dalla più vicina."""
    limite = timezone.now() + timedelta(days=giorni)
    scadenze = (
        Scadenza.objects.filter(stato__in=Scadenza.STATI_APERTI, data_scadenza__lte=limite)
        .filter(evento__is_active=True)
        .select_related('evento', 'assegnata_a')
        .order_by('data_scadenza')
    )
    if evento is not None:
        scadenze = scadenze.filter(evento=evento)
    return scadenze


def scadenze_da_notificare(adesso=None):
    """
    Scadenze aperte non ancora notificate la cui data cade entro i
    giorni di promemoria.
    """
    adesso = adesso or timezone.now()
    candidate = Scadenza.objects.filter(
        stato__in=STATI_DA_VERIFICARE,
        notifica_inviata=False,
        data_scadenza__gte=adesso,
    ).select_related('evento', 'assegnata_a', 'created_by')
    return [s for s in candidate if s.data_promemoria <= adesso]


def _destinatario_promemoria(scadenza):
    utente = scadenza.assegnata_a or scadenza.evento.created_by or scadenza.created_by
    if utente is None or not utente.email:
        return None
    if not getattr(utente, 'notifiche_email', True) or not getattr(utente, 'notifiche_scadenze', True):
        return None
    return utente


def invia_promemoria_scadenze(adesso=None):
    """
    Invia i promemoria delle scadenze in arrivo e segna notifica_inviata.

    Returns:
        dict: {'inviati', 'saltati', 'errori'}
    """
    from comunicazioni.email_service import ServizioEmail

    servizio = ServizioEmail()
    esito = {'inviati': 0, 'saltati': 0, 'errori': 0}

    for scadenza in scadenze_da_notificare(adesso):
        utente = _destinatario_promemoria(scadenza)
        if utente is None:
            esito['saltati'] += 1
            continue

        corpo = (
            f"Gentile {utente.get_full_name() or utente.username},\n\n"
            f"la scadenza \"{scadenza.titolo}\" dell'evento {scadenza.evento.nome} "
            f"è fissata per il {timezone.localtime(scadenza.data_scadenza).strftime('%d/%m/%Y %H:%M')} "
            f"({scadenza.giorni_mancanti_display}).\n\n"
            f"Priorità: {scadenza.get_priorita_display()}"
        )
        risultato = servizio.invia(
            utente.email,
            f"Promemoria scadenza: {scadenza.titolo}",
            corpo_testo=corpo,
        )
        if risultato['success']:
            Scadenza.objects.filter(pk=scadenza.pk).update(notifica_inviata=True)
            esito['inviati'] += 1
        else:
            esito['errori'] += 1

    logger.info(f"Promemoria scadenze: {esito}")
    return esito


def conteggi_scadenze(evento=None):
    """Numero di scadenze per stato (per badge e dashboard)."""
    scadenze = Scadenza.objects.all() if evento is None else evento.scadenze.all()
    adesso = timezone.now()
    return {
        'totale': scadenze.count(),
        'aperte': scadenze.filter(stato__in=Scadenza.STATI_APERTI).count(),
        'scadute': scadenze.filter(
            Q(stato='overdue') | Q(stato__in=STATI_DA_VERIFICARE, data_scadenza__lt=adesso)
        ).count(),
        'completate': scadenze.filter(stato='completed').count(),
        'completate_in_ritardo': scadenze.filter(
            stato='completed', completata_il__gt=F('data_scadenza')
        ).count(),
    }
