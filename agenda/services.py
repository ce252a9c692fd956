"""
AGENDA SERVICES - Programma delle sessioni di un evento
=======================================================

Servizi per:
- CRUD sessioni con relatori dello stesso evento
- Avviso di sovrapposizione nella stessa sala (non bloccante)
- Timeline raggruppata per giorno ed export Excel
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.actions import RisultatoAzione, azione_server
from core.cache import percorsi_evento, revalida_percorso
from core.excel_generator import generate_excel_response

from .models import SessioneAgenda

logger = logging.getLogger(__name__)


def _applica(istanza, dati, user=None):
    for campo, valore in dati.items():
        setattr(istanza, campo, valore)
    if user is not None:
        if istanza._state.adding:
            istanza.created_by = user
        istanza.updated_by = user


def _revalida(evento_id):
    revalida_percorso(*percorsi_evento(evento_id, 'agenda'))


def _verifica_relatori(evento_id, relatori):
    estranei = [r for r in relatori if r.evento_id != evento_id]
    if estranei:
        nomi = ", ".join(str(r) for r in estranei)
        raise ValidationError({'relatori': f"Relatori non appartenenti all'evento: {nomi}"})


def _messaggio(testo, sessione):
    """Aggiunge al messaggio l'avviso delle sessioni sovrapposte."""
    sovrapposte = list(sessione.sovrapposizioni())
    if not sovrapposte:
        return testo
    titoli = ", ".join(s.titolo for s in sovrapposte)
    logger.warning(f"Sessione {sessione.pk} sovrapposta in sala {sessione.sala}: {titoli}")
    return f"{testo}. Attenzione: sovrapposizione in sala {sessione.sala} con {titoli}"


@azione_server("Errore durante la creazione della sessione")
def crea_sessione(evento, dati, user=None):
    dati = dict(dati)
    relatori = list(dati.pop('relatori', None) or [])
    _verifica_relatori(evento.pk, relatori)

    sessione = SessioneAgenda(evento=evento)
    _applica(sessione, dati, user)
    sessione.full_clean()

    with transaction.atomic():
        sessione.save()
        sessione.relatori.set(relatori)

    _revalida(evento.pk)
    return RisultatoAzione.ok(_messaggio("Sessione creata con successo", sessione), data=sessione)


@azione_server("Errore durante l'aggiornamento della sessione")
def aggiorna_sessione(sessione, dati, user=None):
    dati = dict(dati)
    relatori = dati.pop('relatori', None)
    if relatori is not None:
        relatori = list(relatori)
        _verifica_relatori(sessione.evento_id, relatori)

    _applica(sessione, dati, user)
    sessione.full_clean()

    with transaction.atomic():
        sessione.save()
        if relatori is not None:
            sessione.relatori.set(relatori)

    _revalida(sessione.evento_id)
    return RisultatoAzione.ok(_messaggio("Sessione aggiornata con successo", sessione), data=sessione)


@azione_server("Errore durante l'eliminazione della sessione")
def elimina_sessione(sessione):
    evento_id = sessione.evento_id
    sessione.delete()

    _revalida(evento_id)
    return RisultatoAzione.ok("Sessione eliminata con successo")


def timeline_agenda(evento, solo_pubbliche=False):
    """
    Sessioni dell'evento raggruppate per giorno.

    Returns:
        list di dict {'giorno', 'data', 'sessioni'} in ordine cronologico
    """
    sessioni = evento.sessioni.prefetch_related('relatori').order_by('inizio', 'sala')
    if solo_pubbliche:
        sessioni = sessioni.filter(pubblica=True)

    giorni = {}
    for sessione in sessioni:
        data = timezone.localtime(sessione.inizio).date()
        giorno = giorni.setdefault(data, {
            'giorno': (data - evento.data_inizio).days + 1,
            'data': data,
            'sessioni': [],
        })
        giorno['sessioni'].append(sessione)
    return list(giorni.values())


def esporta_agenda_excel(evento):
    righe = [
        {
            'Giorno': sessione.giorno,
            'Orario': sessione.orario,
            'Titolo': sessione.titolo,
            'Tipo': sessione.get_tipo_display(),
            'Sala': sessione.sala,
            'Relatori': ", ".join(f"{r.nome} {r.cognome}" for r in sessione.relatori.all()),
            'Durata (min)': sessione.durata,
            'Stato': sessione.get_stato_display(),
        }
        for sessione in evento.sessioni.select_related('evento').prefetch_related('relatori').order_by('inizio')
    ]
    return generate_excel_response(righe, filename=f"agenda_{evento.codice}", sheet_name="Agenda")
