"""
EVENTI SERVICES - Eventi, stato, duplicazione e dashboard
=========================================================

Servizi per:
- CRUD eventi (eliminazione logica con soft delete)
- Cambio stato dell'evento
- Duplicazione di un evento sull'anno successivo con relatori, sponsor,
  budget, agenda e scadenze
- Statistiche della dashboard e del dettaglio evento
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.actions import RisultatoAzione, azione_server
from core.cache import PERCORSO_FINANZE, dati_percorso, percorsi_evento, revalida_percorso

from .models import Evento

logger = logging.getLogger(__name__)

SUFFISSO_COPIA = " (Copia)"


def _applica(istanza, dati, user=None):
    for campo, valore in dati.items():
        setattr(istanza, campo, valore)
    if user is not None:
        if istanza._state.adding:
            istanza.created_by = user
        istanza.updated_by = user


def piu_un_anno(valore):
    """Stessa data (o data e ora) dell'anno successivo; il 29/02 diventa 28/02."""
    if valore is None:
        return None
    try:
        return valore.replace(year=valore.year + 1)
    except ValueError:
        return valore.replace(year=valore.year + 1, day=28)


# ============================================================================
# CRUD
# ============================================================================

@azione_server("Errore durante la creazione dell'evento")
def crea_evento(dati, user=None):
    evento = Evento()
    _applica(evento, dati, user)
    evento.full_clean(exclude=['codice'])
    evento.save()

    revalida_percorso(*percorsi_evento(evento.pk))
    logger.info(f"Creato evento {evento.codice} - {evento.nome}")
    return RisultatoAzione.ok("Evento creato con successo", data=evento)


@azione_server("Errore durante l'aggiornamento dell'evento")
def aggiorna_evento(evento, dati, user=None):
    _applica(evento, dati, user)
    evento.full_clean()
    evento.save()

    revalida_percorso(*percorsi_evento(evento.pk))
    return RisultatoAzione.ok("Evento aggiornato con successo", data=evento)


@azione_server("Errore durante l'eliminazione dell'evento")
def elimina_evento(evento, user=None):
    """Eliminazione logica: l'evento sparisce dalle liste ma resta nel database."""
    evento.soft_delete(user)

    revalida_percorso(*percorsi_evento(evento.pk), PERCORSO_FINANZE)
    logger.info(f"Eliminato evento {evento.codice}")
    return RisultatoAzione.ok("Evento eliminato con successo")


@azione_server("Errore durante il ripristino dell'evento")
def ripristina_evento(evento, user=None):
    evento.restore(user)

    revalida_percorso(*percorsi_evento(evento.pk), PERCORSO_FINANZE)
    return RisultatoAzione.ok("Evento ripristinato con successo", data=evento)


@azione_server("Errore durante l'aggiornamento dello status")
def aggiorna_stato_evento(evento, stato, user=None):
    if stato not in dict(Evento.STATO_CHOICES):
        raise ValidationError({'stato': "Stato non valido"})

    evento.stato = stato
    if user is not None:
        evento.updated_by = user
    evento.save(update_fields=['stato', 'updated_by', 'updated_at'])

    revalida_percorso(*percorsi_evento(evento.pk))
    return RisultatoAzione.ok("Status aggiornato con successo", data=evento)


# ============================================================================
# DUPLICAZIONE
# ============================================================================

def eventi_per_duplicazione(ricerca=None, anno=None):
    """Eventi selezionabili come origine della duplicazione."""
    eventi = Evento.objects.attivi().order_by('-data_inizio')
    if ricerca:
        eventi = eventi.filter(Q(nome__icontains=ricerca) | Q(luogo__icontains=ricerca))
    if anno:
        eventi = eventi.filter(data_inizio__year=anno)
    return eventi


def _copia(istanza, user=None, **modifiche):
    """Copia non salvata di un record con nuova chiave e campi modificati."""
    modello = istanza.__class__
    esclusi = {'id', 'created_at', 'updated_at', 'created_by', 'updated_by', 'deleted_at'}
    valori = {
        campo.attname: getattr(istanza, campo.attname)
        for campo in modello._meta.concrete_fields
        if campo.name not in esclusi
    }
    valori.update(modifiche)
    copia = modello(**valori)
    copia.created_by = user
    return copia


@azione_server("Errore durante la duplicazione dell'evento")
def duplica_evento(evento, user=None):
    """
    Crea "<nome> (Copia)" in bozza, un anno dopo l'originale.

    Copia relatori (invitati), sponsor (da contattare, non pagati), categorie
    e voci di budget (pianificate, senza costi effettivi), sessioni di agenda
    e scadenze. Partecipanti, staff e comunicazioni non vengono copiati.
    """

    with transaction.atomic():
        nuovo = Evento(
            nome=f"{evento.nome}{SUFFISSO_COPIA}",
            tipo=evento.tipo,
            descrizione=evento.descrizione,
            luogo=evento.luogo,
            data_inizio=piu_un_anno(evento.data_inizio),
            data_fine=piu_un_anno(evento.data_fine),
            capienza=evento.capienza,
            budget=evento.budget,
            stato='draft',
            created_by=user,
        )
        nuovo.save()

        relatori = {}
        for relatore in evento.relatori.all():
            copia = _copia(
                relatore,
                user,
                evento_id=nuovo.pk,
                stato='invited',
                data_intervento=piu_un_anno(relatore.data_intervento),
            )
            copia.save()
            relatori[relatore.email.lower()] = copia

        voci = {}
        for categoria in evento.categorie_budget.all():
            nuova_categoria = _copia(categoria, user, evento_id=nuovo.pk, importo_speso=Decimal('0.00'))
            nuova_categoria.save()
            for voce in categoria.voci.all():
                nuova_voce = _copia(
                    voce,
                    user,
                    categoria_id=nuova_categoria.pk,
                    evento_id=nuovo.pk,
                    costo_effettivo=None,
                    stato='planned',
                    data_pagamento=None,
                    data_scadenza=piu_un_anno(voce.data_scadenza),
                    numero_fattura='',
                    url_fattura='',
                )
                nuova_voce.save()
                voci[voce.pk] = nuova_voce

        for sponsor in evento.sponsor.all():
            _copia(
                sponsor,
                user,
                evento_id=nuovo.pk,
                stato='prospect',
                stato_pagamento='pending',
                contratto_firmato=False,
                data_contratto=None,
                data_pagamento=None,
                voce_budget_id=voci[sponsor.voce_budget_id].pk if sponsor.voce_budget_id in voci else None,
            ).save()

        for sessione in evento.sessioni.prefetch_related('relatori'):
            nuova_sessione = _copia(
                sessione,
                user,
                evento_id=nuovo.pk,
                inizio=piu_un_anno(sessione.inizio),
                fine=piu_un_anno(sessione.fine),
                stato='scheduled',
            )
            nuova_sessione.save()
            nuova_sessione.relatori.set(
                relatori[r.email.lower()] for r in sessione.relatori.all() if r.email.lower() in relatori
            )

        for scadenza in evento.scadenze.all():
            _copia(
                scadenza,
                user,
                evento_id=nuovo.pk,
                data_scadenza=piu_un_anno(scadenza.data_scadenza),
                stato='pending',
                completata_il=None,
                completata_da_id=None,
                notifica_inviata=False,
            ).save()

    revalida_percorso(*percorsi_evento(nuovo.pk), PERCORSO_FINANZE)
    logger.info(
        f"Duplicato evento {evento.codice} in {nuovo.codice}: "
        f"{len(relatori)} relatori, {len(voci)} voci budget"
    )
    return RisultatoAzione.ok("Evento duplicato con successo", data=nuovo)


# ============================================================================
# STATISTICHE
# ============================================================================

def _calcola_dashboard():
    from persone.models import Partecipante

    eventi = Evento.objects.attivi()
    oggi = timezone.localdate()

    per_stato = dict(eventi.order_by().values_list('stato').annotate(totale=Count('id')))
    totali = eventi.exclude(stato='cancelled').aggregate(budget=Sum('budget'), speso=Sum('speso'))
    budget_totale = totali['budget'] or Decimal('0.00')
    speso_totale = totali['speso'] or Decimal('0.00')

    return {
        'totale_eventi': eventi.count(),
        'eventi_per_stato': {codice: per_stato.get(codice, 0) for codice, _ in Evento.STATO_CHOICES},
        'eventi_prossimi': eventi.filter(
            data_inizio__gte=oggi, stato__in=['upcoming', 'draft']
        ).count(),
        'eventi_in_corso': eventi.filter(data_inizio__lte=oggi, data_fine__gte=oggi).exclude(
            stato='cancelled'
        ).count(),
        'totale_partecipanti': Partecipante.objects.filter(evento__is_active=True)
        .exclude(stato='cancelled')
        .count(),
        'budget_totale': budget_totale,
        'speso_totale': speso_totale,
        'percentuale_speso': int(round(speso_totale / budget_totale * 100)) if budget_totale else 0,
    }


def statistiche_dashboard():
    """Riepilogo della dashboard (in cache sul percorso "/")."""
    return dati_percorso("/", _calcola_dashboard)


def prossimi_eventi(limite=5):
    return (
        Evento.objects.attivi()
        .filter(data_fine__gte=timezone.localdate())
        .exclude(stato__in=['cancelled', 'completed'])
        .order_by('data_inizio')[:limite]
    )


def eventi_recenti(limite=5):
    return Evento.objects.attivi().order_by('-created_at')[:limite]


def statistiche_evento(evento):
    """Contatori per le schede del dettaglio evento (in cache)."""

    def calcolo():
        return {
            'partecipanti': evento.partecipanti.count(),
            'iscritti': evento.iscritti,
            'checked_in': evento.partecipanti.filter(checked_in=True).count(),
            'relatori': evento.relatori.count(),
            'relatori_confermati': evento.relatori.filter(stato='confirmed').count(),
            'sponsor': evento.sponsor.count(),
            'importo_sponsor': evento.sponsor.exclude(stato='cancelled').aggregate(
                totale=Sum('importo')
            )['totale'] or Decimal('0.00'),
            'staff': evento.assegnazioni_staff.values('staff').distinct().count(),
            'sessioni': evento.sessioni.count(),
            'scadenze_aperte': evento.scadenze.filter(stato__in=['pending', 'in_progress', 'overdue']).count(),
            'comunicazioni': evento.comunicazioni.count(),
        }

    return dati_percorso(f"/eventi/{evento.pk}", calcolo)


def eventi_del_periodo(inizio: date, giorni: int = 30):
    """Eventi che si sovrappongono alla finestra [inizio, inizio + giorni]."""
    fine = inizio + timedelta(days=giorni)
    return Evento.objects.attivi().filter(data_inizio__lte=fine, data_fine__gte=inizio).order_by('data_inizio')
