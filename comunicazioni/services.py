"""
COMUNICAZIONI SERVICES - Email ai destinatari di un evento
==========================================================

Servizi per:
- Destinatari per tipo (partecipanti, confermati, relatori, sponsor, staff,
  indirizzi personalizzati)
- Sostituzione delle variabili {{chiave}} in oggetto e corpo
- Invio immediato (task Celery) o programmato delle comunicazioni
- Invio periodico delle comunicazioni programmate
- CRUD dei template email
"""

import logging
from datetime import date

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.actions import RisultatoAzione, azione_server
from core.cache import percorsi_evento, revalida_percorso
from core.utils import formatta_data

from .email_service import ServizioEmail, html_da_testo
from .models import VARIABILE_RE, Comunicazione, TemplateEmail

logger = logging.getLogger(__name__)


def _applica(istanza, dati, user=None):
    for campo, valore in dati.items():
        setattr(istanza, campo, valore)
    if user is not None:
        if istanza._state.adding:
            istanza.created_by = user
        istanza.updated_by = user


def _revalida(evento_id):
    revalida_percorso(*percorsi_evento(evento_id, 'comunicazioni'))


# ============================================================================
# VARIABILI E DESTINATARI
# ============================================================================

def sostituisci_variabili(testo, variabili):
    """
    Sostituisce le variabili {{chiave}} con i valori forniti.

    Le date sono formattate gg/mm/aaaa; le variabili sconosciute restano
    invariate.
    """

    def valore(match):
        chiave = match.group(1)
        if chiave not in variabili:
            return match.group(0)
        dato = variabili[chiave]
        if isinstance(dato, date):
            return formatta_data(dato)
        return "" if dato is None else str(dato)

    return VARIABILE_RE.sub(valore, testo or "")


def variabili_evento(evento):
    return {
        'evento': evento.nome,
        'data_evento': evento.data_inizio,
        'data_fine_evento': evento.data_fine,
        'luogo_evento': evento.luogo,
    }


def _destinatario(email, nome='', cognome='', azienda=''):
    return {'email': email, 'nome': nome, 'cognome': cognome, 'azienda': azienda or ''}


def _dividi_referente(referente):
    parti = (referente or '').split()
    return (parti[0] if parti else 'Gentile'), (" ".join(parti[1:]) or 'Cliente')


def destinatari_per_tipo(evento, tipo, email_personalizzate=None):
    """
    Destinatari di una comunicazione con i dati per la personalizzazione.

    Returns:
        list di dict {'email', 'nome', 'cognome', 'azienda'}, senza email
        ripetute
    """
    if tipo in ('all_participants', 'confirmed_only'):
        partecipanti = evento.partecipanti.order_by('cognome', 'nome')
        if tipo == 'confirmed_only':
            partecipanti = partecipanti.filter(stato='confirmed')
        destinatari = [_destinatario(p.email, p.nome, p.cognome, p.azienda) for p in partecipanti]

    elif tipo == 'speakers':
        destinatari = [
            _destinatario(r.email, r.nome, r.cognome, r.azienda)
            for r in evento.relatori.order_by('cognome', 'nome')
        ]

    elif tipo == 'sponsors':
        destinatari = []
        for sponsor in evento.sponsor.exclude(email='').order_by('nome'):
            nome, cognome = _dividi_referente(sponsor.referente)
            destinatari.append(_destinatario(sponsor.email, nome, cognome, sponsor.nome))

    elif tipo == 'staff':
        from staff.models import MembroStaff

        membri = MembroStaff.objects.filter(assegnazioni__evento=evento).distinct().order_by('cognome', 'nome')
        destinatari = [_destinatario(m.email, m.nome, m.cognome) for m in membri]

    elif tipo == 'custom':
        destinatari = [_destinatario(email) for email in email_personalizzate or []]

    else:
        raise ValidationError({'destinatari': "Tipo destinatario non valido"})

    unici = {}
    for destinatario in destinatari:
        unici.setdefault(destinatario['email'].lower(), destinatario)
    return list(unici.values())


def valida_email_personalizzate(indirizzi):
    """Solleva ValidationError con gli indirizzi non validi."""
    non_validi = []
    for indirizzo in indirizzi:
        try:
            validate_email(indirizzo)
        except ValidationError:
            non_validi.append(indirizzo)
    if non_validi:
        raise ValidationError({'email_personalizzate': f"Email non valide: {', '.join(non_validi)}"})


# ============================================================================
# INVIO
# ============================================================================

@azione_server("Errore durante l'invio della comunicazione")
def invia_comunicazione(comunicazione, user=None):
    """
    Invia la comunicazione a ogni destinatario con oggetto e corpo
    personalizzati. Lo stato finale è sent se almeno un invio riesce,
    failed altrimenti.
    """
    if comunicazione.stato in ('sent', 'cancelled'):
        return RisultatoAzione.errore(
            f"Comunicazione non inviabile nello stato {comunicazione.get_stato_display()}"
        )

    evento = comunicazione.evento
    destinatari = destinatari_per_tipo(
        evento, comunicazione.destinatari, comunicazione.lista_email_personalizzate
    )
    if not destinatari:
        comunicazione.stato = 'failed'
        comunicazione.errori_invio = "Nessun destinatario trovato"
        comunicazione.save(update_fields=['stato', 'errori_invio', 'updated_at'])
        _revalida(evento.pk)
        return RisultatoAzione.errore("Nessun destinatario trovato")

    comunicazione.stato = 'sending'
    comunicazione.save(update_fields=['stato', 'updated_at'])

    servizio = ServizioEmail(user)
    base = variabili_evento(evento)
    inviate = 0
    errori = []

    for destinatario in destinatari:
        variabili = {**base, **destinatario}
        risultato = servizio.invia(
            destinatario['email'],
            sostituisci_variabili(comunicazione.oggetto, variabili),
            corpo_html=html_da_testo(sostituisci_variabili(comunicazione.corpo, variabili)),
        )
        if risultato['success']:
            inviate += 1
        else:
            errori.append(f"{destinatario['email']}: {risultato['error']}")

    comunicazione.numero_destinatari = len(destinatari)
    comunicazione.invii_falliti = len(errori)
    comunicazione.errori_invio = "\n".join(errori)
    comunicazione.stato = 'sent' if inviate else 'failed'
    if inviate:
        comunicazione.inviata_il = timezone.now()
    comunicazione.save()

    if inviate and comunicazione.template_id:
        comunicazione.template.registra_utilizzo()

    _revalida(evento.pk)
    logger.info(
        f"Comunicazione {comunicazione.pk} ({evento.codice}): {inviate}/{len(destinatari)} email inviate"
    )

    if not inviate:
        return RisultatoAzione.errore(f"Invio fallito. Errore: {errori[-1]}")

    parziale = f" (Inviate: {inviate}/{len(destinatari)})" if errori else ""
    return RisultatoAzione.ok(f"Email inviata con successo{parziale}", data=comunicazione)


def _accoda_invio(comunicazione):
    from .tasks import invia_comunicazione_task

    transaction.on_commit(lambda: invia_comunicazione_task.delay(str(comunicazione.pk)))


@azione_server("Errore durante l'invio dell'email")
def invia_email(evento, dati, user=None):
    """
    Registra una comunicazione email. Con programmata_il nel futuro resta
    programmata, altrimenti l'invio parte subito in un task Celery.
    """
    comunicazione = Comunicazione(evento=evento, tipo='email')
    _applica(comunicazione, dati, user)

    if comunicazione.destinatari == 'custom':
        indirizzi = comunicazione.lista_email_personalizzate
        if not indirizzi:
            raise ValidationError({'email_personalizzate': "Inserisci almeno un indirizzo email"})
        valida_email_personalizzate(indirizzi)

    comunicazione.numero_destinatari = len(
        destinatari_per_tipo(evento, comunicazione.destinatari, comunicazione.lista_email_personalizzate)
    )
    if comunicazione.numero_destinatari == 0:
        raise ValidationError({'destinatari': "Nessun destinatario trovato"})

    programmata = comunicazione.programmata_il and comunicazione.programmata_il > timezone.now()
    comunicazione.stato = 'scheduled' if programmata else 'sending'
    comunicazione.full_clean()

    with transaction.atomic():
        comunicazione.save()
        if not programmata:
            _accoda_invio(comunicazione)

    _revalida(evento.pk)
    if programmata:
        return RisultatoAzione.ok(
            f"Comunicazione programmata per il {formatta_data(comunicazione.programmata_il, con_ora=True)}",
            data=comunicazione,
        )
    return RisultatoAzione.ok(
        f"Invio avviato a {comunicazione.numero_destinatari} destinatari", data=comunicazione
    )


def invia_comunicazioni_programmate(adesso=None):
    """
    Invia le comunicazioni programmate con data raggiunta.

    Ogni comunicazione passa da scheduled a sending con un update
    condizionato prima dell'invio: se un'altra esecuzione l'ha già presa,
    viene saltata.

    Returns:
        dict: {'inviate', 'fallite'}
    """
    adesso = adesso or timezone.now()
    esito = {'inviate': 0, 'fallite': 0}

    dovute = list(
        Comunicazione.objects.filter(stato='scheduled', programmata_il__lte=adesso).values_list('pk', flat=True)
    )
    for pk in dovute:
        presa = Comunicazione.objects.filter(pk=pk, stato='scheduled').update(
            stato='sending', updated_at=timezone.now()
        )
        if not presa:
            logger.info(f"Comunicazione {pk} già presa in carico da un altro invio")
            continue

        comunicazione = Comunicazione.objects.select_related('evento', 'template').get(pk=pk)
        risultato = invia_comunicazione(comunicazione)
        esito['inviate' if risultato.success else 'fallite'] += 1

    logger.info(f"Comunicazioni programmate: {esito}")
    return esito


@azione_server("Errore durante l'annullamento della comunicazione")
def annulla_comunicazione(comunicazione, user=None):
    if comunicazione.stato not in ('draft', 'scheduled'):
        return RisultatoAzione.errore("Solo le comunicazioni in bozza o programmate possono essere annullate")

    comunicazione.stato = 'cancelled'
    comunicazione.updated_by = user
    comunicazione.save(update_fields=['stato', 'updated_by', 'updated_at'])

    _revalida(comunicazione.evento_id)
    return RisultatoAzione.ok("Comunicazione annullata", data=comunicazione)


@azione_server("Errore durante l'eliminazione della comunicazione")
def elimina_comunicazione(comunicazione):
    if not comunicazione.is_eliminabile:
        return RisultatoAzione.errore("Impossibile eliminare una comunicazione in fase di invio")

    evento_id = comunicazione.evento_id
    comunicazione.delete()

    _revalida(evento_id)
    return RisultatoAzione.ok("Comunicazione eliminata con successo")


def statistiche_comunicazioni(evento):
    comunicazioni = evento.comunicazioni.all()
    per_stato = dict(comunicazioni.order_by().values_list('stato').annotate(totale=Count('id')))
    totali = comunicazioni.filter(stato='sent').aggregate(
        destinatari=Sum('numero_destinatari'), falliti=Sum('invii_falliti')
    )
    destinatari = totali['destinatari'] or 0
    falliti = totali['falliti'] or 0
    return {
        'totale': comunicazioni.count(),
        'per_stato': {codice: per_stato.get(codice, 0) for codice, _ in Comunicazione.STATO_CHOICES},
        'email_inviate': destinatari - falliti,
        'invii_falliti': falliti,
    }


# ============================================================================
# TEMPLATE EMAIL
# ============================================================================

def template_disponibili(evento=None):
    """Template globali più quelli dell'evento."""
    filtro = Q(evento__isnull=True)
    if evento is not None:
        filtro |= Q(evento=evento)
    return TemplateEmail.objects.filter(filtro)


@azione_server("Errore durante il salvataggio del template")
def crea_template(dati, user=None):
    template = TemplateEmail()
    _applica(template, dati, user)
    template.full_clean()
    template.save()

    revalida_percorso("/eventi")
    return RisultatoAzione.ok("Template creato con successo", data=template)


@azione_server("Errore durante il salvataggio del template")
def aggiorna_template(template, dati, user=None):
    _applica(template, dati, user)
    template.full_clean()
    template.save()

    revalida_percorso("/eventi")
    return RisultatoAzione.ok("Template aggiornato con successo", data=template)


@azione_server("Errore durante l'eliminazione del template")
def elimina_template(template):
    utilizzi = template.comunicazioni.count()
    if utilizzi:
        return RisultatoAzione.errore(
            f"Impossibile eliminare: template utilizzato in {utilizzi} comunicazioni"
        )

    template.delete()
    revalida_percorso("/eventi")
    return RisultatoAzione.ok("Template eliminato con successo")


def anteprima(oggetto, corpo, evento):
    """Oggetto e corpo con variabili di esempio per l'anteprima."""
    variabili = {
        **variabili_evento(evento),
        **_destinatario('mario.rossi@example.com', 'Mario', 'Rossi', 'Azienda Esempio'),
    }
    return {
        'oggetto': sostituisci_variabili(oggetto, variabili),
        'corpo': sostituisci_variabili(corpo, variabili),
    }
