"""
Email Service - EventHub

Invio email tramite il backend configurato nei settings Django.
"""

import logging
import re

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = logging.getLogger(__name__)


def testo_da_html(html):
    """Versione testuale di un contenuto HTML (tag rimossi, spazi compattati)."""
    testo = re.sub(r'<br\s*/?>|</p>', '\n', html or '')
    testo = re.sub(r'<[^>]+>', '', testo)
    testo = re.sub(r'[ \t]+', ' ', testo)
    return re.sub(r'\n\s*\n+', '\n\n', testo).strip()


def html_da_testo(testo):
    """Corpo HTML minimale da testo semplice (a capo -> <br>)."""
    return (testo or '').replace('\n', '<br>')


class ServizioEmail:
    """
    Servizio per l'invio di email con alternativa HTML.

    Usato dalle comunicazioni agli iscritti e dai promemoria delle scadenze.
    """

    def __init__(self, user=None):
        """
        Args:
            user: utente che invia (solo per il log)
        """
        self.user = user
        self.from_email = getattr(settings, 'DEFAULT_FROM_EMAIL', 'noreply@eventhub.local')

    def invia(self, to, oggetto, corpo_html=None, corpo_testo=None, reply_to=None, attachments=None):
        """
        Invia un'email.

        Args:
            to: destinatario (stringa o lista)
            oggetto: oggetto dell'email
            corpo_html: contenuto HTML
            corpo_testo: contenuto testuale (generato dall'HTML se mancante)
            reply_to: indirizzo per le risposte
            attachments: lista [(filename, content, mimetype), ...]

        Returns:
            dict: {'success': True} oppure {'success': False, 'error': messaggio}
        """
        if not corpo_html and not corpo_testo:
            return {'success': False, 'error': 'Contenuto email mancante'}

        destinatari = [to] if isinstance(to, str) else list(to)
        if not destinatari:
            return {'success': False, 'error': 'Nessun destinatario'}

        if not corpo_testo:
            corpo_testo = testo_da_html(corpo_html)

        try:
            email = EmailMultiAlternatives(
                subject=oggetto,
                body=corpo_testo,
                from_email=self.from_email,
                to=destinatari,
                reply_to=[reply_to] if reply_to else [],
            )
            if corpo_html:
                email.attach_alternative(corpo_html, "text/html")

            for allegato in attachments or []:
                email.attach(*allegato)

            email.send(fail_silently=False)
        except Exception as e:
            logger.error(f"Errore invio email a {', '.join(destinatari)}: {e}")
            return {'success': False, 'error': str(e)}

        logger.info(f"Email inviata a {', '.join(destinatari)} - Oggetto: {oggetto}")
        return {'success': True}
