"""
Tests per app comunicazioni.
"""

from datetime import date, timedelta
from unittest.mock import patch

from django.core import mail
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from core.testing import crea_evento, crea_utente
from persone.models import Partecipante, Relatore, Sponsor
from staff.models import AssegnazioneStaff, MembroStaff

from . import services
from .email_service import testo_da_html
from .models import Comunicazione, TemplateEmail


class ComunicazioniTestMixin:

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento(nome='Summit Digitale', data_inizio=date(2026, 12, 5), data_fine=date(2026, 12, 6))
        Partecipante.objects.create(
            evento=self.evento, nome='Mario', cognome='Rossi', email='mario@example.com', stato='confirmed'
        )
        Partecipante.objects.create(
            evento=self.evento, nome='Lucia', cognome='Neri', email='lucia@example.com', azienda='Neri Srl'
        )

    def crea_comunicazione(self, **kwargs):
        dati = {
            'oggetto': 'Benvenuto {{nome}}',
            'corpo': 'Ciao {{nome}} {{cognome}}, ci vediamo a {{evento}} il {{data_evento}}.',
            'destinatari': 'all_participants',
            'stato': 'draft',
        }
        dati.update(kwargs)
        return Comunicazione.objects.create(evento=self.evento, **dati)


class VariabiliTestCase(ComunicazioniTestMixin, TestCase):

    def test_sostituisci_variabili(self):
        testo = services.sostituisci_variabili(
            "{{nome}} - {{ data }} - {{ignota}}",
            {'nome': 'Anna', 'data': date(2026, 3, 7)},
        )
        self.assertEqual(testo, "Anna - 07/03/2026 - {{ignota}}")

    def test_variabili_template(self):
        template = TemplateEmail(oggetto='Ciao {{nome}}', corpo='{{evento}} {{nome}} {{luogo_evento}}')
        self.assertEqual(template.variabili, ['nome', 'evento', 'luogo_evento'])

    def test_testo_da_html(self):
        self.assertEqual(testo_da_html('<p>Ciao</p><p>a <b>tutti</b></p>'), 'Ciao\na tutti')


class DestinatariTestCase(ComunicazioniTestMixin, TestCase):

    def test_tutti_e_confermati(self):
        tutti = services.destinatari_per_tipo(self.evento, 'all_participants')
        confermati = services.destinatari_per_tipo(self.evento, 'confirmed_only')

        self.assertEqual({d['email'] for d in tutti}, {'mario@example.com', 'lucia@example.com'})
        self.assertEqual([d['email'] for d in confermati], ['mario@example.com'])

    def test_relatori(self):
        Relatore.objects.create(evento=self.evento, nome='Anna', cognome='Verdi', email='anna@example.com')

        destinatari = services.destinatari_per_tipo(self.evento, 'speakers')

        self.assertEqual(destinatari[0]['nome'], 'Anna')

    def test_sponsor_referente(self):
        Sponsor.objects.create(evento=self.evento, nome='Acme', email='info@acme.it', referente='Carla De Santis')
        Sponsor.objects.create(evento=self.evento, nome='Beta', email='info@beta.it')
        Sponsor.objects.create(evento=self.evento, nome='Senza email')

        destinatari = {d['email']: d for d in services.destinatari_per_tipo(self.evento, 'sponsors')}

        self.assertEqual(len(destinatari), 2)
        self.assertEqual(destinatari['info@acme.it']['nome'], 'Carla')
        self.assertEqual(destinatari['info@acme.it']['cognome'], 'De Santis')
        self.assertEqual(destinatari['info@beta.it']['nome'], 'Gentile')
        self.assertEqual(destinatari['info@beta.it']['cognome'], 'Cliente')
        self.assertEqual(destinatari['info@acme.it']['azienda'], 'Acme')

    def test_staff_assegnato(self):
        membro = MembroStaff.objects.create(nome='Gino', cognome='Blu', email='gino@example.com')
        MembroStaff.objects.create(nome='Non', cognome='Assegnato', email='altro@example.com')
        inizio = timezone.now() + timedelta(days=30)
        for ore in (0, 24):
            AssegnazioneStaff.objects.create(
                evento=self.evento,
                staff=membro,
                inizio=inizio + timedelta(hours=ore),
                fine=inizio + timedelta(hours=ore + 8),
            )

        destinatari = services.destinatari_per_tipo(self.evento, 'staff')

        self.assertEqual([d['email'] for d in destinatari], ['gino@example.com'])

    def test_personalizzati_senza_duplicati(self):
        destinatari = services.destinatari_per_tipo(
            self.evento, 'custom', ['a@example.com', 'A@example.com', 'b@example.com']
        )
        self.assertEqual(len(destinatari), 2)


class InvioTestCase(ComunicazioniTestMixin, TestCase):

    def test_invio_personalizzato(self):
        template = TemplateEmail.objects.create(nome='Benvenuto', oggetto='x', corpo='y')
        comunicazione = self.crea_comunicazione(template=template)

        risultato = services.invia_comunicazione(comunicazione)

        self.assertTrue(risultato.success)
        self.assertEqual(len(mail.outbox), 2)
        messaggio = next(m for m in mail.outbox if m.to == ['mario@example.com'])
        self.assertEqual(messaggio.subject, 'Benvenuto Mario')
        self.assertIn('Ciao Mario Rossi, ci vediamo a Summit Digitale il 05/12/2026.', messaggio.body)

        comunicazione.refresh_from_db()
        self.assertEqual(comunicazione.stato, 'sent')
        self.assertEqual(comunicazione.numero_destinatari, 2)
        self.assertIsNotNone(comunicazione.inviata_il)
        template.refresh_from_db()
        self.assertEqual(template.utilizzi, 1)

    def test_nessun_destinatario(self):
        comunicazione = self.crea_comunicazione(destinatari='speakers')

        risultato = services.invia_comunicazione(comunicazione)

        self.assertFalse(risultato.success)
        comunicazione.refresh_from_db()
        self.assertEqual(comunicazione.stato, 'failed')

    def test_invio_fallito(self):
        comunicazione = self.crea_comunicazione()

        with patch(
            'comunicazioni.services.ServizioEmail.invia',
            return_value={'success': False, 'error': 'SMTP non raggiungibile'},
        ):
            risultato = services.invia_comunicazione(comunicazione)

        self.assertFalse(risultato.success)
        self.assertIn('SMTP non raggiungibile', risultato.message)
        comunicazione.refresh_from_db()
        self.assertEqual(comunicazione.stato, 'failed')
        self.assertEqual(comunicazione.invii_falliti, 2)

    def test_invio_parziale(self):
        comunicazione = self.crea_comunicazione()
        esiti = [{'success': True}, {'success': False, 'error': 'casella piena'}]

        with patch('comunicazioni.services.ServizioEmail.invia', side_effect=esiti):
            risultato = services.invia_comunicazione(comunicazione)

        self.assertTrue(risultato.success)
        self.assertIn('(Inviate: 1/2)', risultato.message)

    def test_invia_email_immediata(self):
        with self.captureOnCommitCallbacks(execute=True):
            risultato = services.invia_email(
                self.evento,
                {'oggetto': 'Aggiornamento', 'corpo': 'Il programma è online.', 'destinatari': 'confirmed_only'},
                self.user,
            )

        self.assertTrue(risultato.success)
        self.assertEqual(len(mail.outbox), 1)
        comunicazione = Comunicazione.objects.get()
        self.assertEqual(comunicazione.stato, 'sent')
        self.assertEqual(comunicazione.created_by, self.user)

    def test_invia_email_programmata(self):
        risultato = services.invia_email(
            self.evento,
            {
                'oggetto': 'Promemoria',
                'corpo': 'Manca una settimana.',
                'destinatari': 'all_participants',
                'programmata_il': timezone.now() + timedelta(days=1),
            },
        )

        self.assertTrue(risultato.success)
        self.assertEqual(risultato.data.stato, 'scheduled')
        self.assertEqual(len(mail.outbox), 0)

    def test_email_personalizzate_non_valide(self):
        risultato = services.invia_email(
            self.evento,
            {
                'oggetto': 'Invito',
                'corpo': 'Sei invitato al summit.',
                'destinatari': 'custom',
                'email_personalizzate': 'ok@example.com\nnon-valida',
            },
        )

        self.assertFalse(risultato.success)
        self.assertIn('email_personalizzate', risultato.errors)

    def test_programmate(self):
        dovuta = self.crea_comunicazione(stato='scheduled', programmata_il=timezone.now() - timedelta(minutes=1))
        futura = self.crea_comunicazione(stato='scheduled', programmata_il=timezone.now() + timedelta(hours=2))

        esito = services.invia_comunicazioni_programmate()

        self.assertEqual(esito, {'inviate': 1, 'fallite': 0})
        dovuta.refresh_from_db()
        futura.refresh_from_db()
        self.assertEqual(dovuta.stato, 'sent')
        self.assertEqual(futura.stato, 'scheduled')

    def test_task_programmate(self):
        from .tasks import invia_comunicazioni_programmate_task

        self.crea_comunicazione(stato='scheduled', programmata_il=timezone.now() - timedelta(minutes=1))

        self.assertEqual(invia_comunicazioni_programmate_task(), {'inviate': 1, 'fallite': 0})

    def test_programmate_inviate_una_volta(self):
        self.crea_comunicazione(stato='scheduled', programmata_il=timezone.now() - timedelta(minutes=1))

        primo = services.invia_comunicazioni_programmate()
        secondo = services.invia_comunicazioni_programmate()

        self.assertEqual(primo, {'inviate': 1, 'fallite': 0})
        self.assertEqual(secondo, {'inviate': 0, 'fallite': 0})
        self.assertEqual(len(mail.outbox), 2)

    def test_programmate_esecuzioni_sovrapposte(self):
        prima = self.crea_comunicazione(stato='scheduled', programmata_il=timezone.now() - timedelta(minutes=2))
        seconda = self.crea_comunicazione(stato='scheduled', programmata_il=timezone.now() - timedelta(minutes=1))
        invia = services.invia_comunicazione
        esiti_concorrenti = []

        def invia_durante_altra_esecuzione(comunicazione):
            # un secondo worker parte mentre il primo sta ancora inviando
            if not esiti_concorrenti:
                esiti_concorrenti.append(None)
                esiti_concorrenti.append(services.invia_comunicazioni_programmate())
            return invia(comunicazione)

        with patch('comunicazioni.services.invia_comunicazione', side_effect=invia_durante_altra_esecuzione):
            esito = services.invia_comunicazioni_programmate()

        self.assertEqual(esito, {'inviate': 1, 'fallite': 0})
        self.assertEqual(esiti_concorrenti[1], {'inviate': 1, 'fallite': 0})
        self.assertEqual(len(mail.outbox), 4)
        self.assertEqual(sorted(m.to[0] for m in mail.outbox), ['lucia@example.com', 'lucia@example.com',
                                                             'mario@example.com', 'mario@example.com'])
        prima.refresh_from_db()
        seconda.refresh_from_db()
        self.assertEqual((prima.stato, seconda.stato), ('sent', 'sent'))

    def test_elimina_in_invio_rifiutata(self):
        comunicazione = self.crea_comunicazione(stato='sending')

        risultato = services.elimina_comunicazione(comunicazione)

        self.assertFalse(risultato.success)
        self.assertTrue(Comunicazione.objects.filter(pk=comunicazione.pk).exists())

    def test_annulla(self):
        comunicazione = self.crea_comunicazione(stato='scheduled', programmata_il=timezone.now() + timedelta(days=1))

        self.assertTrue(services.annulla_comunicazione(comunicazione).success)
        self.assertFalse(services.invia_comunicazione(comunicazione).success)


class TemplateTestCase(TestCase):

    def test_elimina_template_in_uso(self):
        evento = crea_evento()
        template = TemplateEmail.objects.create(nome='Promemoria', oggetto='Promemoria', corpo='Ci vediamo presto')
        Comunicazione.objects.create(evento=evento, oggetto='x', corpo='y', template=template)

        risultato = services.elimina_template(template)

        self.assertFalse(risultato.success)
        self.assertIn('1 comunicazioni', risultato.message)

    def test_template_disponibili(self):
        evento = crea_evento()
        altro = crea_evento(nome='Altro evento')
        TemplateEmail.objects.create(nome='Globale', oggetto='a', corpo='b')
        TemplateEmail.objects.create(nome='Locale', oggetto='a', corpo='b', evento=evento)
        TemplateEmail.objects.create(nome='Altrui', oggetto='a', corpo='b', evento=altro)

        nomi = set(services.template_disponibili(evento).values_list('nome', flat=True))

        self.assertEqual(nomi, {'Globale', 'Locale'})


class ComunicazioniViewsTestCase(ComunicazioniTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client.force_login(self.user)

    def test_componi_e_invia(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                reverse('comunicazioni:comunicazione_create', kwargs={'evento_pk': self.evento.pk}),
                {
                    'destinatari': 'all_participants',
                    'oggetto': 'Benvenuti',
                    'corpo': 'Benvenuti al {{evento}}!',
                },
            )

        url = reverse('eventi:evento_tab', kwargs={'pk': self.evento.pk, 'tab': 'comunicazioni'})
        self.assertRedirects(response, url, fetch_redirect_response=False)
        self.assertEqual(len(mail.outbox), 2)

    def test_corpo_troppo_corto(self):
        response = self.client.post(
            reverse('comunicazioni:comunicazione_create', kwargs={'evento_pk': self.evento.pk}),
            {'destinatari': 'all_participants', 'oggetto': 'Ciao', 'corpo': 'breve'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('corpo', response.json()['errors'])

    def test_anteprima(self):
        response = self.client.post(
            reverse('comunicazioni:anteprima', kwargs={'evento_pk': self.evento.pk}),
            {'oggetto': 'Ciao {{nome}}', 'corpo': '{{evento}}'},
        )

        self.assertEqual(response.json(), {'oggetto': 'Ciao Mario', 'corpo': 'Summit Digitale'})

    def test_dettaglio(self):
        comunicazione = self.crea_comunicazione()
        response = self.client.get(comunicazione.get_absolute_url())
        self.assertEqual(response.status_code, 200)

    def test_lista_template(self):
        TemplateEmail.objects.create(nome='Benvenuto', oggetto='a', corpo='b', categoria='welcome')
        response = self.client.get(reverse('comunicazioni:template_list'), {'categoria': 'welcome'})
        self.assertEqual(len(response.context['templates']), 1)

    def test_ricerca_template(self):
        TemplateEmail.objects.create(nome='Benvenuto', oggetto='Benvenuti', corpo='b', categoria='welcome')
        TemplateEmail.objects.create(nome='Promemoria', oggetto='Manca poco', corpo='b', categoria='reminder')

        response = self.client.get(reverse('comunicazioni:template_list'), {'q': 'promem'})

        self.assertEqual([t.nome for t in response.context['templates']], ['Promemoria'])
        self.assertEqual(response.context['search_query'], 'promem')
