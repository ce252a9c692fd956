"""
Tests per app scadenze.
"""

from datetime import timedelta
from io import StringIO

from django.core import mail
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from core.testing import crea_evento, crea_utente

from . import services
from .models import Scadenza


class ScadenzeTestMixin:

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento(created_by=self.user)

    def crea(self, giorni=10, **kwargs):
        dati = {
            'titolo': 'Chiusura iscrizioni',
            'data_scadenza': timezone.now() + timedelta(days=giorni),
        }
        dati.update(kwargs)
        return Scadenza.objects.create(evento=self.evento, **dati)


class ScadenzeServiceTestCase(ScadenzeTestMixin, TestCase):

    def test_aggiorna_scadute(self):
        passata = self.crea(giorni=-1)
        in_corso = self.crea(giorni=-2, stato='in_progress')
        completata = self.crea(giorni=-3, stato='completed')
        futura = self.crea(giorni=3)

        self.assertEqual(services.aggiorna_scadenze_scadute(), 2)

        for scadenza, atteso in [
            (passata, 'overdue'), (in_corso, 'overdue'), (completata, 'completed'), (futura, 'pending'),
        ]:
            scadenza.refresh_from_db()
            self.assertEqual(scadenza.stato, atteso)

    def test_completa_e_riapri(self):
        scadenza = self.crea(giorni=-1)

        risultato = services.completa_scadenza(scadenza, self.user)

        self.assertTrue(risultato.success)
        scadenza.refresh_from_db()
        self.assertEqual(scadenza.stato, 'completed')
        self.assertEqual(scadenza.completata_da, self.user)
        self.assertIsNotNone(scadenza.completata_il)

        services.riapri_scadenza(scadenza)
        scadenza.refresh_from_db()
        self.assertEqual(scadenza.stato, 'overdue')
        self.assertIsNone(scadenza.completata_il)

    def test_scadenze_urgenti(self):
        self.crea(giorni=2, titolo='Vicina')
        self.crea(giorni=-1, titolo='Scaduta', stato='overdue')
        self.crea(giorni=20, titolo='Lontana')
        self.crea(giorni=1, titolo='Fatta', stato='completed')

        titoli = [s.titolo for s in services.scadenze_urgenti()]

        self.assertEqual(titoli, ['Scaduta', 'Vicina'])

    def test_urgenti_esclude_eventi_cancellati(self):
        self.crea(giorni=2)
        self.evento.soft_delete(self.user)
        self.assertFalse(services.scadenze_urgenti().exists())

    def test_da_notificare(self):
        entro = self.crea(giorni=5, titolo='Entro preavviso')
        self.crea(giorni=5, titolo='Già notificata', notifica_inviata=True)
        self.crea(giorni=15, titolo='Fuori preavviso')
        self.crea(giorni=2, titolo='Preavviso breve', giorni_promemoria=1)

        self.assertEqual(services.scadenze_da_notificare(), [entro])

    def test_invia_promemoria(self):
        scadenza = self.crea(giorni=3)

        esito = services.invia_promemoria_scadenze()

        self.assertEqual(esito['inviati'], 1)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.user.email])
        self.assertIn('Chiusura iscrizioni', mail.outbox[0].subject)
        scadenza.refresh_from_db()
        self.assertTrue(scadenza.notifica_inviata)

    def test_promemoria_rispetta_preferenze(self):
        self.user.notifiche_scadenze = False
        self.user.save()
        self.crea(giorni=3)

        esito = services.invia_promemoria_scadenze()

        self.assertEqual(esito['saltati'], 1)
        self.assertEqual(len(mail.outbox), 0)

    def test_nuova_data_azzera_notifica(self):
        scadenza = self.crea(giorni=3, notifica_inviata=True)

        services.aggiorna_scadenza(scadenza, {'data_scadenza': timezone.now() + timedelta(days=30)})

        scadenza.refresh_from_db()
        self.assertFalse(scadenza.notifica_inviata)

    def test_management_command(self):
        self.crea(giorni=-1)
        out = StringIO()

        call_command('aggiorna_scadenze', stdout=out)

        self.assertIn('Scadenze aggiornate: 1', out.getvalue())


class ScadenzeViewsTestCase(ScadenzeTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client.force_login(self.user)

    def test_lista(self):
        self.crea(titolo='Invio abstract', priorita='high')
        self.crea(titolo='Stampa programma', priorita='low')

        response = self.client.get(reverse('scadenze:scadenze_list'), {'priorita': 'high'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([s.titolo for s in response.context['scadenze']], ['Invio abstract'])

    def test_crea_titolo_corto(self):
        response = self.client.post(
            reverse('scadenze:scadenza_create', kwargs={'evento_pk': self.evento.pk}),
            {
                'titolo': 'ab',
                'data_scadenza': '2026-12-01T10:00',
                'categoria': 'other',
                'priorita': 'medium',
                'stato': 'pending',
                'giorni_promemoria': 7,
            },
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('titolo', response.json()['errors'])

    def test_completa_ajax(self):
        scadenza = self.crea()

        response = self.client.post(
            reverse('scadenze:scadenza_completa', kwargs={'pk': scadenza.pk}),
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 200)
        scadenza.refresh_from_db()
        self.assertEqual(scadenza.stato, 'completed')
