"""
Tests per app agenda.
"""

from datetime import date, datetime

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from core.testing import crea_evento, crea_utente
from persone.models import Relatore

from . import services
from .models import SessioneAgenda


def orario(giorno, ora, minuti=0):
    return timezone.make_aware(datetime(giorno.year, giorno.month, giorno.day, ora, minuti))


class AgendaTestMixin:

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento(data_inizio=date(2026, 11, 20), data_fine=date(2026, 11, 21))
        self.relatore = Relatore.objects.create(
            evento=self.evento, nome='Paolo', cognome='Gialli', email='paolo@example.com'
        )

    def dati(self, **kwargs):
        dati = {
            'titolo': 'Keynote di apertura',
            'tipo': 'keynote',
            'inizio': orario(self.evento.data_inizio, 9),
            'fine': orario(self.evento.data_inizio, 10, 30),
            'sala': 'Sala A',
        }
        dati.update(kwargs)
        return dati


class AgendaServiceTestCase(AgendaTestMixin, TestCase):

    def test_crea_sessione_calcola_durata(self):
        risultato = services.crea_sessione(self.evento, self.dati(relatori=[self.relatore]), self.user)

        self.assertTrue(risultato.success)
        sessione = risultato.data
        self.assertEqual(sessione.durata, 90)
        self.assertEqual(sessione.giorno, 1)
        self.assertEqual(list(sessione.relatori.all()), [self.relatore])

    def test_fine_prima_di_inizio(self):
        risultato = services.crea_sessione(
            self.evento, self.dati(fine=orario(self.evento.data_inizio, 8))
        )

        self.assertFalse(risultato.success)
        self.assertIn('fine', risultato.errors)

    def test_relatore_di_altro_evento(self):
        altro = crea_evento(nome='Altro evento')
        estraneo = Relatore.objects.create(evento=altro, nome='Sara', cognome='Blu', email='sara@example.com')

        risultato = services.crea_sessione(self.evento, self.dati(relatori=[estraneo]))

        self.assertFalse(risultato.success)
        self.assertIn('relatori', risultato.errors)
        self.assertFalse(SessioneAgenda.objects.exists())

    def test_sovrapposizione_segnalata(self):
        services.crea_sessione(self.evento, self.dati())

        risultato = services.crea_sessione(
            self.evento,
            self.dati(
                titolo='Workshop parallelo',
                inizio=orario(self.evento.data_inizio, 10),
                fine=orario(self.evento.data_inizio, 11),
            ),
        )

        self.assertTrue(risultato.success)
        self.assertIn('sovrapposizione', risultato.message)
        self.assertIn('Keynote di apertura', risultato.message)

    def test_sale_diverse_non_sovrapposte(self):
        services.crea_sessione(self.evento, self.dati())

        risultato = services.crea_sessione(self.evento, self.dati(titolo='Panel', sala='Sala B'))

        self.assertNotIn('sovrapposizione', risultato.message)

    def test_timeline_per_giorno(self):
        services.crea_sessione(self.evento, self.dati())
        services.crea_sessione(self.evento, self.dati(
            titolo='Chiusura lavori',
            inizio=orario(self.evento.data_fine, 17),
            fine=orario(self.evento.data_fine, 18),
        ))
        services.crea_sessione(self.evento, self.dati(
            titolo='Coffee break',
            tipo='break',
            sala='Foyer',
            inizio=orario(self.evento.data_inizio, 10, 30),
            fine=orario(self.evento.data_inizio, 11),
            pubblica=False,
        ))

        timeline = services.timeline_agenda(self.evento)

        self.assertEqual([g['giorno'] for g in timeline], [1, 2])
        self.assertEqual([s.titolo for s in timeline[0]['sessioni']], ['Keynote di apertura', 'Coffee break'])
        pubbliche = services.timeline_agenda(self.evento, solo_pubbliche=True)
        self.assertEqual(len(pubbliche[0]['sessioni']), 1)

    def test_aggiorna_relatori(self):
        sessione = services.crea_sessione(self.evento, self.dati(relatori=[self.relatore])).data

        services.aggiorna_sessione(sessione, {'relatori': []})

        self.assertEqual(sessione.relatori.count(), 0)


class AgendaViewsTestCase(AgendaTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client.force_login(self.user)

    def test_crea_sessione(self):
        response = self.client.post(
            reverse('agenda:sessione_create', kwargs={'evento_pk': self.evento.pk}),
            {
                'titolo': 'Tavola rotonda',
                'tipo': 'panel',
                'inizio': '2026-11-20T14:00',
                'fine': '2026-11-20T15:00',
                'relatori': [str(self.relatore.pk)],
                'stato': 'scheduled',
                'pubblica': 'on',
            },
        )

        url = reverse('eventi:evento_tab', kwargs={'pk': self.evento.pk, 'tab': 'agenda'})
        self.assertRedirects(response, url, fetch_redirect_response=False)
        sessione = SessioneAgenda.objects.get(titolo='Tavola rotonda')
        self.assertEqual(sessione.durata, 60)

    def test_elimina_ajax(self):
        sessione = services.crea_sessione(self.evento, self.dati()).data

        response = self.client.post(
            reverse('agenda:sessione_delete', kwargs={'pk': sessione.pk}),
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(SessioneAgenda.objects.exists())

    def test_export_excel(self):
        services.crea_sessione(self.evento, self.dati())

        response = self.client.get(reverse('agenda:agenda_excel', kwargs={'evento_pk': self.evento.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertIn('spreadsheetml', response['Content-Type'])
