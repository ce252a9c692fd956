"""
Tests per app eventi.
"""

from datetime import date, datetime
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from agenda.models import SessioneAgenda
from budget.models import CategoriaBudget, VoceBudget
from core.testing import crea_evento, crea_utente
from persone.models import Partecipante, Relatore, Sponsor
from persone.services import crea_sponsor
from scadenze.models import Scadenza

from . import services
from .models import Evento


class EventiServiceTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente()

    def dati_evento(self, **kwargs):
        dati = {
            'nome': 'Forum Innovazione',
            'tipo': 'conferenza_aziendale',
            'luogo': 'Torino',
            'data_inizio': date(2026, 11, 10),
            'data_fine': date(2026, 11, 11),
            'capienza': 300,
            'budget': Decimal('20000.00'),
            'stato': 'draft',
        }
        dati.update(kwargs)
        return dati

    def test_crea_evento_genera_codice(self):
        risultato = services.crea_evento(self.dati_evento(), self.user)

        self.assertTrue(risultato.success)
        self.assertTrue(risultato.data.codice.startswith('EVT-'))
        self.assertEqual(risultato.data.created_by, self.user)

    def test_date_invertite(self):
        risultato = services.crea_evento(self.dati_evento(data_fine=date(2026, 11, 1)))

        self.assertFalse(risultato.success)
        self.assertIn('data_fine', risultato.errors)

    def test_nome_corto_e_budget_zero(self):
        risultato = services.crea_evento(self.dati_evento(nome='AB', budget=Decimal('0')))

        self.assertFalse(risultato.success)
        self.assertIn('nome', risultato.errors)
        self.assertIn('budget', risultato.errors)

    def test_elimina_evento_soft_delete(self):
        evento = crea_evento()

        risultato = services.elimina_evento(evento, self.user)

        self.assertTrue(risultato.success)
        self.assertFalse(Evento.objects.attivi().filter(pk=evento.pk).exists())
        self.assertTrue(Evento.objects.cancellati().filter(pk=evento.pk).exists())

        services.ripristina_evento(evento, self.user)
        self.assertTrue(Evento.objects.attivi().filter(pk=evento.pk).exists())

    def test_aggiorna_stato(self):
        evento = crea_evento()

        self.assertTrue(services.aggiorna_stato_evento(evento, 'active').success)
        evento.refresh_from_db()
        self.assertEqual(evento.stato, 'active')

        risultato = services.aggiorna_stato_evento(evento, 'archiviato')
        self.assertFalse(risultato.success)
        self.assertIn('stato', risultato.errors)

    def test_piu_un_anno(self):
        self.assertEqual(services.piu_un_anno(date(2028, 2, 29)), date(2029, 2, 28))
        self.assertEqual(services.piu_un_anno(date(2026, 5, 4)), date(2027, 5, 4))
        self.assertIsNone(services.piu_un_anno(None))

    def test_statistiche_dashboard(self):
        crea_evento(budget=Decimal('1000.00'))
        crea_evento(nome='Fiera del Libro', stato='cancelled')
        cancellato = crea_evento(nome='Evento rimosso')
        cancellato.soft_delete()

        statistiche = services.statistiche_dashboard()

        self.assertEqual(statistiche['totale_eventi'], 2)
        self.assertEqual(statistiche['eventi_per_stato']['cancelled'], 1)
        self.assertEqual(statistiche['budget_totale'], Decimal('1000.00'))

    def test_eventi_per_duplicazione(self):
        crea_evento(nome='Congresso 2025', data_inizio=date(2025, 6, 1))
        crea_evento(nome='Workshop 2026', data_inizio=date(2026, 6, 1))

        nomi = [e.nome for e in services.eventi_per_duplicazione(anno=2025)]
        self.assertEqual(nomi, ['Congresso 2025'])
        self.assertEqual(services.eventi_per_duplicazione(ricerca='workshop').count(), 1)


class DuplicazioneEventoTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento(
            data_inizio=date(2026, 3, 10), data_fine=date(2026, 3, 12), stato='completed'
        )
        self.relatore = Relatore.objects.create(
            evento=self.evento, nome='Anna', cognome='Bianchi', email='anna@example.com', stato='confirmed'
        )
        categoria = CategoriaBudget.objects.create(
            evento=self.evento, nome='Location', importo_allocato=Decimal('10000.00'), importo_speso=Decimal('4000.00')
        )
        self.voce = VoceBudget.objects.create(
            evento=self.evento,
            categoria=categoria,
            descrizione='Affitto sala',
            costo_stimato=Decimal('5000.00'),
            costo_effettivo=Decimal('4000.00'),
            stato='paid',
            data_pagamento=date(2026, 3, 1),
            data_scadenza=date(2026, 2, 28),
            numero_fattura='F-12',
        )
        crea_sponsor(
            self.evento,
            {
                'nome': 'Acme Spa',
                'importo': Decimal('3000.00'),
                'stato': 'confirmed',
                'contratto_firmato': True,
                'data_contratto': date(2026, 1, 10),
                'stato_pagamento': 'paid',
                'data_pagamento': date(2026, 2, 1),
            },
        )
        sessione = SessioneAgenda.objects.create(
            evento=self.evento,
            titolo='Apertura lavori',
            inizio=timezone.make_aware(datetime(2026, 3, 10, 9, 0)),
            fine=timezone.make_aware(datetime(2026, 3, 10, 10, 0)),
            stato='completed',
        )
        sessione.relatori.add(self.relatore)
        Scadenza.objects.create(
            evento=self.evento,
            titolo='Conferma catering',
            data_scadenza=timezone.make_aware(datetime(2026, 2, 20, 12, 0)),
            stato='completed',
            completata_il=timezone.now(),
            completata_da=self.user,
            notifica_inviata=True,
        )
        Partecipante.objects.create(evento=self.evento, nome='Luca', cognome='Neri', email='luca@example.com')

    def duplica(self):
        risultato = services.duplica_evento(self.evento, self.user)
        self.assertTrue(risultato.success, risultato.message)
        return risultato.data

    def test_evento_copia(self):
        copia = self.duplica()

        self.assertEqual(copia.nome, f"{self.evento.nome} (Copia)")
        self.assertEqual(copia.stato, 'draft')
        self.assertEqual(copia.data_inizio, date(2027, 3, 10))
        self.assertEqual(copia.data_fine, date(2027, 3, 12))
        self.assertNotEqual(copia.codice, self.evento.codice)
        self.assertEqual(copia.partecipanti.count(), 0)

    def test_relatori_e_sessioni(self):
        copia = self.duplica()

        relatore = copia.relatori.get()
        self.assertEqual(relatore.stato, 'invited')
        sessione = copia.sessioni.get()
        self.assertEqual(sessione.stato, 'scheduled')
        self.assertEqual(timezone.localtime(sessione.inizio).year, 2027)
        self.assertEqual(list(sessione.relatori.all()), [relatore])

    def test_budget_azzerato(self):
        copia = self.duplica()

        categoria = copia.categorie_budget.get(nome='Location')
        self.assertEqual(categoria.importo_speso, Decimal('0.00'))
        voce = categoria.voci.get()
        self.assertEqual(voce.stato, 'planned')
        self.assertIsNone(voce.costo_effettivo)
        self.assertIsNone(voce.data_pagamento)
        self.assertEqual(voce.numero_fattura, '')
        self.assertEqual(voce.data_scadenza, date(2027, 2, 28))

    def test_sponsor_collegato_alla_voce_copiata(self):
        copia = self.duplica()

        sponsor = copia.sponsor.get()
        self.assertEqual(sponsor.stato, 'prospect')
        self.assertEqual(sponsor.stato_pagamento, 'pending')
        self.assertFalse(sponsor.contratto_firmato)
        self.assertIsNone(sponsor.data_contratto)
        self.assertIsNotNone(sponsor.voce_budget)
        self.assertEqual(sponsor.voce_budget.evento_id, copia.pk)
        self.assertEqual(Sponsor.objects.filter(voce_budget__evento=self.evento).count(), 1)

    def test_scadenze_riaperte(self):
        copia = self.duplica()

        scadenza = copia.scadenze.get()
        self.assertEqual(scadenza.stato, 'pending')
        self.assertIsNone(scadenza.completata_il)
        self.assertIsNone(scadenza.completata_da)
        self.assertFalse(scadenza.notifica_inviata)
        self.assertEqual(timezone.localtime(scadenza.data_scadenza).date(), date(2027, 2, 20))

    def test_originale_invariato(self):
        self.duplica()

        self.voce.refresh_from_db()
        self.assertEqual(self.voce.stato, 'paid')
        self.relatore.refresh_from_db()
        self.assertEqual(self.relatore.stato, 'confirmed')


class EventiViewsTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente()
        self.client.force_login(self.user)
        self.evento = crea_evento()

    def test_login_richiesto(self):
        self.client.logout()
        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, 302)

    def test_dashboard(self):
        response = self.client.get(reverse('dashboard'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['statistiche']['totale_eventi'], 1)

    def test_lista_filtrata(self):
        crea_evento(nome='Fiera Agricola', tipo='fiera')

        response = self.client.get(reverse('eventi:evento_list'), {'tipo': 'fiera'})

        self.assertEqual([e.nome for e in response.context['eventi']], ['Fiera Agricola'])

    def test_tutte_le_schede(self):
        for tab in ['panoramica', 'partecipanti', 'relatori', 'sponsor', 'staff',
                    'budget', 'agenda', 'scadenze', 'comunicazioni']:
            response = self.client.get(reverse('eventi:evento_tab', kwargs={'pk': self.evento.pk, 'tab': tab}))
            self.assertEqual(response.status_code, 200, tab)
            self.assertEqual(response.context['tab'], tab)

    def test_scheda_inesistente(self):
        response = self.client.get(reverse('eventi:evento_tab', kwargs={'pk': self.evento.pk, 'tab': 'foto'}))
        self.assertEqual(response.status_code, 404)

    def test_crea_evento(self):
        response = self.client.post(reverse('eventi:evento_create'), {
            'nome': 'Summit Cloud',
            'tipo': 'conferenza_aziendale',
            'luogo': 'Bologna',
            'data_inizio': '2026-12-01',
            'data_fine': '2026-12-02',
            'capienza': 150,
            'budget': '12000.00',
            'stato': 'draft',
        })

        evento = Evento.objects.get(nome='Summit Cloud')
        self.assertRedirects(response, evento.get_absolute_url(), fetch_redirect_response=False)

    def test_duplica_ajax(self):
        response = self.client.post(
            reverse('eventi:evento_duplica', kwargs={'pk': self.evento.pk}),
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['success'])
        self.assertTrue(Evento.objects.filter(nome__endswith='(Copia)').exists())

    def test_elimina(self):
        response = self.client.post(reverse('eventi:evento_delete', kwargs={'pk': self.evento.pk}))

        self.assertRedirects(response, reverse('eventi:evento_list'), fetch_redirect_response=False)
        response = self.client.get(self.evento.get_absolute_url())
        self.assertEqual(response.status_code, 404)

    def test_cambio_stato(self):
        self.client.post(reverse('eventi:evento_stato', kwargs={'pk': self.evento.pk}), {'stato': 'active'})

        self.evento.refresh_from_db()
        self.assertEqual(self.evento.stato, 'active')

    def test_permessi(self):
        utente = crea_utente(username='ospite', superuser=False)
        self.client.force_login(utente)

        response = self.client.post(reverse('eventi:evento_delete', kwargs={'pk': self.evento.pk}))

        self.assertEqual(response.status_code, 403)
