"""
Tests per app persone.
"""

import json
from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from budget.models import CategoriaBudget, VoceBudget
from core.testing import crea_evento, crea_utente

from . import services
from .models import Partecipante, Sponsor


class PersoneTestMixin:

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento()

    def crea_partecipante(self, **kwargs):
        dati = {'nome': 'Mario', 'cognome': 'Rossi', 'email': 'mario.rossi@example.com'}
        dati.update(kwargs)
        return Partecipante.objects.create(evento=self.evento, **dati)


class PartecipantiServiceTestCase(PersoneTestMixin, TestCase):

    def test_crea_partecipante_normalizza_email(self):
        risultato = services.crea_partecipante(
            self.evento,
            {'nome': 'Giulia', 'cognome': 'Verdi', 'email': ' Giulia.Verdi@Example.com '},
            self.user,
        )

        self.assertTrue(risultato.success)
        self.assertEqual(risultato.data.email, 'giulia.verdi@example.com')
        self.assertEqual(risultato.data.created_by, self.user)

    def test_email_unica_per_evento(self):
        self.crea_partecipante()

        risultato = services.crea_partecipante(
            self.evento, {'nome': 'Mario', 'cognome': 'Rossi', 'email': 'MARIO.ROSSI@example.com'}
        )

        self.assertFalse(risultato.success)
        self.assertIn('email', risultato.errors)

    def test_stessa_email_su_altro_evento(self):
        self.crea_partecipante()
        altro = crea_evento(nome='Workshop Python')

        risultato = services.crea_partecipante(
            altro, {'nome': 'Mario', 'cognome': 'Rossi', 'email': 'mario.rossi@example.com'}
        )

        self.assertTrue(risultato.success)

    def test_iscritti_esclude_annullati(self):
        self.crea_partecipante()
        self.crea_partecipante(email='annullato@example.com', stato='cancelled')
        self.assertEqual(self.evento.iscritti, 1)


@override_settings(QR_SECRET='test-secret')
class CheckinTestCase(PersoneTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.partecipante = self.crea_partecipante(stato='confirmed')

    def test_checksum(self):
        checksum = services.genera_checksum('p1', 'e1')
        self.assertEqual(len(checksum), 16)
        self.assertEqual(checksum, services.genera_checksum('p1', 'e1'))
        self.assertNotEqual(checksum, services.genera_checksum('p1', 'e2'))

    def test_payload_valido(self):
        dati = services.valida_dati_qr(services.payload_qr(self.partecipante))
        self.assertEqual(dati['participantId'], str(self.partecipante.pk))
        self.assertEqual(dati['eventId'], str(self.evento.pk))

    def test_checkin_da_qr(self):
        risultato = services.checkin_da_qr(services.payload_qr(self.partecipante), evento=self.evento)

        self.assertTrue(risultato.success)
        self.partecipante.refresh_from_db()
        self.assertTrue(self.partecipante.checked_in)
        self.assertIsNotNone(self.partecipante.orario_checkin)
        self.assertEqual(self.partecipante.stato, 'attended')

    def test_json_non_valido(self):
        risultato = services.checkin_da_qr("non è json")
        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, "Invalid QR data format")

    def test_campi_mancanti(self):
        risultato = services.checkin_da_qr(json.dumps({'participantId': str(self.partecipante.pk)}))
        self.assertEqual(risultato.message, "Missing required fields in QR data")

    def test_checksum_manomesso(self):
        dati = json.loads(services.payload_qr(self.partecipante))
        dati['checksum'] = '0' * 16

        risultato = services.checkin_da_qr(json.dumps(dati))

        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, "Invalid checksum - QR code may be tampered")

    def test_evento_sbagliato(self):
        altro = crea_evento(nome='Fiera del Libro')

        risultato = services.checkin_da_qr(services.payload_qr(self.partecipante), evento=altro)

        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, "Participant does not belong to this event")

    def test_gia_registrato(self):
        self.partecipante.registra_checkin()

        risultato = services.checkin_da_qr(services.payload_qr(self.partecipante))

        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, "Mario Rossi is already checked-in")

    def test_manuale_e_annulla(self):
        self.assertTrue(services.checkin_manuale(self.partecipante, self.evento).success)

        risultato = services.annulla_checkin(self.partecipante)

        self.assertTrue(risultato.success)
        self.partecipante.refresh_from_db()
        self.assertFalse(self.partecipante.checked_in)
        self.assertIsNone(self.partecipante.orario_checkin)
        self.assertEqual(self.partecipante.stato, 'confirmed')
        self.assertFalse(services.annulla_checkin(self.partecipante).success)

    def test_statistiche(self):
        self.crea_partecipante(email='b@example.com', checked_in=True)
        self.crea_partecipante(email='c@example.com', stato='cancelled')

        stats = services.statistiche_checkin(self.evento)

        self.assertEqual(stats, {'totale': 2, 'checked_in': 1, 'da_registrare': 1, 'percentuale': 50})


class SponsorBudgetTestCase(PersoneTestMixin, TestCase):

    def dati_sponsor(self, **kwargs):
        dati = {'nome': 'Acme Pharma', 'livello': 'gold', 'importo': Decimal('10000')}
        dati.update(kwargs)
        return dati

    def test_crea_sponsor_genera_entrata(self):
        risultato = services.crea_sponsor(self.evento, self.dati_sponsor(), self.user)

        self.assertTrue(risultato.success)
        sponsor = Sponsor.objects.get(pk=risultato.data.pk)
        voce = sponsor.voce_budget
        self.assertIsNotNone(voce)
        self.assertEqual(voce.descrizione, 'Sponsor: Acme Pharma')
        self.assertEqual(voce.tipo, 'income')
        self.assertEqual(voce.stato, 'planned')
        self.assertEqual(voce.costo_stimato, Decimal('10000'))
        self.assertEqual(voce.costo_effettivo, Decimal('0'))
        self.assertEqual(voce.categoria.nome, 'Entrate')

    def test_categoria_entrate_riutilizzata(self):
        services.crea_sponsor(self.evento, self.dati_sponsor())
        services.crea_sponsor(self.evento, self.dati_sponsor(nome='Beta Srl'))

        self.assertEqual(CategoriaBudget.objects.filter(evento=self.evento, nome='Entrate').count(), 1)

    def test_importo_zero_senza_voce(self):
        risultato = services.crea_sponsor(self.evento, self.dati_sponsor(importo=Decimal('0')))

        self.assertTrue(risultato.success)
        self.assertIsNone(risultato.data.voce_budget)
        self.assertFalse(VoceBudget.objects.exists())

    def test_pagamento_parziale_e_saldo(self):
        sponsor = services.crea_sponsor(self.evento, self.dati_sponsor()).data

        services.aggiorna_sponsor(sponsor, {'stato_pagamento': 'partial'})
        sponsor.voce_budget.refresh_from_db()
        self.assertEqual(sponsor.voce_budget.costo_effettivo, Decimal('5000'))
        self.assertEqual(sponsor.voce_budget.stato, 'planned')

        oggi = timezone.localdate()
        services.aggiorna_sponsor(sponsor, {'stato_pagamento': 'paid', 'data_pagamento': oggi})
        voce = VoceBudget.objects.get(pk=sponsor.voce_budget_id)
        self.assertEqual(voce.costo_effettivo, Decimal('10000'))
        self.assertEqual(voce.stato, 'paid')
        self.assertEqual(voce.data_pagamento, oggi)
        self.assertEqual(voce.categoria.importo_speso, Decimal('10000'))

    def test_aggiornamento_crea_voce_mancante(self):
        sponsor = services.crea_sponsor(self.evento, self.dati_sponsor(importo=Decimal('0'))).data

        services.aggiorna_sponsor(sponsor, {'importo': Decimal('2500')})

        sponsor.refresh_from_db()
        self.assertEqual(sponsor.voce_budget.costo_stimato, Decimal('2500'))

    def test_elimina_sponsor_elimina_voce(self):
        sponsor = services.crea_sponsor(self.evento, self.dati_sponsor()).data

        risultato = services.elimina_sponsor(sponsor)

        self.assertTrue(risultato.success)
        self.assertFalse(VoceBudget.objects.exists())
        self.assertFalse(Sponsor.objects.exists())

    def test_entrate_non_toccano_speso_evento(self):
        services.crea_sponsor(self.evento, self.dati_sponsor(stato_pagamento='paid'))
        self.evento.refresh_from_db()
        self.assertEqual(self.evento.speso, Decimal('0'))


class PersoneViewsTestCase(PersoneTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client.force_login(self.user)

    def test_crea_partecipante(self):
        response = self.client.post(
            reverse('persone:partecipante_create', kwargs={'evento_pk': self.evento.pk}),
            {'nome': 'Luca', 'cognome': 'Neri', 'email': 'luca@example.com', 'stato': 'registered'},
        )

        self.assertEqual(response.status_code, 302)
        self.assertTrue(Partecipante.objects.filter(email='luca@example.com', evento=self.evento).exists())

    def test_crea_partecipante_duplicato_mostra_errore(self):
        self.crea_partecipante(email='luca@example.com')

        response = self.client.post(
            reverse('persone:partecipante_create', kwargs={'evento_pk': self.evento.pk}),
            {'nome': 'Luca', 'cognome': 'Neri', 'email': 'luca@example.com', 'stato': 'registered'},
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn('email', response.context['form'].errors)

    def test_checkin_qr_ajax(self):
        partecipante = self.crea_partecipante()

        response = self.client.post(
            reverse('persone:checkin_qr', kwargs={'evento_pk': self.evento.pk}),
            {'qr_data': services.payload_qr(partecipante)},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['id'], str(partecipante.pk))

    def test_csv(self):
        self.crea_partecipante(azienda='Ospedale San Raffaele')

        response = self.client.get(reverse('persone:partecipanti_csv', kwargs={'evento_pk': self.evento.pk}))

        righe = response.content.decode('utf-8').splitlines()
        self.assertEqual(righe[0].split(',')[:3], ['Nome', 'Cognome', 'Email'])
        self.assertIn('Ospedale San Raffaele', righe[1])

    def test_badge_pdf(self):
        self.crea_partecipante()

        response = self.client.get(reverse('persone:badge_pdf', kwargs={'evento_pk': self.evento.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_qr_png(self):
        partecipante = self.crea_partecipante()

        response = self.client.get(reverse('persone:partecipante_qr', kwargs={'pk': partecipante.pk}))

        self.assertEqual(response['Content-Type'], 'image/png')
        self.assertTrue(response.content.startswith(b'\x89PNG'))
