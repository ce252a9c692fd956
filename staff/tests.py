"""
Tests per app staff.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from budget.models import CategoriaBudget, VoceBudget
from core.testing import crea_evento, crea_utente

from . import services
from .models import AssegnazioneStaff, MembroStaff
from .pagamenti import (
    calcola_data_scadenza_pagamento,
    calcola_stato_pagamento,
    riepilogo_pagamenti,
)


def aware(*args):
    return timezone.make_aware(datetime(*args))


class RegolePagamentoTestCase(TestCase):
    """Funzioni pure di staff.pagamenti"""

    def test_scadenza_per_termini(self):
        fine = aware(2026, 5, 10, 18, 0)
        self.assertEqual(calcola_data_scadenza_pagamento(fine, 'immediate'), date(2026, 5, 10))
        self.assertEqual(calcola_data_scadenza_pagamento(fine, '30_days'), date(2026, 6, 9))
        self.assertEqual(calcola_data_scadenza_pagamento(fine, '60_days'), date(2026, 7, 9))
        self.assertEqual(calcola_data_scadenza_pagamento(fine, '90_days'), date(2026, 8, 8))
        self.assertEqual(calcola_data_scadenza_pagamento(fine, 'custom'), date(2026, 5, 10))

    def test_scadenza_senza_fine_usa_oggi(self):
        self.assertEqual(
            calcola_data_scadenza_pagamento(None, '30_days'),
            timezone.localdate() + timedelta(days=30),
        )

    def test_stato_pagamento(self):
        oggi = date(2026, 5, 10)
        self.assertEqual(calcola_stato_pagamento(date(2026, 5, 1), date(2026, 5, 2), 'confirmed', oggi), 'paid')
        self.assertEqual(calcola_stato_pagamento(date(2026, 5, 1), None, 'cancelled', oggi), 'not_due')
        self.assertEqual(calcola_stato_pagamento(date(2026, 5, 1), None, 'declined', oggi), 'not_due')
        self.assertEqual(calcola_stato_pagamento(None, None, 'confirmed', oggi), 'not_due')
        self.assertEqual(calcola_stato_pagamento(date(2026, 5, 9), None, 'confirmed', oggi), 'overdue')
        self.assertEqual(calcola_stato_pagamento(date(2026, 5, 10), None, 'confirmed', oggi), 'pending')

    def test_pagato_vince_su_annullato(self):
        self.assertEqual(calcola_stato_pagamento(None, date(2026, 5, 2), 'cancelled'), 'paid')

    def test_riepilogo(self):
        assegnazioni = [
            SimpleNamespace(importo=Decimal('100'), stato_pagamento='paid'),
            SimpleNamespace(importo=Decimal('200'), stato_pagamento='overdue'),
            SimpleNamespace(importo=Decimal('50'), stato_pagamento='pending'),
            SimpleNamespace(importo=None, stato_pagamento='not_due'),
        ]
        riepilogo = riepilogo_pagamenti(assegnazioni)

        self.assertEqual(riepilogo['totale_assegnazioni'], 4)
        self.assertEqual(riepilogo['pagato'], Decimal('100'))
        self.assertEqual(riepilogo['scaduto'], Decimal('200'))
        self.assertEqual(riepilogo['da_pagare'], Decimal('250'))
        self.assertEqual(riepilogo['conteggio']['not_due'], 1)


class StaffTestMixin:

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento()
        self.membro = MembroStaff.objects.create(
            nome='Mario', cognome='Rossi', email='mario.rossi@example.com', ruolo='av_tech'
        )
        self.categoria = CategoriaBudget.objects.create(
            evento=self.evento, nome='Personale', importo_allocato=Decimal('5000')
        )
        inizio_evento = timezone.make_aware(datetime.combine(self.evento.data_inizio, datetime.min.time()))
        self.inizio = inizio_evento + timedelta(hours=8)
        self.fine = inizio_evento + timedelta(hours=18)

    def crea(self, **kwargs):
        dati = {
            'staff': self.membro,
            'inizio': self.inizio,
            'fine': self.fine,
            'stato_assegnazione': 'confirmed',
        }
        dati.update(kwargs)
        risultato = services.crea_assegnazione(self.evento, dati, self.user)
        self.assertTrue(risultato.success, risultato.errors)
        return risultato.data


class AssegnazioniServiceTestCase(StaffTestMixin, TestCase):

    def test_scadenza_calcolata_con_importo(self):
        assegnazione = self.crea(importo=Decimal('300'), termini_pagamento='30_days')

        self.assertEqual(assegnazione.data_scadenza_pagamento, self.evento.data_inizio + timedelta(days=30))
        self.assertEqual(assegnazione.stato_pagamento, 'pending')

    def test_termini_custom_senza_scadenza(self):
        assegnazione = self.crea(importo=Decimal('300'))
        self.assertIsNone(assegnazione.data_scadenza_pagamento)
        self.assertEqual(assegnazione.stato_pagamento, 'not_due')

    def test_voce_budget_creata(self):
        assegnazione = self.crea(importo=Decimal('300'), categoria_budget=self.categoria)

        voce = assegnazione.voce_budget
        self.assertIsNotNone(voce)
        self.assertEqual(voce.descrizione, 'Pagamento Staff: Rossi Mario')
        self.assertEqual(voce.fornitore, 'Mario Rossi')
        self.assertEqual(voce.stato, 'approved')
        self.assertEqual(voce.tipo, 'expense')
        self.assertEqual(voce.costo_effettivo, Decimal('300'))
        self.assertEqual(voce.note, 'Generato automaticamente dal modulo Staff')
        self.categoria.refresh_from_db()
        self.assertEqual(self.categoria.importo_speso, Decimal('300'))

    def test_nessuna_voce_senza_importo(self):
        assegnazione = self.crea(categoria_budget=self.categoria)
        self.assertIsNone(assegnazione.voce_budget)

    def test_fine_prima_di_inizio(self):
        risultato = services.crea_assegnazione(
            self.evento,
            {'staff': self.membro, 'inizio': self.fine, 'fine': self.inizio},
            self.user,
        )
        self.assertFalse(risultato.success)
        self.assertIn('fine', risultato.errors)

    def test_importo_oltre_il_massimo(self):
        risultato = services.crea_assegnazione(
            self.evento,
            {'staff': self.membro, 'inizio': self.inizio, 'fine': self.fine, 'importo': Decimal('1000001')},
        )
        self.assertFalse(risultato.success)
        self.assertIn('importo', risultato.errors)

    def test_aggiorna_aggiorna_voce(self):
        assegnazione = self.crea(importo=Decimal('300'), categoria_budget=self.categoria)

        risultato = services.aggiorna_assegnazione(assegnazione, {'importo': Decimal('450')}, self.user)

        self.assertTrue(risultato.success)
        assegnazione.voce_budget.refresh_from_db()
        self.assertEqual(assegnazione.voce_budget.costo_stimato, Decimal('450'))

    def test_aggiorna_crea_voce_se_categoria_impostata(self):
        assegnazione = self.crea(importo=Decimal('300'))

        services.aggiorna_assegnazione(assegnazione, {'categoria_budget': self.categoria}, self.user)

        assegnazione.refresh_from_db()
        self.assertIsNotNone(assegnazione.voce_budget_id)

    def test_aggiorna_cambio_termini_ricalcola_scadenza(self):
        assegnazione = self.crea(importo=Decimal('300'))

        services.aggiorna_assegnazione(assegnazione, {'termini_pagamento': 'immediate'})

        assegnazione.refresh_from_db()
        self.assertEqual(assegnazione.data_scadenza_pagamento, self.evento.data_inizio)
        self.assertEqual(assegnazione.stato_pagamento, 'pending')

    def test_elimina_rimuove_voce(self):
        assegnazione = self.crea(importo=Decimal('300'), categoria_budget=self.categoria)
        voce_id = assegnazione.voce_budget_id

        risultato = services.elimina_assegnazione(assegnazione)

        self.assertTrue(risultato.success)
        self.assertFalse(VoceBudget.objects.filter(pk=voce_id).exists())
        self.categoria.refresh_from_db()
        self.assertEqual(self.categoria.importo_speso, Decimal('0'))

    def test_stato_annullato_non_dovuto(self):
        assegnazione = self.crea(importo=Decimal('300'), termini_pagamento='immediate')

        services.aggiorna_stato_assegnazione(assegnazione, 'cancelled')

        assegnazione.refresh_from_db()
        self.assertEqual(assegnazione.stato_pagamento, 'not_due')


class PagamentiServiceTestCase(StaffTestMixin, TestCase):

    def test_segna_pagato_mantiene_valori_esistenti(self):
        assegnazione = self.crea(
            importo=Decimal('300'),
            categoria_budget=self.categoria,
            numero_fattura='FT-1',
            note_pagamento='Nota iniziale',
        )

        risultato = services.segna_pagato(assegnazione, date(2026, 6, 1))

        self.assertTrue(risultato.success)
        assegnazione.refresh_from_db()
        self.assertEqual(assegnazione.stato_pagamento, 'paid')
        self.assertEqual(assegnazione.numero_fattura, 'FT-1')
        self.assertEqual(assegnazione.note_pagamento, 'Nota iniziale')
        voce = VoceBudget.objects.get(pk=assegnazione.voce_budget_id)
        self.assertEqual(voce.stato, 'paid')
        self.assertEqual(voce.data_pagamento, date(2026, 6, 1))

    def test_posticipa_aggiunge_nota(self):
        assegnazione = self.crea(importo=Decimal('300'), termini_pagamento='immediate')
        nuova = timezone.localdate() + timedelta(days=90)

        services.posticipa_pagamento(assegnazione, nuova, 'Fattura in ritardo')

        assegnazione.refresh_from_db()
        self.assertEqual(assegnazione.data_scadenza_pagamento, nuova)
        self.assertEqual(assegnazione.stato_pagamento, 'pending')
        self.assertEqual(
            assegnazione.note_pagamento,
            f"Posticipato al {nuova.strftime('%d/%m/%Y')}: Fattura in ritardo",
        )

    def test_annulla_pagamento(self):
        assegnazione = self.crea(importo=Decimal('300'), termini_pagamento='immediate')
        services.segna_pagato(assegnazione, date(2026, 6, 1), numero_fattura='FT-9', note='Bonifico')

        services.annulla_pagamento(assegnazione, 'Bonifico respinto')

        assegnazione.refresh_from_db()
        self.assertIsNone(assegnazione.data_pagamento)
        self.assertEqual(assegnazione.numero_fattura, '')
        self.assertEqual(assegnazione.stato_pagamento, 'pending')
        self.assertEqual(assegnazione.note_pagamento, 'Bonifico\n\nPagamento cancellato: Bonifico respinto')

    def test_aggiorna_stati_pagamento(self):
        assegnazione = self.crea(importo=Decimal('300'), termini_pagamento='immediate')

        aggiornate = services.aggiorna_stati_pagamento(oggi=self.evento.data_inizio + timedelta(days=1))

        self.assertEqual(aggiornate, 1)
        assegnazione.refresh_from_db()
        self.assertEqual(assegnazione.stato_pagamento, 'overdue')

    def test_management_command(self):
        self.crea(importo=Decimal('300'), termini_pagamento='immediate')
        out = StringIO()

        data = (self.evento.data_inizio + timedelta(days=5)).isoformat()
        call_command('aggiorna_pagamenti_staff', '--data', data, stdout=out)

        self.assertIn('Assegnazioni aggiornate: 1', out.getvalue())


class AssegnazioniMultipleTestCase(StaffTestMixin, TestCase):

    def test_crea_per_ogni_membro(self):
        altro = MembroStaff.objects.create(nome='Anna', cognome='Bianchi', email='anna@example.com')

        risultato = services.crea_assegnazioni_multiple(
            self.evento, f"{self.membro.pk}, {altro.pk}", self.inizio, self.fine
        )

        self.assertTrue(risultato.success)
        self.assertEqual(len(risultato.data['ids']), 2)
        self.assertEqual(
            set(AssegnazioneStaff.objects.values_list('stato_assegnazione', flat=True)), {'requested'}
        )

    def test_fine_non_successiva(self):
        risultato = services.crea_assegnazioni_multiple(self.evento, [self.membro.pk], self.inizio, self.inizio)

        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, 'La data di fine deve essere successiva alla data di inizio')
        self.assertFalse(AssegnazioneStaff.objects.exists())


class MembriStaffTestCase(StaffTestMixin, TestCase):

    def test_email_unica(self):
        risultato = services.crea_membro(
            {'nome': 'Luigi', 'cognome': 'Verdi', 'email': 'MARIO.ROSSI@example.com'}
        )
        self.assertFalse(risultato.success)
        self.assertIn('email', risultato.errors)

    def test_eliminazione_bloccata_da_assegnazioni_attive(self):
        self.crea()

        risultato = services.elimina_membro(self.membro)

        self.assertFalse(risultato.success)
        self.assertTrue(MembroStaff.objects.filter(pk=self.membro.pk).exists())

    def test_eliminazione_con_assegnazioni_concluse(self):
        self.crea(stato_assegnazione='completed')

        risultato = services.elimina_membro(self.membro)

        self.assertTrue(risultato.success)
        self.assertFalse(AssegnazioneStaff.objects.exists())

    def test_toggle_attivo(self):
        risultato = services.toggle_attivo(self.membro, False)
        self.assertEqual(risultato.message, 'Staff member disattivato con successo')
        self.membro.refresh_from_db()
        self.assertFalse(self.membro.attivo)

    def test_etichetta_ruolo(self):
        self.assertEqual(self.membro.get_ruolo_display(), 'Tecnico AV')


class StaffViewsTestCase(StaffTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client.force_login(self.user)

    def test_lista_filtrata(self):
        MembroStaff.objects.create(nome='Anna', cognome='Bianchi', email='anna@example.com', ruolo='hostess')

        response = self.client.get(reverse('staff:staff_list'), {'ruolo': 'hostess'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([m.cognome for m in response.context['membri']], ['Bianchi'])

    def test_segna_pagato_ajax(self):
        assegnazione = self.crea(importo=Decimal('300'))

        response = self.client.post(
            reverse('staff:segna_pagato', kwargs={'pk': assegnazione.pk}),
            {'data_pagamento': '2026-06-01'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['success'])

    def test_segna_pagato_senza_data(self):
        assegnazione = self.crea(importo=Decimal('300'))

        response = self.client.post(
            reverse('staff:segna_pagato', kwargs={'pk': assegnazione.pk}),
            {},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('data_pagamento', response.json()['errors'])

    def test_azione_richiede_permessi(self):
        assegnazione = self.crea()
        utente = crea_utente('collaboratore', superuser=False)
        self.client.force_login(utente)

        response = self.client.post(reverse('staff:segna_pagato', kwargs={'pk': assegnazione.pk}))

        self.assertEqual(response.status_code, 403)
