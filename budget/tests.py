"""
Tests per app budget.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from core.testing import crea_evento, crea_utente

from . import aggregazioni, services
from .models import CategoriaBudget, VoceBudget


def voce(stato, costo_stimato, costo_effettivo=None, tipo='expense', categoria_id=1):
    return SimpleNamespace(
        stato=stato,
        costo_stimato=Decimal(costo_stimato),
        costo_effettivo=Decimal(costo_effettivo) if costo_effettivo is not None else None,
        tipo=tipo,
        categoria_id=categoria_id,
    )


class StatisticheBudgetTestCase(TestCase):
    """Aggregazioni pure sulle voci"""

    def test_impegnato_e_speso(self):
        categorie = [SimpleNamespace(importo_allocato=Decimal('1000')), SimpleNamespace(importo_allocato=Decimal('1000'))]
        voci = [
            voce('planned', '500'),
            voce('approved', '300'),
            voce('pending', '200', '250'),
            voce('paid', '400', '350'),
            voce('cancelled', '100'),
        ]

        stats = aggregazioni.statistiche_budget(categorie, voci)

        self.assertEqual(stats['budget_totale'], Decimal('2000'))
        self.assertEqual(stats['totale_voci'], 5)
        self.assertEqual(stats['conteggio']['planned'], 1)
        self.assertEqual(stats['importi']['pending'], Decimal('250'))
        self.assertEqual(stats['totale_impegnato'], Decimal('900'))
        self.assertEqual(stats['totale_speso'], Decimal('350'))
        self.assertEqual(stats['utilizzo_percentuale'], 45)
        self.assertEqual(stats['budget_residuo'], Decimal('1100'))

    def test_budget_zero(self):
        stats = aggregazioni.statistiche_budget([], [voce('paid', '100', '100')])
        self.assertEqual(stats['utilizzo_percentuale'], 0)
        self.assertEqual(stats['budget_residuo'], Decimal('0'))

    def test_residuo_mai_negativo(self):
        stats = aggregazioni.statistiche_budget(
            [SimpleNamespace(importo_allocato=Decimal('100'))],
            [voce('approved', '300')],
        )
        self.assertEqual(stats['budget_residuo'], Decimal('0'))
        self.assertEqual(stats['utilizzo_percentuale'], 300)

    def test_totali_per_categoria(self):
        totali = aggregazioni.totali_per_categoria([
            voce('paid', '10', '10', categoria_id=1),
            voce('paid', '10', '15', categoria_id=1),
            voce('planned', '10', categoria_id=2),
        ])
        self.assertEqual(totali, {1: Decimal('25'), 2: Decimal('0.00')})


class VociServiceTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento()
        self.categoria = CategoriaBudget.objects.create(
            evento=self.evento, nome='Location', importo_allocato=Decimal('10000')
        )

    def _crea_voce(self, **kwargs):
        dati = {
            'categoria': self.categoria,
            'descrizione': 'Affitto sala plenaria',
            'tipo': 'expense',
            'costo_stimato': Decimal('4000'),
        }
        dati.update(kwargs)
        return services.crea_voce(self.evento, dati, self.user)

    def test_crea_voce_ricalcola_speso(self):
        risultato = self._crea_voce(costo_effettivo=Decimal('3800'), stato='invoiced')

        self.assertTrue(risultato.success)
        self.categoria.refresh_from_db()
        self.evento.refresh_from_db()
        self.assertEqual(self.categoria.importo_speso, Decimal('3800'))
        self.assertEqual(self.evento.speso, Decimal('3800'))
        self.assertEqual(risultato.data.created_by, self.user)

    def test_costo_stimato_obbligatorio_positivo(self):
        risultato = self._crea_voce(costo_stimato=Decimal('0'))

        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, "Errori di validazione")
        self.assertIn('costo_stimato', risultato.errors)

    def test_descrizione_troppo_corta(self):
        risultato = self._crea_voce(descrizione='ab')
        self.assertFalse(risultato.success)
        self.assertIn('descrizione', risultato.errors)

    def test_pagata_richiede_data_e_costo(self):
        voce_budget = self._crea_voce().data

        risultato = services.aggiorna_stato_voce(voce_budget, 'paid')
        self.assertFalse(risultato.success)
        voce_budget.refresh_from_db()
        self.assertEqual(voce_budget.stato, 'planned')

        risultato = services.aggiorna_stato_voce(
            voce_budget, 'paid', data_pagamento=timezone.localdate(), costo_effettivo=Decimal('4100')
        )
        self.assertTrue(risultato.success)
        self.categoria.refresh_from_db()
        self.assertEqual(self.categoria.importo_speso, Decimal('4100'))

    def test_entrate_non_contano_nello_speso_evento(self):
        self._crea_voce(tipo='income', costo_effettivo=Decimal('1000'), descrizione='Biglietti')
        self.evento.refresh_from_db()
        self.categoria.refresh_from_db()
        self.assertEqual(self.evento.speso, Decimal('0'))
        self.assertEqual(self.categoria.importo_speso, Decimal('1000'))

    def test_spostamento_voce_ricalcola_entrambe_le_categorie(self):
        altra = CategoriaBudget.objects.create(evento=self.evento, nome='Catering')
        voce_budget = self._crea_voce(costo_effettivo=Decimal('500')).data

        risultato = services.aggiorna_voce(voce_budget, {'categoria': altra}, self.user)

        self.assertTrue(risultato.success)
        self.categoria.refresh_from_db()
        altra.refresh_from_db()
        self.assertEqual(self.categoria.importo_speso, Decimal('0'))
        self.assertEqual(altra.importo_speso, Decimal('500'))

    def test_categoria_di_altro_evento(self):
        altro_evento = crea_evento(nome='Fiera del Mobile')
        categoria_altrui = CategoriaBudget.objects.create(evento=altro_evento, nome='Stand')

        risultato = self._crea_voce(categoria=categoria_altrui)

        self.assertFalse(risultato.success)
        self.assertIn('categoria', risultato.errors)

    def test_elimina_categoria_elimina_voci(self):
        self._crea_voce(costo_effettivo=Decimal('700'))

        risultato = services.elimina_categoria(self.categoria)

        self.assertTrue(risultato.success)
        self.assertFalse(VoceBudget.objects.filter(evento=self.evento).exists())
        self.evento.refresh_from_db()
        self.assertEqual(self.evento.speso, Decimal('0'))

    def test_prossimi_pagamenti(self):
        oggi = timezone.localdate()
        self._crea_voce(stato='approved', data_scadenza=oggi + timedelta(days=10), descrizione='Catering')
        self._crea_voce(stato='pending', data_scadenza=oggi + timedelta(days=3), descrizione='Hostess')
        self._crea_voce(stato='approved', data_scadenza=oggi + timedelta(days=45), descrizione='Stampa')
        self._crea_voce(stato='paid', data_scadenza=oggi + timedelta(days=5), descrizione='Audio',
                        costo_effettivo=Decimal('100'), data_pagamento=oggi)

        prossimi = list(services.prossimi_pagamenti(self.evento))

        self.assertEqual([v.descrizione for v in prossimi], ['Hostess', 'Catering'])


class ReportFinanziarioTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente()
        self.evento = crea_evento(nome='Workshop AI', data_inizio=date(2026, 3, 10), data_fine=date(2026, 3, 11))
        entrate = CategoriaBudget.objects.create(evento=self.evento, nome='Entrate')
        costi = CategoriaBudget.objects.create(evento=self.evento, nome='Catering')
        VoceBudget.objects.create(categoria=entrate, evento=self.evento, descrizione='Sponsor: Acme',
                                  tipo='income', costo_stimato=Decimal('5000'), costo_effettivo=Decimal('4000'))
        VoceBudget.objects.create(categoria=costi, evento=self.evento, descrizione='Pranzo',
                                  costo_stimato=Decimal('1000'))
        VoceBudget.objects.create(categoria=costi, evento=self.evento, descrizione='Annullata',
                                  costo_stimato=Decimal('999'), stato='cancelled')

    def test_summary(self):
        report = services.report_finanziario()
        summary = report['summary']

        self.assertEqual(summary['entrate_totali'], Decimal('4000'))
        self.assertEqual(summary['costi_totali'], Decimal('1000'))
        self.assertEqual(summary['profitto_netto'], Decimal('3000'))
        self.assertAlmostEqual(summary['margine_percentuale'], 75.0)
        self.assertEqual(summary['totale_eventi'], 1)
        self.assertEqual(summary['totale_voci'], 2)
        self.assertEqual(report['dettaglio_categorie'][0]['categoria'], 'Entrate')
        self.assertTrue(report['dettaglio_categorie'][0]['is_entrata'])

    def test_filtro_periodo(self):
        report = services.report_finanziario(data_inizio=date(2026, 4, 1))
        self.assertEqual(report['summary']['totale_eventi'], 0)
        self.assertEqual(report['summary']['margine_percentuale'], 0.0)

    def test_layout_csv(self):
        report = services.report_finanziario()
        righe = aggregazioni.report_csv(report).splitlines()

        self.assertEqual(righe[0], 'Report Finanziario EventHub')
        self.assertEqual(righe[2], 'Periodo: Tutte - Tutte')
        self.assertEqual(righe[3], 'Eventi selezionati: Tutti')
        self.assertEqual(righe[5], 'RIEPILOGO')
        self.assertEqual(righe[9], 'Margine %,75.0%')
        self.assertIn('DETTAGLIO PER EVENTO', righe)
        self.assertIn('Workshop AI,10/03/2026,4000.00,1000.00,3000.00,2', righe)
        self.assertIn('Entrate,Entrata,4000.00,1', righe)

    def test_download_csv(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse('budget:report_csv'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')
        nome_file = f"report_finanziario_{timezone.localdate().strftime('%Y%m%d')}.csv"
        self.assertIn(nome_file, response['Content-Disposition'])

    def test_download_pdf(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse('budget:report_pdf'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_export_excel(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse('budget:budget_excel', kwargs={'evento_pk': self.evento.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertIn('.xlsx', response['Content-Disposition'])

    def test_cambio_stato_ajax(self):
        voce_budget = VoceBudget.objects.get(descrizione='Pranzo')
        self.client.force_login(self.user)

        response = self.client.post(
            reverse('budget:voce_stato', kwargs={'pk': voce_budget.pk}),
            {'stato': 'paid'},
            HTTP_X_REQUESTED_WITH='XMLHttpRequest',
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])


@override_settings(
    CACHES={"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "budget-tests"}}
)
class RevalidaFinanzeTestCase(TestCase):
    """Le mutazioni che toccano le voci aggiornano i totali in cache della pagina finanze"""

    def setUp(self):
        from django.core.cache import cache

        cache.clear()
        self.user = crea_utente()
        self.evento = crea_evento()

    def test_sponsor_aggiorna_entrate(self):
        from persone.services import crea_sponsor, elimina_sponsor

        self.assertEqual(services.panoramica_finanze()['entrate_totali'], Decimal('0'))

        sponsor = crea_sponsor(
            self.evento,
            {'nome': 'Acme Pharma', 'livello': 'gold', 'importo': Decimal('10000'), 'stato_pagamento': 'paid'},
            self.user,
        ).data
        self.assertEqual(services.panoramica_finanze()['entrate_totali'], Decimal('10000'))

        elimina_sponsor(sponsor)
        self.assertEqual(services.panoramica_finanze()['entrate_totali'], Decimal('0'))

    def test_assegnazione_staff_aggiorna_costi(self):
        from staff.models import MembroStaff
        from staff.services import crea_assegnazione

        categoria = CategoriaBudget.objects.create(evento=self.evento, nome='Personale')
        membro = MembroStaff.objects.create(
            nome='Mario', cognome='Rossi', email='mario.rossi@example.com', ruolo='av_tech'
        )
        inizio = timezone.make_aware(datetime.combine(self.evento.data_inizio, datetime.min.time()))
        self.assertEqual(services.panoramica_finanze()['costi_totali'], Decimal('0'))

        risultato = crea_assegnazione(
            self.evento,
            {
                'staff': membro,
                'inizio': inizio + timedelta(hours=8),
                'fine': inizio + timedelta(hours=18),
                'stato_assegnazione': 'confirmed',
                'importo': Decimal('300'),
                'categoria_budget': categoria,
            },
            self.user,
        )

        self.assertTrue(risultato.success, risultato.errors)
        self.assertEqual(services.panoramica_finanze()['costi_totali'], Decimal('300'))

    def test_duplicazione_evento_aggiorna_totali(self):
        from eventi.services import duplica_evento

        categoria = CategoriaBudget.objects.create(evento=self.evento, nome='Catering')
        VoceBudget.objects.create(categoria=categoria, evento=self.evento, descrizione='Pranzo',
                                  costo_stimato=Decimal('1000'))
        self.assertEqual(services.panoramica_finanze()['costi_totali'], Decimal('1000'))

        risultato = duplica_evento(self.evento, self.user)

        self.assertTrue(risultato.success)
        self.assertEqual(services.panoramica_finanze()['costi_totali'], Decimal('2000'))
