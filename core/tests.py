"""
Tests per app core: formattazione, azioni server, cache per percorso,
ricerca globale e allegati.
"""

import shutil
import tempfile
import uuid
from datetime import date, datetime
from decimal import Decimal

from django.contrib.auth.models import Permission
from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from core import cache as cache_percorsi
from core import utils
from core.actions import MESSAGGIO_VALIDAZIONE, RisultatoAzione, azione_server
from core.mixins.view_mixins import CustomPaginationMixin
from core.models import Allegato
from core.search import SearchRegistry
from core.templatetags import eventhub_tags
from core.testing import crea_evento, crea_utente
from eventi.models import Evento


class FormattazioneTestCase(SimpleTestCase):

    def test_formatta_valuta(self):
        self.assertEqual(utils.formatta_valuta(1234.5), "€ 1.234,50")
        self.assertEqual(utils.formatta_valuta(Decimal("1000000")), "€ 1.000.000,00")
        self.assertEqual(utils.formatta_valuta(None), "€ 0,00")
        self.assertEqual(utils.formatta_valuta(Decimal("-12.345")), "-€ 12,35")

    def test_giorni_mancanti(self):
        oggi = date(2026, 3, 10)
        self.assertEqual(utils.giorni_mancanti(date(2026, 3, 15), oggi=oggi), 5)
        self.assertEqual(utils.giorni_mancanti("2026-03-08", oggi=oggi), -2)

    def test_formatta_giorni_mancanti(self):
        oggi = date(2026, 3, 10)
        self.assertEqual(utils.formatta_giorni_mancanti(date(2026, 3, 10), oggi=oggi), "Oggi")
        self.assertEqual(utils.formatta_giorni_mancanti(date(2026, 3, 11), oggi=oggi), "Domani")
        self.assertEqual(utils.formatta_giorni_mancanti(date(2026, 3, 9), oggi=oggi), "Ieri")
        self.assertEqual(utils.formatta_giorni_mancanti(date(2026, 3, 20), oggi=oggi), "Tra 10 giorni")
        self.assertEqual(utils.formatta_giorni_mancanti(date(2026, 3, 7), oggi=oggi), "Scaduto 3 giorni fa")

    def test_progresso_evento(self):
        inizio = date(2026, 5, 1)
        fine = date(2026, 5, 2)
        prima = timezone.make_aware(datetime(2026, 4, 30, 12, 0))
        meta = timezone.make_aware(datetime(2026, 5, 2, 0, 0))
        dopo = timezone.make_aware(datetime(2026, 5, 3, 12, 0))

        self.assertEqual(utils.progresso_evento(inizio, fine, adesso=prima), 0)
        self.assertEqual(utils.progresso_evento(inizio, fine, adesso=meta), 50)
        self.assertEqual(utils.progresso_evento(inizio, fine, adesso=dopo), 100)

    def test_tronca_e_percentuale(self):
        self.assertEqual(utils.tronca("Congresso", 20), "Congresso")
        self.assertEqual(utils.tronca("Congresso Nazionale", 10), "Congres...")
        self.assertEqual(utils.tronca(None, 10), "")
        self.assertEqual(utils.percentuale(1, 3), 33)
        self.assertEqual(utils.percentuale(5, 0), 0)

    def test_template_tags(self):
        self.assertEqual(eventhub_tags.valuta(Decimal("50")), "€ 50,00")
        self.assertEqual(eventhub_tags.colore_stato("overdue"), "danger")
        self.assertEqual(eventhub_tags.colore_stato("sconosciuto"), "secondary")
        self.assertEqual(eventhub_tags.colore_priorita("critical"), "danger")
        self.assertEqual(eventhub_tags.giorni_mancanti(None), "")


class RisultatoAzioneTestCase(SimpleTestCase):

    def test_validation_error_con_campi(self):
        @azione_server("Errore durante il salvataggio")
        def salva():
            raise ValidationError({"nome": "Il nome deve contenere almeno 3 caratteri"})

        risultato = salva()

        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, MESSAGGIO_VALIDAZIONE)
        self.assertEqual(risultato.errors, {"nome": ["Il nome deve contenere almeno 3 caratteri"]})

    def test_validation_error_senza_campi(self):
        @azione_server("Errore")
        def salva():
            raise ValidationError("Operazione non consentita")

        risultato = salva()

        self.assertEqual(risultato.message, "Operazione non consentita")
        self.assertEqual(risultato.errors, {"__all__": ["Operazione non consentita"]})

    def test_eccezione_generica(self):
        @azione_server("Errore durante l'invio")
        def invia():
            raise RuntimeError("smtp down")

        with self.assertLogs("core.actions", level="ERROR"):
            risultato = invia()

        self.assertFalse(risultato.success)
        self.assertEqual(risultato.message, "Errore durante l'invio")

    def test_as_dict(self):
        risultato = RisultatoAzione.ok("Fatto", data={"totale": 3})

        self.assertEqual(
            risultato.as_dict(),
            {"success": True, "message": "Fatto", "data": {"totale": 3}},
        )
        self.assertNotIn("errors", risultato.as_dict())


class PaginazioneTestCase(SimpleTestCase):

    def page_size(self, valore):
        vista = CustomPaginationMixin()
        vista.request = RequestFactory().get("/", {"page_size": valore})
        return vista.get_paginate_by(None)

    def test_page_size_limitato(self):
        self.assertEqual(self.page_size("50"), 50)
        self.assertEqual(self.page_size("500"), 100)
        self.assertEqual(self.page_size("abc"), 20)

    def test_page_size_minimo(self):
        self.assertEqual(self.page_size("-5"), 1)
        self.assertEqual(self.page_size("0"), 1)


@override_settings(
    CACHES={"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "core-tests"}}
)
class CachePercorsiTestCase(SimpleTestCase):

    def setUp(self):
        from django.core.cache import cache

        cache.clear()
        self.chiamate = 0

    def calcolo(self):
        self.chiamate += 1
        return {"totale": self.chiamate}

    def test_dati_in_cache_fino_a_revalida(self):
        primo = cache_percorsi.dati_percorso("/eventi", self.calcolo)
        secondo = cache_percorsi.dati_percorso("/eventi", self.calcolo)

        self.assertEqual(primo, secondo)
        self.assertEqual(self.chiamate, 1)

        cache_percorsi.revalida_percorso("/eventi")
        terzo = cache_percorsi.dati_percorso("/eventi", self.calcolo)

        self.assertEqual(terzo, {"totale": 2})

    def test_percorsi_evento(self):
        self.assertEqual(
            cache_percorsi.percorsi_evento("abc", "budget"),
            ["/", "/eventi", "/eventi/abc", "/eventi/abc/budget"],
        )


class BaseModelTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente()

    def test_codice_progressivo(self):
        primo = crea_evento()
        secondo = crea_evento(nome="Secondo evento")
        oggi = timezone.now().strftime("%Y%m%d")

        self.assertEqual(primo.codice, f"EVT-{oggi}-0001")
        self.assertEqual(secondo.codice, f"EVT-{oggi}-0002")

    def test_soft_delete_e_restore(self):
        evento = crea_evento()

        evento.soft_delete(self.user)

        self.assertFalse(Evento.objects.attivi().filter(pk=evento.pk).exists())
        self.assertTrue(Evento.objects.cancellati().filter(pk=evento.pk).exists())
        self.assertIsNotNone(evento.deleted_at)
        self.assertEqual(evento.updated_by, self.user)

        evento.restore(self.user)

        self.assertTrue(Evento.objects.attivi().filter(pk=evento.pk).exists())
        self.assertIsNone(evento.deleted_at)


class RicercaGlobaleTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente()
        self.client.force_login(self.user)

    def test_search_all_per_categoria(self):
        crea_evento(nome="Summit Fintech")
        crea_evento(nome="Workshop Design")

        risultati = SearchRegistry.search_all("fintech")

        self.assertEqual(len(risultati), 1)
        self.assertEqual(risultati[0]["category"], "Eventi")
        self.assertEqual(risultati[0]["items"][0]["title"].split(" (")[0], "Summit Fintech")

    def test_eventi_cancellati_esclusi(self):
        evento = crea_evento(nome="Summit Fintech")
        evento.soft_delete()

        self.assertEqual(SearchRegistry.search_all("fintech"), [])

    def test_query_vuota(self):
        self.assertEqual(SearchRegistry.search_all("  "), [])

    def test_view_query_troppo_corta(self):
        response = self.client.get(reverse("core:global_search"), {"q": "a"})

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_view_risultati(self):
        crea_evento(nome="Summit Fintech")

        response = self.client.get(reverse("core:global_search"), {"q": "summit"})
        dati = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(dati["total_results"], 1)
        self.assertEqual(dati["results"][0]["category"], "Eventi")


class AllegatiTestCase(TestCase):

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.media_root = tempfile.mkdtemp()
        cls.media_override = override_settings(MEDIA_ROOT=cls.media_root)
        cls.media_override.enable()

    @classmethod
    def tearDownClass(cls):
        cls.media_override.disable()
        shutil.rmtree(cls.media_root, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.user = crea_utente(superuser=False)
        self.user.user_permissions.add(
            *Permission.objects.filter(content_type__app_label="eventi", codename__in=["view_evento", "change_evento"])
        )
        self.client.force_login(self.user)
        self.evento = crea_evento()
        self.content_type = ContentType.objects.get_for_model(Evento)

    def upload(self, nome="contratto.pdf", contenuto=b"%PDF-1.4 test", object_id=None):
        return self.client.post(
            reverse("core:allegato_upload"),
            {
                "file": SimpleUploadedFile(nome, contenuto),
                "content_type": self.content_type.pk,
                "object_id": object_id or str(self.evento.pk),
                "descrizione": "Contratto location",
            },
        )

    def test_upload_e_lista(self):
        response = self.upload()

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["allegato"]["is_pdf"])
        self.assertEqual(self.evento.conta_allegati(), 1)

        response = self.client.get(
            reverse("core:allegati_list"),
            {"content_type": self.content_type.pk, "object_id": str(self.evento.pk)},
        )
        self.assertEqual(response.json()["count"], 1)

    def test_estensione_non_consentita(self):
        response = self.upload(nome="script.exe")

        self.assertEqual(response.status_code, 400)
        self.assertIn("Tipo file non consentito", response.json()["message"])

    def test_eliminazione_solo_autore_o_staff(self):
        altro = crea_utente(username="altro", superuser=False)
        allegato = self.evento.aggiungi_allegato(
            SimpleUploadedFile("foto.png", b"png"), descrizione="Foto", user=altro
        )

        response = self.client.post(reverse("core:allegato_delete", args=[allegato.pk]))
        self.assertEqual(response.status_code, 403)

        self.client.force_login(altro)
        response = self.client.post(reverse("core:allegato_delete", args=[allegato.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Allegato.objects.filter(pk=allegato.pk).exists())

    def test_oggetto_inesistente(self):
        response = self.upload(object_id=str(uuid.uuid4()))

        self.assertEqual(response.status_code, 404)
        self.assertFalse(Allegato.objects.exists())

        response = self.client.get(
            reverse("core:allegati_list"),
            {"content_type": self.content_type.pk, "object_id": "non-esiste"},
        )
        self.assertEqual(response.status_code, 404)

    def test_upload_senza_permesso_di_modifica(self):
        lettore = crea_utente(username="lettore", superuser=False)
        lettore.user_permissions.add(Permission.objects.get(content_type=self.content_type, codename="view_evento"))
        self.client.force_login(lettore)

        response = self.upload()

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Allegato.objects.exists())

    def test_consultazione_richiede_permesso(self):
        allegato = self.evento.aggiungi_allegato(
            SimpleUploadedFile("foto.png", b"png"), descrizione="Foto", user=self.user
        )
        self.client.force_login(crea_utente(username="esterno", superuser=False))

        response = self.client.get(
            reverse("core:allegati_list"),
            {"content_type": self.content_type.pk, "object_id": str(self.evento.pk)},
        )
        self.assertEqual(response.status_code, 403)

        response = self.client.get(reverse("core:allegato_download", args=[allegato.pk]))
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.user)
        response = self.client.get(reverse("core:allegato_download", args=[allegato.pk]))
        self.assertEqual(response.status_code, 200)
        response.close()

    def test_dimensione_leggibile(self):
        allegato = Allegato(dimensione=2048)

        self.assertEqual(allegato.get_size_display(), "2.0 KB")
