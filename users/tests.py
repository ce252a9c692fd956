"""
Tests per app users: login, profilo, impostazioni, set_admin.
"""

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.urls import reverse

from core.testing import crea_utente

from .models import User


class LoginTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente(username='giulia', superuser=False, first_name='Giulia')

    def test_login_ricordami(self):
        response = self.client.post(
            reverse('users:login'),
            {'username': 'giulia', 'password': 'password123', 'remember_me': 'on'},
        )

        self.assertRedirects(response, reverse('dashboard'), fetch_redirect_response=False)
        self.assertEqual(self.client.session.get_expiry_age(), 60 * 60 * 24 * 30)

    def test_login_senza_ricordami_scade_alla_chiusura(self):
        self.client.post(reverse('users:login'), {'username': 'giulia', 'password': 'password123'})

        self.assertTrue(self.client.session.get_expire_at_browser_close())

    def test_login_redirect_next(self):
        response = self.client.post(
            reverse('users:login') + '?next=/eventi/',
            {'username': 'giulia', 'password': 'password123'},
        )

        self.assertRedirects(response, '/eventi/', fetch_redirect_response=False)

    def test_next_esterno_ignorato(self):
        response = self.client.post(
            reverse('users:login') + '?next=https://example.org/',
            {'username': 'giulia', 'password': 'password123'},
        )

        self.assertRedirects(response, reverse('dashboard'), fetch_redirect_response=False)

    def test_credenziali_errate(self):
        response = self.client.post(reverse('users:login'), {'username': 'giulia', 'password': 'sbagliata'})

        self.assertEqual(response.status_code, 200)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_utente_gia_autenticato(self):
        self.client.force_login(self.user)

        response = self.client.get(reverse('users:login'))

        self.assertRedirects(response, reverse('dashboard'), fetch_redirect_response=False)

    def test_logout(self):
        self.client.force_login(self.user)

        response = self.client.post(reverse('users:logout'))

        self.assertRedirects(response, reverse('users:login'), fetch_redirect_response=False)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_dashboard_richiede_login(self):
        response = self.client.get(reverse('dashboard'))

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse('users:login'), response['Location'])


class ProfiloTestCase(TestCase):

    def setUp(self):
        self.user = crea_utente(username='marco', superuser=False)
        self.client.force_login(self.user)

    def test_aggiorna_profilo(self):
        response = self.client.post(
            reverse('users:profilo'),
            {
                'first_name': 'Marco',
                'last_name': 'Bianchi',
                'email': 'marco.bianchi@example.com',
                'telefono': '+39 333 1234567',
                'azienda': 'Eventi Srl',
            },
        )

        self.assertRedirects(response, reverse('users:profilo'), fetch_redirect_response=False)
        self.user.refresh_from_db()
        self.assertEqual(self.user.get_full_name(), 'Marco Bianchi')
        self.assertEqual(self.user.azienda, 'Eventi Srl')

    def test_email_obbligatoria(self):
        response = self.client.post(reverse('users:profilo'), {'first_name': 'Marco', 'email': ''})

        self.assertEqual(response.status_code, 200)
        self.assertIn('email', response.context['form'].errors)

    def test_impostazioni_notifiche(self):
        response = self.client.post(
            reverse('users:impostazioni'),
            {'notifiche_email': 'on', 'giorni_preavviso_scadenze': 14},
        )

        self.assertRedirects(response, reverse('users:impostazioni'), fetch_redirect_response=False)
        self.user.refresh_from_db()
        self.assertTrue(self.user.notifiche_email)
        self.assertFalse(self.user.notifiche_scadenze)
        self.assertEqual(self.user.giorni_preavviso_scadenze, 14)

    def test_preavviso_fuori_intervallo(self):
        response = self.client.post(reverse('users:impostazioni'), {'giorni_preavviso_scadenze': 90})

        self.assertEqual(response.status_code, 200)
        self.assertIn('giorni_preavviso_scadenze', response.context['form'].errors)


class SetAdminCommandTestCase(TestCase):

    def test_promuove_per_email(self):
        user = crea_utente(username='luca', superuser=False, email='luca@example.com')
        out = StringIO()

        call_command('set_admin', 'LUCA@example.com', stdout=out)

        user.refresh_from_db()
        self.assertTrue(user.is_superuser)
        self.assertTrue(user.is_staff)
        self.assertEqual(user.ruolo, 'admin')
        self.assertTrue(user.is_admin)
        self.assertIn('luca', out.getvalue())

    def test_utente_inesistente(self):
        with self.assertRaises(CommandError):
            call_command('set_admin', 'nessuno')

        self.assertFalse(User.objects.filter(is_superuser=True).exists())
