"""
Promuove un utente ad amministratore.

Usage:
    python manage.py set_admin mario.rossi
    python manage.py set_admin mario@example.com
"""

from django.core.management.base import BaseCommand, CommandError
from django.db.models import Q

from users.models import User


class Command(BaseCommand):
    help = "Imposta il ruolo admin (staff + superuser) per un utente esistente"

    def add_arguments(self, parser):
        parser.add_argument("utente", type=str, help="Username o email dell'utente")

    def handle(self, *args, **options):
        identificativo = options["utente"].strip()
        utenti = User.objects.filter(
            Q(username=identificativo) | Q(email__iexact=identificativo)
        )

        if not utenti.exists():
            raise CommandError(f"Utente non trovato: {identificativo}")
        if utenti.count() > 1:
            raise CommandError(f"Più utenti corrispondono a {identificativo}, usa lo username")

        user = utenti.get()
        user.promuovi_admin()
        self.stdout.write(self.style.SUCCESS(f"Utente {user.username} ora è amministratore"))
