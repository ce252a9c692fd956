"""
Ricalcola lo stato dei pagamenti staff (pending -> overdue).

Usage:
    python manage.py aggiorna_pagamenti_staff
    python manage.py aggiorna_pagamenti_staff --data 2026-01-31
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from staff.services import aggiorna_stati_pagamento


class Command(BaseCommand):
    help = "Aggiorna lo stato dei pagamenti staff in base alla scadenza"

    def add_arguments(self, parser):
        parser.add_argument("--data", type=str, help="Data di riferimento (YYYY-MM-DD), default oggi")

    def handle(self, *args, **options):
        oggi = None
        if options.get("data"):
            try:
                oggi = date.fromisoformat(options["data"])
            except ValueError:
                raise CommandError(f"Data non valida: {options['data']}")

        aggiornate = aggiorna_stati_pagamento(oggi=oggi)
        self.stdout.write(self.style.SUCCESS(f"Assegnazioni aggiornate: {aggiornate}"))
