"""
Aggiorna le scadenze scadute e, su richiesta, invia i promemoria.

Usage:
    python manage.py aggiorna_scadenze
    python manage.py aggiorna_scadenze --promemoria
"""

from django.core.management.base import BaseCommand

from scadenze.services import aggiorna_scadenze_scadute, invia_promemoria_scadenze


class Command(BaseCommand):
    help = "Porta a 'scaduta' le scadenze aperte con data passata"

    def add_arguments(self, parser):
        parser.add_argument(
            "--promemoria",
            action="store_true",
            help="Invia anche i promemoria delle scadenze in arrivo",
        )

    def handle(self, *args, **options):
        aggiornate = aggiorna_scadenze_scadute()
        self.stdout.write(self.style.SUCCESS(f"Scadenze aggiornate: {aggiornate}"))

        if options["promemoria"]:
            esito = invia_promemoria_scadenze()
            self.stdout.write(
                f"Promemoria inviati: {esito['inviati']}, saltati: {esito['saltati']}, errori: {esito['errori']}"
            )
