"""
Helper condivisi dai test delle app.
"""

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone


def crea_utente(username='organizzatore', superuser=True, **kwargs):
    User = get_user_model()
    if superuser:
        return User.objects.create_superuser(
            username=username,
            email=kwargs.pop('email', f'{username}@example.com'),
            password=kwargs.pop('password', 'password123'),
            **kwargs,
        )
    return User.objects.create_user(
        username=username,
        email=kwargs.pop('email', f'{username}@example.com'),
        password=kwargs.pop('password', 'password123'),
        **kwargs,
    )


def crea_evento(**kwargs):
    from eventi.models import Evento

    inizio = kwargs.pop('data_inizio', timezone.localdate() + timedelta(days=30))
    dati = {
        'nome': 'Congresso Nazionale di Cardiologia',
        'tipo': 'congresso_medico',
        'luogo': 'Milano, MiCo',
        'data_inizio': inizio,
        'data_fine': kwargs.pop('data_fine', inizio + timedelta(days=2)),
        'capienza': 200,
        'budget': Decimal('50000.00'),
        'stato': 'upcoming',
    }
    dati.update(kwargs)
    return Evento.objects.create(**dati)
