"""
Celery Configuration - EventHub

Configurazione Celery per tasks asincroni e scheduling.
"""

import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('eventhub')

app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()

# Celery Beat Schedule - Tasks periodici
app.conf.beat_schedule = {
    'aggiorna-stati-pagamento-staff': {
        'task': 'staff.tasks.aggiorna_stati_pagamento_task',
        'schedule': crontab(hour=1, minute=0),
    },
    'aggiorna-scadenze-scadute': {
        'task': 'scadenze.tasks.aggiorna_scadenze_scadute_task',
        'schedule': crontab(hour=1, minute=15),
    },
    'promemoria-scadenze': {
        'task': 'scadenze.tasks.invia_promemoria_scadenze_task',
        'schedule': crontab(hour=8, minute=0),
    },
    'invia-comunicazioni-programmate': {
        'task': 'comunicazioni.tasks.invia_comunicazioni_programmate_task',
        'schedule': 300.0,  # 5 minuti
        'options': {
            'expires': 240,
        }
    },
}

app.conf.timezone = 'Europe/Rome'
