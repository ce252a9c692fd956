"""
Models per app scadenze.
"""

from datetime import timedelta

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel
from core import utils


class Scadenza(BaseModel):
    """
    Scadenza operativa di un evento (iscrizioni, pagamenti, logistica...).
    """

    CATEGORIA_CHOICES = [
        ('registration', 'Iscrizioni'),
        ('payment', 'Pagamenti'),
        ('submission', 'Invio Materiali'),
        ('logistics', 'Logistica'),
        ('marketing', 'Marketing'),
        ('other', 'Altro'),
    ]

    PRIORITA_CHOICES = [
        ('low', 'Bassa'),
        ('medium', 'Media'),
        ('high', 'Alta'),
        ('critical', 'Critica'),
    ]

    STATO_CHOICES = [
        ('pending', 'Da fare'),
        ('in_progress', 'In corso'),
        ('completed', 'Completata'),
        ('overdue', 'Scaduta'),
        ('cancelled', 'Annullata'),
    ]

    STATI_APERTI = ('pending', 'in_progress', 'overdue')

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='scadenze',
        verbose_name="Evento",
    )
    titolo = models.CharField("Titolo", max_length=200)
    descrizione = models.TextField("Descrizione", blank=True)
    data_scadenza = models.DateTimeField("Data Scadenza")
    categoria = models.CharField("Categoria", max_length=20, choices=CATEGORIA_CHOICES, default='other')
    priorita = models.CharField("Priorità", max_length=10, choices=PRIORITA_CHOICES, default='medium')
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='pending')

    # ========== COMPLETAMENTO ==========
    completata_il = models.DateTimeField("Completata il", null=True, blank=True)
    completata_da = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='scadenze_completate',
        verbose_name="Completata da",
    )

    # ========== PROMEMORIA ==========
    giorni_promemoria = models.PositiveSmallIntegerField(
        "Giorni promemoria",
        default=7,
        validators=[MinValueValidator(0), MaxValueValidator(90)],
        help_text="Giorni di anticipo per l'invio del promemoria",
    )
    notifica_inviata = models.BooleanField("Promemoria inviato", default=False)
    assegnata_a = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='scadenze_assegnate',
        verbose_name="Assegnata a",
    )
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Scadenza"
        verbose_name_plural = "Scadenze"
        ordering = ['data_scadenza']
        indexes = [
            models.Index(fields=['stato', 'data_scadenza']),
            models.Index(fields=['evento', 'stato']),
        ]

    def __str__(self):
        return f"{self.titolo} ({self.data_scadenza.strftime('%d/%m/%Y')})"

    def get_absolute_url(self):
        return reverse('eventi:evento_tab', kwargs={'pk': self.evento_id, 'tab': 'scadenze'})

    @property
    def is_aperta(self):
        return self.stato in self.STATI_APERTI

    @property
    def is_scaduta(self):
        return self.is_aperta and self.data_scadenza < timezone.now()

    @property
    def giorni_mancanti(self):
        return utils.giorni_mancanti(self.data_scadenza)

    @property
    def giorni_mancanti_display(self):
        return utils.formatta_giorni_mancanti(self.data_scadenza)

    @property
    def data_promemoria(self):
        return self.data_scadenza - timedelta(days=self.giorni_promemoria)

    def completa(self, user=None):
        self.stato = 'completed'
        self.completata_il = timezone.now()
        self.completata_da = user
        self.save(update_fields=['stato', 'completata_il', 'completata_da', 'updated_at'])

    def riapri(self):
        self.stato = 'overdue' if self.data_scadenza < timezone.now() else 'pending'
        self.completata_il = None
        self.completata_da = None
        self.save(update_fields=['stato', 'completata_il', 'completata_da', 'updated_at'])
