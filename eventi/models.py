"""
Models per app eventi.

Evento è il record principale: partecipanti, relatori, sponsor, staff,
budget, agenda, scadenze e comunicazioni appartengono a un evento.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import AllegatiMixin, BaseModelWithCode, SearchMixin
from core import utils


class Evento(BaseModelWithCode, AllegatiMixin, SearchMixin):
    """
    Evento gestito (congresso, conferenza, workshop, fiera).
    """

    CODE_PREFIX = "EVT"

    TIPO_CHOICES = [
        ('congresso_medico', 'Congresso Medico'),
        ('conferenza_aziendale', 'Conferenza Aziendale'),
        ('workshop', 'Workshop'),
        ('fiera', 'Fiera'),
    ]

    STATO_CHOICES = [
        ('draft', 'Bozza'),
        ('upcoming', 'In Programma'),
        ('active', 'In Corso'),
        ('completed', 'Completato'),
        ('cancelled', 'Annullato'),
    ]

    # ========== DATI EVENTO ==========
    nome = models.CharField(
        "Nome Evento",
        max_length=200,
        validators=[MinLengthValidator(3, "Il nome deve avere almeno 3 caratteri")],
    )
    tipo = models.CharField("Tipo Evento", max_length=30, choices=TIPO_CHOICES)
    descrizione = models.TextField("Descrizione", blank=True)
    luogo = models.CharField("Luogo", max_length=300)

    # ========== DATE ==========
    data_inizio = models.DateField("Data Inizio")
    data_fine = models.DateField("Data Fine")

    # ========== CAPIENZA E BUDGET ==========
    capienza = models.PositiveIntegerField(
        "Capienza Massima",
        validators=[MinValueValidator(1, "La capienza deve essere maggiore di 0")],
    )
    budget = models.DecimalField(
        "Budget",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'), "Il budget deve essere maggiore di 0")],
    )
    speso = models.DecimalField(
        "Speso",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
        help_text="Somma dei costi effettivi delle voci di spesa",
    )

    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='draft')

    class Meta:
        verbose_name = "Evento"
        verbose_name_plural = "Eventi"
        ordering = ['-data_inizio', '-created_at']
        indexes = [
            models.Index(fields=['stato']),
            models.Index(fields=['data_inizio']),
            models.Index(fields=['tipo']),
        ]

    def __str__(self):
        return self.nome

    def get_absolute_url(self):
        return reverse('eventi:evento_detail', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['codice', 'nome', 'luogo', 'descrizione']

    @classmethod
    def get_search_queryset(cls):
        return cls.objects.attivi()

    def get_search_result_display(self):
        return f"{self.nome} ({self.data_inizio.strftime('%d/%m/%Y')})"

    # ========== PROPERTIES ==========

    @property
    def iscritti(self):
        """Partecipanti non annullati"""
        return self.partecipanti.exclude(stato='cancelled').count()

    @property
    def posti_disponibili(self):
        return max(0, self.capienza - self.iscritti)

    @property
    def percentuale_riempimento(self):
        return utils.percentuale(self.iscritti, self.capienza)

    @property
    def budget_residuo(self):
        return self.budget - self.speso

    @property
    def giorni_mancanti(self):
        if not self.data_inizio:
            return None
        return utils.giorni_mancanti(self.data_inizio)

    @property
    def is_urgente(self):
        """True se l'evento inizia entro 7 giorni"""
        giorni = self.giorni_mancanti
        return giorni is not None and 0 <= giorni <= 7

    @property
    def progresso(self):
        return utils.progresso_evento(self.data_inizio, self.data_fine)

    @property
    def durata_giorni(self):
        return (self.data_fine - self.data_inizio).days + 1

    @property
    def is_modificabile(self):
        return self.stato not in ('completed', 'cancelled')

    @property
    def is_passato(self):
        return self.data_fine < timezone.localdate()

    # ========== METODI ==========

    def clean(self):
        super().clean()
        if self.data_inizio and self.data_fine and self.data_fine < self.data_inizio:
            raise ValidationError({
                'data_fine': "La data di fine deve essere uguale o successiva alla data di inizio"
            })

    def ricalcola_speso(self):
        """Somma dei costi effettivi delle voci di spesa dell'evento."""
        totale = self.voci_budget.filter(tipo='expense').aggregate(
            totale=models.Sum('costo_effettivo')
        )['totale'] or Decimal('0.00')
        self.speso = totale
        self.save(update_fields=['speso', 'updated_at'])
        return totale
