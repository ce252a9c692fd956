"""
Models per app budget.

CategoriaBudget raggruppa le voci di un evento. importo_speso della
categoria e speso dell'evento sono somme derivate dalle voci.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import (
    MaxLengthValidator,
    MinLengthValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models
from django.urls import reverse

from core.models import BaseModel


# ============================================================================
# CATEGORIA
# ============================================================================

class CategoriaBudget(BaseModel):
    """
    Categoria di spesa (o di entrata) con importo allocato.
    """

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='categorie_budget',
        verbose_name="Evento",
    )
    nome = models.CharField(
        "Nome",
        max_length=100,
        validators=[MinLengthValidator(2, "Il nome deve avere almeno 2 caratteri")],
    )
    descrizione = models.TextField(
        "Descrizione",
        blank=True,
        validators=[MaxLengthValidator(500)],
    )
    importo_allocato = models.DecimalField(
        "Importo Allocato",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'), "L'importo non può essere negativo")],
    )
    importo_speso = models.DecimalField(
        "Importo Speso",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
    )
    colore = models.CharField(
        "Colore",
        max_length=7,
        default='#3B82F6',
        validators=[RegexValidator(r'^#[0-9A-Fa-f]{6}$', "Colore non valido (formato #RRGGBB)")],
    )
    icona = models.CharField("Icona", max_length=50, blank=True, help_text="Classe Bootstrap Icons")

    class Meta:
        verbose_name = "Categoria Budget"
        verbose_name_plural = "Categorie Budget"
        ordering = ['nome']

    def __str__(self):
        return self.nome

    def get_absolute_url(self):
        return reverse('eventi:evento_tab', kwargs={'pk': self.evento_id, 'tab': 'budget'})

    @property
    def residuo(self):
        return self.importo_allocato - self.importo_speso

    @property
    def percentuale_utilizzo(self):
        if not self.importo_allocato:
            return 0
        return int(round(self.importo_speso / self.importo_allocato * 100))

    @property
    def is_sforata(self):
        return self.importo_speso > self.importo_allocato


# ============================================================================
# VOCE
# ============================================================================

class VoceBudget(BaseModel):
    """
    Singola voce di spesa o di entrata.
    """

    TIPO_CHOICES = [
        ('expense', 'Uscita'),
        ('income', 'Entrata'),
    ]

    STATO_CHOICES = [
        ('planned', 'Pianificata'),
        ('approved', 'Approvata'),
        ('pending', 'In attesa di pagamento'),
        ('invoiced', 'Fatturata'),
        ('paid', 'Pagata'),
        ('cancelled', 'Annullata'),
    ]

    categoria = models.ForeignKey(
        CategoriaBudget,
        on_delete=models.CASCADE,
        related_name='voci',
        verbose_name="Categoria",
    )
    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='voci_budget',
        verbose_name="Evento",
    )
    descrizione = models.CharField(
        "Descrizione",
        max_length=500,
        validators=[MinLengthValidator(3, "La descrizione deve avere almeno 3 caratteri")],
    )
    tipo = models.CharField("Tipo", max_length=10, choices=TIPO_CHOICES, default='expense')

    # ========== IMPORTI ==========
    costo_stimato = models.DecimalField(
        "Costo Stimato",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'), "L'importo non può essere negativo")],
    )
    costo_effettivo = models.DecimalField(
        "Costo Effettivo",
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'), "L'importo non può essere negativo")],
    )
    quantita = models.PositiveIntegerField(
        "Quantità", default=1, validators=[MinValueValidator(1)]
    )

    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='planned')

    # ========== FORNITORE E FATTURA ==========
    fornitore = models.CharField("Fornitore", max_length=200, blank=True)
    numero_fattura = models.CharField("Numero Fattura", max_length=100, blank=True)
    url_fattura = models.URLField("URL Fattura", max_length=500, blank=True)
    data_scadenza = models.DateField("Scadenza Pagamento", null=True, blank=True)
    data_pagamento = models.DateField("Data Pagamento", null=True, blank=True)

    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Voce Budget"
        verbose_name_plural = "Voci Budget"
        ordering = ['categoria__nome', '-created_at']
        indexes = [
            models.Index(fields=['evento', 'stato']),
            models.Index(fields=['stato', 'data_scadenza']),
        ]

    def __str__(self):
        return self.descrizione

    def get_absolute_url(self):
        return reverse('eventi:evento_tab', kwargs={'pk': self.evento_id, 'tab': 'budget'})

    @property
    def scostamento(self):
        """Differenza tra costo effettivo e stimato"""
        if self.costo_effettivo is None:
            return None
        return self.costo_effettivo - self.costo_stimato

    @property
    def is_entrata(self):
        return self.tipo == 'income'

    def clean(self):
        super().clean()
        if self.categoria_id and self.evento_id and self.categoria.evento_id != self.evento_id:
            raise ValidationError({'categoria': "La categoria non appartiene a questo evento"})

    def save(self, *args, **kwargs):
        if self.categoria_id and not self.evento_id:
            self.evento_id = self.categoria.evento_id
        super().save(*args, **kwargs)
