"""
Models per app comunicazioni.

- TemplateEmail: modelli riutilizzabili con variabili {{nome}}
- Comunicazione: messaggio inviato (o programmato) ai destinatari di un evento
"""

import re

from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel

VARIABILE_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


# ============================================================================
# TEMPLATE EMAIL
# ============================================================================

class TemplateEmail(BaseModel):
    """
    Modello di email. Con evento vuoto il template è globale.
    """

    CATEGORIA_CHOICES = [
        ('welcome', 'Benvenuto'),
        ('reminder', 'Promemoria'),
        ('confirmation', 'Conferma'),
        ('update', 'Aggiornamento'),
        ('thank_you', 'Ringraziamento'),
        ('custom', 'Personalizzato'),
    ]

    nome = models.CharField("Nome", max_length=200)
    descrizione = models.TextField("Descrizione", blank=True)
    oggetto = models.CharField("Oggetto", max_length=300)
    corpo = models.TextField("Corpo")
    categoria = models.CharField("Categoria", max_length=20, choices=CATEGORIA_CHOICES, default='custom')
    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='template_email',
        verbose_name="Evento",
    )
    predefinito = models.BooleanField("Predefinito", default=False)
    utilizzi = models.PositiveIntegerField("Utilizzi", default=0, editable=False)
    ultimo_utilizzo = models.DateTimeField("Ultimo utilizzo", null=True, blank=True, editable=False)

    class Meta:
        verbose_name = "Template Email"
        verbose_name_plural = "Template Email"
        ordering = ['-predefinito', 'nome']

    def __str__(self):
        return self.nome

    def get_absolute_url(self):
        return reverse('comunicazioni:template_update', kwargs={'pk': self.pk})

    @property
    def variabili(self):
        """Variabili {{...}} usate in oggetto e corpo, in ordine di comparsa"""
        trovate = VARIABILE_RE.findall(f"{self.oggetto}\n{self.corpo}")
        return list(dict.fromkeys(trovate))

    def registra_utilizzo(self):
        self.utilizzi = models.F('utilizzi') + 1
        self.ultimo_utilizzo = timezone.now()
        self.save(update_fields=['utilizzi', 'ultimo_utilizzo', 'updated_at'])
        self.refresh_from_db(fields=['utilizzi'])


# ============================================================================
# COMUNICAZIONE
# ============================================================================

class Comunicazione(BaseModel):
    """
    Comunicazione verso partecipanti, relatori, sponsor o staff di un evento.
    """

    TIPO_CHOICES = [
        ('email', 'Email'),
        ('sms', 'SMS'),
        ('push', 'Notifica Push'),
        ('social', 'Social'),
        ('announcement', 'Annuncio'),
    ]

    DESTINATARI_CHOICES = [
        ('all_participants', 'Tutti i partecipanti'),
        ('confirmed_only', 'Solo partecipanti confermati'),
        ('speakers', 'Relatori'),
        ('sponsors', 'Sponsor'),
        ('staff', 'Staff'),
        ('custom', 'Indirizzi personalizzati'),
    ]

    STATO_CHOICES = [
        ('draft', 'Bozza'),
        ('scheduled', 'Programmata'),
        ('sending', 'In invio'),
        ('sent', 'Inviata'),
        ('failed', 'Fallita'),
        ('cancelled', 'Annullata'),
    ]

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='comunicazioni',
        verbose_name="Evento",
    )
    oggetto = models.CharField("Oggetto", max_length=300)
    corpo = models.TextField("Messaggio")
    tipo = models.CharField("Tipo", max_length=20, choices=TIPO_CHOICES, default='email')

    destinatari = models.CharField(
        "Destinatari", max_length=20, choices=DESTINATARI_CHOICES, default='all_participants'
    )
    email_personalizzate = models.TextField(
        "Email personalizzate",
        blank=True,
        help_text="Un indirizzo per riga (solo destinatari personalizzati)",
    )
    numero_destinatari = models.PositiveIntegerField("Numero destinatari", default=0)
    invii_falliti = models.PositiveIntegerField("Invii falliti", default=0)

    programmata_il = models.DateTimeField("Programmata per", null=True, blank=True)
    inviata_il = models.DateTimeField("Inviata il", null=True, blank=True)
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='draft')

    template = models.ForeignKey(
        TemplateEmail,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='comunicazioni',
        verbose_name="Template",
    )
    errori_invio = models.TextField("Errori di invio", blank=True)

    class Meta:
        verbose_name = "Comunicazione"
        verbose_name_plural = "Comunicazioni"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['stato', 'programmata_il']),
        ]

    def __str__(self):
        return self.oggetto

    def get_absolute_url(self):
        return reverse('comunicazioni:comunicazione_detail', kwargs={'pk': self.pk})

    @property
    def lista_email_personalizzate(self):
        return [e.strip() for e in re.split(r"[\n,;]+", self.email_personalizzate) if e.strip()]

    @property
    def is_eliminabile(self):
        return self.stato != 'sending'

    @property
    def is_modificabile(self):
        return self.stato in ('draft', 'scheduled')
