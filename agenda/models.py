"""
Models per app agenda.
"""

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel


class SessioneAgenda(BaseModel):
    """
    Sessione del programma di un evento (keynote, talk, workshop...).
    """

    TIPO_CHOICES = [
        ('keynote', 'Keynote'),
        ('talk', 'Intervento'),
        ('workshop', 'Workshop'),
        ('panel', 'Tavola Rotonda'),
        ('networking', 'Networking'),
        ('break', 'Pausa'),
        ('other', 'Altro'),
    ]

    STATO_CHOICES = [
        ('scheduled', 'Programmata'),
        ('ongoing', 'In corso'),
        ('completed', 'Conclusa'),
        ('cancelled', 'Annullata'),
    ]

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='sessioni',
        verbose_name="Evento",
    )
    titolo = models.CharField(
        "Titolo",
        max_length=300,
        validators=[MinLengthValidator(3, "Il titolo deve avere almeno 3 caratteri")],
    )
    descrizione = models.TextField("Descrizione", blank=True)
    tipo = models.CharField("Tipo", max_length=20, choices=TIPO_CHOICES, default='talk')

    # ========== ORARI ==========
    inizio = models.DateTimeField("Inizio")
    fine = models.DateTimeField("Fine")
    durata = models.PositiveIntegerField("Durata (minuti)", default=0, editable=False)

    # ========== LUOGO ==========
    sala = models.CharField("Sala", max_length=100, blank=True)
    luogo = models.CharField("Luogo", max_length=200, blank=True)
    capienza_massima = models.PositiveIntegerField("Capienza Massima", null=True, blank=True)

    relatori = models.ManyToManyField(
        'persone.Relatore',
        blank=True,
        related_name='sessioni',
        verbose_name="Relatori",
    )

    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='scheduled')
    pubblica = models.BooleanField("Visibile nel programma pubblico", default=True)
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Sessione Agenda"
        verbose_name_plural = "Sessioni Agenda"
        ordering = ['inizio', 'sala']
        indexes = [
            models.Index(fields=['evento', 'inizio']),
        ]

    def __str__(self):
        return f"{self.titolo} ({timezone.localtime(self.inizio).strftime('%d/%m %H:%M')})"

    def get_absolute_url(self):
        return reverse('eventi:evento_tab', kwargs={'pk': self.evento_id, 'tab': 'agenda'})

    @property
    def giorno(self):
        """Giorno dell'evento (1 = primo giorno)"""
        return (timezone.localtime(self.inizio).date() - self.evento.data_inizio).days + 1

    @property
    def orario(self):
        inizio = timezone.localtime(self.inizio)
        fine = timezone.localtime(self.fine)
        return f"{inizio.strftime('%H:%M')} - {fine.strftime('%H:%M')}"

    def calcola_durata(self):
        return int((self.fine - self.inizio).total_seconds() // 60)

    def clean(self):
        super().clean()
        if self.inizio and self.fine and self.fine <= self.inizio:
            raise ValidationError({'fine': "L'orario di fine deve essere successivo all'orario di inizio"})

    def save(self, *args, **kwargs):
        if self.inizio and self.fine:
            self.durata = max(0, self.calcola_durata())
        super().save(*args, **kwargs)

    def sovrapposizioni(self):
        """Altre sessioni dello stesso evento nella stessa sala con orari sovrapposti."""
        if not self.sala:
            return SessioneAgenda.objects.none()
        return (
            SessioneAgenda.objects.filter(
                evento_id=self.evento_id,
                sala__iexact=self.sala,
                inizio__lt=self.fine,
                fine__gt=self.inizio,
            )
            .exclude(pk=self.pk)
            .exclude(stato='cancelled')
        )
