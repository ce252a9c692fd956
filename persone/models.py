"""
Models per app persone.

- Partecipante: iscritto all'evento, con check-in via QR
- Relatore: speaker con intervento e logistica
- Sponsor: sponsorizzazione collegata a una voce di entrata del budget
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import AllegatiMixin, BaseModel, SearchMixin


# ============================================================================
# PARTECIPANTE
# ============================================================================

class Partecipante(BaseModel, AllegatiMixin, SearchMixin):
    """
    Partecipante registrato a un evento.
    """

    STATO_CHOICES = [
        ('registered', 'Registrato'),
        ('confirmed', 'Confermato'),
        ('cancelled', 'Annullato'),
        ('attended', 'Presente'),
        ('no_show', 'Assente'),
    ]

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='partecipanti',
        verbose_name="Evento",
    )

    # ========== ANAGRAFICA ==========
    nome = models.CharField("Nome", max_length=100)
    cognome = models.CharField("Cognome", max_length=100)
    email = models.EmailField("Email")
    telefono = models.CharField("Telefono", max_length=30, blank=True)
    azienda = models.CharField("Azienda", max_length=200, blank=True)
    ruolo_aziendale = models.CharField("Ruolo", max_length=100, blank=True)

    # ========== ISCRIZIONE ==========
    data_registrazione = models.DateTimeField("Data Registrazione", default=timezone.now)
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='registered')
    tipo_biglietto = models.CharField("Tipo Biglietto", max_length=50, blank=True)

    # ========== CHECK-IN ==========
    checked_in = models.BooleanField("Check-in effettuato", default=False)
    orario_checkin = models.DateTimeField("Orario Check-in", null=True, blank=True)

    # ========== ESIGENZE ==========
    esigenze_alimentari = models.CharField("Esigenze Alimentari", max_length=300, blank=True)
    esigenze_speciali = models.TextField("Esigenze Speciali", blank=True)
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Partecipante"
        verbose_name_plural = "Partecipanti"
        ordering = ['cognome', 'nome']
        constraints = [
            models.UniqueConstraint(fields=['evento', 'email'], name='partecipante_email_unica_per_evento'),
        ]
        indexes = [
            models.Index(fields=['evento', 'stato']),
            models.Index(fields=['evento', 'checked_in']),
        ]

    def __str__(self):
        return self.nome_completo

    def get_absolute_url(self):
        return reverse('persone:partecipante_detail', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['nome', 'cognome', 'email', 'azienda']

    def get_search_result_display(self):
        return f"{self.nome_completo} - {self.evento}"

    @property
    def nome_completo(self):
        return f"{self.nome} {self.cognome}"

    def registra_checkin(self):
        self.checked_in = True
        self.orario_checkin = timezone.now()
        if self.stato in ('registered', 'confirmed'):
            self.stato = 'attended'
        self.save(update_fields=['checked_in', 'orario_checkin', 'stato', 'updated_at'])

    def annulla_checkin(self):
        self.checked_in = False
        self.orario_checkin = None
        if self.stato == 'attended':
            self.stato = 'confirmed'
        self.save(update_fields=['checked_in', 'orario_checkin', 'stato', 'updated_at'])


# ============================================================================
# RELATORE
# ============================================================================

class Relatore(BaseModel, AllegatiMixin, SearchMixin):
    """
    Relatore invitato a un evento.
    """

    STATO_CHOICES = [
        ('invited', 'Invitato'),
        ('confirmed', 'Confermato'),
        ('cancelled', 'Annullato'),
        ('attended', 'Presente'),
    ]

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='relatori',
        verbose_name="Evento",
    )

    nome = models.CharField("Nome", max_length=100)
    cognome = models.CharField("Cognome", max_length=100)
    email = models.EmailField("Email")
    telefono = models.CharField("Telefono", max_length=30, blank=True)
    azienda = models.CharField("Azienda / Ente", max_length=200, blank=True)
    ruolo_aziendale = models.CharField("Ruolo", max_length=100, blank=True)
    bio = models.TextField("Biografia", blank=True)

    # ========== INTERVENTO ==========
    titolo_intervento = models.CharField("Titolo Intervento", max_length=300, blank=True)
    descrizione_intervento = models.TextField("Descrizione Intervento", blank=True)
    durata_intervento = models.PositiveIntegerField(
        "Durata (minuti)",
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )
    data_intervento = models.DateTimeField("Data Intervento", null=True, blank=True)

    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='invited')

    # ========== LOGISTICA ==========
    esigenze_viaggio = models.TextField("Viaggio", blank=True)
    esigenze_alloggio = models.TextField("Alloggio", blank=True)
    esigenze_alimentari = models.CharField("Esigenze Alimentari", max_length=300, blank=True)
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Relatore"
        verbose_name_plural = "Relatori"
        ordering = ['cognome', 'nome']

    def __str__(self):
        return self.nome_completo

    def get_absolute_url(self):
        return reverse('eventi:evento_tab', kwargs={'pk': self.evento_id, 'tab': 'relatori'})

    @classmethod
    def get_search_fields(cls):
        return ['nome', 'cognome', 'email', 'azienda', 'titolo_intervento']

    def get_search_result_display(self):
        return f"{self.nome_completo} - {self.titolo_intervento or self.evento}"

    @property
    def nome_completo(self):
        return f"{self.nome} {self.cognome}"


# ============================================================================
# SPONSOR
# ============================================================================

class Sponsor(BaseModel, AllegatiMixin, SearchMixin):
    """
    Sponsor di un evento. L'importo genera una voce di entrata nel budget.
    """

    LIVELLO_CHOICES = [
        ('platinum', 'Platinum'),
        ('gold', 'Gold'),
        ('silver', 'Silver'),
        ('bronze', 'Bronze'),
        ('partner', 'Partner'),
    ]

    STATO_CHOICES = [
        ('prospect', 'Potenziale'),
        ('negotiating', 'In trattativa'),
        ('confirmed', 'Confermato'),
        ('cancelled', 'Annullato'),
    ]

    STATO_PAGAMENTO_CHOICES = [
        ('pending', 'Da pagare'),
        ('partial', 'Parziale'),
        ('paid', 'Pagato'),
    ]

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='sponsor',
        verbose_name="Evento",
    )

    nome = models.CharField("Nome Sponsor", max_length=200)
    livello = models.CharField("Livello", max_length=20, choices=LIVELLO_CHOICES, default='partner')
    sito_web = models.URLField("Sito Web", blank=True)
    logo = models.ImageField("Logo", upload_to='sponsor/loghi/', blank=True)

    # ========== CONTATTO ==========
    referente = models.CharField("Referente", max_length=200, blank=True)
    email = models.EmailField("Email", blank=True)
    telefono = models.CharField("Telefono", max_length=30, blank=True)

    # ========== ACCORDO ==========
    importo = models.DecimalField(
        "Importo Sponsorizzazione",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'), "L'importo non può essere negativo")],
    )
    benefit = models.TextField("Benefit concordati", blank=True)
    stand = models.CharField("Stand / Posizione", max_length=100, blank=True)
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='prospect')
    contratto_firmato = models.BooleanField("Contratto firmato", default=False)
    data_contratto = models.DateField("Data Contratto", null=True, blank=True)

    # ========== PAGAMENTO ==========
    stato_pagamento = models.CharField(
        "Stato Pagamento", max_length=20, choices=STATO_PAGAMENTO_CHOICES, default='pending'
    )
    data_pagamento = models.DateField("Data Pagamento", null=True, blank=True)

    voce_budget = models.OneToOneField(
        'budget.VoceBudget',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sponsor',
        verbose_name="Voce Budget",
    )
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Sponsor"
        verbose_name_plural = "Sponsor"
        ordering = ['livello', 'nome']

    def __str__(self):
        return self.nome

    def get_absolute_url(self):
        return reverse('eventi:evento_tab', kwargs={'pk': self.evento_id, 'tab': 'sponsor'})

    @classmethod
    def get_search_fields(cls):
        return ['nome', 'referente', 'email']

    def get_search_result_display(self):
        return f"{self.nome} ({self.get_livello_display()}) - {self.evento}"

    @property
    def importo_incassato(self):
        """Importo effettivamente incassato in base allo stato pagamento"""
        if self.stato_pagamento == 'paid':
            return self.importo
        if self.stato_pagamento == 'partial':
            return (self.importo / 2).quantize(Decimal('0.01'))
        return Decimal('0.00')
