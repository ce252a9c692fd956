"""
Models per app staff.

ARCHITETTURA:
- MembroStaff: anagrafica del personale (hostess, tecnici, fotografi...)
- AssegnazioneStaff: turno di lavoro su un evento con termini e stato
  del pagamento. Lo stato pagamento è derivato (vedi staff.pagamenti).
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.urls import reverse

from core.models import AllegatiMixin, BaseModel, SearchMixin

IMPORTO_MASSIMO = Decimal('1000000')


# ============================================================================
# MEMBRO STAFF
# ============================================================================

class MembroStaff(BaseModel, AllegatiMixin, SearchMixin):
    """
    Persona dello staff disponibile per gli eventi.
    """

    RUOLO_CHOICES = [
        ('hostess', 'Hostess'),
        ('steward', 'Steward'),
        ('driver', 'Autista'),
        ('av_tech', 'Tecnico AV'),
        ('photographer', 'Fotografo'),
        ('videographer', 'Videomaker'),
        ('security', 'Sicurezza'),
        ('catering', 'Catering'),
        ('cleaning', 'Pulizie'),
        ('other', 'Altro'),
    ]

    METODO_PAGAMENTO_CHOICES = [
        ('bonifico', 'Bonifico'),
        ('contanti', 'Contanti'),
        ('paypal', 'PayPal'),
        ('altro', 'Altro'),
    ]

    nome = models.CharField("Nome", max_length=100)
    cognome = models.CharField("Cognome", max_length=100)
    email = models.EmailField("Email", unique=True)
    telefono = models.CharField("Telefono", max_length=30, blank=True)
    ruolo = models.CharField("Ruolo", max_length=20, choices=RUOLO_CHOICES, default='other')
    specializzazione = models.CharField("Specializzazione", max_length=200, blank=True)

    tariffa_oraria = models.DecimalField(
        "Tariffa Oraria",
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    metodo_pagamento_preferito = models.CharField(
        "Metodo di pagamento", max_length=20, choices=METODO_PAGAMENTO_CHOICES, blank=True
    )
    iban = models.CharField("IBAN", max_length=34, blank=True)

    attivo = models.BooleanField("Disponibile", default=True)
    tags = models.CharField("Tag", max_length=300, blank=True, help_text="Separati da virgola")
    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Membro Staff"
        verbose_name_plural = "Staff"
        ordering = ['cognome', 'nome']
        indexes = [
            models.Index(fields=['ruolo', 'attivo']),
        ]

    def __str__(self):
        return f"{self.cognome} {self.nome}"

    def get_absolute_url(self):
        return reverse('staff:staff_detail', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['nome', 'cognome', 'email', 'specializzazione', 'tags']

    def get_search_result_display(self):
        return f"{self.cognome} {self.nome} - {self.get_ruolo_display()}"

    @property
    def nome_completo(self):
        return f"{self.nome} {self.cognome}"

    @property
    def lista_tag(self):
        return [t.strip() for t in self.tags.split(',') if t.strip()]


# ============================================================================
# ASSEGNAZIONE
# ============================================================================

class AssegnazioneStaff(BaseModel, AllegatiMixin):
    """
    Blocco di lavoro di un membro dello staff su un evento.
    """

    STATO_ASSEGNAZIONE_CHOICES = [
        ('requested', 'Richiesta'),
        ('confirmed', 'Confermata'),
        ('declined', 'Rifiutata'),
        ('completed', 'Completata'),
        ('cancelled', 'Annullata'),
    ]

    STATO_PAGAMENTO_CHOICES = [
        ('not_due', 'Non dovuto'),
        ('pending', 'In attesa'),
        ('overdue', 'Scaduto'),
        ('paid', 'Pagato'),
    ]

    TERMINI_PAGAMENTO_CHOICES = [
        ('custom', 'Personalizzato'),
        ('immediate', 'Immediato'),
        ('30_days', '30 giorni'),
        ('60_days', '60 giorni'),
        ('90_days', '90 giorni'),
    ]

    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.CASCADE,
        related_name='assegnazioni_staff',
        verbose_name="Evento",
    )
    staff = models.ForeignKey(
        MembroStaff,
        on_delete=models.CASCADE,
        related_name='assegnazioni',
        verbose_name="Membro Staff",
    )

    # ========== TURNO ==========
    inizio = models.DateTimeField("Inizio")
    fine = models.DateTimeField("Fine")
    stato_assegnazione = models.CharField(
        "Stato Assegnazione",
        max_length=20,
        choices=STATO_ASSEGNAZIONE_CHOICES,
        default='requested',
    )

    # ========== PAGAMENTO ==========
    importo = models.DecimalField(
        "Importo",
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[
            MinValueValidator(Decimal('0.00'), "L'importo non può essere negativo"),
            MaxValueValidator(IMPORTO_MASSIMO, "Importo troppo elevato"),
        ],
    )
    termini_pagamento = models.CharField(
        "Termini Pagamento",
        max_length=20,
        choices=TERMINI_PAGAMENTO_CHOICES,
        default='custom',
    )
    stato_pagamento = models.CharField(
        "Stato Pagamento",
        max_length=20,
        choices=STATO_PAGAMENTO_CHOICES,
        default='not_due',
    )
    data_scadenza_pagamento = models.DateField("Scadenza Pagamento", null=True, blank=True)
    data_pagamento = models.DateField("Data Pagamento", null=True, blank=True)
    note_pagamento = models.TextField("Note Pagamento", blank=True)
    numero_fattura = models.CharField("Numero Fattura", max_length=100, blank=True)
    url_fattura = models.URLField("URL Fattura", max_length=500, blank=True)

    # ========== COLLEGAMENTO BUDGET ==========
    categoria_budget = models.ForeignKey(
        'budget.CategoriaBudget',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assegnazioni_staff',
        verbose_name="Categoria Budget",
    )
    voce_budget = models.OneToOneField(
        'budget.VoceBudget',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assegnazione_staff',
        verbose_name="Voce Budget",
    )

    note = models.TextField("Note", blank=True)

    class Meta:
        verbose_name = "Assegnazione Staff"
        verbose_name_plural = "Assegnazioni Staff"
        ordering = ['inizio']
        indexes = [
            models.Index(fields=['evento', 'stato_assegnazione']),
            models.Index(fields=['stato_pagamento', 'data_scadenza_pagamento']),
        ]

    def __str__(self):
        return f"{self.staff} @ {self.evento}"

    def get_absolute_url(self):
        return reverse('staff:assegnazione_detail', kwargs={'pk': self.pk})

    @property
    def ore(self):
        return round((self.fine - self.inizio).total_seconds() / 3600, 2)

    @property
    def is_pagata(self):
        return self.stato_pagamento == 'paid'

    def clean(self):
        super().clean()
        if self.inizio and self.fine and self.fine < self.inizio:
            raise ValidationError({
                'fine': "L'orario di fine deve essere successivo all'orario di inizio"
            })
        if self.categoria_budget_id and self.evento_id and self.categoria_budget.evento_id != self.evento_id:
            raise ValidationError({'categoria_budget': "La categoria non appartiene a questo evento"})
