"""
Forms per app staff.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column
from crispy_forms.bootstrap import TabHolder, Tab
from django_select2.forms import Select2MultipleWidget

from budget.models import CategoriaBudget

from .models import AssegnazioneStaff, MembroStaff

DATETIME_WIDGET = forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M')
DATE_WIDGET = forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d')


# ============================================================================
# MEMBRO STAFF
# ============================================================================

class MembroStaffForm(forms.ModelForm):

    class Meta:
        model = MembroStaff
        fields = [
            'nome',
            'cognome',
            'email',
            'telefono',
            'ruolo',
            'specializzazione',
            'tariffa_oraria',
            'metodo_pagamento_preferito',
            'iban',
            'attivo',
            'tags',
            'note',
        ]
        widgets = {
            'note': forms.Textarea(attrs={'rows': 3}),
            'tariffa_oraria': forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            TabHolder(
                Tab(
                    'Anagrafica',
                    Row(
                        Column('nome', css_class='col-md-6'),
                        Column('cognome', css_class='col-md-6'),
                    ),
                    Row(
                        Column('email', css_class='col-md-6'),
                        Column('telefono', css_class='col-md-6'),
                    ),
                    Row(
                        Column('ruolo', css_class='col-md-6'),
                        Column('specializzazione', css_class='col-md-6'),
                    ),
                    'attivo',
                ),
                Tab(
                    'Pagamento',
                    Row(
                        Column('tariffa_oraria', css_class='col-md-4'),
                        Column('metodo_pagamento_preferito', css_class='col-md-4'),
                        Column('iban', css_class='col-md-4'),
                    ),
                ),
                Tab(
                    'Note',
                    'tags',
                    'note',
                ),
            )
        )

    def clean_email(self):
        return self.cleaned_data['email'].strip().lower()


class FiltroStaffForm(forms.Form):
    q = forms.CharField(label="Cerca", required=False)
    ruolo = forms.ChoiceField(
        label="Ruolo",
        choices=[('', 'Tutti i ruoli')] + MembroStaff.RUOLO_CHOICES,
        required=False,
    )
    attivo = forms.ChoiceField(
        label="Disponibilità",
        choices=[('', 'Tutti'), ('si', 'Disponibili'), ('no', 'Non disponibili')],
        required=False,
    )

    def filter_queryset(self, queryset):
        if not self.is_valid():
            return queryset

        from django.db.models import Q

        q = self.cleaned_data.get('q')
        if q:
            queryset = queryset.filter(
                Q(nome__icontains=q)
                | Q(cognome__icontains=q)
                | Q(email__icontains=q)
                | Q(specializzazione__icontains=q)
                | Q(tags__icontains=q)
            )
        if self.cleaned_data.get('ruolo'):
            queryset = queryset.filter(ruolo=self.cleaned_data['ruolo'])
        if self.cleaned_data.get('attivo') == 'si':
            queryset = queryset.filter(attivo=True)
        elif self.cleaned_data.get('attivo') == 'no':
            queryset = queryset.filter(attivo=False)
        return queryset


# ============================================================================
# ASSEGNAZIONI
# ============================================================================

class AssegnazioneStaffForm(forms.ModelForm):
    """
    Assegnazione di un membro a un evento. Categoria budget limitata alle
    categorie dell'evento.
    """

    class Meta:
        model = AssegnazioneStaff
        fields = [
            'staff',
            'inizio',
            'fine',
            'stato_assegnazione',
            'importo',
            'termini_pagamento',
            'data_scadenza_pagamento',
            'categoria_budget',
            'note_pagamento',
            'note',
        ]
        widgets = {
            'inizio': DATETIME_WIDGET,
            'fine': DATETIME_WIDGET,
            'data_scadenza_pagamento': DATE_WIDGET,
            'importo': forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
            'note_pagamento': forms.Textarea(attrs={'rows': 2}),
            'note': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        evento = evento or getattr(self.instance, 'evento', None)

        staff_qs = MembroStaff.objects.filter(attivo=True)
        if self.instance.pk:
            staff_qs = MembroStaff.objects.filter(pk=self.instance.staff_id) | staff_qs
        self.fields['staff'].queryset = staff_qs.order_by('cognome', 'nome')
        self.fields['categoria_budget'].queryset = (
            CategoriaBudget.objects.filter(evento=evento) if evento else CategoriaBudget.objects.none()
        )
        self.fields['categoria_budget'].help_text = (
            "Con un importo, crea automaticamente la voce di spesa nel budget"
        )
        self.fields['data_scadenza_pagamento'].help_text = (
            "Usata solo con termini personalizzati"
        )

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Fieldset(
                "Turno",
                'staff',
                Row(
                    Column('inizio', css_class='col-md-4'),
                    Column('fine', css_class='col-md-4'),
                    Column('stato_assegnazione', css_class='col-md-4'),
                ),
            ),
            Fieldset(
                "Pagamento",
                Row(
                    Column('importo', css_class='col-md-4'),
                    Column('termini_pagamento', css_class='col-md-4'),
                    Column('data_scadenza_pagamento', css_class='col-md-4'),
                ),
                'categoria_budget',
                'note_pagamento',
            ),
            'note',
        )

    def clean(self):
        cleaned_data = super().clean()
        inizio = cleaned_data.get('inizio')
        fine = cleaned_data.get('fine')
        if inizio and fine and fine < inizio:
            self.add_error('fine', "L'orario di fine deve essere successivo all'orario di inizio")
        return cleaned_data


class AssegnazioniMultipleForm(forms.Form):
    """Assegnazione dello stesso turno a più membri dello staff"""

    staff = forms.ModelMultipleChoiceField(
        label="Membri Staff",
        queryset=MembroStaff.objects.filter(attivo=True).order_by('cognome', 'nome'),
        widget=Select2MultipleWidget(attrs={
            'data-placeholder': 'Seleziona membri dello staff...',
            'class': 'form-control',
        }),
    )
    inizio = forms.DateTimeField(label="Inizio", widget=DATETIME_WIDGET)
    fine = forms.DateTimeField(label="Fine", widget=DATETIME_WIDGET)
    importo = forms.DecimalField(
        label="Importo", required=False, min_value=0, max_digits=10, decimal_places=2
    )
    termini_pagamento = forms.ChoiceField(
        label="Termini Pagamento",
        choices=AssegnazioneStaff.TERMINI_PAGAMENTO_CHOICES,
        initial='custom',
    )
    data_scadenza_pagamento = forms.DateField(label="Scadenza Pagamento", required=False, widget=DATE_WIDGET)
    categoria_budget = forms.ModelChoiceField(
        label="Categoria Budget", queryset=CategoriaBudget.objects.none(), required=False
    )
    note = forms.CharField(label="Note Pagamento", required=False, widget=forms.Textarea(attrs={'rows': 2}))

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        if evento is not None:
            self.fields['categoria_budget'].queryset = CategoriaBudget.objects.filter(evento=evento)

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            'staff',
            Row(
                Column('inizio', css_class='col-md-6'),
                Column('fine', css_class='col-md-6'),
            ),
            Row(
                Column('importo', css_class='col-md-4'),
                Column('termini_pagamento', css_class='col-md-4'),
                Column('data_scadenza_pagamento', css_class='col-md-4'),
            ),
            'categoria_budget',
            'note',
        )


# ============================================================================
# PAGAMENTI
# ============================================================================

class SegnaPagatoForm(forms.Form):
    data_pagamento = forms.DateField(label="Data Pagamento", widget=DATE_WIDGET)
    note = forms.CharField(label="Note", required=False, widget=forms.Textarea(attrs={'rows': 2}))
    numero_fattura = forms.CharField(label="Numero Fattura", required=False, max_length=100)
    url_fattura = forms.URLField(label="URL Fattura", required=False, max_length=500)


class PosticipaPagamentoForm(forms.Form):
    nuova_scadenza = forms.DateField(label="Nuova Scadenza", widget=DATE_WIDGET)
    motivo = forms.CharField(label="Motivo", required=False, widget=forms.Textarea(attrs={'rows': 2}))


class AnnullaPagamentoForm(forms.Form):
    motivo = forms.CharField(label="Motivo", required=False, widget=forms.Textarea(attrs={'rows': 2}))


class StatoAssegnazioneForm(forms.Form):
    stato = forms.ChoiceField(choices=AssegnazioneStaff.STATO_ASSEGNAZIONE_CHOICES)
