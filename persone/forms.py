"""
Forms per app persone.
"""

from django import forms
from django.db.models import Q
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Fieldset, Row, Column
from crispy_forms.bootstrap import TabHolder, Tab

from .models import Partecipante, Relatore, Sponsor

DATETIME_WIDGET = forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M')
DATE_WIDGET = forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d')


# ============================================================================
# PARTECIPANTI
# ============================================================================

class PartecipanteForm(forms.ModelForm):

    class Meta:
        model = Partecipante
        fields = [
            'nome',
            'cognome',
            'email',
            'telefono',
            'azienda',
            'ruolo_aziendale',
            'stato',
            'tipo_biglietto',
            'esigenze_alimentari',
            'esigenze_speciali',
            'note',
        ]
        widgets = {
            'esigenze_speciali': forms.Textarea(attrs={'rows': 2}),
            'note': forms.Textarea(attrs={'rows': 3}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Fieldset(
                "Anagrafica",
                Row(
                    Column('nome', css_class='col-md-6'),
                    Column('cognome', css_class='col-md-6'),
                ),
                Row(
                    Column('email', css_class='col-md-6'),
                    Column('telefono', css_class='col-md-6'),
                ),
                Row(
                    Column('azienda', css_class='col-md-6'),
                    Column('ruolo_aziendale', css_class='col-md-6'),
                ),
            ),
            Fieldset(
                "Iscrizione",
                Row(
                    Column('stato', css_class='col-md-6'),
                    Column('tipo_biglietto', css_class='col-md-6'),
                ),
                'esigenze_alimentari',
                'esigenze_speciali',
            ),
            'note',
        )

    def clean_email(self):
        return self.cleaned_data['email'].strip().lower()


class FiltroPartecipantiForm(forms.Form):
    q = forms.CharField(label="Cerca", required=False)
    stato = forms.ChoiceField(
        label="Stato",
        choices=[('', 'Tutti')] + Partecipante.STATO_CHOICES,
        required=False,
    )
    checked_in = forms.ChoiceField(
        label="Check-in",
        choices=[('', 'Tutti'), ('si', 'Presenti'), ('no', 'Non presenti')],
        required=False,
    )

    def filter_queryset(self, queryset):
        if not self.is_valid():
            return queryset

        q = self.cleaned_data.get('q')
        if q:
            queryset = queryset.filter(
                Q(nome__icontains=q)
                | Q(cognome__icontains=q)
                | Q(email__icontains=q)
                | Q(azienda__icontains=q)
            )
        if self.cleaned_data.get('stato'):
            queryset = queryset.filter(stato=self.cleaned_data['stato'])
        if self.cleaned_data.get('checked_in') == 'si':
            queryset = queryset.filter(checked_in=True)
        elif self.cleaned_data.get('checked_in') == 'no':
            queryset = queryset.filter(checked_in=False)
        return queryset


class CheckinQRForm(forms.Form):
    """Contenuto letto dallo scanner QR"""

    qr_data = forms.CharField(label="Dati QR", widget=forms.Textarea(attrs={'rows': 2}))


# ============================================================================
# RELATORI
# ============================================================================

class RelatoreForm(forms.ModelForm):

    class Meta:
        model = Relatore
        fields = [
            'nome',
            'cognome',
            'email',
            'telefono',
            'azienda',
            'ruolo_aziendale',
            'bio',
            'titolo_intervento',
            'descrizione_intervento',
            'durata_intervento',
            'data_intervento',
            'stato',
            'esigenze_viaggio',
            'esigenze_alloggio',
            'esigenze_alimentari',
            'note',
        ]
        widgets = {
            'bio': forms.Textarea(attrs={'rows': 3}),
            'descrizione_intervento': forms.Textarea(attrs={'rows': 3}),
            'data_intervento': DATETIME_WIDGET,
            'esigenze_viaggio': forms.Textarea(attrs={'rows': 2}),
            'esigenze_alloggio': forms.Textarea(attrs={'rows': 2}),
            'note': forms.Textarea(attrs={'rows': 2}),
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
                        Column('azienda', css_class='col-md-6'),
                        Column('ruolo_aziendale', css_class='col-md-6'),
                    ),
                    'bio',
                ),
                Tab(
                    'Intervento',
                    'titolo_intervento',
                    'descrizione_intervento',
                    Row(
                        Column('data_intervento', css_class='col-md-4'),
                        Column('durata_intervento', css_class='col-md-4'),
                        Column('stato', css_class='col-md-4'),
                    ),
                ),
                Tab(
                    'Logistica',
                    'esigenze_viaggio',
                    'esigenze_alloggio',
                    'esigenze_alimentari',
                    'note',
                ),
            )
        )


# ============================================================================
# SPONSOR
# ============================================================================

class SponsorForm(forms.ModelForm):

    class Meta:
        model = Sponsor
        fields = [
            'nome',
            'livello',
            'sito_web',
            'referente',
            'email',
            'telefono',
            'importo',
            'benefit',
            'stand',
            'stato',
            'contratto_firmato',
            'data_contratto',
            'stato_pagamento',
            'data_pagamento',
            'note',
        ]
        widgets = {
            'importo': forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
            'benefit': forms.Textarea(attrs={'rows': 3}),
            'data_contratto': DATE_WIDGET,
            'data_pagamento': DATE_WIDGET,
            'note': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['importo'].help_text = "Un importo positivo genera una voce di entrata nel budget"

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            TabHolder(
                Tab(
                    'Sponsor',
                    Row(
                        Column('nome', css_class='col-md-8'),
                        Column('livello', css_class='col-md-4'),
                    ),
                    'sito_web',
                    Row(
                        Column('referente', css_class='col-md-4'),
                        Column('email', css_class='col-md-4'),
                        Column('telefono', css_class='col-md-4'),
                    ),
                ),
                Tab(
                    'Accordo',
                    Row(
                        Column('importo', css_class='col-md-4'),
                        Column('stato', css_class='col-md-4'),
                        Column('stand', css_class='col-md-4'),
                    ),
                    'benefit',
                    Row(
                        Column('contratto_firmato', css_class='col-md-6'),
                        Column('data_contratto', css_class='col-md-6'),
                    ),
                ),
                Tab(
                    'Pagamento',
                    Row(
                        Column('stato_pagamento', css_class='col-md-6'),
                        Column('data_pagamento', css_class='col-md-6'),
                    ),
                    'note',
                ),
            )
        )

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('stato_pagamento') == 'paid' and not cleaned_data.get('data_pagamento'):
            self.add_error('data_pagamento', "Indica la data di pagamento")
        return cleaned_data
