"""
Forms per app budget.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column, Fieldset
from django_select2.forms import Select2MultipleWidget

from .models import CategoriaBudget, VoceBudget


class CategoriaBudgetForm(forms.ModelForm):

    class Meta:
        model = CategoriaBudget
        fields = ['nome', 'descrizione', 'importo_allocato', 'colore', 'icona']
        widgets = {
            'descrizione': forms.Textarea(attrs={'rows': 2}),
            'colore': forms.TextInput(attrs={'type': 'color'}),
            'importo_allocato': forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Row(
                Column('nome', css_class='col-md-8'),
                Column('importo_allocato', css_class='col-md-4'),
            ),
            'descrizione',
            Row(
                Column('colore', css_class='col-md-6'),
                Column('icona', css_class='col-md-6'),
            ),
        )


class VoceBudgetForm(forms.ModelForm):
    """
    Voce di budget. Le categorie proposte sono solo quelle dell'evento.
    """

    class Meta:
        model = VoceBudget
        fields = [
            'categoria',
            'descrizione',
            'tipo',
            'costo_stimato',
            'costo_effettivo',
            'quantita',
            'stato',
            'fornitore',
            'numero_fattura',
            'url_fattura',
            'data_scadenza',
            'data_pagamento',
            'note',
        ]
        widgets = {
            'data_scadenza': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'data_pagamento': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
            'costo_stimato': forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
            'costo_effettivo': forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
            'note': forms.Textarea(attrs={'rows': 3}),
        }

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        evento = evento or getattr(self.instance, 'evento', None)
        if evento is not None:
            self.fields['categoria'].queryset = CategoriaBudget.objects.filter(evento=evento)

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Fieldset(
                "Voce",
                Row(
                    Column('categoria', css_class='col-md-6'),
                    Column('tipo', css_class='col-md-3'),
                    Column('stato', css_class='col-md-3'),
                ),
                'descrizione',
            ),
            Fieldset(
                "Importi",
                Row(
                    Column('costo_stimato', css_class='col-md-4'),
                    Column('costo_effettivo', css_class='col-md-4'),
                    Column('quantita', css_class='col-md-4'),
                ),
            ),
            Fieldset(
                "Fornitore e pagamento",
                Row(
                    Column('fornitore', css_class='col-md-6'),
                    Column('numero_fattura', css_class='col-md-6'),
                ),
                'url_fattura',
                Row(
                    Column('data_scadenza', css_class='col-md-6'),
                    Column('data_pagamento', css_class='col-md-6'),
                ),
            ),
            'note',
        )

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('stato') == 'paid':
            if not cleaned_data.get('data_pagamento'):
                self.add_error('data_pagamento', "Obbligatoria per una voce pagata")
            if cleaned_data.get('costo_effettivo') is None:
                self.add_error('costo_effettivo', "Obbligatorio per una voce pagata")
        return cleaned_data


class StatoVoceForm(forms.Form):
    stato = forms.ChoiceField(choices=VoceBudget.STATO_CHOICES)
    data_pagamento = forms.DateField(required=False)
    costo_effettivo = forms.DecimalField(required=False, min_value=0, max_digits=12, decimal_places=2)


class FiltroReportForm(forms.Form):
    """Filtri del report finanziario"""

    data_inizio = forms.DateField(
        label="Dal",
        required=False,
        widget=forms.DateInput(attrs={'type': 'date'}),
    )
    data_fine = forms.DateField(
        label="Al",
        required=False,
        widget=forms.DateInput(attrs={'type': 'date'}),
    )
    eventi = forms.ModelMultipleChoiceField(
        label="Eventi",
        queryset=None,
        required=False,
        widget=Select2MultipleWidget(attrs={
            'data-placeholder': 'Tutti gli eventi',
            'class': 'form-control',
        }),
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        from eventi.models import Evento

        self.fields['eventi'].queryset = Evento.objects.attivi().order_by('-data_inizio')
        self.helper = FormHelper()
        self.helper.form_method = 'get'
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Row(
                Column('data_inizio', css_class='col-md-3'),
                Column('data_fine', css_class='col-md-3'),
                Column('eventi', css_class='col-md-6'),
            )
        )

    def clean(self):
        cleaned_data = super().clean()
        inizio = cleaned_data.get('data_inizio')
        fine = cleaned_data.get('data_fine')
        if inizio and fine and fine < inizio:
            raise forms.ValidationError("La data finale deve essere successiva a quella iniziale")
        return cleaned_data
