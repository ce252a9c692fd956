"""
Forms per app eventi.
"""

from django import forms
from django.db.models import Q
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column, Fieldset

from .models import Evento

DATE_WIDGET = forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d')


class EventoForm(forms.ModelForm):

    class Meta:
        model = Evento
        fields = [
            'nome',
            'tipo',
            'descrizione',
            'luogo',
            'data_inizio',
            'data_fine',
            'capienza',
            'budget',
            'stato',
        ]
        widgets = {
            'descrizione': forms.Textarea(attrs={'rows': 4}),
            'data_inizio': DATE_WIDGET,
            'data_fine': DATE_WIDGET,
            'budget': forms.NumberInput(attrs={'step': '0.01', 'min': '0.01'}),
            'capienza': forms.NumberInput(attrs={'min': '1'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Fieldset(
                'Evento',
                Row(
                    Column('nome', css_class='col-md-8'),
                    Column('tipo', css_class='col-md-4'),
                ),
                'descrizione',
                'luogo',
            ),
            Fieldset(
                'Date e capienza',
                Row(
                    Column('data_inizio', css_class='col-md-3'),
                    Column('data_fine', css_class='col-md-3'),
                    Column('capienza', css_class='col-md-3'),
                    Column('budget', css_class='col-md-3'),
                ),
                'stato',
            ),
        )

    def clean(self):
        cleaned_data = super().clean()
        data_inizio = cleaned_data.get('data_inizio')
        data_fine = cleaned_data.get('data_fine')
        if data_inizio and data_fine and data_fine < data_inizio:
            self.add_error('data_fine', "La data di fine deve essere uguale o successiva alla data di inizio")
        return cleaned_data


class StatoEventoForm(forms.Form):
    stato = forms.ChoiceField(choices=Evento.STATO_CHOICES)


class FiltroEventiForm(forms.Form):
    q = forms.CharField(label="Cerca", required=False)
    stato = forms.ChoiceField(label="Stato", choices=[('', 'Tutti')] + Evento.STATO_CHOICES, required=False)
    tipo = forms.ChoiceField(label="Tipo", choices=[('', 'Tutti')] + Evento.TIPO_CHOICES, required=False)
    dal = forms.DateField(label="Dal", required=False, widget=DATE_WIDGET)
    al = forms.DateField(label="Al", required=False, widget=DATE_WIDGET)
    anno = forms.IntegerField(label="Anno", required=False, min_value=2000, max_value=2100)

    def filter_queryset(self, queryset):
        if not self.is_valid():
            return queryset

        q = self.cleaned_data.get('q')
        if q:
            queryset = queryset.filter(
                Q(nome__icontains=q) | Q(luogo__icontains=q) | Q(codice__icontains=q)
            )
        if self.cleaned_data.get('stato'):
            queryset = queryset.filter(stato=self.cleaned_data['stato'])
        if self.cleaned_data.get('tipo'):
            queryset = queryset.filter(tipo=self.cleaned_data['tipo'])
        if self.cleaned_data.get('dal'):
            queryset = queryset.filter(data_fine__gte=self.cleaned_data['dal'])
        if self.cleaned_data.get('al'):
            queryset = queryset.filter(data_inizio__lte=self.cleaned_data['al'])
        if self.cleaned_data.get('anno'):
            queryset = queryset.filter(data_inizio__year=self.cleaned_data['anno'])
        return queryset
