"""
Forms per app scadenze.
"""

from django import forms
from django.contrib.auth import get_user_model
from django.db.models import Q
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column

from .models import Scadenza

DATETIME_WIDGET = forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M')


class ScadenzaForm(forms.ModelForm):

    class Meta:
        model = Scadenza
        fields = [
            'titolo',
            'descrizione',
            'data_scadenza',
            'categoria',
            'priorita',
            'stato',
            'assegnata_a',
            'giorni_promemoria',
            'note',
        ]
        widgets = {
            'descrizione': forms.Textarea(attrs={'rows': 3}),
            'data_scadenza': DATETIME_WIDGET,
            'note': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['assegnata_a'].queryset = get_user_model().objects.filter(is_active=True).order_by('username')

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            'titolo',
            'descrizione',
            Row(
                Column('data_scadenza', css_class='col-md-4'),
                Column('categoria', css_class='col-md-4'),
                Column('priorita', css_class='col-md-4'),
            ),
            Row(
                Column('stato', css_class='col-md-4'),
                Column('assegnata_a', css_class='col-md-4'),
                Column('giorni_promemoria', css_class='col-md-4'),
            ),
            'note',
        )

    def clean_titolo(self):
        titolo = self.cleaned_data['titolo'].strip()
        if len(titolo) < 3:
            raise forms.ValidationError("Il titolo deve avere almeno 3 caratteri")
        return titolo


class FiltroScadenzeForm(forms.Form):
    q = forms.CharField(label="Cerca", required=False)
    stato = forms.ChoiceField(label="Stato", choices=[('', 'Tutti')] + Scadenza.STATO_CHOICES, required=False)
    priorita = forms.ChoiceField(
        label="Priorità", choices=[('', 'Tutte')] + Scadenza.PRIORITA_CHOICES, required=False
    )
    categoria = forms.ChoiceField(
        label="Categoria", choices=[('', 'Tutte')] + Scadenza.CATEGORIA_CHOICES, required=False
    )

    def filter_queryset(self, queryset):
        if not self.is_valid():
            return queryset

        q = self.cleaned_data.get('q')
        if q:
            queryset = queryset.filter(
                Q(titolo__icontains=q) | Q(descrizione__icontains=q) | Q(evento__nome__icontains=q)
            )
        for campo in ('stato', 'priorita', 'categoria'):
            if self.cleaned_data.get(campo):
                queryset = queryset.filter(**{campo: self.cleaned_data[campo]})
        return queryset
