"""
Forms per app agenda.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column
from django_select2.forms import Select2MultipleWidget

from persone.models import Relatore

from .models import SessioneAgenda

DATETIME_WIDGET = forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M')


class SessioneAgendaForm(forms.ModelForm):
    """
    Sessione di agenda. I relatori proposti sono solo quelli dell'evento.
    """

    class Meta:
        model = SessioneAgenda
        fields = [
            'titolo',
            'descrizione',
            'tipo',
            'inizio',
            'fine',
            'sala',
            'luogo',
            'capienza_massima',
            'relatori',
            'stato',
            'pubblica',
            'note',
        ]
        widgets = {
            'descrizione': forms.Textarea(attrs={'rows': 3}),
            'inizio': DATETIME_WIDGET,
            'fine': DATETIME_WIDGET,
            'relatori': Select2MultipleWidget,
            'note': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        evento = evento or getattr(self.instance, 'evento', None)
        if evento is not None:
            self.fields['relatori'].queryset = Relatore.objects.filter(evento=evento).order_by('cognome', 'nome')

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Row(
                Column('titolo', css_class='col-md-8'),
                Column('tipo', css_class='col-md-4'),
            ),
            'descrizione',
            Row(
                Column('inizio', css_class='col-md-6'),
                Column('fine', css_class='col-md-6'),
            ),
            Row(
                Column('sala', css_class='col-md-4'),
                Column('luogo', css_class='col-md-4'),
                Column('capienza_massima', css_class='col-md-4'),
            ),
            'relatori',
            Row(
                Column('stato', css_class='col-md-6'),
                Column('pubblica', css_class='col-md-6'),
            ),
            'note',
        )
