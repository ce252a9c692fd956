"""
Forms per app comunicazioni.
"""

from django import forms
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column, Fieldset

from .models import Comunicazione, TemplateEmail

DATETIME_WIDGET = forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M')

AIUTO_VARIABILI = (
    "Variabili disponibili: {{nome}}, {{cognome}}, {{azienda}}, {{email}}, "
    "{{evento}}, {{data_evento}}, {{data_fine_evento}}, {{luogo_evento}}"
)


class ContenutoEmailMixin:
    """Lunghezze minime di oggetto e corpo."""

    def clean_oggetto(self):
        oggetto = self.cleaned_data['oggetto'].strip()
        if len(oggetto) < 3:
            raise forms.ValidationError("L'oggetto deve contenere almeno 3 caratteri")
        if len(oggetto) > 200:
            raise forms.ValidationError("L'oggetto non può superare 200 caratteri")
        return oggetto

    def clean_corpo(self):
        corpo = self.cleaned_data['corpo'].strip()
        if len(corpo) < 10:
            raise forms.ValidationError("Il corpo del messaggio deve contenere almeno 10 caratteri")
        return corpo


class ComunicazioneForm(ContenutoEmailMixin, forms.ModelForm):
    """
    Composizione di una email. Con "Programmata per" nel futuro l'invio
    viene rimandato.
    """

    class Meta:
        model = Comunicazione
        fields = ['template', 'destinatari', 'email_personalizzate', 'oggetto', 'corpo', 'programmata_il']
        widgets = {
            'email_personalizzate': forms.Textarea(attrs={'rows': 3}),
            'corpo': forms.Textarea(attrs={'rows': 10}),
            'programmata_il': DATETIME_WIDGET,
        }

    def __init__(self, *args, evento=None, **kwargs):
        super().__init__(*args, **kwargs)
        from .services import template_disponibili

        self.fields['template'].queryset = template_disponibili(evento)
        self.fields['corpo'].help_text = AIUTO_VARIABILI

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Row(
                Column('template', css_class='col-md-6'),
                Column('destinatari', css_class='col-md-6'),
            ),
            'email_personalizzate',
            'oggetto',
            'corpo',
            'programmata_il',
        )

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('destinatari') == 'custom' and not (cleaned_data.get('email_personalizzate') or '').strip():
            self.add_error('email_personalizzate', "Inserisci almeno un indirizzo email")
        return cleaned_data


class TemplateEmailForm(ContenutoEmailMixin, forms.ModelForm):

    class Meta:
        model = TemplateEmail
        fields = ['nome', 'descrizione', 'categoria', 'evento', 'oggetto', 'corpo', 'predefinito']
        widgets = {
            'descrizione': forms.Textarea(attrs={'rows': 2}),
            'corpo': forms.Textarea(attrs={'rows': 10}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        from eventi.models import Evento

        self.fields['evento'].queryset = Evento.objects.attivi().order_by('-data_inizio')
        self.fields['evento'].empty_label = "Globale (tutti gli eventi)"
        self.fields['corpo'].help_text = AIUTO_VARIABILI

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Fieldset(
                'Template',
                Row(
                    Column('nome', css_class='col-md-6'),
                    Column('categoria', css_class='col-md-3'),
                    Column('predefinito', css_class='col-md-3'),
                ),
                'descrizione',
                'evento',
            ),
            Fieldset(
                'Contenuto',
                'oggetto',
                'corpo',
            ),
        )

    def clean_nome(self):
        nome = self.cleaned_data['nome'].strip()
        if len(nome) < 3:
            raise forms.ValidationError("Il nome del template deve contenere almeno 3 caratteri")
        return nome
