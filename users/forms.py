"""
Forms per l'app users.
"""

from django import forms
from django.contrib.auth.forms import AuthenticationForm
from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Row, Column, Fieldset

from .models import User


class LoginForm(AuthenticationForm):
    """
    Form di login con opzione "ricordami" (sessione di 30 giorni).
    """

    username = forms.CharField(
        label="Username",
        max_length=150,
        widget=forms.TextInput(
            attrs={
                "class": "form-control",
                "placeholder": "Username",
                "autofocus": True,
            }
        ),
    )

    password = forms.CharField(
        label="Password",
        strip=False,
        widget=forms.PasswordInput(
            attrs={
                "class": "form-control",
                "placeholder": "Password",
                "autocomplete": "current-password",
            }
        ),
    )

    remember_me = forms.BooleanField(
        label="Ricordami (30 giorni)",
        required=False,
        widget=forms.CheckboxInput(attrs={"class": "form-check-input"}),
    )

    error_messages = {
        "invalid_login": "Username o password non corretti.",
        "inactive": "Questo account è disattivato.",
    }


class ProfiloForm(forms.ModelForm):
    """Dati anagrafici dell'utente corrente."""

    class Meta:
        model = User
        fields = ["first_name", "last_name", "email", "telefono", "azienda"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["email"].required = True

        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Row(
                Column("first_name", css_class="col-md-6"),
                Column("last_name", css_class="col-md-6"),
            ),
            Row(
                Column("email", css_class="col-md-6"),
                Column("telefono", css_class="col-md-6"),
            ),
            "azienda",
        )

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        if User.objects.filter(email__iexact=email).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError("Email già utilizzata da un altro utente")
        return email


class ImpostazioniNotificheForm(forms.ModelForm):
    """Preferenze di notifica."""

    class Meta:
        model = User
        fields = [
            "notifiche_email",
            "notifiche_scadenze",
            "notifiche_pagamenti",
            "giorni_preavviso_scadenze",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.helper = FormHelper()
        self.helper.form_tag = False
        self.helper.layout = Layout(
            Fieldset(
                "Notifiche",
                "notifiche_email",
                "notifiche_scadenze",
                "notifiche_pagamenti",
                "giorni_preavviso_scadenze",
            )
        )
