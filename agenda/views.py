"""
Views per app agenda.
"""

from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.views.generic import CreateView, UpdateView, View

from core.mixins.view_mixins import (
    AzioneView,
    EventoMixin,
    FormConfigMixin,
    PermissionRequiredMixin,
    ServizioFormMixin,
)

from . import services
from .forms import SessioneAgendaForm
from .models import SessioneAgenda


def url_agenda_evento(evento_id):
    return reverse('eventi:evento_tab', kwargs={'pk': evento_id, 'tab': 'agenda'})


class SessioneCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = SessioneAgenda
    form_class = SessioneAgendaForm
    template_name = "commons_templates/form.html"
    permission_required = 'agenda.add_sessioneagenda'
    form_title = "Nuova Sessione"
    form_submit_text = "Crea"

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs['evento'] = self.evento
        return kwargs

    def get_cancel_url(self):
        return url_agenda_evento(self.evento.pk)

    def get_success_url(self):
        return url_agenda_evento(self.evento.pk)

    def salva(self, form):
        return services.crea_sessione(self.evento, form.cleaned_data, self.request.user)


class SessioneUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = SessioneAgenda
    form_class = SessioneAgendaForm
    template_name = "commons_templates/form.html"
    permission_required = 'agenda.change_sessioneagenda'
    form_title = "Modifica Sessione"

    def get_cancel_url(self):
        return url_agenda_evento(self.object.evento_id)

    def get_success_url(self):
        return url_agenda_evento(self.object.evento_id)

    def salva(self, form):
        return services.aggiorna_sessione(self.object, form.cleaned_data, self.request.user)


class SessioneDeleteView(AzioneView):
    permission_required = 'agenda.delete_sessioneagenda'

    def esegui(self, request, *args, **kwargs):
        sessione = get_object_or_404(SessioneAgenda, pk=kwargs['pk'])
        self.evento_id = sessione.evento_id
        return services.elimina_sessione(sessione)

    def get_success_url(self):
        return url_agenda_evento(self.evento_id)


class AgendaExcelView(LoginRequiredMixin, EventoMixin, View):

    def get(self, request, *args, **kwargs):
        return services.esporta_agenda_excel(self.evento)
