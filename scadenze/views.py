"""
Views per app scadenze.
"""

from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.views.generic import CreateView, ListView, UpdateView

from core.mixins.view_mixins import (
    AzioneView,
    CustomPaginationMixin,
    EventoMixin,
    FormConfigMixin,
    PermissionRequiredMixin,
    ServizioFormMixin,
)

from . import services
from .forms import FiltroScadenzeForm, ScadenzaForm
from .models import Scadenza


def url_scadenze_evento(evento_id):
    return reverse('eventi:evento_tab', kwargs={'pk': evento_id, 'tab': 'scadenze'})


class ScadenzeListView(LoginRequiredMixin, CustomPaginationMixin, ListView):
    """Scadenze di tutti gli eventi attivi"""

    model = Scadenza
    template_name = "scadenze/scadenze_list.html"
    context_object_name = "scadenze"

    def get_queryset(self):
        self.filtro = FiltroScadenzeForm(self.request.GET or None)
        qs = Scadenza.objects.filter(evento__is_active=True).select_related('evento', 'assegnata_a')
        return self.filtro.filter_queryset(qs).order_by('data_scadenza')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['filtro'] = self.filtro
        context['conteggi'] = services.conteggi_scadenze()
        context['urgenti'] = services.scadenze_urgenti()[:5]
        return context


class ScadenzaCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = Scadenza
    form_class = ScadenzaForm
    template_name = "commons_templates/form.html"
    permission_required = 'scadenze.add_scadenza'
    form_title = "Nuova Scadenza"
    form_submit_text = "Crea"

    def get_cancel_url(self):
        return url_scadenze_evento(self.evento.pk)

    def get_success_url(self):
        return url_scadenze_evento(self.evento.pk)

    def salva(self, form):
        return services.crea_scadenza(self.evento, form.cleaned_data, self.request.user)


class ScadenzaUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = Scadenza
    form_class = ScadenzaForm
    template_name = "commons_templates/form.html"
    permission_required = 'scadenze.change_scadenza'
    form_title = "Modifica Scadenza"

    def get_cancel_url(self):
        return self.object.get_absolute_url()

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.aggiorna_scadenza(self.object, form.cleaned_data, self.request.user)


class ScadenzaDeleteView(AzioneView):
    permission_required = 'scadenze.delete_scadenza'

    def esegui(self, request, *args, **kwargs):
        scadenza = get_object_or_404(Scadenza, pk=kwargs['pk'])
        self.evento_id = scadenza.evento_id
        return services.elimina_scadenza(scadenza)

    def get_success_url(self):
        return url_scadenze_evento(self.evento_id)


class ScadenzaCompletaView(AzioneView):
    permission_required = 'scadenze.change_scadenza'

    def esegui(self, request, *args, **kwargs):
        self.scadenza = get_object_or_404(Scadenza, pk=kwargs['pk'])
        return services.completa_scadenza(self.scadenza, request.user)

    def get_success_url(self):
        return self.scadenza.get_absolute_url()


class ScadenzaRiapriView(AzioneView):
    permission_required = 'scadenze.change_scadenza'

    def esegui(self, request, *args, **kwargs):
        self.scadenza = get_object_or_404(Scadenza, pk=kwargs['pk'])
        return services.riapri_scadenza(self.scadenza)

    def get_success_url(self):
        return self.scadenza.get_absolute_url()
