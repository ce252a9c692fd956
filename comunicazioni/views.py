"""
Views per app comunicazioni: composizione e invio email, dettaglio,
annullamento ed eliminazione, gestione template.
"""

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.views.generic import CreateView, DetailView, ListView, UpdateView, View

from core.mixins.view_mixins import (
    AzioneView,
    EventoMixin,
    FilterMixin,
    FormConfigMixin,
    PermissionRequiredMixin,
    SearchMixin,
    ServizioFormMixin,
)

from . import services
from .forms import ComunicazioneForm, TemplateEmailForm
from .models import Comunicazione, TemplateEmail


def url_comunicazioni_evento(evento_id):
    return reverse('eventi:evento_tab', kwargs={'pk': evento_id, 'tab': 'comunicazioni'})


# ============================================================================
# COMUNICAZIONI
# ============================================================================

class ComunicazioneDetailView(LoginRequiredMixin, DetailView):
    model = Comunicazione
    template_name = "comunicazioni/comunicazione_detail.html"
    context_object_name = "comunicazione"

    def get_queryset(self):
        return super().get_queryset().select_related('evento', 'template')


class ComunicazioneCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = Comunicazione
    form_class = ComunicazioneForm
    template_name = "commons_templates/form.html"
    permission_required = 'comunicazioni.add_comunicazione'
    form_title = "Nuova Email"
    form_submit_text = "Invia"

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs['evento'] = self.evento
        return kwargs

    def get_initial(self):
        initial = super().get_initial()
        template_id = self.request.GET.get('template')
        if template_id:
            template = services.template_disponibili(self.evento).filter(pk=template_id).first()
            if template is not None:
                initial.update({'template': template, 'oggetto': template.oggetto, 'corpo': template.corpo})
        return initial

    def get_cancel_url(self):
        return url_comunicazioni_evento(self.evento.pk)

    def get_success_url(self):
        return url_comunicazioni_evento(self.evento.pk)

    def salva(self, form):
        return services.invia_email(self.evento, form.cleaned_data, self.request.user)


class AzioneComunicazioneView(AzioneView):
    permission_required = 'comunicazioni.change_comunicazione'

    def get_comunicazione(self):
        self.comunicazione = get_object_or_404(Comunicazione.objects.select_related('evento'), pk=self.kwargs['pk'])
        self.evento_id = self.comunicazione.evento_id
        return self.comunicazione

    def get_success_url(self):
        return url_comunicazioni_evento(self.evento_id)


class ComunicazioneInviaView(AzioneComunicazioneView):
    """Invio (o nuovo tentativo) di una comunicazione in bozza, programmata o fallita."""

    def esegui(self, request, *args, **kwargs):
        return services.invia_comunicazione(self.get_comunicazione(), request.user)


class ComunicazioneAnnullaView(AzioneComunicazioneView):

    def esegui(self, request, *args, **kwargs):
        return services.annulla_comunicazione(self.get_comunicazione(), request.user)


class ComunicazioneDeleteView(AzioneComunicazioneView):
    permission_required = 'comunicazioni.delete_comunicazione'

    def esegui(self, request, *args, **kwargs):
        return services.elimina_comunicazione(self.get_comunicazione())


class AnteprimaView(LoginRequiredMixin, EventoMixin, View):
    """Anteprima JSON di oggetto e corpo con variabili di esempio."""

    http_method_names = ['post']

    def post(self, request, *args, **kwargs):
        return JsonResponse(
            services.anteprima(request.POST.get('oggetto', ''), request.POST.get('corpo', ''), self.evento)
        )


# ============================================================================
# TEMPLATE EMAIL
# ============================================================================

class TemplateListView(LoginRequiredMixin, FilterMixin, SearchMixin, ListView):
    model = TemplateEmail
    template_name = "comunicazioni/template_list.html"
    context_object_name = "templates"
    filter_fields = ['categoria']
    search_fields = ['nome', 'oggetto', 'descrizione']

    def get_queryset(self):
        return super().get_queryset().select_related('evento')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['categorie'] = TemplateEmail.CATEGORIA_CHOICES
        return context


class TemplateCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, CreateView):
    model = TemplateEmail
    form_class = TemplateEmailForm
    template_name = "commons_templates/form.html"
    permission_required = 'comunicazioni.add_templateemail'
    form_title = "Nuovo Template Email"
    form_submit_text = "Crea"

    def get_initial(self):
        initial = super().get_initial()
        if self.request.GET.get('evento'):
            initial['evento'] = self.request.GET['evento']
        return initial

    def get_cancel_url(self):
        return reverse('comunicazioni:template_list')

    def get_success_url(self):
        return reverse('comunicazioni:template_list')

    def salva(self, form):
        return services.crea_template(form.cleaned_data, self.request.user)


class TemplateUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = TemplateEmail
    form_class = TemplateEmailForm
    template_name = "commons_templates/form.html"
    permission_required = 'comunicazioni.change_templateemail'
    form_title = "Modifica Template Email"

    def get_cancel_url(self):
        return reverse('comunicazioni:template_list')

    def get_success_url(self):
        return reverse('comunicazioni:template_list')

    def salva(self, form):
        return services.aggiorna_template(self.object, form.cleaned_data, self.request.user)


class TemplateDeleteView(AzioneView):
    permission_required = 'comunicazioni.delete_templateemail'

    def esegui(self, request, *args, **kwargs):
        return services.elimina_template(get_object_or_404(TemplateEmail, pk=kwargs['pk']))

    def get_success_url(self):
        return reverse('comunicazioni:template_list')
