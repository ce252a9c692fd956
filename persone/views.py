"""
Views per app persone: partecipanti e check-in, relatori, sponsor.
"""

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.utils import timezone
from django.views.generic import CreateView, DetailView, TemplateView, UpdateView, View

from core.actions import RisultatoAzione
from core.mixins.view_mixins import (
    AzioneView,
    EventoMixin,
    FormConfigMixin,
    PermissionRequiredMixin,
    ServizioFormMixin,
)

from . import services
from .forms import CheckinQRForm, PartecipanteForm, RelatoreForm, SponsorForm
from .models import Partecipante, Relatore, Sponsor


def url_tab_evento(evento_id, tab):
    return reverse('eventi:evento_tab', kwargs={'pk': evento_id, 'tab': tab})


# ============================================================================
# PARTECIPANTI
# ============================================================================

class PartecipanteDetailView(LoginRequiredMixin, DetailView):
    model = Partecipante
    template_name = "persone/partecipante_detail.html"
    context_object_name = "partecipante"

    def get_queryset(self):
        return super().get_queryset().select_related('evento')


class PartecipanteCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = Partecipante
    form_class = PartecipanteForm
    template_name = "commons_templates/form.html"
    permission_required = 'persone.add_partecipante'
    form_title = "Nuovo Partecipante"
    form_submit_text = "Registra"

    def get_cancel_url(self):
        return url_tab_evento(self.evento.pk, 'partecipanti')

    def get_success_url(self):
        return url_tab_evento(self.evento.pk, 'partecipanti')

    def salva(self, form):
        return services.crea_partecipante(self.evento, form.cleaned_data, self.request.user)


class PartecipanteUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = Partecipante
    form_class = PartecipanteForm
    template_name = "commons_templates/form.html"
    permission_required = 'persone.change_partecipante'
    form_title = "Modifica Partecipante"

    def get_cancel_url(self):
        return self.object.get_absolute_url()

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.aggiorna_partecipante(self.object, form.cleaned_data, self.request.user)


class PartecipanteDeleteView(AzioneView):
    permission_required = 'persone.delete_partecipante'

    def esegui(self, request, *args, **kwargs):
        partecipante = get_object_or_404(Partecipante, pk=kwargs['pk'])
        self.evento_id = partecipante.evento_id
        return services.elimina_partecipante(partecipante)

    def get_success_url(self):
        return url_tab_evento(self.evento_id, 'partecipanti')


class PartecipanteQRView(LoginRequiredMixin, View):
    """Immagine PNG del QR code di check-in"""

    def get(self, request, *args, **kwargs):
        partecipante = get_object_or_404(Partecipante, pk=kwargs['pk'])
        buffer = services.qr_code_partecipante(partecipante)
        return HttpResponse(buffer.getvalue(), content_type='image/png')


class PartecipantiCSVView(LoginRequiredMixin, EventoMixin, View):

    def get(self, request, *args, **kwargs):
        nome_file = f"partecipanti_{self.evento.codice}_{timezone.localdate().strftime('%Y%m%d')}.csv"
        response = HttpResponse(services.partecipanti_csv(self.evento), content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{nome_file}"'
        return response


class PartecipantiExcelView(LoginRequiredMixin, EventoMixin, View):

    def get(self, request, *args, **kwargs):
        return services.esporta_partecipanti_excel(self.evento)


class BadgePDFView(LoginRequiredMixin, EventoMixin, View):
    """Badge di tutti i partecipanti, o di quelli indicati con ?id=...&id=..."""

    def get(self, request, *args, **kwargs):
        partecipanti = None
        ids = request.GET.getlist('id')
        if ids:
            partecipanti = self.evento.partecipanti.filter(pk__in=ids).order_by('cognome', 'nome')

        contenuto = services.badge_pdf(self.evento, partecipanti)
        response = HttpResponse(contenuto, content_type='application/pdf')
        response['Content-Disposition'] = f'inline; filename="badge_{self.evento.codice}.pdf"'
        return response


# ============================================================================
# CHECK-IN
# ============================================================================

class CheckinView(LoginRequiredMixin, EventoMixin, TemplateView):
    """Pagina di check-in: scanner QR, statistiche e ultimi ingressi."""

    template_name = "persone/checkin.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['form'] = CheckinQRForm()
        context['statistiche'] = services.statistiche_checkin(self.evento)
        context['ultimi_checkin'] = (
            self.evento.partecipanti.filter(checked_in=True).order_by('-orario_checkin')[:10]
        )
        return context


class CheckinQRView(EventoMixin, AzioneView):
    permission_required = 'persone.change_partecipante'

    def esegui(self, request, *args, **kwargs):
        form = CheckinQRForm(request.POST)
        if not form.is_valid():
            return RisultatoAzione.da_form(form)
        return services.checkin_da_qr(form.cleaned_data['qr_data'], evento=self.evento)

    def get_success_url(self):
        return reverse('persone:checkin', kwargs={'evento_pk': self.evento.pk})


class CheckinManualeView(AzioneView):
    permission_required = 'persone.change_partecipante'

    def esegui(self, request, *args, **kwargs):
        self.partecipante = get_object_or_404(Partecipante.objects.select_related('evento'), pk=kwargs['pk'])
        return services.checkin_manuale(self.partecipante, self.partecipante.evento)

    def get_success_url(self):
        return url_tab_evento(self.partecipante.evento_id, 'partecipanti')


class AnnullaCheckinView(AzioneView):
    permission_required = 'persone.change_partecipante'

    def esegui(self, request, *args, **kwargs):
        self.partecipante = get_object_or_404(Partecipante, pk=kwargs['pk'])
        return services.annulla_checkin(self.partecipante)

    def get_success_url(self):
        return url_tab_evento(self.partecipante.evento_id, 'partecipanti')


# ============================================================================
# RELATORI
# ============================================================================

class RelatoreCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = Relatore
    form_class = RelatoreForm
    template_name = "commons_templates/form.html"
    permission_required = 'persone.add_relatore'
    form_title = "Nuovo Relatore"
    form_submit_text = "Crea"

    def get_cancel_url(self):
        return url_tab_evento(self.evento.pk, 'relatori')

    def get_success_url(self):
        return url_tab_evento(self.evento.pk, 'relatori')

    def salva(self, form):
        return services.crea_relatore(self.evento, form.cleaned_data, self.request.user)


class RelatoreUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = Relatore
    form_class = RelatoreForm
    template_name = "commons_templates/form.html"
    permission_required = 'persone.change_relatore'
    form_title = "Modifica Relatore"

    def get_cancel_url(self):
        return self.object.get_absolute_url()

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.aggiorna_relatore(self.object, form.cleaned_data, self.request.user)


class RelatoreDeleteView(AzioneView):
    permission_required = 'persone.delete_relatore'

    def esegui(self, request, *args, **kwargs):
        relatore = get_object_or_404(Relatore, pk=kwargs['pk'])
        self.evento_id = relatore.evento_id
        return services.elimina_relatore(relatore)

    def get_success_url(self):
        return url_tab_evento(self.evento_id, 'relatori')


class RelatoriExcelView(LoginRequiredMixin, EventoMixin, View):

    def get(self, request, *args, **kwargs):
        return services.esporta_relatori_excel(self.evento)


# ============================================================================
# SPONSOR
# ============================================================================

class SponsorCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = Sponsor
    form_class = SponsorForm
    template_name = "commons_templates/form.html"
    permission_required = 'persone.add_sponsor'
    form_title = "Nuovo Sponsor"
    form_submit_text = "Crea"

    def get_cancel_url(self):
        return url_tab_evento(self.evento.pk, 'sponsor')

    def get_success_url(self):
        return url_tab_evento(self.evento.pk, 'sponsor')

    def salva(self, form):
        return services.crea_sponsor(self.evento, form.cleaned_data, self.request.user)


class SponsorUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = Sponsor
    form_class = SponsorForm
    template_name = "commons_templates/form.html"
    permission_required = 'persone.change_sponsor'
    form_title = "Modifica Sponsor"

    def get_cancel_url(self):
        return self.object.get_absolute_url()

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.aggiorna_sponsor(self.object, form.cleaned_data, self.request.user)


class SponsorDeleteView(AzioneView):
    permission_required = 'persone.delete_sponsor'

    def esegui(self, request, *args, **kwargs):
        sponsor = get_object_or_404(Sponsor.objects.select_related('voce_budget'), pk=kwargs['pk'])
        self.evento_id = sponsor.evento_id
        return services.elimina_sponsor(sponsor)

    def get_success_url(self):
        return url_tab_evento(self.evento_id, 'sponsor')


class SponsorExcelView(LoginRequiredMixin, EventoMixin, View):

    def get(self, request, *args, **kwargs):
        return services.esporta_sponsor_excel(self.evento)
