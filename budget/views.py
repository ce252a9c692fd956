"""
Views per app budget: categorie e voci di un evento, pagine finanze,
report finanziario ed export.
"""

import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.utils import timezone
from django.views.generic import CreateView, TemplateView, UpdateView, View

from core.actions import RisultatoAzione
from core.mixins.view_mixins import (
    AzioneView,
    EventoMixin,
    FormConfigMixin,
    PermissionRequiredMixin,
    ServizioFormMixin,
)
from core.pdf_generator import generate_pdf_response
from eventi.models import Evento

from . import aggregazioni, services
from .forms import CategoriaBudgetForm, FiltroReportForm, StatoVoceForm, VoceBudgetForm
from .models import CategoriaBudget, VoceBudget

logger = logging.getLogger(__name__)


def url_budget_evento(evento_id):
    return reverse('eventi:evento_tab', kwargs={'pk': evento_id, 'tab': 'budget'})


# ============================================================================
# FINANZE
# ============================================================================

class FinanzeView(LoginRequiredMixin, TemplateView):
    """Panoramica finanziaria di tutti gli eventi."""

    template_name = "budget/finanze.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['summary'] = services.panoramica_finanze()
        context['eventi'] = Evento.objects.attivi().exclude(stato='cancelled').order_by('data_inizio')
        return context


class ReportFinanziarioView(LoginRequiredMixin, TemplateView):
    template_name = "budget/report.html"

    def get_filtri(self):
        form = FiltroReportForm(self.request.GET or None)
        if form.is_bound and form.is_valid():
            eventi = form.cleaned_data.get('eventi')
            return form, {
                'data_inizio': form.cleaned_data.get('data_inizio'),
                'data_fine': form.cleaned_data.get('data_fine'),
                'eventi_ids': [e.pk for e in eventi] if eventi else None,
            }
        return form, {}

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        form, filtri = self.get_filtri()
        context['form'] = form
        context['report'] = services.report_finanziario(**filtri)
        context['query_string'] = self.request.GET.urlencode()
        return context


class ReportCSVView(ReportFinanziarioView):
    """Scarica il report finanziario in CSV"""

    def get(self, request, *args, **kwargs):
        form, filtri = self.get_filtri()
        report = services.report_finanziario(**filtri)
        contenuto = aggregazioni.report_csv(
            report,
            data_inizio=filtri.get('data_inizio'),
            data_fine=filtri.get('data_fine'),
            eventi_selezionati=filtri.get('eventi_ids'),
        )
        nome_file = f"report_finanziario_{timezone.localdate().strftime('%Y%m%d')}.csv"
        response = HttpResponse(contenuto, content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{nome_file}"'
        return response


class ReportPDFView(ReportFinanziarioView):
    """Dettaglio per evento del report finanziario in PDF"""

    def get(self, request, *args, **kwargs):
        form, filtri = self.get_filtri()
        report = services.report_finanziario(**filtri)
        righe = [
            {
                'Evento': riga['titolo'],
                'Data': riga['data'],
                'Entrate': riga['entrate'],
                'Costi': riga['costi'],
                'Profitto': riga['profitto'],
                'Voci': riga['voci'],
            }
            for riga in report['dettaglio_eventi']
        ]
        return generate_pdf_response(
            righe,
            filename=f"report_finanziario_{timezone.localdate().strftime('%Y%m%d')}",
            title="Report Finanziario EventHub",
            headers=['Evento', 'Data', 'Entrate', 'Costi', 'Profitto', 'Voci'],
        )


class BudgetExcelView(LoginRequiredMixin, EventoMixin, View):

    def get(self, request, *args, **kwargs):
        return services.esporta_budget_excel(self.evento)


# ============================================================================
# CATEGORIE
# ============================================================================

class CategoriaCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = CategoriaBudget
    form_class = CategoriaBudgetForm
    template_name = "commons_templates/form.html"
    permission_required = 'budget.add_categoriabudget'
    form_title = "Nuova Categoria"
    form_submit_text = "Crea Categoria"

    def get_cancel_url(self):
        return url_budget_evento(self.evento.pk)

    def get_success_url(self):
        return url_budget_evento(self.evento.pk)

    def salva(self, form):
        return services.crea_categoria(self.evento, form.cleaned_data, self.request.user)


class CategoriaUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = CategoriaBudget
    form_class = CategoriaBudgetForm
    template_name = "commons_templates/form.html"
    permission_required = 'budget.change_categoriabudget'
    form_title = "Modifica Categoria"

    def get_cancel_url(self):
        return url_budget_evento(self.object.evento_id)

    def get_success_url(self):
        return url_budget_evento(self.object.evento_id)

    def salva(self, form):
        return services.aggiorna_categoria(self.object, form.cleaned_data, self.request.user)


class CategoriaDeleteView(AzioneView):
    permission_required = 'budget.delete_categoriabudget'

    def esegui(self, request, *args, **kwargs):
        categoria = get_object_or_404(CategoriaBudget, pk=kwargs['pk'])
        self.evento_id = categoria.evento_id
        return services.elimina_categoria(categoria)

    def get_success_url(self):
        return url_budget_evento(self.evento_id)


# ============================================================================
# VOCI
# ============================================================================

class VoceCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = VoceBudget
    form_class = VoceBudgetForm
    template_name = "commons_templates/form.html"
    permission_required = 'budget.add_vocebudget'
    form_title = "Nuova Voce di Budget"
    form_submit_text = "Crea Voce"

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs['evento'] = self.evento
        return kwargs

    def get_initial(self):
        initial = super().get_initial()
        if self.request.GET.get('categoria'):
            initial['categoria'] = self.request.GET['categoria']
        return initial

    def get_cancel_url(self):
        return url_budget_evento(self.evento.pk)

    def get_success_url(self):
        return url_budget_evento(self.evento.pk)

    def salva(self, form):
        return services.crea_voce(self.evento, form.cleaned_data, self.request.user)


class VoceUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = VoceBudget
    form_class = VoceBudgetForm
    template_name = "commons_templates/form.html"
    permission_required = 'budget.change_vocebudget'
    form_title = "Modifica Voce di Budget"

    def get_cancel_url(self):
        return url_budget_evento(self.object.evento_id)

    def get_success_url(self):
        return url_budget_evento(self.object.evento_id)

    def salva(self, form):
        return services.aggiorna_voce(self.object, form.cleaned_data, self.request.user)


class VoceDeleteView(AzioneView):
    permission_required = 'budget.delete_vocebudget'

    def esegui(self, request, *args, **kwargs):
        voce = get_object_or_404(VoceBudget, pk=kwargs['pk'])
        self.evento_id = voce.evento_id
        return services.elimina_voce(voce)

    def get_success_url(self):
        return url_budget_evento(self.evento_id)


class VoceStatoView(AzioneView):
    """Cambio stato rapido di una voce (POST stato, data_pagamento, costo_effettivo)."""

    permission_required = 'budget.change_vocebudget'

    def esegui(self, request, *args, **kwargs):
        voce = get_object_or_404(VoceBudget, pk=kwargs['pk'])
        self.evento_id = voce.evento_id

        form = StatoVoceForm(request.POST)
        if not form.is_valid():
            return RisultatoAzione.da_form(form)

        return services.aggiorna_stato_voce(
            voce,
            form.cleaned_data['stato'],
            data_pagamento=form.cleaned_data.get('data_pagamento'),
            costo_effettivo=form.cleaned_data.get('costo_effettivo'),
            user=request.user,
        )

    def get_success_url(self):
        return url_budget_evento(self.evento_id)
