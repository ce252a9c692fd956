"""
Views per app staff: anagrafica, assegnazioni su evento e pagamenti.
"""

from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import get_object_or_404, redirect
from django.urls import reverse
from django.views.generic import CreateView, DetailView, FormView, ListView, UpdateView, View
from django.contrib import messages

from core.actions import RisultatoAzione
from core.excel_generator import generate_excel_response
from core.mixins.view_mixins import (
    AzioneView,
    CustomPaginationMixin,
    EventoMixin,
    FormConfigMixin,
    PermissionRequiredMixin,
    ServizioFormMixin,
)

from . import services
from .forms import (
    AnnullaPagamentoForm,
    AssegnazioneStaffForm,
    AssegnazioniMultipleForm,
    FiltroStaffForm,
    MembroStaffForm,
    PosticipaPagamentoForm,
    SegnaPagatoForm,
    StatoAssegnazioneForm,
)
from .models import AssegnazioneStaff, MembroStaff
from .pagamenti import riepilogo_pagamenti


def url_staff_evento(evento_id):
    return reverse('eventi:evento_tab', kwargs={'pk': evento_id, 'tab': 'staff'})


# ============================================================================
# MEMBRI STAFF
# ============================================================================

class StaffListView(LoginRequiredMixin, CustomPaginationMixin, ListView):
    model = MembroStaff
    template_name = "staff/staff_list.html"
    context_object_name = "membri"

    def get_queryset(self):
        self.filtro = FiltroStaffForm(self.request.GET or None)
        return self.filtro.filter_queryset(MembroStaff.objects.attivi().order_by('cognome', 'nome'))

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['filtro'] = self.filtro
        context['totale_disponibili'] = MembroStaff.objects.attivi().filter(attivo=True).count()
        return context


class StaffExcelView(LoginRequiredMixin, View):

    def get(self, request, *args, **kwargs):
        filtro = FiltroStaffForm(request.GET or None)
        membri = filtro.filter_queryset(MembroStaff.objects.attivi().order_by('cognome', 'nome'))
        righe = [
            {
                'Cognome': m.cognome,
                'Nome': m.nome,
                'Email': m.email,
                'Telefono': m.telefono,
                'Ruolo': m.get_ruolo_display(),
                'Specializzazione': m.specializzazione,
                'Tariffa Oraria': m.tariffa_oraria if m.tariffa_oraria is not None else '',
                'Disponibile': m.attivo,
                'Tag': m.tags,
            }
            for m in membri
        ]
        return generate_excel_response(righe, filename="staff", sheet_name="Staff")


class StaffDetailView(LoginRequiredMixin, DetailView):
    model = MembroStaff
    template_name = "staff/staff_detail.html"
    context_object_name = "membro"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        assegnazioni = self.object.assegnazioni.select_related('evento').order_by('-inizio')
        context['assegnazioni'] = assegnazioni
        context['riepilogo'] = riepilogo_pagamenti(assegnazioni)
        return context


class StaffCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, CreateView):
    model = MembroStaff
    form_class = MembroStaffForm
    template_name = "commons_templates/form.html"
    permission_required = 'staff.add_membrostaff'
    form_title = "Nuovo Membro Staff"
    form_submit_text = "Crea"

    def get_cancel_url(self):
        return reverse('staff:staff_list')

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.crea_membro(form.cleaned_data, self.request.user)


class StaffUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = MembroStaff
    form_class = MembroStaffForm
    template_name = "commons_templates/form.html"
    permission_required = 'staff.change_membrostaff'
    form_title = "Modifica Membro Staff"

    def get_cancel_url(self):
        return self.object.get_absolute_url()

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.aggiorna_membro(self.object, form.cleaned_data, self.request.user)


class StaffDeleteView(AzioneView):
    permission_required = 'staff.delete_membrostaff'

    def esegui(self, request, *args, **kwargs):
        self.membro = get_object_or_404(MembroStaff, pk=kwargs['pk'])
        self.risultato = services.elimina_membro(self.membro)
        return self.risultato

    def get_success_url(self):
        if self.risultato.success:
            return reverse('staff:staff_list')
        return self.membro.get_absolute_url()


class StaffToggleAttivoView(AzioneView):
    permission_required = 'staff.change_membrostaff'

    def esegui(self, request, *args, **kwargs):
        self.membro = get_object_or_404(MembroStaff, pk=kwargs['pk'])
        attivo = request.POST.get('attivo')
        nuovo_valore = (not self.membro.attivo) if attivo is None else attivo in ('1', 'true', 'on')
        return services.toggle_attivo(self.membro, nuovo_valore, request.user)

    def get_success_url(self):
        return self.membro.get_absolute_url()


# ============================================================================
# PAGAMENTI
# ============================================================================

class PagamentiListView(LoginRequiredMixin, CustomPaginationMixin, ListView):
    """Tutte le assegnazioni con importo, filtrabili per stato pagamento."""

    model = AssegnazioneStaff
    template_name = "staff/pagamenti_list.html"
    context_object_name = "assegnazioni"

    def get_queryset(self):
        qs = (
            AssegnazioneStaff.objects.filter(importo__isnull=False)
            .select_related('staff', 'evento')
            .order_by('data_scadenza_pagamento', 'inizio')
        )
        stato = self.request.GET.get('stato_pagamento', '')
        if stato:
            qs = qs.filter(stato_pagamento=stato)
        evento = self.request.GET.get('evento', '')
        if evento:
            qs = qs.filter(evento_id=evento)
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['riepilogo'] = riepilogo_pagamenti(self.get_queryset())
        context['stato_pagamento'] = self.request.GET.get('stato_pagamento', '')
        context['stati_pagamento'] = AssegnazioneStaff.STATO_PAGAMENTO_CHOICES
        return context


# ============================================================================
# ASSEGNAZIONI
# ============================================================================

class AssegnazioneDetailView(LoginRequiredMixin, DetailView):
    model = AssegnazioneStaff
    template_name = "staff/assegnazione_detail.html"
    context_object_name = "assegnazione"

    def get_queryset(self):
        return super().get_queryset().select_related('staff', 'evento', 'voce_budget', 'categoria_budget')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['segna_pagato_form'] = SegnaPagatoForm()
        context['posticipa_form'] = PosticipaPagamentoForm(
            initial={'nuova_scadenza': self.object.data_scadenza_pagamento}
        )
        context['annulla_form'] = AnnullaPagamentoForm()
        return context


class AssegnazioneCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, EventoMixin, CreateView):
    model = AssegnazioneStaff
    form_class = AssegnazioneStaffForm
    template_name = "commons_templates/form.html"
    permission_required = 'staff.add_assegnazionestaff'
    form_title = "Nuova Assegnazione"
    form_submit_text = "Assegna"

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs['evento'] = self.evento
        return kwargs

    def get_initial(self):
        initial = super().get_initial()
        if self.request.GET.get('staff'):
            initial['staff'] = self.request.GET['staff']
        return initial

    def get_cancel_url(self):
        return url_staff_evento(self.evento.pk)

    def get_success_url(self):
        return url_staff_evento(self.evento.pk)

    def salva(self, form):
        return services.crea_assegnazione(self.evento, form.cleaned_data, self.request.user)


class AssegnazioneUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = AssegnazioneStaff
    form_class = AssegnazioneStaffForm
    template_name = "commons_templates/form.html"
    permission_required = 'staff.change_assegnazionestaff'
    form_title = "Modifica Assegnazione"

    def get_cancel_url(self):
        return self.object.get_absolute_url()

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.aggiorna_assegnazione(self.object, form.cleaned_data, self.request.user)


class AssegnazioniMultipleView(PermissionRequiredMixin, FormConfigMixin, EventoMixin, FormView):
    form_class = AssegnazioniMultipleForm
    template_name = "commons_templates/form.html"
    permission_required = 'staff.add_assegnazionestaff'
    form_title = "Assegnazione Multipla"
    form_submit_text = "Assegna"

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs['evento'] = self.evento
        return kwargs

    def get_cancel_url(self):
        return url_staff_evento(self.evento.pk)

    def form_valid(self, form):
        dati = form.cleaned_data
        risultato = services.crea_assegnazioni_multiple(
            self.evento,
            [m.pk for m in dati['staff']],
            dati['inizio'],
            dati['fine'],
            termini_pagamento=dati['termini_pagamento'],
            data_scadenza_pagamento=dati.get('data_scadenza_pagamento'),
            importo=dati.get('importo'),
            note=dati.get('note'),
            categoria_budget=dati.get('categoria_budget'),
            user=self.request.user,
        )
        if not risultato.success:
            form.add_error(None, risultato.message)
            return self.form_invalid(form)

        messages.success(self.request, f"{risultato.message}: {len(risultato.data['ids'])}")
        return redirect(url_staff_evento(self.evento.pk))


class AzioneAssegnazioneView(AzioneView):
    """Base per le azioni su una singola assegnazione."""

    permission_required = 'staff.change_assegnazionestaff'
    form_class = None

    def esegui(self, request, *args, **kwargs):
        self.assegnazione = get_object_or_404(
            AssegnazioneStaff.objects.select_related('staff', 'voce_budget'), pk=kwargs['pk']
        )
        form = self.form_class(request.POST)
        if not form.is_valid():
            return RisultatoAzione.da_form(form)
        return self.esegui_azione(form.cleaned_data)

    def esegui_azione(self, dati):
        raise NotImplementedError

    def get_success_url(self):
        return self.assegnazione.get_absolute_url()


class SegnaPagatoView(AzioneAssegnazioneView):
    form_class = SegnaPagatoForm

    def esegui_azione(self, dati):
        return services.segna_pagato(
            self.assegnazione,
            dati['data_pagamento'],
            note=dati.get('note'),
            numero_fattura=dati.get('numero_fattura'),
            url_fattura=dati.get('url_fattura'),
            user=self.request.user,
        )


class PosticipaPagamentoView(AzioneAssegnazioneView):
    form_class = PosticipaPagamentoForm

    def esegui_azione(self, dati):
        return services.posticipa_pagamento(
            self.assegnazione, dati['nuova_scadenza'], dati.get('motivo'), user=self.request.user
        )


class AnnullaPagamentoView(AzioneAssegnazioneView):
    form_class = AnnullaPagamentoForm

    def esegui_azione(self, dati):
        return services.annulla_pagamento(self.assegnazione, dati.get('motivo'), user=self.request.user)


class StatoAssegnazioneView(AzioneAssegnazioneView):
    form_class = StatoAssegnazioneForm

    def esegui_azione(self, dati):
        return services.aggiorna_stato_assegnazione(self.assegnazione, dati['stato'], user=self.request.user)


class AssegnazioneDeleteView(AzioneView):
    permission_required = 'staff.delete_assegnazionestaff'

    def esegui(self, request, *args, **kwargs):
        assegnazione = get_object_or_404(AssegnazioneStaff, pk=kwargs['pk'])
        self.evento_id = assegnazione.evento_id
        return services.elimina_assegnazione(assegnazione)

    def get_success_url(self):
        return url_staff_evento(self.evento_id)
