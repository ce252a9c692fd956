"""
Views per app eventi: dashboard, lista, dettaglio a schede, CRUD,
cambio stato e duplicazione.
"""

import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import Http404
from django.urls import reverse, reverse_lazy
from django.views.generic import CreateView, DetailView, ListView, TemplateView, UpdateView

from core.actions import RisultatoAzione
from core.mixins.view_mixins import (
    AzioneView,
    CustomPaginationMixin,
    FormConfigMixin,
    PermissionRequiredMixin,
    ServizioFormMixin,
)

from . import services
from .forms import EventoForm, FiltroEventiForm, StatoEventoForm
from .models import Evento

logger = logging.getLogger(__name__)

TAB_EVENTO = [
    ('panoramica', 'Panoramica', 'bi-speedometer2'),
    ('partecipanti', 'Partecipanti', 'bi-people'),
    ('relatori', 'Relatori', 'bi-mic'),
    ('sponsor', 'Sponsor', 'bi-award'),
    ('staff', 'Staff', 'bi-person-badge'),
    ('budget', 'Budget', 'bi-cash-stack'),
    ('agenda', 'Agenda', 'bi-calendar-week'),
    ('scadenze', 'Scadenze', 'bi-alarm'),
    ('comunicazioni', 'Comunicazioni', 'bi-envelope'),
]


# ============================================================================
# DASHBOARD
# ============================================================================

class DashboardView(LoginRequiredMixin, TemplateView):
    template_name = "eventi/dashboard.html"

    def get_context_data(self, **kwargs):
        from scadenze.services import scadenze_urgenti
        from staff.services import pagamenti_scaduti

        context = super().get_context_data(**kwargs)
        context['statistiche'] = services.statistiche_dashboard()
        context['prossimi_eventi'] = services.prossimi_eventi()
        context['eventi_recenti'] = services.eventi_recenti()
        context['scadenze_urgenti'] = scadenze_urgenti()[:5]
        context['pagamenti_scaduti'] = pagamenti_scaduti().filter(evento__is_active=True)[:5]
        return context


# ============================================================================
# EVENTI
# ============================================================================

class EventoListView(LoginRequiredMixin, CustomPaginationMixin, ListView):
    model = Evento
    template_name = "eventi/evento_list.html"
    context_object_name = "eventi"

    def get_queryset(self):
        self.filtro = FiltroEventiForm(self.request.GET or None)
        return self.filtro.filter_queryset(Evento.objects.attivi().order_by('-data_inizio'))

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['filtro'] = self.filtro
        return context


class EventoDetailView(LoginRequiredMixin, DetailView):
    """
    Dettaglio evento a schede. La scheda attiva arriva dall'URL
    (eventi/<pk>/<tab>/); ogni scheda carica solo i propri dati.
    """

    model = Evento
    template_name = "eventi/evento_detail.html"
    context_object_name = "evento"

    def get_queryset(self):
        return Evento.objects.attivi()

    def get_tab(self):
        tab = self.kwargs.get('tab', 'panoramica')
        if tab not in dict((codice, nome) for codice, nome, _ in TAB_EVENTO):
            raise Http404(f"Scheda non trovata: {tab}")
        return tab

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        tab = self.get_tab()
        context['tab'] = tab
        context['tabs'] = [
            {
                'codice': codice,
                'nome': nome,
                'icona': icona,
                'url': reverse('eventi:evento_tab', kwargs={'pk': self.object.pk, 'tab': codice}),
            }
            for codice, nome, icona in TAB_EVENTO
        ]
        context['statistiche'] = services.statistiche_evento(self.object)
        context['stato_form'] = StatoEventoForm(initial={'stato': self.object.stato})
        context.update(getattr(self, f"contesto_{tab}")(self.object))
        return context

    def contesto_panoramica(self, evento):
        from budget.services import statistiche_evento as statistiche_budget
        from scadenze.services import scadenze_urgenti

        return {
            'budget': statistiche_budget(evento),
            'scadenze_urgenti': scadenze_urgenti(evento=evento)[:5],
        }

    def contesto_partecipanti(self, evento):
        from persone.forms import FiltroPartecipantiForm
        from persone.services import statistiche_checkin

        filtro = FiltroPartecipantiForm(self.request.GET or None)
        return {
            'filtro': filtro,
            'partecipanti': filtro.filter_queryset(evento.partecipanti.order_by('cognome', 'nome')),
            'statistiche_checkin': statistiche_checkin(evento),
        }

    def contesto_relatori(self, evento):
        return {'relatori': evento.relatori.order_by('cognome', 'nome')}

    def contesto_sponsor(self, evento):
        return {'sponsor_list': evento.sponsor.select_related('voce_budget').order_by('livello', 'nome')}

    def contesto_staff(self, evento):
        from staff.pagamenti import riepilogo_pagamenti

        assegnazioni = evento.assegnazioni_staff.select_related('staff').order_by('inizio')
        return {
            'assegnazioni': assegnazioni,
            'riepilogo': riepilogo_pagamenti(assegnazioni),
        }

    def contesto_budget(self, evento):
        from budget.services import prossimi_pagamenti, statistiche_evento as statistiche_budget

        return {
            'budget': statistiche_budget(evento),
            'categorie': evento.categorie_budget.order_by('nome'),
            'voci': evento.voci_budget.select_related('categoria').order_by('categoria__nome', 'descrizione'),
            'prossimi_pagamenti': prossimi_pagamenti(evento),
        }

    def contesto_agenda(self, evento):
        from agenda.services import timeline_agenda

        return {'timeline': timeline_agenda(evento)}

    def contesto_scadenze(self, evento):
        from scadenze.services import conteggi_scadenze

        return {
            'scadenze': evento.scadenze.select_related('assegnata_a').order_by('data_scadenza'),
            'conteggi': conteggi_scadenze(evento),
        }

    def contesto_comunicazioni(self, evento):
        return {'comunicazioni': evento.comunicazioni.select_related('template').order_by('-created_at')}


class EventoCreateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, CreateView):
    model = Evento
    form_class = EventoForm
    template_name = "commons_templates/form.html"
    permission_required = 'eventi.add_evento'
    form_title = "Nuovo Evento"
    form_submit_text = "Crea Evento"

    def get_cancel_url(self):
        return reverse('eventi:evento_list')

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.crea_evento(form.cleaned_data, self.request.user)


class EventoUpdateView(PermissionRequiredMixin, ServizioFormMixin, FormConfigMixin, UpdateView):
    model = Evento
    form_class = EventoForm
    template_name = "commons_templates/form.html"
    permission_required = 'eventi.change_evento'
    form_title = "Modifica Evento"

    def get_queryset(self):
        return Evento.objects.attivi()

    def get_cancel_url(self):
        return self.object.get_absolute_url()

    def get_success_url(self):
        return self.object.get_absolute_url()

    def salva(self, form):
        return services.aggiorna_evento(self.object, form.cleaned_data, self.request.user)


class EventoAzioneView(AzioneView):
    """Azione su un evento attivo caricato da pk."""

    def get_evento(self):
        try:
            return Evento.objects.attivi().get(pk=self.kwargs['pk'])
        except Evento.DoesNotExist:
            raise Http404("Evento non trovato")

    def get_success_url(self):
        return self.evento.get_absolute_url()


class EventoDeleteView(EventoAzioneView):
    permission_required = 'eventi.delete_evento'
    success_url = reverse_lazy('eventi:evento_list')

    def esegui(self, request, *args, **kwargs):
        self.evento = self.get_evento()
        return services.elimina_evento(self.evento, request.user)

    def get_success_url(self):
        return str(self.success_url)


class EventoStatoView(EventoAzioneView):
    permission_required = 'eventi.change_evento'

    def esegui(self, request, *args, **kwargs):
        self.evento = self.get_evento()
        form = StatoEventoForm(request.POST)
        if not form.is_valid():
            return RisultatoAzione.da_form(form)
        return services.aggiorna_stato_evento(self.evento, form.cleaned_data['stato'], request.user)


class EventoDuplicaView(EventoAzioneView):
    permission_required = 'eventi.add_evento'

    def esegui(self, request, *args, **kwargs):
        self.evento = self.get_evento()
        risultato = services.duplica_evento(self.evento, request.user)
        if risultato.success:
            self.evento = risultato.data
        return risultato


class DuplicazioneListView(LoginRequiredMixin, ListView):
    """Scelta dell'evento da duplicare (ricerca per nome e anno)."""

    template_name = "eventi/duplica.html"
    context_object_name = "eventi"
    paginate_by = 20

    def get_queryset(self):
        anno = self.request.GET.get('anno')
        return services.eventi_per_duplicazione(
            ricerca=self.request.GET.get('q'),
            anno=int(anno) if anno and anno.isdigit() else None,
        )
