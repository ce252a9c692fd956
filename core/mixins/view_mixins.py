"""
View Mixins per EventHub

Mixins riutilizzabili per Class-Based Views.
"""

from django.apps import apps
from django.contrib import messages
from django.contrib.auth.mixins import PermissionRequiredMixin as DjangoPermissionMixin
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.generic import View

from core.actions import RisultatoAzione


def is_ajax(request):
    return (
        request.headers.get("X-Requested-With") == "XMLHttpRequest"
        or "application/json" in request.headers.get("Accept", "")
    )


# ============================================================================
# PERMISSION MIXINS
# ============================================================================


class PermissionRequiredMixin(DjangoPermissionMixin):
    """
    PermissionRequiredMixin con pagina 403 per utenti autenticati.

    Usage:
        class MiaView(PermissionRequiredMixin, ListView):
            permission_required = 'eventi.view_evento'
    """

    def handle_no_permission(self):
        if self.raise_exception or self.request.user.is_authenticated:
            raise PermissionDenied(
                f"Non hai i permessi necessari per accedere a questa risorsa. "
                f"Permessi richiesti: {self.get_permission_required()}"
            )
        return super().handle_no_permission()


# ============================================================================
# AJAX MIXINS
# ============================================================================


class JSONResponseMixin:
    """
    Mixin per restituire facilmente risposte JSON.
    """

    def render_to_json_response(self, context, **response_kwargs):
        return JsonResponse(context, **response_kwargs)


# ============================================================================
# FORM MIXINS
# ============================================================================


class FormConfigMixin:
    """
    Popola form_config per il template generico commons_templates/form.html.

    Usage:
        class MiaView(FormConfigMixin, CreateView):
            form_title = "Nuovo Evento"
            form_submit_text = "Crea Evento"
    """

    form_title = ""
    form_subtitle = ""
    form_submit_text = "Salva"

    def get_cancel_url(self):
        return self.request.GET.get("next") or "/"

    def get_form_config(self):
        return {
            "title": self.form_title,
            "subtitle": self.form_subtitle,
            "submit_text": self.form_submit_text,
            "cancel_url": self.get_cancel_url(),
        }

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["form_config"] = self.get_form_config()
        return context


# ============================================================================
# EVENTO MIXIN
# ============================================================================


class EventoMixin:
    """
    Carica l'evento padre dall'URL (kwarg evento_pk) e lo espone come
    self.evento e nel context.
    """

    evento_url_kwarg = "evento_pk"

    def dispatch(self, request, *args, **kwargs):
        Evento = apps.get_model("eventi", "Evento")
        self.evento = get_object_or_404(
            Evento.objects.attivi(), pk=kwargs[self.evento_url_kwarg]
        )
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["evento"] = self.evento
        return context


# ============================================================================
# AZIONI SERVER
# ============================================================================


class AzioneView(PermissionRequiredMixin, JSONResponseMixin, View):
    """
    Endpoint POST che esegue un'azione server e restituisce il RisultatoAzione.

    Chiamate AJAX ricevono il JSON {success, message, data, errors};
    le altre ricevono un messaggio flash e un redirect.

    Usage:
        class SegnaPagatoView(AzioneView):
            permission_required = 'staff.change_assegnazionestaff'

            def esegui(self, request, *args, **kwargs):
                return services.segna_pagato(...)
    """

    http_method_names = ["post"]

    def esegui(self, request, *args, **kwargs):
        raise NotImplementedError("Le sottoclassi devono implementare esegui()")

    def get_success_url(self):
        return "/"

    def get_redirect_url(self):
        next_url = self.request.POST.get("next") or self.request.GET.get("next")
        if next_url and url_has_allowed_host_and_scheme(
            next_url, allowed_hosts={self.request.get_host()}
        ):
            return next_url
        return self.get_success_url()

    def post(self, request, *args, **kwargs):
        risultato = self.esegui(request, *args, **kwargs)
        return self.risposta_azione(risultato)

    def risposta_azione(self, risultato):
        if is_ajax(self.request):
            return self.render_to_json_response(
                risultato.as_dict(), status=200 if risultato.success else 400
            )

        if risultato.success:
            if risultato.message:
                messages.success(self.request, risultato.message)
        else:
            messages.error(self.request, risultato.message)
            for campo, errori in (risultato.errors or {}).items():
                for errore in errori:
                    etichetta = "" if campo == "__all__" else f"{campo}: "
                    messages.error(self.request, f"{etichetta}{errore}")
        return redirect(self.get_redirect_url())


class ServizioFormMixin:
    """
    Delega il salvataggio di un form valido a un service di mutazione.

    Le sottoclassi implementano salva(form) restituendo un RisultatoAzione.
    Gli errori del service tornano sul form; le chiamate AJAX ricevono JSON.

    Usage:
        class CategoriaCreateView(ServizioFormMixin, EventoMixin, CreateView):
            def salva(self, form):
                return services.crea_categoria(self.evento, form.cleaned_data, self.request.user)
    """

    def salva(self, form):
        raise NotImplementedError("Le sottoclassi devono implementare salva()")

    def form_valid(self, form):
        risultato = self.salva(form)

        if not risultato.success:
            if is_ajax(self.request):
                return JsonResponse(risultato.as_dict(), status=400)
            for campo, errori in (risultato.errors or {"__all__": [risultato.message]}).items():
                for errore in errori:
                    form.add_error(campo if campo in form.fields else None, errore)
            return self.form_invalid(form)

        self.object = risultato.data
        if is_ajax(self.request):
            return JsonResponse(risultato.as_dict())
        if risultato.message:
            messages.success(self.request, risultato.message)
        return redirect(self.get_success_url())

    def form_invalid(self, form):
        if is_ajax(self.request):
            return JsonResponse(RisultatoAzione.da_form(form).as_dict(), status=400)
        return super().form_invalid(form)


# ============================================================================
# PAGINATION MIXINS
# ============================================================================


class CustomPaginationMixin:
    """
    Pagination con page size variabile (?page_size=50).
    """

    default_page_size = 20
    max_page_size = 100
    page_size_query_param = "page_size"

    def get_paginate_by(self, queryset):
        page_size = self.request.GET.get(self.page_size_query_param)

        if page_size:
            try:
                return max(1, min(int(page_size), self.max_page_size))
            except ValueError:
                pass

        return self.default_page_size


# ============================================================================
# FILTER MIXINS
# ============================================================================


class FilterMixin:
    """
    Filtra il queryset dai GET parameters.

    Usage:
        class MiaView(FilterMixin, ListView):
            filter_fields = ['stato', 'tipo']
    """

    filter_fields = []

    def get_queryset(self):
        queryset = super().get_queryset()

        for field in self.filter_fields:
            value = self.request.GET.get(field)
            if value:
                queryset = queryset.filter(**{field: value})

        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        for field in self.filter_fields:
            context[f"filtro_{field}"] = self.request.GET.get(field, "")
        return context


class SearchMixin:
    """
    Ricerca testuale (?q=termine) sui search_fields.
    """

    search_fields = []
    search_query_param = "q"

    def get_queryset(self):
        queryset = super().get_queryset()
        query = self.request.GET.get(self.search_query_param)

        if query and self.search_fields:
            q_objects = Q()
            for field in self.search_fields:
                q_objects |= Q(**{f"{field}__icontains": query})
            queryset = queryset.filter(q_objects)

        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["search_query"] = self.request.GET.get(self.search_query_param, "")
        return context
