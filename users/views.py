"""
Views per l'app users.
"""

import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods

from .forms import ImpostazioniNotificheForm, LoginForm, ProfiloForm

logger = logging.getLogger(__name__)


# ============================================================================
# AUTENTICAZIONE
# ============================================================================


@require_http_methods(["GET", "POST"])
def login_view(request):
    """
    Vista login.

    Remember me: imposta sessione a 30 giorni, altrimenti scade alla
    chiusura del browser.
    """
    if request.user.is_authenticated:
        return redirect("dashboard")

    if request.method == "POST":
        form = LoginForm(request, data=request.POST)

        if form.is_valid():
            user = form.get_user()
            login(request, user)

            if form.cleaned_data.get("remember_me"):
                request.session.set_expiry(60 * 60 * 24 * 30)
            else:
                request.session.set_expiry(0)

            logger.info(f"Login utente {user.username}")
            messages.success(request, f"Benvenuto, {user.get_full_name() or user.username}!")

            next_url = request.GET.get("next") or request.POST.get("next")
            if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                return redirect(next_url)
            return redirect("dashboard")

        messages.error(request, "Credenziali non valide. Riprova.")
    else:
        form = LoginForm()

    return render(request, "login.html", {"form": form})


@require_http_methods(["GET", "POST"])
def logout_view(request):
    """Esegue logout e redirect alla pagina di login."""
    logout(request)
    messages.info(request, "Logout effettuato con successo.")
    return redirect("users:login")


# ============================================================================
# PROFILO E IMPOSTAZIONI
# ============================================================================


@login_required
def profilo_view(request):
    """
    Visualizza e modifica il profilo dell'utente corrente.
    """
    if request.method == "POST":
        form = ProfiloForm(request.POST, instance=request.user)
        if form.is_valid():
            form.save()
            messages.success(request, "Profilo aggiornato con successo!")
            return redirect("users:profilo")
        messages.error(request, "Errori di validazione")
    else:
        form = ProfiloForm(instance=request.user)

    return render(request, "users/profilo.html", {"form": form})


@login_required
def impostazioni_view(request):
    """
    Impostazioni notifiche dell'utente.
    """
    if request.method == "POST":
        form = ImpostazioniNotificheForm(request.POST, instance=request.user)
        if form.is_valid():
            form.save()
            messages.success(request, "Impostazioni notifiche aggiornate")
            return redirect("users:impostazioni")
        messages.error(request, "Errori di validazione")
    else:
        form = ImpostazioniNotificheForm(instance=request.user)

    return render(request, "users/impostazioni.html", {"form": form})
