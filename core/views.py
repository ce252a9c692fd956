"""
Views AJAX per allegati e ricerca globale.
"""

import logging
import os

from django.contrib.auth.decorators import login_required
from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import FileResponse, Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.views.decorators.http import require_http_methods

from .models import Allegato
from .search import SearchRegistry

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

ALLOWED_FILE_EXTENSIONS = {
    '.pdf',
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp',
    '.doc', '.docx',
    '.xls', '.xlsx',
    '.odt', '.ods',
    '.txt', '.csv',
    '.zip',
}

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def validate_file_upload(file):
    """
    Valida un file caricato: estensione permessa e dimensione entro 10 MB.

    Returns:
        tuple: (is_valid, error_message)
    """
    file_ext = os.path.splitext(file.name)[1].lower()

    if file_ext not in ALLOWED_FILE_EXTENSIONS:
        allowed_list = ', '.join(sorted(ALLOWED_FILE_EXTENSIONS))
        return False, f"Tipo file non consentito. Formati permessi: {allowed_list}"

    if file.size > MAX_FILE_SIZE:
        max_mb = MAX_FILE_SIZE / (1024 * 1024)
        actual_mb = file.size / (1024 * 1024)
        return False, f"File troppo grande ({actual_mb:.1f}MB). Dimensione massima: {max_mb:.0f}MB"

    return True, None


def can_user_delete_allegato(allegato, user):
    """
    Admin/staff eliminano tutto, gli altri solo i propri allegati.
    """
    if not user or not user.is_authenticated:
        return False
    if user.is_staff or user.is_superuser:
        return True
    return allegato.uploaded_by_id == user.pk


def can_user_access_oggetto(user, content_type, azione="view"):
    """
    Permesso sul model a cui è collegato l'allegato: view per consultare,
    change per caricare.
    """
    return user.has_perm(f"{content_type.app_label}.{azione}_{content_type.model}")


def get_oggetto_collegato(content_type_id, object_id):
    """
    Oggetto a cui collegare o da cui leggere gli allegati.

    Returns:
        tuple: (content_type, oggetto) oppure (None, None) se non esiste
    """
    try:
        content_type = ContentType.objects.get(pk=content_type_id)
    except (ContentType.DoesNotExist, ValueError):
        return None, None

    model = content_type.model_class()
    if model is None:
        return None, None

    try:
        return content_type, model._default_manager.get(pk=object_id)
    except (model.DoesNotExist, ValueError, ValidationError):
        return None, None


def _allegato_json(allegato, user):
    return {
        "id": allegato.pk,
        "nome": allegato.nome_originale,
        "descrizione": allegato.descrizione,
        "dimensione": allegato.get_size_display(),
        "data": allegato.created_at.strftime("%d/%m/%Y %H:%M"),
        "uploaded_by": (
            (allegato.uploaded_by.get_full_name() or allegato.uploaded_by.username)
            if allegato.uploaded_by
            else "Anonimo"
        ),
        "url": reverse("core:allegato_download", args=[allegato.pk]),
        "is_pdf": allegato.is_pdf(),
        "is_image": allegato.is_image(),
        "can_delete": can_user_delete_allegato(allegato, user),
    }


# ============================================================================
# AJAX VIEWS
# ============================================================================


@login_required
@require_http_methods(["POST"])
def allegato_upload(request):
    """
    Upload di un allegato.

    POST: file, content_type (ID ContentType), object_id, descrizione
    """
    if "file" not in request.FILES:
        return JsonResponse({"success": False, "message": "Nessun file fornito"}, status=400)

    uploaded_file = request.FILES["file"]
    is_valid, error_message = validate_file_upload(uploaded_file)
    if not is_valid:
        return JsonResponse({"success": False, "message": error_message}, status=400)

    content_type_id = request.POST.get("content_type")
    object_id = request.POST.get("object_id")
    if not content_type_id or not object_id:
        return JsonResponse({"success": False, "message": "Parametri mancanti"}, status=400)

    content_type, oggetto = get_oggetto_collegato(content_type_id, object_id)
    if oggetto is None:
        return JsonResponse({"success": False, "message": "Oggetto non trovato"}, status=404)

    if not can_user_access_oggetto(request.user, content_type, "change"):
        return JsonResponse(
            {"success": False, "message": "Non hai i permessi per allegare file a questo oggetto"},
            status=403,
        )

    allegato = Allegato.objects.create(
        content_type=content_type,
        object_id=str(oggetto.pk),
        file=uploaded_file,
        descrizione=request.POST.get("descrizione", ""),
        uploaded_by=request.user,
    )
    logger.info(f"Allegato {allegato.nome_originale} caricato da {request.user}")

    return JsonResponse({"success": True, "allegato": _allegato_json(allegato, request.user)})


@login_required
@require_http_methods(["GET"])
def allegati_list(request):
    """Lista allegati di un oggetto (GET: content_type, object_id)."""
    content_type_id = request.GET.get("content_type")
    object_id = request.GET.get("object_id")

    if not content_type_id or not object_id:
        return JsonResponse({"success": False, "message": "Parametri mancanti"}, status=400)

    content_type, oggetto = get_oggetto_collegato(content_type_id, object_id)
    if oggetto is None:
        return JsonResponse({"success": False, "message": "Oggetto non trovato"}, status=404)

    if not can_user_access_oggetto(request.user, content_type):
        return JsonResponse({"success": False, "message": "Permesso negato"}, status=403)

    allegati = (
        Allegato.objects.filter(content_type=content_type, object_id=str(oggetto.pk))
        .select_related("uploaded_by")
        .order_by("-created_at")
    )
    allegati_data = [_allegato_json(a, request.user) for a in allegati]

    return JsonResponse({"success": True, "allegati": allegati_data, "count": len(allegati_data)})


@login_required
@require_http_methods(["DELETE", "POST"])
def allegato_delete(request, allegato_id):
    """Elimina un allegato (solo autore o staff)."""
    allegato = get_object_or_404(Allegato, pk=allegato_id)

    if not can_user_delete_allegato(allegato, request.user):
        return JsonResponse(
            {"success": False, "message": "Non hai i permessi per eliminare questo allegato"},
            status=403,
        )

    allegato.delete()
    return JsonResponse({"success": True, "message": "Allegato eliminato con successo"})


@login_required
@require_http_methods(["GET"])
def allegato_download(request, allegato_id):
    """Download di un allegato (serve il permesso di consultazione sull'oggetto)."""
    allegato = get_object_or_404(Allegato.objects.select_related("content_type"), pk=allegato_id)
    if not can_user_access_oggetto(request.user, allegato.content_type):
        raise PermissionDenied
    try:
        handle = allegato.file.open("rb")
    except FileNotFoundError:
        logger.error(f"File mancante per allegato {allegato.pk}: {allegato.file.name}")
        raise Http404("File non trovato")

    return FileResponse(handle, as_attachment=True, filename=allegato.nome_originale)


# ============================================================================
# RICERCA GLOBALE
# ============================================================================


@login_required
@require_http_methods(["GET"])
def global_search(request):
    """
    Ricerca globale in tutti i model registrati nel SearchRegistry.

    GET: q (minimo 2 caratteri)
    """
    query = request.GET.get("q", "").strip()

    if len(query) < 2:
        return JsonResponse(
            {"success": False, "message": "Query troppo corta (minimo 2 caratteri)"},
            status=400,
        )

    results = SearchRegistry.search_all(query, max_results_per_model=5)

    return JsonResponse(
        {
            "success": True,
            "query": query,
            "results": results,
            "total_categories": len(results),
            "total_results": sum(len(cat["items"]) for cat in results),
        }
    )
