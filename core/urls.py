"""
URL Configuration per l'app Core

API AJAX per allegati e ricerca globale.
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    # ========== API ALLEGATI (AJAX) ==========
    path("allegati/upload/", views.allegato_upload, name="allegato_upload"),
    path("allegati/list/", views.allegati_list, name="allegati_list"),
    path("allegati/<int:allegato_id>/delete/", views.allegato_delete, name="allegato_delete"),
    path("allegati/<int:allegato_id>/download/", views.allegato_download, name="allegato_download"),
    # ========== RICERCA GLOBALE (AJAX) ==========
    path("search/", views.global_search, name="global_search"),
]
