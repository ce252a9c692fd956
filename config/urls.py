"""
URL configuration per EventHub.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from eventi.views import DashboardView

urlpatterns = [
    # Dashboard centrale
    path("", DashboardView.as_view(), name="dashboard"),
    # Autenticazione e profilo
    path("accounts/", include("users.urls")),
    # Admin
    path("admin/", admin.site.urls),
    # Core (API allegati e ricerca globale)
    path("core/", include("core.urls")),
    path("select2/", include("django_select2.urls")),
    # Eventi e moduli collegati
    path("eventi/", include("eventi.urls")),
    path("persone/staff/", include("staff.urls")),
    path("persone/", include("persone.urls")),
    path("budget/", include("budget.urls")),
    path("agenda/", include("agenda.urls")),
    path("scadenze/", include("scadenze.urls")),
    path("comunicazioni/", include("comunicazioni.urls")),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
