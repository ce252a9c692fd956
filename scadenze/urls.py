from django.urls import path

from . import views

app_name = "scadenze"

urlpatterns = [
    path("", views.ScadenzeListView.as_view(), name="scadenze_list"),
    path("eventi/<uuid:evento_pk>/nuova/", views.ScadenzaCreateView.as_view(), name="scadenza_create"),
    path("<uuid:pk>/modifica/", views.ScadenzaUpdateView.as_view(), name="scadenza_update"),
    path("<uuid:pk>/elimina/", views.ScadenzaDeleteView.as_view(), name="scadenza_delete"),
    path("<uuid:pk>/completa/", views.ScadenzaCompletaView.as_view(), name="scadenza_completa"),
    path("<uuid:pk>/riapri/", views.ScadenzaRiapriView.as_view(), name="scadenza_riapri"),
]
