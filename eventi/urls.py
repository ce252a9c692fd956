from django.urls import path

from . import views

app_name = "eventi"

urlpatterns = [
    path("", views.EventoListView.as_view(), name="evento_list"),
    path("nuovo/", views.EventoCreateView.as_view(), name="evento_create"),
    path("duplica/", views.DuplicazioneListView.as_view(), name="duplicazione_list"),
    path("<uuid:pk>/", views.EventoDetailView.as_view(), name="evento_detail"),
    path("<uuid:pk>/modifica/", views.EventoUpdateView.as_view(), name="evento_update"),
    path("<uuid:pk>/elimina/", views.EventoDeleteView.as_view(), name="evento_delete"),
    path("<uuid:pk>/stato/", views.EventoStatoView.as_view(), name="evento_stato"),
    path("<uuid:pk>/duplica/", views.EventoDuplicaView.as_view(), name="evento_duplica"),
    path("<uuid:pk>/<slug:tab>/", views.EventoDetailView.as_view(), name="evento_tab"),
]
