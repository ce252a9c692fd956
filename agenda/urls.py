from django.urls import path

from . import views

app_name = "agenda"

urlpatterns = [
    path("eventi/<uuid:evento_pk>/nuova/", views.SessioneCreateView.as_view(), name="sessione_create"),
    path("eventi/<uuid:evento_pk>/excel/", views.AgendaExcelView.as_view(), name="agenda_excel"),
    path("sessioni/<uuid:pk>/modifica/", views.SessioneUpdateView.as_view(), name="sessione_update"),
    path("sessioni/<uuid:pk>/elimina/", views.SessioneDeleteView.as_view(), name="sessione_delete"),
]
