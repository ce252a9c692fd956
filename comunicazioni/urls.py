from django.urls import path

from . import views

app_name = "comunicazioni"

urlpatterns = [
    # COMUNICAZIONI
    path("eventi/<uuid:evento_pk>/nuova/", views.ComunicazioneCreateView.as_view(), name="comunicazione_create"),
    path("eventi/<uuid:evento_pk>/anteprima/", views.AnteprimaView.as_view(), name="anteprima"),
    path("<uuid:pk>/", views.ComunicazioneDetailView.as_view(), name="comunicazione_detail"),
    path("<uuid:pk>/invia/", views.ComunicazioneInviaView.as_view(), name="comunicazione_invia"),
    path("<uuid:pk>/annulla/", views.ComunicazioneAnnullaView.as_view(), name="comunicazione_annulla"),
    path("<uuid:pk>/elimina/", views.ComunicazioneDeleteView.as_view(), name="comunicazione_delete"),
    # TEMPLATE
    path("template/", views.TemplateListView.as_view(), name="template_list"),
    path("template/nuovo/", views.TemplateCreateView.as_view(), name="template_create"),
    path("template/<uuid:pk>/modifica/", views.TemplateUpdateView.as_view(), name="template_update"),
    path("template/<uuid:pk>/elimina/", views.TemplateDeleteView.as_view(), name="template_delete"),
]
