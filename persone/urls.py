from django.urls import path

from . import views

app_name = "persone"

urlpatterns = [
    # PARTECIPANTI
    path(
        "eventi/<uuid:evento_pk>/partecipanti/nuovo/",
        views.PartecipanteCreateView.as_view(),
        name="partecipante_create",
    ),
    path(
        "eventi/<uuid:evento_pk>/partecipanti/csv/",
        views.PartecipantiCSVView.as_view(),
        name="partecipanti_csv",
    ),
    path(
        "eventi/<uuid:evento_pk>/partecipanti/excel/",
        views.PartecipantiExcelView.as_view(),
        name="partecipanti_excel",
    ),
    path("eventi/<uuid:evento_pk>/badge/", views.BadgePDFView.as_view(), name="badge_pdf"),
    path("partecipanti/<uuid:pk>/", views.PartecipanteDetailView.as_view(), name="partecipante_detail"),
    path("partecipanti/<uuid:pk>/modifica/", views.PartecipanteUpdateView.as_view(), name="partecipante_update"),
    path("partecipanti/<uuid:pk>/elimina/", views.PartecipanteDeleteView.as_view(), name="partecipante_delete"),
    path("partecipanti/<uuid:pk>/qr/", views.PartecipanteQRView.as_view(), name="partecipante_qr"),
    # CHECK-IN
    path("eventi/<uuid:evento_pk>/checkin/", views.CheckinView.as_view(), name="checkin"),
    path("eventi/<uuid:evento_pk>/checkin/qr/", views.CheckinQRView.as_view(), name="checkin_qr"),
    path("partecipanti/<uuid:pk>/checkin/", views.CheckinManualeView.as_view(), name="checkin_manuale"),
    path("partecipanti/<uuid:pk>/annulla-checkin/", views.AnnullaCheckinView.as_view(), name="annulla_checkin"),
    # RELATORI
    path("eventi/<uuid:evento_pk>/relatori/nuovo/", views.RelatoreCreateView.as_view(), name="relatore_create"),
    path("eventi/<uuid:evento_pk>/relatori/excel/", views.RelatoriExcelView.as_view(), name="relatori_excel"),
    path("relatori/<uuid:pk>/modifica/", views.RelatoreUpdateView.as_view(), name="relatore_update"),
    path("relatori/<uuid:pk>/elimina/", views.RelatoreDeleteView.as_view(), name="relatore_delete"),
    # SPONSOR
    path("eventi/<uuid:evento_pk>/sponsor/nuovo/", views.SponsorCreateView.as_view(), name="sponsor_create"),
    path("eventi/<uuid:evento_pk>/sponsor/excel/", views.SponsorExcelView.as_view(), name="sponsor_excel"),
    path("sponsor/<uuid:pk>/modifica/", views.SponsorUpdateView.as_view(), name="sponsor_update"),
    path("sponsor/<uuid:pk>/elimina/", views.SponsorDeleteView.as_view(), name="sponsor_delete"),
]
