from django.urls import path

from . import views

app_name = "staff"

urlpatterns = [
    # MEMBRI STAFF
    path("", views.StaffListView.as_view(), name="staff_list"),
    path("nuovo/", views.StaffCreateView.as_view(), name="staff_create"),
    path("excel/", views.StaffExcelView.as_view(), name="staff_excel"),
    path("<uuid:pk>/", views.StaffDetailView.as_view(), name="staff_detail"),
    path("<uuid:pk>/modifica/", views.StaffUpdateView.as_view(), name="staff_update"),
    path("<uuid:pk>/elimina/", views.StaffDeleteView.as_view(), name="staff_delete"),
    path("<uuid:pk>/attivo/", views.StaffToggleAttivoView.as_view(), name="staff_toggle_attivo"),
    # PAGAMENTI
    path("pagamenti/", views.PagamentiListView.as_view(), name="pagamenti_list"),
    # ASSEGNAZIONI
    path(
        "eventi/<uuid:evento_pk>/assegnazioni/nuova/",
        views.AssegnazioneCreateView.as_view(),
        name="assegnazione_create",
    ),
    path(
        "eventi/<uuid:evento_pk>/assegnazioni/multiple/",
        views.AssegnazioniMultipleView.as_view(),
        name="assegnazioni_multiple",
    ),
    path("assegnazioni/<uuid:pk>/", views.AssegnazioneDetailView.as_view(), name="assegnazione_detail"),
    path(
        "assegnazioni/<uuid:pk>/modifica/",
        views.AssegnazioneUpdateView.as_view(),
        name="assegnazione_update",
    ),
    path(
        "assegnazioni/<uuid:pk>/elimina/",
        views.AssegnazioneDeleteView.as_view(),
        name="assegnazione_delete",
    ),
    path("assegnazioni/<uuid:pk>/stato/", views.StatoAssegnazioneView.as_view(), name="assegnazione_stato"),
    path("assegnazioni/<uuid:pk>/pagato/", views.SegnaPagatoView.as_view(), name="segna_pagato"),
    path(
        "assegnazioni/<uuid:pk>/posticipa/",
        views.PosticipaPagamentoView.as_view(),
        name="posticipa_pagamento",
    ),
    path(
        "assegnazioni/<uuid:pk>/annulla-pagamento/",
        views.AnnullaPagamentoView.as_view(),
        name="annulla_pagamento",
    ),
]
