from django.urls import path

from . import views

app_name = "budget"

urlpatterns = [
    # FINANZE
    path("", views.FinanzeView.as_view(), name="finanze"),
    path("report/", views.ReportFinanziarioView.as_view(), name="report"),
    path("report/csv/", views.ReportCSVView.as_view(), name="report_csv"),
    path("report/pdf/", views.ReportPDFView.as_view(), name="report_pdf"),
    path("eventi/<uuid:evento_pk>/excel/", views.BudgetExcelView.as_view(), name="budget_excel"),
    # CATEGORIE
    path(
        "eventi/<uuid:evento_pk>/categorie/nuova/",
        views.CategoriaCreateView.as_view(),
        name="categoria_create",
    ),
    path("categorie/<uuid:pk>/modifica/", views.CategoriaUpdateView.as_view(), name="categoria_update"),
    path("categorie/<uuid:pk>/elimina/", views.CategoriaDeleteView.as_view(), name="categoria_delete"),
    # VOCI
    path("eventi/<uuid:evento_pk>/voci/nuova/", views.VoceCreateView.as_view(), name="voce_create"),
    path("voci/<uuid:pk>/modifica/", views.VoceUpdateView.as_view(), name="voce_update"),
    path("voci/<uuid:pk>/elimina/", views.VoceDeleteView.as_view(), name="voce_delete"),
    path("voci/<uuid:pk>/stato/", views.VoceStatoView.as_view(), name="voce_stato"),
]
