"""
URLs per l'app users.
"""

from django.urls import path

from . import views

app_name = "users"

urlpatterns = [
    path("login/", views.login_view, name="login"),
    path("logout/", views.logout_view, name="logout"),
    path("profilo/", views.profilo_view, name="profilo"),
    path("impostazioni/", views.impostazioni_view, name="impostazioni"),
]
