from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ["username", "email", "first_name", "last_name", "ruolo", "is_active", "is_staff"]
    list_filter = ["ruolo", "is_active", "is_staff", "is_superuser"]

    fieldsets = BaseUserAdmin.fieldsets + (
        ("EventHub", {"fields": ("ruolo", "telefono", "azienda")}),
        (
            "Notifiche",
            {
                "fields": (
                    "notifiche_email",
                    "notifiche_scadenze",
                    "notifiche_pagamenti",
                    "giorni_preavviso_scadenze",
                ),
                "classes": ("collapse",),
            },
        ),
    )
