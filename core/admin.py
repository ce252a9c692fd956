from django.contrib import admin

from .models import Allegato


@admin.register(Allegato)
class AllegatoAdmin(admin.ModelAdmin):
    """Admin per gestire gli allegati"""

    list_display = [
        "nome_originale",
        "content_type",
        "object_id",
        "dimensione_display",
        "uploaded_by",
        "created_at",
    ]
    list_filter = ["content_type", "created_at", "tipo_file"]
    search_fields = ["nome_originale", "descrizione"]
    readonly_fields = ["nome_originale", "dimensione", "tipo_file", "created_at", "updated_at"]
    date_hierarchy = "created_at"

    fieldsets = (
        ("File", {"fields": ("file", "nome_originale", "dimensione", "tipo_file")}),
        ("Collegamento", {"fields": ("content_type", "object_id")}),
        ("Dettagli", {"fields": ("descrizione", "uploaded_by")}),
        ("Timestamp", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    @admin.display(description="Dimensione")
    def dimensione_display(self, obj):
        return obj.get_size_display()
