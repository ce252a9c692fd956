from django.contrib import admin

from .models import Scadenza


@admin.register(Scadenza)
class ScadenzaAdmin(admin.ModelAdmin):
    list_display = ['titolo', 'evento', 'data_scadenza', 'categoria', 'priorita', 'stato', 'notifica_inviata']
    list_filter = ['stato', 'priorita', 'categoria', 'notifica_inviata']
    search_fields = ['titolo', 'descrizione', 'evento__nome']
    readonly_fields = ['completata_il', 'completata_da', 'created_at', 'updated_at']
    date_hierarchy = 'data_scadenza'
    actions = ['segna_completate']

    @admin.action(description="Segna come completate")
    def segna_completate(self, request, queryset):
        for scadenza in queryset:
            scadenza.completa(request.user)
        self.message_user(request, f"{queryset.count()} scadenze completate")
