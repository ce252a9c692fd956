from django.contrib import admin

from .models import Evento


@admin.register(Evento)
class EventoAdmin(admin.ModelAdmin):
    list_display = ['codice', 'nome', 'tipo', 'luogo', 'data_inizio', 'data_fine', 'stato', 'budget', 'speso', 'is_active']
    list_filter = ['stato', 'tipo', 'is_active']
    search_fields = ['codice', 'nome', 'luogo']
    readonly_fields = ['codice', 'speso', 'created_at', 'updated_at', 'created_by', 'updated_by', 'deleted_at']
    date_hierarchy = 'data_inizio'

    fieldsets = (
        ('Evento', {
            'fields': ('codice', 'nome', 'tipo', 'descrizione', 'luogo', 'stato')
        }),
        ('Date e capienza', {
            'fields': ('data_inizio', 'data_fine', 'capienza')
        }),
        ('Budget', {
            'fields': ('budget', 'speso')
        }),
        ('Sistema', {
            'fields': ('is_active', 'deleted_at', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return Evento.objects.all()
