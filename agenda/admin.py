from django.contrib import admin

from .models import SessioneAgenda


@admin.register(SessioneAgenda)
class SessioneAgendaAdmin(admin.ModelAdmin):
    list_display = ['titolo', 'evento', 'tipo', 'inizio', 'fine', 'durata', 'sala', 'stato', 'pubblica']
    list_filter = ['tipo', 'stato', 'pubblica', 'evento']
    search_fields = ['titolo', 'sala', 'evento__nome']
    readonly_fields = ['durata', 'created_at', 'updated_at']
    filter_horizontal = ['relatori']
    date_hierarchy = 'inizio'
