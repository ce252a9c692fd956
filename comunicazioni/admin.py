from django.contrib import admin

from .models import Comunicazione, TemplateEmail


@admin.register(TemplateEmail)
class TemplateEmailAdmin(admin.ModelAdmin):
    list_display = ['nome', 'categoria', 'evento', 'predefinito', 'utilizzi', 'ultimo_utilizzo']
    list_filter = ['categoria', 'predefinito']
    search_fields = ['nome', 'oggetto']
    readonly_fields = ['utilizzi', 'ultimo_utilizzo', 'created_at', 'updated_at']


@admin.register(Comunicazione)
class ComunicazioneAdmin(admin.ModelAdmin):
    list_display = [
        'oggetto',
        'evento',
        'destinatari',
        'stato',
        'numero_destinatari',
        'invii_falliti',
        'programmata_il',
        'inviata_il',
    ]
    list_filter = ['stato', 'destinatari', 'tipo']
    search_fields = ['oggetto', 'evento__nome']
    readonly_fields = ['numero_destinatari', 'invii_falliti', 'inviata_il', 'errori_invio', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
