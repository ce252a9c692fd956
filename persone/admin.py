from django.contrib import admin

from .models import Partecipante, Relatore, Sponsor


@admin.register(Partecipante)
class PartecipanteAdmin(admin.ModelAdmin):
    list_display = ['cognome', 'nome', 'email', 'azienda', 'evento', 'stato', 'checked_in', 'orario_checkin']
    list_filter = ['stato', 'checked_in', 'evento']
    search_fields = ['nome', 'cognome', 'email', 'azienda']
    readonly_fields = ['orario_checkin', 'created_at', 'updated_at']
    date_hierarchy = 'data_registrazione'


@admin.register(Relatore)
class RelatoreAdmin(admin.ModelAdmin):
    list_display = ['cognome', 'nome', 'titolo_intervento', 'evento', 'data_intervento', 'stato']
    list_filter = ['stato', 'evento']
    search_fields = ['nome', 'cognome', 'email', 'azienda', 'titolo_intervento']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Sponsor)
class SponsorAdmin(admin.ModelAdmin):
    list_display = ['nome', 'livello', 'evento', 'importo', 'stato', 'stato_pagamento', 'contratto_firmato']
    list_filter = ['livello', 'stato', 'stato_pagamento', 'contratto_firmato']
    search_fields = ['nome', 'referente', 'email']
    readonly_fields = ['voce_budget', 'created_at', 'updated_at']

    fieldsets = (
        ('Sponsor', {
            'fields': ('evento', 'nome', 'livello', 'sito_web', 'logo')
        }),
        ('Contatto', {
            'fields': ('referente', 'email', 'telefono')
        }),
        ('Accordo', {
            'fields': ('importo', 'benefit', 'stand', 'stato', 'contratto_firmato', 'data_contratto')
        }),
        ('Pagamento', {
            'fields': ('stato_pagamento', 'data_pagamento', 'voce_budget')
        }),
        ('Note', {
            'fields': ('note', 'created_at', 'updated_at')
        }),
    )
