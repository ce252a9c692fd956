from django.contrib import admin

from .models import AssegnazioneStaff, MembroStaff


class AssegnazioneStaffInline(admin.TabularInline):
    model = AssegnazioneStaff
    extra = 0
    fields = ['evento', 'inizio', 'fine', 'stato_assegnazione', 'importo', 'stato_pagamento']
    readonly_fields = ['stato_pagamento']


@admin.register(MembroStaff)
class MembroStaffAdmin(admin.ModelAdmin):
    list_display = ['cognome', 'nome', 'email', 'ruolo', 'tariffa_oraria', 'attivo']
    list_filter = ['ruolo', 'attivo']
    search_fields = ['nome', 'cognome', 'email', 'specializzazione', 'tags']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [AssegnazioneStaffInline]


@admin.register(AssegnazioneStaff)
class AssegnazioneStaffAdmin(admin.ModelAdmin):
    list_display = [
        'staff',
        'evento',
        'inizio',
        'fine',
        'stato_assegnazione',
        'importo',
        'stato_pagamento',
        'data_scadenza_pagamento',
    ]
    list_filter = ['stato_assegnazione', 'stato_pagamento', 'termini_pagamento', 'evento']
    search_fields = ['staff__nome', 'staff__cognome', 'evento__nome', 'numero_fattura']
    readonly_fields = ['voce_budget', 'created_at', 'updated_at']
    date_hierarchy = 'inizio'

    fieldsets = (
        ('Turno', {
            'fields': ('evento', 'staff', 'inizio', 'fine', 'stato_assegnazione')
        }),
        ('Pagamento', {
            'fields': (
                'importo',
                'termini_pagamento',
                'data_scadenza_pagamento',
                'stato_pagamento',
                'data_pagamento',
                'note_pagamento',
                'numero_fattura',
                'url_fattura',
            )
        }),
        ('Budget', {
            'fields': ('categoria_budget', 'voce_budget'),
            'classes': ('collapse',)
        }),
        ('Note', {
            'fields': ('note', 'created_at', 'updated_at')
        }),
    )
