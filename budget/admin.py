from django.contrib import admin

from .models import CategoriaBudget, VoceBudget


class VoceBudgetInline(admin.TabularInline):
    model = VoceBudget
    extra = 0
    fields = ['descrizione', 'tipo', 'costo_stimato', 'costo_effettivo', 'stato', 'data_scadenza']
    fk_name = 'categoria'


@admin.register(CategoriaBudget)
class CategoriaBudgetAdmin(admin.ModelAdmin):
    list_display = ['nome', 'evento', 'importo_allocato', 'importo_speso', 'percentuale_utilizzo']
    list_filter = ['evento']
    search_fields = ['nome', 'evento__nome']
    readonly_fields = ['importo_speso', 'created_at', 'updated_at']
    inlines = [VoceBudgetInline]


@admin.register(VoceBudget)
class VoceBudgetAdmin(admin.ModelAdmin):
    list_display = [
        'descrizione',
        'categoria',
        'evento',
        'tipo',
        'stato',
        'costo_stimato',
        'costo_effettivo',
        'data_scadenza',
    ]
    list_filter = ['stato', 'tipo', 'evento']
    search_fields = ['descrizione', 'fornitore', 'numero_fattura']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'data_scadenza'
