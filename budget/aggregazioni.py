"""
Aggregazioni del budget.

Funzioni pure su voci e categorie già caricate: statistiche per evento,
totali per categoria, report finanziario multi-evento ed esportazione CSV.
"""

import csv
import io
from collections import OrderedDict
from decimal import Decimal

ZERO = Decimal('0.00')

STATI_VOCE = ('planned', 'approved', 'pending', 'invoiced', 'paid', 'cancelled')
STATI_IMPEGNATI = ('approved', 'pending', 'invoiced', 'paid')


def importo_voce(voce):
    """Costo effettivo se registrato, altrimenti costo stimato."""
    if voce.costo_effettivo is not None:
        return voce.costo_effettivo
    return voce.costo_stimato or ZERO


def statistiche_budget(categorie, voci):
    """
    Statistiche di budget di un evento.

    Args:
        categorie: iterabile di CategoriaBudget
        voci: iterabile di VoceBudget delle stesse categorie

    Returns:
        dict con conteggi e importi per stato, impegnato, speso,
        utilizzo percentuale e residuo
    """
    categorie = list(categorie)
    voci = list(voci)

    budget_totale = sum((c.importo_allocato or ZERO for c in categorie), ZERO)

    conteggio = {stato: 0 for stato in STATI_VOCE}
    importi = {stato: ZERO for stato in STATI_VOCE}
    for voce in voci:
        conteggio[voce.stato] = conteggio.get(voce.stato, 0) + 1
        importi[voce.stato] = importi.get(voce.stato, ZERO) + importo_voce(voce)

    totale_impegnato = sum((importi[s] for s in STATI_IMPEGNATI), ZERO)
    totale_speso = importi['paid']

    if budget_totale > 0:
        utilizzo = int((totale_impegnato / budget_totale * 100).quantize(Decimal('1'), rounding='ROUND_HALF_UP'))
    else:
        utilizzo = 0

    return {
        'totale_categorie': len(categorie),
        'budget_totale': budget_totale,
        'totale_voci': len(voci),
        'conteggio': conteggio,
        'importi': importi,
        'totale_impegnato': totale_impegnato,
        'totale_speso': totale_speso,
        'utilizzo_percentuale': utilizzo,
        'budget_residuo': max(ZERO, budget_totale - totale_impegnato),
    }


def totali_per_categoria(voci):
    """
    Somma dei costi effettivi per categoria.

    Returns:
        dict {categoria_id: Decimal}
    """
    totali = {}
    for voce in voci:
        totali[voce.categoria_id] = totali.get(voce.categoria_id, ZERO) + (voce.costo_effettivo or ZERO)
    return totali


def report_finanziario(eventi, voci):
    """
    Report finanziario su più eventi.

    Entrate = voci di tipo income, costi = voci di tipo expense; le voci
    annullate sono escluse.

    Args:
        eventi: iterabile di Evento
        voci: iterabile di VoceBudget (con categoria caricata)

    Returns:
        dict con summary, dettaglio_eventi, dettaglio_categorie
    """
    eventi = list(eventi)
    dettaglio_eventi = OrderedDict(
        (
            evento.pk,
            {
                'evento_id': evento.pk,
                'titolo': evento.nome,
                'data': evento.data_inizio,
                'entrate': ZERO,
                'costi': ZERO,
                'profitto': ZERO,
                'voci': 0,
            },
        )
        for evento in eventi
    )
    dettaglio_categorie = OrderedDict()
    totale_voci = 0

    for voce in voci:
        if voce.stato == 'cancelled':
            continue
        riga_evento = dettaglio_eventi.get(voce.evento_id)
        if riga_evento is None:
            continue

        importo = importo_voce(voce)
        is_entrata = voce.tipo == 'income'
        totale_voci += 1

        riga_evento['voci'] += 1
        if is_entrata:
            riga_evento['entrate'] += importo
        else:
            riga_evento['costi'] += importo

        chiave = (voce.categoria.nome, is_entrata)
        riga_categoria = dettaglio_categorie.setdefault(
            chiave,
            {'categoria': voce.categoria.nome, 'is_entrata': is_entrata, 'totale': ZERO, 'voci': 0},
        )
        riga_categoria['totale'] += importo
        riga_categoria['voci'] += 1

    for riga in dettaglio_eventi.values():
        riga['profitto'] = riga['entrate'] - riga['costi']

    entrate = sum((r['entrate'] for r in dettaglio_eventi.values()), ZERO)
    costi = sum((r['costi'] for r in dettaglio_eventi.values()), ZERO)
    profitto = entrate - costi
    margine = float(profitto / entrate * 100) if entrate > 0 else 0.0

    return {
        'summary': {
            'entrate_totali': entrate,
            'costi_totali': costi,
            'profitto_netto': profitto,
            'margine_percentuale': margine,
            'totale_eventi': len(eventi),
            'totale_voci': totale_voci,
        },
        'dettaglio_eventi': list(dettaglio_eventi.values()),
        'dettaglio_categorie': sorted(
            dettaglio_categorie.values(), key=lambda r: r['totale'], reverse=True
        ),
    }


def report_csv(report, data_inizio=None, data_fine=None, eventi_selezionati=None):
    """
    Report finanziario in formato CSV.

    Returns:
        str: contenuto CSV
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')

    inizio = data_inizio.strftime('%d/%m/%Y') if data_inizio else 'Tutte'
    fine = data_fine.strftime('%d/%m/%Y') if data_fine else 'Tutte'
    summary = report['summary']

    writer.writerow(['Report Finanziario EventHub'])
    writer.writerow([])
    writer.writerow([f"Periodo: {inizio} - {fine}"])
    writer.writerow([f"Eventi selezionati: {len(eventi_selezionati) if eventi_selezionati else 'Tutti'}"])
    writer.writerow([])

    writer.writerow(['RIEPILOGO'])
    writer.writerow(['Entrate Totali', summary['entrate_totali']])
    writer.writerow(['Costi Totali', summary['costi_totali']])
    writer.writerow(['Profitto Netto', summary['profitto_netto']])
    writer.writerow(['Margine %', f"{summary['margine_percentuale']:.1f}%"])
    writer.writerow(['Eventi Analizzati', summary['totale_eventi']])
    writer.writerow(['Voci di Budget', summary['totale_voci']])
    writer.writerow([])

    writer.writerow(['DETTAGLIO PER EVENTO'])
    writer.writerow(['Evento', 'Data', 'Entrate', 'Costi', 'Profitto', 'Voci'])
    for riga in report['dettaglio_eventi']:
        writer.writerow([
            riga['titolo'],
            riga['data'].strftime('%d/%m/%Y'),
            riga['entrate'],
            riga['costi'],
            riga['profitto'],
            riga['voci'],
        ])
    writer.writerow([])

    writer.writerow(['DETTAGLIO PER CATEGORIA'])
    writer.writerow(['Categoria', 'Tipo', 'Totale', 'Voci'])
    for riga in report['dettaglio_categorie']:
        writer.writerow([
            riga['categoria'],
            'Entrata' if riga['is_entrata'] else 'Costo',
            riga['totale'],
            riga['voci'],
        ])

    return buffer.getvalue()
