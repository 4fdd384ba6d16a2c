# rapports/export_csv.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from core.chemins import num_fr
from core.exposition import cout_probable_apres, cout_probable_avant
from core.modele import MODE_SEED, CalculatorInputs, FullCalculationResults, RiskItem

logger = logging.getLogger(__name__)

SEPARATEUR = ";"    # Excel FR


def _vide() -> Dict[str, Any]:
    return {"Description": "", "Valeur": ""}


def _ligne(desc: str, val: Any) -> Dict[str, Any]:
    return {"Description": desc, "Valeur": val}


def lignes_penalites(
    inputs: CalculatorInputs,
    results: FullCalculationResults,
    project_name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    nom = project_name or "N/A"
    if inputs.calculation_mode == MODE_SEED:
        return [
            _ligne("Nom du Projet", nom),
            _ligne("Type de Calcul", "Pourcentage (SEED)"),
            _vide(),
            _ligne("Montant du marché (€)", num_fr(inputs.montant_marche)),
            _ligne("Taux pénalité (%/jour)", num_fr(inputs.taux_penalite_journalier)),
            _ligne("Plafond pénalités (%)", num_fr(inputs.plafond_penalites_pourcentage)),
            _ligne("Nombre de jours de retard", num_fr(inputs.nombre_jours_retard)),
            _vide(),
            _ligne("Pénalité par jour (€)", num_fr(results.penalite_journaliere_seed)),
            _ligne("Montant du Plafond (€)", num_fr(results.plafond_montant_seed)),
            _ligne("Pénalité Totale (avant plafond) (€)", num_fr(results.penalite_totale_seed)),
            _ligne("Pénalité Finale (après plafond) (€)", num_fr(results.penalite_finale_seed)),
        ]

    return [
        _ligne("Nom du Projet", nom),
        _ligne("Type de Calcul", "Forfaitaire (PV)"),
        _vide(),
        _ligne("Pénalité (€/jour)", num_fr(results.total_impact_journalier)),
        _ligne("Valeur du Plafond (€)", num_fr(results.plafond_valeur)),
        _ligne("Jours Avant Plafond", num_fr(results.plafond_jours)),
        _vide(),
        _ligne("Coût total Centrale (€)", num_fr(inputs.centrale_total)),
        _ligne("O&M Annuel (€)", num_fr(inputs.o_and_m_annuel)),
        _ligne("Production Annuelle (MWh/an)", num_fr(inputs.production_annuel_mwh)),
        _vide(),
        _ligne("TCO (€/MWh)", num_fr(results.tco, 2)),
    ]


def lignes_risques(risks: Sequence[RiskItem]) -> List[Dict[str, Any]]:
    return [
        {
            "ID": r.id,
            "Projet": r.projet,
            "Risque": r.risque,
            "Type risque": r.type_risque,
            "Description du risque": r.description,
            "Cout probable maximal (€)": r.cout_probable_maximal,
            "Probabilité avant mitigation (%)": r.probabilite_avant,
            "Cout probable avant mitigation (€)": cout_probable_avant(r),
            "Explication - Calcul": r.explication_calcul,
            "Mitigation": "; ".join(a.description for a in r.mitigation_actions),
            "Cout de mitigation (€)": r.cout_mitigation,
            "Probabilité après mitigation (%)": r.probabilite_apres,
            "Cout probable après mitigation (€)": cout_probable_apres(r),
        }
        for r in risks
    ]


def exporter_csv(lignes: Sequence[Dict[str, Any]], out_path: str) -> str:
    """
    CSV compatible Excel FR : séparateur ';', BOM UTF-8, cellules vides pour None.
    """
    if not lignes:
        raise ValueError("Aucune donnée à exporter.")

    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(list(lignes), columns=list(lignes[0].keys()))
    df.to_csv(p, sep=SEPARATEUR, index=False, encoding="utf-8-sig", lineterminator="\n", na_rep="")
    logger.debug("CSV écrit: %s (%d lignes)", p, len(df))
    return str(p)
