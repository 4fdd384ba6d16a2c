# core/validation.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from .modele import MODES, MODE_PV, MODE_SEED, CalculatorInputs


def normaliser_entrees(raw: Optional[Dict[str, Any]]) -> CalculatorInputs:
    """
    Frontière du calculateur : complète les champs manquants avec BLANK_INPUTS
    et refuse un mode inconnu. Le calcul lui-même ne lève jamais.
    """
    raw = raw or {}
    mode = raw.get("calculationMode", raw.get("calculation_mode")) or MODE_PV
    if mode not in MODES:
        raise ValueError(f"calculationMode inconnu: {mode!r} (attendu: pv ou seed)")
    return CalculatorInputs.from_dict(raw)


def valider_entrees(p: CalculatorInputs) -> Tuple[bool, List[str]]:
    """
    Avertissements de saisie pour l'UI. Seuls les champs du mode actif sont
    contrôlés ; aucun ne bloque le calcul.
    """
    erreurs: List[str] = []

    if p.calculation_mode == MODE_SEED:
        if p.montant_marche < 0:
            erreurs.append("Le montant du marché doit être >= 0.")
        if p.taux_penalite_journalier < 0:
            erreurs.append("Le taux de pénalité journalier doit être >= 0.")
        if p.plafond_penalites_pourcentage < 0:
            erreurs.append("Le plafond des pénalités doit être >= 0.")
        if p.nombre_jours_retard < 0:
            erreurs.append("Le nombre de jours de retard doit être >= 0.")
    else:
        if p.centrale_total < 0:
            erreurs.append("Le coût total de la centrale doit être >= 0.")
        if p.plant_lifetime_years <= 0:
            erreurs.append("La durée de vie de la centrale doit être > 0 (sinon amortissement nul).")
        if p.production_annuel_mwh <= 0:
            erreurs.append("La production annuelle doit être > 0 (sinon TCO nul).")
        if p.self_consumption_rate < 0:
            erreurs.append("Le taux d'autoconsommation doit être >= 0.")
        if p.cap_percentage < 0:
            erreurs.append("Le plafond (%) doit être >= 0.")

    ok = (len(erreurs) == 0)
    return ok, erreurs
