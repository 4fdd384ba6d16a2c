# core/penalites.py
from __future__ import annotations

from .modele import MODE_SEED, CalculatorInputs, FullCalculationResults
from .result_accessors import ceil_safe, safe_div

JOURS_PAR_AN = 365


# ==========================================================
# Mode SEED (pourcentage du marché)
# ==========================================================
def _calcul_seed(p: CalculatorInputs) -> FullCalculationResults:
    penalite_journaliere = p.montant_marche * p.taux_penalite_journalier / 100
    plafond_montant = p.montant_marche * p.plafond_penalites_pourcentage / 100
    penalite_totale = penalite_journaliere * p.nombre_jours_retard

    return FullCalculationResults(
        total_impact_journalier=0.0,
        plafond_valeur=0.0,
        plafond_jours=0.0,
        centrale_annuel=0.0,
        centrale_journalier=0.0,
        o_and_m_annuel=0.0,
        o_and_m_journalier=0.0,
        autoconsommation_annuel=0.0,
        autoconsommation_journalier=0.0,
        tco=0.0,
        cout_soutirage_reseau=0.0,
        cout_soutirage_centrale=0.0,
        impact_financier_journalier=0.0,
        frais_administratifs=0.0,
        penalite_journaliere_seed=penalite_journaliere,
        plafond_montant_seed=plafond_montant,
        penalite_totale_seed=penalite_totale,
        penalite_finale_seed=min(penalite_totale, plafond_montant),
    )


# ==========================================================
# Mode PV (forfait journalier, coût d'opportunité autoconsommation)
# ==========================================================
def _calcul_pv(p: CalculatorInputs) -> FullCalculationResults:
    centrale_annuel = safe_div(p.centrale_total, p.plant_lifetime_years)
    centrale_journalier = safe_div(centrale_annuel, JOURS_PAR_AN)
    om_journalier = safe_div(p.o_and_m_annuel, JOURS_PAR_AN)

    autoconso_annuel = p.production_annuel_mwh * (p.self_consumption_rate / 100)
    autoconso_jour = safe_div(autoconso_annuel, JOURS_PAR_AN)

    tco = safe_div(centrale_annuel + p.o_and_m_annuel, p.production_annuel_mwh)

    cout_reseau = autoconso_jour * p.grid_price_mwh
    cout_centrale = autoconso_jour * tco
    # négatif si le réseau coûte moins que la production sur site : pas de borne
    impact_jour = cout_reseau - cout_centrale
    frais_admin = impact_jour * (p.administrative_fees_percentage / 100)
    total_impact_jour = impact_jour + frais_admin

    plafond_valeur = p.centrale_total * (p.cap_percentage / 100)

    return FullCalculationResults(
        total_impact_journalier=total_impact_jour,
        plafond_valeur=plafond_valeur,
        plafond_jours=safe_div(plafond_valeur, total_impact_jour),
        centrale_annuel=centrale_annuel,
        centrale_journalier=centrale_journalier,
        o_and_m_annuel=p.o_and_m_annuel,
        o_and_m_journalier=om_journalier,
        autoconsommation_annuel=autoconso_annuel,
        autoconsommation_journalier=autoconso_jour,
        tco=tco,
        cout_soutirage_reseau=cout_reseau,
        cout_soutirage_centrale=cout_centrale,
        impact_financier_journalier=impact_jour,
        frais_administratifs=frais_admin,
        penalite_journaliere_seed=0.0,
        plafond_montant_seed=0.0,
        penalite_totale_seed=0.0,
        penalite_finale_seed=0.0,
    )


# ==========================================================
# POINT D'ENTRÉE
# ==========================================================
def calculer_penalites(inputs: CalculatorInputs) -> FullCalculationResults:
    """
    Calcul pur et total : un seul mode actif, les champs de l'autre mode
    sont ignorés et les résultats correspondants restent à zéro.
    """
    if inputs.calculation_mode == MODE_SEED:
        return _calcul_seed(inputs)
    return _calcul_pv(inputs)


def penalite_affichee(results: FullCalculationResults) -> int:
    """Pénalité PV affichée : arrondie à l'euro supérieur."""
    return ceil_safe(results.total_impact_journalier)


def jours_avant_plafond_affiches(results: FullCalculationResults) -> int:
    return ceil_safe(results.plafond_jours)


def plafond_risque(inputs: CalculatorInputs, results: FullCalculationResults) -> float:
    """Coût probable maximal du risque de pénalité selon le mode."""
    if inputs.calculation_mode == MODE_SEED:
        return results.plafond_montant_seed
    return results.plafond_valeur


compute_penalty = calculer_penalites
