# core/clauses.py
from __future__ import annotations

from .modele import MODE_SEED, CalculatorInputs, FullCalculationResults
from .penalites import penalite_affichee
from .chemins import num_fr


def texte_clause_defaut(inputs: CalculatorInputs, results: FullCalculationResults) -> str:
    if inputs.calculation_mode == MODE_SEED:
        taux = f"{num_fr(inputs.taux_penalite_journalier, 2)} %"
        plafond = f"{num_fr(inputs.plafond_penalites_pourcentage, 0)} %"
        return (
            "En cas de retard dans l'exécution des prestations, une pénalité de "
            f"{taux} par jour de retard sera appliquée sur le montant total HT du marché.\n\n"
            f"Le montant total de ces pénalités est plafonné à {plafond} du montant total HT du marché."
        )

    penalite = num_fr(penalite_affichee(results), 0)
    plafond = f"{num_fr(inputs.cap_percentage, 0)} %"
    return (
        "En cas de non-respect de la Date de Remise des Travaux Garantie ou en cas de "
        "non-respect de la Date de Réception Garantie du fait d'un retard imputable au "
        "Titulaire et sauf cas de prolongation légitime stipulés ci-dessus, une Pénalité "
        f"de Retard de {penalite} euros HT Forfaitaire par jour de retard s'appliquera.\n\n"
        f"Les Pénalités de Retard susvisées seront limitées à un montant égal à {plafond} du Prix."
    )


def prompt_clause(texte_defaut: str) -> str:
    return f"Rédige une clause de pénalité de retard pour un contrat. Voici les détails:\n{texte_defaut}"
