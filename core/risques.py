# core/risques.py
from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from .modele import (
    MODE_SEED,
    STATUT_A_FAIRE,
    CalculatorInputs,
    FullCalculationResults,
    MitigationAction,
    RiskItem,
)
from .penalites import penalite_affichee, plafond_risque
from .chemins import num_brut, num_fr

# Politique métier : probabilités par défaut du risque de pénalité
NOM_RISQUE_PENALITE = "Pénalités de retard"
PROBABILITE_AVANT_PENALITE = 75.0
PROBABILITE_APRES_PENALITE = 25.0

_CHAMPS_ACTION = ("description", "due_date", "status")


def _now_ms() -> int:
    return int(time.time() * 1000)


def uid_risque_penalite(project_id: str) -> str:
    return f"risk-penalty-{project_id}"


def _id_sequentiel(n: int) -> str:
    return f"R{n:03d}"


# ==========================================================
# Risque de pénalité (synthétisé depuis le calculateur)
# ==========================================================
def synthetiser_risque_penalite(
    *,
    project_id: str,
    project_name: str,
    project_code: str,
    inputs: CalculatorInputs,
    results: FullCalculationResults,
) -> RiskItem:
    if inputs.calculation_mode == MODE_SEED:
        type_risque = "Financier / Contractuel (SEED)"
        description = (
            "Risque de pénalités pour retard sur un projet de type SEED, "
            "calculées en pourcentage du marché."
        )
        explication = (
            f"Taux journalier: {num_brut(inputs.taux_penalite_journalier)}%. "
            f"Montant marché: {num_fr(inputs.montant_marche)}€. "
            f"Plafond: {num_brut(inputs.plafond_penalites_pourcentage)}% "
            f"({num_fr(results.plafond_montant_seed)}€)."
        )
    else:
        type_risque = "Financier / Contractuel (PV)"
        description = "Risque de pénalités dues à un retard de livraison imputable à Helexia."
        explication = (
            f"Pénalité journalière: {num_fr(penalite_affichee(results))}€. "
            f"Plafond: {num_brut(inputs.cap_percentage)}% ({num_fr(results.plafond_valeur)}€)."
        )

    return RiskItem(
        uid=uid_risque_penalite(project_id),
        id=f"R-PEN-{project_code or 'XXX'}",
        projet=project_name,
        risque=NOM_RISQUE_PENALITE,
        type_risque=type_risque,
        description=description,
        cout_probable_maximal=plafond_risque(inputs, results),
        probabilite_avant=PROBABILITE_AVANT_PENALITE,
        explication_calcul=explication,
        mitigation_actions=[],
        cout_mitigation=None,
        probabilite_apres=PROBABILITE_APRES_PENALITE,
    )


def upsert_risque_penalite(risks: Sequence[RiskItem], risque: RiskItem) -> List[RiskItem]:
    """
    Supprime tout risque nommé "Pénalités de retard" (y compris les entrées
    anciennes dont l'uid diffère) puis ajoute le risque fourni en fin de liste.
    """
    out = [r for r in risks if r.risque != NOM_RISQUE_PENALITE]
    out.append(risque)
    return out


# ==========================================================
# Saisie manuelle
# ==========================================================
def nouveau_risque(risks: Sequence[RiskItem], project_name: str = "", now_ms: Optional[int] = None) -> RiskItem:
    ts = _now_ms() if now_ms is None else now_ms
    return RiskItem(uid=f"risk-{ts}", id=_id_sequentiel(len(risks) + 1), projet=project_name)


def ajouter_risque(risks: Sequence[RiskItem], project_name: str = "", now_ms: Optional[int] = None) -> List[RiskItem]:
    return [*risks, nouveau_risque(risks, project_name, now_ms)]


def supprimer_risque(risks: Sequence[RiskItem], index: int) -> List[RiskItem]:
    return [r for i, r in enumerate(risks) if i != index]


def modifier_risque(risks: Sequence[RiskItem], index: int, **changes: Any) -> List[RiskItem]:
    out = list(risks)
    out[index] = replace(out[index], **changes)
    return out


# ==========================================================
# Actions de mitigation
# ==========================================================
def ajouter_action(risks: Sequence[RiskItem], index: int, now_ms: Optional[int] = None) -> List[RiskItem]:
    ts = _now_ms() if now_ms is None else now_ms
    r = risks[index]
    action = MitigationAction(id=f"action-{ts}", description="", due_date=None, status=STATUT_A_FAIRE)
    return modifier_risque(risks, index, mitigation_actions=[*r.mitigation_actions, action])


def modifier_action(
    risks: Sequence[RiskItem], index: int, index_action: int, champ: str, valeur: Any
) -> List[RiskItem]:
    if champ not in _CHAMPS_ACTION:
        raise ValueError(f"Champ d'action inconnu: {champ!r}")
    actions = list(risks[index].mitigation_actions)
    actions[index_action] = replace(actions[index_action], **{champ: valeur})
    return modifier_risque(risks, index, mitigation_actions=actions)


def supprimer_action(risks: Sequence[RiskItem], index: int, index_action: int) -> List[RiskItem]:
    actions = [a for i, a in enumerate(risks[index].mitigation_actions) if i != index_action]
    return modifier_risque(risks, index, mitigation_actions=actions)


# ==========================================================
# Suggestions IA
# ==========================================================
def risques_depuis_suggestions(
    risks: Sequence[RiskItem],
    suggestions: Sequence[Dict[str, Any]],
    project_name: str = "",
    now_ms: Optional[int] = None,
) -> List[RiskItem]:
    """Ajoute les suggestions en fin de registre, chiffrage laissé vide."""
    ts = _now_ms() if now_ms is None else now_ms
    nouveaux = [
        RiskItem(
            uid=f"risk-ia-{ts}-{i}",
            id=_id_sequentiel(len(risks) + i + 1),
            projet=project_name,
            risque=str(s.get("risque") or "Risque non défini"),
            type_risque=str(s.get("typeRisque") or "Type non défini"),
            description=str(s.get("description") or "Description non définie"),
        )
        for i, s in enumerate(suggestions)
    ]
    return [*risks, *nouveaux]


# ==========================================================
# Écarts issus d'une analyse de contrat (juridique ou achats)
# ==========================================================
SOURCE_CONTRAT = "contrat"
SOURCE_ACHATS = "achats"
PROBABILITE_AVANT_ANALYSE = 75.0

_SOURCES_ANALYSE = {
    SOURCE_CONTRAT: (
        "R-ANA", "risk-analysis", "Contractuel / Analyse IA",
        "Écart identifié via l'analyse de contrat : {analyse}",
        'Risque basé sur la position du contrat adverse : "{positionB}"',
    ),
    SOURCE_ACHATS: (
        "R-ACH", "risk-achats", "Contractuel / Achat",
        "Écart identifié via l'analyse Achats : {analyse}",
        'Risque basé sur la position du fournisseur : "{positionB}"',
    ),
}


def risque_depuis_analyse(
    risks: Sequence[RiskItem],
    item: Dict[str, Any],
    project_name: str = "",
    *,
    source: str = SOURCE_CONTRAT,
    now_ms: Optional[int] = None,
) -> List[RiskItem]:
    """
    Ajoute un écart d'analyse (theme, analyse, positionB, negociation) en fin
    de registre. La piste de négociation devient une action de mitigation.
    Un thème déjà présent est refusé pour l'analyse de contrat.
    """
    if source not in _SOURCES_ANALYSE:
        raise ValueError(f"Source d'analyse inconnue: {source!r}")
    prefixe, uid, type_risque, description, explication = _SOURCES_ANALYSE[source]
    theme = str(item.get("theme") or "")
    if source == SOURCE_CONTRAT and any(r.risque == theme for r in risks):
        raise ValueError(f'Le risque "{theme}" existe déjà pour ce projet.')

    ts = _now_ms() if now_ms is None else now_ms
    negociation = str(item.get("negociation") or "")
    actions = (
        [MitigationAction(id=f"action-{ts}", description=negociation, due_date=None, status=STATUT_A_FAIRE)]
        if negociation else []
    )
    risque = RiskItem(
        uid=f"{uid}-{ts}",
        id=f"{prefixe}-{len(risks) + 1:03d}",
        projet=project_name,
        risque=theme,
        type_risque=type_risque,
        description=description.format(analyse=item.get("analyse") or ""),
        cout_probable_maximal=None,
        probabilite_avant=PROBABILITE_AVANT_ANALYSE,
        explication_calcul=explication.format(positionB=item.get("positionB") or ""),
        mitigation_actions=actions,
        cout_mitigation=None,
        probabilite_apres=None,
    )
    return [*risks, risque]
