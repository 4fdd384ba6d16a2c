# core/orchestrateur.py
from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from .modele import (
    BLANK_INPUTS,
    BLANK_RESULTS,
    STATUT_ACHAT_A_FAIRE,
    Amendment,
    CalculatorInputs,
    ChangeRequest,
    ContractDeadline,
    Dispute,
    Projet,
    PurchasingAction,
    RiskItem,
)
from .penalites import calculer_penalites
from .risques import synthetiser_risque_penalite, upsert_risque_penalite

logger = logging.getLogger(__name__)


def _horodatage() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ==========================================================
# Projets (liste = état, chaque opération renvoie une nouvelle liste)
# ==========================================================
def creer_projet(
    projets: Sequence[Projet],
    *,
    nom: str,
    code: str = "",
    adresse: str = "",
    type_projet: str = "EPC",
    now_ms: Optional[int] = None,
) -> List[Projet]:
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    nouveau = Projet(
        id=f"proj-{ts}",
        project_name=nom,
        project_code=code,
        project_address=adresse,
        project_type=type_projet,
        status="O5",
        inputs=BLANK_INPUTS,
        results=BLANK_RESULTS,
        risks=[],
        deadlines=[],
        saved_at=_horodatage(),
    )
    return [nouveau, *projets]


def trouver_projet(projets: Sequence[Projet], project_id: str) -> Optional[Projet]:
    return next((p for p in projets if p.id == project_id), None)


def _remplacer(projets: Sequence[Projet], maj: Projet) -> List[Projet]:
    return [maj if p.id == maj.id else p for p in projets]


def mettre_a_jour_projet(projets: Sequence[Projet], project_id: str, **changes: Any) -> List[Projet]:
    p = trouver_projet(projets, project_id)
    if p is None:
        return list(projets)
    return _remplacer(projets, replace(p, saved_at=_horodatage(), **changes))


def supprimer_projet(projets: Sequence[Projet], project_id: str) -> List[Projet]:
    return [p for p in projets if p.id != project_id]


def mettre_a_jour_risques(projets: Sequence[Projet], project_id: str, risks: Sequence[RiskItem]) -> List[Projet]:
    return mettre_a_jour_projet(projets, project_id, risks=list(risks))


# ==========================================================
# Enregistrement d'un calcul de pénalités
# ==========================================================
def appliquer_calcul(projet: Projet, inputs: CalculatorInputs) -> Projet:
    """Calcule, remplace le risque "Pénalités de retard" et horodate le projet."""
    results = calculer_penalites(inputs)
    risque = synthetiser_risque_penalite(
        project_id=projet.id,
        project_name=projet.project_name,
        project_code=projet.project_code,
        inputs=inputs,
        results=results,
    )
    logger.debug(
        "Calcul %s enregistré pour %s (plafond risque=%.2f)",
        inputs.calculation_mode, projet.id, risque.cout_probable_maximal or 0.0,
    )
    return replace(
        projet,
        inputs=inputs,
        results=results,
        risks=upsert_risque_penalite(projet.risks, risque),
        saved_at=_horodatage(),
    )


def enregistrer_calcul(projets: Sequence[Projet], project_id: str, inputs: CalculatorInputs) -> List[Projet]:
    p = trouver_projet(projets, project_id)
    if p is None:
        logger.warning("Projet introuvable: %s", project_id)
        return list(projets)
    return _remplacer(projets, appliquer_calcul(p, inputs))


# ==========================================================
# Échéances contractuelles
# ==========================================================
TYPE_ECHEANCE = "Échéance"
TYPE_JALON_PAIEMENT = "Jalon de Paiement"


def nouvelle_echeance(
    *,
    description: str,
    date: str,
    preavis_mois: int = 3,
    type_echeance: str = TYPE_ECHEANCE,
    montant: Optional[float] = None,
    now_ms: Optional[int] = None,
) -> ContractDeadline:
    if not description or not date:
        raise ValueError("Veuillez remplir la description et la date.")
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    return ContractDeadline(
        id=f"deadline-{ts}",
        description=description,
        date=date,
        notice_period_in_months=int(preavis_mois),
        type=type_echeance,
        # montant seulement pour un jalon de paiement
        amount=montant if type_echeance == TYPE_JALON_PAIEMENT else None,
    )


def ajouter_echeance(projets: Sequence[Projet], project_id: str, echeance: ContractDeadline) -> List[Projet]:
    p = trouver_projet(projets, project_id)
    if p is None:
        return list(projets)
    return mettre_a_jour_projet(projets, project_id, deadlines=[*p.deadlines, echeance])


def supprimer_echeance(projets: Sequence[Projet], project_id: str, deadline_id: str) -> List[Projet]:
    p = trouver_projet(projets, project_id)
    if p is None:
        return list(projets)
    return mettre_a_jour_projet(projets, project_id, deadlines=[d for d in p.deadlines if d.id != deadline_id])


# ==========================================================
# Demandes de changement
# ==========================================================
STATUTS_CHANGEMENT = ("Demandé", "En Analyse", "Approuvé", "Rejeté", "Implémenté")
STATUT_APPROUVE = "Approuvé"

_CHAMPS_DEMANDE = (
    "impact",
    "requester_name",
    "requester_contact",
    "element_to_modify",
    "expected_timeline",
    "has_purchasing_impact",
)


def numero_changement(changements: Sequence[ChangeRequest], projet: Projet) -> str:
    n = sum(1 for c in changements if c.project_id == projet.id) + 1
    return f"CHG-{projet.project_code}-{n:03d}"


def creer_demande_changement(
    changements: Sequence[ChangeRequest],
    projet: Projet,
    *,
    titre: str,
    description: str = "",
    cout_estime: Optional[float] = None,
    priorite: str = "Moyenne",
    now_ms: Optional[int] = None,
    **details: Any,
) -> List[ChangeRequest]:
    inconnus = set(details) - set(_CHAMPS_DEMANDE)
    if inconnus:
        raise ValueError(f"Champs de demande inconnus: {sorted(inconnus)}")
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    demande = ChangeRequest(
        id=f"change-{ts}",
        project_id=projet.id,
        project_name=projet.project_name,
        title=titre,
        status="Demandé",
        estimated_cost=cout_estime,
        created_at=_horodatage(),
        priority=priorite,
        description=description,
        requester="Interne",
        change_number=numero_changement(changements, projet),
        project_code=projet.project_code,
        contract_ref=projet.base_termsheet_name,
        amendments=[],
        **details,
    )
    return [*changements, demande]


def changer_statut_demande(changements: Sequence[ChangeRequest], change_id: str, statut: str) -> List[ChangeRequest]:
    if statut not in STATUTS_CHANGEMENT:
        raise ValueError(f"Statut de demande inconnu: {statut!r}")
    return [replace(c, status=statut) if c.id == change_id else c for c in changements]


def changer_statut_avec_achats(
    changements: Sequence[ChangeRequest],
    achats: Sequence[PurchasingAction],
    change_id: str,
    statut: str,
    now_ms: Optional[int] = None,
) -> Tuple[List[ChangeRequest], List[PurchasingAction]]:
    """
    Change le statut d'une demande. Le passage à "Approuvé" d'une demande
    avec impact achats ouvre une action de suivi en tête de liste.
    """
    avant = next((c for c in changements if c.id == change_id), None)
    maj = changer_statut_demande(changements, change_id, statut)
    if (
        avant is not None
        and avant.has_purchasing_impact
        and statut == STATUT_APPROUVE
        and avant.status != STATUT_APPROUVE
    ):
        action = nouvelle_action_achat(
            avant, f'Suivi des achats requis pour la demande : "{avant.title}"', now_ms=now_ms
        )
        logger.info("Action achats %s créée pour la demande %s", action.id, change_id)
        return maj, [action, *achats]
    return maj, list(achats)


def supprimer_demande(changements: Sequence[ChangeRequest], change_id: str) -> List[ChangeRequest]:
    return [c for c in changements if c.id != change_id]


def ajouter_avenant(
    changements: Sequence[ChangeRequest],
    change_id: str,
    *,
    description: str,
    signature_date: str,
    now_ms: Optional[int] = None,
) -> List[ChangeRequest]:
    if not description or not signature_date:
        raise ValueError("Veuillez remplir la description et la date de signature.")
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    avenant = Amendment(id=f"amend-{ts}", description=description, signature_date=signature_date)
    return [
        replace(c, amendments=[*c.amendments, avenant]) if c.id == change_id else c
        for c in changements
    ]


# ==========================================================
# Actions achats
# ==========================================================
STATUTS_ACHAT = (STATUT_ACHAT_A_FAIRE, "En cours", "Terminé")


def nouvelle_action_achat(demande: ChangeRequest, description: str, now_ms: Optional[int] = None) -> PurchasingAction:
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    return PurchasingAction(
        id=f"pa-{ts}",
        change_request_id=demande.id,
        change_request_title=demande.title,
        project_id=demande.project_id,
        project_name=demande.project_name,
        action_description=description,
        status=STATUT_ACHAT_A_FAIRE,
        created_at=_horodatage(),
    )


def changer_statut_action_achat(
    achats: Sequence[PurchasingAction], action_id: str, statut: str
) -> List[PurchasingAction]:
    if statut not in STATUTS_ACHAT:
        raise ValueError(f"Statut d'action achats inconnu: {statut!r}")
    return [replace(a, status=statut) if a.id == action_id else a for a in achats]


def supprimer_action_achat(achats: Sequence[PurchasingAction], action_id: str) -> List[PurchasingAction]:
    return [a for a in achats if a.id != action_id]


# ==========================================================
# Litiges
# ==========================================================
STATUTS_LITIGE = ("Ouvert", "En analyse", "Négociation", "Résolu", "Clos", "En cours")


def creer_litige(
    litiges: Sequence[Dispute],
    *,
    title: str,
    related_contract: str,
    manager: str,
    now_ms: Optional[int] = None,
    **details: Any,
) -> List[Dispute]:
    if not title or not related_contract or not manager:
        raise ValueError("Veuillez remplir au moins le titre, le contrat concerné et le responsable.")
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    nouveau = Dispute(
        id=f"dispute-{ts}",
        title=title,
        related_contract=related_contract,
        manager=manager,
        start_date=_horodatage(),
        **details,
    )
    return [nouveau, *litiges]


def modifier_litige(litiges: Sequence[Dispute], dispute_id: str, **changes: Any) -> List[Dispute]:
    statut = changes.get("status")
    if statut is not None and statut not in STATUTS_LITIGE:
        raise ValueError(f"Statut de litige inconnu: {statut!r}")
    return [replace(d, **changes) if d.id == dispute_id else d for d in litiges]


def supprimer_litige(litiges: Sequence[Dispute], dispute_id: str) -> List[Dispute]:
    return [d for d in litiges if d.id != dispute_id]
