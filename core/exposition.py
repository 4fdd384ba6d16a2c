# core/exposition.py
from __future__ import annotations

import calendar
import math
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .contrat import EcheanceProjet, ExpositionRisques, KpisLitiges, KpisPortefeuille, KpisProjet, RisqueCalcule
from .modele import ChangeRequest, ContractDeadline, Dispute, Projet, RiskItem
from .result_accessors import safe_div

STATUTS_CHANGEMENT_EN_COURS = ("Demandé", "En Analyse")
STATUTS_CHANGEMENT_ACTES = ("Approuvé", "Implémenté")
HORIZON_ECHEANCES_MOIS = 6
NB_PROCHAINES_ECHEANCES = 5


def _v(x: Optional[float]) -> float:
    # champ vide -> 0, appliqué champ par champ
    return x or 0.0


# ==========================================================
# Par risque
# ==========================================================
def cout_probable_avant(r: RiskItem) -> float:
    return _v(r.cout_probable_maximal) * (_v(r.probabilite_avant) / 100)


def cout_probable_apres(r: RiskItem) -> float:
    return _v(r.cout_probable_maximal) * (_v(r.probabilite_apres) / 100) + _v(r.cout_mitigation)


def risques_calcules(risks: Sequence[RiskItem]) -> List[RisqueCalcule]:
    return [
        {
            "risque": r.to_dict(),
            "coutProbableAvant": cout_probable_avant(r),
            "coutProbableApres": cout_probable_apres(r),
        }
        for r in risks
    ]


# ==========================================================
# Agrégats (toujours recalculés, jamais stockés)
# ==========================================================
def exposition_avant(risks: Iterable[RiskItem]) -> float:
    return sum((cout_probable_avant(r) for r in risks), 0.0)


def exposition_apres(risks: Iterable[RiskItem]) -> float:
    return sum((cout_probable_apres(r) for r in risks), 0.0)


def agreger_exposition(risks: Sequence[RiskItem]) -> ExpositionRisques:
    return {"before": exposition_avant(risks), "after": exposition_apres(risks)}


# ==========================================================
# Échéances
# ==========================================================
def _ajouter_mois(d: date, mois: int) -> date:
    """
    Ajout calendaire borné à la fin du mois : 31 août + 6 mois = 28/29 février.
    Reporter les jours en trop sur le mois suivant donnerait le 3 mars (2 mars
    en année bissextile) : les échéances de ces premiers jours de mars restent
    donc hors horizon ici.
    """
    m = d.month - 1 + mois
    annee = d.year + m // 12
    m = m % 12 + 1
    jour = min(d.day, calendar.monthrange(annee, m)[1])
    return date(annee, m, jour)


def _date_iso(s: str) -> Optional[date]:
    try:
        return date.fromisoformat((s or "")[:10])
    except ValueError:
        return None


def echeances_a_venir(deadlines: Sequence[ContractDeadline], today: date, mois: int = HORIZON_ECHEANCES_MOIS) -> int:
    limite = _ajouter_mois(today, mois)
    n = 0
    for d in deadlines:
        dt = _date_iso(d.date)
        if dt is not None and today <= dt <= limite:
            n += 1
    return n


# ==========================================================
# KPIs
# ==========================================================
def kpis_projet(
    projet: Projet,
    change_requests: Sequence[ChangeRequest] = (),
    today: Optional[date] = None,
) -> KpisProjet:
    today = today or date.today()
    demandes = [cr for cr in change_requests if cr.project_id == projet.id]
    expo = agreger_exposition(projet.risks)

    return {
        "exposureBefore": expo["before"],
        "exposureAfter": expo["after"],
        "ongoingChanges": sum(1 for cr in demandes if cr.status in STATUTS_CHANGEMENT_EN_COURS),
        "totalCostImpact": sum(
            (_v(cr.estimated_cost) for cr in demandes if cr.status in STATUTS_CHANGEMENT_ACTES), 0.0
        ),
        "upcomingDeadlines6Months": echeances_a_venir(projet.deadlines, today),
    }


def kpis_portefeuille(
    projets: Sequence[Projet],
    change_requests: Sequence[ChangeRequest] = (),
    today: Optional[date] = None,
) -> KpisPortefeuille:
    today = today or date.today()
    tous_risques = [r for p in projets for r in p.risks]

    a_venir: List[tuple] = []
    for p in projets:
        for d in p.deadlines:
            dt = _date_iso(d.date)
            if dt is not None and dt >= today:
                a_venir.append((dt, p.project_name, d))
    a_venir.sort(key=lambda x: x[0])

    prochaines: List[EcheanceProjet] = [
        {"projectName": nom, "id": d.id, "description": d.description, "date": d.date, "type": d.type}
        for _, nom, d in a_venir[:NB_PROCHAINES_ECHEANCES]
    ]

    couts = [cr.estimated_cost for cr in change_requests if cr.estimated_cost and cr.estimated_cost > 0]

    return {
        "totalProjects": len(projets),
        "totalExposureBefore": exposition_avant(tous_risques),
        "totalExposureAfter": exposition_apres(tous_risques),
        "upcomingDeadlines": prochaines,
        "totalChangeRequests": len(change_requests),
        "pendingChanges": sum(1 for cr in change_requests if cr.status in STATUTS_CHANGEMENT_EN_COURS),
        "totalCostImpact": sum(
            (_v(cr.estimated_cost) for cr in change_requests if cr.status in STATUTS_CHANGEMENT_ACTES), 0.0
        ),
        "averageChangeCost": safe_div(sum(couts, 0.0), len(couts)),
    }


STATUTS_LITIGE_FERMES = ("Résolu", "Clos")


def kpis_litiges(litiges: Sequence[Dispute]) -> KpisLitiges:
    """Montant nul compté 0 ; taux de résolution arrondi au demi supérieur, 0 sans litige."""
    resolus = sum(1 for d in litiges if d.status == "Résolu")
    return {
        "totalDisputes": len(litiges),
        "totalAmount": sum((_v(d.amount) for d in litiges), 0.0),
        "resolutionRate": int(math.floor(safe_div(resolus * 100, len(litiges)) + 0.5)),
        "openDisputes": [d.to_dict() for d in litiges if d.status not in STATUTS_LITIGE_FERMES],
    }


aggregate_exposure = agreger_exposition
