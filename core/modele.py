# core/modele.py
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from .result_accessors import as_float, as_float_or_none, as_int


MODE_PV = "pv"
MODE_SEED = "seed"
MODES = (MODE_PV, MODE_SEED)

STATUT_A_FAIRE = "À Faire"
STATUT_TERMINE = "Terminé"


def _json(nom: str) -> Dict[str, str]:
    return {"json": nom}


def _cle(f) -> str:
    return f.metadata.get("json", f.name)


# ==========================================================
# Calculateur
# ==========================================================
@dataclass(frozen=True)
class CalculatorInputs:
    calculation_mode: str = field(default=MODE_PV, metadata=_json("calculationMode"))

    # PV
    centrale_total: float = field(default=0.0, metadata=_json("centraleTotal"))
    o_and_m_annuel: float = field(default=0.0, metadata=_json("oAndMAnnuel"))
    production_annuel_mwh: float = field(default=0.0, metadata=_json("productionAnnuelMWh"))
    plant_lifetime_years: float = field(default=30.0, metadata=_json("plantLifetimeYears"))
    self_consumption_rate: float = field(default=100.0, metadata=_json("selfConsumptionRate"))   # %
    grid_price_mwh: float = field(default=200.0, metadata=_json("gridPriceMWh"))
    cap_percentage: float = field(default=5.0, metadata=_json("capPercentage"))                  # % du coût centrale
    administrative_fees_percentage: float = field(default=10.0, metadata=_json("administrativeFeesPercentage"))

    # SEED
    montant_marche: float = field(default=0.0, metadata=_json("montantMarche"))
    taux_penalite_journalier: float = field(default=0.5, metadata=_json("tauxPenaliteJournalier"))  # %/jour
    plafond_penalites_pourcentage: float = field(default=10.0, metadata=_json("plafondPenalitesPourcentage"))
    nombre_jours_retard: int = field(default=0, metadata=_json("nombreJoursRetard"))

    project_name: Optional[str] = field(default=None, metadata=_json("projectName"))

    def __post_init__(self) -> None:
        # NaN, inf ou valeur non numérique -> 0
        for f in fields(self):
            if f.name in ("calculation_mode", "project_name"):
                continue
            v = getattr(self, f.name)
            propre = as_int(v, 0) if f.name == "nombre_jours_retard" else as_float(v, 0.0)
            object.__setattr__(self, f.name, propre)

    def to_dict(self) -> Dict[str, Any]:
        out = {_cle(f): getattr(self, f.name) for f in fields(self)}
        if out.get("projectName") is None:
            out.pop("projectName")
        return out

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "CalculatorInputs":
        """Champs absents ou non numériques -> valeurs de BLANK_INPUTS."""
        d = d or {}
        base = cls()
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            raw = d.get(_cle(f), d.get(f.name))
            defaut = getattr(base, f.name)
            if f.name == "calculation_mode":
                kwargs[f.name] = str(raw) if raw else defaut
            elif f.name == "project_name":
                kwargs[f.name] = str(raw) if raw else None
            elif f.name == "nombre_jours_retard":
                kwargs[f.name] = as_int(raw, defaut)
            else:
                kwargs[f.name] = as_float(raw, defaut)
        return cls(**kwargs)

    def avec_mode(self, mode: str) -> "CalculatorInputs":
        return replace(self, calculation_mode=mode)


@dataclass(frozen=True)
class FullCalculationResults:
    # PV
    total_impact_journalier: float = field(default=0.0, metadata=_json("totalImpactJournalier"))
    plafond_valeur: float = field(default=0.0, metadata=_json("plafondValeur"))
    plafond_jours: float = field(default=0.0, metadata=_json("plafondJours"))
    centrale_annuel: float = field(default=0.0, metadata=_json("centraleAnnuel"))
    centrale_journalier: float = field(default=0.0, metadata=_json("centraleJournalier"))
    o_and_m_annuel: float = field(default=0.0, metadata=_json("oAndMAnnuel"))
    o_and_m_journalier: float = field(default=0.0, metadata=_json("oAndMJournalier"))
    autoconsommation_annuel: float = field(default=0.0, metadata=_json("autoconsommationAnnuel"))
    autoconsommation_journalier: float = field(default=0.0, metadata=_json("autoconsommationJournalier"))
    tco: float = field(default=0.0, metadata=_json("tco"))
    cout_soutirage_reseau: float = field(default=0.0, metadata=_json("coutSoutirageReseau"))
    cout_soutirage_centrale: float = field(default=0.0, metadata=_json("coutSoutirageCentrale"))
    impact_financier_journalier: float = field(default=0.0, metadata=_json("impactFinancierJournalier"))
    frais_administratifs: float = field(default=0.0, metadata=_json("fraisAdministratifs"))

    # SEED
    penalite_journaliere_seed: float = field(default=0.0, metadata=_json("penaliteJournaliereSeed"))
    plafond_montant_seed: float = field(default=0.0, metadata=_json("plafondMontantSeed"))
    penalite_totale_seed: float = field(default=0.0, metadata=_json("penaliteTotaleSeed"))
    penalite_finale_seed: float = field(default=0.0, metadata=_json("penaliteFinaleSeed"))

    def to_dict(self) -> Dict[str, float]:
        return {_cle(f): getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "FullCalculationResults":
        d = d or {}
        return cls(**{f.name: as_float(d.get(_cle(f)), 0.0) for f in fields(cls)})


BLANK_INPUTS = CalculatorInputs()
BLANK_RESULTS = FullCalculationResults()


# ==========================================================
# Registre des risques
# ==========================================================
@dataclass(frozen=True)
class MitigationAction:
    id: str
    description: str = ""
    due_date: Optional[str] = None      # YYYY-MM-DD
    status: str = STATUT_A_FAIRE

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "description": self.description, "dueDate": self.due_date, "status": self.status}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MitigationAction":
        status = d.get("status") or STATUT_A_FAIRE
        return cls(
            id=str(d.get("id") or ""),
            description=str(d.get("description") or ""),
            due_date=d.get("dueDate") or None,
            status=status if status in (STATUT_A_FAIRE, STATUT_TERMINE) else STATUT_A_FAIRE,
        )


@dataclass(frozen=True)
class RiskItem:
    uid: str
    id: str
    projet: str = ""
    risque: str = ""
    type_risque: str = ""
    description: str = ""
    cout_probable_maximal: Optional[float] = None
    probabilite_avant: Optional[float] = None       # %
    explication_calcul: str = ""
    mitigation_actions: List[MitigationAction] = field(default_factory=list)
    cout_mitigation: Optional[float] = None
    probabilite_apres: Optional[float] = None       # %

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "id": self.id,
            "projet": self.projet,
            "risque": self.risque,
            "typeRisque": self.type_risque,
            "description": self.description,
            "coutProbableMaximal": self.cout_probable_maximal,
            "probabiliteAvant": self.probabilite_avant,
            "explicationCalcul": self.explication_calcul,
            "mitigationActions": [a.to_dict() for a in self.mitigation_actions],
            "coutMitigation": self.cout_mitigation,
            "probabiliteApres": self.probabilite_apres,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RiskItem":
        actions = d.get("mitigationActions")
        if not isinstance(actions, list):
            actions = []
        # compat: ancien champ texte libre "mitigation"
        legacy = d.get("mitigation")
        if not actions and isinstance(legacy, str) and legacy.strip():
            actions = [{"id": f"action-{d.get('uid', '')}-0", "description": legacy, "status": STATUT_A_FAIRE}]

        return cls(
            uid=str(d.get("uid") or d.get("id") or ""),
            id=str(d.get("id") or ""),
            projet=str(d.get("projet") or ""),
            risque=str(d.get("risque") or ""),
            type_risque=str(d.get("typeRisque") or ""),
            description=str(d.get("description") or ""),
            cout_probable_maximal=as_float_or_none(d.get("coutProbableMaximal")),
            probabilite_avant=as_float_or_none(d.get("probabiliteAvant")),
            explication_calcul=str(d.get("explicationCalcul") or ""),
            mitigation_actions=[MitigationAction.from_dict(a) for a in actions if isinstance(a, dict)],
            cout_mitigation=as_float_or_none(d.get("coutMitigation")),
            probabilite_apres=as_float_or_none(d.get("probabiliteApres")),
        )


# ==========================================================
# Projet / portefeuille
# ==========================================================
@dataclass(frozen=True)
class ContractDeadline:
    id: str
    description: str = ""
    date: str = ""                      # YYYY-MM-DD
    notice_period_in_months: int = 0
    type: str = "Échéance"              # Échéance | Jalon de Paiement
    amount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "date": self.date,
            "noticePeriodInMonths": self.notice_period_in_months,
            "type": self.type,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ContractDeadline":
        return cls(
            id=str(d.get("id") or ""),
            description=str(d.get("description") or ""),
            date=str(d.get("date") or ""),
            notice_period_in_months=as_int(d.get("noticePeriodInMonths"), 0),
            type=str(d.get("type") or "Échéance"),
            amount=as_float_or_none(d.get("amount")),
        )


# ==========================================================
# Demandes de changement, achats, litiges
# ==========================================================
@dataclass(frozen=True)
class Amendment:
    id: str
    description: str = ""
    signature_date: str = ""            # YYYY-MM-DD

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "description": self.description, "signatureDate": self.signature_date}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Amendment":
        return cls(
            id=str(d.get("id") or ""),
            description=str(d.get("description") or ""),
            signature_date=str(d.get("signatureDate") or ""),
        )


@dataclass(frozen=True)
class ChangeRequest:
    id: str
    project_id: str
    project_name: str = ""
    title: str = ""
    status: str = "Demandé"     # Demandé | En Analyse | Approuvé | Rejeté | Implémenté
    estimated_cost: Optional[float] = None
    created_at: str = ""
    priority: str = "Moyenne"
    description: str = ""
    impact: str = ""
    requester: str = "Interne"
    change_number: str = ""             # CHG-<code>-###
    project_code: str = ""
    contract_ref: str = ""
    requester_name: str = ""
    requester_contact: str = ""
    element_to_modify: str = ""
    expected_timeline: str = ""
    has_purchasing_impact: bool = False
    amendments: List[Amendment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "projectName": self.project_name,
            "title": self.title,
            "status": self.status,
            "estimatedCost": self.estimated_cost,
            "createdAt": self.created_at,
            "priority": self.priority,
            "description": self.description,
            "impact": self.impact,
            "requester": self.requester,
            "changeNumber": self.change_number,
            "projectCode": self.project_code,
            "contractRef": self.contract_ref,
            "requesterName": self.requester_name,
            "requesterContact": self.requester_contact,
            "elementToModify": self.element_to_modify,
            "expectedTimeline": self.expected_timeline,
            "hasPurchasingImpact": self.has_purchasing_impact,
            "amendments": [a.to_dict() for a in self.amendments],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ChangeRequest":
        avenants = d.get("amendments") if isinstance(d.get("amendments"), list) else []
        return cls(
            id=str(d.get("id") or ""),
            project_id=str(d.get("projectId") or ""),
            project_name=str(d.get("projectName") or ""),
            title=str(d.get("title") or ""),
            status=str(d.get("status") or "Demandé"),
            estimated_cost=as_float_or_none(d.get("estimatedCost")),
            created_at=str(d.get("createdAt") or ""),
            priority=str(d.get("priority") or "Moyenne"),
            description=str(d.get("description") or ""),
            impact=str(d.get("impact") or ""),
            requester=str(d.get("requester") or "Interne"),
            change_number=str(d.get("changeNumber") or ""),
            project_code=str(d.get("projectCode") or ""),
            contract_ref=str(d.get("contractRef") or ""),
            requester_name=str(d.get("requesterName") or ""),
            requester_contact=str(d.get("requesterContact") or ""),
            element_to_modify=str(d.get("elementToModify") or ""),
            expected_timeline=str(d.get("expectedTimeline") or ""),
            has_purchasing_impact=bool(d.get("hasPurchasingImpact")),
            amendments=[Amendment.from_dict(a) for a in avenants if isinstance(a, dict)],
        )


STATUT_ACHAT_A_FAIRE = "À faire"
STATUT_ACHAT_TERMINE = "Terminé"


@dataclass(frozen=True)
class PurchasingAction:
    id: str
    change_request_id: str
    change_request_title: str = ""
    project_id: str = ""
    project_name: str = ""
    action_description: str = ""
    status: str = STATUT_ACHAT_A_FAIRE
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "changeRequestId": self.change_request_id,
            "changeRequestTitle": self.change_request_title,
            "projectId": self.project_id,
            "projectName": self.project_name,
            "actionDescription": self.action_description,
            "status": self.status,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PurchasingAction":
        return cls(
            id=str(d.get("id") or ""),
            change_request_id=str(d.get("changeRequestId") or ""),
            change_request_title=str(d.get("changeRequestTitle") or ""),
            project_id=str(d.get("projectId") or ""),
            project_name=str(d.get("projectName") or ""),
            action_description=str(d.get("actionDescription") or ""),
            status=str(d.get("status") or STATUT_ACHAT_A_FAIRE),
            created_at=str(d.get("createdAt") or ""),
        )


@dataclass(frozen=True)
class Dispute:
    id: str
    title: str = ""
    related_contract: str = field(default="", metadata=_json("relatedContract"))
    status: str = "Ouvert"      # Ouvert | En analyse | Négociation | Résolu | Clos | En cours
    amount: Optional[float] = None
    manager: str = ""
    start_date: str = field(default="", metadata=_json("startDate"))
    problem_summary: str = field(default="", metadata=_json("problemSummary"))
    desired_outcome: str = field(default="", metadata=_json("desiredOutcome"))

    # détails sinistre
    description: str = ""
    spv: str = ""
    address: str = ""
    incident_date: str = field(default="", metadata=_json("incidentDate"))

    # finances
    quote_amount: Optional[float] = field(default=None, metadata=_json("quoteAmount"))
    deductible: Optional[float] = None
    reimbursement: Optional[float] = None

    # expertise et suivi
    expert: str = ""
    expertise_date: str = field(default="", metadata=_json("expertiseDate"))
    last_follow_up_date: str = field(default="", metadata=_json("lastFollowUpDate"))
    next_follow_up_date: str = field(default="", metadata=_json("nextFollowUpDate"))
    insurer_ref: str = field(default="", metadata=_json("insurerRef"))
    sharepoint_link: str = field(default="", metadata=_json("sharepointLink"))
    follow_up_details: str = field(default="", metadata=_json("followUpDetails"))

    def to_dict(self) -> Dict[str, Any]:
        return {_cle(f): getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Dispute":
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            raw = d.get(_cle(f))
            if f.name in _MONTANTS_LITIGE:
                kwargs[f.name] = as_float_or_none(raw)
            else:
                defaut = f.default if isinstance(f.default, str) else ""
                kwargs[f.name] = str(raw) if raw else defaut
        return cls(**kwargs)


_MONTANTS_LITIGE = ("amount", "quote_amount", "deductible", "reimbursement")


@dataclass(frozen=True)
class Projet:
    id: str
    project_name: str
    project_code: str = ""
    project_address: str = ""
    project_type: str = "EPC"
    status: str = "O5"
    base_termsheet: str = ""           # texte du contrat de référence
    base_termsheet_name: str = ""
    inputs: CalculatorInputs = BLANK_INPUTS
    results: FullCalculationResults = BLANK_RESULTS
    risks: List[RiskItem] = field(default_factory=list)
    deadlines: List[ContractDeadline] = field(default_factory=list)
    saved_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectName": self.project_name,
            "projectCode": self.project_code,
            "projectAddress": self.project_address,
            "projectType": self.project_type,
            "status": self.status,
            "baseTermsheet": self.base_termsheet,
            "baseTermsheetName": self.base_termsheet_name,
            "inputs": self.inputs.to_dict(),
            "results": self.results.to_dict(),
            "risks": [r.to_dict() for r in self.risks],
            "deadlines": [x.to_dict() for x in self.deadlines],
            "savedAt": self.saved_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Projet":
        risks = d.get("risks") if isinstance(d.get("risks"), list) else []
        deadlines = d.get("deadlines") if isinstance(d.get("deadlines"), list) else []
        return cls(
            id=str(d.get("id") or ""),
            project_name=str(d.get("projectName") or ""),
            project_code=str(d.get("projectCode") or ""),
            project_address=str(d.get("projectAddress") or ""),
            project_type=str(d.get("projectType") or "EPC"),
            status=str(d.get("status") or "O5"),
            base_termsheet=str(d.get("baseTermsheet") or ""),
            base_termsheet_name=str(d.get("baseTermsheetName") or ""),
            inputs=CalculatorInputs.from_dict(d.get("inputs")),
            results=FullCalculationResults.from_dict(d.get("results")),
            risks=[RiskItem.from_dict(r) for r in risks if isinstance(r, dict)],
            deadlines=[ContractDeadline.from_dict(x) for x in deadlines if isinstance(x, dict)],
            saved_at=str(d.get("savedAt") or ""),
        )
