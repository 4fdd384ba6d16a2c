from typing import TypedDict, List, Dict, Any


class ExpositionRisques(TypedDict):
    before: float
    after: float


class RisqueCalcule(TypedDict):
    risque: Dict[str, Any]          # RiskItem.to_dict()
    coutProbableAvant: float
    coutProbableApres: float


class EcheanceProjet(TypedDict):
    projectName: str
    id: str
    description: str
    date: str
    type: str


class KpisProjet(TypedDict):
    exposureBefore: float
    exposureAfter: float
    ongoingChanges: int
    totalCostImpact: float
    upcomingDeadlines6Months: int


class KpisPortefeuille(TypedDict):
    totalProjects: int
    totalExposureBefore: float
    totalExposureAfter: float
    upcomingDeadlines: List[EcheanceProjet]
    totalChangeRequests: int
    pendingChanges: int
    totalCostImpact: float
    averageChangeCost: float


class KpisLitiges(TypedDict):
    totalDisputes: int
    totalAmount: float
    resolutionRate: int             # %, arrondi
    openDisputes: List[Dict[str, Any]]      # Dispute.to_dict()
