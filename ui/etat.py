# ui/etat.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.configuration import ConfigApp
from core.modele import BLANK_INPUTS, ChangeRequest, Dispute, Projet, PurchasingAction
from core.orchestrateur import trouver_projet
from core.stockage import StockageJSON

logger = logging.getLogger(__name__)


# ==========================================================
# Contexte global de l'application
# ==========================================================
@dataclass
class AppCtx:
    # ------------------------------------------------------
    # Navigation
    # ------------------------------------------------------
    page: str = "projets"
    projet_actif_id: Optional[str] = None

    # ------------------------------------------------------
    # Données persistées
    # ------------------------------------------------------
    projets: List[Projet] = field(default_factory=list)
    changements: List[ChangeRequest] = field(default_factory=list)
    achats: List[PurchasingAction] = field(default_factory=list)
    litiges: List[Dispute] = field(default_factory=list)

    # ------------------------------------------------------
    # Saisie du calculateur (dict camelCase, non encore enregistré)
    # ------------------------------------------------------
    brouillon: Dict[str, Any] = field(default_factory=lambda: BLANK_INPUTS.to_dict())

    # clause générée, artefacts (csv, pdf, png)
    clause: Optional[str] = None
    artefacts: Dict[str, str] = field(default_factory=dict)

    config: Optional[ConfigApp] = None
    stockage: Optional[StockageJSON] = None


# ==========================================================
# Obtenir le contexte
# ==========================================================
def ctx_get(st, config: Optional[ConfigApp] = None) -> AppCtx:
    """
    Contexte unique en session_state, chargé depuis le stockage au premier appel.
    """
    if "app_ctx" not in st.session_state:
        ctx = AppCtx(config=config)
        if config is not None:
            ctx.stockage = StockageJSON(config.fichier_stockage)
            ctx.projets, ctx.changements = ctx.stockage.charger()
            ctx.achats = ctx.stockage.charger_achats()
            ctx.litiges = ctx.stockage.charger_litiges()
        st.session_state["app_ctx"] = ctx
    return st.session_state["app_ctx"]


def ctx_set_page(st, page: str) -> None:
    ctx_get(st).page = str(page)


def ctx_projet_actif(ctx: AppCtx) -> Optional[Projet]:
    if not ctx.projet_actif_id:
        return None
    return trouver_projet(ctx.projets, ctx.projet_actif_id)


def ctx_selectionner_projet(ctx: AppCtx, project_id: Optional[str]) -> None:
    """
    Change de projet actif : le brouillon reprend les entrées enregistrées.
    """
    ctx.projet_actif_id = project_id
    ctx.clause = None
    ctx.artefacts = {}
    p = ctx_projet_actif(ctx)
    ctx.brouillon = (p.inputs if p else BLANK_INPUTS).to_dict()
    if p is not None:
        ctx.brouillon.setdefault("projectName", p.project_name)


def ctx_sauvegarder(ctx: AppCtx) -> None:
    if ctx.stockage is None:
        return
    try:
        ctx.stockage.sauvegarder(ctx.projets, ctx.changements, achats=ctx.achats, litiges=ctx.litiges)
    except OSError as e:
        logger.error("Sauvegarde impossible: %s", e)
        raise
