# core/stockage.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .modele import ChangeRequest, Dispute, Projet, PurchasingAction

logger = logging.getLogger(__name__)

CLE_PROJETS = "savedProjects"
CLE_CHANGEMENTS = "savedChangeRequests"
CLE_ACHATS = "savedPurchasingActions"
CLE_LITIGES = "savedDisputes"


class StockageJSON:
    """
    Persistance locale mono-utilisateur : un fichier JSON avec les mêmes clés
    que le stockage navigateur (savedProjects, savedChangeRequests,
    savedPurchasingActions, savedDisputes).
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    # ------------------------------------------------------
    # Lecture
    # ------------------------------------------------------
    def _lire(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Lecture impossible de %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Contenu inattendu dans %s (objet JSON attendu)", self.path)
            return {}
        return data

    def charger(self) -> Tuple[List[Projet], List[ChangeRequest]]:
        data = self._lire()
        projets_raw = data.get(CLE_PROJETS) if isinstance(data.get(CLE_PROJETS), list) else []
        changements_raw = data.get(CLE_CHANGEMENTS) if isinstance(data.get(CLE_CHANGEMENTS), list) else []

        projets = [Projet.from_dict(p) for p in projets_raw if isinstance(p, dict)]
        changements = [ChangeRequest.from_dict(c) for c in changements_raw if isinstance(c, dict)]
        logger.debug("Chargé %d projets, %d demandes de changement depuis %s", len(projets), len(changements), self.path)
        return projets, changements

    def charger_projets(self) -> List[Projet]:
        return self.charger()[0]

    def _liste(self, cle: str) -> List[Dict[str, Any]]:
        raw = self._lire().get(cle)
        return [x for x in raw if isinstance(x, dict)] if isinstance(raw, list) else []

    def charger_achats(self) -> List[PurchasingAction]:
        return [PurchasingAction.from_dict(a) for a in self._liste(CLE_ACHATS)]

    def charger_litiges(self) -> List[Dispute]:
        return [Dispute.from_dict(d) for d in self._liste(CLE_LITIGES)]

    # ------------------------------------------------------
    # Écriture (atomique)
    # ------------------------------------------------------
    def _ecrire(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".tmp_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def sauvegarder(
        self,
        projets: List[Projet],
        changements: List[ChangeRequest] | None = None,
        *,
        achats: List[PurchasingAction] | None = None,
        litiges: List[Dispute] | None = None,
    ) -> None:
        data = self._lire()
        data[CLE_PROJETS] = [p.to_dict() for p in projets]
        if changements is not None:
            data[CLE_CHANGEMENTS] = [c.to_dict() for c in changements]
        if achats is not None:
            data[CLE_ACHATS] = [a.to_dict() for a in achats]
        if litiges is not None:
            data[CLE_LITIGES] = [d.to_dict() for d in litiges]
        self._ecrire(data)
        logger.debug("Sauvegardé %d projets dans %s", len(projets), self.path)
