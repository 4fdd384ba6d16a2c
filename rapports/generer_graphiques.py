# rapports/generer_graphiques.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")  # pas d'affichage (CLI / Streamlit Cloud)
import matplotlib.pyplot as plt

from core.exposition import cout_probable_apres, cout_probable_avant
from core.modele import RiskItem

logger = logging.getLogger(__name__)

COULEUR_AVANT = "#C62828"
COULEUR_APRES = "#1B7F3A"


def _mkdir_graphiques(out_dir: Optional[str]) -> Path:
    base = Path(out_dir) if out_dir else Path("sorties") / "graphiques"
    base.mkdir(parents=True, exist_ok=True)
    return base


def _plot_barres_groupees(labels: List[str], avant: List[float], apres: List[float], out_path: Path) -> None:
    x = list(range(len(labels)))
    w = 0.4
    plt.figure(figsize=(max(6.0, 0.9 * len(labels)), 4.0))
    plt.bar([i - w / 2 for i in x], avant, width=w, color=COULEUR_AVANT, label="Avant mitigation")
    plt.bar([i + w / 2 for i in x], apres, width=w, color=COULEUR_APRES, label="Après mitigation")
    plt.xticks(x, labels, rotation=45, ha="right")
    plt.ylabel("€")
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()


def generer_graphique_exposition(
    risks: Sequence[RiskItem],
    out_path: Optional[str] = None,
    out_dir: Optional[str] = None,
) -> Optional[str]:
    """
    PNG : coût probable avant / après mitigation, par risque.
    Renvoie None si le registre est vide.
    """
    if not risks:
        return None

    p = Path(out_path) if out_path else _mkdir_graphiques(out_dir) / "exposition_risques.png"
    p.parent.mkdir(parents=True, exist_ok=True)

    labels = [r.id or r.risque or "?" for r in risks]
    _plot_barres_groupees(
        labels,
        [cout_probable_avant(r) for r in risks],
        [cout_probable_apres(r) for r in risks],
        p,
    )
    logger.debug("Graphique exposition: %s", p)
    return str(p)


def graphiques_exposition(risks: Sequence[RiskItem], paths: Dict[str, str]) -> Dict[str, str]:
    """Complète `paths` avec chart_exposition si un graphique a été produit."""
    out = dict(paths)
    chemin = generer_graphique_exposition(risks, out_path=paths.get("chart_exposition"), out_dir=paths.get("out_dir"))
    if chemin:
        out["chart_exposition"] = chemin
    else:
        out.pop("chart_exposition", None)
    return out
