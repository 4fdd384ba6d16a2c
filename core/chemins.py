# core/chemins.py
from __future__ import annotations

import math
import os
import re
from pathlib import Path
from typing import Dict, Optional

SEP_MILLIERS = "\u202f"     # espace fine insécable (fr-FR)
ESPACE_DEVISE = "\u00a0"


def base_dir_projet() -> Path:
    """Base stable en local / Streamlit."""
    try:
        return Path(__file__).resolve().parents[1]
    except Exception:
        return Path(os.getcwd()).resolve()


def nom_fichier(projet: str, defaut: str = "global") -> str:
    return re.sub(r"\s+", "_", (projet or "").strip()) or defaut


def preparer_sortie(dossier: str = "sorties", projet: str = "") -> Dict[str, str]:
    out_dir = Path(dossier)
    if not out_dir.is_absolute():
        out_dir = base_dir_projet() / out_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    suffixe = nom_fichier(projet, "Nouveau_Calcul")
    return {
        "out_dir": str(out_dir),
        "csv_penalites": str(out_dir / f"Export_Penalites_{suffixe}.csv"),
        "csv_risques": str(out_dir / f"tableau_risques_{suffixe}.csv"),
        "chart_exposition": str(out_dir / f"exposition_{suffixe}.png"),
        "pdf_path": str(out_dir / f"penalites_{suffixe}.pdf"),
        "pdf_risques": str(out_dir / f"tableau_risques_{suffixe}.pdf"),
    }


# ==========================================================
# Formats fr-FR
# ==========================================================
def num_fr(x: float, nd: Optional[int] = None) -> str:
    """
    Nombre au format fr-FR. nd=None reproduit toLocaleString :
    jusqu'à 3 décimales, zéros de fin supprimés.
    """
    if x is None or math.isnan(x) or math.isinf(x):
        return "N/A"
    if nd is None:
        s = f"{x:,.3f}".rstrip("0").rstrip(".")
    else:
        s = f"{x:,.{nd}f}"
    if s in ("-0", "-0." + "0" * (nd or 0)):
        s = s[1:]
    return s.replace(",", SEP_MILLIERS).replace(".", ",")


def money_eur(x: float, nd: int = 2) -> str:
    s = num_fr(x, nd)
    if s == "N/A":
        return s
    return f"{s}{ESPACE_DEVISE}€"


def pct_fr(x: float, nd: int = 0) -> str:
    return f"{num_fr(x, nd)} %"


def num_brut(x: float) -> str:
    """Nombre tel que saisi (0.5, 10) : sans séparateur ni zéros superflus."""
    x = float(x)
    if math.isnan(x) or math.isinf(x):
        return "N/A"
    return str(int(x)) if x.is_integer() else repr(x)
