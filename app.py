# app.py
from __future__ import annotations

import logging
import sys
from pathlib import Path

import streamlit as st

# === imports du dépôt ===
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.configuration import charger_configuration
from ui import calculatrice, litiges, projets, registre_risques
from ui.etat import ctx_get
from ui.router import Page, render_app

logger = logging.getLogger(__name__)

PAGES = [
    Page("projets", "Projets", projets.render),
    Page("tableau", "Tableau de bord", projets.render_tableau_de_bord, requiert_projet=True),
    Page("calculatrice", "Calculateur de pénalités", calculatrice.render),
    Page("risques", "Registre des risques", registre_risques.render, requiert_projet=True),
    Page("litiges", "Litiges", litiges.render),
]


def main() -> None:
    st.set_page_config(page_title="Pénalités & Risques contractuels", layout="wide")
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        cfg = charger_configuration()
    except (FileNotFoundError, ValueError) as e:
        st.error(f"Configuration invalide : {e}")
        return

    ctx = ctx_get(st, cfg)
    render_app(PAGES, ctx)


if __name__ == "__main__":
    main()
