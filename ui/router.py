# ui/router.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

import streamlit as st

from ui.etat import AppCtx, ctx_get, ctx_projet_actif, ctx_set_page

# ====== Contrat d'une page ======
RenderFn = Callable[[AppCtx], None]


@dataclass(frozen=True)
class Page:
    id: str
    titre: str
    render: RenderFn
    requiert_projet: bool = False


def _peut_ouvrir(ctx: AppCtx, page: Page) -> bool:
    return (not page.requiert_projet) or ctx_projet_actif(ctx) is not None


def _sidebar(ctx: AppCtx, pages: List[Page]) -> None:
    st.sidebar.title("Contrats • Pénalités & Risques")

    actif = ctx_projet_actif(ctx)
    if actif is not None:
        st.sidebar.caption(f"Projet actif : **{actif.project_name}** ({actif.project_code or 's/code'})")
    else:
        st.sidebar.caption("Aucun projet actif.")

    for p in pages:
        habilite = _peut_ouvrir(ctx, p)
        marque = "▸" if p.id == ctx.page else ("🔒" if not habilite else "▫️")
        if st.sidebar.button(f"{marque} {p.titre}", disabled=not habilite, key=f"nav_{p.id}"):
            ctx_set_page(st, p.id)
            st.rerun()


def render_app(pages: List[Page], ctx: AppCtx | None = None) -> None:
    """
    Navigation latérale libre ; les pages liées à un projet restent
    verrouillées tant qu'aucun projet n'est sélectionné.
    """
    ctx = ctx or ctx_get(st)
    _sidebar(ctx, pages)

    page = next((p for p in pages if p.id == ctx.page), pages[0])
    if not _peut_ouvrir(ctx, page):
        page = pages[0]
        ctx.page = page.id

    page.render(ctx)
