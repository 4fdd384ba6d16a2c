# ui/registre_risques.py
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

import pandas as pd
import streamlit as st

from core.chemins import money_eur, preparer_sortie
from core.exposition import agreger_exposition, risques_calcules
from core.ia import ErreurIA, client_depuis_config, suggerer_risques
from core.modele import STATUT_A_FAIRE, STATUT_TERMINE, RiskItem
from core.orchestrateur import mettre_a_jour_risques
from core.risques import (
    SOURCE_ACHATS,
    SOURCE_CONTRAT,
    ajouter_action,
    ajouter_risque,
    modifier_action,
    modifier_risque,
    risque_depuis_analyse,
    risques_depuis_suggestions,
    supprimer_action,
    supprimer_risque,
)
from rapports.export_csv import exporter_csv, lignes_risques
from rapports.generer_graphiques import graphiques_exposition
from rapports.generer_pdf_penalites import generer_pdf_risques
from ui.etat import AppCtx, ctx_projet_actif, ctx_sauvegarder

logger = logging.getLogger(__name__)


def _enregistrer(ctx: AppCtx, project_id: str, risks: List[RiskItem]) -> None:
    ctx.projets = mettre_a_jour_risques(ctx.projets, project_id, risks)
    ctx_sauvegarder(ctx)
    st.rerun()


def _nombre(label: str, valeur: Optional[float], key: str) -> Optional[float]:
    # champ vide -> None (le calcul d'exposition le traite comme 0)
    return st.number_input(label, value=valeur, step=1.0, key=key, placeholder="—")


def _date_ou_none(s: Optional[str]) -> Optional[date]:
    try:
        return date.fromisoformat((s or "")[:10])
    except ValueError:
        return None


# ==========================================================
# Synthèse
# ==========================================================
def _render_synthese(risks: List[RiskItem]) -> None:
    expo = agreger_exposition(risks)
    c1, c2 = st.columns(2)
    c1.metric("Exposition avant mitigation", money_eur(expo["before"], 0))
    c2.metric("Exposition après mitigation", money_eur(expo["after"], 0))

    if risks:
        df = pd.DataFrame([
            {
                "ID": r["risque"]["id"],
                "Risque": r["risque"]["risque"],
                "Coût probable avant (€)": round(r["coutProbableAvant"], 2),
                "Coût probable après (€)": round(r["coutProbableApres"], 2),
            }
            for r in risques_calcules(risks)
        ])
        st.dataframe(df, hide_index=True, use_container_width=True)


# ==========================================================
# Édition d'un risque
# ==========================================================
def _render_actions(ctx: AppCtx, project_id: str, risks: List[RiskItem], i: int) -> None:
    r = risks[i]
    st.markdown("**Actions de mitigation**")
    for j, a in enumerate(r.mitigation_actions):
        c1, c2, c3, c4 = st.columns([4, 2, 2, 1])
        desc = c1.text_input("Action", value=a.description, key=f"act_desc_{a.id}", label_visibility="collapsed")
        echeance = c2.date_input(
            "Échéance", value=_date_ou_none(a.due_date),
            key=f"act_date_{a.id}", label_visibility="collapsed",
        )
        statut = c3.selectbox(
            "Statut", [STATUT_A_FAIRE, STATUT_TERMINE], index=0 if a.status == STATUT_A_FAIRE else 1,
            key=f"act_statut_{a.id}", label_visibility="collapsed",
        )
        if c4.button("🗑", key=f"act_suppr_{a.id}"):
            _enregistrer(ctx, project_id, supprimer_action(risks, i, j))

        maj = risks
        if desc != a.description:
            maj = modifier_action(maj, i, j, "description", desc)
        iso = echeance.isoformat() if echeance else None
        if iso != a.due_date:
            maj = modifier_action(maj, i, j, "due_date", iso)
        if statut != a.status:
            maj = modifier_action(maj, i, j, "status", statut)
        if maj is not risks:
            _enregistrer(ctx, project_id, maj)

    if st.button("➕ Action", key=f"act_ajout_{r.uid}"):
        _enregistrer(ctx, project_id, ajouter_action(risks, i))


def _render_risque(ctx: AppCtx, project_id: str, risks: List[RiskItem], i: int) -> None:
    r = risks[i]
    with st.expander(f"{r.id} · {r.risque or 'Nouveau risque'}"):
        with st.form(f"form_risque_{r.uid}"):
            c1, c2 = st.columns(2)
            with c1:
                risque = st.text_input("Risque", value=r.risque)
                type_risque = st.text_input("Type de risque", value=r.type_risque)
                description = st.text_area("Description", value=r.description)
                explication = st.text_area("Explication / calcul", value=r.explication_calcul)
            with c2:
                cout_max = _nombre("Coût probable maximal (€)", r.cout_probable_maximal, f"cm_{r.uid}")
                p_avant = _nombre("Probabilité avant mitigation (%)", r.probabilite_avant, f"pa_{r.uid}")
                cout_mitig = _nombre("Coût de mitigation (€)", r.cout_mitigation, f"cmit_{r.uid}")
                p_apres = _nombre("Probabilité après mitigation (%)", r.probabilite_apres, f"pp_{r.uid}")
            if st.form_submit_button("Enregistrer"):
                _enregistrer(ctx, project_id, modifier_risque(
                    risks, i,
                    risque=risque, type_risque=type_risque, description=description,
                    explication_calcul=explication, cout_probable_maximal=cout_max,
                    probabilite_avant=p_avant, cout_mitigation=cout_mitig, probabilite_apres=p_apres,
                ))

        _render_actions(ctx, project_id, risks, i)

        if st.button("Supprimer le risque", key=f"suppr_{r.uid}"):
            _enregistrer(ctx, project_id, supprimer_risque(risks, i))


# ==========================================================
# Suggestions IA et exports
# ==========================================================
def _render_suggestions(ctx: AppCtx, p, risks: List[RiskItem]) -> None:
    if not st.button("✨ Suggérer des risques (IA)"):
        return
    cfg_ia = ctx.config.ia if ctx.config else {}
    try:
        with st.spinner("Analyse du type de contrat..."):
            suggestions = suggerer_risques(client_depuis_config(cfg_ia), p.project_type)
    except ErreurIA as e:
        st.error(str(e))
        return
    _enregistrer(ctx, p.id, risques_depuis_suggestions(risks, suggestions, p.project_name))


def _render_ecart_analyse(ctx: AppCtx, p, risks: List[RiskItem]) -> None:
    with st.expander("Ajouter un écart d'analyse de contrat"):
        with st.form("form_ecart", clear_on_submit=True):
            source = st.radio(
                "Source", [SOURCE_CONTRAT, SOURCE_ACHATS],
                format_func=lambda s: "Analyse de contrat" if s == SOURCE_CONTRAT else "Analyse achats",
                horizontal=True,
            )
            theme = st.text_input("Thème")
            analyse = st.text_area("Analyse de l'écart")
            position = st.text_area("Position adverse")
            negociation = st.text_area("Piste de négociation")
            if not st.form_submit_button("Ajouter au registre"):
                return
        if not theme.strip():
            st.error("Le thème est obligatoire.")
            return
        item = {"theme": theme.strip(), "analyse": analyse, "positionB": position, "negociation": negociation.strip()}
        try:
            maj = risque_depuis_analyse(risks, item, p.project_name, source=source)
        except ValueError as err:
            st.error(str(err))
            return
        _enregistrer(ctx, p.id, maj)


def _render_exports(ctx: AppCtx, p, risks: List[RiskItem]) -> None:
    if not risks:
        return
    dossier = ctx.config.dossier_sorties if ctx.config else "sorties"
    paths = preparer_sortie(dossier, p.project_name)

    c1, c2 = st.columns(2)
    with c1:
        csv_path = exporter_csv(lignes_risques(risks), paths["csv_risques"])
        with open(csv_path, "rb") as f:
            st.download_button("Exporter CSV", data=f.read(), file_name=Path(csv_path).name, mime="text/csv")
    with c2:
        if st.button("Générer le PDF du registre"):
            try:
                paths = graphiques_exposition(risks, paths)
                ctx.artefacts["pdf_risques"] = generer_pdf_risques(risks, paths, project_name=p.project_name)
            except OSError as e:
                logger.exception("PDF registre")
                st.exception(e)
        pdf = ctx.artefacts.get("pdf_risques")
        if pdf:
            with open(pdf, "rb") as f:
                st.download_button("Télécharger le PDF", data=f.read(), file_name=Path(pdf).name,
                                   mime="application/pdf")


def render(ctx: AppCtx) -> None:
    p = ctx_projet_actif(ctx)
    if p is None:
        st.info("Sélectionnez un projet.")
        return

    st.markdown(f"### Registre des risques · {p.project_name}")
    risks = list(p.risks)
    _render_synthese(risks)
    st.divider()

    for i in range(len(risks)):
        _render_risque(ctx, p.id, risks, i)

    c1, c2 = st.columns(2)
    with c1:
        if st.button("➕ Ajouter un risque"):
            _enregistrer(ctx, p.id, ajouter_risque(risks, p.project_name))
    with c2:
        _render_suggestions(ctx, p, risks)
    _render_ecart_analyse(ctx, p, risks)

    st.divider()
    _render_exports(ctx, p, risks)
