# ui/litiges.py
from __future__ import annotations

from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from core.chemins import money_eur
from core.exposition import kpis_litiges
from core.modele import Dispute
from core.orchestrateur import STATUTS_LITIGE, creer_litige, modifier_litige, supprimer_litige
from ui.etat import AppCtx, ctx_sauvegarder

_COLONNES_OUVERTS = {
    "title": "Projet / Titre",
    "relatedContract": "Contrat",
    "status": "Statut",
    "amount": "Montant (€)",
    "manager": "Responsable",
    "nextFollowUpDate": "Prochaine relance",
}


def _tableau_de_bord(ctx: AppCtx) -> None:
    k = kpis_litiges(ctx.litiges)
    c1, c2, c3 = st.columns(3)
    c1.metric("Total des litiges", k["totalDisputes"])
    c2.metric("Montant total en jeu", money_eur(k["totalAmount"], 0))
    c3.metric("Taux de résolution", f"{k['resolutionRate']}%")

    st.markdown("#### Litiges ouverts")
    if not k["openDisputes"]:
        st.info("Aucun litige ouvert.")
        return
    df = pd.DataFrame(k["openDisputes"])[list(_COLONNES_OUVERTS)].rename(columns=_COLONNES_OUVERTS)
    st.dataframe(df, hide_index=True, use_container_width=True)


def _montant(v: float) -> Optional[float]:
    return float(v) if v else None


def _formulaire(ctx: AppCtx, existant: Optional[Dispute]) -> None:
    d = existant or Dispute(id="")
    cle = d.id or "nouveau"
    with st.form(f"form_litige_{cle}", clear_on_submit=existant is None):
        c1, c2 = st.columns(2)
        with c1:
            titre = st.text_input("Projet / Titre", value=d.title)
            contrat = st.text_input("Contrat concerné", value=d.related_contract)
            responsable = st.text_input("Responsable", value=d.manager)
            statut = st.selectbox(
                "Statut", STATUTS_LITIGE,
                index=STATUTS_LITIGE.index(d.status) if d.status in STATUTS_LITIGE else 0,
            )
            montant = st.number_input("Montant en jeu (€)", value=d.amount or 0.0, min_value=0.0, step=1000.0)
            date_sinistre = st.text_input("Date du sinistre (AAAA-MM-JJ)", value=d.incident_date)
        with c2:
            devis = st.number_input("Montant du devis (€)", value=d.quote_amount or 0.0, min_value=0.0, step=100.0)
            franchise = st.number_input("Franchise (€)", value=d.deductible or 0.0, min_value=0.0, step=100.0)
            remboursement = st.number_input(
                "Remboursement (€)", value=d.reimbursement or 0.0, min_value=0.0, step=100.0
            )
            expert = st.text_input("Expert", value=d.expert)
            ref_assureur = st.text_input("Référence assureur", value=d.insurer_ref)
            relance = st.text_input("Prochaine relance (AAAA-MM-JJ)", value=d.next_follow_up_date)
        resume = st.text_area("Résumé du problème", value=d.problem_summary)
        objectif = st.text_area("Résultat souhaité", value=d.desired_outcome)
        suivi = st.text_area("Détails du suivi", value=d.follow_up_details)

        if not st.form_submit_button("Enregistrer" if existant else "Déclarer le litige"):
            return

    details: Dict[str, Any] = {
        "status": statut,
        "amount": _montant(montant),
        "incident_date": date_sinistre.strip(),
        "quote_amount": _montant(devis),
        "deductible": _montant(franchise),
        "reimbursement": _montant(remboursement),
        "expert": expert.strip(),
        "insurer_ref": ref_assureur.strip(),
        "next_follow_up_date": relance.strip(),
        "problem_summary": resume,
        "desired_outcome": objectif,
        "follow_up_details": suivi,
    }
    try:
        if existant is None:
            ctx.litiges = creer_litige(
                ctx.litiges, title=titre.strip(), related_contract=contrat.strip(), manager=responsable.strip(),
                **details,
            )
        else:
            ctx.litiges = modifier_litige(
                ctx.litiges, existant.id,
                title=titre.strip(), related_contract=contrat.strip(), manager=responsable.strip(), **details,
            )
    except ValueError as err:
        st.error(str(err))
        return
    ctx_sauvegarder(ctx)
    st.rerun()


def render(ctx: AppCtx) -> None:
    st.markdown("### Tableau de bord des litiges")
    _tableau_de_bord(ctx)
    st.divider()

    with st.expander("➕ Déclarer un nouveau litige", expanded=not ctx.litiges):
        _formulaire(ctx, None)

    for d in ctx.litiges:
        with st.expander(f"{d.title} · {d.related_contract} · {d.status}"):
            _formulaire(ctx, d)
            if st.button("🗑 Supprimer le dossier", key=f"suppr_{d.id}"):
                ctx.litiges = supprimer_litige(ctx.litiges, d.id)
                ctx_sauvegarder(ctx)
                st.rerun()
