# ui/projets.py
from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from core.chemins import money_eur
from core.exposition import kpis_portefeuille, kpis_projet
from core.orchestrateur import (
    STATUTS_ACHAT,
    STATUTS_CHANGEMENT,
    TYPE_ECHEANCE,
    TYPE_JALON_PAIEMENT,
    ajouter_avenant,
    ajouter_echeance,
    changer_statut_action_achat,
    changer_statut_avec_achats,
    creer_demande_changement,
    creer_projet,
    mettre_a_jour_projet,
    nouvelle_echeance,
    supprimer_action_achat,
    supprimer_demande,
    supprimer_echeance,
    supprimer_projet,
)
from ui.etat import AppCtx, ctx_projet_actif, ctx_sauvegarder, ctx_selectionner_projet

TYPES_PROJET = [
    "EPC",
    "IPP Autoconsommation",
    "PV Injection",
    "EPC CVC",
    "AMO",
    "EMS-Froid",
    "Audit",
    "Prestation Intellectuelle AO Public",
    "Travaux AO Public",
]
STATUTS_PROJET = ["O5", "O6", "P1", "P2", "P3", "P4", "P5", "P6"]


def _portefeuille(ctx: AppCtx) -> None:
    k = kpis_portefeuille(ctx.projets, ctx.changements, date.today())

    c1, c2, c3 = st.columns(3)
    c1.metric("Projets", k["totalProjects"])
    c2.metric("Exposition avant mitigation", money_eur(k["totalExposureBefore"], 0))
    c3.metric("Exposition après mitigation", money_eur(k["totalExposureAfter"], 0))

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Demandes de changement", k["totalChangeRequests"])
    c2.metric("En attente", k["pendingChanges"])
    c3.metric("Impact des changements", money_eur(k["totalCostImpact"], 0))
    c4.metric("Coût moyen d'un changement", money_eur(k["averageChangeCost"], 0))

    if k["upcomingDeadlines"]:
        st.markdown("#### Prochaines échéances")
        st.dataframe(pd.DataFrame(k["upcomingDeadlines"]), hide_index=True, use_container_width=True)


def _nouveau_projet(ctx: AppCtx) -> None:
    with st.expander("➕ Nouveau projet", expanded=not ctx.projets):
        with st.form("form_nouveau_projet", clear_on_submit=True):
            nom = st.text_input("Nom du projet")
            code = st.text_input("Code projet")
            adresse = st.text_input("Adresse")
            type_projet = st.selectbox("Type de projet", TYPES_PROJET)
            if st.form_submit_button("Créer"):
                if not nom.strip():
                    st.error("Le nom du projet est obligatoire.")
                    return
                ctx.projets = creer_projet(
                    ctx.projets, nom=nom.strip(), code=code.strip(), adresse=adresse.strip(), type_projet=type_projet
                )
                ctx_selectionner_projet(ctx, ctx.projets[0].id)
                ctx_sauvegarder(ctx)
                st.rerun()


def _liste_projets(ctx: AppCtx) -> None:
    for p in ctx.projets:
        k = kpis_projet(p, ctx.changements, date.today())
        c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
        c1.markdown(f"**{p.project_name}** · {p.project_code or 's/code'} · {p.project_type} · {p.status}")
        c2.caption(
            f"Exposition {money_eur(k['exposureBefore'], 0)} → {money_eur(k['exposureAfter'], 0)}"
        )
        if c3.button("Ouvrir", key=f"ouvrir_{p.id}"):
            ctx_selectionner_projet(ctx, p.id)
            ctx.page = "tableau"
            st.rerun()
        if c4.button("🗑", key=f"suppr_{p.id}"):
            ctx.projets = supprimer_projet(ctx.projets, p.id)
            if ctx.projet_actif_id == p.id:
                ctx_selectionner_projet(ctx, None)
            ctx_sauvegarder(ctx)
            st.rerun()


def render(ctx: AppCtx) -> None:
    st.markdown("### Portefeuille de projets")
    _portefeuille(ctx)
    st.divider()
    _nouveau_projet(ctx)
    _liste_projets(ctx)


# ==========================================================
# Tableau de bord d'un projet
# ==========================================================
def _infos_projet(ctx: AppCtx, p) -> None:
    c1, c2 = st.columns(2)
    with c1:
        nom = st.text_input("Nom du projet", value=p.project_name)
        code = st.text_input("Code projet", value=p.project_code)
    with c2:
        adresse = st.text_input("Adresse", value=p.project_address)
        contrat = st.text_input("Contrat de référence", value=p.base_termsheet_name)
        statut = st.selectbox(
            "Statut", STATUTS_PROJET,
            index=STATUTS_PROJET.index(p.status) if p.status in STATUTS_PROJET else 0,
        )
    saisie = (nom, code, adresse, contrat, statut)
    if saisie != (p.project_name, p.project_code, p.project_address, p.base_termsheet_name, p.status):
        if st.button("Enregistrer les informations"):
            ctx.projets = mettre_a_jour_projet(
                ctx.projets, p.id,
                project_name=nom, project_code=code, project_address=adresse,
                base_termsheet_name=contrat, status=statut,
            )
            ctx_sauvegarder(ctx)
            st.rerun()


def _echeances(ctx: AppCtx, p) -> None:
    st.markdown("#### Échéances contractuelles")
    for d in sorted(p.deadlines, key=lambda x: x.date):
        c1, c2 = st.columns([5, 1])
        montant = f" · {money_eur(d.amount)}" if d.amount is not None else ""
        c1.write(f"{d.date} · {d.type} · {d.description} (préavis {d.notice_period_in_months} mois){montant}")
        if c2.button("🗑", key=f"suppr_{d.id}"):
            ctx.projets = supprimer_echeance(ctx.projets, p.id, d.id)
            ctx_sauvegarder(ctx)
            st.rerun()

    with st.form("form_echeance", clear_on_submit=True):
        type_echeance = st.selectbox("Type", [TYPE_ECHEANCE, TYPE_JALON_PAIEMENT])
        description = st.text_input("Description")
        jour = st.date_input("Date", value=None)
        preavis = st.number_input("Préavis (mois)", value=3, min_value=0, step=1)
        montant = st.number_input("Montant (€, jalon de paiement)", value=0.0, min_value=0.0, step=1000.0)
        if st.form_submit_button("Ajouter l'échéance"):
            try:
                e = nouvelle_echeance(
                    description=description.strip(),
                    date=jour.isoformat() if jour else "",
                    preavis_mois=int(preavis),
                    type_echeance=type_echeance,
                    montant=float(montant),
                )
            except ValueError as err:
                st.error(str(err))
                return
            ctx.projets = ajouter_echeance(ctx.projets, p.id, e)
            ctx_sauvegarder(ctx)
            st.rerun()


def _avenants(ctx: AppCtx, c) -> None:
    for a in c.amendments:
        st.caption(f"Avenant du {a.signature_date} · {a.description}")
    with st.form(f"form_avenant_{c.id}", clear_on_submit=True):
        description = st.text_input("Avenant", key=f"avenant_desc_{c.id}")
        signature = st.date_input("Date de signature", value=None, key=f"avenant_date_{c.id}")
        if st.form_submit_button("Ajouter l'avenant"):
            try:
                ctx.changements = ajouter_avenant(
                    ctx.changements, c.id,
                    description=description.strip(),
                    signature_date=signature.isoformat() if signature else "",
                )
            except ValueError as err:
                st.error(str(err))
                return
            ctx_sauvegarder(ctx)
            st.rerun()


def _actions_achats(ctx: AppCtx, p) -> None:
    actions = [a for a in ctx.achats if a.project_id == p.id]
    if not actions:
        return
    st.markdown("#### Actions achats")
    for a in actions:
        c1, c2, c3 = st.columns([4, 2, 1])
        c1.write(f"{a.action_description} · {a.change_request_title}")
        statut = c2.selectbox(
            "Statut", STATUTS_ACHAT, index=STATUTS_ACHAT.index(a.status) if a.status in STATUTS_ACHAT else 0,
            key=f"statut_{a.id}", label_visibility="collapsed",
        )
        if c3.button("🗑", key=f"suppr_{a.id}"):
            ctx.achats = supprimer_action_achat(ctx.achats, a.id)
            ctx_sauvegarder(ctx)
            st.rerun()
        if statut != a.status:
            ctx.achats = changer_statut_action_achat(ctx.achats, a.id, statut)
            ctx_sauvegarder(ctx)
            st.rerun()


def _demandes(ctx: AppCtx, p) -> None:
    st.markdown("#### Demandes de changement")
    for c in [c for c in ctx.changements if c.project_id == p.id]:
        c1, c2, c3 = st.columns([4, 2, 1])
        cout = money_eur(c.estimated_cost) if c.estimated_cost is not None else "N/A"
        achats = " · 🛒 impact achats" if c.has_purchasing_impact else ""
        c1.write(f"**{c.change_number or 'CHG'} · {c.title}** · {c.priority} · coût estimé {cout}{achats}")
        statut = c2.selectbox(
            "Statut", STATUTS_CHANGEMENT, index=STATUTS_CHANGEMENT.index(c.status)
            if c.status in STATUTS_CHANGEMENT else 0, key=f"statut_{c.id}", label_visibility="collapsed",
        )
        if c3.button("🗑", key=f"suppr_{c.id}"):
            ctx.changements = supprimer_demande(ctx.changements, c.id)
            ctx_sauvegarder(ctx)
            st.rerun()
        if statut != c.status:
            ctx.changements, ctx.achats = changer_statut_avec_achats(ctx.changements, ctx.achats, c.id, statut)
            ctx_sauvegarder(ctx)
            st.rerun()
        with st.expander(f"Avenants ({len(c.amendments)})"):
            _avenants(ctx, c)

    with st.form("form_changement", clear_on_submit=True):
        titre = st.text_input("Titre")
        description = st.text_area("Description")
        impact = st.text_area("Impact")
        cout = st.number_input("Coût estimé (€)", value=0.0, step=100.0)
        priorite = st.selectbox("Priorité", ["Faible", "Moyenne", "Élevée"], index=1)
        demandeur = st.text_input("Nom du demandeur")
        contact = st.text_input("Contact du demandeur")
        element = st.text_input("Élément à modifier")
        delai = st.text_input("Délai attendu")
        impact_achats = st.checkbox("Impact achats")
        if st.form_submit_button("Nouvelle demande"):
            if not titre.strip():
                st.error("Le titre est obligatoire.")
                return
            ctx.changements = creer_demande_changement(
                ctx.changements, p, titre=titre.strip(), description=description,
                cout_estime=float(cout) or None, priorite=priorite,
                impact=impact, requester_name=demandeur.strip(), requester_contact=contact.strip(),
                element_to_modify=element.strip(), expected_timeline=delai.strip(),
                has_purchasing_impact=impact_achats,
            )
            ctx_sauvegarder(ctx)
            st.rerun()

    _actions_achats(ctx, p)


def render_tableau_de_bord(ctx: AppCtx) -> None:
    p = ctx_projet_actif(ctx)
    if p is None:
        st.info("Sélectionnez un projet.")
        return

    st.markdown(f"### {p.project_name}")
    k = kpis_projet(p, ctx.changements, date.today())
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Exposition avant", money_eur(k["exposureBefore"], 0))
    c2.metric("Exposition après", money_eur(k["exposureAfter"], 0))
    c3.metric("Changements en cours", k["ongoingChanges"])
    c4.metric("Échéances < 6 mois", k["upcomingDeadlines6Months"])
    st.caption(f"Impact des changements approuvés : {money_eur(k['totalCostImpact'])}")

    _infos_projet(ctx, p)
    st.divider()
    _echeances(ctx, p)
    st.divider()
    _demandes(ctx, p)
