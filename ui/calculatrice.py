# ui/calculatrice.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

from core.chemins import money_eur, num_fr, preparer_sortie
from core.clauses import texte_clause_defaut
from core.ia import client_depuis_config, generer_clause
from core.modele import BLANK_INPUTS, MODE_PV, MODE_SEED, CalculatorInputs, FullCalculationResults
from core.orchestrateur import enregistrer_calcul
from core.penalites import calculer_penalites, jours_avant_plafond_affiches, penalite_affichee
from core.validation import normaliser_entrees, valider_entrees
from rapports.export_csv import exporter_csv, lignes_penalites
from rapports.generer_pdf_penalites import generer_pdf_penalites
from ui.etat import AppCtx, ctx_projet_actif, ctx_sauvegarder
from ui.state_helpers import ensure_dict, is_result_stale, merge_defaults, save_result_fingerprint

logger = logging.getLogger(__name__)

_LIBELLES_MODE = {MODE_PV: "Forfaitaire (PV)", MODE_SEED: "Pourcentage (SEED)"}


# ==========================================================
# Saisie
# ==========================================================
def _champ(b: Dict[str, Any], cle: str, label: str, *, step: float = 1.0, fmt: Optional[str] = None) -> None:
    b[cle] = st.number_input(label, value=float(b.get(cle) or 0.0), step=step, format=fmt, key=f"calc_{cle}")


def _saisie_pv(b: Dict[str, Any]) -> None:
    c1, c2 = st.columns(2)
    with c1:
        _champ(b, "centraleTotal", "Coût total centrale (€)", step=1000.0)
        _champ(b, "oAndMAnnuel", "O&M annuel (€)", step=100.0)
        _champ(b, "productionAnnuelMWh", "Production annuelle (MWh/an)", step=10.0)
        _champ(b, "plantLifetimeYears", "Durée de vie (années)")
    with c2:
        _champ(b, "selfConsumptionRate", "Taux d'autoconsommation (%)")
        _champ(b, "gridPriceMWh", "Prix réseau (€/MWh)", step=5.0)
        _champ(b, "capPercentage", "Plafond (% du coût centrale)", step=0.5)
        _champ(b, "administrativeFeesPercentage", "Frais administratifs (%)")


def _saisie_seed(b: Dict[str, Any]) -> None:
    c1, c2 = st.columns(2)
    with c1:
        _champ(b, "montantMarche", "Montant du marché (€)", step=1000.0)
        _champ(b, "tauxPenaliteJournalier", "Taux de pénalité (%/jour)", step=0.05, fmt="%.2f")
    with c2:
        _champ(b, "plafondPenalitesPourcentage", "Plafond des pénalités (%)", step=0.5)
        b["nombreJoursRetard"] = int(
            st.number_input("Nombre de jours de retard", value=int(b.get("nombreJoursRetard") or 0),
                            step=1, key="calc_nombreJoursRetard")
        )


# ==========================================================
# Résultats
# ==========================================================
def _render_resultats(inputs: CalculatorInputs, res: FullCalculationResults) -> None:
    if inputs.calculation_mode == MODE_SEED:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Pénalité par jour", money_eur(res.penalite_journaliere_seed))
        c2.metric("Montant du plafond", money_eur(res.plafond_montant_seed))
        c3.metric("Pénalité totale", money_eur(res.penalite_totale_seed))
        c4.metric("Pénalité finale", money_eur(res.penalite_finale_seed))
        if res.penalite_totale_seed > res.plafond_montant_seed:
            st.info("Le plafond est atteint : la pénalité finale est écrêtée.")
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Pénalité (€/jour)", money_eur(penalite_affichee(res), 0))
    c2.metric("Valeur du plafond", money_eur(res.plafond_valeur))
    c3.metric("Jours avant plafond", num_fr(jours_avant_plafond_affiches(res), 0))
    if res.total_impact_journalier < 0:
        st.warning("Impact journalier négatif : le prix réseau est inférieur au TCO de la centrale.")

    with st.expander("Détail du calcul"):
        st.write(f"Amortissement annuel : {money_eur(res.centrale_annuel)}")
        st.write(f"O&M journalier : {money_eur(res.o_and_m_journalier)}")
        st.write(f"Autoconsommation journalière : {num_fr(res.autoconsommation_journalier)} MWh")
        st.write(f"TCO : {num_fr(res.tco, 2)} €/MWh")
        st.write(f"Coût soutirage réseau : {money_eur(res.cout_soutirage_reseau)} / jour")
        st.write(f"Coût soutirage centrale : {money_eur(res.cout_soutirage_centrale)} / jour")
        st.write(f"Impact financier : {money_eur(res.impact_financier_journalier)} / jour")
        st.write(f"Frais administratifs : {money_eur(res.frais_administratifs)} / jour")


def _render_clause(ctx: AppCtx, inputs: CalculatorInputs, res: FullCalculationResults) -> str:
    st.markdown("#### Clause contractuelle")
    defaut = texte_clause_defaut(inputs, res)
    if st.button("✨ Reformuler avec l'IA"):
        cfg_ia = ctx.config.ia if ctx.config else {}
        with st.spinner("Génération de la clause..."):
            ctx.clause = generer_clause(client_depuis_config(cfg_ia), defaut)
    texte = ctx.clause or defaut
    st.text_area("Clause", value=texte, height=160, key="calc_clause")
    return texte


def _render_exports(ctx: AppCtx, inputs: CalculatorInputs, res: FullCalculationResults, clause: str) -> None:
    dossier = ctx.config.dossier_sorties if ctx.config else "sorties"
    paths = preparer_sortie(dossier, inputs.project_name or "")

    c1, c2 = st.columns(2)
    with c1:
        csv_path = exporter_csv(lignes_penalites(inputs, res, inputs.project_name), paths["csv_penalites"])
        with open(csv_path, "rb") as f:
            st.download_button("Exporter CSV", data=f.read(), file_name=Path(csv_path).name,
                               mime="text/csv")
    with c2:
        if st.button("Générer le PDF"):
            try:
                ctx.artefacts["pdf_penalites"] = generer_pdf_penalites(
                    inputs, res, paths, project_name=inputs.project_name, clause=clause
                )
            except OSError as e:
                logger.exception("PDF pénalités")
                st.exception(e)
        pdf = ctx.artefacts.get("pdf_penalites")
        if pdf:
            with open(pdf, "rb") as f:
                st.download_button("Télécharger le PDF", data=f.read(), file_name="penalites.pdf",
                                   mime="application/pdf")


def render(ctx: AppCtx) -> None:
    st.markdown("### Calculateur de pénalités de retard")
    p = ctx_projet_actif(ctx)

    b = merge_defaults(ensure_dict(ctx, "brouillon"), BLANK_INPUTS.to_dict())
    modes = [MODE_PV, MODE_SEED]
    b["calculationMode"] = st.radio(
        "Mode de calcul", modes, index=modes.index(b.get("calculationMode", MODE_PV))
        if b.get("calculationMode") in modes else 0,
        format_func=lambda m: _LIBELLES_MODE[m], horizontal=True,
    )
    b["projectName"] = st.text_input("Nom du projet", value=b.get("projectName") or (p.project_name if p else ""))

    if b["calculationMode"] == MODE_SEED:
        _saisie_seed(b)
    else:
        _saisie_pv(b)

    try:
        inputs = normaliser_entrees(b)
    except ValueError as e:
        st.error(str(e))
        return

    ok, erreurs = valider_entrees(inputs)
    for err in erreurs:
        st.warning(err)

    res = calculer_penalites(inputs)
    st.divider()
    _render_resultats(inputs, res)

    if p is not None:
        if is_result_stale(ctx):
            st.caption("Les entrées ont changé depuis le dernier enregistrement.")
        if st.button("💾 Enregistrer dans le projet", disabled=not ok):
            ctx.projets = enregistrer_calcul(ctx.projets, p.id, inputs)
            save_result_fingerprint(ctx)
            ctx_sauvegarder(ctx)
            st.success("Calcul enregistré ; risque « Pénalités de retard » mis à jour.")

    st.divider()
    clause = _render_clause(ctx, inputs, res)
    st.divider()
    _render_exports(ctx, inputs, res, clause)
