# core/calcular.py
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .clauses import texte_clause_defaut
from .chemins import money_eur, nom_fichier, preparer_sortie
from .configuration import charger_configuration
from .modele import MODE_SEED
from .penalites import calculer_penalites, penalite_affichee, plafond_risque
from .risques import synthetiser_risque_penalite
from .validation import normaliser_entrees, valider_entrees

from rapports.export_csv import exporter_csv, lignes_penalites, lignes_risques
from rapports.generer_graphiques import graphiques_exposition
from rapports.generer_pdf_penalites import generer_pdf_penalites, generer_pdf_risques

logger = logging.getLogger(__name__)

# option CLI -> clé JSON de CalculatorInputs
_OPTIONS = {
    "centrale_total": "centraleTotal",
    "o_and_m_annuel": "oAndMAnnuel",
    "production_annuel_mwh": "productionAnnuelMWh",
    "plant_lifetime_years": "plantLifetimeYears",
    "self_consumption_rate": "selfConsumptionRate",
    "grid_price_mwh": "gridPriceMWh",
    "cap_percentage": "capPercentage",
    "administrative_fees_percentage": "administrativeFeesPercentage",
    "montant_marche": "montantMarche",
    "taux_penalite_journalier": "tauxPenaliteJournalier",
    "plafond_penalites_pourcentage": "plafondPenalitesPourcentage",
    "nombre_jours_retard": "nombreJoursRetard",
}


def _parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="calcul-penalites",
        description="Calcul des pénalités de retard (PV forfaitaire ou SEED pourcentage) et exports.",
    )
    ap.add_argument("--entrees", help="Fichier JSON des entrées (clés camelCase)")
    ap.add_argument("--mode", choices=["pv", "seed"], help="Mode de calcul")
    ap.add_argument("--projet", default=None, help="Nom du projet")
    ap.add_argument("--code", default="", help="Code projet (ID du risque R-PEN-<code>)")
    for opt in _OPTIONS:
        ap.add_argument("--" + opt.replace("_", "-"), dest=opt, type=float, default=None)
    ap.add_argument("--sortie", default=None, help="Dossier de sortie (défaut: config sorties.dossier)")
    ap.add_argument("--config", default=None, help="Fichier YAML de paramètres")
    ap.add_argument("--pdf", action="store_true", help="Générer aussi les rapports PDF")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def construire_entrees(args: argparse.Namespace) -> Dict[str, Any]:
    raw: Dict[str, Any] = {}
    if args.entrees:
        raw.update(json.loads(Path(args.entrees).read_text(encoding="utf-8")))
    if args.mode:
        raw["calculationMode"] = args.mode
    if args.projet:
        raw["projectName"] = args.projet
    for opt, cle in _OPTIONS.items():
        val = getattr(args, opt)
        if val is not None:
            raw[cle] = val
    return raw


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        inputs = normaliser_entrees(construire_entrees(args))
    except (OSError, ValueError) as e:
        logger.error("Entrées invalides: %s", e)
        return 2

    ok, erreurs = valider_entrees(inputs)
    if not ok:
        for err in erreurs:
            logger.error(err)
        return 2

    try:
        cfg = charger_configuration(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Configuration invalide: %s", e)
        return 2

    nom = inputs.project_name or ""
    paths = preparer_sortie(args.sortie or cfg.dossier_sorties, nom)

    results = calculer_penalites(inputs)
    if inputs.calculation_mode == MODE_SEED:
        logger.info("Pénalité finale (après plafond): %s", money_eur(results.penalite_finale_seed))
    else:
        logger.info("Pénalité journalière: %s", money_eur(penalite_affichee(results), 0))
    logger.info("Plafond (coût probable maximal): %s", money_eur(plafond_risque(inputs, results)))

    exporter_csv(lignes_penalites(inputs, results, inputs.project_name), paths["csv_penalites"])

    risque = synthetiser_risque_penalite(
        project_id=nom_fichier(nom, "cli"),
        project_name=nom,
        project_code=args.code,
        inputs=inputs,
        results=results,
    )
    exporter_csv(lignes_risques([risque]), paths["csv_risques"])

    if args.pdf:
        paths = graphiques_exposition([risque], paths)
        generer_pdf_penalites(inputs, results, paths, project_name=nom, clause=texte_clause_defaut(inputs, results))
        generer_pdf_risques([risque], paths, project_name=nom)

    logger.info("Sorties écrites dans %s", paths["out_dir"])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
