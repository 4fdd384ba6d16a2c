# rapports/generer_pdf_penalites.py
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import inch
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, TableStyle

from core.chemins import money_eur, num_fr, pct_fr
from core.exposition import agreger_exposition, cout_probable_apres, cout_probable_avant
from core.modele import MODE_SEED, CalculatorInputs, FullCalculationResults, RiskItem
from core.penalites import jours_avant_plafond_affiches, penalite_affichee

from .helpers_pdf import box_paragraph, make_table, section_bar, table_style_uniform, tableau_2cols
from .styles import pdf_palette, pdf_styles

logger = logging.getLogger(__name__)


def _ensure_path(paths: Dict[str, Any], cle: str, defaut: str) -> str:
    """
    Garantit paths[cle] et l'existence du dossier parent.
    """
    if not isinstance(paths, dict):
        raise TypeError(f"`paths` doit être un dict contenant '{cle}'.")

    chemin = paths.get(cle)
    if not chemin:
        out_dir = paths.get("out_dir") or "sorties"
        chemin = str(Path(out_dir) / defaut)
        paths[cle] = chemin

    p = Path(str(chemin))
    p.parent.mkdir(parents=True, exist_ok=True)
    return str(p)


def _img_si_existe(path: Optional[str], *, width: float, height: float):
    if not path:
        return None
    p = Path(str(path))
    if not p.exists() or p.stat().st_size == 0:
        return None
    return Image(str(p), width=width, height=height)


def _entete(titre: str, sous_titre: str, styles) -> List[Any]:
    return [
        Paragraph(escape(titre), styles["Title"]),
        Paragraph(escape(sous_titre), styles["BodyText"]),
        Spacer(1, 10),
    ]


# ==========================================================
# Rapport de calcul
# ==========================================================
def _lignes_statistiques(inputs: CalculatorInputs, results: FullCalculationResults) -> List[List[str]]:
    if inputs.calculation_mode == MODE_SEED:
        return [
            ["Pénalité par jour", money_eur(results.penalite_journaliere_seed)],
            ["Montant du plafond", money_eur(results.plafond_montant_seed)],
            ["Pénalité totale (avant plafond)", money_eur(results.penalite_totale_seed)],
            ["Pénalité finale (après plafond)", money_eur(results.penalite_finale_seed)],
        ]
    return [
        ["Pénalité de retard (€/jour, arrondie)", money_eur(penalite_affichee(results), 0)],
        ["Valeur du plafond", money_eur(results.plafond_valeur)],
        ["Jours avant plafond", num_fr(jours_avant_plafond_affiches(results), 0)],
        ["TCO (€/MWh)", num_fr(results.tco, 2)],
    ]


def _lignes_detail(inputs: CalculatorInputs, results: FullCalculationResults) -> List[List[str]]:
    if inputs.calculation_mode == MODE_SEED:
        return [
            ["Montant du marché", money_eur(inputs.montant_marche)],
            ["Taux de pénalité journalier", pct_fr(inputs.taux_penalite_journalier, 2)],
            ["Plafond des pénalités", pct_fr(inputs.plafond_penalites_pourcentage, 2)],
            ["Nombre de jours de retard", num_fr(inputs.nombre_jours_retard, 0)],
        ]
    return [
        ["Coût total centrale", money_eur(inputs.centrale_total)],
        ["Amortissement annuel", money_eur(results.centrale_annuel)],
        ["Amortissement journalier", money_eur(results.centrale_journalier)],
        ["O&M annuel", money_eur(results.o_and_m_annuel)],
        ["O&M journalier", money_eur(results.o_and_m_journalier)],
        ["Autoconsommation annuelle (MWh)", num_fr(results.autoconsommation_annuel)],
        ["Autoconsommation journalière (MWh)", num_fr(results.autoconsommation_journalier)],
        ["Coût soutirage réseau (€/jour)", money_eur(results.cout_soutirage_reseau)],
        ["Coût soutirage centrale (€/jour)", money_eur(results.cout_soutirage_centrale)],
        ["Impact financier journalier", money_eur(results.impact_financier_journalier)],
        ["Frais administratifs", money_eur(results.frais_administratifs)],
        ["Impact total journalier", money_eur(results.total_impact_journalier)],
    ]


def generer_pdf_penalites(
    inputs: CalculatorInputs,
    results: FullCalculationResults,
    paths: Dict[str, Any],
    *,
    project_name: Optional[str] = None,
    clause: Optional[str] = None,
) -> str:
    """
    Rapport A4 du calcul : statistiques clés, détail du calcul, clause contractuelle.
    """
    pal = pdf_palette()
    styles = pdf_styles()

    pdf_path = _ensure_path(paths, "pdf_path", "penalites.pdf")
    doc = SimpleDocTemplate(pdf_path, pagesize=A4, title="Calcul des pénalités de retard")
    content_w = doc.width

    mode = "Pourcentage (SEED)" if inputs.calculation_mode == MODE_SEED else "Forfaitaire (PV)"
    story: List[Any] = _entete(
        "Calcul des pénalités de retard",
        f"Projet : {project_name or 'N/A'} | Mode : {mode} | {datetime.now():%d/%m/%Y}",
        styles,
    )

    story.append(section_bar("Statistiques clés", pal, content_w))
    story.append(Spacer(1, 6))
    story.append(tableau_2cols(["Indicateur", "Valeur"], _lignes_statistiques(inputs, results), content_w, pal,
                               highlight_row=0))
    story.append(Spacer(1, 12))

    story.append(section_bar("Détail du calcul", pal, content_w))
    story.append(Spacer(1, 6))
    story.append(tableau_2cols(["Poste", "Valeur"], _lignes_detail(inputs, results), content_w, pal))
    story.append(Spacer(1, 12))

    if clause:
        story.append(Paragraph("Clause contractuelle", styles["H2b"]))
        story.append(box_paragraph(escape(clause).replace("\n", "<br/>"), pal, content_w))

    doc.build(story)
    logger.info("PDF pénalités: %s", pdf_path)
    return pdf_path


# ==========================================================
# Registre des risques
# ==========================================================
_ENTETE_RISQUES = [
    "ID", "Risque", "Type", "Coût max", "Prob. avant",
    "Coût prob. avant", "Mitigation", "Coût mitig.", "Prob. après", "Coût prob. après",
]
_RATIOS_RISQUES = [0.8, 2.0, 1.1, 1.1, 0.8, 1.2, 2.6, 1.0, 0.8, 1.2]


def _ligne_risque(r: RiskItem, style) -> List[Any]:
    actions = "<br/>".join(f"• {escape(a.description)} ({escape(a.status)})" for a in r.mitigation_actions)
    return [
        r.id,
        Paragraph(escape(r.risque), style),
        Paragraph(escape(r.type_risque), style),
        money_eur(r.cout_probable_maximal or 0.0, 0),
        pct_fr(r.probabilite_avant or 0.0),
        money_eur(cout_probable_avant(r), 0),
        Paragraph(actions or "-", style),
        money_eur(r.cout_mitigation or 0.0, 0),
        pct_fr(r.probabilite_apres or 0.0),
        money_eur(cout_probable_apres(r), 0),
    ]


def generer_pdf_risques(
    risks: Sequence[RiskItem],
    paths: Dict[str, Any],
    *,
    project_name: Optional[str] = None,
) -> str:
    """
    Registre paysage : un risque par ligne, totaux d'exposition, graphique si présent.
    """
    pal = pdf_palette()
    styles = pdf_styles()

    pdf_path = _ensure_path(paths, "pdf_risques", "tableau_risques.pdf")
    doc = SimpleDocTemplate(pdf_path, pagesize=landscape(A4), title="Registre des risques")
    content_w = doc.width

    story: List[Any] = _entete(
        "Registre des risques",
        f"Projet : {project_name or 'N/A'} | {datetime.now():%d/%m/%Y}",
        styles,
    )

    cellule = styles["BodyText"].clone("cellule", fontSize=8, leading=9.5)
    data = [_ENTETE_RISQUES] + [_ligne_risque(r, cellule) for r in risks]
    t = make_table(data, content_w, ratios=_RATIOS_RISQUES, repeatRows=1)
    t.setStyle(table_style_uniform(pal, font_header=8, font_body=8))
    t.setStyle(TableStyle([
        ("ALIGN", (3, 1), (5, -1), "RIGHT"),
        ("ALIGN", (7, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.append(t)
    story.append(Spacer(1, 10))

    expo = agreger_exposition(risks)
    story.append(tableau_2cols(
        ["Exposition", "Total"],
        [
            ["Exposition totale avant mitigation", money_eur(expo["before"], 0)],
            ["Exposition totale après mitigation", money_eur(expo["after"], 0)],
        ],
        content_w * 0.5,
        pal,
    ))

    img = _img_si_existe(paths.get("chart_exposition"), width=content_w * 0.7, height=2.6 * inch)
    if img is not None:
        story.append(Spacer(1, 10))
        story.append(img)

    doc.build(story)
    logger.info("PDF registre des risques: %s (%d risques)", pdf_path, len(risks))
    return pdf_path
