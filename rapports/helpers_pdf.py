# rapports/helpers_pdf.py
from __future__ import annotations

from typing import Any, Dict, List

from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Paragraph, Table, TableStyle


def make_table(data: List[List[Any]], content_w: float, *, ratios=None, repeatRows: int = 0) -> Table:
    """
    Tableau à largeurs de colonnes proportionnelles.
    """
    if ratios is None:
        ratios = [1] * len(data[0])

    total = float(sum(ratios)) if ratios else 1.0
    col_widths = [content_w * (float(r) / total) for r in ratios]

    return Table(data, colWidths=col_widths, repeatRows=repeatRows)


def table_style_uniform(pal: Dict[str, Any], *, font_header: int = 9, font_body: int = 9) -> TableStyle:
    return TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), font_header),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("BACKGROUND", (0, 0), (-1, 0), pal.get("PRIMARY", colors.HexColor("#0B2E4A"))),

        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 1), (-1, -1), font_body),

        ("GRID", (0, 0), (-1, -1), 0.6, pal.get("BORDER", colors.HexColor("#D7DCE3"))),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BACKGROUND", (0, 1), (-1, -1), pal.get("SOFT", colors.HexColor("#F5F7FA"))),
    ])


def section_bar(texte: str, pal: Dict[str, Any], content_w: float) -> Table:
    style = ParagraphStyle(
        name="section_bar",
        fontName="Helvetica-Bold",
        fontSize=10,
        textColor=colors.white,
        leftIndent=6,
    )
    t = Table([[Paragraph(texte, style)]], colWidths=[content_w])
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), pal["PRIMARY"]),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    return t


def tableau_2cols(header, rows, content_w, pal, highlight_row=None, font_header=10, font_body=9) -> Table:
    t = make_table([header] + rows, content_w, ratios=[2.8, 1.2], repeatRows=1)
    t.setStyle(table_style_uniform(pal, font_header=font_header, font_body=font_body))
    t.setStyle(TableStyle([("ALIGN", (1, 1), (1, -1), "RIGHT")]))
    if highlight_row is not None:
        r = highlight_row + 1
        t.setStyle(TableStyle([
            ("BACKGROUND", (0, r), (-1, r), pal["OK"]),
            ("TEXTCOLOR", (0, r), (-1, r), colors.white),
            ("FONTNAME", (0, r), (-1, r), "Helvetica-Bold"),
        ]))
    return t


def box_paragraph(html: str, pal: Dict[str, Any], content_w: float, *, font_size: int = 9) -> Table:
    """
    Encadré bordé sur fond clair (Paragraph HTML).
    """
    style = ParagraphStyle(
        name="Box",
        fontName="Helvetica",
        fontSize=font_size,
        leading=font_size + 2,
        spaceAfter=0,
        spaceBefore=0,
    )
    t = Table([[Paragraph(html, style)]], colWidths=[content_w])
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), pal.get("SOFT", colors.HexColor("#F5F7FA"))),
        ("BOX", (0, 0), (-1, -1), 0.8, pal.get("BORDER", colors.HexColor("#D7DCE3"))),
        ("LEFTPADDING", (0, 0), (-1, -1), 8),
        ("RIGHTPADDING", (0, 0), (-1, -1), 8),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    return t
