# rapports/styles.py
from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle


def pdf_palette():
    return {
        "PRIMARY": colors.HexColor("#0B2E4A"),
        "BORDER": colors.HexColor("#D7DCE3"),
        "SOFT": colors.HexColor("#F5F7FA"),

        # Exposition
        "OK": colors.HexColor("#1B7F3A"),      # après mitigation
        "WARN": colors.HexColor("#F9A825"),
        "BAD": colors.HexColor("#C62828"),     # avant mitigation
    }


_REQUIRED = ("H2b", "Clause")


def pdf_styles():
    styles = getSampleStyleSheet()

    body = styles["BodyText"]
    body.fontName = "Helvetica"
    body.fontSize = 10
    body.leading = 12

    if "H2b" not in styles.byName:
        base = styles["Heading2"] if "Heading2" in styles.byName else body
        styles.add(
            ParagraphStyle(
                name="H2b",
                parent=base,
                fontName="Helvetica-Bold",
                fontSize=11,
                leading=13,
                spaceBefore=6,
                spaceAfter=4,
                alignment=TA_LEFT,
                textColor=colors.black,
            )
        )

    if "Clause" not in styles.byName:
        styles.add(
            ParagraphStyle(
                name="Clause",
                parent=body,
                fontName="Helvetica-Oblique",
                fontSize=9.5,
                leading=12,
                leftIndent=8,
                rightIndent=8,
            )
        )

    _assert_required(styles)
    return styles


def _assert_required(styles):
    missing = [k for k in _REQUIRED if k not in styles.byName]
    if missing:
        raise KeyError(
            f"Styles PDF manquants: {missing}. À définir dans rapports/styles.py"
        )
