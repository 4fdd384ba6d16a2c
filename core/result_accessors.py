from __future__ import annotations

import math
from typing import Any, Optional

__all__ = [
    "as_float",
    "as_int",
    "as_float_or_none",
    "safe_div",
    "ceil_safe",
]


# ==========================================================
# Helpers de base
# ==========================================================
def _fini(x: float) -> bool:
    return not (math.isnan(x) or math.isinf(x))


def as_float(x: Any, default: float = 0.0) -> float:
    """Convertit en float ; None, texte non numérique, NaN ou inf -> default."""
    try:
        if x is None or isinstance(x, bool):
            return float(default)
        v = float(x)
    except (TypeError, ValueError):
        return float(default)
    return v if _fini(v) else float(default)


def as_int(x: Any, default: int = 0) -> int:
    v = as_float(x, float(default))
    return int(v)


def as_float_or_none(x: Any) -> Optional[float]:
    """Comme as_float mais conserve le vide (None / chaîne vide) des champs optionnels."""
    if x is None or (isinstance(x, str) and not x.strip()):
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if _fini(v) else None


def safe_div(num: float, den: float) -> float:
    # dénominateur testé avant la division : 0/0 et -x/0 donnent 0
    if den == 0:
        return 0.0
    return num / den


def ceil_safe(x: Any) -> int:
    return int(math.ceil(as_float(x, 0.0)))
