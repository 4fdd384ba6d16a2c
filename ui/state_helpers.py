# ui/state_helpers.py
from __future__ import annotations

import hashlib
import json
from typing import Any, Callable, Dict


# Seulement les ENTRÉES. Pas de résultats ici.
_FINGERPRINT_KEYS = ("projet_actif_id", "brouillon")

# Sous-ensemble stable du brouillon (le nom du projet ne change pas le calcul)
_BROUILLON_INPUT_KEYS = (
    "calculationMode",
    "centraleTotal",
    "oAndMAnnuel",
    "productionAnnuelMWh",
    "plantLifetimeYears",
    "selfConsumptionRate",
    "gridPriceMWh",
    "capPercentage",
    "administrativeFeesPercentage",
    "montantMarche",
    "tauxPenaliteJournalier",
    "plafondPenalitesPourcentage",
    "nombreJoursRetard",
)


def ensure_dict(ctx: Any, key: str, default_factory: Callable[[], Dict[str, Any]] | None = None) -> Dict[str, Any]:
    if default_factory is None:
        default_factory = dict

    cur = getattr(ctx, key, None)
    if not isinstance(cur, dict):
        cur = default_factory() or {}
        setattr(ctx, key, cur)
    return cur


def merge_defaults(dst: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    for k, v in (defaults or {}).items():
        dst.setdefault(k, v)
    return dst


def _norm_value(x: Any) -> Any:
    if isinstance(x, dict):
        return {str(k): _norm_value(v) for k, v in sorted(x.items(), key=lambda kv: str(kv[0]))}
    if isinstance(x, (list, tuple)):
        return [_norm_value(v) for v in x]
    if isinstance(x, bool) or x is None or isinstance(x, str):
        return x
    if isinstance(x, (int, float)):
        # 5 et 5.0 viennent indifféremment de st.number_input
        return float(x)
    return str(x)


def _brouillon_inputs_only(b: Any) -> Dict[str, Any]:
    if not isinstance(b, dict):
        return {}
    return {k: _norm_value(b.get(k)) for k in _BROUILLON_INPUT_KEYS if k in b}


def build_inputs_fingerprint(ctx: Any) -> str:
    payload: Dict[str, Any] = {}

    for k in _FINGERPRINT_KEYS:
        v = getattr(ctx, k, None)

        if k == "brouillon":
            payload[k] = _brouillon_inputs_only(v)
        else:
            payload[k] = _norm_value(v)

    raw = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def save_result_fingerprint(ctx: Any) -> str:
    fp = build_inputs_fingerprint(ctx)
    setattr(ctx, "result_inputs_fingerprint", fp)
    return fp


def is_result_stale(ctx: Any) -> bool:
    saved = getattr(ctx, "result_inputs_fingerprint", None)
    if not saved:
        return False
    return str(saved) != build_inputs_fingerprint(ctx)
