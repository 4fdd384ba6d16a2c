# core/configuration.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

BASE_DIR = Path(__file__).resolve().parents[1]
CONFIG_DIR = BASE_DIR / "config"


def _lire_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration absente: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration invalide (mapping attendu): {path}")
    return data


@dataclass(frozen=True)
class ConfigApp:
    stockage: Dict[str, Any]
    sorties: Dict[str, Any]
    ia: Dict[str, Any]

    @property
    def fichier_stockage(self) -> Path:
        p = Path(str(self.stockage.get("fichier") or "donnees/projets.json"))
        return p if p.is_absolute() else BASE_DIR / p

    @property
    def dossier_sorties(self) -> str:
        return str(self.sorties.get("dossier") or "sorties")


def charger_configuration(path: Optional[Union[str, Path]] = None) -> ConfigApp:
    data = _lire_yaml(Path(path) if path else CONFIG_DIR / "parametros.yaml")
    return ConfigApp(
        stockage=dict(data.get("stockage") or {}),
        sorties=dict(data.get("sorties") or {}),
        ia=dict(data.get("ia") or {}),
    )


def construire_config_effective(cfg_base: ConfigApp, overrides: Optional[dict]) -> ConfigApp:
    if not overrides:
        return cfg_base
    return ConfigApp(
        stockage={**cfg_base.stockage, **(overrides.get("stockage") or {})},
        sorties={**cfg_base.sorties, **(overrides.get("sorties") or {})},
        ia={**cfg_base.ia, **(overrides.get("ia") or {})},
    )
