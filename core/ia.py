# core/ia.py
from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional, Protocol

import requests

from .clauses import prompt_clause

__all__ = [
    "ErreurIA",
    "GenerateurTexte",
    "ClientGemini",
    "client_depuis_config",
    "prompt_suggestion_risques",
    "extraire_suggestions",
    "suggerer_risques",
    "generer_clause",
]

logger = logging.getLogger(__name__)

_RE_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```|(\[[\s\S]*\])")


class ErreurIA(RuntimeError):
    """Échec du service de génération ; le message est destiné à l'utilisateur."""


class GenerateurTexte(Protocol):
    def generer(self, prompt: str) -> str: ...


def message_erreur(exc: BaseException) -> str:
    """Message utilisateur ; ne reprend jamais l'URL ni les en-têtes de la requête."""
    reponse = getattr(exc, "response", None)
    statut = getattr(reponse, "status_code", None)
    if statut in (400, 401, 403):
        return "Clé API invalide ou manquante. Vérifiez votre configuration."
    if statut == 429:
        return "Quota API dépassé. Veuillez attendre quelques minutes et réessayer."
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return "Problème de connexion réseau. Vérifiez votre connexion internet."
    if isinstance(exc, requests.HTTPError):
        return f"Erreur API Gemini: HTTP {statut or 'inconnu'}"
    if isinstance(exc, requests.RequestException):
        return f"Erreur API Gemini: {type(exc).__name__}"

    txt = str(exc)
    bas = txt.lower()
    if "api_key" in bas or "api key" in bas:
        return "Clé API invalide ou manquante. Vérifiez votre configuration."
    if "quota" in bas or "rate limit" in bas or "429" in bas:
        return "Quota API dépassé. Veuillez attendre quelques minutes et réessayer."
    if "network" in bas or "fetch" in bas:
        return "Problème de connexion réseau. Vérifiez votre connexion internet."
    return f"Erreur API Gemini: {txt or 'Erreur inconnue'}"


# ==========================================================
# Client REST
# ==========================================================
class ClientGemini:
    def __init__(
        self,
        api_key: Optional[str],
        *,
        modele: str = "gemini-2.5-flash",
        url_base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_s: float = 60,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.modele = modele
        self.url_base = url_base.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _texte_reponse(self, data: Dict[str, Any]) -> str:
        candidats = data.get("candidates") or []
        if not candidats:
            raise ErreurIA("Réponse vide du service IA.")
        parts = ((candidats[0] or {}).get("content") or {}).get("parts") or []
        return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))

    def generer(self, prompt: str) -> str:
        if not self.api_key:
            raise ErreurIA(message_erreur(ValueError("API_KEY manquante")))

        url = f"{self.url_base}/models/{self.modele}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            resp = self.session.post(
                url, headers={"x-goog-api-key": self.api_key}, json=payload, timeout=self.timeout_s
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            msg = message_erreur(e)
            logger.warning("Appel Gemini en échec: %s", msg)
            raise ErreurIA(msg) from e
        except ValueError as e:
            raise ErreurIA(message_erreur(e)) from e

        return self._texte_reponse(data if isinstance(data, dict) else {})


def client_depuis_config(cfg_ia: Dict[str, Any]) -> ClientGemini:
    env = str(cfg_ia.get("api_key_env") or "GEMINI_API_KEY")
    return ClientGemini(
        os.getenv(env),
        modele=str(cfg_ia.get("modele") or "gemini-2.5-flash"),
        url_base=str(cfg_ia.get("url_base") or "https://generativelanguage.googleapis.com/v1beta"),
        timeout_s=float(cfg_ia.get("timeout_s") or 60),
    )


# ==========================================================
# Suggestions de risques
# ==========================================================
def prompt_suggestion_risques(type_contrat: str) -> str:
    return (
        f"Génère 5 risques typiques pour un projet {type_contrat} dans le secteur énergétique.\n"
        'Format JSON strict : [{"risque": "nom", "typeRisque": "catégorie", "description": "détails"}]\n'
        "Réponds UNIQUEMENT avec le tableau JSON, rien d'autre."
    )


def extraire_suggestions(texte: str) -> List[Dict[str, Any]]:
    """Accepte un tableau JSON nu ou entouré d'un bloc ```json."""
    m = _RE_JSON.search((texte or "").strip())
    if not m:
        logger.warning("Réponse IA sans JSON: %r", texte)
        raise ErreurIA("La réponse de l'IA ne contient pas de JSON valide.")
    brut = m.group(1) or m.group(2)
    try:
        data = json.loads(brut)
    except json.JSONDecodeError as e:
        raise ErreurIA("La réponse de l'IA ne contient pas de JSON valide.") from e
    if not isinstance(data, list):
        raise ErreurIA("La réponse de l'IA n'est pas un tableau JSON.")
    return [x for x in data if isinstance(x, dict)]


def suggerer_risques(generateur: GenerateurTexte, type_contrat: str) -> List[Dict[str, Any]]:
    return extraire_suggestions(generateur.generer(prompt_suggestion_risques(type_contrat)))


# ==========================================================
# Clause de pénalité
# ==========================================================
def generer_clause(generateur: GenerateurTexte, texte_defaut: str) -> str:
    """Reformulation IA ; en cas d'échec, le texte par défaut est conservé."""
    try:
        texte = generateur.generer(prompt_clause(texte_defaut))
    except ErreurIA as e:
        logger.warning("Génération de clause impossible: %s", e)
        return texte_defaut
    return texte.strip() or texte_defaut
