import unittest
from unittest import mock

import requests

from core.ia import (
    ClientGemini,
    ErreurIA,
    client_depuis_config,
    extraire_suggestions,
    generer_clause,
    message_erreur,
    suggerer_risques,
)


class FauxGenerateur:
    def __init__(self, reponse=None, erreur=None):
        self.reponse = reponse
        self.erreur = erreur
        self.prompts = []

    def generer(self, prompt):
        self.prompts.append(prompt)
        if self.erreur:
            raise self.erreur
        return self.reponse


def _reponse_http(texte):
    resp = mock.Mock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": texte}]}}]}
    return resp


class TestExtraction(unittest.TestCase):
    def test_bloc_json(self):
        texte = 'Voici:\n```json\n[{"risque": "A", "typeRisque": "T", "description": "D"}]\n```'
        self.assertEqual("A", extraire_suggestions(texte)[0]["risque"])

    def test_tableau_nu(self):
        self.assertEqual(2, len(extraire_suggestions('[{"risque": "A"}, {"risque": "B"}]')))

    def test_sans_json(self):
        with self.assertRaises(ErreurIA):
            extraire_suggestions("Je ne peux pas répondre.")

    def test_json_invalide(self):
        with self.assertRaises(ErreurIA):
            extraire_suggestions("```json\n[{risque: A}]\n```")

    def test_suggerer_risques_prompt(self):
        g = FauxGenerateur('[{"risque": "A"}]')
        out = suggerer_risques(g, "EPC")
        self.assertEqual([{"risque": "A"}], out)
        self.assertIn("projet EPC", g.prompts[0])


class TestClientGemini(unittest.TestCase):
    def test_appel_rest(self):
        session = mock.Mock()
        session.post.return_value = _reponse_http("Bonjour")
        c = ClientGemini("cle", modele="m1", url_base="https://api.test/v1/", session=session)

        self.assertEqual("Bonjour", c.generer("prompt"))
        args, kwargs = session.post.call_args
        self.assertEqual("https://api.test/v1/models/m1:generateContent", args[0])
        self.assertEqual({"x-goog-api-key": "cle"}, kwargs["headers"])
        self.assertNotIn("params", kwargs)
        self.assertEqual("prompt", kwargs["json"]["contents"][0]["parts"][0]["text"])

    def test_cle_absente(self):
        with self.assertRaises(ErreurIA) as cm:
            ClientGemini(None, session=mock.Mock()).generer("x")
        self.assertIn("Clé API", str(cm.exception))

    def test_erreur_reseau(self):
        session = mock.Mock()
        session.post.side_effect = requests.ConnectionError("boom")
        with self.assertRaises(ErreurIA) as cm:
            ClientGemini("cle", session=session).generer("x")
        self.assertIn("connexion réseau", str(cm.exception))

    def test_reponse_sans_candidat(self):
        session = mock.Mock()
        resp = _reponse_http("")
        resp.json.return_value = {"candidates": []}
        session.post.return_value = resp
        with self.assertRaises(ErreurIA):
            ClientGemini("cle", session=session).generer("x")

    def _erreur_http(self, statut):
        resp = mock.Mock()
        resp.status_code = statut
        url = "https://api.test/v1/models/m:generateContent?key=SECRET123"
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{statut} Client Error: Bad Request for url: {url}", response=resp
        )
        session = mock.Mock()
        session.post.return_value = resp
        return ClientGemini("SECRET123", session=session)

    def test_erreur_http_sans_cle_dans_le_message(self):
        for statut in (400, 403, 429, 500):
            with self.subTest(statut=statut):
                with self.assertLogs("core.ia", "WARNING") as logs:
                    with self.assertRaises(ErreurIA) as cm:
                        self._erreur_http(statut).generer("x")
                self.assertNotIn("SECRET123", str(cm.exception))
                self.assertNotIn("SECRET123", "\n".join(logs.output))

    def test_statut_http_traduit(self):
        with self.assertRaises(ErreurIA) as cm:
            self._erreur_http(400).generer("x")
        self.assertIn("Clé API invalide", str(cm.exception))
        with self.assertRaises(ErreurIA) as cm:
            self._erreur_http(429).generer("x")
        self.assertIn("Quota", str(cm.exception))
        with self.assertRaises(ErreurIA) as cm:
            self._erreur_http(500).generer("x")
        self.assertEqual("Erreur API Gemini: HTTP 500", str(cm.exception))

    def test_client_depuis_config(self):
        with mock.patch.dict("os.environ", {"MA_CLE": "secret"}):
            c = client_depuis_config({"api_key_env": "MA_CLE", "modele": "m2", "timeout_s": 5})
        self.assertEqual("secret", c.api_key)
        self.assertEqual("m2", c.modele)
        self.assertEqual(5.0, c.timeout_s)


class TestMessages(unittest.TestCase):
    def test_quota(self):
        self.assertIn("Quota", message_erreur(RuntimeError("429 rate limit exceeded")))

    def test_autre(self):
        self.assertEqual("Erreur API Gemini: boom", message_erreur(RuntimeError("boom")))


class TestClause(unittest.TestCase):
    def test_reformulation(self):
        g = FauxGenerateur("  Clause reformulée.  ")
        self.assertEqual("Clause reformulée.", generer_clause(g, "défaut"))
        self.assertIn("défaut", g.prompts[0])

    def test_repli_sur_texte_par_defaut(self):
        g = FauxGenerateur(erreur=ErreurIA("Quota API dépassé."))
        self.assertEqual("défaut", generer_clause(g, "défaut"))

    def test_reponse_vide(self):
        self.assertEqual("défaut", generer_clause(FauxGenerateur(""), "défaut"))


if __name__ == "__main__":
    unittest.main()
