import json
import tempfile
import unittest
from pathlib import Path

from core.modele import ChangeRequest, Dispute, Projet, PurchasingAction, RiskItem
from core.stockage import StockageJSON


class TestStockageJSON(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "donnees" / "projets.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_fichier_absent(self):
        self.assertEqual(([], []), StockageJSON(self.path).charger())

    def test_fichier_corrompu(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{pas du json", encoding="utf-8")
        with self.assertLogs("core.stockage", level="WARNING"):
            self.assertEqual(([], []), StockageJSON(self.path).charger())

    def test_sauvegarde_puis_chargement(self):
        s = StockageJSON(self.path)
        projets = [Projet(id="proj-1", project_name="Toiture Lyon", risks=[RiskItem(uid="r", id="R001")])]
        changements = [ChangeRequest(id="c1", project_id="proj-1", title="Onduleur")]
        s.sauvegarder(projets, changements)

        brut = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertIn("savedProjects", brut)
        self.assertIn("savedChangeRequests", brut)

        p2, c2 = StockageJSON(self.path).charger()
        self.assertEqual(projets, p2)
        self.assertEqual(changements, c2)

    def test_changements_conserves_si_non_fournis(self):
        s = StockageJSON(self.path)
        s.sauvegarder([], [ChangeRequest(id="c1", project_id="p")])
        s.sauvegarder([Projet(id="p", project_name="P")])
        self.assertEqual(1, len(s.charger()[1]))
        self.assertEqual("p", s.charger_projets()[0].id)

    def test_pas_de_fichier_temporaire_residuel(self):
        StockageJSON(self.path).sauvegarder([])
        self.assertEqual(["projets.json"], sorted(x.name for x in self.path.parent.iterdir()))

    def test_achats_et_litiges(self):
        s = StockageJSON(self.path)
        achats = [PurchasingAction(id="pa-1", change_request_id="c1", action_description="Commander")]
        litiges = [Dispute(id="dispute-1", title="Toiture", related_contract="EPC-12", amount=5000.0)]
        s.sauvegarder([], [], achats=achats, litiges=litiges)

        brut = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual("pa-1", brut["savedPurchasingActions"][0]["id"])
        self.assertEqual("EPC-12", brut["savedDisputes"][0]["relatedContract"])

        # une sauvegarde sans achats ni litiges les conserve
        s.sauvegarder([Projet(id="p", project_name="P")])
        self.assertEqual(achats, s.charger_achats())
        self.assertEqual(litiges, s.charger_litiges())

    def test_achats_et_litiges_absents(self):
        s = StockageJSON(self.path)
        self.assertEqual([], s.charger_achats())
        self.assertEqual([], s.charger_litiges())


if __name__ == "__main__":
    unittest.main()
