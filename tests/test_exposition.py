import unittest
from datetime import date

from core.exposition import (
    agreger_exposition,
    aggregate_exposure,
    cout_probable_apres,
    cout_probable_avant,
    echeances_a_venir,
    exposition_apres,
    exposition_avant,
    kpis_litiges,
    kpis_portefeuille,
    kpis_projet,
    risques_calcules,
)
from core.modele import ChangeRequest, ContractDeadline, Dispute, Projet, RiskItem


def _risque(uid="r1", **kw) -> RiskItem:
    return RiskItem(uid=uid, id=uid.upper(), **kw)


class TestExposition(unittest.TestCase):
    def test_regle_du_vide_champ_par_champ(self):
        r = _risque(cout_probable_maximal=1000, probabilite_avant=None, probabilite_apres=50, cout_mitigation=None)
        self.assertEqual(0.0, exposition_avant([r]))
        self.assertAlmostEqual(500.0, exposition_apres([r]))

    def test_risque_entierement_vide(self):
        r = _risque()
        self.assertEqual({"before": 0.0, "after": 0.0}, agreger_exposition([r]))

    def test_somme_sur_plusieurs_risques(self):
        risks = [
            _risque("a", cout_probable_maximal=10000, probabilite_avant=75, probabilite_apres=25),
            _risque("b", cout_probable_maximal=2000, probabilite_avant=50, probabilite_apres=10, cout_mitigation=300),
        ]
        expo = aggregate_exposure(risks)
        self.assertAlmostEqual(7500 + 1000, expo["before"])
        self.assertAlmostEqual(2500 + 200 + 300, expo["after"])

    def test_liste_vide(self):
        self.assertEqual({"before": 0.0, "after": 0.0}, agreger_exposition([]))

    def test_cout_mitigation_seul(self):
        r = _risque(cout_mitigation=1200)
        self.assertEqual(0.0, cout_probable_avant(r))
        self.assertAlmostEqual(1200.0, cout_probable_apres(r))

    def test_risques_calcules(self):
        r = _risque(cout_probable_maximal=4000, probabilite_avant=50, probabilite_apres=20, cout_mitigation=100)
        (out,) = risques_calcules([r])
        self.assertEqual("r1", out["risque"]["uid"])
        self.assertAlmostEqual(2000.0, out["coutProbableAvant"])
        self.assertAlmostEqual(900.0, out["coutProbableApres"])


class TestKpis(unittest.TestCase):
    def setUp(self):
        self.today = date(2025, 3, 15)
        self.projet = Projet(
            id="proj-1",
            project_name="Toiture Lyon",
            risks=[_risque(cout_probable_maximal=10000, probabilite_avant=75, probabilite_apres=25)],
            deadlines=[
                ContractDeadline(id="d1", description="Réception", date="2025-03-15"),
                ContractDeadline(id="d2", description="Levée réserves", date="2025-09-15"),
                ContractDeadline(id="d3", description="Garantie", date="2025-09-16"),
                ContractDeadline(id="d4", description="Passée", date="2025-01-01"),
                ContractDeadline(id="d5", description="Sans date", date=""),
            ],
        )
        self.demandes = [
            ChangeRequest(id="c1", project_id="proj-1", status="Demandé", estimated_cost=5000),
            ChangeRequest(id="c2", project_id="proj-1", status="En Analyse"),
            ChangeRequest(id="c3", project_id="proj-1", status="Approuvé", estimated_cost=1500),
            ChangeRequest(id="c4", project_id="proj-1", status="Implémenté", estimated_cost=None),
            ChangeRequest(id="c5", project_id="proj-1", status="Rejeté", estimated_cost=9999),
            ChangeRequest(id="c6", project_id="autre", status="Approuvé", estimated_cost=7777),
        ]

    def test_echeances_fenetre_six_mois_incluse(self):
        self.assertEqual(2, echeances_a_venir(self.projet.deadlines, self.today))

    def test_fin_de_mois_ramenee(self):
        d = [ContractDeadline(id="x", date="2026-02-28")]
        self.assertEqual(1, echeances_a_venir(d, date(2025, 8, 31)))
        hors = [ContractDeadline(id="y", date="2026-03-02")]
        self.assertEqual(0, echeances_a_venir(hors, date(2025, 8, 31)))

    def test_kpis_projet(self):
        k = kpis_projet(self.projet, self.demandes, self.today)
        self.assertAlmostEqual(7500.0, k["exposureBefore"])
        self.assertAlmostEqual(2500.0, k["exposureAfter"])
        self.assertEqual(2, k["ongoingChanges"])
        self.assertAlmostEqual(1500.0, k["totalCostImpact"])
        self.assertEqual(2, k["upcomingDeadlines6Months"])

    def test_kpis_portefeuille(self):
        autre = Projet(
            id="autre",
            project_name="Ombrière Nantes",
            risks=[_risque("r2", cout_probable_maximal=2000, probabilite_avant=50)],
            deadlines=[ContractDeadline(id="n1", description="Jalon", date="2025-04-01", type="Jalon de Paiement")],
        )
        k = kpis_portefeuille([self.projet, autre], self.demandes, self.today)
        self.assertAlmostEqual(8500.0, k["totalExposureBefore"])
        self.assertAlmostEqual(2500.0, k["totalExposureAfter"])
        self.assertEqual(6, k["totalChangeRequests"])
        self.assertEqual(2, k["totalProjects"])
        self.assertEqual(2, k["pendingChanges"])
        self.assertAlmostEqual(9277.0, k["totalCostImpact"])
        self.assertAlmostEqual(6069.0, k["averageChangeCost"])

        dates = [e["date"] for e in k["upcomingDeadlines"]]
        self.assertEqual(["2025-03-15", "2025-04-01", "2025-09-15", "2025-09-16"], dates)
        self.assertEqual("Ombrière Nantes", k["upcomingDeadlines"][1]["projectName"])

    def test_portefeuille_vide(self):
        k = kpis_portefeuille([], [ChangeRequest(id="c", project_id="x", estimated_cost=None)], self.today)
        self.assertEqual(0, k["totalProjects"])
        self.assertEqual(0.0, k["averageChangeCost"])
        self.assertEqual(0.0, kpis_portefeuille([], [], self.today)["averageChangeCost"])

    def test_cinq_prochaines_echeances_au_plus(self):
        p = Projet(
            id="p",
            project_name="P",
            deadlines=[ContractDeadline(id=f"d{i}", date=f"2025-0{i}-01") for i in range(4, 10)],
        )
        k = kpis_portefeuille([p], [], self.today)
        self.assertEqual(5, len(k["upcomingDeadlines"]))
        self.assertEqual("2025-04-01", k["upcomingDeadlines"][0]["date"])


class TestKpisLitiges(unittest.TestCase):
    def test_sans_litige(self):
        k = kpis_litiges([])
        self.assertEqual(0, k["totalDisputes"])
        self.assertEqual(0.0, k["totalAmount"])
        self.assertEqual(0, k["resolutionRate"])
        self.assertEqual([], k["openDisputes"])

    def test_indicateurs(self):
        litiges = [
            Dispute(id="d1", status="Ouvert", amount=5000.0),
            Dispute(id="d2", status="Résolu", amount=None),
            Dispute(id="d3", status="Clos", amount=1500.0),
            Dispute(id="d4", status="Négociation"),
        ]
        k = kpis_litiges(litiges)
        self.assertEqual(4, k["totalDisputes"])
        self.assertEqual(6500.0, k["totalAmount"])
        self.assertEqual(25, k["resolutionRate"])
        self.assertEqual(["d1", "d4"], [d["id"] for d in k["openDisputes"]])

    def test_taux_arrondi_au_demi_superieur(self):
        litiges = [Dispute(id="d0", status="Résolu")] + [Dispute(id=f"d{i}") for i in range(1, 8)]
        self.assertEqual(13, kpis_litiges(litiges)["resolutionRate"])


if __name__ == "__main__":
    unittest.main()
