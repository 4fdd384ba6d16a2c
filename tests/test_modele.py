import unittest

from core.modele import (
    BLANK_INPUTS,
    BLANK_RESULTS,
    MODE_SEED,
    STATUT_A_FAIRE,
    Amendment,
    CalculatorInputs,
    ChangeRequest,
    Dispute,
    FullCalculationResults,
    Projet,
    PurchasingAction,
    RiskItem,
)


class TestCalculatorInputs(unittest.TestCase):
    def test_valeurs_par_defaut(self):
        d = BLANK_INPUTS.to_dict()
        self.assertEqual("pv", d["calculationMode"])
        self.assertEqual(30.0, d["plantLifetimeYears"])
        self.assertEqual(100.0, d["selfConsumptionRate"])
        self.assertEqual(200.0, d["gridPriceMWh"])
        self.assertEqual(5.0, d["capPercentage"])
        self.assertEqual(10.0, d["administrativeFeesPercentage"])
        self.assertEqual(0.5, d["tauxPenaliteJournalier"])
        self.assertEqual(10.0, d["plafondPenalitesPourcentage"])
        self.assertEqual(0, d["nombreJoursRetard"])
        self.assertNotIn("projectName", d)

    def test_from_dict_champs_absents_et_invalides(self):
        p = CalculatorInputs.from_dict({"calculationMode": "seed", "montantMarche": "abc", "gridPriceMWh": None})
        self.assertEqual(MODE_SEED, p.calculation_mode)
        self.assertEqual(0.0, p.montant_marche)
        self.assertEqual(200.0, p.grid_price_mwh)
        self.assertEqual(30.0, p.plant_lifetime_years)

    def test_cles_camel_case(self):
        p = CalculatorInputs.from_dict({"centraleTotal": "1000000", "nombreJoursRetard": 12.0, "projectName": "X"})
        self.assertEqual(1_000_000.0, p.centrale_total)
        self.assertEqual(12, p.nombre_jours_retard)
        self.assertEqual("X", p.to_dict()["projectName"])

    def test_avec_mode(self):
        p = BLANK_INPUTS.avec_mode(MODE_SEED)
        self.assertEqual(MODE_SEED, p.calculation_mode)
        self.assertEqual("pv", BLANK_INPUTS.calculation_mode)


class TestProjet(unittest.TestCase):
    def test_aller_retour_json(self):
        data = {
            "id": "proj-1",
            "projectName": "Toiture Lyon",
            "projectCode": "LYO",
            "projectType": "EPC",
            "status": "P2",
            "inputs": {"calculationMode": "pv", "centraleTotal": 1000000},
            "results": {"plafondValeur": 50000},
            "risks": [
                {
                    "uid": "risk-1",
                    "id": "R001",
                    "risque": "Météo",
                    "coutProbableMaximal": 1000,
                    "probabiliteAvant": None,
                    "mitigationActions": [{"id": "a1", "description": "Bâche", "dueDate": None, "status": "Terminé"}],
                }
            ],
            "deadlines": [{"id": "d1", "description": "Réception", "date": "2025-05-01", "noticePeriodInMonths": 3}],
            "savedAt": "2025-01-01T00:00:00.000Z",
        }
        p = Projet.from_dict(data)
        self.assertEqual(50000.0, p.results.plafond_valeur)
        self.assertEqual("Bâche", p.risks[0].mitigation_actions[0].description)
        self.assertIsNone(p.risks[0].probabilite_avant)

        d = p.to_dict()
        self.assertEqual("LYO", d["projectCode"])
        self.assertEqual(1000, d["risks"][0]["coutProbableMaximal"])
        self.assertEqual(3, d["deadlines"][0]["noticePeriodInMonths"])
        self.assertEqual(p, Projet.from_dict(d))

    def test_listes_absentes(self):
        p = Projet.from_dict({"id": "p", "projectName": "N"})
        self.assertEqual([], p.risks)
        self.assertEqual([], p.deadlines)
        self.assertEqual(BLANK_INPUTS, p.inputs)
        self.assertEqual(BLANK_RESULTS, p.results)


class TestRiskItem(unittest.TestCase):
    def test_mitigation_texte_libre_ancien_format(self):
        r = RiskItem.from_dict({"uid": "risk-7", "id": "R007", "mitigation": "Clause de révision"})
        (a,) = r.mitigation_actions
        self.assertEqual("Clause de révision", a.description)
        self.assertEqual(STATUT_A_FAIRE, a.status)
        self.assertNotIn("mitigation", r.to_dict())

    def test_valeurs_vides(self):
        r = RiskItem.from_dict({"uid": "u", "coutProbableMaximal": "", "probabiliteApres": "40"})
        self.assertIsNone(r.cout_probable_maximal)
        self.assertEqual(40.0, r.probabilite_apres)


class TestDivers(unittest.TestCase):
    def test_resultats_aller_retour(self):
        r = FullCalculationResults(tco=30.0, penalite_finale_seed=10000.0)
        self.assertEqual(r, FullCalculationResults.from_dict(r.to_dict()))
        self.assertIn("penaliteFinaleSeed", r.to_dict())

    def test_change_request(self):
        c = ChangeRequest.from_dict({"id": "c1", "projectId": "p", "estimatedCost": None})
        self.assertEqual("Demandé", c.status)
        self.assertIsNone(c.estimated_cost)
        self.assertEqual("p", c.to_dict()["projectId"])

    def test_change_request_champs_complets(self):
        c = ChangeRequest(
            id="c1", project_id="p", title="Onduleur", change_number="CHG-LYO-001",
            has_purchasing_impact=True, amendments=[Amendment(id="amend-1", signature_date="2025-06-01")],
        )
        d = c.to_dict()
        self.assertEqual("CHG-LYO-001", d["changeNumber"])
        self.assertTrue(d["hasPurchasingImpact"])
        self.assertEqual("2025-06-01", d["amendments"][0]["signatureDate"])
        self.assertEqual(c, ChangeRequest.from_dict(d))

    def test_change_request_ancien_format(self):
        c = ChangeRequest.from_dict({"id": "c1", "projectId": "p"})
        self.assertEqual(("Interne", False, []), (c.requester, c.has_purchasing_impact, c.amendments))

    def test_action_achats(self):
        a = PurchasingAction(id="pa-1", change_request_id="c1", action_description="Commander")
        self.assertEqual("changeRequestId", list(a.to_dict())[1])
        self.assertEqual(a, PurchasingAction.from_dict(a.to_dict()))
        self.assertEqual("À faire", PurchasingAction.from_dict({"id": "pa-2"}).status)

    def test_litige(self):
        d = Dispute(id="dispute-1", title="Toiture", related_contract="EPC-12", quote_amount=1200.0)
        brut = d.to_dict()
        self.assertEqual("EPC-12", brut["relatedContract"])
        self.assertEqual(1200.0, brut["quoteAmount"])
        self.assertEqual(d, Dispute.from_dict(brut))

        vide = Dispute.from_dict({"id": "dispute-2", "amount": "abc"})
        self.assertEqual("Ouvert", vide.status)
        self.assertIsNone(vide.amount)
        self.assertEqual("", vide.related_contract)

    def test_projet_contrat_de_reference(self):
        p = Projet(id="p", project_name="P", base_termsheet_name="CG.pdf")
        self.assertEqual("CG.pdf", p.to_dict()["baseTermsheetName"])
        self.assertEqual("", Projet.from_dict({"id": "p"}).base_termsheet)


if __name__ == "__main__":
    unittest.main()
