import unittest

from core.clauses import prompt_clause, texte_clause_defaut
from core.modele import MODE_SEED, CalculatorInputs
from core.penalites import calculer_penalites


class TestClauses(unittest.TestCase):
    def test_clause_pv(self):
        p = CalculatorInputs(
            centrale_total=1_000_000,
            o_and_m_annuel=20_000,
            production_annuel_mwh=2000,
            plant_lifetime_years=25,
        )
        texte = texte_clause_defaut(p, calculer_penalites(p))
        self.assertIn("Pénalité de Retard de 1\u202f025 euros HT Forfaitaire par jour", texte)
        self.assertIn("égal à 5 % du Prix", texte)

    def test_clause_seed(self):
        p = CalculatorInputs(calculation_mode=MODE_SEED, montant_marche=100_000, taux_penalite_journalier=0.5)
        texte = texte_clause_defaut(p, calculer_penalites(p))
        self.assertIn("0,50 % par jour de retard", texte)
        self.assertIn("plafonné à 10 % du montant", texte)

    def test_prompt(self):
        self.assertTrue(prompt_clause("ABC").endswith("\nABC"))


if __name__ == "__main__":
    unittest.main()
