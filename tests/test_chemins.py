import tempfile
import unittest
from pathlib import Path

from core.chemins import money_eur, nom_fichier, num_brut, num_fr, pct_fr, preparer_sortie


class TestFormats(unittest.TestCase):
    def test_num_fr(self):
        self.assertEqual("1\u202f234,5", num_fr(1234.5))
        self.assertEqual("1\u202f234,50", num_fr(1234.5, 2))
        self.assertEqual("0,333", num_fr(1 / 3))
        self.assertEqual("12", num_fr(12.0))
        self.assertEqual("0", num_fr(-0.0001))
        self.assertEqual("N/A", num_fr(float("nan")))

    def test_num_brut(self):
        self.assertEqual("0.5", num_brut(0.5))
        self.assertEqual("10", num_brut(10.0))
        self.assertEqual("2.25", num_brut(2.25))

    def test_money_et_pct(self):
        self.assertEqual("50\u202f000,00\u00a0€", money_eur(50000))
        self.assertEqual("1\u202f025\u00a0€", money_eur(1025, 0))
        self.assertEqual("75 %", pct_fr(75))

    def test_negatif(self):
        self.assertEqual("-931,51", num_fr(-931.507, 2))


class TestSorties(unittest.TestCase):
    def test_nom_fichier(self):
        self.assertEqual("Toiture_Lyon_2", nom_fichier("  Toiture Lyon  2 "))
        self.assertEqual("global", nom_fichier(""))

    def test_preparer_sortie(self):
        with tempfile.TemporaryDirectory() as tmp:
            paths = preparer_sortie(tmp, "Toiture Lyon")
            self.assertTrue(Path(paths["out_dir"]).is_dir())
            self.assertEqual("Export_Penalites_Toiture_Lyon.csv", Path(paths["csv_penalites"]).name)
            self.assertEqual("tableau_risques_Toiture_Lyon.csv", Path(paths["csv_risques"]).name)
            self.assertTrue(paths["pdf_path"].endswith(".pdf"))


if __name__ == "__main__":
    unittest.main()
