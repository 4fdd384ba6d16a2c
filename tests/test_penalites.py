import math
import unittest
from dataclasses import fields

from core.modele import MODE_PV, MODE_SEED, CalculatorInputs
from core.penalites import (
    calculer_penalites,
    compute_penalty,
    jours_avant_plafond_affiches,
    penalite_affichee,
    plafond_risque,
)


def _pv(**kw) -> CalculatorInputs:
    base = dict(
        calculation_mode=MODE_PV,
        centrale_total=1_000_000,
        o_and_m_annuel=20_000,
        production_annuel_mwh=2000,
        plant_lifetime_years=25,
        self_consumption_rate=100,
        grid_price_mwh=200,
        cap_percentage=5,
        administrative_fees_percentage=10,
    )
    base.update(kw)
    return CalculatorInputs(**base)


def _seed(**kw) -> CalculatorInputs:
    base = dict(
        calculation_mode=MODE_SEED,
        montant_marche=100_000,
        taux_penalite_journalier=0.5,
        plafond_penalites_pourcentage=10,
        nombre_jours_retard=25,
    )
    base.update(kw)
    return CalculatorInputs(**base)


class TestPenalitesPV(unittest.TestCase):
    def test_exemple_pv(self):
        r = calculer_penalites(_pv())
        self.assertAlmostEqual(40000.0, r.centrale_annuel)
        self.assertAlmostEqual(109.589, r.centrale_journalier, places=3)
        self.assertAlmostEqual(30.0, r.tco)
        self.assertAlmostEqual(5.479, r.autoconsommation_journalier, places=3)
        self.assertAlmostEqual(1095.89, r.cout_soutirage_reseau, places=2)
        self.assertAlmostEqual(164.38, r.cout_soutirage_centrale, places=2)
        self.assertAlmostEqual(931.51, r.impact_financier_journalier, places=2)
        self.assertAlmostEqual(93.15, r.frais_administratifs, places=2)
        self.assertAlmostEqual(1024.66, r.total_impact_journalier, places=2)
        self.assertAlmostEqual(50000.0, r.plafond_valeur)
        self.assertAlmostEqual(48.8, r.plafond_jours, places=1)
        self.assertAlmostEqual(20000.0, r.o_and_m_annuel)

    def test_affichage_arrondi_superieur(self):
        r = calculer_penalites(_pv())
        self.assertEqual(1025, penalite_affichee(r))
        self.assertEqual(49, jours_avant_plafond_affiches(r))

    def test_champs_seed_a_zero_en_mode_pv(self):
        r = calculer_penalites(_pv(montant_marche=999_999, nombre_jours_retard=40))
        self.assertEqual(0.0, r.penalite_journaliere_seed)
        self.assertEqual(0.0, r.plafond_montant_seed)
        self.assertEqual(0.0, r.penalite_totale_seed)
        self.assertEqual(0.0, r.penalite_finale_seed)

    def test_division_par_zero(self):
        r = calculer_penalites(_pv(plant_lifetime_years=0, production_annuel_mwh=0))
        self.assertEqual(0.0, r.centrale_annuel)
        self.assertEqual(0.0, r.tco)
        self.assertEqual(0.0, r.plafond_jours)  # impact total nul
        for f in fields(r):
            v = getattr(r, f.name)
            self.assertFalse(math.isnan(v) or math.isinf(v), f.name)

    def test_impact_total_nul_plafond_jours_zero(self):
        r = calculer_penalites(_pv(grid_price_mwh=30))  # prix réseau == TCO
        self.assertEqual(0.0, r.total_impact_journalier)
        self.assertEqual(0.0, r.plafond_jours)

    def test_impact_negatif_non_borne(self):
        r = calculer_penalites(_pv(grid_price_mwh=10))
        self.assertLess(r.impact_financier_journalier, 0)
        self.assertLess(r.total_impact_journalier, 0)
        self.assertLess(r.plafond_jours, 0)

    def test_idempotence(self):
        p = _pv()
        self.assertEqual(calculer_penalites(p), calculer_penalites(p))
        self.assertEqual(calculer_penalites(p).to_dict(), compute_penalty(p).to_dict())

    def test_mode_inconnu_traite_comme_pv(self):
        r = calculer_penalites(_pv(calculation_mode="autre"))
        self.assertAlmostEqual(50000.0, r.plafond_valeur)

    def test_entrees_nan_degradees_a_zero(self):
        r = calculer_penalites(_pv(centrale_total=float("nan"), grid_price_mwh=None))
        self.assertEqual(0.0, r.plafond_valeur)
        self.assertEqual(0.0, r.cout_soutirage_reseau)


class TestPenalitesSeed(unittest.TestCase):
    def test_exemple_seed(self):
        r = calculer_penalites(_seed())
        self.assertAlmostEqual(500.0, r.penalite_journaliere_seed)
        self.assertAlmostEqual(10000.0, r.plafond_montant_seed)
        self.assertAlmostEqual(12500.0, r.penalite_totale_seed)
        self.assertAlmostEqual(10000.0, r.penalite_finale_seed)

    def test_sous_le_plafond(self):
        r = calculer_penalites(_seed(nombre_jours_retard=10))
        self.assertAlmostEqual(5000.0, r.penalite_finale_seed)

    def test_loi_du_plafond(self):
        for montant in (0, 1, 50_000, 2_000_000):
            for taux in (0, 0.1, 0.5, 3):
                for plafond in (0, 5, 10, 100):
                    for jours in (0, 1, 30, 365):
                        r = calculer_penalites(_seed(
                            montant_marche=montant,
                            taux_penalite_journalier=taux,
                            plafond_penalites_pourcentage=plafond,
                            nombre_jours_retard=jours,
                        ))
                        self.assertEqual(min(r.penalite_totale_seed, r.plafond_montant_seed), r.penalite_finale_seed)
                        self.assertLessEqual(r.penalite_finale_seed, r.plafond_montant_seed)

    def test_champs_pv_a_zero_en_mode_seed(self):
        r = calculer_penalites(_seed(centrale_total=1_000_000, production_annuel_mwh=2000))
        self.assertEqual(0.0, r.total_impact_journalier)
        self.assertEqual(0.0, r.plafond_valeur)
        self.assertEqual(0.0, r.tco)
        self.assertEqual(0.0, r.o_and_m_annuel)

    def test_plafond_risque_selon_mode(self):
        self.assertAlmostEqual(10000.0, plafond_risque(_seed(), calculer_penalites(_seed())))
        self.assertAlmostEqual(50000.0, plafond_risque(_pv(), calculer_penalites(_pv())))


if __name__ == "__main__":
    unittest.main()
