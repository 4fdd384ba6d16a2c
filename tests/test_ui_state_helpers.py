import unittest

from core.modele import BLANK_INPUTS
from ui.state_helpers import (
    build_inputs_fingerprint,
    ensure_dict,
    is_result_stale,
    merge_defaults,
    save_result_fingerprint,
)


class Ctx:
    pass


class TestUIStateHelpers(unittest.TestCase):
    def test_ensure_dict(self):
        ctx = Ctx()
        d = ensure_dict(ctx, "foo", lambda: {"a": 1})
        self.assertEqual({"a": 1}, d)
        self.assertIs(d, ctx.foo)

    def test_merge_defaults(self):
        dst = {"a": 10}
        out = merge_defaults(dst, {"a": 1, "b": 2})
        self.assertEqual({"a": 10, "b": 2}, out)

    def test_result_fingerprint_detecte_stale(self):
        ctx = Ctx()
        ctx.projet_actif_id = "proj-1"
        ctx.brouillon = BLANK_INPUTS.to_dict()

        fp = save_result_fingerprint(ctx)
        self.assertEqual(fp, build_inputs_fingerprint(ctx))
        self.assertFalse(is_result_stale(ctx))

        ctx.brouillon["centraleTotal"] = 1_000_000
        self.assertTrue(is_result_stale(ctx))

    def test_nom_du_projet_et_entier_flottant_ignores(self):
        ctx = Ctx()
        ctx.projet_actif_id = "proj-1"
        ctx.brouillon = {"calculationMode": "pv", "capPercentage": 5, "projectName": "A"}
        save_result_fingerprint(ctx)

        ctx.brouillon["projectName"] = "B"
        ctx.brouillon["capPercentage"] = 5.0
        self.assertFalse(is_result_stale(ctx))

    def test_changement_de_projet(self):
        ctx = Ctx()
        ctx.projet_actif_id = "proj-1"
        ctx.brouillon = {}
        save_result_fingerprint(ctx)
        ctx.projet_actif_id = "proj-2"
        self.assertTrue(is_result_stale(ctx))

    def test_sans_empreinte(self):
        self.assertFalse(is_result_stale(Ctx()))


if __name__ == "__main__":
    unittest.main()
