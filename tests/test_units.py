from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from diagramlayout.errors import ConfigurationError, InvariantViolation, LayoutError, check_invariant
from diagramlayout.units import BoxModel, BoxReference, Sides, parse_sides, parse_unit, resolve_box_model


class ParseUnitTests(unittest.TestCase):
    def test_numbers_are_pixels(self) -> None:
        self.assertEqual(parse_unit(10), 10.0)
        self.assertEqual(parse_unit(2.5), 2.5)
        self.assertEqual(parse_unit(-4), -4.0)

    def test_unit_suffixes(self) -> None:
        self.assertEqual(parse_unit("10px"), 10.0)
        self.assertEqual(parse_unit(" 10 "), 10.0)
        self.assertEqual(parse_unit("2rem"), 32.0)
        self.assertEqual(parse_unit("1.5em"), 24.0)
        self.assertEqual(parse_unit("1in"), 96.0)
        self.assertAlmostEqual(parse_unit("12pt"), 16.0)
        self.assertAlmostEqual(parse_unit("50%"), 8.0)

    def test_relative_units_follow_base(self) -> None:
        self.assertEqual(parse_unit("2em", base=10), 20.0)

    def test_rejects_unknown_units(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            parse_unit("10furlongs")
        self.assertEqual(ctx.exception.code, "E_UNIT")

    def test_rejects_non_lengths(self) -> None:
        for value in ("auto", "", True, None, float("nan"), float("inf"), [1]):
            with self.subTest(value=value):
                with self.assertRaises(ConfigurationError) as ctx:
                    parse_unit(value)
                self.assertEqual(ctx.exception.code, "E_UNIT")


class ParseSidesTests(unittest.TestCase):
    def test_shorthand_forms(self) -> None:
        self.assertEqual(parse_sides(5), Sides(5, 5, 5, 5))
        self.assertEqual(parse_sides("10 20"), Sides(10, 20, 10, 20))
        self.assertEqual(parse_sides([1, 2, 3]), Sides(1, 2, 3, 2))
        self.assertEqual(parse_sides(("1px", "2px", "3px", "4px")), Sides(1, 2, 3, 4))
        self.assertEqual(parse_sides(None), Sides())

    def test_mapping_defaults_missing_sides_to_zero(self) -> None:
        self.assertEqual(parse_sides({"top": 5, "left": "1rem"}), Sides(top=5, left=16))

    def test_rejects_unknown_side(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            parse_sides({"middle": 1})
        self.assertEqual(ctx.exception.code, "E_BOX_KEY")

    def test_rejects_too_many_values(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            parse_sides([1, 2, 3, 4, 5])
        self.assertEqual(ctx.exception.code, "E_BOX_VALUE")

    def test_rejects_unsupported_type(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            parse_sides(object())
        self.assertEqual(ctx.exception.code, "E_BOX_VALUE")


class BoxModelTests(unittest.TestCase):
    def setUp(self) -> None:
        self.model = resolve_box_model({"margin": 5, "border": 2, "padding": "10px"})

    def test_layer_offsets_accumulate_outside_in(self) -> None:
        self.assertEqual(self.model.offset(BoxReference.MARGIN), (0.0, 0.0))
        self.assertEqual(self.model.offset(BoxReference.BORDER), (5.0, 5.0))
        self.assertEqual(self.model.offset("padding"), (7.0, 7.0))
        self.assertEqual(self.model.offset("contentBox"), (17.0, 17.0))

    def test_thickness_to_content(self) -> None:
        self.assertEqual(self.model.thickness_to_content(), (24.0, 24.0))

    def test_none_resolves_to_empty_model(self) -> None:
        self.assertEqual(resolve_box_model(None), BoxModel())

    def test_rejects_negative_sides(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_box_model({"padding": -1})
        self.assertEqual(ctx.exception.code, "E_BOX_NEGATIVE")

    def test_rejects_unknown_keys(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_box_model({"gap": 4})
        self.assertEqual(ctx.exception.code, "E_BOX_KEY")

    def test_box_reference_coercion(self) -> None:
        self.assertIs(BoxReference.coerce(None, BoxReference.BORDER), BoxReference.BORDER)
        self.assertIs(BoxReference.coerce("marginBox", BoxReference.BORDER), BoxReference.MARGIN)
        with self.assertRaises(ConfigurationError) as ctx:
            BoxReference.coerce("outline", BoxReference.BORDER)
        self.assertEqual(ctx.exception.code, "E_BOX_REFERENCE")


class ErrorTypeTests(unittest.TestCase):
    def test_codes_and_messages(self) -> None:
        error = ConfigurationError("E_UNIT", "bad unit")
        self.assertIsInstance(error, LayoutError)
        self.assertIsInstance(error, ValueError)
        self.assertEqual(error.code, "E_UNIT")
        self.assertEqual(str(error), "bad unit")

    def test_check_invariant(self) -> None:
        check_invariant(True, "E_STALE_READ", "unused")
        with self.assertRaises(InvariantViolation) as ctx:
            check_invariant(False, "E_STALE_READ", "stale")
        self.assertIsInstance(ctx.exception, RuntimeError)
        self.assertEqual(ctx.exception.code, "E_STALE_READ")


if __name__ == "__main__":
    unittest.main()
