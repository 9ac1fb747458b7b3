from __future__ import annotations

import sys
import unittest
from pathlib import Path
from typing import List, Tuple

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from diagramlayout import Artboard, PillowTextMeasurer, Text, TextStyle, VStack, heuristic_measure
from diagramlayout.errors import InvariantViolation


class CountingMeasurer:
    """Ten pixels per character; records every query."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    def __call__(self, content: str, style: TextStyle) -> Tuple[float, float]:
        self.calls.append(content)
        lines = content.split("\n")
        return max(len(line) for line in lines) * 10.0, len(lines) * style.font_size * style.line_height


class TextMeasurementTests(unittest.TestCase):
    def test_size_is_measured_text_plus_border_and_padding(self) -> None:
        measurer = CountingMeasurer()
        text = Text("hello", measurer=measurer, box_model={"padding": 5, "margin": 3})
        text.measure()
        self.assertAlmostEqual(text.width, 60.0)
        self.assertAlmostEqual(text.height, 16 * 1.2 + 10)
        self.assertAlmostEqual(text.outer_size().width, 66.0)

    def test_backend_queried_once_per_invalidation(self) -> None:
        measurer = CountingMeasurer()
        text = Text("hello", measurer=measurer)
        text.measure()
        text.measure()
        _ = text.width
        self.assertEqual(measurer.calls, ["hello"])

        text.content = "hi"
        self.assertFalse(text.measured)
        text.measure()
        self.assertEqual(measurer.calls, ["hello", "hi"])
        self.assertAlmostEqual(text.width, 20.0)

    def test_unchanged_content_keeps_measurement(self) -> None:
        text = Text("same", measurer=CountingMeasurer())
        text.measure()
        text.content = "same"
        self.assertTrue(text.measured)

    def test_style_change_invalidates(self) -> None:
        measurer = CountingMeasurer()
        text = Text("x", measurer=measurer)
        text.measure()
        text.text_style = TextStyle(font_size=20)
        text.measure()
        self.assertEqual(len(measurer.calls), 2)
        self.assertAlmostEqual(text.height, 24.0)

    def test_size_read_before_measure(self) -> None:
        text = Text("early", measurer=CountingMeasurer())
        with self.assertRaises(InvariantViolation) as ctx:
            _ = text.width
        self.assertEqual(ctx.exception.code, "E_STALE_READ")

    def test_layout_runs_measure_once_across_passes(self) -> None:
        measurer = CountingMeasurer()
        artboard = Artboard()
        stack = artboard.add_element(VStack(spacing=4))
        stack.add_element(Text("one", measurer=measurer))
        stack.add_element(Text("three", measurer=measurer))
        artboard.run_layout()
        artboard.run_layout()
        self.assertEqual(measurer.calls, ["one", "three"])
        self.assertAlmostEqual(stack.width, 50.0)

    def test_lines(self) -> None:
        self.assertEqual(Text("a\nbc", measurer=CountingMeasurer()).lines, ["a", "bc"])


class MeasurementBackendTests(unittest.TestCase):
    def test_heuristic_measure(self) -> None:
        style = TextStyle(font_size=10)
        width, height = heuristic_measure("ab", style)
        self.assertAlmostEqual(width, 12.0)
        self.assertAlmostEqual(height, 12.0)
        width, height = heuristic_measure("a\nbb", style)
        self.assertAlmostEqual(width, 12.0)
        self.assertAlmostEqual(height, 24.0)

    def test_pillow_measurer_returns_positive_width(self) -> None:
        measurer = PillowTextMeasurer()
        width, height = measurer("Hello", TextStyle())
        self.assertGreater(width, 0)
        self.assertAlmostEqual(height, 16 * 1.2)

    def test_pillow_measurer_caches_fonts(self) -> None:
        measurer = PillowTextMeasurer()
        first = measurer.font(16, "sans-serif", None)
        second = measurer.font(16, "sans-serif", None)
        self.assertIs(first, second)


if __name__ == "__main__":
    unittest.main()
