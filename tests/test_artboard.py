from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from diagramlayout import Artboard, Container, Point, Rectangle, Size, VStack


class ArtboardTests(unittest.TestCase):
    def test_default_size(self) -> None:
        artboard = Artboard()
        artboard.run_layout()
        self.assertEqual(artboard.get_box_size(), Size(800, 600))

    def test_run_layout_marks_every_element(self) -> None:
        artboard = Artboard()
        stack = artboard.add_element(VStack())
        leaf = stack.add_element(Rectangle(10, 10))
        with self.assertLogs("diagramlayout.artboard", level="DEBUG"):
            artboard.run_layout()
        for element in (artboard, stack, leaf):
            self.assertTrue(element.measured)
            self.assertTrue(element.laid_out)

    def test_auto_artboard_wraps_children(self) -> None:
        artboard = Artboard(width="auto", height="auto", box_model={"padding": 10})
        artboard.add_element(Rectangle(100, 50))
        far = artboard.add_element(Rectangle(10, 10))
        far.position(relative_to=(200, 200))
        artboard.run_layout()
        self.assertEqual(artboard.get_box_size(), Size(220, 220))

    def test_auto_artboard_includes_nested_overflow(self) -> None:
        artboard = Artboard(width="auto", height="auto")
        group = artboard.add_element(Container(width=50, height=50, direction="freeform"))
        stray = group.add_element(Rectangle(10, 10))
        stray.position(relative_to=(300, 0))
        artboard.run_layout()
        self.assertEqual(artboard.get_box_size(), Size(310, 50))

    def test_auto_artboard_covers_rotated_child(self) -> None:
        artboard = Artboard(width="auto", height="auto")
        rect = artboard.add_element(Rectangle(100, 50))
        rect.rotate(90)
        artboard.run_layout()
        size = artboard.get_box_size()
        self.assertAlmostEqual(size.width, 75)
        self.assertAlmostEqual(size.height, 100)
        left, top, _right, _bottom = rect.bounding_box()
        self.assertAlmostEqual(left, 25)
        self.assertAlmostEqual(top, -25)

    def test_relayout_after_edit(self) -> None:
        artboard = Artboard()
        stack = artboard.add_element(VStack(spacing=10))
        stack.add_element(Rectangle(10, 10))
        artboard.run_layout()
        late = stack.add_element(Rectangle(10, 10))
        self.assertFalse(artboard.measured)
        artboard.run_layout()
        self.assertEqual(late.get_absolute_position(), Point(0, 20))
        self.assertEqual(stack.height, 30)


if __name__ == "__main__":
    unittest.main()
