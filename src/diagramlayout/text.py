"""Text leaf element and the measurement backends it queries."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .rectangle import BoxModelSpec, Rectangle
from .element import Size

try:
    from PIL import ImageFont
except ImportError:  # pragma: no cover - Pillow required via dependencies
    ImageFont = None

logger = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "sans-serif"
DEFAULT_FONT_SIZE = 16.0
DEFAULT_LINE_HEIGHT = 1.2
GENERIC_FONT_FALLBACKS = {
    "sans-serif": ["Helvetica", "Arial", "Liberation Sans", "DejaVu Sans"],
    "serif": ["Times New Roman", "Times", "Liberation Serif", "DejaVu Serif"],
    "monospace": [
        "Courier New",
        "Courier",
        "Liberation Mono",
        "DejaVu Sans Mono",
    ],
}


@dataclass(frozen=True)
class TextStyle:
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    font_path: Optional[str] = None
    line_height: float = DEFAULT_LINE_HEIGHT


# measure_intrinsic_size(content, style) -> (width, height)
MeasureFn = Callable[[str, TextStyle], Tuple[float, float]]


class PillowTextMeasurer:
    """Caches Pillow fonts and measures text blocks line by line."""

    FONT_DIRS = [
        Path("/System/Library/Fonts"),
        Path("/System/Library/Fonts/Supplemental"),
        Path("/Library/Fonts"),
        Path("~/Library/Fonts").expanduser(),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path("C:/Windows/Fonts"),
    ]

    def __init__(self) -> None:
        self._font_cache: Dict[Tuple[str, int], Optional["ImageFont.ImageFont"]] = {}
        self._font_paths: Dict[str, Optional[str]] = {}
        self._warned_fallback = False

    def __call__(self, content: str, style: TextStyle) -> Tuple[float, float]:
        lines = _split_lines(content)
        width = max(self.measure_width(line, style) for line in lines)
        height = len(lines) * style.line_height * style.font_size
        return width, height

    def measure_width(self, text: str, style: TextStyle) -> float:
        font = self.font(style.font_size, style.font_family, style.font_path)
        if font is None:
            if not self._warned_fallback:
                logger.warning("no usable font for %r; using heuristic text widths", style.font_family)
                self._warned_fallback = True
            return _heuristic_width(text, style.font_size)
        return float(font.getlength(text))

    def font(
        self, size: float, family: Optional[str], explicit_path: Optional[str]
    ) -> Optional["ImageFont.ImageFont"]:
        if ImageFont is None:
            return None
        key_size = max(1, int(round(size)))
        if family is None:
            family = DEFAULT_FONT_FAMILY
        cache_key = ((explicit_path or family).lower(), key_size)
        if cache_key in self._font_cache:
            return self._font_cache[cache_key]

        font: Optional["ImageFont.ImageFont"] = None
        candidates: List[str] = []
        if explicit_path:
            candidates.append(explicit_path)
        for fam in GENERIC_FONT_FALLBACKS.get(family.lower(), [family]):
            resolved = self._locate_font(fam)
            if resolved:
                candidates.append(resolved)
        candidates.append("DejaVuSans.ttf")

        for candidate in candidates:
            try:
                path, index = self._parse_font_candidate(candidate)
                font = ImageFont.truetype(path, key_size, index=index)
                break
            except OSError:
                continue
        if font is None:
            logger.debug("no TrueType font found for %r at %dpx", family, key_size)

        self._font_cache[cache_key] = font
        return font

    def _locate_font(self, family: str) -> Optional[str]:
        key = family.lower()
        if key in self._font_paths:
            return self._font_paths[key]
        normalized = re.sub(r"[^a-z0-9]+", "", family, flags=re.IGNORECASE).lower()
        if not normalized:
            self._font_paths[key] = None
            return None
        aliases = {normalized, normalized + "mt", normalized + "psmt"}
        best_match: Optional[Tuple[int, str]] = None
        for directory in self.FONT_DIRS:
            if not directory.exists():
                continue
            try:
                for glob in ("*.ttf", "*.ttc"):
                    for path in directory.rglob(glob):
                        stem = re.sub(r"[^a-z0-9]+", "", path.stem, flags=re.IGNORECASE).lower()
                        if stem in aliases:
                            score = 0
                        elif stem.startswith(normalized):
                            score = 1
                        elif normalized in stem:
                            score = 2
                        else:
                            continue
                        candidate = str(path) if glob == "*.ttf" else f"{path};0"
                        if best_match is None or score < best_match[0]:
                            best_match = (score, candidate)
            except OSError:
                continue
        resolved = best_match[1] if best_match else None
        self._font_paths[key] = resolved
        return resolved

    @staticmethod
    def _parse_font_candidate(candidate: str) -> Tuple[str, int]:
        if ";" in candidate:
            path, idx = candidate.split(";", 1)
            try:
                return path, int(idx)
            except ValueError:
                return path, 0
        return candidate, 0


DEFAULT_MEASURER = PillowTextMeasurer()


def heuristic_measure(content: str, style: TextStyle) -> Tuple[float, float]:
    """Font-free estimate; deterministic across machines."""
    lines = _split_lines(content)
    width = max(_heuristic_width(line, style.font_size) for line in lines)
    return width, len(lines) * style.line_height * style.font_size


def _split_lines(content: str) -> List[str]:
    return content.split("\n") or [""]


def _heuristic_width(text: str, font_size: float) -> float:
    width = 0.0
    for ch in text:
        if ch.isspace():
            width += font_size * 0.33
        elif ch in "il":
            width += font_size * 0.3
        elif ch in "mwMW@#":
            width += font_size * 0.9
        else:
            width += font_size * 0.6
    return width


class Text(Rectangle):
    """Text block sized by its measurement backend.

    The backend is asked once per invalidation cycle; the border box is the
    measured text plus border and padding.
    """

    def __init__(
        self,
        content: str,
        style: Optional[TextStyle] = None,
        box_model: BoxModelSpec = None,
        measurer: Optional[MeasureFn] = None,
        svg_style: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(None, None, box_model=box_model, style=svg_style)
        self._content = content
        self._text_style = style or TextStyle()
        self._measurer = measurer or DEFAULT_MEASURER

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str) -> None:
        if value == self._content:
            return
        self._content = value
        self.invalidate_measurement()

    @property
    def text_style(self) -> TextStyle:
        return self._text_style

    @text_style.setter
    def text_style(self, value: TextStyle) -> None:
        if value == self._text_style:
            return
        self._text_style = value
        self.invalidate_measurement()

    @property
    def lines(self) -> List[str]:
        return _split_lines(self._content)

    def perform_measurement(self) -> None:
        width, height = self._measurer(self._content, self._text_style)
        thick_x, thick_y = self.box_model.thickness_to_content()
        self._derived = Size(float(width) + thick_x, float(height) + thick_y)
        super().perform_measurement()
