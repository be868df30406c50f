# src/mapskin/style/colors.py
"""
Color and paint value codec.

Parses the color notations found in vendor styles (hex, rgb/rgba, hsl/hsla)
into a canonical ``#rrggbb`` string with a separated alpha, and extracts
numeric opacity and width values from engine-native paint values.
"""

import colorsys
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

HEX_PATTERN = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
RGB_PATTERN = re.compile(r"^rgba?\(([^)]+)\)$", re.IGNORECASE)
HSL_PATTERN = re.compile(r"^hsla?\(([^)]+)\)$", re.IGNORECASE)

MAX_WIDTH = 24.0


@dataclass(frozen=True)
class ParsedColor:
    """A color reduced to its canonical hex form and alpha (0-1)."""

    hex: str
    alpha: float = 1.0

    @property
    def opacity_percent(self) -> int:
        return int(clamp(round_half_up(self.alpha * 100), 0, 100))


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def round_half_up(value: float) -> int:
    """Round like a slider does: 82.5 -> 83, not banker's rounding."""
    return int(math.floor(value + 0.5))


def is_number(value: Any) -> bool:
    """True for finite int/float values, excluding booleans."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> Tuple[int, int, int]:
    """
    Convert CSS-style HSL (degrees, percent, percent) to 0-255 RGB.

    Args:
        hue: Hue in degrees, any range (wrapped to 0-360)
        saturation: Saturation in percent
        lightness: Lightness in percent

    Returns:
        Tuple of (r, g, b)
    """
    h = (hue % 360) / 360
    s = clamp(saturation / 100, 0, 1)
    l = clamp(lightness / 100, 0, 1)
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return (round_half_up(r * 255), round_half_up(g * 255), round_half_up(b * 255))


def _to_float(text: str) -> Optional[float]:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_color(value: Any) -> Optional[ParsedColor]:
    """
    Parse a color string into a ParsedColor.

    Accepts ``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa``, ``rgb()``,
    ``rgba()``, ``hsl()`` and ``hsla()``. Anything else (including expressions
    and non-strings) yields None so callers can fall back to their defaults.
    """
    if not isinstance(value, str):
        return None

    candidate = value.strip()

    if HEX_PATTERN.match(candidate):
        digits = candidate[1:].lower()
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        # Trailing pair of #rrggbbaa is the alpha channel
        alpha = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
        return ParsedColor(hex=f"#{digits[:6]}", alpha=alpha)

    rgb_match = RGB_PATTERN.match(candidate)
    if rgb_match:
        parts = [_to_float(part.strip()) for part in rgb_match.group(1).split(",")]
        if len(parts) < 3 or any(part is None for part in parts[:3]):
            return None
        r, g, b = (int(clamp(round_half_up(part), 0, 255)) for part in parts[:3])
        alpha = parts[3] if len(parts) > 3 and parts[3] is not None else 1.0
        return ParsedColor(hex=rgb_to_hex(r, g, b), alpha=clamp(alpha, 0, 1))

    hsl_match = HSL_PATTERN.match(candidate)
    if not hsl_match:
        return None

    parts = [part.strip() for part in hsl_match.group(1).split(",")]
    if len(parts) < 3:
        return None

    hue = _to_float(parts[0])
    saturation = _to_float(parts[1].replace("%", ""))
    lightness = _to_float(parts[2].replace("%", ""))
    alpha = 1.0 if len(parts) < 4 else _to_float(parts[3])

    if None in (hue, saturation, lightness, alpha):
        return None

    return ParsedColor(
        hex=rgb_to_hex(*hsl_to_rgb(hue, saturation, lightness)),
        alpha=clamp(alpha, 0, 1),
    )


def normalize_hex(value: Any) -> Optional[str]:
    """Canonical ``#rrggbb`` for any parseable color, else None."""
    parsed = parse_color(value)
    return parsed.hex if parsed else None


def parse_hex_rgb(value: Any) -> Tuple[int, int, int]:
    """Split a ``#rrggbb`` color into components; unparseable input is black."""
    parsed = parse_color(value)
    if not parsed:
        return (0, 0, 0)
    digits = parsed.hex[1:]
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def hex_to_rgba(value: Any, alpha: float = 1.0) -> str:
    """Format a color as ``rgba(r, g, b, a)`` text for paint properties."""
    r, g, b = parse_hex_rgb(value)
    alpha = round(clamp(float(alpha), 0, 1), 3)
    return f"rgba({r}, {g}, {b}, {alpha:g})"


def mix_hex_colors(color_a: Any, color_b: Any, ratio: float = 0.5) -> str:
    """Linear blend of two colors; ratio 0 returns color_a, 1 returns color_b."""
    ratio = clamp(float(ratio), 0, 1)
    a = parse_hex_rgb(color_a)
    b = parse_hex_rgb(color_b)
    mixed = (
        int(clamp(round_half_up(ca * (1 - ratio) + cb * ratio), 0, 255))
        for ca, cb in zip(a, b)
    )
    return rgb_to_hex(*mixed)


def extract_opacity_percent(value: Any) -> Optional[int]:
    """
    Read an opacity percent (0-100) from a paint value.

    Plain numbers are read as 0-1 opacities; color strings contribute their
    alpha channel. Expressions are not evaluated and return None.
    """
    if is_number(value):
        return int(clamp(round_half_up(value * 100), 0, 100))
    if isinstance(value, str):
        parsed = parse_color(value)
        if parsed:
            return parsed.opacity_percent
    return None


def extract_width(value: Any) -> Optional[float]:
    """Read a constant width clamped to the editable 0-24 range."""
    if is_number(value):
        return clamp(float(value), 0.0, MAX_WIDTH)
    return None
