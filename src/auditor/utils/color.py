# src/auditor/utils/color.py
"""CSS color and font-size parsing plus WCAG relative luminance math."""
import re
from typing import NamedTuple, Optional

DEFAULT_FONT_SIZE_PX = 16.0

_RGBA_RE = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+))?\s*\)")
_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$")
_NUMBER_RE = re.compile(r"^\s*([\d.]+)")


class Color(NamedTuple):
    r: int
    g: int
    b: int
    a: float = 1.0

    def css(self) -> str:
        if self.a < 1:
            return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"
        return f"rgb({self.r}, {self.g}, {self.b})"


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)

NAMED_COLORS = {
    "black": BLACK,
    "white": WHITE,
    "red": Color(255, 0, 0),
    "green": Color(0, 128, 0),
    "blue": Color(0, 0, 255),
    "gray": Color(128, 128, 128),
    "grey": Color(128, 128, 128),
    "transparent": Color(0, 0, 0, 0.0),
}


def parse_color(value: str) -> Optional[Color]:
    """rgb()/rgba(), #rgb/#rrggbb and a handful of named colors; None otherwise."""
    value = value.strip().lower()

    match = _RGBA_RE.search(value)
    if match:
        alpha = float(match.group(4)) if match.group(4) else 1.0
        return Color(int(match.group(1)), int(match.group(2)), int(match.group(3)), alpha)

    match = _HEX_RE.match(value)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return Color(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    return NAMED_COLORS.get(value)


def parse_font_size(value: str) -> float:
    """Font size in px; em and rem assume a 16px base, 1pt is 1.333px."""
    value = value.strip().lower()
    match = _NUMBER_RE.match(value)
    if not match:
        return DEFAULT_FONT_SIZE_PX
    try:
        number = float(match.group(1))
    except ValueError:
        return DEFAULT_FONT_SIZE_PX
    if value.endswith("rem") or value.endswith("em"):
        return number * 16
    if value.endswith("pt"):
        return number * 1.333
    return number


def parse_font_weight(value: str, default: int = 400) -> int:
    value = value.strip().lower()
    if value == "bold":
        return 700
    if value == "normal":
        return 400
    try:
        return int(value)
    except ValueError:
        return default


def _channel(value: int) -> float:
    srgb = value / 255
    return srgb / 12.92 if srgb <= 0.03928 else ((srgb + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    return 0.2126 * _channel(color.r) + 0.7152 * _channel(color.g) + 0.0722 * _channel(color.b)


def contrast_ratio(foreground: Color, background: Color) -> float:
    l1 = relative_luminance(foreground)
    l2 = relative_luminance(background)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)
