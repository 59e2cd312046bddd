"""
branding.py
───────────
Colour and typography tokens (BrandTheme) for the invoice document.

Each brand in the catalog carries a primary/secondary hex pair; ``theme_for_brand``
turns that into a full theme with a rule colour derived from the secondary.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass, field
from typing import Optional, Tuple

from reportlab.lib.colors import HexColor

from .catalog import BrandConfig

# Convenience type alias
RGBColor = Tuple[int, int, int]


# ── Colour math ────────────────────────────────────────────────────────────────

def hex_to_rgb(hex_color: str) -> Optional[RGBColor]:
    """``#EF4444`` → ``(239, 68, 68)``; ``None`` when not a 6-digit hex colour."""
    value = (hex_color or "").strip().lstrip("#")
    if len(value) != 6:
        return None
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError:
        return None


def rgb_to_hex(rgb: RGBColor) -> str:
    """Convert an RGB tuple to an uppercase hex string, e.g. ``#1A2B3C``."""
    return "#{:02X}{:02X}{:02X}".format(*rgb)


def luminance(rgb: RGBColor) -> float:
    """
    WCAG 2.1 relative luminance (0 = absolute black, 1 = absolute white).
    Used to reject primaries too pale to read on white paper.
    """
    def _lin(c: int) -> float:
        v = c / 255.0
        return v / 12.92 if v <= 0.03928 else ((v + 0.055) / 1.055) ** 2.4

    r, g, b = (_lin(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def is_dark(rgb: RGBColor) -> bool:
    return luminance(rgb) < 0.40


def lighten(rgb: RGBColor, amount: float = 0.25) -> RGBColor:
    """Increase lightness by *amount* (0–1) in HLS space."""
    h, l, s = colorsys.rgb_to_hls(rgb[0] / 255, rgb[1] / 255, rgb[2] / 255)
    l = min(1.0, l + amount)
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return (int(r * 255), int(g * 255), int(b * 255))


# ── Brand theme data class ─────────────────────────────────────────────────────

@dataclass
class BrandTheme:
    """All colour and typography tokens for a single brand."""

    primary:   RGBColor                          # Brand name, footer bar
    secondary: RGBColor                          # Headings, rules

    text_dark:  RGBColor = field(default=(51, 51, 51))
    text_muted: RGBColor = field(default=(102, 102, 102))
    rule:       RGBColor = field(default=(221, 221, 221))

    # Typography (standard PDF fonts – no embedding needed)
    font:        str = "Helvetica"
    font_bold:   str = "Helvetica-Bold"
    font_italic: str = "Helvetica-Oblique"

    # ── ReportLab colour helpers ───────────────────────────────────────────────

    @staticmethod
    def _rl(rgb: RGBColor) -> HexColor:
        return HexColor(rgb_to_hex(rgb))

    @property
    def rl_primary(self)    -> HexColor: return self._rl(self.primary)
    @property
    def rl_secondary(self)  -> HexColor: return self._rl(self.secondary)
    @property
    def rl_text_dark(self)  -> HexColor: return self._rl(self.text_dark)
    @property
    def rl_text_muted(self) -> HexColor: return self._rl(self.text_muted)
    @property
    def rl_rule(self)       -> HexColor: return self._rl(self.rule)


# ── Factories ──────────────────────────────────────────────────────────────────

def theme_for_brand(brand: BrandConfig) -> BrandTheme:
    """Build a theme from the brand's hex pair, falling back per colour."""
    fallback = default_theme()
    primary   = hex_to_rgb(brand.colors[0]) or fallback.primary
    secondary = hex_to_rgb(brand.colors[1]) or fallback.secondary

    # Very light primaries disappear on white paper
    if luminance(primary) > 0.85:
        primary = fallback.primary
    return BrandTheme(primary=primary, secondary=secondary,
                      rule=lighten(secondary, 0.70) if is_dark(secondary) else fallback.rule)


def default_theme() -> BrandTheme:
    """A clean professional blue theme used when a brand has no usable colours."""
    return BrandTheme(
        primary=(31, 78, 151),
        secondary=(30, 41, 59),
    )
