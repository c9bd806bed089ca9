"""Colour and font tables for the report renderer.

Themes are immutable and passed into the engine explicitly; nothing in
the renderer reads module-level mutable state.

Usage::

    from snagreport.generators.themes import DEFAULT_THEME

    assembler = ReportAssembler(theme=DEFAULT_THEME)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from reportlab.lib import colors

from ..core.models import ItemStatus, Priority

RGB = tuple[int, int, int]


def _hex(value: str) -> RGB:
    txt = value.strip().lstrip("#")
    return (int(txt[0:2], 16), int(txt[2:4], 16), int(txt[4:6], 16))


def rgb(t: RGB) -> colors.Color:
    """Convert an RGB tuple to a ReportLab colour."""
    return colors.Color(t[0] / 255, t[1] / 255, t[2] / 255)


def tint(t: RGB, amount: int = 200) -> RGB:
    """Lighten a colour by pushing every channel towards white."""
    return (min(255, t[0] + amount), min(255, t[1] + amount), min(255, t[2] + amount))


# ---------------------------------------------------------------------------
# Theme dataclasses
# ---------------------------------------------------------------------------

_STATUS_COLORS: Mapping[ItemStatus, RGB] = MappingProxyType({
    ItemStatus.OPEN: _hex("#DC2626"),
    ItemStatus.IN_PROGRESS: _hex("#F97316"),
    ItemStatus.PENDING_REVIEW: _hex("#3B82F6"),
    ItemStatus.CLOSED: _hex("#10B981"),
    ItemStatus.ON_HOLD: _hex("#6B7280"),
})

_PRIORITY_COLORS: Mapping[Priority, RGB] = MappingProxyType({
    Priority.CRITICAL: _hex("#DC2626"),
    Priority.HIGH: _hex("#F97316"),
    Priority.MEDIUM: _hex("#FDE047"),
    Priority.LOW: _hex("#6B7280"),
})


@dataclass(frozen=True)
class ReportColors:
    """All colour slots used by the renderer. Values are RGB tuples."""

    primary: RGB = _hex("#1E293B")
    secondary: RGB = _hex("#64748B")
    accent: RGB = _hex("#3B82F6")
    light_bg: RGB = _hex("#F8FAFC")
    alternate_bg: RGB = _hex("#F1F5F9")
    border: RGB = _hex("#E2E8F0")
    photo_border: RGB = (200, 200, 200)
    row_rule: RGB = (240, 240, 240)
    white: RGB = (255, 255, 255)

    status: Mapping[ItemStatus, RGB] = field(default_factory=lambda: _STATUS_COLORS)
    priority: Mapping[Priority, RGB] = field(default_factory=lambda: _PRIORITY_COLORS)

    def status_color(self, status: ItemStatus) -> RGB:
        return self.status.get(status, self.status[ItemStatus.ON_HOLD])

    def priority_color(self, priority: Priority) -> RGB:
        return self.priority.get(priority, self.priority[Priority.LOW])


@dataclass(frozen=True)
class ReportFonts:
    """Standard PDF font names and point sizes."""

    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    italic: str = "Helvetica-Oblique"

    band_title_size: float = 16
    band_meta_size: float = 10
    banner_size: float = 12
    header_size: float = 9
    number_size: float = 10
    body_size: float = 9
    secondary_size: float = 7
    badge_size: float = 8
    placeholder_size: float = 8
    footer_size: float = 9
    footer_meta_size: float = 8


@dataclass(frozen=True)
class ReportTheme:
    """Complete theme definition."""

    name: str = "slate"
    colors: ReportColors = field(default_factory=ReportColors)
    fonts: ReportFonts = field(default_factory=ReportFonts)


DEFAULT_THEME = ReportTheme()
