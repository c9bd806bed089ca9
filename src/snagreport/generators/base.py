"""Drawing primitives shared by the row renderers and the page controller.

:class:`Painter` wraps a ReportLab canvas so callers can work in the
geometry's coordinate system (millimetres from the top-left corner)
instead of PDF points from the bottom-left.
"""

from __future__ import annotations

from typing import Optional, Sequence

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from .geometry import Geometry
from .themes import RGB, rgb


def fit_rect_preserve_aspect(
    src_w: float,
    src_h: float,
    box_x: float,
    box_y: float,
    box_w: float,
    box_h: float,
) -> tuple[float, float, float, float]:
    """Return (x, y, w, h) fitted inside the box while preserving src aspect."""
    if src_w <= 0 or src_h <= 0:
        return box_x, box_y, box_w, box_h
    src_ratio = src_w / src_h
    box_ratio = box_w / box_h if box_h else src_ratio
    if box_ratio > src_ratio:
        h = box_h
        w = h * src_ratio
        return box_x + (box_w - w) / 2, box_y, w, h
    w = box_w
    h = w / src_ratio
    return box_x, box_y + (box_h - h) / 2, w, h


class Painter:
    """Top-down, millimetre based drawing on a ReportLab canvas."""

    def __init__(self, canv: Canvas, geometry: Geometry) -> None:
        self.canv = canv
        self.geometry = geometry

    def _y(self, top: float) -> float:
        return self.geometry.pdf_y(top)

    # -- Shapes ------------------------------------------------------------

    def rect(
        self,
        x: float,
        top: float,
        width: float,
        height: float,
        *,
        fill: Optional[RGB] = None,
        stroke: Optional[RGB] = None,
        line_width: float = 0.5,
    ) -> None:
        c = self.canv
        if fill is not None:
            c.setFillColor(rgb(fill))
        if stroke is not None:
            c.setStrokeColor(rgb(stroke))
            c.setLineWidth(line_width)
        c.rect(
            x * mm, self._y(top + height), width * mm, height * mm,
            stroke=int(stroke is not None), fill=int(fill is not None),
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: RGB, line_width: float = 0.5) -> None:
        self.canv.setStrokeColor(rgb(color))
        self.canv.setLineWidth(line_width)
        self.canv.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def circle(self, cx: float, cy: float, radius: float, *, fill: RGB) -> None:
        self.canv.setFillColor(rgb(fill))
        self.canv.circle(cx * mm, self._y(cy), radius * mm, stroke=0, fill=1)

    # -- Text --------------------------------------------------------------

    def text(
        self,
        text: str,
        x: float,
        baseline: float,
        *,
        font: str,
        size: float,
        color: RGB,
        align: str = "left",
    ) -> None:
        c = self.canv
        c.setFont(font, size)
        c.setFillColor(rgb(color))
        if align == "center":
            c.drawCentredString(x * mm, self._y(baseline), text)
        elif align == "right":
            c.drawRightString(x * mm, self._y(baseline), text)
        else:
            c.drawString(x * mm, self._y(baseline), text)

    def lines(
        self,
        lines: Sequence[str],
        x: float,
        first_baseline: float,
        *,
        font: str,
        size: float,
        color: RGB,
        leading: float,
    ) -> float:
        """Draw *lines* one under the other; return the next free baseline."""
        baseline = first_baseline
        for line in lines:
            self.text(line, x, baseline, font=font, size=size, color=color)
            baseline += leading
        return baseline

    # -- Images ------------------------------------------------------------

    def image(self, image: ImageReader, x: float, top: float, width: float, height: float) -> None:
        """Draw *image* stretched to the given box."""
        self.canv.drawImage(
            image, x * mm, self._y(top + height), width * mm, height * mm,
            mask="auto",
        )
