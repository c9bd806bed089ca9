"""Page and section control for the report body.

:class:`PageController` walks the sequence of categories and items and
decides where each one goes.  It owns the page furniture (project band,
category banner, column header) and asks the row renderer only for row
heights and row drawing.

Section states::

    AWAITING_FIRST_CATEGORY -> IN_CATEGORY_SECTION -> DONE

Every transition is total; none of them can fail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from reportlab.pdfgen.canvas import Canvas

from ..core.models import Category, Item, PageSummary, ProjectLabels
from .base import Painter
from .geometry import Geometry
from .rows import RowRenderer
from .text import fit_text
from .themes import ReportTheme

logger = logging.getLogger(__name__)

EMPTY_REPORT_TEXT = "No items to report"


class SectionState(str, Enum):
    AWAITING_FIRST_CATEGORY = "awaiting_first_category"
    IN_CATEGORY_SECTION = "in_category_section"
    DONE = "done"


@dataclass
class RenderContext:
    """Mutable layout state for one assembly pass.

    Created by the assembler, threaded through the controller and
    discarded once the document is finished.
    """

    cursor: float
    page_index: int = 1
    row_parity: int = 0
    category: Optional[Category] = None


class PageController:
    """Places category sections and item rows onto pages."""

    def __init__(
        self,
        canv: Canvas,
        geometry: Geometry,
        theme: ReportTheme,
        labels: ProjectLabels,
        renderer: RowRenderer,
        *,
        project_name: str,
        export_date: date,
    ) -> None:
        self.geometry = geometry
        self.theme = theme
        self.labels = labels
        self.renderer = renderer
        self.painter = Painter(canv, geometry)
        self.project_name = project_name
        self.export_date = export_date

        self.state = SectionState.AWAITING_FIRST_CATEGORY
        self.ctx = RenderContext(cursor=geometry.content_top)
        self.pages: list[PageSummary] = [PageSummary(number=1)]
        self._draw_project_band()

    @property
    def page(self) -> PageSummary:
        return self.pages[-1]

    # -- Transitions -------------------------------------------------------

    def begin_category(self, category: Category) -> None:
        """Open a section for a non-empty category."""
        g = self.geometry
        if self.state is SectionState.IN_CATEGORY_SECTION:
            first_row = self.renderer.measure(category.items[0]) if category.items else 0.0
            needed = g.section_heading_height + first_row
            if g.category_per_page or self.ctx.cursor + needed > g.content_bottom:
                self._new_page()
        self.state = SectionState.IN_CATEGORY_SECTION
        self.ctx.category = category
        self.ctx.row_parity = 0
        self._draw_section_heading()

    def place_row(self, item: Item) -> None:
        """Draw *item* at the cursor, breaking the page first if it would overflow."""
        g = self.geometry
        height = self.renderer.measure(item)
        if self.ctx.cursor + height > g.content_bottom and self.ctx.cursor > g.first_row_top:
            logger.debug(
                "Page break before item %s on page %d (cursor %.1fmm + %.1fmm > %.1fmm)",
                item.number, self.ctx.page_index, self.ctx.cursor, height, g.content_bottom,
            )
            self._new_page()
            self._draw_section_heading()

        used, summary = self.renderer.render(self.painter, item, self.ctx.cursor, self.ctx.row_parity)
        self.ctx.cursor += used
        self.ctx.row_parity ^= 1
        self.page.rows.append(summary)

    def finish(self) -> list[PageSummary]:
        """Close the last page and return the page summaries."""
        if self.state is SectionState.AWAITING_FIRST_CATEGORY:
            self._draw_empty_note()
        self.painter.canv.showPage()
        self.state = SectionState.DONE
        return self.pages

    # -- Page furniture ----------------------------------------------------

    def _new_page(self) -> None:
        self.painter.canv.showPage()
        self.ctx.page_index += 1
        self.ctx.row_parity = 0
        self.ctx.cursor = self.geometry.content_top
        self.pages.append(PageSummary(number=self.ctx.page_index))
        self._draw_project_band()

    def _draw_project_band(self) -> None:
        g, fonts, colors = self.geometry, self.theme.fonts, self.theme.colors
        p = self.painter
        p.rect(0, 0, g.page_width, g.band_height, fill=colors.primary)
        baseline = g.band_height * 0.6
        p.text(
            f"Export Date: {self.export_date:%B} {self.export_date.day}, {self.export_date.year}",
            g.page_width - g.margin, baseline,
            font=fonts.regular, size=fonts.band_meta_size, color=colors.white, align="right",
        )
        title = fit_text(self.project_name, fonts.bold, fonts.band_title_size, g.content_width * 0.65, 1)
        p.text(
            title[0] if title else "", g.margin, baseline,
            font=fonts.bold, size=fonts.band_title_size, color=colors.white,
        )

    def _draw_section_heading(self) -> None:
        """Category banner followed by the column header row."""
        g, fonts, colors = self.geometry, self.theme.fonts, self.theme.colors
        p = self.painter
        category = self.ctx.category
        top = self.ctx.cursor

        name = category.name if category is not None else ""
        p.rect(0, top, g.page_width, g.banner_height, fill=colors.accent)
        p.text(
            name, g.margin, top + g.banner_height * 0.62,
            font=fonts.bold, size=fonts.banner_size, color=colors.white,
        )

        header_top = top + g.banner_height + g.banner_gap
        p.rect(g.margin, header_top, g.content_width, g.header_height, fill=colors.light_bg)
        p.line(
            g.margin, header_top + g.header_height, g.margin + g.content_width, header_top + g.header_height,
            color=colors.photo_border, line_width=0.5,
        )
        for column in g.columns:
            heading = fit_text(
                self.labels.header_for(column.key), fonts.bold, fonts.header_size,
                column.width - g.cell_padding, 1,
            )
            p.text(
                heading[0] if heading else "", g.column_x(column.key) + g.cell_padding,
                header_top + g.header_height - 2,
                font=fonts.bold, size=fonts.header_size, color=colors.primary,
            )

        self.ctx.cursor = top + g.section_heading_height
        self.page.banners.append(name)
        self.page.header_rows += 1

    def _draw_empty_note(self) -> None:
        g, fonts, colors = self.geometry, self.theme.fonts, self.theme.colors
        self.painter.text(
            EMPTY_REPORT_TEXT, g.page_width / 2, g.content_top + 20,
            font=fonts.italic, size=fonts.banner_size, color=colors.secondary, align="center",
        )
