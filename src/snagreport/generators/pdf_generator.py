"""Assemble a complete inspection report PDF.

The assembler validates nothing itself; it takes an already-validated
:class:`~snagreport.core.models.Project`, scopes and orders it, drives the
page controller over a ReportLab canvas, and then stamps every page with
a ``Page i of N`` footer once the total page count is known.

Usage::

    from snagreport.generators.pdf_generator import ReportAssembler

    result = ReportAssembler(ReportOptions(layout="wide")).assemble(project)
    Path(result.filename).write_bytes(result.pdf)
"""

from __future__ import annotations

import logging
from datetime import date
from io import BytesIO
from typing import Callable, Optional

from reportlab.pdfgen import canvas

from ..core.errors import ReportExportError
from ..core.fetcher import ImageFetcher, PhotoFetcher
from ..core.models import (
    Category,
    PageSummary,
    Project,
    ReportOptions,
    ReportRequest,
    ReportResult,
)
from .base import Painter
from .geometry import Geometry, get_geometry
from .pages import PageController
from .rows import make_row_renderer
from .text import safe_filename
from .themes import DEFAULT_THEME, ReportTheme

log = logging.getLogger(__name__)

FOOTER_RULE_OFFSET = 15.0
FOOTER_TEXT_OFFSET = 10.0


# ---------------------------------------------------------------------------
# Footer pass
# ---------------------------------------------------------------------------

class FooterCanvas(canvas.Canvas):
    """Canvas that defers page output until the page count is known.

    ``stamp(canvas, page_number, total)`` is called for every page during
    :meth:`save`, after all body content has been drawn.
    """

    def __init__(self, *args, stamp: Optional[Callable[[canvas.Canvas, int, int], None]] = None, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states: list[dict] = []
        self.stamp = stamp

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            if self.stamp is not None:
                self.stamp(self, self._pageNumber, total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)


class FooterStamp:
    """Draws the footer rule, page counter, project identifier and date."""

    def __init__(self, geometry: Geometry, theme: ReportTheme, identifier: str, export_date: date) -> None:
        self.geometry = geometry
        self.theme = theme
        self.identifier = identifier
        self.export_date = export_date
        self.stamped: list[str] = []

    def __call__(self, canv: canvas.Canvas, page_number: int, total: int) -> None:
        g, fonts, colors = self.geometry, self.theme.fonts, self.theme.colors
        p = Painter(canv, g)
        rule_y = g.page_height - FOOTER_RULE_OFFSET
        text_y = g.page_height - FOOTER_TEXT_OFFSET
        label = f"Page {page_number} of {total}"

        canv.saveState()
        p.line(g.margin, rule_y, g.page_width - g.margin, rule_y, color=colors.border, line_width=0.5)
        p.text(
            label, g.page_width / 2, text_y,
            font=fonts.regular, size=fonts.footer_size, color=colors.secondary, align="center",
        )
        p.text(
            self.identifier, g.margin, text_y,
            font=fonts.regular, size=fonts.footer_meta_size, color=colors.secondary,
        )
        p.text(
            self.export_date.isoformat(), g.page_width - g.margin, text_y,
            font=fonts.regular, size=fonts.footer_meta_size, color=colors.secondary, align="right",
        )
        canv.restoreState()
        self.stamped.append(label)


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------

class ReportAssembler:
    """Turns a project graph into PDF bytes plus a suggested filename.

    Each :meth:`assemble` call uses its own canvas and layout state, so
    one assembler can be reused for any number of exports.
    """

    def __init__(
        self,
        options: Optional[ReportOptions] = None,
        *,
        fetcher: Optional[ImageFetcher] = None,
        theme: Optional[ReportTheme] = None,
        geometry: Optional[Geometry] = None,
    ) -> None:
        self.options = options or ReportOptions()
        self.fetcher = fetcher or PhotoFetcher(timeout=self.options.fetch_timeout)
        self.theme = theme or DEFAULT_THEME
        self._geometry = geometry

    def resolve_geometry(self, project: Project) -> Geometry:
        """Layout geometry with the photo slot sized for *project*."""
        base = self._geometry or get_geometry(self.options.layout.value)
        return base.with_photo_size(self.options.photo_size or project.settings.photo_size)

    @staticmethod
    def sections(project: Project, request: Optional[ReportRequest] = None) -> list[Category]:
        """Categories to render, in order, with their items sorted by number.

        Categories keep the caller's order (``order_index``, ties in input
        order) and empty ones are dropped.
        """
        categories = sorted(project.categories, key=lambda c: c.order_index)
        if request is not None and request.category_id is not None:
            categories = [c for c in categories if c.id == request.category_id]
        return [
            c.model_copy(update={"items": sorted(c.items, key=lambda i: i.number)})
            for c in categories
            if c.items
        ]

    def assemble(self, project: Project, request: Optional[ReportRequest] = None) -> ReportResult:
        """Render *project* (or the category named by *request*) to PDF.

        Raises :class:`ReportExportError` if the document cannot be
        produced.  Photo failures never raise; they leave placeholders.
        """
        export_date = self.options.export_date or date.today()
        geometry = self.resolve_geometry(project)
        sections = self.sections(project, request)
        log.info(
            "Exporting %r: %d categories, %d items, layout %s",
            project.name,
            len(sections),
            sum(len(c.items) for c in sections),
            geometry.name,
        )

        try:
            pdf, pages = self._render(project, sections, geometry, export_date)
        except Exception as exc:
            log.error("Export of %r failed: %s", project.name, exc)
            raise ReportExportError(f"Could not export {project.name!r}: {exc}") from exc

        log.info("Exported %r: %d pages, %d bytes", project.name, len(pages), len(pdf))
        return ReportResult(
            pdf=pdf,
            filename=safe_filename(project.name, export_date),
            pages=pages,
        )

    def _render(
        self,
        project: Project,
        sections: list[Category],
        geometry: Geometry,
        export_date: date,
    ) -> tuple[bytes, list[PageSummary]]:
        buffer = BytesIO()
        footer = FooterStamp(geometry, self.theme, project.identifier, export_date)
        canv = FooterCanvas(buffer, pagesize=geometry.page_size, stamp=footer)
        canv.setTitle(project.name)
        canv.setSubject("Inspection report")

        labels = project.settings.labels
        renderer = make_row_renderer(
            geometry,
            self.theme,
            labels,
            self.fetcher,
            preserve_photo_aspect=self.options.preserve_photo_aspect,
        )
        controller = PageController(
            canv,
            geometry,
            self.theme,
            labels,
            renderer,
            project_name=project.name,
            export_date=export_date,
        )
        for category in sections:
            controller.begin_category(category)
            for item in category.items:
                controller.place_row(item)
        pages = controller.finish()

        canv.save()
        for page, text in zip(pages, footer.stamped):
            page.footer = text
        return buffer.getvalue(), pages
