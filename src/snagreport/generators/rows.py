"""Row renderers: draw one item at a given vertical position.

A renderer never moves the page cursor.  :meth:`RowRenderer.measure`
predicts the height a row will take and :meth:`RowRenderer.render` draws
it and reports the same height, so the page controller can decide on a
page break before anything is drawn.

Two strategies exist, selected by ``Geometry.row_layout``:

* :class:`TableRowRenderer` draws the six-column compact table row.
* :class:`CardRowRenderer` draws a large photo with thumbnails next to a
  stacked details column.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..core.fetcher import ImageFetcher, PhotoFetchResult
from ..core.models import Item, Photo, PhotoState, Priority, ProjectLabels, RowSummary
from .base import Painter, fit_rect_preserve_aspect
from .geometry import Geometry
from .text import fit_text, format_due_date, status_short_label, text_width
from .themes import ReportTheme, tint

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = {
    PhotoState.NO_PHOTO: "No Photo",
    PhotoState.UNAVAILABLE: "Image Unavailable",
    PhotoState.ERROR: "Error",
}

BADGE_PADDING = 2.0
BADGE_HEIGHT = 5.5
PRIORITY_DOT_RADIUS = 1.0


@dataclass(frozen=True)
class _Cells:
    """Wrapped and truncated text for one row."""

    location: list[str]
    description: list[str]
    solution: list[str]
    secondary: list[str]
    caption: list[str] = field(default_factory=list)


class RowRenderer(ABC):
    """Base class for the per-layout row strategies."""

    def __init__(
        self,
        geometry: Geometry,
        theme: ReportTheme,
        labels: ProjectLabels,
        fetcher: ImageFetcher,
        *,
        preserve_photo_aspect: bool = False,
    ) -> None:
        self.geometry = geometry
        self.theme = theme
        self.labels = labels
        self.fetcher = fetcher
        self.preserve_photo_aspect = preserve_photo_aspect

    @abstractmethod
    def measure(self, item: Item) -> float:
        """Height in mm the row for *item* will occupy."""
        ...

    @abstractmethod
    def render(self, painter: Painter, item: Item, top: float, parity: int) -> tuple[float, RowSummary]:
        """Draw *item* with its top edge at *top*; return ``(height, summary)``."""
        ...

    # -- Text helpers --------------------------------------------------------

    def _fit(self, text: str, key: str, width: float, *, font: Optional[str] = None, size: Optional[float] = None) -> list[str]:
        fonts = self.theme.fonts
        return fit_text(
            text,
            font or fonts.regular,
            size or fonts.body_size,
            width,
            self.geometry.max_lines[key],
        )

    def _secondary_lines(self, item: Item, width: float) -> list[str]:
        """Assignee and due date, one short line each, when present."""
        fonts = self.theme.fonts
        raw: list[str] = []
        if item.assignee is not None and item.assignee.full_name:
            raw.append(item.assignee.full_name)
        if item.due_date is not None:
            raw.append(format_due_date(item.due_date))
        lines: list[str] = []
        for text in raw:
            lines.extend(fit_text(text, fonts.regular, fonts.secondary_size, width, 1))
        return lines

    # -- Shared drawing ------------------------------------------------------

    def _draw_row_frame(self, painter: Painter, top: float, height: float, parity: int) -> None:
        g, colors = self.geometry, self.theme.colors
        if parity % 2 == 1:
            painter.rect(g.margin, top, g.content_width, height, fill=colors.alternate_bg)
        painter.line(
            g.margin, top + height, g.margin + g.content_width, top + height,
            color=colors.row_rule, line_width=0.2,
        )

    def _draw_number(self, painter: Painter, item: Item, top: float) -> None:
        g, fonts, colors = self.geometry, self.theme.fonts, self.theme.colors
        x = g.column_x("number") + g.cell_padding
        baseline = top + g.text_offset
        painter.text(str(item.number), x, baseline, font=fonts.bold, size=fonts.number_size, color=colors.primary)
        if item.priority is not Priority.LOW:
            painter.circle(
                x + PRIORITY_DOT_RADIUS, baseline + 3, PRIORITY_DOT_RADIUS,
                fill=colors.priority_color(item.priority),
            )

    def _draw_status_badge(self, painter: Painter, item: Item, x: float, top: float, max_width: float) -> str:
        fonts, colors = self.theme.fonts, self.theme.colors
        label = status_short_label(item.status)
        color = colors.status_color(item.status)
        width = min(text_width(label, fonts.bold, fonts.badge_size) + 2 * BADGE_PADDING, max_width)
        painter.rect(x, top, width, BADGE_HEIGHT, fill=tint(color))
        painter.text(
            label, x + BADGE_PADDING, top + BADGE_HEIGHT - 1.6,
            font=fonts.bold, size=fonts.badge_size, color=color,
        )
        return label

    def _fetch(self, photo: Photo) -> PhotoFetchResult:
        try:
            return self.fetcher.fetch(photo.url)
        except Exception as exc:
            logger.warning("Photo fetcher raised for %s: %s", photo.url, exc)
            return PhotoFetchResult.error(str(exc) or type(exc).__name__)

    def _draw_photo_slot(
        self,
        painter: Painter,
        photo: Optional[Photo],
        x: float,
        top: float,
        width: float,
        height: float,
    ) -> PhotoState:
        """Fill one photo slot and return what ended up in it.

        The slot border is drawn in every case; a failed photo leaves a
        placeholder and never stops the row.
        """
        colors, fonts = self.theme.colors, self.theme.fonts
        state = PhotoState.NO_PHOTO
        if photo is not None:
            state = self._embed_photo(painter, photo, x, top, width, height)
        if state is not PhotoState.EMBEDDED:
            painter.rect(x, top, width, height, fill=colors.light_bg)
            painter.text(
                PLACEHOLDER_TEXT[state], x + width / 2, top + height / 2 + 1,
                font=fonts.regular, size=fonts.placeholder_size,
                color=colors.secondary, align="center",
            )
        painter.rect(x, top, width, height, stroke=colors.photo_border, line_width=0.5)
        return state

    def _embed_photo(self, painter: Painter, photo: Photo, x: float, top: float, width: float, height: float) -> PhotoState:
        result = self._fetch(photo)
        if not result.ok:
            if result.state is PhotoState.EMBEDDED:
                return PhotoState.UNAVAILABLE
            return result.state
        box = (x, top, width, height)
        try:
            if self.preserve_photo_aspect:
                src_w, src_h = result.image.getSize()
                box = fit_rect_preserve_aspect(src_w, src_h, x, top, width, height)
            painter.image(result.image, *box)
        except Exception as exc:
            logger.warning("Could not embed photo %s: %s", photo.url, exc)
            return PhotoState.ERROR
        return PhotoState.EMBEDDED


# ---------------------------------------------------------------------------
# Compact table row
# ---------------------------------------------------------------------------

class TableRowRenderer(RowRenderer):
    """Six fixed columns: number, location, photo, description, solution, status."""

    def _text_width(self, key: str) -> float:
        return self.geometry.column(key).width - 2 * self.geometry.cell_padding

    def _cells(self, item: Item) -> _Cells:
        return _Cells(
            location=self._fit(item.location, "location", self._text_width("location")),
            description=self._fit(item.description, "description", self._text_width("description")),
            solution=self._fit(item.solution or "-", "solution", self._text_width("solution")),
            secondary=self._secondary_lines(item, self._text_width("description")),
        )

    def _height(self, cells: _Cells) -> float:
        g = self.geometry
        description_block = len(cells.description) * g.line_height
        description_block += len(cells.secondary) * g.secondary_line_height
        text_block = max(
            len(cells.location) * g.line_height,
            description_block,
            len(cells.solution) * g.line_height,
        )
        return max(g.row_min_height, g.text_offset + text_block + g.cell_padding)

    def measure(self, item: Item) -> float:
        return self._height(self._cells(item))

    def render(self, painter: Painter, item: Item, top: float, parity: int) -> tuple[float, RowSummary]:
        g, fonts, colors = self.geometry, self.theme.fonts, self.theme.colors
        cells = self._cells(item)
        height = self._height(cells)
        pad = g.cell_padding
        baseline = top + g.text_offset

        self._draw_row_frame(painter, top, height, parity)
        self._draw_number(painter, item, top)

        painter.lines(
            cells.location, g.column_x("location") + pad, baseline,
            font=fonts.regular, size=fonts.body_size, color=colors.secondary, leading=g.line_height,
        )

        photo = item.photos[0] if item.photos else None
        state = self._draw_photo_slot(
            painter,
            photo,
            g.column_x("photo") + g.photo_inset,
            top + g.photo_inset,
            g.column("photo").width - 2 * g.photo_inset,
            g.photo_height,
        )

        x = g.column_x("description") + pad
        next_baseline = painter.lines(
            cells.description, x, baseline,
            font=fonts.regular, size=fonts.body_size, color=colors.primary, leading=g.line_height,
        )
        painter.lines(
            cells.secondary, x, next_baseline,
            font=fonts.italic, size=fonts.secondary_size, color=colors.secondary,
            leading=g.secondary_line_height,
        )

        painter.lines(
            cells.solution, g.column_x("solution") + pad, baseline,
            font=fonts.regular, size=fonts.body_size, color=colors.secondary, leading=g.line_height,
        )

        label = self._draw_status_badge(
            painter, item, g.column_x("status") + pad, baseline - 4, self._text_width("status"),
        )

        return height, RowSummary(
            number=item.number,
            location_lines=cells.location,
            description_lines=cells.description,
            solution_lines=cells.solution,
            secondary_lines=cells.secondary,
            status_label=label,
            photo_states=[state],
            height=height,
        )


# ---------------------------------------------------------------------------
# Wide card row
# ---------------------------------------------------------------------------

class CardRowRenderer(RowRenderer):
    """Large photo with caption and thumbnails beside a stacked details column."""

    def _details_width(self) -> float:
        return self.geometry.column("details").width - 2 * self.geometry.cell_padding

    def _photo_width(self) -> float:
        return self.geometry.column("photo").width - 2 * self.geometry.photo_inset

    def _cells(self, item: Item) -> _Cells:
        fonts = self.theme.fonts
        width = self._details_width()
        caption: list[str] = []
        if item.photos and item.photos[0].caption:
            caption = self._fit(
                item.photos[0].caption, "caption", self._photo_width(),
                font=fonts.italic, size=fonts.secondary_size,
            )
        return _Cells(
            location=self._fit(item.location, "location", width, font=fonts.bold),
            description=self._fit(item.description or "-", "description", width),
            solution=self._fit(item.solution or "-", "solution", width),
            secondary=self._secondary_lines(item, width),
            caption=caption,
        )

    def _thumbnails(self, item: Item) -> list[Photo]:
        return item.photos[1 : 1 + self.geometry.max_thumbnails]

    def _details_offsets(self, cells: _Cells) -> dict[str, float]:
        """Vertical offsets from the row top for each block of the details column."""
        g = self.geometry
        lh, slh = g.line_height, g.secondary_line_height
        offsets = {"location": g.text_offset}
        offsets["badge"] = g.text_offset + len(cells.location) * lh - lh + 2
        offsets["description_label"] = offsets["badge"] + BADGE_HEIGHT + 2 + slh
        offsets["description"] = offsets["description_label"] + lh
        offsets["solution_label"] = offsets["description"] + len(cells.description) * lh + 2
        offsets["solution"] = offsets["solution_label"] + lh
        offsets["secondary"] = offsets["solution"] + len(cells.solution) * lh + 1
        last = offsets["secondary"] + len(cells.secondary) * slh
        offsets["bottom"] = last + g.cell_padding
        return offsets

    def _photo_block_height(self, item: Item, cells: _Cells) -> float:
        g = self.geometry
        height = g.row_min_height
        if cells.caption:
            height += g.caption_height
        if self._thumbnails(item):
            height += g.thumbnail_strip_height
        return height

    def _height(self, item: Item, cells: _Cells) -> float:
        return max(self._photo_block_height(item, cells), self._details_offsets(cells)["bottom"])

    def measure(self, item: Item) -> float:
        return self._height(item, self._cells(item))

    def render(self, painter: Painter, item: Item, top: float, parity: int) -> tuple[float, RowSummary]:
        g, fonts, colors = self.geometry, self.theme.fonts, self.theme.colors
        cells = self._cells(item)
        height = self._height(item, cells)

        self._draw_row_frame(painter, top, height, parity)
        self._draw_number(painter, item, top)

        # Photo column
        x = g.column_x("photo") + g.photo_inset
        width = self._photo_width()
        slot_top = top + g.photo_inset
        states = [
            self._draw_photo_slot(
                painter, item.photos[0] if item.photos else None, x, slot_top, width, g.photo_height,
            )
        ]
        strip_top = slot_top + g.photo_height
        if cells.caption:
            painter.lines(
                cells.caption, x, strip_top + g.caption_height - 1,
                font=fonts.italic, size=fonts.secondary_size, color=colors.secondary,
                leading=g.secondary_line_height,
            )
            strip_top += g.caption_height
        thumbs = self._thumbnails(item)
        if thumbs:
            slots = g.max_thumbnails
            thumb_width = (width - g.thumbnail_gap * (slots - 1)) / slots
            for index, photo in enumerate(thumbs):
                states.append(
                    self._draw_photo_slot(
                        painter,
                        photo,
                        x + index * (thumb_width + g.thumbnail_gap),
                        strip_top + g.thumbnail_gap,
                        thumb_width,
                        g.thumbnail_height,
                    )
                )

        # Details column
        offsets = self._details_offsets(cells)
        x = g.column_x("details") + g.cell_padding
        painter.lines(
            cells.location, x, top + offsets["location"],
            font=fonts.bold, size=fonts.body_size, color=colors.primary, leading=g.line_height,
        )
        badge_top = top + offsets["badge"]
        label = self._draw_status_badge(painter, item, x, badge_top, self._details_width())
        badge_width = min(
            text_width(label, fonts.bold, fonts.badge_size) + 2 * BADGE_PADDING, self._details_width(),
        )
        painter.text(
            f"{item.priority.value.title()} priority",
            x + badge_width + 2, badge_top + BADGE_HEIGHT - 1.6,
            font=fonts.regular, size=fonts.secondary_size, color=colors.secondary,
        )

        for key, heading, lines, color in (
            ("description", self.labels.description_label, cells.description, colors.primary),
            ("solution", self.labels.solution_label, cells.solution, colors.secondary),
        ):
            painter.text(
                heading.upper(), x, top + offsets[f"{key}_label"],
                font=fonts.bold, size=fonts.secondary_size, color=colors.secondary,
            )
            painter.lines(
                lines, x, top + offsets[key],
                font=fonts.regular, size=fonts.body_size, color=color, leading=g.line_height,
            )
        painter.lines(
            cells.secondary, x, top + offsets["secondary"],
            font=fonts.italic, size=fonts.secondary_size, color=colors.secondary,
            leading=g.secondary_line_height,
        )

        return height, RowSummary(
            number=item.number,
            location_lines=cells.location,
            description_lines=cells.description,
            solution_lines=cells.solution,
            secondary_lines=cells.secondary,
            status_label=label,
            photo_states=states,
            height=height,
        )


_RENDERERS: dict[str, type[RowRenderer]] = {
    "table": TableRowRenderer,
    "card": CardRowRenderer,
}


def make_row_renderer(
    geometry: Geometry,
    theme: ReportTheme,
    labels: ProjectLabels,
    fetcher: ImageFetcher,
    *,
    preserve_photo_aspect: bool = False,
) -> RowRenderer:
    """Build the row strategy matching ``geometry.row_layout``."""
    cls = _RENDERERS[geometry.row_layout]
    return cls(geometry, theme, labels, fetcher, preserve_photo_aspect=preserve_photo_aspect)
