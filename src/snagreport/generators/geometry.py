"""Page, column and row geometry for each report layout.

All dimensions are millimetres measured from the top-left corner of the
page, the way the layout is designed on paper.  :meth:`Geometry.pdf_y`
converts a distance from the top into a ReportLab y coordinate.

Each layout partitions the printable width into ordered columns whose
widths must add up to the content width exactly; :meth:`Geometry.validate`
enforces this when a geometry is registered.

Usage::

    from snagreport.generators.geometry import get_geometry

    geometry = get_geometry("compact").with_photo_size(PhotoSize.LARGE)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from reportlab.lib.units import mm

from ..core.models import PhotoSize


class GeometryError(ValueError):
    """A geometry whose dimensions are inconsistent."""


#: Photo slot height multiplier for each project photo size.
PHOTO_SIZE_SCALE: Mapping[PhotoSize, float] = MappingProxyType({
    PhotoSize.SMALL: 0.8,
    PhotoSize.MEDIUM: 1.0,
    PhotoSize.LARGE: 1.25,
})


@dataclass(frozen=True)
class Column:
    """One column of the item table."""

    key: str
    width: float


@dataclass(frozen=True)
class Geometry:
    """Immutable layout constants for one report variant."""

    name: str
    description: str
    columns: tuple[Column, ...]
    photo_height: float
    row_layout: str  # "table" or "card"
    category_per_page: bool
    max_lines: Mapping[str, int]

    page_width: float = 210.0
    page_height: float = 297.0
    margin: float = 15.0

    band_height: float = 20.0
    banner_height: float = 13.0
    banner_gap: float = 2.0
    header_height: float = 7.0
    footer_reserve: float = 5.0

    row_padding: float = 8.0
    photo_inset: float = 2.5
    cell_padding: float = 2.0
    line_height: float = 4.0
    secondary_line_height: float = 3.0
    text_offset: float = 6.0

    max_thumbnails: int = 0
    thumbnail_height: float = 0.0
    thumbnail_gap: float = 2.5
    caption_height: float = 4.0

    # Heights before any photo-size scaling.
    base_photo_height: float = field(default=0.0, compare=False)
    base_thumbnail_height: float = field(default=0.0, compare=False)

    # -- Derived dimensions ------------------------------------------------

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def column_total(self) -> float:
        return math.fsum(c.width for c in self.columns)

    @property
    def row_min_height(self) -> float:
        return self.photo_height + self.row_padding

    @property
    def thumbnail_strip_height(self) -> float:
        if not self.max_thumbnails:
            return 0.0
        return self.thumbnail_gap + self.thumbnail_height

    @property
    def content_top(self) -> float:
        """First usable y below the project band."""
        return self.band_height

    @property
    def content_bottom(self) -> float:
        """Lowest y a row may reach before the footer area."""
        return self.page_height - self.margin - self.footer_reserve

    @property
    def section_heading_height(self) -> float:
        """Category banner plus the column header row."""
        return self.banner_height + self.banner_gap + self.header_height

    @property
    def first_row_top(self) -> float:
        return self.content_top + self.section_heading_height

    @property
    def page_size(self) -> tuple[float, float]:
        """Page size in PDF points."""
        return self.page_width * mm, self.page_height * mm

    def column(self, key: str) -> Column:
        for col in self.columns:
            if col.key == key:
                return col
        raise KeyError(f"Geometry {self.name!r} has no column {key!r}")

    def column_x(self, key: str) -> float:
        """Left edge of column *key*, from the page edge."""
        x = self.margin
        for col in self.columns:
            if col.key == key:
                return x
            x += col.width
        raise KeyError(f"Geometry {self.name!r} has no column {key!r}")

    def pdf_y(self, top: float) -> float:
        """Convert millimetres-from-top into a ReportLab y (points)."""
        return (self.page_height - top) * mm

    # -- Variants ----------------------------------------------------------

    def with_photo_size(self, size: PhotoSize | None) -> Geometry:
        """Return a copy whose photo slot matches a project photo size.

        Only heights change, so the column partition is untouched.
        """
        if size is None:
            return self
        base_photo = self.base_photo_height or self.photo_height
        base_thumb = self.base_thumbnail_height or self.thumbnail_height
        scale = PHOTO_SIZE_SCALE[size]
        return replace(
            self,
            photo_height=round(base_photo * scale, 2),
            thumbnail_height=round(base_thumb * scale, 2),
            base_photo_height=base_photo,
            base_thumbnail_height=base_thumb,
        ).validate()

    # -- Validation --------------------------------------------------------

    def validate(self) -> Geometry:
        """Check the geometry is self-consistent; return it unchanged.

        Raises :class:`GeometryError` when the column widths do not add up
        to the content width or a photo row cannot fit on an empty page.
        """
        if self.column_total != self.content_width:
            raise GeometryError(
                f"Geometry {self.name!r}: column widths sum to "
                f"{self.column_total}mm, content width is {self.content_width}mm"
            )
        if self.row_layout not in ("table", "card"):
            raise GeometryError(f"Geometry {self.name!r}: unknown row layout {self.row_layout!r}")
        tallest_photo_row = self.row_min_height + self.caption_height + self.thumbnail_strip_height
        if self.first_row_top + tallest_photo_row > self.content_bottom:
            raise GeometryError(
                f"Geometry {self.name!r}: a {tallest_photo_row}mm row does not fit "
                f"between {self.first_row_top}mm and {self.content_bottom}mm"
            )
        return self


# ---------------------------------------------------------------------------
# Built-in geometries
# ---------------------------------------------------------------------------

COMPACT_GEOMETRY = Geometry(
    name="compact",
    description="Six-column table, one row per item, one category per page.",
    columns=(
        Column("number", 10),
        Column("location", 20),
        Column("photo", 70),
        Column("description", 35),
        Column("solution", 25),
        Column("status", 20),
    ),
    photo_height=45,
    row_layout="table",
    category_per_page=True,
    max_lines=MappingProxyType({"location": 3, "description": 8, "solution": 8}),
)

WIDE_GEOMETRY = Geometry(
    name="wide",
    description="Large photo per item with a details column and thumbnails.",
    columns=(
        Column("number", 12),
        Column("photo", 100),
        Column("details", 68),
    ),
    photo_height=75,
    row_layout="card",
    category_per_page=False,
    max_lines=MappingProxyType({
        "location": 2,
        "description": 10,
        "solution": 6,
        "caption": 1,
    }),
    max_thumbnails=3,
    thumbnail_height=22,
)

_GEOMETRIES: dict[str, Geometry] = {}


def register_geometry(geometry: Geometry) -> None:
    """Validate and register a geometry under its name."""
    _GEOMETRIES[geometry.name.lower()] = geometry.validate()


def get_geometry(name: str) -> Geometry:
    """Look up a geometry by name (case-insensitive).

    Raises ``KeyError`` if the geometry does not exist.
    """
    key = name.lower()
    if key not in _GEOMETRIES:
        available = ", ".join(sorted(_GEOMETRIES))
        raise KeyError(f"Unknown layout {name!r}. Available: {available}")
    return _GEOMETRIES[key]


def list_geometries() -> list[Geometry]:
    """Return all registered geometries in registration order."""
    return list(_GEOMETRIES.values())


for _geometry in (COMPACT_GEOMETRY, WIDE_GEOMETRY):
    register_geometry(_geometry)
