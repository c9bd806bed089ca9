"""Pydantic models for the report input graph and the export result.

The input models mirror the records the inspection app hands over
(project → settings → categories → items → photos).  They are validated
once at the boundary so the layout engine never has to guess at missing
or loosely-typed values: every label has a non-empty fallback and
optional fields resolve to explicit ``None``.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ItemStatus(str, Enum):
    """Lifecycle status of an inspection item."""
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_REVIEW = "PENDING_REVIEW"
    CLOSED = "CLOSED"
    ON_HOLD = "ON_HOLD"


class Priority(str, Enum):
    """Item priority, lowest tier first."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class PhotoSize(str, Enum):
    """Photo slot size chosen in the project settings."""
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


class LayoutVariant(str, Enum):
    """Supported report layouts."""
    COMPACT = "compact"
    WIDE = "wide"


class PhotoState(str, Enum):
    """What ended up in a photo slot."""
    EMBEDDED = "embedded"
    NO_PHOTO = "no_photo"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


def _normalise_enum_text(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper().replace(" ", "_").replace("-", "_")
    return value


_DATE_ADAPTER = TypeAdapter(date)
_DATETIME_ADAPTER = TypeAdapter(datetime)


# ---------------------------------------------------------------------------
# Input graph
# ---------------------------------------------------------------------------

class _InputModel(BaseModel):
    """Accepts both ``snake_case`` and the app's ``camelCase`` keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Photo(_InputModel):
    """A remote photo reference."""
    url: str = ""
    caption: Optional[str] = None


class Assignee(_InputModel):
    """Team member an item is assigned to."""
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Item(_InputModel):
    """A single inspection finding ("snag")."""
    number: int
    location: str = ""
    description: str = ""
    solution: Optional[str] = None
    status: ItemStatus = ItemStatus.OPEN
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None
    assignee: Optional[Assignee] = Field(default=None, alias="assignedTo")
    photos: list[Photo] = Field(default_factory=list)

    @field_validator("location", "description", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("solution", mode="before")
    @classmethod
    def _blank_solution(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("status", "priority", mode="before")
    @classmethod
    def _loose_enum(cls, v: Any) -> Any:
        return _normalise_enum_text(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def _calendar_day(cls, v: Any) -> Any:
        # The app sends full ISO timestamps; only the calendar day is kept.
        if isinstance(v, datetime):
            return v.date()
        if not isinstance(v, str):
            return v
        text = v.strip()
        if not text:
            return None
        for adapter in (_DATE_ADAPTER, _DATETIME_ADAPTER):
            try:
                parsed = adapter.validate_python(text)
            except ValidationError:
                continue
            return parsed.date() if isinstance(parsed, datetime) else parsed
        return None

    @field_validator("photos", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


DEFAULT_CATEGORY_NAME = "Uncategorised"


class Category(_InputModel):
    """A named group of items, e.g. "Kitchen"."""
    id: str = ""
    name: str = DEFAULT_CATEGORY_NAME
    order_index: int = 0
    items: list[Item] = Field(default_factory=list, alias="snags")

    @field_validator("name", mode="before")
    @classmethod
    def _fallback_name(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CATEGORY_NAME
        return v

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        return "" if v is None else str(v)

    @field_validator("items", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ProjectLabels(_InputModel):
    """Column header strings configured per project.

    Any missing, ``null`` or blank value falls back to the field default,
    so the renderer can use every label without further checks.
    """
    item_label: str = "Item"
    number_label: str = "No."
    location_label: str = "Location"
    photo_label: str = "Photo"
    description_label: str = "Description"
    solution_label: str = "Solution"
    status_label: str = "Status"

    @field_validator("*", mode="before")
    @classmethod
    def _fallback_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return cls.model_fields[info.field_name].default
        return v.strip() if isinstance(v, str) else v

    def header_for(self, column_key: str) -> str:
        """Return the header text for a geometry column key."""
        mapping = {
            "number": self.number_label,
            "location": self.location_label,
            "photo": self.photo_label,
            "description": self.description_label,
            "solution": self.solution_label,
            "status": self.status_label,
            "details": self.item_label,
        }
        return mapping.get(column_key, column_key.replace("_", " ").title())


class ProjectSettings(_InputModel):
    """Per-project report settings.

    The app stores labels flat on the settings record (``itemLabel``,
    ``numberLabel`` ...); both the flat and the nested ``labels`` shapes
    are accepted.
    """
    labels: ProjectLabels = Field(default_factory=ProjectLabels)
    photo_size: PhotoSize = PhotoSize.MEDIUM

    @model_validator(mode="before")
    @classmethod
    def _collect_flat_labels(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "labels" in data:
            return data
        labels: dict[str, Any] = {}
        for name in ProjectLabels.model_fields:
            for key in (name, to_camel(name)):
                if key in data:
                    labels[name] = data[key]
        return {**data, "labels": labels}

    @field_validator("labels", mode="before")
    @classmethod
    def _none_labels(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("photo_size", mode="before")
    @classmethod
    def _loose_photo_size(cls, v: Any) -> Any:
        if v is None:
            return PhotoSize.MEDIUM
        return _normalise_enum_text(v)


class Project(_InputModel):
    """The fully-resolved project graph handed to the report engine."""
    id: str = ""
    name: str = "Untitled project"
    code: Optional[str] = None
    settings: ProjectSettings = Field(default_factory=ProjectSettings)
    categories: list[Category] = Field(default_factory=list)

    @field_validator("settings", mode="before")
    @classmethod
    def _none_settings(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("name", mode="before")
    @classmethod
    def _fallback_name(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "Untitled project"
        return v

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        return "" if v is None else str(v)

    @property
    def identifier(self) -> str:
        """Short identifier printed in the page footer."""
        return (self.code or "").strip() or self.name


class ReportRequest(_InputModel):
    """Which part of a project to export."""
    project_id: str = ""
    category_id: Optional[str] = None


class ReportOptions(BaseModel):
    """Caller-selected rendering options."""
    layout: LayoutVariant = LayoutVariant.COMPACT
    #: Overrides ``project.settings.photo_size`` when set.
    photo_size: Optional[PhotoSize] = None
    fetch_timeout: float = Field(default=10.0, gt=0)
    #: Scale photos into their slot without distortion.  Off by default so
    #: output matches the fixed-slot behaviour existing reports rely on.
    preserve_photo_aspect: bool = False
    export_date: Optional[date] = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class RowSummary(BaseModel):
    """Visible content of one rendered item row."""
    number: int
    location_lines: list[str] = Field(default_factory=list)
    description_lines: list[str] = Field(default_factory=list)
    solution_lines: list[str] = Field(default_factory=list)
    secondary_lines: list[str] = Field(default_factory=list)
    status_label: str = ""
    photo_states: list[PhotoState] = Field(default_factory=list)
    height: float = 0.0


class PageSummary(BaseModel):
    """What was laid out on one page."""
    number: int
    banners: list[str] = Field(default_factory=list)
    header_rows: int = 0
    rows: list[RowSummary] = Field(default_factory=list)
    footer: str = ""

    @property
    def item_numbers(self) -> list[int]:
        return [row.number for row in self.rows]


class ReportResult(BaseModel):
    """A finished export: PDF bytes, suggested filename and page layout."""
    pdf: bytes = Field(repr=False)
    filename: str
    pages: list[PageSummary] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class GenerationResult(BaseModel):
    """Result of a pipeline run that writes the report to disk."""
    output_path: Optional[Path] = None
    success: bool = True
    error: Optional[str] = None
    page_count: int = 0
