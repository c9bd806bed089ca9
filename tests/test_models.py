"""Tests for input validation and fallbacks on the project graph."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from snagreport.core.models import (
    DEFAULT_CATEGORY_NAME,
    Category,
    Item,
    ItemStatus,
    PhotoSize,
    Priority,
    Project,
    ProjectLabels,
    ProjectSettings,
    ReportOptions,
)


class TestItem:
    def test_camel_case_keys(self):
        item = Item.model_validate({
            "number": 4,
            "dueDate": "2026-03-04",
            "assignedTo": {"firstName": "Ana", "lastName": "Silva"},
        })
        assert item.due_date == date(2026, 3, 4)
        assert item.assignee.full_name == "Ana Silva"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2026-03-03T22:00:00.000Z", date(2026, 3, 3)),
            ("2026-03-04T00:00:00.000Z", date(2026, 3, 4)),
            ("2026-03-04T09:30:00+02:00", date(2026, 3, 4)),
        ],
    )
    def test_due_date_timestamp_keeps_calendar_day(self, raw, expected):
        item = Item.model_validate({"number": 1, "dueDate": raw})
        assert item.due_date == expected

    @pytest.mark.parametrize("raw", ["", "   ", "next week", None])
    def test_unusable_due_date_is_dropped(self, raw):
        assert Item.model_validate({"number": 1, "dueDate": raw}).due_date is None

    def test_defaults(self):
        item = Item.model_validate({"number": 1})
        assert item.status is ItemStatus.OPEN
        assert item.priority is Priority.MEDIUM
        assert item.photos == []
        assert item.solution is None

    def test_blank_solution_is_none(self):
        assert Item.model_validate({"number": 1, "solution": "   "}).solution is None

    def test_null_text_fields_become_blank(self):
        item = Item.model_validate({"number": 1, "location": None, "description": None, "photos": None})
        assert item.location == ""
        assert item.description == ""
        assert item.photos == []

    def test_loose_enum_text(self):
        item = Item.model_validate({"number": 1, "status": "in progress", "priority": "high"})
        assert item.status is ItemStatus.IN_PROGRESS
        assert item.priority is Priority.HIGH

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Item.model_validate({"number": 1, "status": "DONE"})

    def test_number_required(self):
        with pytest.raises(ValidationError):
            Item.model_validate({"location": "Hall"})


class TestCategory:
    def test_snags_alias(self):
        category = Category.model_validate({"id": 7, "name": "Hall", "snags": [{"number": 1}]})
        assert category.id == "7"
        assert [i.number for i in category.items] == [1]

    def test_blank_name_falls_back(self):
        assert Category.model_validate({"name": "  "}).name == DEFAULT_CATEGORY_NAME
        assert Category.model_validate({"name": None}).name == DEFAULT_CATEGORY_NAME


class TestLabels:
    def test_defaults(self):
        labels = ProjectLabels()
        assert labels.number_label == "No."
        assert labels.item_label == "Item"

    def test_blank_and_null_fall_back(self):
        labels = ProjectLabels.model_validate({"locationLabel": "", "photoLabel": None, "statusLabel": "State"})
        assert labels.location_label == "Location"
        assert labels.photo_label == "Photo"
        assert labels.status_label == "State"

    def test_header_for_columns(self):
        labels = ProjectLabels(item_label="Defect")
        assert labels.header_for("number") == "No."
        assert labels.header_for("details") == "Defect"


class TestSettings:
    def test_flat_labels_collected(self):
        settings = ProjectSettings.model_validate({"numberLabel": "#", "photoSize": "large"})
        assert settings.labels.number_label == "#"
        assert settings.labels.location_label == "Location"
        assert settings.photo_size is PhotoSize.LARGE

    def test_nested_labels(self):
        settings = ProjectSettings.model_validate({"labels": {"solution_label": "Fix"}})
        assert settings.labels.solution_label == "Fix"

    def test_null_photo_size(self):
        assert ProjectSettings.model_validate({"photoSize": None}).photo_size is PhotoSize.MEDIUM


class TestProject:
    def test_null_settings(self):
        project = Project.model_validate({"name": "Site", "settings": None})
        assert project.settings.labels == ProjectLabels()

    def test_identifier_prefers_code(self):
        assert Project(name="Site", code="S-1").identifier == "S-1"
        assert Project(name="Site", code=" ").identifier == "Site"
        assert Project(name="Site").identifier == "Site"

    def test_blank_name(self):
        assert Project.model_validate({"name": ""}).name == "Untitled project"


class TestReportOptions:
    def test_defaults(self):
        options = ReportOptions()
        assert options.layout.value == "compact"
        assert options.fetch_timeout == 10.0
        assert options.preserve_photo_aspect is False

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ReportOptions(fetch_timeout=0)
