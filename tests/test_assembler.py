"""End-to-end layout tests for the report assembler."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from snagreport.core.errors import ReportExportError
from snagreport.core.models import (
    LayoutVariant,
    PhotoSize,
    PhotoState,
    Project,
    ReportOptions,
    ReportRequest,
)
from snagreport.generators.base import Painter
from snagreport.generators.pdf_generator import ReportAssembler
from snagreport.generators.text import ELLIPSIS

EXPORT_DATE = date(2026, 3, 1)


def _assemble(project, fetcher, request=None, **options):
    opts = ReportOptions(export_date=EXPORT_DATE, **options)
    return ReportAssembler(opts, fetcher=fetcher).assemble(project, request)


# ---------------------------------------------------------------------------
# Core scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_single_page(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(n) for n in (1, 2, 3)]))
        result = _assemble(project, fetcher)

        assert result.page_count == 1
        page = result.pages[0]
        assert page.banners == ["Kitchen"]
        assert page.header_rows == 1
        assert page.item_numbers == [1, 2, 3]
        assert page.footer == "Page 1 of 1"
        assert result.pdf.startswith(b"%PDF")
        assert result.filename == "Harbour_View_export_2026-03-01.pdf"

    def test_overflow_repeats_banner_and_header(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(n) for n in range(1, 7)]))
        result = _assemble(project, fetcher)

        assert result.page_count == 2
        for page in result.pages:
            assert page.banners == ["Kitchen"]
            assert page.header_rows == 1
        assert result.pages[0].item_numbers == [1, 2, 3, 4]
        assert result.pages[1].item_numbers == [5, 6]
        assert [p.footer for p in result.pages] == ["Page 1 of 2", "Page 2 of 2"]

    def test_ten_items_three_pages(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(n) for n in range(1, 11)]))
        result = _assemble(project, fetcher)
        assert result.page_count == 3
        assert [len(p.rows) for p in result.pages] == [4, 4, 2]
        assert result.pages[-1].footer == "Page 3 of 3"

    def test_no_photo_placeholder_without_fetch(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1, photos=[]), make_item(2)]))
        result = _assemble(project, fetcher)

        rows = result.pages[0].rows
        assert rows[0].photo_states == [PhotoState.NO_PHOTO]
        assert rows[1].photo_states == [PhotoState.EMBEDDED]
        assert fetcher.calls == ["https://img.test/2.jpg"]

    @pytest.mark.parametrize("state", [PhotoState.UNAVAILABLE, PhotoState.ERROR])
    def test_failed_photo_does_not_stop_export(self, build_project, make_item, fetcher, state):
        fetcher.failures["https://img.test/2.jpg"] = state
        project = build_project(("Kitchen", [make_item(n) for n in (1, 2, 3)]))
        result = _assemble(project, fetcher)

        rows = result.pages[0].rows
        assert [r.number for r in rows] == [1, 2, 3]
        assert rows[0].photo_states == [PhotoState.EMBEDDED]
        assert rows[1].photo_states == [state]
        assert rows[2].photo_states == [PhotoState.EMBEDDED]

    def test_empty_category_omitted(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]), ("Garage", []))
        result = _assemble(project, fetcher)

        assert result.page_count == 1
        assert result.pages[0].banners == ["Kitchen"]


# ---------------------------------------------------------------------------
# Ordering and scope
# ---------------------------------------------------------------------------

class TestOrdering:
    def test_items_sorted_by_number(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(n) for n in (3, 1, 2)]))
        result = _assemble(project, fetcher)
        assert result.pages[0].item_numbers == [1, 2, 3]
        assert fetcher.calls == [f"https://img.test/{n}.jpg" for n in (1, 2, 3)]

    def test_categories_follow_order_index(self, make_item, fetcher):
        project = Project.model_validate({
            "name": "Site",
            "categories": [
                {"id": "b", "name": "Zeta", "orderIndex": 2, "snags": [make_item(2)]},
                {"id": "a", "name": "Alpha", "orderIndex": 5, "snags": [make_item(3)]},
                {"id": "c", "name": "Mid", "orderIndex": 0, "snags": [make_item(1)]},
            ],
        })
        result = _assemble(project, fetcher)
        assert [p.banners for p in result.pages] == [["Mid"], ["Zeta"], ["Alpha"]]

    def test_input_not_mutated(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(n) for n in (2, 1)]))
        _assemble(project, fetcher)
        assert [i.number for i in project.categories[0].items] == [2, 1]

    def test_category_scope(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]), ("Bathroom", [make_item(2)]))
        result = _assemble(project, fetcher, ReportRequest(project_id="p1", category_id="c1"))
        assert result.page_count == 1
        assert result.pages[0].banners == ["Bathroom"]
        assert result.pages[0].item_numbers == [2]

    def test_unknown_category_gives_empty_report(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]))
        result = _assemble(project, fetcher, ReportRequest(category_id="nope"))
        assert result.page_count == 1
        assert result.pages[0].banners == []
        assert result.pages[0].rows == []
        assert fetcher.calls == []

    def test_empty_project(self, build_project, fetcher):
        result = _assemble(build_project(), fetcher)
        assert result.page_count == 1
        assert result.pages[0].footer == "Page 1 of 1"
        assert result.pdf.startswith(b"%PDF")


# ---------------------------------------------------------------------------
# Section rules
# ---------------------------------------------------------------------------

class TestSections:
    def test_compact_category_starts_new_page(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]), ("Bathroom", [make_item(2)]))
        result = _assemble(project, fetcher)
        assert [p.banners for p in result.pages] == [["Kitchen"], ["Bathroom"]]

    def test_wide_category_continues_on_page(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]), ("Bathroom", [make_item(2)]))
        result = _assemble(project, fetcher, layout=LayoutVariant.WIDE)
        assert result.page_count == 1
        assert result.pages[0].banners == ["Kitchen", "Bathroom"]
        assert result.pages[0].header_rows == 2

    def test_wide_category_breaks_when_row_does_not_fit(self, build_project, make_item, fetcher):
        project = build_project(
            ("Kitchen", [make_item(1), make_item(2)]),
            ("Bathroom", [make_item(3)]),
        )
        result = _assemble(project, fetcher, layout=LayoutVariant.WIDE)
        assert [p.banners for p in result.pages] == [["Kitchen"], ["Bathroom"]]


# ---------------------------------------------------------------------------
# Row content
# ---------------------------------------------------------------------------

class TestRowContent:
    def test_long_description_truncated(self, build_project, make_item, fetcher):
        long_text = " ".join(["cracked"] * 200)
        project = build_project(("Kitchen", [make_item(1, description=long_text)]))
        row = _assemble(project, fetcher).pages[0].rows[0]
        assert len(row.description_lines) == 8
        assert row.description_lines[-1].endswith(ELLIPSIS)

    def test_missing_solution_shows_dash(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1, solution=None)]))
        row = _assemble(project, fetcher).pages[0].rows[0]
        assert row.solution_lines == ["-"]

    def test_status_label_and_secondary_lines(self, build_project, make_item, fetcher):
        item = make_item(
            1,
            status="IN_PROGRESS",
            dueDate="2026-03-04",
            assignedTo={"firstName": "Ana", "lastName": "Silva"},
        )
        row = _assemble(build_project(("Kitchen", [item])), fetcher).pages[0].rows[0]
        assert row.status_label == "IN PROG."
        assert row.secondary_lines == ["Ana Silva", "Mar 4"]

    def test_due_date_timestamp_from_app(self, build_project, make_item, fetcher):
        item = make_item(1, dueDate="2026-03-03T22:00:00.000Z")
        result = _assemble(build_project(("Kitchen", [item])), fetcher)
        assert result.pages[0].rows[0].secondary_lines == ["Mar 3"]

    def test_secondary_lines_omitted(self, build_project, make_item, fetcher):
        row = _assemble(build_project(("Kitchen", [make_item(1)])), fetcher).pages[0].rows[0]
        assert row.secondary_lines == []

    def test_compact_fetches_first_photo_only(self, build_project, make_item, fetcher):
        photos = [{"url": f"https://img.test/1-{i}.jpg"} for i in range(3)]
        project = build_project(("Kitchen", [make_item(1, photos=photos)]))
        _assemble(project, fetcher)
        assert fetcher.calls == ["https://img.test/1-0.jpg"]

    def test_wide_fetches_thumbnails(self, build_project, make_item, fetcher):
        photos = [{"url": f"https://img.test/1-{i}.jpg"} for i in range(5)]
        project = build_project(("Kitchen", [make_item(1, photos=photos)]))
        row = _assemble(project, fetcher, layout=LayoutVariant.WIDE).pages[0].rows[0]
        assert fetcher.calls == [f"https://img.test/1-{i}.jpg" for i in range(4)]
        assert row.photo_states == [PhotoState.EMBEDDED] * 4

    def test_fetcher_exception_becomes_error_placeholder(self, build_project, make_item):
        class ExplodingFetcher:
            def fetch(self, url):
                raise RuntimeError("boom")

        project = build_project(("Kitchen", [make_item(1), make_item(2)]))
        result = _assemble(project, ExplodingFetcher())
        assert [r.photo_states for r in result.pages[0].rows] == [[PhotoState.ERROR]] * 2


# ---------------------------------------------------------------------------
# Photo sizing
# ---------------------------------------------------------------------------

class TestPhotoSizing:
    def test_project_photo_size_changes_rows_per_page(self, build_project, make_item, fetcher):
        project = build_project(
            ("Kitchen", [make_item(n) for n in range(1, 5)]),
            settings={"photoSize": "LARGE"},
        )
        result = _assemble(project, fetcher)
        assert [len(p.rows) for p in result.pages] == [3, 1]
        assert result.pages[0].rows[0].height == pytest.approx(64.25)

    def test_option_overrides_project_photo_size(self, build_project, make_item, fetcher):
        project = build_project(
            ("Kitchen", [make_item(n) for n in range(1, 7)]),
            settings={"photoSize": "LARGE"},
        )
        result = _assemble(project, fetcher, photo_size=PhotoSize.SMALL)
        assert [len(p.rows) for p in result.pages] == [5, 1]

    def test_fixed_slot_stretches_photo(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]))
        with patch.object(Painter, "image") as draw:
            _assemble(project, fetcher)
        _, x, top, width, height = draw.call_args.args
        assert (x, top) == (47.5, 44.5)
        assert width == pytest.approx(65)
        assert height == pytest.approx(45)

    def test_preserve_aspect_fits_photo(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]))
        with patch.object(Painter, "image") as draw:
            _assemble(project, fetcher, preserve_photo_aspect=True)
        _, x, top, width, height = draw.call_args.args
        # 40x30 source into a 65x45 slot
        assert height == pytest.approx(45)
        assert width == pytest.approx(60)
        assert x == pytest.approx(50.0)


# ---------------------------------------------------------------------------
# Determinism and failure
# ---------------------------------------------------------------------------

class TestAssemblerBehaviour:
    def test_idempotent_layout(self, build_project, make_item, fetcher):
        project = build_project(
            ("Kitchen", [make_item(n) for n in range(1, 6)]),
            ("Bathroom", [make_item(n) for n in range(6, 8)]),
        )
        assembler = ReportAssembler(ReportOptions(export_date=EXPORT_DATE), fetcher=fetcher)
        first = assembler.assemble(project)
        second = assembler.assemble(project)
        assert first.page_count == second.page_count == 3
        assert [p.model_dump() for p in first.pages] == [p.model_dump() for p in second.pages]
        assert first.filename == second.filename

    def test_identifier_falls_back_to_name(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]), code=None)
        assert project.identifier == "Harbour View"
        assert _assemble(project, fetcher).page_count == 1

    def test_render_failure_raises_export_error(self, build_project, make_item, fetcher):
        project = build_project(("Kitchen", [make_item(1)]))
        with patch(
            "snagreport.generators.pdf_generator.PageController.finish",
            side_effect=RuntimeError("disk full"),
        ):
            with pytest.raises(ReportExportError) as excinfo:
                _assemble(project, fetcher)
        assert isinstance(excinfo.value.__cause__, RuntimeError)
