"""Shared fixtures: a recording photo fetcher and project graph builders."""

from __future__ import annotations

from typing import Any

import pytest
from PIL import Image
from reportlab.lib.utils import ImageReader

from snagreport.core.fetcher import PhotoFetchResult
from snagreport.core.models import PhotoState, Project


class StubFetcher:
    """Records every URL and serves a tiny in-memory image.

    URLs listed in *failures* return that state instead of an image.
    """

    def __init__(self, failures: dict[str, PhotoState] | None = None) -> None:
        self.calls: list[str] = []
        self.failures = failures or {}

    def fetch(self, url: str) -> PhotoFetchResult:
        self.calls.append(url)
        if url in self.failures:
            return PhotoFetchResult(state=self.failures[url], detail="stubbed failure")
        img = Image.new("RGB", (40, 30), (200, 80, 80))
        return PhotoFetchResult(state=PhotoState.EMBEDDED, image=ImageReader(img))


def item_data(number: int, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "number": number,
        "location": f"Room {number}",
        "description": f"Defect number {number}",
        "solution": "Repair and repaint",
        "status": "OPEN",
        "priority": "MEDIUM",
        "photos": [{"url": f"https://img.test/{number}.jpg"}],
    }
    data.update(overrides)
    return data


def project_data(*categories: tuple[str, list[dict[str, Any]]], **extra: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": "p1",
        "name": "Harbour View",
        "code": "HV-01",
        "categories": [
            {"id": f"c{i}", "name": name, "orderIndex": i, "snags": items}
            for i, (name, items) in enumerate(categories)
        ],
    }
    data.update(extra)
    return data


@pytest.fixture
def fetcher():
    return StubFetcher()


@pytest.fixture
def build_project():
    def _build(*categories: tuple[str, list[dict[str, Any]]], **extra: Any) -> Project:
        return Project.model_validate(project_data(*categories, **extra))

    return _build


@pytest.fixture
def make_item():
    return item_data
