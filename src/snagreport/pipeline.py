"""Orchestration pipeline: load a project graph, render it, write the PDF."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from rich.console import Console

from .core.errors import ReportExportError
from .core.fetcher import DEFAULT_FETCH_TIMEOUT, ImageFetcher, PhotoFetcher
from .core.models import (
    GenerationResult,
    LayoutVariant,
    PhotoSize,
    Project,
    ReportOptions,
    ReportRequest,
)
from .generators.pdf_generator import ReportAssembler

logger = logging.getLogger(__name__)

console = Console()


def load_project(source: str | Path) -> Project:
    """Read and validate a project graph from a JSON file.

    The file may hold the project itself or wrap it as ``{"project": ...}``.
    Raises ``OSError``, ``ValueError`` (bad JSON) or
    :class:`pydantic.ValidationError`.
    """
    data: Any = json.loads(Path(source).read_text(encoding="utf-8"))
    if isinstance(data, dict) and isinstance(data.get("project"), dict):
        data = data["project"]
    return Project.model_validate(data)


class Pipeline:
    """End-to-end JSON project graph -> PDF report pipeline.

    Usage::

        pipeline = Pipeline(timeout=5)
        result = pipeline.run("project.json", output_dir="./reports")
        print(result.output_path)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        fetcher: Optional[ImageFetcher] = None,
    ) -> None:
        self.timeout = timeout
        self.fetcher = fetcher or PhotoFetcher(timeout=timeout)

    def run(
        self,
        source: str | Path,
        *,
        output_dir: str | Path = "./output",
        layout: LayoutVariant | str = LayoutVariant.COMPACT,
        category_id: Optional[str] = None,
        photo_size: PhotoSize | str | None = None,
        export_date: Optional[date] = None,
        preserve_photo_aspect: bool = False,
    ) -> GenerationResult:
        """Run the full pipeline.

        Parameters
        ----------
        source
            Path to a JSON file holding the project graph.
        output_dir
            Directory where the PDF is written.
        layout
            ``compact`` (six-column table) or ``wide`` (large photos).
        category_id
            Export only this category.
        photo_size
            Overrides the project's own photo size setting.
        export_date
            Date printed on the report and used in the filename.
        preserve_photo_aspect
            Fit photos into their slots without stretching.
        """
        console.print(f"\n[bold blue]📥 Loading project from:[/] {source}")
        try:
            project = load_project(source)
            options = ReportOptions(
                layout=layout,
                photo_size=photo_size,
                fetch_timeout=self.timeout,
                preserve_photo_aspect=preserve_photo_aspect,
                export_date=export_date,
            )
        except (OSError, ValueError, ValidationError) as exc:
            console.print(f"[bold red]❌ Could not load project:[/] {exc}")
            logger.error("Could not load %s: %s", source, exc)
            return GenerationResult(success=False, error=str(exc))

        n_items = sum(len(c.items) for c in project.categories)
        console.print(
            f"[green]✓[/] Loaded [bold]{project.name}[/bold]: "
            f"{len(project.categories)} categories, {n_items} items"
        )

        request = ReportRequest(project_id=project.id, category_id=category_id)
        assembler = ReportAssembler(options, fetcher=self.fetcher)

        console.print(f"[bold blue]📄 Rendering {options.layout.value} report...[/]")
        try:
            report = assembler.assemble(project, request)
        except ReportExportError as exc:
            console.print(f"[bold red]❌ Export failed:[/] {exc}")
            return GenerationResult(success=False, error=f"Export failed: {exc}")

        output_path = Path(output_dir).resolve()
        try:
            output_path.mkdir(parents=True, exist_ok=True)
            target = output_path / report.filename
            target.write_bytes(report.pdf)
        except OSError as exc:
            console.print(f"[bold red]❌ Could not write report:[/] {exc}")
            logger.error("Could not write report to %s: %s", output_path, exc)
            return GenerationResult(success=False, error=str(exc))

        console.print(
            f"\n[bold green]🎉 Done![/] {report.page_count} page(s) "
            f"→ [link=file://{target}]{target}[/link]\n"
        )
        return GenerationResult(output_path=target, page_count=report.page_count)
