"""snagreport CLI: render inspection reports from project graphs."""

from __future__ import annotations

import logging

import click
from pydantic import ValidationError
from rich.console import Console

from .core.fetcher import DEFAULT_FETCH_TIMEOUT
from .core.models import LayoutVariant, PhotoSize
from .generators.geometry import list_geometries
from .pipeline import Pipeline, load_project

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="snagreport")
def main():
    """snagreport: Turn inspection projects into paginated PDF reports."""
    pass


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o", "--output",
    "output_dir",
    type=click.Path(file_okay=False),
    default="./output",
    help="Output directory (default: ./output).",
)
@click.option(
    "--layout",
    type=click.Choice([v.value for v in LayoutVariant], case_sensitive=False),
    envvar="SNAGREPORT_LAYOUT",
    default=LayoutVariant.COMPACT.value,
    help="Report layout (or set SNAGREPORT_LAYOUT env var).",
)
@click.option(
    "--category",
    "category_id",
    default=None,
    help="Export a single category by id.",
)
@click.option(
    "--photo-size",
    type=click.Choice([s.value for s in PhotoSize], case_sensitive=False),
    default=None,
    help="Override the project's photo size setting.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    envvar="SNAGREPORT_FETCH_TIMEOUT",
    default=DEFAULT_FETCH_TIMEOUT,
    show_default=True,
    help="Per-photo download timeout in seconds.",
)
@click.option(
    "--date",
    "export_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Export date printed on the report (default: today).",
)
@click.option(
    "--keep-aspect",
    is_flag=True,
    default=False,
    help="Fit photos into their slots without stretching.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def render(
    source: str,
    output_dir: str,
    layout: str,
    category_id: str | None,
    photo_size: str | None,
    timeout: float,
    export_date,
    keep_aspect: bool,
    verbose: bool,
):
    """Render the project graph in SOURCE (a JSON file) to PDF."""
    _setup_logging(verbose)

    pipeline = Pipeline(timeout=timeout)
    result = pipeline.run(
        source,
        output_dir=output_dir,
        layout=layout.lower(),
        category_id=category_id,
        photo_size=photo_size.upper() if photo_size else None,
        export_date=export_date.date() if export_date else None,
        preserve_photo_aspect=keep_aspect,
    )

    if not result.success:
        raise SystemExit(1)


@main.command()
def layouts():
    """List available report layouts."""
    from rich.table import Table as RichTable

    table = RichTable(title="Available Layouts", show_lines=False)
    table.add_column("Name", style="bold cyan")
    table.add_column("Columns (mm)")
    table.add_column("Photo", justify="right")
    table.add_column("Rows")
    table.add_column("Description")

    for g in list_geometries():
        columns = ", ".join(f"{c.key} {c.width:g}" for c in g.columns)
        table.add_row(
            g.name,
            columns,
            f"{g.photo_height:g}mm",
            g.row_layout,
            g.description,
        )

    console.print(table)


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
def inspect(source: str):
    """Load a project graph and display its categories and items."""
    from rich.tree import Tree

    try:
        project = load_project(source)
    except (OSError, ValueError, ValidationError) as exc:
        console.print(f"[bold red]❌ Could not load project:[/] {exc}")
        raise SystemExit(1)

    tree = Tree(f"[bold]{project.name}[/bold]")
    if project.code:
        tree.add(f"[dim]Code: {project.code}[/dim]")
    tree.add(f"[dim]Photo size: {project.settings.photo_size.value}[/dim]")

    for category in sorted(project.categories, key=lambda c: c.order_index):
        node = tree.add(
            f"[blue]{category.name}[/blue] [dim]({len(category.items)} items)[/dim]"
        )
        for item in sorted(category.items, key=lambda i: i.number):
            node.add(
                f"#{item.number} {item.location or '-'} "
                f"[dim]{item.status.value} · {item.priority.value} · "
                f"{len(item.photos)} photo(s)[/dim]"
            )

    console.print(tree)


if __name__ == "__main__":
    main()
