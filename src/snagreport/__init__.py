"""snagreport: paginated PDF reports for photo-centric inspection projects.

Takes a resolved project graph (project → categories → items → photos)
and lays it out as a fixed-geometry A4 report with one photo slot per
item, category banners, repeated column headers and ``Page i of N``
footers.
"""

from .core.errors import ReportExportError  # noqa: F401
from .core.models import (  # noqa: F401
    Project,
    ReportOptions,
    ReportRequest,
    ReportResult,
)
from .generators.pdf_generator import ReportAssembler  # noqa: F401

__version__ = "0.1.0"
