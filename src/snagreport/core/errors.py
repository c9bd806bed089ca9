"""Exceptions raised by the report engine."""

from __future__ import annotations


class ReportExportError(RuntimeError):
    """Raised when a report export cannot complete.

    Always chained from the underlying cause.  No partial document is
    returned alongside it.
    """
