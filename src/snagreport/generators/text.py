"""Text fitting helpers: word wrap, ellipsis truncation and labels.

Widths are given in millimetres to match the geometry tables and are
measured with the real font metrics of the standard PDF fonts.
"""

from __future__ import annotations

import re
from datetime import date

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from ..core.models import ItemStatus

ELLIPSIS = "..."

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")

_STATUS_SHORT_LABELS = {
    ItemStatus.IN_PROGRESS: "IN PROG.",
    ItemStatus.PENDING_REVIEW: "REVIEW",
}


def text_width(text: str, font: str, size: float) -> float:
    """Rendered width of *text* in millimetres."""
    return stringWidth(text, font, size) / mm


def _split_long_token(token: str, font: str, size: float, max_width: float) -> list[str]:
    """Break a single token wider than the column into width-safe chunks."""
    if text_width(token, font, size) <= max_width:
        return [token]
    chunks: list[str] = []
    remaining = token
    while remaining:
        lo, hi = 1, len(remaining)
        fit = 1
        while lo <= hi:
            mid = (lo + hi) // 2
            if text_width(remaining[:mid], font, size) <= max_width:
                fit = mid
                lo = mid + 1
            else:
                hi = mid - 1
        chunks.append(remaining[:fit])
        remaining = remaining[fit:]
    return chunks


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Word-wrap *text* into lines no wider than *max_width* mm.

    Explicit newlines start a new line.  Blank input yields no lines.
    """
    lines: list[str] = []
    for paragraph in str(text or "").splitlines():
        words: list[str] = []
        for word in paragraph.split():
            words.extend(_split_long_token(word, font, size, max_width))
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, font, size) <= max_width:
                current = candidate
            else:
                if current:
                    lines.append(current)
                current = word
        if current:
            lines.append(current)
    return lines


def truncate_lines(
    lines: list[str], max_lines: int, font: str, size: float, max_width: float
) -> list[str]:
    """Keep at most *max_lines* lines, marking any cut with an ellipsis.

    The last kept line is shortened until ``line + "..."`` fits the width.
    """
    if len(lines) <= max_lines:
        return list(lines)
    if max_lines <= 0:
        return []
    kept = list(lines[:max_lines])
    last = kept[-1]
    while last and text_width(f"{last}{ELLIPSIS}", font, size) > max_width:
        last = last[:-1]
    kept[-1] = f"{last.rstrip()}{ELLIPSIS}"
    return kept


def fit_text(text: str, font: str, size: float, max_width: float, max_lines: int) -> list[str]:
    """Wrap and truncate in one step."""
    return truncate_lines(wrap_text(text, font, size, max_width), max_lines, font, size, max_width)


def status_short_label(status: ItemStatus) -> str:
    """Short badge text for a status, e.g. ``IN_PROGRESS`` -> ``IN PROG.``."""
    return _STATUS_SHORT_LABELS.get(status, status.value.replace("_", " "))


def format_due_date(value: date) -> str:
    """Compact due date, e.g. ``Mar 4``."""
    return f"{value:%b} {value.day}"


def safe_filename(project_name: str, export_date: date) -> str:
    """Filesystem-safe export filename derived from the project name."""
    stem = _NON_ALNUM_RE.sub("_", project_name.strip()) or "project"
    return f"{stem}_export_{export_date.isoformat()}.pdf"
