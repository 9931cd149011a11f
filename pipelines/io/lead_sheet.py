"""CSV lead sheet: the tabular store that accepted leads are appended to."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from pipelines.io.schemas import LEAD_SHEET_COLUMNS, Lead
from pipelines.io.urls import canonicalize_url

logger = logging.getLogger("pipelines.io.lead_sheet")

URL_COLUMN = LEAD_SHEET_COLUMNS.index("URL")


def lead_to_row(lead: Lead, run_date: date) -> list[object]:
    return lead.to_row(run_date)


def existing_urls(path: Path) -> set[str]:
    """Canonical URLs already present in the sheet."""
    if not path.exists():
        return set()
    urls: set[str] = set()
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle)
        next(reader, None)
        for row in reader:
            if len(row) > URL_COLUMN:
                canonical = canonicalize_url(row[URL_COLUMN])
                if canonical:
                    urls.add(canonical)
    return urls


def append_leads(path: Path, leads: Iterable[Lead], run_date: date) -> int:
    """Append leads whose URL is not already in the sheet; returns rows written."""
    seen = existing_urls(path)
    write_header = not path.exists() or path.stat().st_size == 0
    path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    skipped = 0
    with path.open("a", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        if write_header:
            writer.writerow(LEAD_SHEET_COLUMNS)
        for lead in leads:
            canonical = canonicalize_url(lead.link)
            if canonical and canonical in seen:
                skipped += 1
                continue
            writer.writerow(lead_to_row(lead, run_date))
            if canonical:
                seen.add(canonical)
            written += 1
    logger.info("Lead sheet updated path=%s written=%s skipped_existing=%s", path, written, skipped)
    return written
