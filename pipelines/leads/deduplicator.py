"""Within-run lead deduplication."""

from __future__ import annotations

import re
from collections.abc import Iterable

from pipelines.io.schemas import Lead
from pipelines.leads.company_extractor import clean_company_name

JOB_TITLE_KEY_LENGTH = 50


def normalize_company_key(company: str) -> str:
    return re.sub(r"\s+", " ", clean_company_name(company)).strip().lower()


def dedup_key(lead: Lead) -> str:
    """company|source for news; job leads add a title prefix so distinct roles survive."""
    key = f"{normalize_company_key(lead.company)}|{lead.source.strip().lower()}"
    if lead.origin == "job":
        key = f"{key}|{lead.title[:JOB_TITLE_KEY_LENGTH].strip().lower()}"
    return key


def dedupe(leads: Iterable[Lead]) -> list[Lead]:
    """Keep the first lead per key without reordering."""
    seen: set[str] = set()
    unique: list[Lead] = []
    for lead in leads:
        key = dedup_key(lead)
        if key in seen:
            continue
        seen.add(key)
        unique.append(lead)
    return unique


def sort_by_score(leads: Iterable[Lead]) -> list[Lead]:
    return sorted(leads, key=lambda lead: lead.score, reverse=True)


def sort_and_dedupe(leads: Iterable[Lead]) -> list[Lead]:
    return dedupe(sort_by_score(leads))
