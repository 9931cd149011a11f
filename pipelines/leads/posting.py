"""Posting recency and job-level hints for job-derived leads."""

from __future__ import annotations

import re
from datetime import date
from typing import Literal

from pipelines.io.schemas import JobLevel, PostingFreshness
from pipelines.io.urls import normalize_domain
from pipelines.leads.rules import LeadRules

FreshnessTier = Literal["hours", "day", "year"]

HOURS_REGEX = re.compile(
    r"\b\d+\s*(?:hours?|hrs?|h|minutes?|mins?)\s+ago\b|\btoday\b|\bjust\s+now\b|\bjust\s+posted\b",
    re.IGNORECASE,
)
DAY_REGEX = re.compile(r"\b(?:1|one|a)\s+day\s+ago\b|\byesterday\b", re.IGNORECASE)
OLDER_REGEX = re.compile(r"\b\d+\s*(?:days?|weeks?|months?)\s+ago\b", re.IGNORECASE)
ISO_DATE_REGEX = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})")

JOB_LEVEL_RULES: tuple[tuple[JobLevel, re.Pattern[str]], ...] = (
    ("Internship", re.compile(r"\bintern(?:ship)?s?\b|\btrainee\b", re.IGNORECASE)),
    ("Management", re.compile(r"\b(?:manager|director|head|vp|vice\s+president|chief|cto|cfo|ceo)\b", re.IGNORECASE)),
    ("Senior", re.compile(r"\b(?:senior|sr|lead|principal|staff|architect)\b", re.IGNORECASE)),
    ("Junior", re.compile(r"\b(?:junior|jr|freshers?|entry[\s-]level|graduate)\b", re.IGNORECASE)),
)


def _days_since(text: str, today: date) -> int | None:
    match = ISO_DATE_REGEX.search(text)
    if not match:
        return None
    try:
        posted = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None
    return (today - posted).days


def freshness_tier(text: str | None, today: date) -> FreshnessTier | None:
    """Classify the strongest recency phrase in text."""
    if not text:
        return None
    if HOURS_REGEX.search(text):
        return "hours"
    if DAY_REGEX.search(text):
        return "day"
    days = _days_since(text, today)
    if days is not None and 0 <= days <= 1:
        return "hours" if days == 0 else "day"
    if str(today.year) in text:
        return "year"
    return None


def detect_freshness(hint: str | None, text: str | None, today: date) -> PostingFreshness | None:
    """Posting freshness from the record's date hint, falling back to its text."""
    for candidate in (hint, text):
        if not candidate:
            continue
        match = HOURS_REGEX.search(candidate) or DAY_REGEX.search(candidate)
        if match:
            return PostingFreshness(hint=(hint or match.group(0)).strip(), is_recent=True)
        days = _days_since(candidate, today)
        if days is not None:
            return PostingFreshness(hint=(hint or candidate).strip(), is_recent=0 <= days <= 1)
        older = OLDER_REGEX.search(candidate)
        if older:
            return PostingFreshness(hint=(hint or older.group(0)).strip(), is_recent=False)
    if hint and hint.strip():
        return PostingFreshness(hint=hint.strip(), is_recent=False)
    return None


def classify_job_level(title: str | None) -> JobLevel:
    for level, pattern in JOB_LEVEL_RULES:
        if title and pattern.search(title):
            return level
    return "Mid-Level"


def classify_job_signal(
    freshness: PostingFreshness | None,
    link: str | None,
    platform: str | None,
    rules: LeadRules,
) -> str:
    """fresh_job_posting for recent posts, job_posting for listings on job platforms."""
    if freshness is not None and freshness.is_recent:
        return "fresh_job_posting"
    if rules.platform_boost(platform) is not None:
        return "job_posting"
    if normalize_domain(link) in rules.job_board_domains:
        return "job_posting"
    return "job_announcement"
