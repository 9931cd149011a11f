"""Shared data schemas used across the lead pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

SignalName = Literal["funding", "expansion", "jobs", "linkedin"]
JobLevel = Literal["Senior", "Junior", "Management", "Internship", "Mid-Level"]

JOB_SIGNAL_TYPES = frozenset({"job_posting", "job_announcement", "fresh_job_posting"})
NOT_APPLICABLE = "N/A"

LEAD_SHEET_COLUMNS = (
    "Date",
    "Company",
    "Signal Type",
    "Score",
    "Funding (raw)",
    "Funding (lakhs)",
    "Geography",
    "Source",
    "URL",
    "Title",
    "Description",
    "Platform/Job Type",
    "Posting Date",
)


class SignalQuery(BaseModel):
    """Static search category with the pattern preferred for company extraction."""

    name: SignalName
    pattern: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True, extra="forbid")


class RawRecord(BaseModel):
    """Provider item (news article or search result) before lead construction."""

    title: str
    snippet: str = ""
    link: str = ""
    source_name: str = ""
    published_at: str = Field(default="", description="ISO date or free-text posting hint.")
    location: str = ""
    platform: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RawRecord:
        """Build a record from a provider payload, tolerating the usual field aliases."""
        source = payload.get("source")
        if isinstance(source, Mapping):
            source = source.get("name")
        return cls(
            title=payload.get("title"),
            snippet=_first_text(payload, "snippet", "description", "abstract"),
            link=_first_text(payload, "link", "url"),
            source_name=_first_text({**payload, "source": source}, "source", "source_name", "publisher"),
            published_at=_first_text(payload, "publishedAt", "published_at", "date", "posted_at"),
            location=_first_text(payload, "location"),
            platform=_first_text(payload, "platform") or None,
        )

    @property
    def text(self) -> str:
        return " ".join(part for part in (self.title, self.snippet) if part)


class FundingAmount(BaseModel):
    """Normalized INR funding amount."""

    raw_text: str = Field(..., min_length=1)
    inr_minor_units: int = Field(..., ge=0, description="Whole rupees.")
    lakhs: float = Field(..., ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class PostingFreshness(BaseModel):
    """Recency hint attached to job leads."""

    hint: str
    is_recent: bool

    model_config = ConfigDict(frozen=True, extra="forbid")


class Lead(BaseModel):
    """Scored lead produced by the pipeline."""

    company: str
    type: str
    score: int = Field(..., ge=0)
    funding: FundingAmount | None = None
    geo: str
    source: str = ""
    link: str = ""
    title: str = ""
    description: str = ""
    published_at: str = ""
    platform: str | None = None
    job_type: JobLevel | None = None
    posting_freshness: PostingFreshness | None = None
    industries: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def origin(self) -> Literal["news", "job"]:
        return "job" if self.type in JOB_SIGNAL_TYPES else "news"

    def to_row(self, run_date: date) -> list[object]:
        """Map the lead onto the fixed sheet columns."""
        platform_cell = " / ".join(part for part in (self.platform, self.job_type) if part)
        return [
            run_date.isoformat(),
            self.company,
            self.type,
            self.score,
            self.funding.raw_text if self.funding else NOT_APPLICABLE,
            self.funding.lakhs if self.funding else NOT_APPLICABLE,
            self.geo,
            self.source,
            self.link,
            self.title,
            self.description,
            platform_cell,
            self.posting_freshness.hint if self.posting_freshness else self.published_at,
        ]


def _first_text(payload: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str):
            stripped = value.strip()
            if stripped:
                return stripped
    return ""
