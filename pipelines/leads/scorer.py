"""Additive relevance scoring for lead candidates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from pipelines.io.schemas import JOB_SIGNAL_TYPES, FundingAmount
from pipelines.io.urls import host_of
from pipelines.leads.geo_matcher import match_keywords
from pipelines.leads.posting import freshness_tier
from pipelines.leads.rules import LeadRules

HIRING_NEWS_TYPES = frozenset({"jobs", "linkedin"})
IMMEDIATE_REGEX = re.compile(r"\bimmediate(?:ly)?\b", re.IGNORECASE)
URGENT_REGEX = re.compile(r"\burgent(?:ly)?\b", re.IGNORECASE)
WALK_IN_REGEX = re.compile(r"\bwalk[\s-]?ins?\b", re.IGNORECASE)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-rule contributions, in evaluation order."""

    base: float = 0
    keywords: float = 0
    india_hiring: float = 0
    funding: float = 0
    freshness: float = 0
    platform: float = 0
    well_known: float = 0
    self_sourced: float = 0

    @property
    def total(self) -> int:
        raw = (
            self.base
            + self.keywords
            + self.india_hiring
            + self.funding
            + self.freshness
            + self.platform
            + self.well_known
            + self.self_sourced
        )
        return max(0, int(round(raw)))


class Scorer:
    """Rule table scorer; every rule adds a non-negative contribution."""

    def __init__(self, rules: LeadRules, *, today: date | None = None) -> None:
        self.rules = rules
        self.weights = rules.weights
        self.today = today or date.today()

    def score(
        self,
        candidate_type: str,
        matched_text: str,
        funding: FundingAmount | None,
        geo_matched: bool,
        platform: str | None = None,
        freshness_hint: str | None = None,
        *,
        company: str | None = None,
        link: str | None = None,
    ) -> int:
        return self.breakdown(
            candidate_type,
            matched_text,
            funding,
            geo_matched,
            platform,
            freshness_hint,
            company=company,
            link=link,
        ).total

    def breakdown(
        self,
        candidate_type: str,
        matched_text: str,
        funding: FundingAmount | None,
        geo_matched: bool,
        platform: str | None = None,
        freshness_hint: str | None = None,
        *,
        company: str | None = None,
        link: str | None = None,
    ) -> ScoreBreakdown:
        text = (matched_text or "").lower()
        is_job = candidate_type in JOB_SIGNAL_TYPES
        return ScoreBreakdown(
            base=self._base(candidate_type),
            keywords=self._keyword_points(text, is_job=is_job),
            india_hiring=self._india_hiring_points(text, geo_matched),
            funding=self._funding_points(candidate_type, funding),
            freshness=self._freshness_points(text, freshness_hint) if is_job else 0,
            platform=self._platform_points(platform),
            well_known=self._well_known_points(company),
            self_sourced=self._self_sourced_points(company, link),
        )

    def _base(self, candidate_type: str) -> float:
        weights = self.weights
        if candidate_type == "fresh_job_posting":
            return weights.fresh_job_posting_base
        if candidate_type == "job_posting":
            return weights.job_posting_base
        if candidate_type == "job_announcement":
            return weights.job_announcement_base
        if candidate_type in HIRING_NEWS_TYPES:
            return weights.news_hiring_base
        return weights.news_base

    def _keyword_points(self, text: str, *, is_job: bool) -> float:
        hits = set(keyword.lower() for keyword in match_keywords(text, self.rules.hiring_keywords))
        per_keyword = self.weights.job_keyword_points if is_job else self.weights.news_keyword_points
        return per_keyword * len(hits)

    def _india_hiring_points(self, text: str, geo_matched: bool) -> float:
        hits = set(keyword.lower() for keyword in match_keywords(text, self.rules.india_hiring_keywords))
        bonus = self.weights.india_keyword_points * len(hits)
        if geo_matched and bonus:
            bonus += self.weights.india_geo_bonus
        return bonus

    def _funding_points(self, candidate_type: str, funding: FundingAmount | None) -> float:
        if candidate_type != "funding" or funding is None:
            return 0
        divisor = self.weights.funding_divisor or 1
        return min(funding.lakhs / divisor, self.weights.funding_cap)

    def _freshness_points(self, text: str, freshness_hint: str | None) -> float:
        weights = self.weights
        tier = freshness_tier(freshness_hint, self.today) or freshness_tier(text, self.today)
        points = {
            "hours": weights.fresh_hours_points,
            "day": weights.fresh_day_points,
            "year": weights.fresh_year_points,
        }.get(tier or "", 0)
        combined = f"{freshness_hint or ''} {text}"
        if IMMEDIATE_REGEX.search(combined):
            points += weights.immediate_points
        if URGENT_REGEX.search(combined):
            points += weights.urgent_points
        if WALK_IN_REGEX.search(combined):
            points += weights.walk_in_points
        return points

    def _platform_points(self, platform: str | None) -> float:
        return self.rules.platform_boost(platform) or 0

    def _well_known_points(self, company: str | None) -> float:
        if not company:
            return 0
        lowered = company.lower()
        if any(name.lower() in lowered for name in self.rules.well_known_companies):
            return self.weights.well_known_points
        return 0

    def _self_sourced_points(self, company: str | None, link: str | None) -> float:
        if not company or not link:
            return 0
        compact = re.sub(r"[^a-z0-9]+", "", company.lower())
        host = re.sub(r"[^a-z0-9.]+", "", host_of(link))
        if len(compact) > 2 and compact in host:
            return self.weights.self_sourced_points
        return 0
