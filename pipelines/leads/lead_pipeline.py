"""Lead engine orchestration: geo filter, extraction, scoring, validation, dedup.

Every step is a pure function of the record and the loaded ruleset, so batches can be
split and evaluated independently; only the final sort/dedupe pass needs the whole set.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pipelines.io.schemas import Lead, RawRecord, SignalQuery
from pipelines.leads.company_extractor import CompanyExtractor
from pipelines.leads.deduplicator import sort_and_dedupe
from pipelines.leads.funding_parser import FundingParser
from pipelines.leads.geo_matcher import GeoMatcher, match_keywords
from pipelines.leads.posting import classify_job_level, classify_job_signal, detect_freshness
from pipelines.leads.rules import LeadRules
from pipelines.leads.scorer import Scorer
from pipelines.leads.validator import LeadValidator

logger = logging.getLogger("pipelines.leads.lead_pipeline")

SKIP_NOT_GEO_RELEVANT = "NOT_GEO_RELEVANT"
SKIP_MISSING_COMPANY = "MISSING_COMPANY"
SKIP_REJECTED_BY_VALIDATOR = "REJECTED_BY_VALIDATOR"


@dataclass
class PipelineStats:
    items_total: int = 0
    items_accepted: int = 0
    skipped_by_reason: Counter = field(default_factory=Counter)
    duplicates_removed: int = 0
    capped_by_platform: int = 0

    @property
    def items_skipped(self) -> int:
        return sum(self.skipped_by_reason.values())

    def record_total(self) -> None:
        self.items_total += 1

    def record_accepted(self) -> None:
        self.items_accepted += 1

    def record_skipped(self, reason: str) -> None:
        self.skipped_by_reason[reason] += 1

    def absorb(self, other: PipelineStats) -> None:
        self.items_total += other.items_total
        self.items_accepted += other.items_accepted
        self.skipped_by_reason.update(other.skipped_by_reason)
        self.duplicates_removed += other.duplicates_removed
        self.capped_by_platform += other.capped_by_platform

    def as_dict(self) -> dict[str, Any]:
        return {
            "items_total": self.items_total,
            "items_accepted": self.items_accepted,
            "items_skipped": self.items_skipped,
            "skipped_by_reason": dict(sorted(self.skipped_by_reason.items())),
            "duplicates_removed": self.duplicates_removed,
            "capped_by_platform": self.capped_by_platform,
        }


@dataclass
class LeadBatchResult:
    leads: list[Lead] = field(default_factory=list)
    skipped: list[dict[str, Any]] = field(default_factory=list)
    stats: PipelineStats = field(default_factory=PipelineStats)


class LeadPipeline:
    """Turns raw provider records into scored, validated leads."""

    def __init__(self, rules: LeadRules, today: date | None = None) -> None:
        self.rules = rules
        self.today = today or date.today()
        self.geo_matcher = GeoMatcher(rules.geo_keywords)
        self.extractor = CompanyExtractor(rules)
        self.funding_parser = FundingParser()
        self.scorer = Scorer(rules, today=self.today)
        self.validator = LeadValidator(rules)

    def evaluate_news(self, record: RawRecord, query: SignalQuery) -> tuple[Lead | None, str | None]:
        geo = self._geo(record)
        if not geo:
            return None, SKIP_NOT_GEO_RELEVANT

        company = self.extractor.extract_news(
            record.title,
            record.snippet,
            record.link,
            query_pattern=query.pattern,
            fallback_source=record.source_name,
        )
        if not company:
            return None, SKIP_MISSING_COMPANY

        funding = self.funding_parser.parse(record.text)
        score = self.scorer.score(
            query.name,
            record.text,
            funding,
            True,
            record.platform,
            company=company,
            link=record.link,
        )
        lead = Lead(
            company=company,
            type=query.name,
            score=score,
            funding=funding,
            geo=", ".join(geo),
            source=record.source_name,
            link=record.link,
            title=record.title,
            description=record.snippet,
            published_at=record.published_at,
            platform=record.platform,
            industries=match_keywords(record.text, self.rules.industry_keywords),
        )
        return self._gate(lead)

    def evaluate_job(self, record: RawRecord, platform: str | None = None) -> tuple[Lead | None, str | None]:
        geo = self._geo(record)
        if not geo:
            return None, SKIP_NOT_GEO_RELEVANT

        company = self.extractor.extract_job(record.title, record.snippet, record.link)
        if not company:
            return None, SKIP_MISSING_COMPANY

        active_platform = platform or record.platform
        freshness = detect_freshness(record.published_at, record.text, self.today)
        signal_type = classify_job_signal(freshness, record.link, active_platform, self.rules)
        score = self.scorer.score(
            signal_type,
            record.text,
            None,
            True,
            active_platform,
            freshness.hint if freshness else None,
            company=company,
            link=record.link,
        )
        lead = Lead(
            company=company,
            type=signal_type,
            score=score,
            geo=", ".join(geo),
            source=active_platform or record.source_name,
            link=record.link,
            title=record.title,
            description=record.snippet,
            published_at=record.published_at,
            platform=active_platform,
            job_type=classify_job_level(record.title),
            posting_freshness=freshness,
            industries=match_keywords(record.text, self.rules.industry_keywords),
        )
        return self._gate(lead)

    def process_news_record(self, record: RawRecord, query: SignalQuery) -> Lead | None:
        lead, _ = self.evaluate_news(record, query)
        return lead

    def process_job_record(self, record: RawRecord, platform: str | None = None) -> Lead | None:
        lead, _ = self.evaluate_job(record, platform)
        return lead

    def run_news_batch(self, records: Iterable[RawRecord], query: SignalQuery) -> LeadBatchResult:
        result = self._run(records, lambda record: self.evaluate_news(record, query))
        logger.info(
            "News batch complete. query=%s total=%s accepted=%s skipped=%s",
            query.name,
            result.stats.items_total,
            len(result.leads),
            result.stats.items_skipped,
        )
        return result

    def run_job_batch(self, records: Iterable[RawRecord], platform: str | None = None) -> LeadBatchResult:
        result = self._run(records, lambda record: self.evaluate_job(record, platform))
        result.leads = self._cap_per_platform(result.leads, result.stats)
        logger.info(
            "Job batch complete. platform=%s total=%s accepted=%s skipped=%s capped=%s",
            platform or "mixed",
            result.stats.items_total,
            len(result.leads),
            result.stats.items_skipped,
            result.stats.capped_by_platform,
        )
        return result

    def _run(self, records: Iterable[RawRecord], evaluate) -> LeadBatchResult:
        result = LeadBatchResult()
        accepted: list[Lead] = []
        for idx, record in enumerate(records, start=1):
            result.stats.record_total()
            lead, reason = evaluate(record)
            if lead is None:
                result.stats.record_skipped(reason)
                result.skipped.append({"index": idx, "skip_reason": reason, "title": record.title[:80]})
                logger.debug("Record skipped index=%s reason=%s", idx, reason)
                continue
            result.stats.record_accepted()
            accepted.append(lead)
        result.leads = sort_and_dedupe(accepted)
        result.stats.duplicates_removed = len(accepted) - len(result.leads)
        return result

    def _cap_per_platform(self, leads: list[Lead], stats: PipelineStats) -> list[Lead]:
        limit = self.rules.thresholds.max_items_per_platform
        counts: Counter = Counter()
        kept: list[Lead] = []
        for lead in leads:
            key = (lead.platform or lead.source or "").lower()
            if counts[key] >= limit:
                stats.capped_by_platform += 1
                continue
            counts[key] += 1
            kept.append(lead)
        return kept

    def _geo(self, record: RawRecord) -> tuple[str, ...]:
        return self.geo_matcher.match(" ".join(part for part in (record.text, record.location) if part))

    def _gate(self, lead: Lead) -> tuple[Lead | None, str | None]:
        if not self.validator.accepts(lead):
            return None, SKIP_REJECTED_BY_VALIDATOR
        return lead, None


def merge_batches(results: Iterable[LeadBatchResult]) -> LeadBatchResult:
    """Combine per-query/per-platform batches into one sorted, deduplicated result."""
    merged = LeadBatchResult()
    combined: list[Lead] = []
    for result in results:
        combined.extend(result.leads)
        merged.skipped.extend(result.skipped)
        merged.stats.absorb(result.stats)
    merged.leads = sort_and_dedupe(combined)
    merged.stats.duplicates_removed += len(combined) - len(merged.leads)
    return merged
