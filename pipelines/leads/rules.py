"""Loader/validator for the lead extraction and scoring ruleset."""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pipelines.io.schemas import SignalQuery

logger = logging.getLogger("pipelines.leads.rules")

DEFAULT_RULES_PATH = Path(__file__).resolve().parents[2] / "configs" / "lead_rules.v1.yaml"
REQUIRED_KEYWORD_LISTS = (
    "geo_keywords",
    "hiring_keywords",
    "india_hiring_keywords",
    "news_blacklist",
    "job_blacklist",
)


def platform_key(platform: str | None) -> str:
    """Normalize a platform tag ("Google Jobs", "google-jobs") to its boost key ("google_jobs")."""
    return re.sub(r"[\s-]+", "_", (platform or "").strip().lower())


class LeadRulesError(RuntimeError):
    """Raised when the lead ruleset cannot be loaded or validated."""

    def __init__(self, message: str, code: str = "RULES_LOAD_ERROR") -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class ScoreWeights:
    news_base: float = 10
    news_hiring_base: float = 20
    job_announcement_base: float = 25
    job_posting_base: float = 30
    fresh_job_posting_base: float = 40
    news_keyword_points: float = 10
    job_keyword_points: float = 5
    india_keyword_points: float = 10
    india_geo_bonus: float = 20
    funding_divisor: float = 5
    funding_cap: float = 50
    fresh_hours_points: float = 15
    fresh_day_points: float = 10
    fresh_year_points: float = 3
    immediate_points: float = 5
    urgent_points: float = 5
    walk_in_points: float = 10
    well_known_points: float = 15
    self_sourced_points: float = 10


@dataclass(frozen=True)
class Thresholds:
    min_score_news: int = 15
    min_score_jobs: int = 20
    max_items_per_platform: int = 10


@dataclass(frozen=True)
class LeadRules:
    """Versioned keyword lists, weights and floors consumed by the lead engine."""

    version: str
    geo_keywords: tuple[str, ...]
    industry_keywords: tuple[str, ...]
    hiring_keywords: tuple[str, ...]
    india_hiring_keywords: tuple[str, ...]
    news_blacklist: frozenset[str]
    job_blacklist: frozenset[str]
    job_board_domains: frozenset[str]
    well_known_companies: tuple[str, ...]
    platform_boosts: Mapping[str, float]
    signal_queries: Mapping[str, SignalQuery]
    weights: ScoreWeights
    thresholds: Thresholds
    ruleset_sha256: str

    @property
    def news_name_blacklist(self) -> frozenset[str]:
        """Words never accepted as a news company name; geography names included."""
        return self.news_blacklist | self._geo_terms

    @property
    def job_name_blacklist(self) -> frozenset[str]:
        return self.job_blacklist | self._geo_terms

    @property
    def _geo_terms(self) -> frozenset[str]:
        return frozenset(keyword.lower() for keyword in self.geo_keywords)

    def platform_boost(self, platform: str | None) -> float | None:
        """Configured boost for a platform tag, or None when the platform is not recognized."""
        key = platform_key(platform)
        if not key:
            return None
        return self.platform_boosts.get(key)

    def signal_query(self, name: str) -> SignalQuery:
        try:
            return self.signal_queries[name]
        except KeyError as exc:
            raise LeadRulesError(f"Unknown signal query: {name}", code="RULES_UNKNOWN_QUERY") from exc


_RULE_CACHE: dict[Path, LeadRules] = {}


def load_rules(path: Path | None = None) -> LeadRules:
    """Load, validate and cache a lead ruleset from YAML."""
    target = (path or DEFAULT_RULES_PATH).expanduser().resolve()
    cached = _RULE_CACHE.get(target)
    if cached:
        return cached
    if not target.exists():
        raise LeadRulesError(f"Ruleset not found at {target}", code="RULES_LOAD_ERROR")
    try:
        parsed = yaml.safe_load(target.read_bytes().decode("utf-8"))
    except yaml.YAMLError as exc:
        raise LeadRulesError(f"Unable to parse YAML: {exc}", code="RULES_SCHEMA_INVALID") from exc
    rules = parse_rules(parsed)
    _RULE_CACHE[target] = rules
    logger.info("Loaded lead rules version=%s sha=%s path=%s", rules.version, rules.ruleset_sha256, target)
    return rules


def parse_rules(parsed: Any) -> LeadRules:
    """Validate an already-decoded ruleset mapping."""
    if not isinstance(parsed, Mapping):
        raise LeadRulesError("Ruleset must be a mapping.", code="RULES_SCHEMA_INVALID")

    version = str(parsed.get("version") or "").strip()
    if not version:
        raise LeadRulesError("version is required.", code="RULES_SCHEMA_INVALID")
    for key in REQUIRED_KEYWORD_LISTS:
        if not _as_tuple(parsed.get(key)):
            raise LeadRulesError(f"{key} must be a non-empty list.", code="RULES_SCHEMA_INVALID")

    canonical = json.dumps(parsed, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return LeadRules(
        version=version,
        geo_keywords=_as_tuple(parsed.get("geo_keywords")),
        industry_keywords=_as_tuple(parsed.get("industry_keywords")),
        hiring_keywords=_as_tuple(parsed.get("hiring_keywords")),
        india_hiring_keywords=_as_tuple(parsed.get("india_hiring_keywords")),
        news_blacklist=_lowered(parsed.get("news_blacklist")),
        job_blacklist=_lowered(parsed.get("job_blacklist")),
        job_board_domains=_lowered(parsed.get("job_board_domains")),
        well_known_companies=_as_tuple(parsed.get("well_known_companies")),
        platform_boosts=_numeric_mapping(parsed.get("platform_boosts"), "platform_boosts"),
        signal_queries=_signal_queries(parsed.get("signal_queries")),
        weights=_dataclass_section(ScoreWeights, parsed.get("scoring"), "scoring"),
        thresholds=_dataclass_section(Thresholds, parsed.get("thresholds"), "thresholds"),
        ruleset_sha256=hashlib.sha256(canonical.encode("utf-8")).hexdigest(),
    )


def _as_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, Sequence):
        items = [item for item in value if isinstance(item, str)]
    else:
        items = []
    return tuple(item.strip() for item in items if item.strip())


def _lowered(value: Any) -> frozenset[str]:
    return frozenset(item.lower() for item in _as_tuple(value))


def _numeric_mapping(value: Any, name: str) -> dict[str, float]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise LeadRulesError(f"{name} must be a mapping when provided.", code="RULES_SCHEMA_INVALID")
    normalized: dict[str, float] = {}
    for key, amount in value.items():
        if not isinstance(amount, int | float) or isinstance(amount, bool):
            raise LeadRulesError(f"{name}[{key}] must be numeric.", code="RULES_SCHEMA_INVALID")
        normalized[platform_key(str(key))] = float(amount)
    return normalized


def _signal_queries(value: Any) -> dict[str, SignalQuery]:
    if not isinstance(value, Sequence) or isinstance(value, str) or not value:
        raise LeadRulesError("signal_queries must be a non-empty list.", code="RULES_SCHEMA_INVALID")
    queries: dict[str, SignalQuery] = {}
    for entry in value:
        if not isinstance(entry, Mapping):
            raise LeadRulesError("signal_queries entries must be mappings.", code="RULES_SCHEMA_INVALID")
        try:
            query = SignalQuery(name=entry.get("name"), pattern=entry.get("pattern"))
        except ValidationError as exc:
            raise LeadRulesError(f"Invalid signal query {entry.get('name')!r}: {exc}", code="RULES_SCHEMA_INVALID") from exc
        try:
            re.compile(query.pattern)
        except re.error as exc:
            raise LeadRulesError(f"Invalid pattern for {query.name}: {exc}", code="RULES_SCHEMA_INVALID") from exc
        queries[query.name] = query
    return queries


def _dataclass_section(cls: type, value: Any, name: str):
    if value is None:
        return cls()
    if not isinstance(value, Mapping):
        raise LeadRulesError(f"{name} must be a mapping when provided.", code="RULES_SCHEMA_INVALID")
    known = {field.name for field in fields(cls)}
    unknown = sorted(set(value) - known)
    if unknown:
        raise LeadRulesError(f"{name} has unknown keys: {', '.join(unknown)}", code="RULES_SCHEMA_INVALID")
    for key, amount in value.items():
        if not isinstance(amount, int | float) or isinstance(amount, bool) or amount < 0:
            raise LeadRulesError(f"{name}[{key}] must be a non-negative number.", code="RULES_SCHEMA_INVALID")
    return cls(**value)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lead rules loader/validator.")
    parser.add_argument("--rules", type=Path, default=DEFAULT_RULES_PATH, help="Path to lead rules YAML.")
    parser.add_argument("--print-sha", action="store_true", help="Print the ruleset sha256 and exit.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    args = parse_args(argv or [])
    try:
        rules = load_rules(args.rules)
    except LeadRulesError as exc:
        logger.error("%s (code=%s)", exc, exc.code)
        return 1
    if args.print_sha:
        print(rules.ruleset_sha256)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
