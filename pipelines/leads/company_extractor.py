"""Company name extraction from noisy titles, snippets and links.

Extraction walks an ordered chain of strategies and the first strategy producing an
acceptable name wins. News and job records use different chains and blacklists but the
same strategy objects, so heuristics can be added or reordered independently.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Protocol

from pipelines.io.urls import host_of, normalize_domain
from pipelines.leads.rules import LeadRules

logger = logging.getLogger("pipelines.leads.company_extractor")

Origin = Literal["news", "job"]

MAX_COMPANY_LENGTH = 40
MAX_DOMAIN_NAME_LENGTH = 30

_EDGE_CHARS = " \t\"'“”‘’,.:;|-–—"
_LEADING_THE = re.compile(r"^the\s+", re.IGNORECASE)
_POSSESSIVE = re.compile(r"['’]s$", re.IGNORECASE)
_LEGAL_SUFFIX = re.compile(
    r"[\s,]+(?:inc|incorporated|ltd|limited|llc|llp|plc|pvt|private|corp|corporation)\.?$",
    re.IGNORECASE,
)
_VOWEL = re.compile(r"[aeiou]", re.IGNORECASE)

_NAME = r"(?P<company>[A-Z][\w&.'-]*(?:\s+[A-Z][\w&.'-]*){0,3})"
_MULTIWORD = re.compile(r"\b[A-Z][\w&'-]*(?:\s+[A-Z][\w&'-]*){1,4}")
_SINGLE_WORD = re.compile(r"\b[A-Z][\w&'-]+")

JOB_TEXT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("is_hiring", re.compile(rf"{_NAME}\s+(?i:is|are)\s+(?i:hiring)\b")),
    ("join", re.compile(rf"\b(?i:join)\s+{_NAME}")),
    ("has_openings", re.compile(rf"{_NAME}\s+(?i:has)\s+(?:\w+\s+)?(?i:openings?)\b")),
    ("careers_at", re.compile(rf"\b(?i:careers?\s+at)\s+{_NAME}")),
    ("dash_hiring", re.compile(rf"{_NAME}\s+[-–—]\s+(?i:hiring)\b")),
    ("pipe_hiring", re.compile(rf"{_NAME}\s*\|\s*(?i:hiring)\b")),
    ("role_at", re.compile(rf"\b(?i:software\s+engineer|developer|engineer)\s+(?i:at|in)\s+{_NAME}")),
)


def clean_company_name(value: str | None) -> str:
    """Strip leading "The", legal suffixes and possessives; collapse whitespace."""
    cleaned = re.sub(r"\s+", " ", value or "").strip(_EDGE_CHARS)
    previous = None
    while cleaned != previous:
        previous = cleaned
        cleaned = _LEADING_THE.sub("", cleaned)
        cleaned = _POSSESSIVE.sub("", cleaned)
        cleaned = _LEGAL_SUFFIX.sub("", cleaned)
        cleaned = cleaned.strip(_EDGE_CHARS)
    return cleaned


def is_acceptable_candidate(name: str | None, blacklist: Iterable[str]) -> bool:
    """Shape check shared by every strategy: letter first, not generic, not a stray token."""
    if not name:
        return False
    if not name[0].isalpha():
        return False
    if name.lower() in blacklist:
        return False
    return " " in name or len(name) > 2


@lru_cache(maxsize=8)
def _edge_regex(blacklist: frozenset[str]) -> re.Pattern[str] | None:
    terms = sorted((re.escape(term) for term in blacklist if term), key=len, reverse=True)
    if not terms:
        return None
    joined = "|".join(terms)
    return re.compile(rf"^(?:{joined})\b|\b(?:{joined})$")


def is_valid_company_name(name: str | None, blacklist: frozenset[str]) -> bool:
    """Stricter predicate for job-derived names."""
    if not name:
        return False
    candidate = name.strip()
    if len(candidate) < 2 or len(candidate) > MAX_COMPANY_LENGTH:
        return False
    if not candidate[0].isalpha():
        return False
    lowered = candidate.lower()
    if lowered in blacklist:
        return False
    edge = _edge_regex(blacklist)
    if edge is not None and edge.search(lowered):
        return False
    if not _VOWEL.search(candidate):
        return False
    if candidate.isupper() and len(candidate) > 4:
        return False
    return True


@lru_cache(maxsize=32)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


@dataclass(frozen=True)
class ExtractionContext:
    title: str
    snippet: str
    link: str
    query_pattern: str | None
    fallback_source: str | None
    accept: Callable[[str], bool]

    @property
    def text(self) -> str:
        return " ".join(part for part in (self.title, self.snippet) if part)


class ExtractionStrategy(Protocol):
    name: str

    def extract(self, context: ExtractionContext) -> str | None:
        ...


class QueryPatternStrategy:
    name = "query_pattern"

    def __init__(self, blacklist: frozenset[str]) -> None:
        self._blacklist = blacklist

    def extract(self, context: ExtractionContext) -> str | None:
        if not context.query_pattern or not context.title:
            return None
        match = _compiled(context.query_pattern).search(context.title)
        if not match:
            return None
        raw = match.group(1) if match.re.groups else match.group(0)
        candidate = clean_company_name(raw)
        if is_acceptable_candidate(candidate, self._blacklist):
            return candidate
        return None


class DomainStrategy:
    """Name from the link's registrable domain, ignoring job boards and social sites."""

    name = "domain"

    def __init__(self, job_board_domains: frozenset[str], blacklist: frozenset[str]) -> None:
        self._job_board_domains = job_board_domains
        self._blacklist = blacklist

    def extract(self, context: ExtractionContext) -> str | None:
        host = host_of(context.link)
        if not host or "." not in host:
            return None
        if host.startswith("careers."):
            host = host[len("careers.") :]
        domain = normalize_domain(host)
        if domain in self._job_board_domains:
            return None
        label = domain.split(".", 1)[0]
        if not label or label.isdigit():
            return None
        candidate = " ".join(segment.capitalize() for segment in re.split(r"[-_]+", label) if segment)
        if not 2 <= len(candidate) <= MAX_DOMAIN_NAME_LENGTH:
            return None
        if candidate.lower() in self._blacklist:
            return None
        return candidate


class TextPatternStrategy:
    def __init__(self, name: str, pattern: re.Pattern[str]) -> None:
        self.name = name
        self._pattern = pattern

    def extract(self, context: ExtractionContext) -> str | None:
        for match in self._pattern.finditer(context.text):
            candidate = clean_company_name(match.group("company"))
            if context.accept(candidate):
                return candidate
        return None


class CapitalizedPhraseStrategy:
    """Longest run of capitalized words in the combined text."""

    name = "capitalized_phrase"

    def extract(self, context: ExtractionContext) -> str | None:
        phrases = sorted(_MULTIWORD.findall(context.text), key=len, reverse=True)
        for phrase in phrases:
            candidate = clean_company_name(phrase)
            if context.accept(candidate):
                return candidate
        return None


class CapitalizedWordStrategy:
    name = "capitalized_word"

    def extract(self, context: ExtractionContext) -> str | None:
        for word in _SINGLE_WORD.findall(context.text):
            candidate = clean_company_name(word)
            if context.accept(candidate):
                return candidate
        return None


class SourceNameStrategy:
    """Publisher name as the last resort for news records."""

    name = "source_name"

    def extract(self, context: ExtractionContext) -> str | None:
        candidate = clean_company_name(context.fallback_source)
        if context.accept(candidate):
            return candidate
        return None


class CompanyExtractor:
    """Resolve a display company name for news- and job-derived records."""

    def __init__(self, rules: LeadRules) -> None:
        self.rules = rules
        self.news_chain: tuple[ExtractionStrategy, ...] = (
            QueryPatternStrategy(rules.news_name_blacklist),
            CapitalizedPhraseStrategy(),
            CapitalizedWordStrategy(),
            SourceNameStrategy(),
        )
        self.job_chain: tuple[ExtractionStrategy, ...] = (
            QueryPatternStrategy(rules.job_name_blacklist),
            DomainStrategy(rules.job_board_domains, rules.job_name_blacklist),
            *(TextPatternStrategy(name, pattern) for name, pattern in JOB_TEXT_PATTERNS),
            CapitalizedPhraseStrategy(),
            CapitalizedWordStrategy(),
        )

    def extract(
        self,
        title: str,
        snippet: str = "",
        link: str = "",
        query_pattern: str | None = None,
        fallback_source: str | None = None,
        *,
        origin: Origin = "news",
    ) -> str | None:
        if title is None:
            raise TypeError("title must be a string")
        context = ExtractionContext(
            title=title.strip(),
            snippet=(snippet or "").strip(),
            link=(link or "").strip(),
            query_pattern=query_pattern,
            fallback_source=fallback_source if origin == "news" else None,
            accept=self._acceptor(origin),
        )
        chain = self.job_chain if origin == "job" else self.news_chain
        return run_chain(chain, context)

    def extract_news(
        self,
        title: str,
        snippet: str = "",
        link: str = "",
        query_pattern: str | None = None,
        fallback_source: str | None = None,
    ) -> str | None:
        return self.extract(title, snippet, link, query_pattern, fallback_source, origin="news")

    def extract_job(
        self,
        title: str,
        snippet: str = "",
        link: str = "",
        query_pattern: str | None = None,
    ) -> str | None:
        return self.extract(title, snippet, link, query_pattern, origin="job")

    def _acceptor(self, origin: Origin) -> Callable[[str], bool]:
        if origin == "job":
            blacklist = self.rules.job_name_blacklist
            return lambda name: is_acceptable_candidate(name, blacklist) and is_valid_company_name(name, blacklist)
        blacklist = self.rules.news_name_blacklist
        return lambda name: is_acceptable_candidate(name, blacklist)


def run_chain(chain: Sequence[ExtractionStrategy], context: ExtractionContext) -> str | None:
    for strategy in chain:
        candidate = strategy.extract(context)
        if candidate:
            logger.debug("Company extracted strategy=%s company=%s", strategy.name, candidate)
            return candidate
    return None
