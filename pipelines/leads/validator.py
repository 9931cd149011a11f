"""Quality gates applied to fully constructed leads."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pipelines.io.schemas import Lead
from pipelines.leads.company_extractor import MAX_COMPANY_LENGTH
from pipelines.leads.rules import LeadRules

logger = logging.getLogger("pipelines.leads.validator")

MAX_NEWS_COMPANY_LENGTH = 80


@dataclass(frozen=True)
class LeadGate:
    blacklist: frozenset[str]
    max_length: int
    min_score: int

    def passes(self, lead: Lead) -> bool:
        company = (lead.company or "").strip()
        if not 2 <= len(company) <= self.max_length:
            return False
        if not company[0].isalpha():
            return False
        if company.lower() in self.blacklist:
            return False
        if not lead.geo:
            return False
        return lead.score >= self.min_score


class LeadValidator:
    """News and job leads share one gate shape with origin-specific limits."""

    def __init__(self, rules: LeadRules) -> None:
        thresholds = rules.thresholds
        self.news_gate = LeadGate(rules.news_name_blacklist, MAX_NEWS_COMPANY_LENGTH, thresholds.min_score_news)
        self.job_gate = LeadGate(rules.job_name_blacklist, MAX_COMPANY_LENGTH, thresholds.min_score_jobs)

    def accepts(self, lead: Lead) -> bool:
        gate = self.job_gate if lead.origin == "job" else self.news_gate
        accepted = gate.passes(lead)
        if not accepted:
            logger.debug("Lead rejected origin=%s company=%s score=%s", lead.origin, lead.company, lead.score)
        return accepted


def validate_news_lead(lead: Lead, rules: LeadRules) -> bool:
    return LeadValidator(rules).news_gate.passes(lead)


def validate_job_lead(lead: Lead, rules: LeadRules) -> bool:
    return LeadValidator(rules).job_gate.passes(lead)
