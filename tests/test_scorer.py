from datetime import date

import pytest

from pipelines.io.schemas import FundingAmount
from pipelines.leads.scorer import Scorer


@pytest.fixture
def scorer(rules) -> Scorer:
    return Scorer(rules, today=date(2024, 6, 15))


def _funding(lakhs: float) -> FundingAmount:
    return FundingAmount(raw_text=f"{lakhs} lakh", inr_minor_units=int(lakhs * 100_000), lakhs=lakhs)


@pytest.mark.parametrize(
    "candidate_type,expected",
    [
        ("funding", 10),
        ("expansion", 10),
        ("jobs", 20),
        ("linkedin", 20),
        ("job_announcement", 25),
        ("job_posting", 30),
        ("fresh_job_posting", 40),
    ],
)
def test_base_score_by_signal_type(scorer, candidate_type: str, expected: int):
    assert scorer.score(candidate_type, "Acme update", None, True) == expected


def test_hiring_keywords_add_per_distinct_match(scorer):
    assert scorer.score("funding", "Acme is hiring", None, True) == 20
    assert scorer.score("funding", "Acme is hiring, hiring and recruiting", None, True) == 30
    assert scorer.score("job_posting", "Acme is hiring, recruiting", None, True) == 40


def test_score_is_monotonic_in_hiring_keywords(scorer):
    texts = [
        "Acme update",
        "Acme update hiring",
        "Acme update hiring recruiting",
        "Acme update hiring recruiting talent",
        "Acme update hiring recruiting talent vacancies",
    ]
    for candidate_type in ("funding", "jobs", "job_posting"):
        scores = [scorer.score(candidate_type, text, None, True) for text in texts]
        assert scores == sorted(scores)
        assert scores[-1] > scores[0]


def test_india_hiring_bonus_compounds_with_geo(scorer):
    text = "Walk-in drive for freshers"

    assert scorer.score("jobs", text, None, True) == 60
    assert scorer.score("jobs", text, None, False) == 40
    assert scorer.score("jobs", "Acme update", None, True) == 20


@pytest.mark.parametrize("lakhs,expected", [(100, 30), (1000, 60), (8, 12), (0, 10)])
def test_funding_boost_is_soft_capped(scorer, lakhs: float, expected: int):
    assert scorer.score("funding", "Acme raises", _funding(lakhs), True) == expected


def test_funding_boost_only_for_funding_type(scorer):
    assert scorer.score("expansion", "Acme expands", _funding(100), True) == 10


def test_freshness_boosts_job_paths(scorer):
    assert scorer.score("fresh_job_posting", "Backend Engineer", None, True, None, "2 hours ago") == 55
    assert scorer.score("job_posting", "Backend Engineer", None, True, None, "yesterday") == 40
    assert scorer.score("job_posting", "Backend Engineer, apply by June 2024", None, True) == 33
    assert scorer.score("job_announcement", "Urgent walk-in interview", None, False) == 50


def test_freshness_ignored_for_news(scorer):
    assert scorer.score("jobs", "Acme update", None, True, None, "2 hours ago") == 20


def test_platform_boost(scorer):
    assert scorer.score("job_posting", "Backend Engineer", None, True, "LinkedIn") == 40
    assert scorer.score("job_posting", "Backend Engineer", None, True, "Google Jobs") == 33
    assert scorer.score("job_posting", "Backend Engineer", None, True, "google-jobs") == 33
    assert scorer.score("job_posting", "Backend Engineer", None, True, "unknown-board") == 30


def test_well_known_and_self_sourced_boosts(scorer):
    assert scorer.score("expansion", "Update", None, True, company="Tata Consultancy") == 25
    assert scorer.score(
        "job_posting", "Backend Engineer", None, True, company="Zeta", link="https://www.zeta.tech/careers"
    ) == 40
    assert scorer.score(
        "job_posting", "Backend Engineer", None, True, company="Zeta", link="https://www.linkedin.com/jobs/1"
    ) == 30


def test_breakdown_totals_match_score(scorer):
    breakdown = scorer.breakdown("funding", "Acme is hiring", _funding(100), True)

    assert breakdown.base == 10
    assert breakdown.keywords == 10
    assert breakdown.funding == 20
    assert breakdown.total == 40
