from dataclasses import replace
from datetime import date

import pytest

from pipelines.io.schemas import RawRecord
from pipelines.leads.lead_pipeline import (
    SKIP_MISSING_COMPANY,
    SKIP_NOT_GEO_RELEVANT,
    SKIP_REJECTED_BY_VALIDATOR,
    LeadPipeline,
    merge_batches,
)
from pipelines.leads.rules import Thresholds

TODAY = date(2024, 6, 15)


@pytest.fixture
def pipeline(rules) -> LeadPipeline:
    return LeadPipeline(rules, today=TODAY)


def _news(title: str, snippet: str = "", source: str = "Economic Times", link: str = "") -> RawRecord:
    return RawRecord(title=title, snippet=snippet, source_name=source, link=link)


def _job(title: str, snippet: str = "", link: str = "https://www.linkedin.com/jobs/view/1", **extra) -> RawRecord:
    return RawRecord(title=title, snippet=snippet, link=link, **extra)


def test_end_to_end_funding_news(pipeline, rules):
    record = _news("TechCorp Pvt raises ₹5,00,000 in Bengaluru", "Funding for expansion in India")

    lead, reason = pipeline.evaluate_news(record, rules.signal_query("funding"))

    assert reason is None
    assert lead is not None
    assert lead.company == "TechCorp"
    assert "Bengaluru" in lead.geo
    assert lead.funding is not None
    assert lead.funding.lakhs == 5
    assert lead.score >= 15
    assert lead.type == "funding"
    assert lead.origin == "news"


def test_news_without_geography_is_skipped(pipeline, rules):
    lead, reason = pipeline.evaluate_news(_news("Acme raises ₹2 crore in Berlin"), rules.signal_query("funding"))

    assert lead is None
    assert reason == SKIP_NOT_GEO_RELEVANT


def test_words_containing_a_place_fragment_are_not_geo_relevant(pipeline, rules):
    record = _news("Acme Robotics raises capital to increase headcount in Texas")

    lead, reason = pipeline.evaluate_news(record, rules.signal_query("funding"))

    assert lead is None
    assert reason == SKIP_NOT_GEO_RELEVANT


def test_news_without_company_is_skipped(pipeline, rules):
    lead, reason = pipeline.evaluate_news(_news("funding news from india", source=""), rules.signal_query("funding"))

    assert lead is None
    assert reason == SKIP_MISSING_COMPANY


def test_low_score_news_is_rejected(pipeline, rules):
    lead, reason = pipeline.evaluate_news(_news("Acme opens office in Pune"), rules.signal_query("expansion"))

    assert lead is None
    assert reason == SKIP_REJECTED_BY_VALIDATOR


def test_location_hint_counts_for_geography(pipeline, rules):
    record = RawRecord(title="Acme is hiring 200 engineers", location="Pune, Maharashtra", source_name="Mint")

    lead = pipeline.process_news_record(record, rules.signal_query("jobs"))

    assert lead is not None
    assert lead.geo == "Pune"
    assert lead.company == "Acme"


def test_fresh_job_posting(pipeline):
    record = _job(
        "Zeta is hiring Backend Engineers in Bengaluru",
        "Immediate joiners preferred, walk-in on Saturday",
        published_at="2 hours ago",
    )

    lead, reason = pipeline.evaluate_job(record, "linkedin")

    assert reason is None
    assert lead.company == "Zeta"
    assert lead.type == "fresh_job_posting"
    assert lead.origin == "job"
    assert lead.funding is None
    assert lead.platform == "linkedin"
    assert lead.source == "linkedin"
    assert lead.job_type == "Mid-Level"
    assert lead.posting_freshness.is_recent is True
    assert lead.score == 125


def test_company_career_page_is_an_announcement(pipeline):
    record = _job("Senior Platform Engineer, Pune", link="https://careers.acmeworks.in/roles/7", published_at="5 days ago")

    lead = pipeline.process_job_record(record)

    assert lead is not None
    assert lead.company == "Acmeworks"
    assert lead.type == "job_announcement"
    assert lead.job_type == "Senior"
    assert lead.posting_freshness.is_recent is False


def test_news_batch_dedupes_and_counts(pipeline, rules):
    records = [
        _news("TechCorp Pvt raises ₹5,00,000 in Bengaluru", "Funding for expansion in India"),
        _news("TechCorp raises ₹50 lakh in Bengaluru", "Expansion and hiring across India"),
        _news("Acme raises ₹2 crore in Berlin"),
        _news("funding news from india", source=""),
    ]

    result = pipeline.run_news_batch(records, rules.signal_query("funding"))

    assert [lead.company for lead in result.leads] == ["TechCorp"]
    assert result.leads[0].funding.lakhs == 50
    assert result.stats.items_total == 4
    assert result.stats.items_accepted == 2
    assert result.stats.duplicates_removed == 1
    assert result.stats.skipped_by_reason == {SKIP_NOT_GEO_RELEVANT: 1, SKIP_MISSING_COMPANY: 1}
    assert [entry["index"] for entry in result.skipped] == [3, 4]


def test_job_batch_caps_per_platform(rules):
    capped_rules = replace(rules, thresholds=Thresholds(max_items_per_platform=2))
    pipeline = LeadPipeline(capped_rules, today=TODAY)
    records = [
        _job("Zeta is hiring Backend Engineers in Pune"),
        _job("Acme is hiring Data Analysts in Pune"),
        _job("Lumen is hiring Designers in Pune"),
    ]

    result = pipeline.run_job_batch(records, "linkedin")

    assert len(result.leads) == 2
    assert result.stats.capped_by_platform == 1
    assert all(lead.type == "job_posting" for lead in result.leads)


def test_merge_batches_sorts_and_sums(pipeline, rules):
    news = pipeline.run_news_batch(
        [_news("TechCorp Pvt raises ₹5,00,000 in Bengaluru", "Funding for expansion in India")],
        rules.signal_query("funding"),
    )
    jobs = pipeline.run_job_batch([_job("Zeta is hiring Backend Engineers in Pune")], "linkedin")

    merged = merge_batches([news, jobs])

    assert [lead.company for lead in merged.leads] == ["Zeta", "TechCorp"]
    assert merged.stats.items_total == 2
    assert merged.stats.as_dict()["items_accepted"] == 2


def test_merge_batches_removes_cross_batch_duplicates(pipeline, rules):
    record = _news("TechCorp Pvt raises ₹5,00,000 in Bengaluru", "Funding for expansion in India")
    first = pipeline.run_news_batch([record], rules.signal_query("funding"))
    second = pipeline.run_news_batch([record], rules.signal_query("funding"))

    merged = merge_batches([first, second])

    assert len(merged.leads) == 1
    assert merged.stats.duplicates_removed == 1
