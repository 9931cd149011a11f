from datetime import date

import pytest

from pipelines.leads.rules import LeadRules, load_rules

TODAY = date(2024, 6, 15)


@pytest.fixture
def rules() -> LeadRules:
    return load_rules()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def minimal_ruleset() -> dict:
    return {
        "version": "v-test",
        "geo_keywords": ["India", "Pune"],
        "hiring_keywords": ["hiring"],
        "india_hiring_keywords": ["walk-in"],
        "news_blacklist": ["company"],
        "job_blacklist": ["jobs"],
        "signal_queries": [
            {"name": "funding", "pattern": r"^([A-Z]\w+)\s+raises\b"},
        ],
    }
