import gzip
import json
from pathlib import Path

import pytest

from pipelines.io.record_loader import RecordLoadError, load_batches


def _write_json(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def test_bare_list_uses_caller_kind_and_query(tmp_path: Path):
    path = _write_json(tmp_path / "news.json", [{"title": "Acme raises ₹2 crore", "url": "https://a.example"}])

    batches = load_batches(path, kind="news", query="funding")

    assert len(batches) == 1
    assert batches[0].kind == "news"
    assert batches[0].query == "funding"
    assert batches[0].platform is None
    assert batches[0].records[0].link == "https://a.example"


def test_envelope_and_envelope_list(tmp_path: Path):
    envelope = {"kind": "jobs", "platform": "naukri", "records": [{"title": "Zeta is hiring"}]}
    single = load_batches(_write_json(tmp_path / "jobs.json", envelope))
    many = load_batches(
        _write_json(
            tmp_path / "mixed.json",
            [envelope, {"kind": "news", "query": "expansion", "records": [{"title": "Acme opens Pune office"}]}],
        )
    )

    assert single[0].platform == "naukri"
    assert [batch.kind for batch in many] == ["jobs", "news"]
    assert many[1].query == "expansion"


def test_gzipped_jsonl(tmp_path: Path):
    path = tmp_path / "jobs.jsonl.gz"
    lines = [json.dumps({"title": "Zeta is hiring"}), json.dumps({"title": "Acme is hiring"})]
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        handle.write("\n".join(lines) + "\n")

    batches = load_batches(path, kind="jobs", platform="indeed")

    assert [record.title for record in batches[0].records] == ["Zeta is hiring", "Acme is hiring"]
    assert batches[0].platform == "indeed"


def test_missing_file(tmp_path: Path):
    with pytest.raises(RecordLoadError) as exc:
        load_batches(tmp_path / "missing.json", kind="news", query="funding")
    assert exc.value.code == "INPUT_NOT_FOUND"


def test_invalid_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("[not json", encoding="utf-8")

    with pytest.raises(RecordLoadError) as exc:
        load_batches(path, kind="news", query="funding")
    assert exc.value.code == "INPUT_INVALID_JSON"


@pytest.mark.parametrize(
    "payload,kwargs",
    [
        ([{"title": "Acme raises"}], {"kind": "news"}),
        ([{"title": "Acme raises"}], {}),
        ([{"snippet": "no title"}], {"kind": "jobs"}),
        ([["not", "an", "object"]], {"kind": "jobs"}),
        ({"kind": "rss", "records": []}, {}),
    ],
)
def test_schema_errors(tmp_path: Path, payload, kwargs):
    path = _write_json(tmp_path / "input.json", payload)

    with pytest.raises(RecordLoadError) as exc:
        load_batches(path, **kwargs)
    assert exc.value.code == "INPUT_SCHEMA_INVALID"
