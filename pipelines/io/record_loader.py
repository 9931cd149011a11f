"""Raw record batch loading (JSON, JSONL, gzip)."""

from __future__ import annotations

import gzip
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError

from pipelines.io.schemas import RawRecord

logger = logging.getLogger("pipelines.io.record_loader")

BatchKind = Literal["news", "jobs"]
BATCH_KINDS = ("news", "jobs")


class RecordLoadError(RuntimeError):
    """Raised when an input batch file cannot be read or is malformed."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass
class RecordBatch:
    """Records produced by one signal query (news) or one platform search (jobs)."""

    kind: BatchKind
    records: list[RawRecord] = field(default_factory=list)
    query: str | None = None
    platform: str | None = None


def read_payload(path: Path) -> Any:
    """Decode a JSON document or a JSONL stream, transparently gunzipping."""
    if not path.exists():
        raise RecordLoadError("INPUT_NOT_FOUND", f"Input file not found: {path}")
    opener = gzip.open if path.suffix == ".gz" else open
    try:
        with opener(path, "rt", encoding="utf-8") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise RecordLoadError("INPUT_UNREADABLE", f"Unable to read {path}: {exc}") from exc
    stripped = text.lstrip()
    try:
        if stripped.startswith(("[", "{")) and not _looks_like_jsonl(stripped):
            return json.loads(text)
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    except json.JSONDecodeError as exc:
        raise RecordLoadError("INPUT_INVALID_JSON", f"Failed to parse {path}: {exc}") from exc


def _looks_like_jsonl(text: str) -> bool:
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2 or not lines[0].lstrip().startswith("{"):
        return False
    try:
        json.loads(lines[0])
    except json.JSONDecodeError:
        return False
    return True


def load_batches(
    path: Path,
    *,
    kind: BatchKind | None = None,
    query: str | None = None,
    platform: str | None = None,
) -> list[RecordBatch]:
    """Load record batches; bare record lists take kind/query/platform from the caller."""
    payload = read_payload(path)
    if isinstance(payload, Mapping) and "records" in payload:
        entries = [payload]
    elif isinstance(payload, list) and payload and all(_is_envelope(item) for item in payload):
        entries = payload
    elif isinstance(payload, list):
        entries = [{"kind": kind, "query": query, "platform": platform, "records": payload}]
    elif isinstance(payload, Mapping):
        entries = [{"kind": kind, "query": query, "platform": platform, "records": [payload]}]
    else:
        raise RecordLoadError("INPUT_SCHEMA_INVALID", f"Unsupported payload shape in {path}")

    batches = [_build_batch(entry, kind=kind, query=query, platform=platform) for entry in entries]
    logger.info(
        "Loaded record batches path=%s batches=%s records=%s",
        path,
        len(batches),
        sum(len(batch.records) for batch in batches),
    )
    return batches


def _is_envelope(item: Any) -> bool:
    return isinstance(item, Mapping) and isinstance(item.get("records"), list)


def _build_batch(
    entry: Mapping[str, Any],
    *,
    kind: BatchKind | None,
    query: str | None,
    platform: str | None,
) -> RecordBatch:
    batch_kind = entry.get("kind") or kind
    if batch_kind not in BATCH_KINDS:
        raise RecordLoadError("INPUT_SCHEMA_INVALID", f"Batch kind must be one of {BATCH_KINDS}, got {batch_kind!r}")
    raw_records = entry.get("records")
    if not isinstance(raw_records, list):
        raise RecordLoadError("INPUT_SCHEMA_INVALID", "Batch records must be a list.")

    records: list[RawRecord] = []
    for idx, item in enumerate(raw_records, start=1):
        if not isinstance(item, Mapping):
            raise RecordLoadError("INPUT_SCHEMA_INVALID", f"Record {idx} is not an object.")
        try:
            records.append(RawRecord.from_payload(item))
        except ValidationError as exc:
            raise RecordLoadError("INPUT_SCHEMA_INVALID", f"Record {idx} is invalid: {exc}") from exc

    batch_query = entry.get("query") or query
    if batch_kind == "news" and not batch_query:
        raise RecordLoadError("INPUT_SCHEMA_INVALID", "News batches require a signal query name.")
    return RecordBatch(
        kind=batch_kind,
        records=records,
        query=batch_query if batch_kind == "news" else None,
        platform=(entry.get("platform") or platform) if batch_kind == "jobs" else None,
    )
