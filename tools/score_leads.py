"""Score raw news/job records into deduplicated leads.

Usage:
    python -m tools.score_leads --input leads/raw.json --output leads/scored.json --kind news --query funding
"""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from app.config import settings
from pipelines.io.lead_sheet import append_leads
from pipelines.io.record_loader import BATCH_KINDS, RecordBatch, RecordLoadError, load_batches
from pipelines.leads.lead_pipeline import LeadBatchResult, LeadPipeline, merge_batches
from pipelines.leads.rules import LeadRules, LeadRulesError, load_rules

logger = logging.getLogger("tools.score_leads")


def score_batches(batches: Sequence[RecordBatch], rules: LeadRules, *, today: date | None = None) -> LeadBatchResult:
    pipeline = LeadPipeline(rules, today=today)
    results = []
    for batch in batches:
        if batch.kind == "news":
            results.append(pipeline.run_news_batch(batch.records, rules.signal_query(batch.query)))
        else:
            results.append(pipeline.run_job_batch(batch.records, batch.platform))
    return merge_batches(results)


def build_payload(result: LeadBatchResult, rules: LeadRules) -> dict:
    stats = result.stats.as_dict()
    return {
        "ruleset_version": rules.version,
        "ruleset_sha256": rules.ruleset_sha256,
        **stats,
        "leads_total": len(result.leads),
        "leads": [lead.model_dump(mode="json") for lead in result.leads],
        "skipped": result.skipped,
    }


def write_output(output_path: Path, payload: dict) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as outfile:
        json.dump(payload, outfile, indent=2, ensure_ascii=False, default=str)
        outfile.write("\n")


def score_file(
    input_path: Path,
    output_path: Path,
    *,
    rules_path: Path | None = None,
    sheet_path: Path | None = None,
    kind: str | None = None,
    query: str | None = None,
    platform: str | None = None,
    today: date | None = None,
) -> dict:
    rules = load_rules(rules_path)
    batches = load_batches(input_path, kind=kind, query=query, platform=platform)
    run_date = today or date.today()
    result = score_batches(batches, rules, today=run_date)
    payload = build_payload(result, rules)
    if sheet_path is not None:
        payload["sheet_rows_written"] = append_leads(sheet_path, result.leads, run_date)
    write_output(output_path, payload)
    logger.info(
        "Scoring complete. items_total=%s accepted=%s leads=%s duplicates=%s ruleset=%s",
        payload["items_total"],
        payload["items_accepted"],
        payload["leads_total"],
        payload["duplicates_removed"],
        payload["ruleset_version"],
    )
    return payload


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Score raw news/job records into leads.")
    parser.add_argument("--input", type=Path, required=True, help="Raw records JSON/JSONL(.gz).")
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.lead_output_dir / "leads.scored.json",
        help="Destination for the scored JSON payload.",
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=settings.lead_rules_path,
        help="Path to lead rules YAML (defaults to configs/lead_rules.v1.yaml).",
    )
    parser.add_argument("--sheet", type=Path, default=settings.lead_sheet_path, help="Optional CSV lead sheet to append to.")
    parser.add_argument("--kind", choices=BATCH_KINDS, help="Batch kind for bare record lists.")
    parser.add_argument("--query", help="Signal query name for bare news record lists.")
    parser.add_argument("--platform", help="Platform tag for bare job record lists.")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s).")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    try:
        score_file(
            args.input,
            args.output,
            rules_path=args.rules,
            sheet_path=args.sheet,
            kind=args.kind,
            query=args.query,
            platform=args.platform,
        )
    except RecordLoadError as exc:
        logger.error("Input load failed code=%s: %s", exc.code, exc)
        return 1
    except LeadRulesError as exc:
        logger.error("Rules load failed code=%s: %s", exc.code, exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
