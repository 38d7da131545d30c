"""Command-line interface for the UX audit engine."""

import asyncio
import json
import sys
from typing import Optional

from uxaudit.config import Config, ScoringThresholds
from uxaudit.diff import build_audit_diff
from uxaudit.exceptions import UXAuditError
from uxaudit.extractor import build_payload
from uxaudit.llm import LLMClient
from uxaudit.logging_config import setup_logging
from uxaudit.models import AuditDiff, ExtractedPage, SignalSnapshot
from uxaudit.pipeline import AnalysisResult, AuditPipeline
from uxaudit.store import AuditStore, InMemoryAuditStore, LocalSqliteAuditStore, record_from_dict
from uxaudit.utils import normalize_url


def _load_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_output(output: str, output_file: Optional[str]) -> None:
    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Results written to {output_file}")
    else:
        print(output)


def _load_thresholds(path: Optional[str]) -> ScoringThresholds:
    return ScoringThresholds.from_file(path) if path else ScoringThresholds.from_env()


def _open_store(db_path: Optional[str]) -> AuditStore:
    return LocalSqliteAuditStore(db_path) if db_path else InMemoryAuditStore()


def page_from_snapshot_file(data: dict, url: Optional[str] = None) -> ExtractedPage:
    """Build an ExtractedPage from a saved snapshot document.

    Accepts either `{"url": ..., "snapshot": {...}, "payload": ...}` or a
    bare snapshot object.
    """
    snapshot_data = data.get("snapshot", data)
    page_url = url or data.get("url") or "about:blank"
    snapshot = SignalSnapshot.from_dict(snapshot_data)
    payload = data.get("payload") or build_payload(page_url, snapshot)
    return ExtractedPage(url=page_url, snapshot=snapshot, payload=payload)


def print_analysis(result: AnalysisResult):
    """Print an analysis result in a formatted way.

    Args:
        result: AnalysisResult from the pipeline
    """
    record = result.record
    review = record.review

    print(f"\n{'=' * 60}")
    print(f"UX Audit for: {record.url}")
    print(f"{'=' * 60}")
    print(f"\n📊 UX Score: {review.score}/100")
    print(f"🩺 Website Health Score: {record.health_score}/100")
    print(f"\nSection Scores:")
    print(f"  • UX: {review.ux.score}/100")
    print(f"  • Accessibility: {review.accessibility.score}/100")
    print(f"  • SEO: {review.seo.score}/100")
    print(f"  • Visual: {review.visual.score}/100")
    if record.performance:
        print(f"  • Performance: {record.performance.overall_performance_score}/100")

    print(f"\nIntelligence:")
    print(f"  • Readability: {result.content.readability_score} ({result.content.readability_grade})")
    print(f"  • Motion risk: {result.motion.risk_score}/100")
    print(f"  • First impression: {result.ux.first_impression_score}/100 "
          f"(risk {result.ux.risk_level.value})")

    if review.issues:
        print(f"\n⚠️  Issues:")
        for issue in review.issues:
            label = issue.priority_label.value if issue.priority_label else issue.severity.value
            print(f"  • [{label}] {issue.title}")

    if review.top_improvements:
        print(f"\n💡 Top Improvements:")
        for item in review.top_improvements:
            print(f"  • {item.before} → {item.after}")

    if result.diff:
        print_diff(result.diff)

    print(f"\n{'=' * 60}\n")


def print_diff(diff: AuditDiff):
    """Print an audit diff."""
    print(f"\n🔁 Since previous audit:")
    print(f"  • Score: {diff.score_delta:+d}")
    if diff.health_delta is not None:
        print(f"  • Health: {diff.health_delta:+d}")
    print(f"  • Accessibility: {diff.accessibility_delta:+d}")
    print(f"  • SEO: {diff.seo_delta:+d}")
    print(f"  • Visual: {diff.visual_delta:+d}")
    print(f"  • Issues: {diff.previous_issue_count} → {diff.current_issue_count}")
    for title in diff.new_issues:
        print(f"    + {title}")
    for title in diff.resolved_issues:
        print(f"    - {title}")
    for highlight in diff.metric_highlights:
        print(f"  • {highlight.metric}: {highlight.before} → {highlight.after} ({highlight.status.value})")


async def _analyze_urls(pipeline: AuditPipeline, urls, args, user_agent: str):
    """Analyze URLs one after another on a single event loop."""
    results = []
    for raw_url in urls:
        url = normalize_url(raw_url)
        print(f"Analyzing {url}...", file=sys.stderr if args.output == "json" else sys.stdout)
        results.append(await pipeline.analyze_url(
            url,
            source=args.source,
            user_agent=user_agent,
            primary_keyword=args.keyword,
        ))
    return results


def analyze_command(args):
    """Fetch and analyze one or more URLs."""
    config = Config.from_env()
    if not config.llm_api_key:
        print("Error: LLM API key is required. Set LLM_API_KEY in .env file or environment variable")
        sys.exit(1)

    store = _open_store(args.db)
    try:
        pipeline = AuditPipeline.from_config(
            config, store=store, thresholds=_load_thresholds(args.thresholds)
        )
        results = asyncio.run(_analyze_urls(pipeline, args.urls, args, config.user_agent))
    except (UXAuditError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        if isinstance(store, LocalSqliteAuditStore):
            store.close()

    if args.output == "json":
        _write_output(
            json.dumps([result.to_dict() for result in results], indent=2, default=str),
            args.output_file,
        )
    else:
        for result in results:
            print_analysis(result)


def score_command(args):
    """Score a saved snapshot offline, with no model call."""
    try:
        page = page_from_snapshot_file(_load_json(args.snapshot), url=args.url)
        pipeline = AuditPipeline(thresholds=_load_thresholds(args.thresholds))
        result = asyncio.run(pipeline.analyze(page, source="cli.offline", primary_keyword=args.keyword))
    except (UXAuditError, ValueError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.output == "json":
        _write_output(json.dumps(result.to_dict(), indent=2, default=str), args.output_file)
    else:
        print_analysis(result)


def diff_command(args):
    """Compare two saved audit records."""
    try:
        previous = record_from_dict(_load_json(args.previous))
        current = record_from_dict(_load_json(args.current))
    except (ValueError, KeyError, TypeError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if previous.url != current.url:
        print(f"Warning: comparing audits of different URLs ({previous.url} vs {current.url})")

    diff = build_audit_diff(previous, current, _load_thresholds(args.thresholds))
    if args.output == "json":
        _write_output(json.dumps(diff.to_dict(), indent=2, default=str), args.output_file)
    else:
        print(f"\n{'=' * 60}")
        print(f"Audit diff for: {current.url}")
        print(f"{'=' * 60}")
        print_diff(diff)
        print()


def history_command(args):
    """Show stored audits for a URL."""
    store = LocalSqliteAuditStore(args.db)
    try:
        records = store.history(normalize_url(args.url), limit=args.limit)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        store.close()

    if not records:
        print(f"No audit history found for: {args.url}")
        sys.exit(0)

    if args.output == "json":
        _write_output(
            json.dumps([record.to_dict() for record in records], indent=2, default=str),
            args.output_file,
        )
        return

    print(f"\n{'=' * 60}")
    print(f"Audit history for: {records[0].url}")
    print(f"{'=' * 60}\n")
    for record in records:
        print(f"Audited: {record.created_at.isoformat(timespec='seconds')}")
        print(f"  UX Score: {record.score}")
        print(f"  Health Score: {record.health_score if record.health_score is not None else 'N/A'}")
        print(f"  Issues: {len(record.review.issues)}")
        print("-" * 30)


def health_command(args):
    """Check that the configured model provider answers."""
    config = Config.from_env()
    try:
        client = LLMClient.from_config(config)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    status = asyncio.run(client.health_check())
    print(f"{'✅' if status == 'OK' else '❌'} {client.provider}/{client.model}: {status}")
    if status != "OK":
        sys.exit(1)


def _add_output_arguments(parser):
    parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )


def main(argv=None):
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="UX Health Audit - Score websites for UX, accessibility, SEO and performance"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Fetch and audit one or more URLs.")
    analyze_parser.add_argument("urls", nargs="+", help="URLs to analyze")
    analyze_parser.add_argument("--keyword", help="Primary keyword override for content analysis")
    analyze_parser.add_argument("--db", help="SQLite file for audit history (default: in-memory)")
    analyze_parser.add_argument(
        "--source",
        default="cli",
        help="Analysis source recorded in logs; 'scheduled...' emits audit-complete alerts",
    )
    analyze_parser.add_argument("--thresholds", help="JSON file with scoring thresholds")
    _add_output_arguments(analyze_parser)
    analyze_parser.set_defaults(func=analyze_command)

    score_parser = subparsers.add_parser(
        "score", help="Audit a saved snapshot offline (deterministic, no model call)."
    )
    score_parser.add_argument("snapshot", help="Snapshot JSON file")
    score_parser.add_argument("--url", help="URL to report (overrides the file)")
    score_parser.add_argument("--keyword", help="Primary keyword override for content analysis")
    score_parser.add_argument("--thresholds", help="JSON file with scoring thresholds")
    _add_output_arguments(score_parser)
    score_parser.set_defaults(func=score_command)

    diff_parser = subparsers.add_parser("diff", help="Compare two saved audit records.")
    diff_parser.add_argument("previous", help="Earlier audit record JSON")
    diff_parser.add_argument("current", help="Later audit record JSON")
    diff_parser.add_argument("--thresholds", help="JSON file with scoring thresholds")
    _add_output_arguments(diff_parser)
    diff_parser.set_defaults(func=diff_command)

    history_parser = subparsers.add_parser("history", help="Show stored audits for a URL.")
    history_parser.add_argument("url", help="Audited URL")
    history_parser.add_argument("--db", default="uxaudit.db", help="SQLite file (default: uxaudit.db)")
    history_parser.add_argument("--limit", type=int, default=10, help="Maximum records (default: 10)")
    _add_output_arguments(history_parser)
    history_parser.set_defaults(func=history_command)

    health_parser = subparsers.add_parser("health", help="Check the model provider connection.")
    health_parser.set_defaults(func=health_command)

    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, "log_file", None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
