"""Command-line interface for LifeBalance.

Provides commands for importing data, logging check-ins, and running the
daily engine, insights and risk model from the terminal.

Usage:
    lifebalance import-csv whoop.csv
    lifebalance checkin --mood 3 --stress racing_thoughts
    lifebalance process --date 2026-01-05
    lifebalance explain --format json
    lifebalance analytics --format markdown
    lifebalance seed-demo --seed 7
"""

import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import date as date_type
from pathlib import Path
from typing import Optional, get_args

from lifebalance import __version__
from lifebalance.ai.narrator import narrator_from_settings
from lifebalance.analytics import build_summary, to_csv, to_markdown
from lifebalance.config import settings
from lifebalance.demo import seed_demo
from lifebalance.engine import build_patterns
from lifebalance.export import (
    export_daily_csv,
    export_daily_parquet,
    export_research_json,
    last_days,
    plans_for,
)
from lifebalance.ingest import read_wearable_csv
from lifebalance.models import STRESS_INDICATOR_NAMES, CheckIn, ContextTag, StressIndicators
from lifebalance.pipeline import DailyProcessor
from lifebalance.storage import RecordRepository, SQLiteKeyValueStore, audit_snapshot

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=1)

CONTEXT_TAGS = list(get_args(ContextTag))


def _add_format(parser: argparse.ArgumentParser, choices: list[str] | None = None) -> None:
    choices = choices or ["text", "json"]
    parser.add_argument(
        "--format",
        type=str,
        choices=choices,
        default=choices[0],
        help=f"Output format (default: {choices[0]})",
    )


def _add_date(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Date in YYYY-MM-DD format (default: today)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="lifebalance",
        description="LifeBalance — Explainable daily wellbeing index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lifebalance import-csv wearables.csv
  lifebalance checkin --mood 3 --energy 2 --stress racing_thoughts
  lifebalance process --date 2026-01-05
  lifebalance analytics --format markdown --output report.md
        """,
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help=f"SQLite store file (default: {settings.store_path})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # import-csv command
    import_parser = subparsers.add_parser(
        "import-csv",
        help="Import a normalized wearable CSV",
        description="Import date,sleep_hours,recovery,strain,hrv,rhr rows (dd-mmm-yy dates)",
    )
    import_parser.add_argument("path", type=Path, help="CSV file to import")
    import_parser.add_argument(
        "--no-process",
        action="store_true",
        help="Store the days without scoring them",
    )

    # checkin command
    checkin_parser = subparsers.add_parser(
        "checkin",
        help="Save a daily check-in",
        description="Save (or replace) the check-in for a day, then re-process the day",
    )
    _add_date(checkin_parser)
    checkin_parser.add_argument(
        "--mood", type=int, choices=[1, 2, 3, 4], required=True, help="Mood, 1 (low) to 4 (great)"
    )
    checkin_parser.add_argument(
        "--energy", type=int, choices=[1, 2, 3, 4], default=None, help="Energy, 1 to 4"
    )
    checkin_parser.add_argument(
        "--stress",
        action="append",
        choices=list(STRESS_INDICATOR_NAMES),
        default=None,
        help="Active stress indicator (repeatable)",
    )
    checkin_parser.add_argument(
        "--no-stress",
        action="store_true",
        help="Record that no stress indicators were present",
    )
    checkin_parser.add_argument(
        "--caffeine-after-2pm", action="store_true", default=None, help="Caffeine after 2pm"
    )
    checkin_parser.add_argument("--alcohol", action="store_true", default=None, help="Alcohol")
    checkin_parser.add_argument(
        "--deep-work",
        type=int,
        choices=[0, 15, 30, 60, 90, 120],
        default=None,
        help="Deep work minutes",
    )
    checkin_parser.add_argument(
        "--tag", action="append", choices=CONTEXT_TAGS, default=None, help="Context tag (repeatable)"
    )
    checkin_parser.add_argument("--notes", type=str, default=None, help="Free-text notes")

    # process command
    process_parser = subparsers.add_parser(
        "process",
        help="Score a day and generate its plan",
        description="Score, compute baseline, generate and persist the plan",
    )
    _add_date(process_parser)
    process_parser.add_argument(
        "--all", action="store_true", help="Re-process every stored day in date order"
    )
    process_parser.add_argument(
        "--narrate", action="store_true", help="Add an AI narration (needs AI_PROVIDER)"
    )
    _add_format(process_parser)

    # explain command
    explain_parser = subparsers.add_parser(
        "explain",
        help="Explain a day: drivers, what-ifs, coverage",
    )
    _add_date(explain_parser)
    _add_format(explain_parser)

    # patterns command
    patterns_parser = subparsers.add_parser("patterns", help="Show patterns in your history")
    _add_format(patterns_parser)

    # analytics command
    analytics_parser = subparsers.add_parser(
        "analytics",
        help="Descriptives and correlations over recent days",
    )
    analytics_parser.add_argument(
        "--window",
        type=int,
        default=None,
        help=f"Trailing records to analyse (default: {settings.analytics_window_days})",
    )
    _add_format(analytics_parser, ["markdown", "csv", "json"])
    analytics_parser.add_argument(
        "--output", type=Path, default=None, help="Write the report to a file"
    )

    # consistency command
    consistency_parser = subparsers.add_parser(
        "consistency",
        help="Consistency score over the trailing window",
    )
    _add_date(consistency_parser)
    _add_format(consistency_parser)

    # train command
    subparsers.add_parser("train", help="Train the next-day risk models if enough data exists")

    # predict command
    predict_parser = subparsers.add_parser("predict", help="Predict tomorrow's drop risk")
    _add_format(predict_parser)

    # export command
    export_parser = subparsers.add_parser("export", help="Export research data")
    export_parser.add_argument("output", type=Path, help="Output file")
    _add_format(export_parser, ["csv", "parquet", "json"])
    export_parser.add_argument(
        "--days", type=int, default=90, help="Most recent days to export (default: 90)"
    )

    # seed-demo command
    demo_parser = subparsers.add_parser(
        "seed-demo",
        help="Replace the store with synthetic demo days",
        description="Delete all stored data and write a synthetic history ending today",
    )
    demo_parser.add_argument(
        "--days", type=int, default=14, help="Days to generate (default: 14)"
    )
    demo_parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for a reproducible history"
    )
    demo_parser.add_argument(
        "--no-process",
        action="store_true",
        help="Store the days without generating plans",
    )

    # status command
    status_parser = subparsers.add_parser("status", help="Audit what is stored")
    _add_format(status_parser)

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context.

    Spins up a new event loop in a dedicated thread to avoid conflicts
    with any existing event loop.
    """
    def _target():
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    future = _executor.submit(_target)
    return future.result()


def _parse_date(value: Optional[str]) -> date_type:
    return date_type.fromisoformat(value) if value else date_type.today()


def _repository(args: argparse.Namespace) -> RecordRepository:
    path = args.store if args.store is not None else Path(settings.store_path)
    return RecordRepository(SQLiteKeyValueStore(path))


def _processor(args: argparse.Namespace) -> DailyProcessor:
    return DailyProcessor(
        _repository(args),
        config=settings,
        narrator=narrator_from_settings(settings),
    )


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_import_csv(args: argparse.Namespace) -> int:
    """Import a normalized wearable CSV and score the imported days."""
    result = read_wearable_csv(args.path)
    for error in result.errors:
        print(f"  {error}", file=sys.stderr)

    if not result.days:
        print("No valid rows imported.", file=sys.stderr)
        return 1

    processor = _processor(args)
    count = processor.repository.import_wearable_days(result.days)
    print(f"Imported {count} days ({len(result.errors)} row errors).")

    if not args.no_process:
        results = processor.process_all([d.date for d in result.days])
        print(f"Scored {len(results)} days.")
    return 0


def cmd_checkin(args: argparse.Namespace) -> int:
    """Save a check-in and re-process the day if wearable data exists."""
    target_date = _parse_date(args.date)

    indicators = None
    if args.stress or args.no_stress:
        indicators = StressIndicators(**{name: True for name in (args.stress or [])})

    check_in = CheckIn(
        mood=args.mood,
        energy=args.energy,
        stress_indicators=indicators,
        caffeine_after_2pm=args.caffeine_after_2pm,
        alcohol=args.alcohol,
        deep_work_mins=args.deep_work,
        context_tags=args.tag or [],
        notes=args.notes,
    )

    processor = _processor(args)
    processor.save_check_in(target_date, check_in)
    print(f"Saved check-in for {target_date.isoformat()}.")

    result = processor.process_day(target_date)
    if result is not None:
        print(result.format())
    return 0


def cmd_process(args: argparse.Namespace) -> int:
    """Score and plan one day (or every stored day)."""
    processor = _processor(args)

    if args.all:
        results = processor.process_all()
    else:
        target_date = _parse_date(args.date)
        result = processor.process_day(target_date)
        if result is None:
            print(
                f"No wearable data for {target_date.isoformat()}; nothing to score.",
                file=sys.stderr,
            )
            return 1
        results = [result]

    if args.narrate and results:
        _run_async(processor.narrate(results[-1]))

    if args.format == "json":
        _print_json([r.to_dict() for r in results])
    else:
        print("\n\n".join(r.format() for r in results))
    return 0


def cmd_explain(args: argparse.Namespace) -> int:
    insight = _processor(args).explain_day(_parse_date(args.date))
    if args.format == "json":
        _print_json(insight.to_dict())
    else:
        print(insight.format_full())
    return 0


def cmd_patterns(args: argparse.Namespace) -> int:
    patterns = build_patterns(_repository(args).list())
    if args.format == "json":
        _print_json([p.to_dict() for p in patterns])
    else:
        for pattern in patterns:
            print(f"- {pattern}")
    return 0


def cmd_analytics(args: argparse.Namespace) -> int:
    window = args.window or settings.analytics_window_days
    summary = build_summary(_repository(args).list(), window_days=window)

    if args.format == "csv":
        text = to_csv(summary)
    elif args.format == "json":
        text = json.dumps(summary.to_dict(), indent=2, ensure_ascii=False)
    else:
        text = to_markdown(summary)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(text)
    return 0


def cmd_consistency(args: argparse.Namespace) -> int:
    result = _processor(args).consistency(_parse_date(args.date))
    if args.format == "json":
        _print_json(result.to_dict())
    else:
        print(result.format())
    return 0


def cmd_train(args: argparse.Namespace) -> int:
    models = _processor(args).risk.train_if_ready()
    if models is None:
        print("Not enough data to train yet.")
    else:
        print(f"Trained risk models on {models.rows_used} rows.")
    return 0


def cmd_predict(args: argparse.Namespace) -> int:
    prediction = _processor(args).risk.predict_tomorrow()
    if args.format == "json":
        _print_json(prediction.to_dict())
    else:
        print(prediction.format())
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    repository = _repository(args)
    records = last_days(repository.list(), args.days)
    plans = plans_for(records, repository.list_plans())

    if args.format == "parquet":
        path = export_daily_parquet(records, plans, args.output)
    elif args.format == "json":
        path = export_research_json(records, plans, args.output, days=args.days)
    else:
        path = export_daily_csv(records, plans, args.output)

    print(f"Exported {len(records)} days to {path}")
    return 0


def cmd_seed_demo(args: argparse.Namespace) -> int:
    """Seed synthetic demo days, then plan them unless --no-process."""
    processor = _processor(args)
    records = seed_demo(processor.repository, days=args.days, seed=args.seed)
    print(f"Seeded {len(records)} demo days.")

    if not args.no_process:
        results = processor.process_all()
        print(f"Planned {len(results)} days.")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    snapshot = audit_snapshot(_repository(args))
    if args.format == "json":
        _print_json(snapshot.to_dict())
    else:
        print(snapshot.format())
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    print(f"LifeBalance v{__version__}")
    print("Explainable daily wellbeing index")
    return 0


COMMANDS = {
    "import-csv": cmd_import_csv,
    "checkin": cmd_checkin,
    "process": cmd_process,
    "explain": cmd_explain,
    "patterns": cmd_patterns,
    "analytics": cmd_analytics,
    "consistency": cmd_consistency,
    "train": cmd_train,
    "predict": cmd_predict,
    "export": cmd_export,
    "seed-demo": cmd_seed_demo,
    "status": cmd_status,
    "version": cmd_version,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for failure, 130 when interrupted)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        # No command specified
        parser.print_help()
        return 0

    try:
        return handler(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error("%s failed: %s", args.command, e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
