#!/usr/bin/env python3
"""LifeBalance — Daily Runner.

Scores today's stored data, regenerates the plan, retrains the next-day
risk models when enough history exists and writes the results as JSON.
Designed to be called from cron once the wearable sync has landed.

Usage:
    python scripts/daily_run.py
    python scripts/daily_run.py --date 2026-02-07
    python scripts/daily_run.py --narrate   # needs AI_PROVIDER

Scheduling:
    crontab -e
    0 9 * * * /path/to/lifebalance/.venv/bin/python /path/to/lifebalance/scripts/daily_run.py >> /path/to/lifebalance/logs/daily.log 2>&1
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Load .env before importing lifebalance (pydantic-settings reads env at import)
load_dotenv(PROJECT_ROOT / ".env")

from lifebalance.ai.narrator import narrator_from_settings  # noqa: E402
from lifebalance.config import settings  # noqa: E402
from lifebalance.pipeline import DailyProcessor  # noqa: E402
from lifebalance.storage import RecordRepository, SQLiteKeyValueStore  # noqa: E402


def setup_logging(log_dir: Path, target_date: date) -> None:
    """Configure logging to both console and daily log file."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"daily_{target_date.isoformat()}.log"

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def run(target_date: date, store_path: Path, narrate: bool) -> dict:
    """Process the day and refresh the risk model.

    Returns:
        JSON-ready dict with the day result (or None) and the risk prediction.
    """
    processor = DailyProcessor(
        RecordRepository(SQLiteKeyValueStore(store_path)),
        narrator=narrator_from_settings(settings),
    )

    result = processor.process_day(target_date)
    if result is not None and narrate:
        loop = asyncio.new_event_loop()
        try:
            loop.run_until_complete(processor.narrate(result))
        finally:
            loop.close()

    prediction = processor.refresh_risk()

    return {
        "date": target_date.isoformat(),
        "day": result.to_dict() if result is not None else None,
        "risk": prediction.to_dict(),
    }


def print_summary(output: dict) -> None:
    """Log a human-readable summary of the run."""
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("LifeBalance Daily Run — %s", output["date"])
    logger.info("=" * 60)

    day = output["day"]
    if day is None:
        logger.info("  No wearable data for today; nothing scored.")
    else:
        score = day["score"]
        logger.info(
            "  LBI %d  %-16s  confidence=%s  baseline=%s",
            score["lbi"],
            score["classification"],
            score["confidence"],
            day["baseline"]["baseline"],
        )
        logger.info("  Plan: %s", day["plan"]["category"])

    risk = output["risk"]
    if risk["trained"]:
        logger.info(
            "  Tomorrow: LBI drop %.0f%%, recovery drop %.0f%%",
            risk["lbi_risk_prob"] * 100,
            risk["recovery_risk_prob"] * 100,
        )
    else:
        logger.info("  Risk model not trained yet (%d usable rows)", risk["rows_used"])
    logger.info("=" * 60)


def save_results(output: dict, output_dir: Path) -> None:
    """Save results as JSON for inspection."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / f"results_{output['date']}.json"

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2, default=str, ensure_ascii=False)

    logging.getLogger(__name__).info("Results saved to %s", output_file)


def main() -> int:
    """Main entry point for daily runner."""
    parser = argparse.ArgumentParser(
        description="LifeBalance — Daily scoring and risk refresh",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Target date YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--store",
        type=str,
        default=settings.store_path,
        help=f"SQLite store file (default: {settings.store_path})",
    )
    parser.add_argument(
        "--narrate",
        action="store_true",
        help="Attach an AI narration to today's plan",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(PROJECT_ROOT / "output"),
        help="JSON results directory (default: output/)",
    )
    args = parser.parse_args()

    # Parse date first (needed for log file name)
    if args.date:
        target_date = date.fromisoformat(args.date)
    else:
        target_date = date.today()

    setup_logging(PROJECT_ROOT / "logs", target_date)
    logger = logging.getLogger(__name__)

    logger.info("Starting LifeBalance daily run")
    logger.info("  Date: %s", target_date.isoformat())
    logger.info("  Store: %s", args.store)

    try:
        output = run(target_date, Path(args.store), args.narrate)
        print_summary(output)
        save_results(output, Path(args.output_dir))
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error("Daily run failed: %s", e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
