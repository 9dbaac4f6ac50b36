"""Processor — Repository -> Score -> Baseline -> Plan -> Repository.

Runs one day through the engine and persists what it produces. All engine
work is synchronous; only the optional narration awaits network I/O.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field

from lifebalance.config import Settings, settings
from lifebalance.ai.narrator import Narrator
from lifebalance.analytics.consistency import (
    ConsistencyResult,
    compute_consistency,
    slice_up_to,
)
from lifebalance.engine import (
    Baseline,
    BaselineMeta,
    Counterfactual,
    CoverageSummary,
    DayExplanation,
    Explainer,
    PlanGenerator,
    ScoreResult,
    build_counterfactuals,
    compute_coverage,
    compute_score,
)
from lifebalance.engine.plan import is_balance_drop, narration_context, narration_prompt
from lifebalance.ml.risk import RiskEngine, RiskPrediction
from lifebalance.models import CheckIn, DailyRecord, LbiMeta, Plan
from lifebalance.storage.repository import Repository

logger = logging.getLogger(__name__)


@dataclass
class DayResult:
    """Outcome of processing one day."""

    date: dt.date
    score: ScoreResult
    baseline: BaselineMeta
    plan: Plan
    balance_drop: bool
    narration: str | None = None

    def format(self) -> str:
        """Format the day for terminal output.

        Example:
            === LifeBalance: 2026-01-05 ===
            LBI 55 (balanced, medium confidence)
            Baseline: 61 (stable, 7/7 days)
            Plan: NORMAL — Maintain momentum with structured work blocks and movement.
              1. Pick 1 priority task and complete a 45–60 min deep work block
        """
        meta = self.baseline
        baseline = "calibrating" if meta.baseline is None else str(meta.baseline)
        lines = [
            f"=== LifeBalance: {self.date.isoformat()} ===",
            f"LBI {self.score.lbi} ({self.score.classification.value}, "
            f"{self.score.confidence.value} confidence)",
            f"  {self.score.reason}",
            f"Baseline: {baseline} ({meta.status.value}, {meta.days_used}/{meta.target_days} days)",
        ]
        if self.balance_drop:
            lines.append("  Balance dropped more than 15% below baseline.")

        lines.append(f"Plan: {self.plan.category.value} — {self.plan.focus}")
        lines.extend(f"  {i}. {action}" for i, action in enumerate(self.plan.actions, 1))
        lines.append("Triggers:")
        lines.extend(f"  - {trigger}" for trigger in self.plan.triggers)
        lines.append(self.plan.explanation)
        if self.narration:
            lines.append("")
            lines.append(self.narration)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "score": self.score.to_dict(),
            "baseline": self.baseline.to_dict(),
            "plan": self.plan.model_dump(mode="json"),
            "balance_drop": self.balance_drop,
            "narration": self.narration,
        }


@dataclass
class DayInsight:
    """Explanation, counterfactuals and coverage for one day."""

    explanation: DayExplanation
    counterfactuals: list[Counterfactual] = field(default_factory=list)
    coverage: CoverageSummary | None = None

    def format_full(self) -> str:
        lines = [self.explanation.format_full()]
        if self.counterfactuals:
            lines.append("")
            lines.append("What if:")
            lines.extend(f"  {c}" for c in self.counterfactuals)
        if self.coverage is not None:
            lines.append("")
            lines.append(self.coverage.format())
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "explanation": self.explanation.to_dict(),
            "counterfactuals": [c.to_dict() for c in self.counterfactuals],
            "coverage": self.coverage.to_dict() if self.coverage else None,
        }


class DailyProcessor:
    """Processes stored days through the engine.

    Responsibilities:
    - Score a day from its wearable metrics and check-in
    - Persist the index and its metadata
    - Compute the plan baseline and generate the plan
    - Persist the plan (overwriting any earlier plan for the date)

    Usage:
        processor = DailyProcessor(RecordRepository(SQLiteKeyValueStore(path)))
        result = processor.process_day(date(2026, 1, 5))
    """

    def __init__(
        self,
        repository: Repository,
        config: Settings = settings,
        narrator: Narrator | None = None,
    ) -> None:
        self.repository = repository
        self.config = config
        self.narrator = narrator

        self.baseline = Baseline(
            window_days=config.baseline_window_days,
            min_days=config.baseline_min_days,
        )
        self.planner = PlanGenerator()
        self.explainer = Explainer()
        self.risk = RiskEngine(
            repository,
            window_days=config.ml_window_days,
            k=config.ml_drop_k,
            min_corpus_days=config.ml_min_corpus_days,
            min_rows=config.ml_min_rows,
            steps=config.ml_steps,
            learning_rate=config.ml_learning_rate,
            l2=config.ml_l2,
        )

    def save_check_in(self, date: dt.date, check_in: CheckIn) -> DailyRecord:
        """Store (or replace) the check-in for a day."""
        record = self.repository.upsert(date, check_in=check_in)
        logger.info("Saved check-in for %s", date.isoformat())
        return record

    def _history_up_to(self, date: dt.date) -> list[DailyRecord]:
        return [r for r in self.repository.list() if r.date <= date]

    def process_day(self, date: dt.date) -> DayResult | None:
        """Score, plan and persist one day.

        Args:
            date: Day to process

        Returns:
            DayResult, or None when the day has no wearable data
        """
        record = self.repository.get(date)
        if record is None or record.wearable is None:
            logger.debug("Skipping %s: no wearable data", date.isoformat())
            return None

        score = compute_score(
            recovery=record.wearable.recovery,
            sleep_hours=record.wearable.sleep_hours,
            strain=record.wearable.strain,
            check_in=record.check_in,
        )
        self.repository.upsert(
            date,
            lbi=score.lbi,
            lbi_meta=LbiMeta(
                classification=score.classification,
                confidence=score.confidence,
                reason=score.reason,
            ),
        )

        baseline = self.baseline.compute_meta(self._history_up_to(date))

        plan = self.planner.generate(
            date=date,
            lbi=score.lbi,
            baseline=baseline.baseline,
            classification=score.classification,
            confidence=score.confidence,
            wearable=record.wearable,
            check_in=record.check_in,
        )
        self.repository.save_plan(plan)
        logger.info(
            "Persisted %s plan for %s (LBI %d)",
            plan.category.value,
            date.isoformat(),
            score.lbi,
        )

        return DayResult(
            date=date,
            score=score,
            baseline=baseline,
            plan=plan,
            balance_drop=is_balance_drop(score.lbi, baseline.baseline),
        )

    def process_all(self, dates: list[dt.date] | None = None) -> list[DayResult]:
        """Process days in ascending date order so baselines build up.

        Args:
            dates: Days to process (default: every stored day)

        Returns:
            Results for the days that had wearable data
        """
        if dates is None:
            dates = [r.date for r in self.repository.list()]

        results = []
        for date in sorted(set(dates)):
            result = self.process_day(date)
            if result is not None:
                results.append(result)
        return results

    async def narrate(self, result: DayResult) -> DayResult:
        """Attach a narrated explanation to a result when a narrator is set."""
        if self.narrator is None:
            return result
        result.narration = await self.narrator.narrate(
            narration_prompt(result.plan),
            narration_context(result.plan),
        )
        return result

    def explain_day(self, date: dt.date) -> DayInsight:
        """Explain a stored day: drivers, counterfactuals and coverage."""
        record = self.repository.get(date)
        baseline = self.baseline.compute(self._history_up_to(date))

        confidence = None
        if record is not None and record.lbi is not None:
            lbi = record.lbi
            confidence = record.lbi_meta.confidence if record.lbi_meta else None
        elif record is not None and record.wearable is not None:
            score = compute_score(
                recovery=record.wearable.recovery,
                sleep_hours=record.wearable.sleep_hours,
                strain=record.wearable.strain,
                check_in=record.check_in,
            )
            lbi, confidence = score.lbi, score.confidence
        else:
            lbi = 0

        wearable = record.wearable if record else None
        check_in = record.check_in if record else None

        return DayInsight(
            explanation=self.explainer.explain_day(date, lbi, baseline, record),
            counterfactuals=(
                build_counterfactuals(wearable, check_in) if record is not None else []
            ),
            coverage=compute_coverage(wearable, check_in, confidence),
        )

    def consistency(self, date: dt.date) -> ConsistencyResult:
        """Consistency over the configured trailing window ending at `date`."""
        window = slice_up_to(
            self.repository.list(),
            date,
            days=self.config.consistency_window_days,
        )
        return compute_consistency(window)

    def refresh_risk(self) -> RiskPrediction:
        """Retrain the risk models if ready, then predict tomorrow."""
        self.risk.train_if_ready()
        return self.risk.predict_tomorrow()
