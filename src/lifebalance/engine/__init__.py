"""Core daily engine for LifeBalance.

Modules:
    - scoring: Wearable + check-in signals → Life Balance Index
    - baseline: Rolling mean of recent indices, calibration state
    - plan: Priority-ordered rules → daily action plan
    - explainability: Drivers, accuracy reasons, counterfactuals
    - patterns: Summary-statistic pattern mining over history
    - coverage: Which signals informed a day
"""

from lifebalance.engine.scoring import (
    compute_score,
    ScoreResult,
    Subscores,
)
from lifebalance.engine.baseline import (
    Baseline,
    BaselineMeta,
    BaselineStatus,
)
from lifebalance.engine.plan import (
    PlanGenerator,
    generate_plan,
    narration_prompt,
)
from lifebalance.engine.explainability import (
    Explainer,
    DayExplanation,
    Driver,
    AccuracyReason,
    Counterfactual,
    build_counterfactuals,
)
from lifebalance.engine.patterns import (
    PatternInsight,
    build_patterns,
)
from lifebalance.engine.coverage import (
    CoverageSummary,
    compute_coverage,
)

__all__ = [
    "compute_score",
    "ScoreResult",
    "Subscores",
    "Baseline",
    "BaselineMeta",
    "BaselineStatus",
    "PlanGenerator",
    "generate_plan",
    "narration_prompt",
    "Explainer",
    "DayExplanation",
    "Driver",
    "AccuracyReason",
    "Counterfactual",
    "build_counterfactuals",
    "PatternInsight",
    "build_patterns",
    "CoverageSummary",
    "compute_coverage",
]
