"""Next-day risk: train-if-ready gate, persisted dual models, prediction.

Two independent logistic-regression models share one feature vector:
- lbi_drop: index at t+1 falls below its rolling window band
- recovery_drop: recovery at t+1 falls below its rolling window band

Models are retrained from scratch and overwrite the stored blob; there is
no incremental update. Probabilities are uncalibrated rankings of risk.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Literal, Sequence

import numpy as np
from pydantic import BaseModel, ValidationError

from lifebalance.ml.dataset import (
    DEFAULT_K,
    DEFAULT_WINDOW_DAYS,
    FEATURE_NAMES,
    build_dataset,
)
from lifebalance.ml.logreg import LogRegModel, predict_proba, train_logreg
from lifebalance.storage.repository import Repository

logger = logging.getLogger(__name__)

MODEL_VERSION = 1
MAX_RISK_DRIVERS = 3


class DualModels(BaseModel):
    """Persisted pair of next-day drop models."""

    version: Literal[1] = MODEL_VERSION
    window_days: int
    k: float
    trained_at: dt.datetime
    rows_used: int
    lbi_drop: LogRegModel
    recovery_drop: LogRegModel


@dataclass
class RiskDriver:
    """Feature contribution w·x to a prediction."""

    name: str
    direction: Literal["up", "down"]
    strength: float

    def to_dict(self) -> dict:
        return {"name": self.name, "direction": self.direction, "strength": self.strength}


@dataclass
class RiskPrediction:
    """Tomorrow's drop risk.

    Attributes:
        trained: False when no usable model or feature row exists
        rows_used: Rows behind the model (or available rows when untrained)
        lbi_risk_prob: Probability of an index drop, None when untrained
        recovery_risk_prob: Probability of a recovery drop, None when untrained
        top_drivers: Largest |w·x| contributions from the index model
    """

    trained: bool
    rows_used: int
    lbi_risk_prob: float | None = None
    recovery_risk_prob: float | None = None
    top_drivers: list[RiskDriver] = field(default_factory=list)

    def format(self) -> str:
        if not self.trained:
            return f"Risk model not trained yet ({self.rows_used} usable rows)."
        lines = [
            f"Tomorrow LBI drop risk: {self.lbi_risk_prob:.0%}",
            f"Tomorrow recovery drop risk: {self.recovery_risk_prob:.0%}",
            f"Rows used: {self.rows_used}",
        ]
        if self.top_drivers:
            parts = [f"{d.name} {d.direction} ({d.strength:.2f})" for d in self.top_drivers]
            lines.append(f"Top drivers: {'; '.join(parts)}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "trained": self.trained,
            "rows_used": self.rows_used,
            "lbi_risk_prob": self.lbi_risk_prob,
            "recovery_risk_prob": self.recovery_risk_prob,
            "top_drivers": [d.to_dict() for d in self.top_drivers],
        }


def top_drivers(
    model: LogRegModel,
    x: Sequence[float],
    limit: int = MAX_RISK_DRIVERS,
) -> list[RiskDriver]:
    """Features with the largest |w·x| for this input, strongest first."""
    contributions = np.asarray(model.weights) * np.asarray(x, dtype=float)
    order = sorted(
        range(len(contributions)),
        key=lambda i: abs(contributions[i]),
        reverse=True,
    )
    return [
        RiskDriver(
            name=model.feature_names[i],
            direction="up" if contributions[i] >= 0 else "down",
            strength=float(abs(contributions[i])),
        )
        for i in order[:limit]
    ]


class RiskEngine:
    """Trains and applies the personal next-day risk models.

    Args:
        repository: Record store holding the history and the model blob
        window_days: Rolling z-score window (default: 14)
        k: Drop threshold in standard deviations (default: 0.75)
        min_corpus_days: Stored days required before training (default: 21)
        min_rows: Feature rows required before training (default: 10)
        steps: Gradient descent steps (default: 900)
        learning_rate: Gradient descent learning rate (default: 0.12)
        l2: L2 strength (default: 0.02)

    Example:
        >>> engine = RiskEngine(repository)
        >>> engine.train_if_ready()
        >>> engine.predict_tomorrow().lbi_risk_prob
        0.27
    """

    def __init__(
        self,
        repository: Repository,
        window_days: int = DEFAULT_WINDOW_DAYS,
        k: float = DEFAULT_K,
        min_corpus_days: int = 21,
        min_rows: int = 10,
        steps: int = 900,
        learning_rate: float = 0.12,
        l2: float = 0.02,
    ) -> None:
        if min_rows < 1:
            raise ValueError(f"min_rows ({min_rows}) must be >= 1")
        if steps < 1:
            raise ValueError(f"steps ({steps}) must be >= 1")

        self.repository = repository
        self.window_days = window_days
        self.k = k
        self.min_corpus_days = min_corpus_days
        self.min_rows = min_rows
        self.steps = steps
        self.learning_rate = learning_rate
        self.l2 = l2

    def load_models(self) -> DualModels | None:
        """Stored models, or None when absent or unparseable."""
        blob = self.repository.get_model_blob()
        if blob is None:
            return None
        try:
            return DualModels.model_validate(blob)
        except ValidationError as e:
            logger.warning("Ignoring stored risk model: %d validation errors", e.error_count())
            return None

    def train_if_ready(self) -> DualModels | None:
        """Retrain both models when the history is large enough.

        Returns:
            The persisted DualModels, or None when a gate was not met
        """
        records = self.repository.list()
        if len(records) < self.min_corpus_days:
            logger.debug(
                "Skipping training: %d stored days < %d", len(records), self.min_corpus_days
            )
            return None

        dataset = build_dataset(records, window_days=self.window_days, k=self.k)
        if len(dataset) < self.min_rows:
            logger.debug("Skipping training: %d rows < %d", len(dataset), self.min_rows)
            return None

        X = np.vstack([row.x for row in dataset])
        options = {"steps": self.steps, "lr": self.learning_rate, "l2": self.l2}

        models = DualModels(
            window_days=self.window_days,
            k=self.k,
            trained_at=dt.datetime.now(dt.timezone.utc),
            rows_used=len(dataset),
            lbi_drop=train_logreg(
                X, [row.y_lbi_drop for row in dataset], FEATURE_NAMES, **options
            ),
            recovery_drop=train_logreg(
                X, [row.y_recovery_drop for row in dataset], FEATURE_NAMES, **options
            ),
        )
        self.repository.set_model_blob(models.model_dump(mode="json"))

        logger.info("Trained risk models on %d rows", len(dataset))
        return models

    def predict_tomorrow(self) -> RiskPrediction:
        """Score the most recent feature row against the stored models."""
        dataset = build_dataset(
            self.repository.list(), window_days=self.window_days, k=self.k
        )
        models = self.load_models()

        if models is None or not dataset:
            return RiskPrediction(trained=False, rows_used=len(dataset))

        x = dataset[-1].x
        return RiskPrediction(
            trained=True,
            rows_used=models.rows_used,
            lbi_risk_prob=predict_proba(models.lbi_drop, x),
            recovery_risk_prob=predict_proba(models.recovery_drop, x),
            top_drivers=top_drivers(models.lbi_drop, x),
        )
