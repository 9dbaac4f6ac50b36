"""Minimal binary logistic regression with L2 regularization.

Full-batch gradient descent over small in-memory datasets. Deterministic:
weights start at zero and there is no shuffling.
"""

import datetime as dt
from typing import Sequence

import numpy as np
from pydantic import BaseModel

SIGMOID_CLAMP = 35.0


class LogRegModel(BaseModel):
    """Trained weights for one binary task."""

    feature_names: list[str]
    weights: list[float]
    bias: float
    trained_at: dt.datetime


def sigmoid(z: float | np.ndarray) -> float | np.ndarray:
    """Logistic function with the argument clamped to ±35."""
    return 1.0 / (1.0 + np.exp(-np.clip(z, -SIGMOID_CLAMP, SIGMOID_CLAMP)))


def predict_proba(model: LogRegModel, x: Sequence[float]) -> float:
    """Probability of the positive class for one feature vector."""
    z = model.bias + float(np.dot(np.asarray(model.weights), np.asarray(x, dtype=float)))
    return float(sigmoid(z))


def train_logreg(
    X: Sequence[Sequence[float]] | np.ndarray,
    y: Sequence[int] | np.ndarray,
    feature_names: Sequence[str],
    steps: int = 800,
    lr: float = 0.1,
    l2: float = 0.02,
) -> LogRegModel:
    """Fit weights and bias by full-batch gradient descent.

    The L2 penalty applies to the weights only, not the bias.

    Args:
        X: Feature matrix, shape (n, d)
        y: Binary labels, length n
        feature_names: d feature names, kept on the model
        steps: Gradient descent iterations
        lr: Learning rate
        l2: L2 strength

    Returns:
        LogRegModel

    Raises:
        ValueError: If there are no training rows or shapes disagree
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)

    n = len(X)
    if n == 0:
        raise ValueError("No training rows")
    if X.ndim != 2 or X.shape[1] != len(feature_names):
        raise ValueError(
            f"X has shape {X.shape}, expected (n, {len(feature_names)})"
        )
    if len(y) != n:
        raise ValueError(f"y has {len(y)} labels for {n} rows")

    w = np.zeros(X.shape[1])
    b = 0.0

    for _ in range(steps):
        err = sigmoid(X @ w + b) - y
        gb = err.mean()
        gw = X.T @ err / n + l2 * w
        b -= lr * gb
        w -= lr * gw

    return LogRegModel(
        feature_names=list(feature_names),
        weights=[float(v) for v in w],
        bias=float(b),
        trained_at=dt.datetime.now(dt.timezone.utc),
    )
