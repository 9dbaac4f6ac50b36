"""Personal next-day risk models.

Modules:
    - dataset: Rolling z-scored feature rows + drop labels
    - logreg: L2 logistic regression, full-batch gradient descent
    - risk: Train-if-ready gate, persisted dual models, prediction
"""

from lifebalance.ml.dataset import FEATURE_NAMES, FeatureRow, build_dataset
from lifebalance.ml.logreg import LogRegModel, predict_proba, train_logreg
from lifebalance.ml.risk import (
    DualModels,
    RiskDriver,
    RiskEngine,
    RiskPrediction,
    top_drivers,
)

__all__ = [
    "FEATURE_NAMES",
    "FeatureRow",
    "build_dataset",
    "LogRegModel",
    "predict_proba",
    "train_logreg",
    "DualModels",
    "RiskDriver",
    "RiskEngine",
    "RiskPrediction",
    "top_drivers",
]
