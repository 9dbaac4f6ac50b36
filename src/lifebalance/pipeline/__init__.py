"""Daily processing pipeline."""

from lifebalance.pipeline.processor import DailyProcessor, DayInsight, DayResult

__all__ = ["DailyProcessor", "DayInsight", "DayResult"]
