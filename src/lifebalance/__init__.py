"""LifeBalance — explainable daily wellbeing index, plans and next-day risk."""

__version__ = "0.3.0"
