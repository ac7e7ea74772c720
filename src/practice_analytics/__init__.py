"""Analytics aggregation engine for a clinician practice dashboard."""

__version__ = "1.0.0"
