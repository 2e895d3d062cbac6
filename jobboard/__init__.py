"""Job aggregation, relevance scoring and location classification."""

__version__ = "0.1.0"
