"""Earthquake feed ingestion, streaming and plate proximity analysis."""

__version__ = "1.0.0"
