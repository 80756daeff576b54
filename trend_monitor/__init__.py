"""Keyword trend monitor: multi-source mention collection and surge alerting."""

__version__ = "0.1.0"
