"""Ingestion layer - site adapters and the collected item schema.

Adapters are imported from their modules directly
(``trend_monitor.ingestion.registry`` wires them together).
"""

from trend_monitor.ingestion.schemas import Item

__all__ = ["Item"]
