"""
FastAPI trigger service.

Provides REST API for on-demand operation:
- POST /collect - Run one collection pass now
- GET /health - Service health check
"""

from trend_monitor.api.app import create_app

__all__ = ["create_app"]
