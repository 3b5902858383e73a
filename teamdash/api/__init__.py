"""
REST API for the team performance dashboard

Provides the aggregated dashboard views over HTTP.
"""

from .app import create_app

__all__ = ["create_app"]
