"""Reusable services."""

from karaflow.services.fetcher import ResilientFetcher

__all__ = ["ResilientFetcher"]
