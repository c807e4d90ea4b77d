"""Adapters package for Park Reporter: source-specific live status adapters.

Each adapter should implement:
- fetch_statuses(catalog, source, session=None) -> list[FacilityStatus]
  returning one status per catalog entry and never raising.
"""
from . import themeparks
from .themeparks import fetch_statuses

__all__ = ["themeparks", "fetch_statuses"]
