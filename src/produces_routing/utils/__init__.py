"""Utility helpers for produces-routing."""

from .logging import setup_logging

__all__ = ["setup_logging"]
