"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_utc,
    ensure_utc_naive,
    now_utc,
    now_utc_naive,
    to_epoch_seconds,
)

__all__ = [
    "ensure_utc",
    "ensure_utc_naive",
    "now_utc",
    "now_utc_naive",
    "to_epoch_seconds",
]
