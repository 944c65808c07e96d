"""Public helpers for turning domain events into broker messages."""

from .build_envelope import build_envelope, routing_key_for

__all__ = ["build_envelope", "routing_key_for"]
