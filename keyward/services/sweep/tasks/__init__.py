"""Sweep task implementations."""

from keyward.services.sweep.tasks.expired_api_key import ExpiredApiKeySweep

__all__ = ["ExpiredApiKeySweep"]
