"""Caller-held search session state."""

from __future__ import annotations

from .manager import SearchSession

__all__ = ["SearchSession"]
