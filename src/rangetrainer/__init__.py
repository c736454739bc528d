"""Poker range trainer: grade painted 169-hand ranges against solver references."""

from __future__ import annotations

__all__: list[str] = []
