"""Score threshold settings resolved from the environment.

Trainers tune grading strictness without code changes: each threshold of
:class:`~rangetrainer.core.scoring.ScoreConfig` can be set through an
environment variable and temporarily overridden in tests via a context
manager.

Usage::

    from rangetrainer.core import settings

    config = settings.score_config()
    with settings.override(mix_min=0.2):
        stricter = settings.score_config()

Recognised variables: ``RANGETRAINER_MIX_MIN``, ``RANGETRAINER_STRONG``,
``RANGETRAINER_MODERATE``, ``RANGETRAINER_TINY_MIN`` and
``RANGETRAINER_MIXED_PENALTY``.  Unparseable values are ignored with a warning.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Final

from .scoring import CONFIG_ALIASES, DEFAULT_CONFIG, ScoreConfig

logger = logging.getLogger(__name__)

_ENV_PREFIX: Final = "RANGETRAINER_"

ENV_VARS: Final[dict[str, str]] = {
    "mix_min": f"{_ENV_PREFIX}MIX_MIN",
    "strong": f"{_ENV_PREFIX}STRONG",
    "moderate": f"{_ENV_PREFIX}MODERATE",
    "tiny_min": f"{_ENV_PREFIX}TINY_MIN",
    "mixed_penalty_score": f"{_ENV_PREFIX}MIXED_PENALTY",
}

_OVERRIDE_STACK: list[dict[str, float]] = []


def _parse_env(environ: Mapping[str, str]) -> dict[str, float]:
    values: dict[str, float] = {}
    for name, var in ENV_VARS.items():
        raw = environ.get(var)
        if raw is None or not raw.strip():
            continue
        try:
            values[name] = float(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r; expected a number", var, raw)
    return values


def _current_overrides() -> dict[str, float]:
    merged: dict[str, float] = {}
    for layer in _OVERRIDE_STACK:
        merged.update(layer)
    return merged


def score_config(**explicit: Any) -> ScoreConfig:
    """Resolve thresholds: defaults, then env vars, then overrides, then ``explicit``.

    ``None`` values in ``explicit`` are skipped so CLI flags can be passed through.
    """

    config = ScoreConfig.from_mapping(_parse_env(os.environ), base=DEFAULT_CONFIG)
    overrides = _current_overrides()
    if overrides:
        config = ScoreConfig.from_mapping(overrides, base=config)
    chosen = {key: value for key, value in explicit.items() if value is not None}
    if chosen:
        config = ScoreConfig.from_mapping(chosen, base=config)
    return config


@contextmanager
def override(**values: float):
    """Temporarily override thresholds within the context.

    Overrides are stacked, so nested contexts behave predictably.
    """

    layer = ScoreConfig.from_mapping(values, strict=True)
    names = [CONFIG_ALIASES.get(key, key) for key in values]
    _OVERRIDE_STACK.append({name: getattr(layer, name) for name in names})
    try:
        yield
    finally:
        _OVERRIDE_STACK.pop()


def set_env(**values: float) -> None:
    """Convenience helper used in scripts/tests to export thresholds."""

    for key, value in values.items():
        var = ENV_VARS.get(key)
        if var is None:
            raise KeyError(f"unknown score setting '{key}'")
        ScoreConfig.from_mapping({key: value}, strict=True)
        os.environ[var] = str(value)


__all__ = ["ENV_VARS", "override", "score_config", "set_env"]
