"""Truthness-v0.1 Configuration — Environment-variable-driven config.

All tunable heuristic constants are centralized here, read from environment
variables with sensible defaults. Values are resolved once at import time so
that every evaluation inside a process sees the same constants; the search
compares fitness values across generations and relies on that.

Environment variables use the TRUTHNESS_ prefix to avoid collisions.

Usage:
    from truthness.config import TruthnessConfig

    # Read a config value (resolved at import time from env):
    h = TruthnessConfig.FAILED_DEGREE

    # Override via environment:
    #   TRUTHNESS_FAILED_DEGREE=0.05 python -m pytest
"""

from __future__ import annotations

import os


class TruthnessConfig:
    """Heuristic constants, resolved from TRUTHNESS_* env vars at import time."""

    # ------------------------------------------------------------------
    # Binary constraints
    # ------------------------------------------------------------------
    # Degree given to the unsatisfied side of a constraint that has no
    # finer-grained distance (pattern, null checks, booleans), and to an
    # absent value under a presence constraint. Must stay below 1 / (offset + 1)
    # so an absent value scores worse than any present-but-empty one.
    FAILED_DEGREE: float = float(os.getenv("TRUTHNESS_FAILED_DEGREE", "0.01"))

    # ------------------------------------------------------------------
    # Ordering primitives
    # ------------------------------------------------------------------
    # 1 / (offset + gap) on the failing side of a < b. Must be > 1 so a gap of
    # zero stays below the terminal 1.0.
    LESS_THAN_OFFSET: float = float(os.getenv("TRUTHNESS_LESS_THAN_OFFSET", "1.1"))


def _validate(config: type[TruthnessConfig]) -> None:
    offset, failed = config.LESS_THAN_OFFSET, config.FAILED_DEGREE
    if not 1.0 < offset < float("inf"):
        raise ValueError(f"TRUTHNESS_LESS_THAN_OFFSET must be a finite value > 1, got {offset}")
    worst_present = 1.0 / (offset + 1.0)
    if not 0.0 < failed < worst_present:
        raise ValueError(
            f"TRUTHNESS_FAILED_DEGREE must be in (0, {worst_present:.6g}), got {failed}"
        )


_validate(TruthnessConfig)
