"""
Prioritizer & Batch Selector
============================
Highest rent first, capped at MAX_CLOSE_PER_RUN.
"""

from typing import List, Sequence

from rent_reclaimer.modules.reclaimer.errors import ConfigurationError
from rent_reclaimer.modules.reclaimer.models import CloseCandidate


def prioritize(candidates: Sequence[CloseCandidate]) -> List[CloseCandidate]:
    """Sort by reclaimable lamports, descending. Ties keep discovery order."""
    return sorted(candidates, key=lambda c: c.reclaimable_lamports, reverse=True)


def select(ordered: Sequence[CloseCandidate], max_per_run: int) -> List[CloseCandidate]:
    """Take the first `max_per_run` candidates."""
    if isinstance(max_per_run, bool) or not isinstance(max_per_run, int) or max_per_run < 1:
        raise ConfigurationError(f"max_per_run must be a positive integer, got {max_per_run!r}")
    return list(ordered[:max_per_run])
