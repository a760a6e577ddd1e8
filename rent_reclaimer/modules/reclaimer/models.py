"""
Reclaimer Models
================
Value types passed between the reclaim pipeline stages.

Everything here is created once per run and never persisted.
"""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from rent_reclaimer.modules.reclaimer.errors import ConfigurationError


class SkipReason(Enum):
    """Why a scanned token account was not turned into a candidate."""

    NON_EMPTY = "nonEmpty"
    WRONG_AUTHORITY = "wrongAuthority"
    DISALLOWED_MINT = "disallowedMint"
    BELOW_MIN_VALUE = "belowMinValue"
    PARSE_ERROR = "parseError"


@dataclass(frozen=True)
class SubAccountRecord:
    """Decoded SPL token account as read from the ledger."""

    address: str
    mint: str
    owner: str
    amount: int
    close_authority: Optional[str] = None
    lamports: Optional[int] = None  # None until the value lookup ran


@dataclass(frozen=True)
class CloseCandidate:
    """An empty token account the operator may close."""

    account: str
    mint: str
    owner: str
    reclaimable_lamports: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account": self.account,
            "mint": self.mint,
            "owner": self.owner,
            "lamports": self.reclaimable_lamports,
        }


@dataclass(frozen=True)
class SkipCounters:
    """
    Per-run skip tally.

    Frozen: use bump() to fold a reason into a new value.
    """

    non_empty: int = 0
    wrong_authority: int = 0
    disallowed_mint: int = 0
    below_min_value: int = 0
    parse_error: int = 0

    _FIELDS = {
        SkipReason.NON_EMPTY: "non_empty",
        SkipReason.WRONG_AUTHORITY: "wrong_authority",
        SkipReason.DISALLOWED_MINT: "disallowed_mint",
        SkipReason.BELOW_MIN_VALUE: "below_min_value",
        SkipReason.PARSE_ERROR: "parse_error",
    }

    def bump(self, reason: SkipReason) -> "SkipCounters":
        name = self._FIELDS[reason]
        return replace(self, **{name: getattr(self, name) + 1})

    def count(self, reason: SkipReason) -> int:
        return getattr(self, self._FIELDS[reason])

    @property
    def total(self) -> int:
        return (
            self.non_empty
            + self.wrong_authority
            + self.disallowed_mint
            + self.below_min_value
            + self.parse_error
        )

    def as_dict(self) -> Dict[str, int]:
        return {reason.value: self.count(reason) for reason in SkipReason}


@dataclass(frozen=True)
class Classification:
    """Outcome of the eligibility filter: a candidate or a skip reason."""

    candidate: Optional[CloseCandidate] = None
    skip_reason: Optional[SkipReason] = None

    @property
    def eligible(self) -> bool:
        return self.candidate is not None


@dataclass(frozen=True)
class PolicyParameters:
    """Reclaim policy, read-only for the lifetime of a run."""

    min_rent_lamports: int = 0
    max_close_per_run: int = 25
    allow_mints: Optional[FrozenSet[str]] = None
    dry_run: bool = True
    use_relay: bool = False

    def validate(self) -> "PolicyParameters":
        """Raise ConfigurationError unless the policy can drive a run."""
        if isinstance(self.max_close_per_run, bool) or not isinstance(self.max_close_per_run, int):
            raise ConfigurationError(
                f"MAX_CLOSE_PER_RUN must be an integer, got {self.max_close_per_run!r}"
            )
        if self.max_close_per_run < 1:
            raise ConfigurationError(
                f"MAX_CLOSE_PER_RUN must be a positive integer, got {self.max_close_per_run}"
            )
        if self.min_rent_lamports < 0:
            raise ConfigurationError(
                f"MIN_RENT_LAMPORTS must be >= 0, got {self.min_rent_lamports}"
            )
        return self

    @property
    def has_allow_list(self) -> bool:
        return bool(self.allow_mints)


@dataclass(frozen=True)
class DiscoveryResult:
    """Candidates found by one scan, in discovery order."""

    scanned: int
    candidates: List[CloseCandidate]
    skip_counters: SkipCounters


@dataclass
class RunReport:
    """
    Result of one reclaim run.

    Built by the coordinator and handed to the caller; not modified afterwards.
    """

    scanned: int
    candidates: int
    planned: int
    closed: int = 0
    signatures: List[str] = field(default_factory=list)
    skip_counters: SkipCounters = field(default_factory=SkipCounters)
    dry_run: bool = True
    would_close: List[CloseCandidate] = field(default_factory=list)
    top_candidates: List[CloseCandidate] = field(default_factory=list)
    reclaimable_lamports: int = 0
    aborted_error: Optional[str] = None
    started_at: float = field(default_factory=time.time)

    @property
    def top_lamports(self) -> int:
        return self.top_candidates[0].reclaimable_lamports if self.top_candidates else 0

    @property
    def aborted(self) -> bool:
        return self.aborted_error is not None

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-friendly form."""
        return {
            "scanned": self.scanned,
            "candidates": self.candidates,
            "planned": self.planned,
            "closed": self.closed,
            "signatures": list(self.signatures),
            "skipped": self.skip_counters.as_dict(),
            "dryRun": self.dry_run,
            "wouldClose": [c.to_dict() for c in self.would_close],
            "reclaimableLamports": self.reclaimable_lamports,
            "abortedError": self.aborted_error,
        }


__all__ = [
    "SkipReason",
    "SubAccountRecord",
    "CloseCandidate",
    "SkipCounters",
    "Classification",
    "PolicyParameters",
    "DiscoveryResult",
    "RunReport",
]
