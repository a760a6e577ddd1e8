"""
Candidate Discovery
===================
Enumerates the operator's token accounts and folds every one of them into
either a CloseCandidate or exactly one skip counter.

Per-record failures (decode, value lookup) are counted as parse errors and
never abort the scan. Only a failed enumeration call propagates.
"""

from dataclasses import replace
from typing import List, Optional, Protocol

from rent_reclaimer.modules.reclaimer.eligibility import classify, precheck
from rent_reclaimer.modules.reclaimer.errors import RecordDecodeError, ValueLookupError
from rent_reclaimer.modules.reclaimer.models import (
    CloseCandidate,
    DiscoveryResult,
    PolicyParameters,
    SkipCounters,
    SkipReason,
    SubAccountRecord,
)
from rent_reclaimer.shared.system.logging import Logger


class LedgerReader(Protocol):
    """Read-side of the ledger collaborator used by discovery."""

    async def enumerate_sub_accounts(self, owner: str) -> List[str]: ...

    async def get_decoded_account(self, address: str) -> SubAccountRecord: ...

    async def get_account_value(self, address: str) -> Optional[int]: ...


async def discover(
    ledger: LedgerReader,
    owner: str,
    policy: PolicyParameters,
) -> DiscoveryResult:
    """
    Scan all token accounts of `owner`.

    Args:
        ledger: Ledger collaborator
        owner: Operator wallet address
        policy: Active reclaim policy

    Returns:
        DiscoveryResult with candidates in discovery order

    Raises:
        EnumerationError: the account listing itself failed
    """
    addresses = await ledger.enumerate_sub_accounts(owner)

    counters = SkipCounters()
    candidates: List[CloseCandidate] = []

    for address in addresses:
        try:
            record = await ledger.get_decoded_account(address)

            # Value lookup only for accounts that passed the cheap rules
            if precheck(record, policy, owner) is None and record.lamports is None:
                lamports = await ledger.get_account_value(address)
                record = replace(record, lamports=lamports if lamports is not None else 0)

        except (RecordDecodeError, ValueLookupError) as e:
            counters = counters.bump(SkipReason.PARSE_ERROR)
            Logger.warning(
                "[DISCOVERY] Skip: could not parse token account",
                token_account=address,
                err=str(e),
            )
            continue

        result = classify(record, policy, owner)
        if result.eligible:
            candidates.append(result.candidate)
        else:
            counters = counters.bump(result.skip_reason)

    return DiscoveryResult(
        scanned=len(addresses),
        candidates=candidates,
        skip_counters=counters,
    )
