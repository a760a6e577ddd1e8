"""
Eligibility Filter
==================
Decides whether a decoded token account may be closed.

Rules run in a fixed order and the first failing rule wins:
1. NON_EMPTY:        token amount != 0
2. WRONG_AUTHORITY:  close authority set and != owner (None defaults to owner)
3. DISALLOWED_MINT:  allow-list configured and mint not in it
4. BELOW_MIN_VALUE:  lamports < MIN_RENT_LAMPORTS (missing lamports count as 0)

No I/O here. The lamport lookup is done by discovery between rules 3 and 4.
"""

from typing import Optional

from rent_reclaimer.modules.reclaimer.models import (
    Classification,
    CloseCandidate,
    PolicyParameters,
    SkipReason,
    SubAccountRecord,
)


def precheck(
    record: SubAccountRecord,
    policy: PolicyParameters,
    owner: str,
) -> Optional[SkipReason]:
    """Apply rules 1-3. Returns the skip reason, or None if the account passes."""
    if record.amount != 0:
        return SkipReason.NON_EMPTY

    if record.close_authority is not None and record.close_authority != owner:
        return SkipReason.WRONG_AUTHORITY

    if policy.has_allow_list and record.mint not in policy.allow_mints:
        return SkipReason.DISALLOWED_MINT

    return None


def classify(
    record: SubAccountRecord,
    policy: PolicyParameters,
    owner: str,
) -> Classification:
    """
    Classify a record as a close candidate or a skip.

    Args:
        record: Decoded token account
        policy: Active reclaim policy
        owner: Operator wallet address (the expected close authority)

    Returns:
        Classification with either `candidate` or `skip_reason` set
    """
    reason = precheck(record, policy, owner)
    if reason is not None:
        return Classification(skip_reason=reason)

    lamports = record.lamports or 0
    if lamports < policy.min_rent_lamports:
        return Classification(skip_reason=SkipReason.BELOW_MIN_VALUE)

    return Classification(
        candidate=CloseCandidate(
            account=record.address,
            mint=record.mint,
            owner=record.owner,
            reclaimable_lamports=lamports,
        )
    )
