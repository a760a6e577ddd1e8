"""
Execution Dispatcher
====================
Closes the selected candidates one at a time, in priority order.

Workflow per candidate:
1. Check the stop token (cancellation between submissions)
2. Dry-run: record as "would close", no network call
3. Live: build close instruction -> sender.send() -> record signature

A SubmissionError stops the rest of the batch. Signatures collected so far
are kept in the outcome.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from solders.keypair import Keypair

from rent_reclaimer.modules.reclaimer.errors import SubmissionError
from rent_reclaimer.modules.reclaimer.models import CloseCandidate
from rent_reclaimer.modules.reclaimer.senders import TransactionSender, build_close_instruction
from rent_reclaimer.shared.system.logging import Logger


@dataclass
class ExecutionOutcome:
    """What the dispatcher did with one batch."""

    closed: int = 0
    signatures: List[str] = field(default_factory=list)
    would_close: List[CloseCandidate] = field(default_factory=list)
    aborted_error: Optional[str] = None
    cancelled: bool = False


class ExecutionDispatcher:
    """
    Dispatches close operations through a TransactionSender.

    Usage:
        dispatcher = ExecutionDispatcher(DirectSender(ledger), dry_run=False)
        outcome = await dispatcher.execute(picked, operator)
    """

    def __init__(self, sender: TransactionSender, dry_run: bool = True):
        self.sender = sender
        self.dry_run = dry_run

    async def execute(
        self,
        picked: Sequence[CloseCandidate],
        operator: Keypair,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> ExecutionOutcome:
        outcome = ExecutionOutcome()
        operator_pubkey = operator.pubkey()

        for candidate in picked:
            if should_stop is not None and should_stop():
                Logger.warning("[RECLAIM] Stop requested, leaving remaining batch untouched")
                outcome.cancelled = True
                break

            Logger.info(
                "[RECLAIM] Closing empty token account",
                token_account=candidate.account,
                mint=candidate.mint,
                rent_lamports=candidate.reclaimable_lamports,
            )

            if self.dry_run:
                outcome.would_close.append(candidate)
                Logger.info(f"[RECLAIM] [DRY RUN] Would close {candidate.account}")
                continue

            ix = build_close_instruction(candidate.account, operator_pubkey)

            try:
                sig = await self.sender.send(ix, operator)
            except SubmissionError as e:
                outcome.aborted_error = str(e)
                Logger.error(
                    "[RECLAIM] Close failed, aborting remaining batch",
                    token_account=candidate.account,
                    sender=self.sender.name,
                    err=str(e),
                )
                break

            outcome.closed += 1
            outcome.signatures.append(sig)
            Logger.success("[RECLAIM] Closed token account successfully", sig=sig)

        return outcome
