"""
Reclaim Run Coordinator
=======================
Sequences one reclaim run and optionally repeats it on a fixed interval.

Run stages:
    IDLE -> SCANNING -> FILTERING -> PRIORITIZING -> SELECTING -> EXECUTING -> DONE

Nothing is carried over between runs except the ledger client, the sender
and the policy, all read-only.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from solders.keypair import Keypair

from rent_reclaimer.modules.reclaimer.discovery import LedgerReader, discover
from rent_reclaimer.modules.reclaimer.dispatcher import ExecutionDispatcher
from rent_reclaimer.modules.reclaimer.models import CloseCandidate, PolicyParameters, RunReport
from rent_reclaimer.modules.reclaimer.prioritizer import prioritize, select
from rent_reclaimer.modules.reclaimer.senders import TransactionSender
from rent_reclaimer.shared.system.logging import Logger

TOP_CANDIDATES = 3

ReportCallback = Callable[[RunReport], Optional[Awaitable[None]]]


class RunStage(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    FILTERING = "filtering"
    PRIORITIZING = "prioritizing"
    SELECTING = "selecting"
    EXECUTING = "executing"
    DONE = "done"


class ReclaimCoordinator:
    """
    Runs the reclaim pipeline: discover -> prioritize -> select -> execute.

    Usage:
        coordinator = ReclaimCoordinator(ledger, DirectSender(ledger), policy)
        report = await coordinator.run_once(operator)
        await coordinator.run_loop(operator, interval_sec=60, stop_event=stop)
    """

    def __init__(
        self,
        ledger: LedgerReader,
        sender: TransactionSender,
        policy: PolicyParameters,
    ):
        self.ledger = ledger
        self.sender = sender
        self.policy = policy.validate()
        self.stage = RunStage.IDLE

    async def run_once(
        self,
        operator: Keypair,
        stop_event: Optional[asyncio.Event] = None,
    ) -> RunReport:
        """
        Execute one full run for the operator's wallet.

        Raises:
            EnumerationError: discovery could not list accounts (no report)
        """
        owner = str(operator.pubkey())
        self.stage = RunStage.IDLE
        Logger.info(
            "[RECLAIM] Starting reclaim scan",
            owner=owner,
            dry_run=self.policy.dry_run,
            sender=self.sender.name,
        )

        report, picked = await self._plan(owner, dry_run=self.policy.dry_run)

        self.stage = RunStage.EXECUTING
        dispatcher = ExecutionDispatcher(self.sender, dry_run=self.policy.dry_run)
        should_stop = stop_event.is_set if stop_event is not None else None
        outcome = await dispatcher.execute(picked, operator, should_stop=should_stop)

        report.closed = outcome.closed
        report.signatures = outcome.signatures
        report.would_close = outcome.would_close
        report.aborted_error = outcome.aborted_error

        self.stage = RunStage.DONE
        Logger.info(
            "[RECLAIM] Run complete",
            planned=report.planned,
            closed=report.closed,
            dry_run=report.dry_run,
            aborted=report.aborted,
        )
        self.stage = RunStage.IDLE
        return report

    async def scan(self, owner: str) -> RunReport:
        """
        Detect-only run: discovery, prioritization and selection, never closes.

        Used by the chat notifier, which reports but never submits.
        """
        report, picked = await self._plan(owner, dry_run=True)
        report.would_close = picked
        self.stage = RunStage.IDLE
        return report

    async def _plan(self, owner: str, dry_run: bool) -> Tuple[RunReport, List[CloseCandidate]]:
        self.stage = RunStage.SCANNING
        found = await discover(self.ledger, owner, self.policy)

        self.stage = RunStage.FILTERING
        Logger.info(
            "[RECLAIM] Candidates found",
            scanned=found.scanned,
            found=len(found.candidates),
            max_close_per_run=self.policy.max_close_per_run,
            **found.skip_counters.as_dict(),
        )

        self.stage = RunStage.PRIORITIZING
        ordered = prioritize(found.candidates)

        self.stage = RunStage.SELECTING
        picked = select(ordered, self.policy.max_close_per_run)

        report = RunReport(
            scanned=found.scanned,
            candidates=len(ordered),
            planned=len(picked),
            skip_counters=found.skip_counters,
            dry_run=dry_run,
            top_candidates=ordered[:TOP_CANDIDATES],
            reclaimable_lamports=sum(c.reclaimable_lamports for c in ordered),
        )
        return report, picked

    async def run_loop(
        self,
        operator: Keypair,
        interval_sec: float,
        stop_event: Optional[asyncio.Event] = None,
        max_iterations: Optional[int] = None,
        on_report: Optional[ReportCallback] = None,
    ) -> int:
        """
        Run immediately, then again `interval_sec` after each run finishes.

        Iteration failures are logged and the loop keeps going. Returns the
        number of iterations executed once stopped.
        """
        if interval_sec <= 0:
            raise ValueError(f"interval_sec must be > 0, got {interval_sec}")

        stop_event = stop_event or asyncio.Event()
        iterations = 0
        Logger.info("[WATCH] Watch mode enabled", interval_sec=interval_sec)

        while not stop_event.is_set():
            iterations += 1
            try:
                report = await self.run_once(operator, stop_event=stop_event)
                if on_report is not None:
                    result = on_report(report)
                    if asyncio.iscoroutine(result):
                        await result
            except Exception as e:
                Logger.error("[WATCH] Reclaim iteration failed", iteration=iterations, err=str(e))

            if max_iterations is not None and iterations >= max_iterations:
                break

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_sec)
            except asyncio.TimeoutError:
                pass

        Logger.info("[WATCH] Watch mode stopped", iterations=iterations)
        return iterations
