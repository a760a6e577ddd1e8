"""
Reclaim Coordinator Unit Tests
==============================
End-to-end runs against the mock ledger, plus the repeating loop.
"""

import asyncio

import pytest

from rent_reclaimer.modules.reclaimer.coordinator import ReclaimCoordinator, RunStage
from rent_reclaimer.modules.reclaimer.errors import ConfigurationError, EnumerationError
from rent_reclaimer.modules.reclaimer.models import PolicyParameters
from tests.mocks import MockSender


class TestRunOnce:

    @pytest.mark.asyncio
    async def test_batch_cap_picks_highest_value(self, ledger, sender, operator):
        ledger.add_account(lamports=50)
        top = ledger.add_account(lamports=200)
        ledger.add_account(lamports=10)
        policy = PolicyParameters(max_close_per_run=1, dry_run=False)

        report = await ReclaimCoordinator(ledger, sender, policy).run_once(operator)

        assert report.candidates == 3
        assert report.planned == 1
        assert report.closed == 1
        assert sender.sent == [top]

    @pytest.mark.asyncio
    async def test_partial_failure_returns_partial_report(self, ledger, operator):
        for lamports in (300, 200, 100):
            ledger.add_account(lamports=lamports)
        sender = MockSender(fail_on={2})
        policy = PolicyParameters(dry_run=False)

        report = await ReclaimCoordinator(ledger, sender, policy).run_once(operator)

        assert report.planned == 3
        assert report.closed == 1
        assert len(report.signatures) == 1
        assert report.aborted
        assert sender.calls == 2

    @pytest.mark.asyncio
    async def test_dry_run_closes_nothing(self, ledger, sender, operator, dry_policy):
        for _ in range(4):
            ledger.add_account()

        report = await ReclaimCoordinator(ledger, sender, dry_policy).run_once(operator)

        assert report.dry_run
        assert report.planned == 4
        assert report.closed == 0
        assert report.signatures == []
        assert len(report.would_close) == 4
        assert sender.calls == 0

    @pytest.mark.asyncio
    async def test_report_invariants(self, ledger, sender, operator):
        ledger.add_account(amount=3)
        ledger.add_broken_account()
        for lamports in (5, 40, 40, 1):
            ledger.add_account(lamports=lamports)
        policy = PolicyParameters(min_rent_lamports=2, max_close_per_run=2, dry_run=False)

        report = await ReclaimCoordinator(ledger, sender, policy).run_once(operator)

        assert report.scanned == report.candidates + report.skip_counters.total
        assert report.planned == min(report.candidates, policy.max_close_per_run)
        assert report.closed <= report.planned
        assert report.reclaimable_lamports == 85
        assert [c.reclaimable_lamports for c in report.top_candidates] == [40, 40, 5]

    @pytest.mark.asyncio
    async def test_enumeration_error_propagates(self, ledger, sender, operator, policy):
        ledger.enumeration_error = "503"
        coordinator = ReclaimCoordinator(ledger, sender, policy)

        with pytest.raises(EnumerationError):
            await coordinator.run_once(operator)
        assert sender.calls == 0

    @pytest.mark.asyncio
    async def test_returns_to_idle(self, ledger, sender, operator, policy):
        coordinator = ReclaimCoordinator(ledger, sender, policy)
        await coordinator.run_once(operator)
        assert coordinator.stage == RunStage.IDLE

    def test_non_positive_cap_rejected_at_construction(self, ledger, sender):
        with pytest.raises(ConfigurationError):
            ReclaimCoordinator(ledger, sender, PolicyParameters(max_close_per_run=0))


class TestScan:

    @pytest.mark.asyncio
    async def test_scan_never_closes(self, ledger, sender, owner, policy):
        ledger.add_account(lamports=10)
        ledger.add_account(lamports=20)

        report = await ReclaimCoordinator(ledger, sender, policy).scan(owner)

        assert report.dry_run
        assert report.candidates == 2
        assert report.closed == 0
        assert sender.calls == 0
        assert [c.reclaimable_lamports for c in report.would_close] == [20, 10]


class TestRunLoop:

    @pytest.mark.asyncio
    async def test_runs_requested_iterations(self, ledger, sender, operator, dry_policy):
        ledger.add_account()
        reports = []
        coordinator = ReclaimCoordinator(ledger, sender, dry_policy)

        iterations = await coordinator.run_loop(
            operator, interval_sec=0.01, max_iterations=3, on_report=reports.append
        )

        assert iterations == 3
        assert len(reports) == 3
        assert ledger.call_count > 0

    @pytest.mark.asyncio
    async def test_failed_iteration_does_not_stop_loop(self, ledger, sender, operator, dry_policy):
        """First iteration hits an enumeration error; the second succeeds."""
        ledger.enumeration_error = "flaky"
        reports = []
        coordinator = ReclaimCoordinator(ledger, sender, dry_policy)

        async def on_report(report):
            reports.append(report)

        original = ledger.enumerate_sub_accounts

        async def recovering(owner):
            try:
                return await original(owner)
            finally:
                ledger.enumeration_error = None

        ledger.enumerate_sub_accounts = recovering

        iterations = await coordinator.run_loop(
            operator, interval_sec=0.01, max_iterations=2, on_report=on_report
        )

        assert iterations == 2
        assert len(reports) == 1

    @pytest.mark.asyncio
    async def test_stop_event_ends_loop(self, ledger, sender, operator, dry_policy):
        stop = asyncio.Event()
        coordinator = ReclaimCoordinator(ledger, sender, dry_policy)

        def stop_after_first(report):
            stop.set()

        iterations = await asyncio.wait_for(
            coordinator.run_loop(operator, interval_sec=60, stop_event=stop, on_report=stop_after_first),
            timeout=5,
        )

        assert iterations == 1

    @pytest.mark.asyncio
    async def test_invalid_interval(self, ledger, sender, operator, dry_policy):
        with pytest.raises(ValueError):
            await ReclaimCoordinator(ledger, sender, dry_policy).run_loop(operator, interval_sec=0)
