"""
Candidate Discovery Unit Tests
==============================
Counter accounting, parse errors, value lookups and enumeration failure.
"""

import pytest

from rent_reclaimer.modules.reclaimer.discovery import discover
from rent_reclaimer.modules.reclaimer.errors import EnumerationError
from rent_reclaimer.modules.reclaimer.models import PolicyParameters, SkipReason
from tests.mocks import new_address


def assert_accounted(result):
    """Every scanned record lands in exactly one bucket."""
    assert result.scanned == len(result.candidates) + result.skip_counters.total


class TestDiscoveryScenarios:

    @pytest.mark.asyncio
    async def test_mixed_amounts_with_threshold(self, ledger, owner):
        """Five accounts, two non-empty, one empty but under the minimum."""
        ledger.add_account(amount=0, lamports=20)
        ledger.add_account(amount=0, lamports=5)
        ledger.add_account(amount=5)
        ledger.add_account(amount=0, lamports=15)
        ledger.add_account(amount=100)

        result = await discover(ledger, owner, PolicyParameters(min_rent_lamports=10))

        assert result.scanned == 5
        assert [c.reclaimable_lamports for c in result.candidates] == [20, 15]
        assert result.skip_counters.non_empty == 2
        assert result.skip_counters.below_min_value == 1
        assert_accounted(result)

    @pytest.mark.asyncio
    async def test_every_reason_counted_once(self, ledger, owner):
        allowed = new_address()
        ledger.add_account(amount=1, mint=allowed)
        ledger.add_account(close_authority=new_address(), mint=allowed)
        ledger.add_account(mint=new_address())
        ledger.add_account(mint=allowed, lamports=1)
        ledger.add_broken_account()
        ledger.add_account(mint=allowed, lamports=2_039_280)

        policy = PolicyParameters(min_rent_lamports=100, allow_mints=frozenset({allowed}))
        result = await discover(ledger, owner, policy)

        counters = result.skip_counters
        for reason in SkipReason:
            assert counters.count(reason) == 1, reason
        assert len(result.candidates) == 1
        assert_accounted(result)

    @pytest.mark.asyncio
    async def test_candidates_keep_discovery_order(self, ledger, owner, policy):
        addresses = [ledger.add_account(lamports=1_000) for _ in range(4)]

        result = await discover(ledger, owner, policy)

        assert [c.account for c in result.candidates] == addresses

    @pytest.mark.asyncio
    async def test_empty_wallet(self, ledger, owner, policy):
        result = await discover(ledger, owner, policy)

        assert result.scanned == 0
        assert result.candidates == []
        assert result.skip_counters.total == 0


class TestRecordFailures:

    @pytest.mark.asyncio
    async def test_decode_failure_is_parse_error(self, ledger, owner, policy):
        ledger.add_broken_account()
        good = ledger.add_account()

        result = await discover(ledger, owner, policy)

        assert result.scanned == 2
        assert result.skip_counters.parse_error == 1
        assert [c.account for c in result.candidates] == [good]

    @pytest.mark.asyncio
    async def test_value_lookup_failure_is_parse_error(self, ledger, owner, policy):
        address = ledger.add_account()
        ledger.fail_value_lookup(address)

        result = await discover(ledger, owner, policy)

        assert result.skip_counters.parse_error == 1
        assert result.candidates == []
        assert_accounted(result)

    @pytest.mark.asyncio
    async def test_missing_value_defaults_to_zero(self, ledger, owner):
        ledger.add_account(lamports=None)

        free = await discover(ledger, owner, PolicyParameters(min_rent_lamports=0))
        assert free.candidates[0].reclaimable_lamports == 0

        strict = await discover(ledger, owner, PolicyParameters(min_rent_lamports=1))
        assert strict.skip_counters.below_min_value == 1


class TestValueLookup:

    @pytest.mark.asyncio
    async def test_rejected_accounts_skip_value_lookup(self, ledger, owner, policy):
        ledger.add_account(amount=7)
        ledger.add_account(close_authority=new_address())
        eligible = ledger.add_account()

        await discover(ledger, owner, policy)

        assert ledger.value_lookups == [eligible]


class TestEnumerationFailure:

    @pytest.mark.asyncio
    async def test_enumeration_error_propagates(self, ledger, owner, policy):
        ledger.enumeration_error = "rpc down"

        with pytest.raises(EnumerationError):
            await discover(ledger, owner, policy)
