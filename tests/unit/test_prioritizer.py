"""
Prioritizer & Batch Selector Unit Tests
=======================================
"""

import pytest

from rent_reclaimer.modules.reclaimer.errors import ConfigurationError
from rent_reclaimer.modules.reclaimer.models import CloseCandidate
from rent_reclaimer.modules.reclaimer.prioritizer import prioritize, select


def candidate(name, lamports):
    return CloseCandidate(account=name, mint="mint", owner="owner", reclaimable_lamports=lamports)


class TestPrioritize:

    def test_sorted_descending(self):
        ordered = prioritize([candidate("a", 50), candidate("b", 200), candidate("c", 10)])
        assert [c.account for c in ordered] == ["b", "a", "c"]

    def test_ties_keep_discovery_order(self):
        items = [
            candidate("a", 10),
            candidate("b", 30),
            candidate("c", 10),
            candidate("d", 30),
            candidate("e", 10),
        ]

        ordered = prioritize(items)

        assert [c.account for c in ordered] == ["b", "d", "a", "c", "e"]

    def test_is_permutation_of_input(self):
        items = [candidate(str(i), (i * 7) % 5) for i in range(20)]
        ordered = prioritize(items)

        assert sorted(ordered, key=lambda c: c.account) == sorted(items, key=lambda c: c.account)
        values = [c.reclaimable_lamports for c in ordered]
        assert values == sorted(values, reverse=True)

    def test_input_not_mutated(self):
        items = [candidate("a", 1), candidate("b", 2)]
        prioritize(items)
        assert [c.account for c in items] == ["a", "b"]


class TestSelect:

    def test_prefix_of_ordered(self):
        ordered = [candidate(str(i), 100 - i) for i in range(10)]

        picked = select(ordered, 3)

        assert picked == ordered[:3]

    def test_shorter_than_cap(self):
        ordered = [candidate("a", 1), candidate("b", 0)]
        assert select(ordered, 25) == ordered

    def test_empty(self):
        assert select([], 5) == []

    @pytest.mark.parametrize("bad", [0, -1, True, 1.5])
    def test_non_positive_cap_is_config_error(self, bad):
        with pytest.raises(ConfigurationError):
            select([candidate("a", 1)], bad)
