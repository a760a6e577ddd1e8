"""
Rent Reclaimer Test Mocks
=========================
Reusable mock classes for isolated testing.
"""

from tests.mocks.mock_ledger import MockLedger, MockSender, new_address

__all__ = [
    "MockLedger",
    "MockSender",
    "new_address",
]
