"""
Rent Reclaimer Test Configuration
=================================
Shared fixtures and pytest markers for the test suite.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rent_reclaimer.shared.system.logging import Logger  # noqa: E402


# ============================================================================
# PYTEST MARKERS
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "network: marks tests that require network access"
    )


# ============================================================================
# SHARED FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def quiet_console():
    """Keep Rich console output out of test logs."""
    Logger.set_silent(True)
    yield
    Logger.set_silent(False)


@pytest.fixture
def operator():
    from solders.keypair import Keypair
    return Keypair()


@pytest.fixture
def owner(operator):
    return str(operator.pubkey())


@pytest.fixture
def ledger():
    from tests.mocks import MockLedger
    return MockLedger()


@pytest.fixture
def sender():
    from tests.mocks import MockSender
    return MockSender()
