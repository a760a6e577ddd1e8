"""
Unit Test Configuration
=======================
Fixtures for pure logic tests - NO I/O ALLOWED.

All unit tests should be completely isolated from:
- Network (RPC, HTTP)
- File system (except tmp_path)
"""

import pytest

from rent_reclaimer.modules.reclaimer.models import PolicyParameters


# ============================================================================
# AUTOUSE: ENFORCE I/O ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_unit_tests(monkeypatch):
    """
    Automatically disable network I/O for unit tests.
    Any test that accidentally tries to reach an RPC node will fail.
    """
    def block_network(*args, **kwargs):
        raise RuntimeError(
            "Network I/O detected in unit test! "
            "Unit tests must be pure logic with no external dependencies."
        )

    # solana-py's AsyncClient talks JSON-RPC over httpx
    monkeypatch.setattr("httpx.AsyncClient.post", block_network)
    monkeypatch.setattr("httpx.AsyncClient.send", block_network)


# ============================================================================
# POLICY FIXTURES
# ============================================================================


@pytest.fixture
def policy():
    """Default live policy: no threshold, cap of 25."""
    return PolicyParameters(min_rent_lamports=0, max_close_per_run=25, dry_run=False)


@pytest.fixture
def dry_policy():
    return PolicyParameters(min_rent_lamports=0, max_close_per_run=25, dry_run=True)
