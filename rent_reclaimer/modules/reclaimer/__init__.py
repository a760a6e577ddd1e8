"""
Rent Reclaimer Module
=====================
Reclaims rent held by empty SPL token accounts.

Components:
- eligibility.py: pure close/skip decision per token account
- discovery.py: enumerates the owner's accounts, folds skip counters
- prioritizer.py: highest rent first, capped batch
- senders.py: direct sender and the (unwired) relay sender
- dispatcher.py: dry-run or live close of the selected batch
- coordinator.py: run_once / run_loop / scan
- reporting.py: human and JSON report templates
"""

from rent_reclaimer.modules.reclaimer.coordinator import ReclaimCoordinator
from rent_reclaimer.modules.reclaimer.models import PolicyParameters, RunReport

__all__ = [
    'ReclaimCoordinator',
    'PolicyParameters',
    'RunReport',
]
