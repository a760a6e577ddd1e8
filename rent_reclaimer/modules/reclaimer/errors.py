"""
Reclaimer Errors
================
Exception taxonomy for the reclaim engine.

Recovered locally:
- RecordDecodeError / ValueLookupError: counted as parse errors, run continues
- SubmissionError: stops the remaining batch, partial report is kept

Fatal:
- EnumerationError: the run fails, no report
- ConfigurationError: process start fails, no run executes
"""


class ReclaimerError(Exception):
    """Base class for all reclaimer errors."""


class RecordDecodeError(ReclaimerError):
    """A single token account record could not be fetched or decoded."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Could not parse token account {address}: {reason}")


class ValueLookupError(ReclaimerError):
    """The lamport balance of a token account could not be fetched."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Could not fetch lamports for {address}: {reason}")


class EnumerationError(ReclaimerError):
    """Listing the owner's token accounts failed."""


class SubmissionError(ReclaimerError):
    """A close transaction was rejected or never confirmed."""


class RelaySenderError(SubmissionError):
    """The fee-sponsoring relay path is not available."""


class ConfigurationError(ReclaimerError):
    """Invalid or missing configuration detected before any run."""
