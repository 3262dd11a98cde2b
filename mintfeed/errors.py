"""Exception taxonomy for a pipeline run.

Soft conditions (``ThreadReconstructionDegraded``, ``NormalizationFallback``)
are logged and absorbed where they occur. Everything else aborts the run.
"""

from __future__ import annotations


class MintfeedError(Exception):
    """Base class for mintfeed errors."""


class ConfigError(MintfeedError):
    """Configuration is missing or invalid."""


class SourceFetchError(MintfeedError):
    """The source platform could not be reached or returned unusable data."""


class NoEligibleCandidate(SourceFetchError):
    """The fetch window held no item that passes the candidate filters."""


class AlreadyProcessed(MintfeedError):
    """The candidate item is already present in the dedup ledger."""

    def __init__(self, source_item_id: str) -> None:
        super().__init__(f"{source_item_id} has already been minted")
        self.source_item_id = source_item_id


class ThreadReconstructionDegraded(MintfeedError):
    """The thread root lies outside the fetch window."""


class NormalizationFallback(MintfeedError):
    """The completion service failed; deterministic cleanup was used."""


class AcquisitionExhausted(MintfeedError):
    """Every media acquisition strategy failed."""

    def __init__(self, source_item_id: str, failures: list[tuple[str, str]]) -> None:
        detail = "; ".join(f"{spec}: {reason}" for spec, reason in failures)
        super().__init__(f"all {len(failures)} strategies failed for {source_item_id}: {detail}")
        self.source_item_id = source_item_id
        self.failures = failures


class MintingFailure(MintfeedError):
    """The minting subsystem rejected or failed the request."""


class LedgerError(MintfeedError):
    """The persisted dedup ledger could not be read or written."""
