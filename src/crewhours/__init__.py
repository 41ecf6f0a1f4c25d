"""Crew hours reconciliation: job ledger vs. time-clock export."""

__version__ = "0.3.0"
