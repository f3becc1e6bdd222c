"""Gig marketplace backend: jobs, escrow ledger, shortlisting and scoring."""

__version__ = "1.0.0"
