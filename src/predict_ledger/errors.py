"""Exceptions raised by the ledger. The Ledger facade skips events that raise these."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for ledger failures that abort a single event."""


class InvalidEventError(LedgerError, ValueError):
    """Event is malformed: bad id, negative amount, out-of-range outcome."""


class DuplicateBetError(LedgerError):
    """A bet id was recorded twice."""
