"""Ledger error types."""


class LedgerError(Exception):
    """Base class for ledger failures that must reach the caller."""


class ValidationError(LedgerError, ValueError):
    """Input rejected before any mutation. The message is localized."""


class NotFoundError(LedgerError):
    """Requested committee, member or installment does not exist."""
