# FILE: pharmaledger/services/errors.py
from __future__ import annotations


class LedgerError(RuntimeError):
    """Base for every refusal raised by the domain services."""
    status_code = 400


class NotFoundError(LedgerError):
    status_code = 404


class ConflictError(LedgerError):
    status_code = 409


class ReferenceInUseError(LedgerError):
    status_code = 409


class StateError(LedgerError):
    status_code = 400


class InsufficientStockError(LedgerError):
    status_code = 400


class LedgerValidationError(LedgerError):
    status_code = 422
