"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Malformed input or missing required fields. Never retried."""


class NotFoundError(DomainError):
    """Referenced account or transaction does not belong to the user."""


class StorageError(RuntimeError):
    """I/O or constraint failure in the storage layer.

    Not a DomainError: callers may retry storage failures, never
    validation failures.
    """


def missing_fields(entity: str, fields: list[str]) -> str:
    """Return message for a payload missing required fields."""
    return f"{entity} is missing required field{'s' if len(fields) != 1 else ''}: {', '.join(fields)}"


def account_not_found(account_id: str) -> str:
    """Return message for missing or foreign account."""
    return f"Account '{account_id}' not found"


def storage_failure(operation: str) -> str:
    """Return message for a failed storage operation."""
    return f"Storage failure during {operation}"
