# academy_loader/exceptions.py
"""Exceptions raised while generating and loading academy data.

Every exception carries a machine friendly ``code``, a human readable
``message`` and an optional ``context`` dict (phase names, table names,
counts) so that log lines and the CLI can report failures consistently.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class LoaderError(Exception):
    """Base exception with structured metadata.

    Attributes
    ----------
    message
        Human readable message.
    code
        Machine friendly error code (snake_case).
    details
        Arbitrary extra data useful for debugging.
    timestamp
        UTC ISO timestamp when the exception was created.
    cause
        Optional underlying exception instance.
    context
        Optional lightweight context dict (phase, table, counts).
    """

    code: str = "loader_error"

    def __init__(
        self,
        message: str = "An academy loader error occurred",
        *,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.cause = cause
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}({self.code}): {self.message}"
        if self.context:
            base += f" | context={self.context}"
        if self.details is not None:
            base += f" | details={self.details}"
        if self.cause is not None:
            base += f" | cause={repr(self.cause)}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Return a serializable representation for logs and reports."""
        return {
            "error": {
                "type": self.__class__.__name__,
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "context": self.context,
                "timestamp": self.timestamp,
            }
        }


class GenerationError(LoaderError):
    """Raised when records cannot be generated from the given inputs."""

    code = "generation_error"


class ConfigurationError(LoaderError):
    """Raised when settings fail validation before any connection is made."""

    code = "configuration_error"

    def __init__(
        self,
        message: str = "Invalid configuration",
        *,
        issues: Optional[list] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        self.issues = issues or []
        if self.issues:
            self.context.setdefault("issue_count", len(self.issues))


class DatabaseError(LoaderError):
    """Connection failure, statement failure or constraint violation.

    The load phase that failed is recorded in ``context["phase"]`` and the
    driver exception is kept as ``cause``.
    """

    code = "database_error"

    def __init__(
        self,
        message: str = "Database operation failed",
        *,
        phase: Optional[str] = None,
        table: Optional[str] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        if phase:
            self.context.setdefault("phase", phase)
        if table:
            self.context.setdefault("table", table)

    @property
    def phase(self) -> Optional[str]:
        return self.context.get("phase")


class IncompleteBatchError(DatabaseError):
    """Raised when a table holds a different row count than was staged."""

    code = "incomplete_batch"

    def __init__(
        self,
        table: str,
        expected: int,
        actual: int,
        message: Optional[str] = None,
        *,
        phase: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        msg = message or (
            f"Table {table} holds {actual} rows after loading, expected {expected}"
        )
        super().__init__(msg, phase=phase, table=table, cause=cause)
        self.expected = expected
        self.actual = actual
        self.context.setdefault("expected", expected)
        self.context.setdefault("actual", actual)


__all__ = [
    "LoaderError",
    "GenerationError",
    "ConfigurationError",
    "DatabaseError",
    "IncompleteBatchError",
]
