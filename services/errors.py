"""
Engine error hierarchy.

``ValidationError`` is surfaced to callers. ``StorageError`` is raised by
the key-value layer and handled inside the engine, which degrades to
empty defaults instead of propagating it.
"""

from __future__ import annotations

from datetime import datetime, UTC
from typing import Any, Dict, Optional


class EngineError(Exception):
    """Base exception for all sentiment engine errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(UTC)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationError(EngineError):
    """Invalid input: blank or non-text, empty batch, bad paging."""


class StorageError(EngineError):
    """Persisted state could not be read or written."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        operation: str = "read",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.key = key
        self.operation = operation  # "read", "write", "delete"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"key": self.key, "operation": self.operation})
        return data


__all__ = ["EngineError", "ValidationError", "StorageError"]
