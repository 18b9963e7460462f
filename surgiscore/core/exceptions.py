"""
Exception hierarchy for SurgiScore.

Provides specific exception types for the different error categories with
structured error information.
"""
from typing import Any, Dict, Optional


class SurgiScoreError(Exception):
    """Base exception for all SurgiScore errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for CLI/JSON output."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ScoringInputError(SurgiScoreError, ValueError):
    """A scoring primitive was called with a value outside its documented domain."""

    def __init__(
        self,
        message: str,
        parameter: str = "unknown",
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="SCORING_INPUT_ERROR",
            details={"parameter": parameter, "value": value, **(details or {})},
        )
        self.parameter = parameter
        self.value = value


class StorageError(SurgiScoreError):
    """Errors reading or writing persisted records."""

    def __init__(
        self,
        message: str,
        collection: str = "unknown",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            details={"collection": collection, **(details or {})},
        )
        self.collection = collection


class DocumentError(SurgiScoreError):
    """Errors while rendering or writing clinical documents."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="DOCUMENT_ERROR", details=details)


class ContentError(SurgiScoreError):
    """Errors loading or querying the CME content library."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="CONTENT_ERROR", details=details)
