"""
Error taxonomy for onboarding.

Driver errors (psycopg2.Error) are never wrapped: they reach the caller
as raised. The classes below cover what the driver cannot express:
- OperationCancelled / DeadlineExceeded: the caller gave up
- UnexpectedResultError: the server answered with the wrong shape
- ReadOnlyViolation: a mutating statement was sent down the read path
- ConnectionFailed: no connection could be opened

ErrorReport turns any of them into a serializable packet for JSON output.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional, Any
from enum import Enum
import json


class ErrorType(str, Enum):
    """Types of errors that can occur."""
    SQL_EXECUTION = "SQL_EXECUTION"
    CONNECTION = "CONNECTION"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    UNEXPECTED_RESULT = "UNEXPECTED_RESULT"
    READ_ONLY_VIOLATION = "READ_ONLY_VIOLATION"
    CONFIGURATION = "CONFIGURATION"
    INTERNAL = "INTERNAL"


class Phase(str, Enum):
    """Phases where errors can occur."""
    CONNECT = "CONNECT"
    PLAN = "PLAN"
    APPLY = "APPLY"
    PROBE = "PROBE"


class OnboardError(Exception):
    """Base class for onboarding errors."""
    pass


class OperationCancelled(OnboardError):
    """The operation was cancelled by the caller."""
    pass


class DeadlineExceeded(OperationCancelled):
    """The caller's deadline expired before the operation finished."""
    pass


class UnexpectedResultError(OnboardError):
    """A query returned a result of the wrong shape."""

    def __init__(self, message: str, query: str = "", expected: int = 1, actual: int = 0):
        super().__init__(message)
        self.query = query
        self.expected = expected
        self.actual = actual


class ReadOnlyViolation(OnboardError):
    """A statement passed to the read-only query path would mutate state."""

    def __init__(self, message: str, query: str = ""):
        super().__init__(message)
        self.query = query


class ConnectionFailed(OnboardError):
    """Could not open a connection to the server."""
    pass


@dataclass
class ErrorReport:
    """Serializable description of a failed operation."""
    error_type: str
    message: str
    phase: Optional[str] = None
    pgcode: Optional[str] = None       # PostgreSQL SQLSTATE
    failed_sql: Optional[str] = None

    @classmethod
    def from_exception(cls, error: BaseException, phase: Optional[str] = None) -> "ErrorReport":
        """Classify an exception."""
        if isinstance(error, DeadlineExceeded):
            error_type = ErrorType.TIMEOUT
        elif isinstance(error, OperationCancelled):
            error_type = ErrorType.CANCELLED
        elif isinstance(error, UnexpectedResultError):
            error_type = ErrorType.UNEXPECTED_RESULT
        elif isinstance(error, ReadOnlyViolation):
            error_type = ErrorType.READ_ONLY_VIOLATION
        elif isinstance(error, ConnectionFailed):
            error_type = ErrorType.CONNECTION
        elif hasattr(error, "pgcode"):
            error_type = ErrorType.SQL_EXECUTION
        elif isinstance(error, (ValueError, FileNotFoundError)):
            error_type = ErrorType.CONFIGURATION
        else:
            error_type = ErrorType.INTERNAL

        message = str(error).strip() or type(error).__name__
        return cls(
            error_type=error_type.value,
            message=message,
            phase=phase.value if isinstance(phase, Phase) else phase,
            pgcode=getattr(error, "pgcode", None),
            failed_sql=getattr(error, "query", None) or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, dropping empty fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
