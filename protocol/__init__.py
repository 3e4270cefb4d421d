"""
Protocol definitions for pg_onboard.

Value records passed between the onboarding components:
- DSN: connection descriptor (credentials of the role being provisioned)
- Exec / Plan: planned provisioning statements
- InstanceInfo: instance identity handed to the registration client
- Errors: OnboardError hierarchy and ErrorReport
"""

from .dsn import DSN
from .statement import Exec, Plan, placeholders
from .info import InstanceInfo, DISTRO
from .errors import (
    ErrorType,
    Phase,
    OnboardError,
    OperationCancelled,
    DeadlineExceeded,
    UnexpectedResultError,
    ReadOnlyViolation,
    ConnectionFailed,
    ErrorReport,
)

__all__ = [
    "DSN",
    "Exec",
    "Plan",
    "placeholders",
    "InstanceInfo",
    "DISTRO",
    "ErrorType",
    "Phase",
    "OnboardError",
    "OperationCancelled",
    "DeadlineExceeded",
    "UnexpectedResultError",
    "ReadOnlyViolation",
    "ConnectionFailed",
    "ErrorReport",
]
