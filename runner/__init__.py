"""
Runner module - database plumbing and orchestration.

Components:
- Deadline: caller-supplied cancellation / timeout token
- DatabaseHandle: read-only queries and provisioning statements
- OnboardRunner: connect, ensure the monitoring role, probe the instance
"""

from .deadline import Deadline
from .handle import (
    DatabaseHandle,
    create_connection,
    validate_readonly,
    bind_positional,
    compose_statement,
)
from .onboard import OnboardRunner, OnboardResult

__all__ = [
    "Deadline",
    "DatabaseHandle",
    "create_connection",
    "validate_readonly",
    "bind_positional",
    "compose_statement",
    "OnboardRunner",
    "OnboardResult",
]
