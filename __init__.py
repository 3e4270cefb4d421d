"""
pg_onboard - PostgreSQL onboarding for a host monitoring agent.

Provisions a restricted monitoring role (private schema plus read-only
views over pg_stat_activity and pg_stat_replication) and reads the
instance identity used to register it.

Usage:
    # As a module
    python -m pg_onboard -H localhost -U postgres

    # Programmatically
    from pg_onboard import DSN, DatabaseHandle, Deadline, make_grants, apply_grants, get_info

    handle = DatabaseHandle(conn)
    deadline = Deadline.after(10)
    plan = make_grants(handle, DSN(user="pmm", password="secret"), deadline)
    apply_grants(handle, plan, deadline)
    info = get_info(handle, deadline)
"""

__version__ = "1.0.0"

# Protocol exports
from .protocol import (
    DSN,
    Exec,
    Plan,
    InstanceInfo,
    OnboardError,
    OperationCancelled,
    DeadlineExceeded,
    UnexpectedResultError,
    ReadOnlyViolation,
    ConnectionFailed,
)

# Core operations
from .grants import make_grants, build_plan, apply_grants, ensure_role
from .discovery import get_info, InstanceProber

# Runner exports
from .runner import Deadline, DatabaseHandle, create_connection, OnboardRunner, OnboardResult
from .config import Config

__all__ = [
    # Version
    "__version__",
    # Protocol
    "DSN",
    "Exec",
    "Plan",
    "InstanceInfo",
    "OnboardError",
    "OperationCancelled",
    "DeadlineExceeded",
    "UnexpectedResultError",
    "ReadOnlyViolation",
    "ConnectionFailed",
    # Grants
    "make_grants",
    "build_plan",
    "apply_grants",
    "ensure_role",
    # Discovery
    "get_info",
    "InstanceProber",
    # Runner
    "Deadline",
    "DatabaseHandle",
    "create_connection",
    "OnboardRunner",
    "OnboardResult",
    "Config",
]
