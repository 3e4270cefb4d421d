"""
Grants module - monitoring role provisioning.

Components:
- make_grants / build_plan: decide and plan (no side effects beyond the check)
- apply_grants / ensure_role: execute a plan in order
"""

from .planner import (
    ROLE_EXISTS_QUERY,
    role_exists,
    build_plan,
    make_grants,
)
from .executor import apply_grants, ensure_role

__all__ = [
    "ROLE_EXISTS_QUERY",
    "role_exists",
    "build_plan",
    "make_grants",
    "apply_grants",
    "ensure_role",
]
