"""
Grant executor - runs a provisioning plan against the server.

Statements run one at a time, strictly in plan order. There is no
wrapping transaction: when a statement fails, those before it stay
applied and the error propagates unchanged so the caller can reconcile.
"""

from typing import Callable, Optional, TYPE_CHECKING

from ..protocol.dsn import DSN
from ..protocol.statement import Exec, Plan
from .planner import make_grants

if TYPE_CHECKING:
    from ..runner.deadline import Deadline
    from ..runner.handle import DatabaseHandle


StatementCallback = Callable[[int, Exec], None]


def apply_grants(
    handle: "DatabaseHandle",
    plan: Plan,
    deadline: Optional["Deadline"] = None,
    on_statement: Optional[StatementCallback] = None,
) -> int:
    """
    Execute a plan in order.

    Args:
        handle: Open database handle
        plan: Statements from make_grants()
        deadline: Optional cancellation token, checked by every statement
        on_statement: Called with (index, statement) before each statement

    Returns:
        Number of statements executed
    """
    applied = 0
    for index, statement in enumerate(plan):
        if on_statement:
            on_statement(index, statement)
        handle.execute(statement, deadline=deadline)
        applied += 1
    return applied


def ensure_role(
    handle: "DatabaseHandle",
    dsn: DSN,
    deadline: Optional["Deadline"] = None,
    on_statement: Optional[StatementCallback] = None,
) -> Plan:
    """
    Provision the DSN's role unless it already exists.

    Returns:
        The plan that was applied; empty when the role was already there
    """
    plan = make_grants(handle, dsn, deadline=deadline)
    apply_grants(handle, plan, deadline=deadline, on_statement=on_statement)
    return plan
