"""
Grant planner - decides whether the monitoring role must be provisioned.

The role gets a private schema named after it, holding read-only views
over pg_stat_activity and pg_stat_replication, so monitoring never needs
direct access to the superuser-only catalog columns.

Provisioning is idempotent at role granularity: if pg_roles already has
the role, the plan is empty. Two planners racing on an unprovisioned
role can both see it missing; the unique role name on the server is then
the only guard and the second CREATE USER fails.
"""

from typing import Optional, TYPE_CHECKING

from ..protocol.dsn import DSN
from ..protocol.statement import Exec, Plan

if TYPE_CHECKING:
    from ..runner.deadline import Deadline
    from ..runner.handle import DatabaseHandle


ROLE_EXISTS_QUERY = "SELECT 1 FROM pg_roles WHERE rolname = $1"

CREATE_USER = "CREATE USER $1 PASSWORD $2"
SET_SEARCH_PATH = "ALTER USER $1 SET SEARCH_PATH TO $1,pg_catalog"
CREATE_SCHEMA = "CREATE SCHEMA $1 AUTHORIZATION $1"
CREATE_ACTIVITY_VIEW = "CREATE VIEW $1.pg_stat_activity AS SELECT * from pg_catalog.pg_stat_activity"
# no ON keyword here, unlike GRANT_REPLICATION_VIEW
GRANT_ACTIVITY_VIEW = "GRANT SELECT $1.pg_stat_activity TO $1"
CREATE_REPLICATION_VIEW = "CREATE VIEW $1.pg_stat_replication AS SELECT * from pg_catalog.pg_stat_replication"
GRANT_REPLICATION_VIEW = "GRANT SELECT ON $1.pg_stat_replication TO $1"


def role_exists(handle: "DatabaseHandle", user: str, deadline: Optional["Deadline"] = None) -> bool:
    """Check pg_roles for the role, username bound as a parameter."""
    rows = handle.query(ROLE_EXISTS_QUERY, (user,), deadline=deadline)
    return len(rows) > 0


def build_plan(dsn: DSN) -> Plan:
    """
    Build the provisioning statements for the DSN's role.

    Pure: no database access. Role first, then schema, then each view
    followed by its grant. The password is bound to the first statement
    only.
    """
    user = dsn.user
    return [
        Exec(CREATE_USER, (user, dsn.password)),
        Exec(SET_SEARCH_PATH, (user,)),
        Exec(CREATE_SCHEMA, (user,)),
        Exec(CREATE_ACTIVITY_VIEW, (user,)),
        Exec(GRANT_ACTIVITY_VIEW, (user,)),
        Exec(CREATE_REPLICATION_VIEW, (user,)),
        Exec(GRANT_REPLICATION_VIEW, (user,)),
    ]


def make_grants(handle: "DatabaseHandle", dsn: DSN, deadline: Optional["Deadline"] = None) -> Plan:
    """
    Plan the provisioning of the DSN's role.

    Args:
        handle: Open database handle
        dsn: Descriptor holding the role name and password to provision
        deadline: Optional cancellation token for the existence check

    Returns:
        Empty list if the role exists, otherwise the statements to run,
        in order

    Raises:
        ValueError: empty username
        Any error of the existence check, unchanged
    """
    if not dsn.user:
        raise ValueError("Cannot plan grants for an empty username")

    if role_exists(handle, dsn.user, deadline=deadline):
        return []
    return build_plan(dsn)
