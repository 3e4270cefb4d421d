"""
InstanceProber - reads the identity of a PostgreSQL instance.

One read-only query: server address, server port, version string.
"""

from typing import Optional, TYPE_CHECKING

from ..protocol.errors import UnexpectedResultError
from ..protocol.info import DISTRO, InstanceInfo

if TYPE_CHECKING:
    from ..runner.deadline import Deadline
    from ..runner.handle import DatabaseHandle


INFO_QUERY = "SELECT inet_server_addr(), inet_server_port(), version()"


def _text(value) -> str:
    # inet_server_addr() is NULL over a unix socket
    return "" if value is None else str(value)


class InstanceProber:
    """
    Probes instance identity for registration.
    """

    def __init__(self, handle: "DatabaseHandle"):
        self.handle = handle

    def probe(self, deadline: Optional["Deadline"] = None) -> InstanceInfo:
        """
        Fetch hostname, port and version.

        Raises:
            UnexpectedResultError: not exactly one row of three columns
            Any driver error, unchanged
        """
        rows = self.handle.query(INFO_QUERY, deadline=deadline)
        if len(rows) != 1:
            raise UnexpectedResultError(
                f"Expected 1 row from instance probe, got {len(rows)}",
                query=INFO_QUERY,
                expected=1,
                actual=len(rows),
            )

        row = rows[0]
        if len(row) != 3:
            raise UnexpectedResultError(
                f"Expected 3 columns from instance probe, got {len(row)}",
                query=INFO_QUERY,
                expected=3,
                actual=len(row),
            )

        hostname, port, version = row
        return InstanceInfo(
            hostname=_text(hostname),
            port=_text(port),
            distro=DISTRO,
            version=_text(version),
        )


def get_info(handle: "DatabaseHandle", deadline: Optional["Deadline"] = None) -> InstanceInfo:
    """Probe the instance behind handle."""
    return InstanceProber(handle).probe(deadline=deadline)
