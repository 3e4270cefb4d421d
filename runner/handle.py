"""
DatabaseHandle - the one database abstraction both onboarding steps share.

Wraps a psycopg2 connection and offers:
- query(): read-only, parameterized, returns rows
- execute(): one side-effecting Exec statement

Both honour a caller-supplied Deadline: the running query is cancelled
on the server when the deadline expires or is cancelled.
"""

import re
import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import psycopg2
from psycopg2 import sql
from psycopg2.errors import QueryCanceled

from ..protocol.dsn import DSN
from ..protocol.errors import ConnectionFailed, DeadlineExceeded, ReadOnlyViolation
from ..protocol.statement import Exec, PLACEHOLDER_RE
from .deadline import Deadline


_ALLOWED_PREFIXES = re.compile(r"^\s*(SELECT|SHOW|WITH|EXPLAIN)\b", re.IGNORECASE)

_BLOCKED_KEYWORDS = re.compile(
    r"\b(INSERT|UPDATE|DELETE|MERGE|UPSERT|CREATE|ALTER|DROP|TRUNCATE|GRANT|REVOKE"
    r"|COPY|CALL|DO|VACUUM|REINDEX|CLUSTER|SET|RESET|LOCK|COMMENT|REFRESH|SECURITY)\b",
    re.IGNORECASE,
)

# Placeholders after these keywords are values, all others name objects.
_LITERAL_CONTEXT = re.compile(r"\bPASSWORD\s+$", re.IGNORECASE)


def validate_readonly(query: str) -> None:
    """Reject anything that is not a single read-only statement."""
    stripped = query.strip()
    if not _ALLOWED_PREFIXES.match(stripped):
        raise ReadOnlyViolation(
            f"Statement rejected: does not start with SELECT, SHOW, WITH or EXPLAIN. "
            f"Got: {stripped[:80]}",
            query=query,
        )
    no_strings = re.sub(r"'[^']*'", "''", stripped)
    no_strings = re.sub(r'"[^"]*"', '""', no_strings)
    match = _BLOCKED_KEYWORDS.search(no_strings)
    if match:
        raise ReadOnlyViolation(
            f"Statement rejected: contains blocked keyword '{match.group()}'",
            query=query,
        )
    if ";" in no_strings.rstrip().rstrip(";"):
        raise ReadOnlyViolation("Statement rejected: multiple statements", query=query)


def bind_positional(query: str, args: Sequence[Any]) -> Tuple[str, Optional[Tuple[Any, ...]]]:
    """
    Rewrite $n placeholders into psycopg2 %s markers.

    Args:
        query: Query text with $1..$n placeholders
        args: Values, position-correlated to the placeholders

    Returns:
        (query, params) ready for cursor.execute(); params is None when the
        query has no placeholders, so a literal % is left alone
    """
    if not PLACEHOLDER_RE.search(query):
        return query, None

    params: List[Any] = []

    def substitute(match: "re.Match") -> str:
        index = int(match.group(1))
        if index < 1 or index > len(args):
            raise ValueError(f"Placeholder ${index} out of range for {len(args)} argument(s)")
        params.append(args[index - 1])
        return "%s"

    text = PLACEHOLDER_RE.sub(substitute, query.replace("%", "%%"))
    return text, tuple(params)


def compose_statement(statement: Exec) -> sql.Composed:
    """
    Render an Exec into a psycopg2 Composed statement.

    Utility statements (CREATE USER, GRANT, ...) take no bind parameters,
    so values are quoted client-side: sql.Literal after PASSWORD,
    sql.Identifier everywhere else.
    """
    statement.validate()

    parts = []
    position = 0
    for match in PLACEHOLDER_RE.finditer(statement.query):
        text = statement.query[position:match.start()]
        if text:
            parts.append(sql.SQL(text))

        value = statement.args[int(match.group(1)) - 1]
        if _LITERAL_CONTEXT.search(statement.query[:match.start()]):
            parts.append(sql.Literal(value))
        else:
            parts.append(sql.Identifier(str(value)))
        position = match.end()

    tail = statement.query[position:]
    if tail:
        parts.append(sql.SQL(tail))
    return sql.Composed(parts)


class DatabaseHandle:
    """
    Database handle over a psycopg2 (or psycopg2-compatible) connection.

    The handle does not own the connection: opening and closing it is up
    to the caller.
    """

    def __init__(self, connection):
        self.conn = connection

    def query(
        self,
        query: str,
        args: Sequence[Any] = (),
        deadline: Optional[Deadline] = None,
    ) -> List[tuple]:
        """
        Run a read-only parameterized query.

        Args:
            query: SELECT/SHOW/WITH/EXPLAIN text with $n placeholders
            args: Bound values
            deadline: Optional cancellation token

        Returns:
            All rows of the result
        """
        validate_readonly(query)
        text, params = bind_positional(query, args)

        with self._guard(deadline):
            with self.conn.cursor() as cur:
                cur.execute(text, params)
                return list(cur.fetchall())

    def execute(self, statement: Exec, deadline: Optional[Deadline] = None) -> None:
        """
        Run one side-effecting statement.

        Committed on its own unless the connection is in autocommit mode.
        """
        composed = compose_statement(statement)

        with self._guard(deadline):
            with self.conn.cursor() as cur:
                cur.execute(composed)
            if not getattr(self.conn, "autocommit", False):
                self.conn.commit()

    @contextmanager
    def _guard(self, deadline: Optional[Deadline]) -> Iterator[None]:
        """Cancel the running query when the deadline fires."""
        if deadline is None:
            yield
            return

        deadline.check()

        fired = threading.Event()

        def cancel():
            fired.set()
            self.conn.cancel()

        timer = None
        remaining = deadline.remaining()
        if remaining is not None:
            timer = threading.Timer(remaining, cancel)
            timer.daemon = True
            timer.start()
        unregister = deadline.on_cancel(cancel)

        try:
            deadline.check()
            yield
        except QueryCanceled as e:
            if not fired.is_set():
                # server-side statement_timeout, not ours
                raise
            raise (deadline.error() or DeadlineExceeded("deadline exceeded")) from e
        finally:
            unregister()
            if timer is not None:
                timer.cancel()


def create_connection(dsn: DSN, autocommit: bool = True):
    """
    Open a psycopg2 connection.

    Autocommit is on by default so every provisioning statement commits
    by itself.
    """
    try:
        conn = psycopg2.connect(**dsn.connect_kwargs())
    except psycopg2.OperationalError as e:
        raise ConnectionFailed(f"Error connecting to {dsn.sanitized()}: {e}") from e

    conn.autocommit = autocommit
    return conn
