"""
Mock components for testing pg_onboard.

MockConnection stands in for a psycopg2 connection so the planner, the
prober and the runner can be tested without a PostgreSQL server.
"""

from .mock_connection import MockConnection, MockCursor, Expectation

__all__ = [
    "MockConnection",
    "MockCursor",
    "Expectation",
]
