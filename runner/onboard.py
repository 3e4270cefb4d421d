"""
OnboardRunner - onboarding workflow for one PostgreSQL instance.

CONNECT -> PLAN -> APPLY -> PROBE

The monitoring role is provisioned first (when enabled), then the
instance identity is read for registration. Both steps share one
connection and one deadline.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from ..config import Config
from ..discovery.instance import get_info
from ..grants.executor import apply_grants
from ..grants.planner import make_grants
from ..protocol.dsn import DSN
from ..protocol.errors import Phase
from ..protocol.info import InstanceInfo
from ..protocol.statement import Exec
from .deadline import Deadline
from .handle import DatabaseHandle, create_connection


@dataclass
class OnboardResult:
    """Outcome of an onboarding run."""
    info: InstanceInfo
    monitor_dsn: DSN
    plan: List[Exec] = field(default_factory=list)
    applied: int = 0
    dry_run: bool = False

    @property
    def created(self) -> bool:
        """True if the monitoring role was created by this run."""
        return self.applied > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary. Statement arguments are left out."""
        return {
            "info": self.info.to_dict(),
            "monitor_dsn": self.monitor_dsn.sanitized(),
            "statements": [s.query for s in self.plan],
            "applied": self.applied,
            "created": self.created,
            "dry_run": self.dry_run,
        }


class OnboardRunner:
    """
    Runs the onboarding workflow.

    Usage:
        config = Config.load()
        runner = OnboardRunner(config)
        runner.on_progress(print)
        result = runner.run(Deadline.after(10))
    """

    def __init__(self, config: Optional[Config] = None, connection=None):
        """
        Args:
            config: Onboarding configuration
            connection: Already open psycopg2 connection; when given the
                runner neither opens nor closes a connection
        """
        self.config = config or Config()
        self.conn = connection

        self.phase: Optional[Phase] = None
        self.applied = 0

        # Callbacks
        self._on_progress: Optional[Callable[[str], None]] = None
        self._on_statement: Optional[Callable[[int, Exec], None]] = None

    def on_progress(self, callback: Callable[[str], None]):
        """Register callback for progress messages."""
        self._on_progress = callback

    def on_statement(self, callback: Callable[[int, Exec], None]):
        """Register callback fired before each provisioning statement."""
        self._on_statement = callback

    def _progress(self, message: str):
        if self._on_progress:
            self._on_progress(message)

    def _admin_dsn(self, deadline: Optional[Deadline]) -> DSN:
        """Admin DSN with the connect timeout bounded by the deadline."""
        dsn = self.config.admin_dsn()
        remaining = deadline.remaining() if deadline is not None else None
        if remaining is not None:
            # libpq takes whole seconds, 0 would mean wait forever
            dsn = replace(dsn, connect_timeout=max(1, math.ceil(remaining)))
        return dsn

    def _track_statement(self, index: int, statement: Exec):
        # statements before index have been applied
        self.applied = index
        if self._on_statement:
            self._on_statement(index, statement)

    def run(self, deadline: Optional[Deadline] = None, dry_run: bool = False) -> OnboardResult:
        """
        Provision the monitoring role and probe the instance.

        Args:
            deadline: Cancellation token for every database call
            dry_run: Plan the role but do not execute the statements

        Returns:
            OnboardResult; errors propagate with self.phase telling where
            and self.applied counting the statements already committed
        """
        admin_dsn = self._admin_dsn(deadline)
        self.applied = 0

        owns_connection = self.conn is None
        self.phase = Phase.CONNECT
        if owns_connection:
            if deadline is not None:
                deadline.check()
            self._progress(f"Connecting to {admin_dsn.sanitized()}")
            conn = create_connection(admin_dsn)
        else:
            conn = self.conn

        try:
            handle = DatabaseHandle(conn)

            plan: List[Exec] = []
            if self.config.monitor.create_user:
                self.config.ensure_monitor_password()
                monitor = self.config.monitor_dsn()

                self.phase = Phase.PLAN
                plan = make_grants(handle, monitor, deadline=deadline)
                if not plan:
                    self._progress(f"Role '{monitor.user}' already exists")
                elif dry_run:
                    self._progress(f"Dry run: {len(plan)} statements planned for role '{monitor.user}'")
                else:
                    self.phase = Phase.APPLY
                    self._progress(f"Creating role '{monitor.user}'")
                    self.applied = apply_grants(
                        handle, plan, deadline=deadline, on_statement=self._track_statement
                    )

            self.phase = Phase.PROBE
            info = get_info(handle, deadline=deadline)
            if not info.hostname:
                info = InstanceInfo(
                    hostname=admin_dsn.host,
                    port=info.port or str(admin_dsn.port),
                    distro=info.distro,
                    version=info.version,
                )
            self._progress(f"Instance {info.hostname}:{info.port} ({info.distro})")
        finally:
            if owns_connection:
                conn.close()

        self.phase = None
        return OnboardResult(
            info=info,
            monitor_dsn=self.config.monitor_dsn(),
            plan=plan,
            applied=self.applied,
            dry_run=dry_run,
        )
