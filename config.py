"""
Configuration management for pg_onboard.

Supports:
- TOML config files
- Environment variables (libpq names plus PG_ONBOARD_*)
- Command-line overrides
- Sensible defaults

Priority (highest to lowest):
1. Command-line arguments
2. Environment variables
3. Config file
4. Defaults
"""

import math
import os
import secrets
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Mapping

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib

from .protocol.dsn import DSN


# Default config file locations (searched in order)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / "pg_onboard.toml",
    Path.home() / ".config" / "pg_onboard" / "config.toml",
]

DEFAULT_MONITOR_USER = "pmm"


@dataclass
class DatabaseConfig:
    """Admin connection used to provision and probe."""
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    name: str = "postgres"
    sslmode: str = "prefer"
    timeout: Optional[float] = 10.0   # seconds per onboarding run; None disables


@dataclass
class MonitorConfig:
    """The restricted monitoring role."""
    user: str = DEFAULT_MONITOR_USER
    password: str = ""
    create_user: bool = True


@dataclass
class OutputConfig:
    """Output configuration."""
    json: bool = False
    quiet: bool = False


@dataclass
class Config:
    """Main configuration container."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Source tracking
    _config_file: Optional[Path] = None

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """
        Load configuration from file and environment.

        Args:
            config_path: Explicit path to config file. If None, searches default locations.
            environ: Environment mapping (default: os.environ)

        Returns:
            Config instance with loaded values
        """
        config = cls()

        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            path = cls._find_config_file()

        if path:
            config = cls._load_from_file(path)
            config._config_file = path

        config.apply_env(os.environ if environ is None else environ)
        return config

    @classmethod
    def _find_config_file(cls) -> Optional[Path]:
        """Find config file in default locations."""
        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                return path
        return None

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load config from TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        if "database" in data:
            db = data["database"]
            config.database = DatabaseConfig(
                host=db.get("host", config.database.host),
                port=int(db.get("port", config.database.port)),
                user=db.get("user", config.database.user),
                password=db.get("password", config.database.password),
                name=db.get("name", config.database.name),
                sslmode=db.get("sslmode", config.database.sslmode),
                timeout=db.get("timeout", config.database.timeout) or None,
            )

        if "monitor" in data:
            mon = data["monitor"]
            config.monitor = MonitorConfig(
                user=mon.get("user", config.monitor.user),
                password=mon.get("password", config.monitor.password),
                create_user=bool(mon.get("create_user", config.monitor.create_user)),
            )

        if "output" in data:
            out = data["output"]
            config.output = OutputConfig(
                json=bool(out.get("json", config.output.json)),
                quiet=bool(out.get("quiet", config.output.quiet)),
            )

        return config

    def apply_env(self, environ: Mapping[str, str]) -> "Config":
        """Override values from environment variables that are set."""
        if environ.get("PGHOST"):
            self.database.host = environ["PGHOST"]
        if environ.get("PGPORT"):
            self.database.port = int(environ["PGPORT"])
        if environ.get("PGUSER"):
            self.database.user = environ["PGUSER"]
        if environ.get("PGPASSWORD"):
            self.database.password = environ["PGPASSWORD"]
        if environ.get("PGDATABASE"):
            self.database.name = environ["PGDATABASE"]
        if environ.get("PGSSLMODE"):
            self.database.sslmode = environ["PGSSLMODE"]
        if environ.get("PG_ONBOARD_MONITOR_USER"):
            self.monitor.user = environ["PG_ONBOARD_MONITOR_USER"]
        if environ.get("PG_ONBOARD_MONITOR_PASSWORD"):
            self.monitor.password = environ["PG_ONBOARD_MONITOR_PASSWORD"]
        return self

    def override_from_args(self, args) -> "Config":
        """
        Override config values from argparse namespace.

        Args with value None are ignored (keeping config file values).
        """
        if getattr(args, "host", None):
            self.database.host = args.host
        if getattr(args, "port", None):
            self.database.port = args.port
        if getattr(args, "user", None):
            self.database.user = args.user
        if getattr(args, "password", None):
            self.database.password = args.password
        if getattr(args, "database", None):
            self.database.name = args.database
        if getattr(args, "sslmode", None):
            self.database.sslmode = args.sslmode
        if getattr(args, "timeout", None) is not None:
            self.database.timeout = args.timeout or None

        if getattr(args, "monitor_user", None):
            self.monitor.user = args.monitor_user
        if getattr(args, "monitor_password", None):
            self.monitor.password = args.monitor_password
        if getattr(args, "no_create_user", False):
            self.monitor.create_user = False

        if getattr(args, "json", False):
            self.output.json = True
        if getattr(args, "quiet", False):
            self.output.quiet = True

        return self

    def ensure_monitor_password(self) -> str:
        """Generate a monitoring role password if one is needed and missing."""
        if self.monitor.create_user and not self.monitor.password:
            self.monitor.password = secrets.token_urlsafe(16)
        return self.monitor.password

    def admin_dsn(self) -> DSN:
        db = self.database
        return DSN(
            user=db.user,
            password=db.password,
            host=db.host,
            port=db.port,
            database=db.name,
            sslmode=db.sslmode,
            connect_timeout=math.ceil(db.timeout) if db.timeout else None,
        )

    def apply_dsn(self, dsn: DSN) -> "Config":
        """Take the admin connection settings from a DSN."""
        self.database.host = dsn.host
        self.database.port = dsn.port
        self.database.user = dsn.user
        if dsn.password:
            self.database.password = dsn.password
        self.database.name = dsn.database
        self.database.sslmode = dsn.sslmode
        if dsn.connect_timeout:
            self.database.timeout = float(dsn.connect_timeout)
        return self

    def monitor_dsn(self) -> DSN:
        return self.admin_dsn().with_credentials(self.monitor.user, self.monitor.password)

    def validate(self) -> list:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.database.host:
            errors.append("Database host is required")
        if not self.database.user:
            errors.append("Database user is required")
        if not 0 < self.database.port < 65536:
            errors.append(f"Database port out of range: {self.database.port}")
        if self.database.timeout is not None and self.database.timeout <= 0:
            errors.append("Timeout must be positive")

        if self.monitor.create_user and not self.monitor.user:
            errors.append("Monitor user is required to create the monitoring role")

        return errors

    def summary(self, include_config_path: bool = True) -> str:
        """Generate human-readable config summary."""
        lines = []

        if include_config_path:
            if self._config_file:
                lines.append(f"Config: {self._config_file}")
            else:
                lines.append("Config: (defaults)")

        lines.append(f"Database: {self.admin_dsn().sanitized()}")
        if self.monitor.create_user:
            lines.append(f"Monitor role: {self.monitor.user} (create if missing)")
        else:
            lines.append(f"Monitor role: {self.monitor.user} (not provisioned)")
        timeout = f"{self.database.timeout}s" if self.database.timeout else "none"
        lines.append(f"Timeout: {timeout}")

        return "\n".join(lines)


def create_example_config(path: str = "pg_onboard.toml") -> Path:
    """Create example config file."""
    target = Path(path)

    if target.exists():
        raise FileExistsError(f"Config file already exists: {path}")

    target.write_text("""# pg_onboard Configuration

[database]
host = "localhost"
port = 5432
user = "postgres"
password = ""
name = "postgres"
sslmode = "prefer"
timeout = 10.0

[monitor]
user = "pmm"
password = ""
create_user = true

[output]
json = false
quiet = false
""")

    return target
