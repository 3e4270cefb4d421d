"""
ConsoleUI - Rich-based console interface.

Renders plans, instance info and errors. Passwords never reach the
terminal: statement arguments go through Exec.masked_args().
"""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..protocol.dsn import DSN
from ..protocol.errors import ErrorReport
from ..protocol.info import InstanceInfo
from ..protocol.statement import Exec


class ConsoleUI:
    """
    Rich console interface for pg_onboard.
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        self.quiet = quiet
        self.console = console or Console()
        self.err_console = Console(stderr=True) if console is None else console

    def print(self, *args, **kwargs):
        """Print to console."""
        if self.quiet:
            return
        self.console.print(*args, **kwargs)

    def print_header(self, title: str):
        """Print a section header."""
        if self.quiet:
            return
        self.console.print()
        self.console.rule(f"[bold blue]{title}[/]")

    def print_progress(self, message: str):
        """One progress line."""
        if self.quiet:
            return
        self.console.print(f"[dim]>[/] {message}")

    def print_statement(self, index: int, statement: Exec):
        """Progress line for a statement about to run."""
        if self.quiet:
            return
        args = ", ".join(str(a) for a in statement.masked_args())
        self.console.print(f"  [dim]{index + 1}.[/] [cyan]{statement.query}[/] [dim]({args})[/]")

    def print_plan(self, plan: List[Exec], title: str = "Provisioning Plan"):
        """Display a statement plan as a table."""
        if self.quiet:
            return

        if not plan:
            self.console.print("[green]Nothing to do: role already exists[/]")
            return

        table = Table(title=title, box=None)
        table.add_column("#", style="dim", justify="right")
        table.add_column("Statement", style="cyan")
        table.add_column("Args")

        for i, statement in enumerate(plan, 1):
            args = ", ".join(str(a) for a in statement.masked_args())
            table.add_row(str(i), statement.query, args)

        self.console.print(table)

    def print_info(self, info: InstanceInfo):
        """Display instance identity."""
        if self.quiet:
            return

        table = Table(show_header=False, box=None)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Hostname", info.hostname or "-")
        table.add_row("Port", info.port or "-")
        table.add_row("Distro", info.distro)
        table.add_row("Version", info.version)

        self.console.print(Panel(table, title="[bold]Instance[/]", border_style="cyan"))

    def print_credentials(self, dsn: DSN):
        """Show a generated password once (not affected by quiet)."""
        self.console.print(
            f"Generated password for [bold]{escape(dsn.user)}[/]: [bold]{escape(dsn.password)}[/]",
            highlight=False,
        )
        self.console.print(f"Monitor DSN: {dsn.to_url()}", markup=False, highlight=False, soft_wrap=True)

    def print_json(self, data: Dict[str, Any]):
        """Print a JSON document (not affected by quiet)."""
        self.console.print(json.dumps(data, indent=2), markup=False, highlight=False, soft_wrap=True)

    def print_error(self, error: BaseException, phase: Optional[str] = None):
        """Display an error on stderr (not affected by quiet)."""
        report = ErrorReport.from_exception(error, phase=phase)
        where = f" during {report.phase}" if report.phase else ""
        self.err_console.print(f"[bold red]Error{where}:[/] {report.message}")
        if report.pgcode:
            self.err_console.print(f"[dim]SQLSTATE {report.pgcode}[/]")
