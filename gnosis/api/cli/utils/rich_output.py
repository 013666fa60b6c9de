"""Rich-based output formatting for Gnosis CLI commands."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gnosis.core.exceptions import GnosisError
from gnosis.services import IndexSession


class RichOutputFormatter:
    """Terminal output for CLI commands."""

    def __init__(self, verbose: bool = False, console: Console | None = None):
        self.verbose = verbose
        self.console = console or Console()

    def info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[blue][INFO][/blue] {message}")

    def success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green][SUCCESS][/green] {message}")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow][WARN][/yellow] {message}")

    def error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red][ERROR][/red] {message}", style="red")

    def verbose_info(self, message: str) -> None:
        """Print a verbose info message if verbose mode is enabled."""
        if self.verbose:
            self.console.print(f"[cyan][DEBUG][/cyan] {message}")

    def index_summary(
        self, sessions: list[IndexSession], errors: dict[str, GnosisError]
    ) -> None:
        """Display one row per configured index in a panel."""
        table = Table(expand=False)
        table.add_column("Index", style="cyan")
        table.add_column("Directory")
        table.add_column("URI prefix", style="dim")
        table.add_column("Indexed", justify="right", style="green")
        table.add_column("Not indexed", justify="right", style="yellow")
        table.add_column("Orphans removed", justify="right")

        for session in sessions:
            for result in session.walk_results:
                table.add_row(
                    session.name,
                    str(result.root),
                    session.section.uri_prefix(result.root),
                    str(result.indexed),
                    str(result.not_indexed),
                    str(session.orphans_removed),
                )

        for name, error in errors.items():
            table.add_row(name, f"[red]{error}[/red]", "", "-", "-", "-")

        border_style = "red" if errors else "green"
        title = "[bold red]Indexing Failed[/bold red]" if errors else "[bold green]Indexing Complete[/bold green]"
        self.console.print(Panel(table, title=title, border_style=border_style, padding=(1, 2)))
