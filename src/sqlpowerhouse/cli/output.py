"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from sqlpowerhouse.core.types import SyncResult, TableSchema
from sqlpowerhouse.exceptions import SqlPowerhouseError

console = Console()


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_sql(self, sql: str) -> None:
        """Print generated SQL, highlighted in terminal mode."""
        if self.json_mode:
            print(json.dumps({"sql": sql}, indent=2))
        else:
            console.print(Syntax(sql, "sql", word_wrap=True))

    def print_schema(self, tables: list[TableSchema]) -> None:
        """Print tables and their columns.

        Args:
            tables: Live schema snapshot
        """
        if self.json_mode:
            print(json.dumps([t.model_dump() for t in tables], default=str, indent=2))
            return

        if not tables:
            console.print("No tables found", style="yellow")
            return

        for table in tables:
            console.print(f"\n[bold]Table:[/bold] {table.name}")
            columns_table = Table(show_header=True, header_style="bold cyan")
            columns_table.add_column("Column")
            columns_table.add_column("Type")
            columns_table.add_column("Nullable")
            for column in table.columns:
                columns_table.add_row(column.name, column.data_type, "✓" if column.nullable else "")
            console.print(columns_table)

    def print_sync_result(self, result: SyncResult) -> None:
        """Print the outcome of an enrichment job."""
        details = {
            "index": result.index_name,
            "processed": result.processed,
            "upserted": result.upserted,
            "failed": result.failed,
            "duration": f"{result.duration_seconds:.2f}s",
        }
        if self.json_mode:
            print(json.dumps(result.model_dump(), default=str, indent=2))
        elif result.success:
            self.print_success(f"{result.job.capitalize()} sync completed", details)
        else:
            console.print(f"⚠ {result.job.capitalize()} sync completed with failures", style="yellow")
            for key, value in details.items():
                console.print(f"  {key}: {value}", style="dim")
            for error in result.errors:
                console.print(f"  • {error}", style="red")

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message.

        Args:
            message: Success message
            details: Optional details to display
        """
        if self.json_mode:
            output = {"success": True, "message": message}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message.

        Args:
            error: Exception to display
        """
        if self.json_mode:
            if isinstance(error, SqlPowerhouseError):
                print(json.dumps(error.to_dict(), indent=2))
            else:
                print(json.dumps({"error": str(error)}, indent=2))
        else:
            error_text = str(error)
            if isinstance(error, SqlPowerhouseError) and error.context:
                context_str = "\n".join(f"{k}: {v}" for k, v in error.context.items())
                error_text = f"{error_text}\n\n{context_str}"

            panel = Panel(
                error_text,
                title="[red]Error[/red]",
                border_style="red",
            )
            console.print(panel)
