"""Context store enrichment commands."""

import typer

from sqlpowerhouse.cli.context import CLIContext
from sqlpowerhouse.cli.output import OutputFormatter

app = typer.Typer(help="Populate the context store indexes")


@app.command("schema")
def sync_schema(ctx: typer.Context) -> None:
    """Summarize every table and upsert it into the table index.

    Reads tier, domain and categorical columns from the file named by
    SQLPOWERHOUSE_TABLE_METADATA_PATH, when set.

    Examples:

        sqlpowerhouse sync schema
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.get_services().build_schema_sync().run()
        formatter.print_sync_result(result)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("queries")
def sync_queries(ctx: typer.Context) -> None:
    """Summarize the most frequent SELECTs and upsert them into the query index.

    Requires PostgreSQL with the pg_stat_statements extension.

    Examples:

        sqlpowerhouse sync queries
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.get_services().build_query_log_sync().run()
        formatter.print_sync_result(result)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
