"""SQL Powerhouse CLI - Main entry point."""

import logging
from typing import Annotated

import typer

import sqlpowerhouse
from sqlpowerhouse.cli.context import CLIContext, build_settings
from sqlpowerhouse.cli.output import OutputFormatter

app = typer.Typer(
    name="sqlpowerhouse",
    help="SQL Powerhouse CLI - natural-language questions to validated SQL",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            help="Database URL (PostgreSQL or SQLite). Overrides SQLPOWERHOUSE_DATABASE_URL.",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option("--echo", "-e", help="Echo SQL statements to console"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON (machine-readable)"),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    settings = build_settings(database, echo=echo)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = CLIContext(settings=settings, json_output=json_output)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"SQL Powerhouse v{sqlpowerhouse.__version__}")


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "0.0.0.0",
    port: Annotated[int, typer.Option("--port", "-p", help="Bind port")] = 8000,
) -> None:
    """Run the HTTP API.

    Examples:

        sqlpowerhouse serve --port 8080
    """
    import uvicorn

    from sqlpowerhouse.api.app import create_app

    cli_ctx: CLIContext = ctx.obj
    uvicorn.run(
        create_app(settings=cli_ctx.settings),
        host=host,
        port=port,
        log_level=cli_ctx.settings.log_level.lower(),
    )


@app.command()
def generate(
    ctx: typer.Context,
    question: Annotated[str, typer.Argument(help="Natural-language question")],
    strategy: Annotated[
        str | None,
        typer.Option("--strategy", "-s", help="Synthesis strategy: retrieval, schema or pattern"),
    ] = None,
) -> None:
    """Generate validated SQL for a question.

    Examples:

        sqlpowerhouse generate "Show active users" --strategy pattern
        sqlpowerhouse --json generate "Total revenue"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        generator = cli_ctx.get_services().build_generator(strategy)  # type: ignore[arg-type]
        formatter.print_sql(generator.generate(question))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command()
def validate(
    ctx: typer.Context,
    sql: Annotated[str, typer.Argument(help="SQL statement to validate")],
) -> None:
    """Validate SQL with the keyword screen and EXPLAIN, without executing it.

    Examples:

        sqlpowerhouse validate "SELECT * FROM users LIMIT 10"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.get_services().validator.validate(sql)
        if result.valid:
            formatter.print_success("Query is valid", {"sql": result.sql})
        else:
            formatter.print_error(ValueError(result.error))
            raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command()
def schema(ctx: typer.Context) -> None:
    """Show the live database schema."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        formatter.print_schema(cli_ctx.get_services().inspector.fetch_schema())
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


# Register command groups
from sqlpowerhouse.cli.commands import sync  # noqa: E402

app.add_typer(sync.app, name="sync")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
