from __future__ import annotations

import sys
from typing import Optional

import typer
import uvicorn
from rich import box
from rich.console import Console
from rich.table import Table

from db_explorer.config import get_settings
from db_explorer.errors import ExplorerError
from db_explorer.infrastructure.db_factory import get_pool, wait_for_database
from db_explorer.service import Explorer
from db_explorer.utils.logging import configure_logging

app = typer.Typer(help="DB Explorer CLI: a generic REST API over a PostgreSQL schema.")


def _explorer() -> Explorer:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return Explorer(get_pool(settings), settings)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"schema={settings.db_schema} | "
        f"pool=({settings.pool_min_size},{settings.pool_max_size}) | "
        f"api={settings.api_host}:{settings.api_port}"
    )


@app.command()
def tables() -> None:
    """
    List the tables exposed by the API.
    """
    try:
        names = _explorer().list_tables()
    except ExplorerError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1)
    for name in names:
        typer.echo(name)


@app.command()
def describe(table: str = typer.Argument(..., help="Table to describe.")) -> None:
    """
    Show each column's database type, nullability and kind.
    """
    try:
        descriptor = _explorer().table(table)
    except ExplorerError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1)

    rich_table = Table(title=f"{descriptor.name}", box=box.ROUNDED)
    rich_table.add_column("Column", style="cyan", no_wrap=True)
    rich_table.add_column("Database type")
    rich_table.add_column("Nullable", justify="center")
    rich_table.add_column("Kind", style="magenta")
    rich_table.add_column("Identity", justify="center")
    for column in descriptor.columns.values():
        rich_table.add_row(
            column.name,
            column.db_type,
            "yes" if column.nullable else "no",
            column.kind.value,
            "*" if column.name == descriptor.identity_column else "",
        )
    Console().print(rich_table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port."),
) -> None:
    """
    Wait for the database, then serve the REST API with uvicorn.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    wait_for_database(get_pool(settings))
    uvicorn.run(
        "db_explorer.api:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
