"""
Flask CLI commands for the report builder.

    flask report-tables
    flask export-report --company-id 1 -c dealers.name -c dealers.region \
        --format xlsx --output dealers.xlsx
"""

import logging
import os

import click

from fieldsales.core.exceptions import InvalidRequestError, NotFoundError, UpstreamFailureError
from fieldsales.services.custom_report_service import run_export
from fieldsales.services.export_service import encode_report
from fieldsales.services.report_catalog import ColumnRef, list_tables

logger = logging.getLogger(__name__)


def parse_column_arg(value: str) -> ColumnRef:
    """``"dealers.name"`` → ColumnRef("dealers", "name")."""
    table, sep, column = value.partition(".")
    if not sep or not table or not column:
        raise click.BadParameter(f"expected <table>.<column>, got {value!r}")
    return ColumnRef(table, column)


def register_cli(app):
    """Attach report commands to ``app.cli``."""

    @app.cli.command("report-tables")
    def report_tables_cmd():
        """List reportable entities and their columns."""
        for meta in list_tables():
            click.echo(f"{meta.id} ({meta.title}): {', '.join(meta.columns)}")

    @app.cli.command("export-report")
    @click.option("--company-id", type=int, required=True, help="Company whose data is exported.")
    @click.option("--column", "-c", "columns", multiple=True, required=True,
                  help="Column as <table>.<column>; repeatable.")
    @click.option("--format", "fmt", type=click.Choice(["xlsx", "csv"]), default="xlsx",
                  show_default=True)
    @click.option("--output", "-o", type=click.Path(dir_okay=False),
                  help="Target file. Defaults to the generated filename in the working directory.")
    def export_report_cmd(company_id, columns, fmt, output):
        """Write a custom report export to disk."""
        refs = [parse_column_arg(c) for c in columns]
        try:
            export = encode_report(run_export(company_id, refs), fmt)
        except (InvalidRequestError, NotFoundError, UpstreamFailureError) as exc:
            raise click.ClickException(str(exc)) from exc

        path = output or os.path.join(os.getcwd(), export.filename)
        with open(path, "wb") as fh:
            fh.write(export.content)
        logger.info("Wrote %s (%d bytes)", path, len(export.content))
        click.echo(path)
