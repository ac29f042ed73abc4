"""Preview table model: column descriptors and row re-keying."""

from dataclasses import dataclass

from fieldsales.builder.selection import ColumnSelection, checked_for
from fieldsales.services.report_catalog import get_table_meta, humanize_column

MAX_PREVIEW_ROWS = 10


@dataclass(frozen=True)
class PreviewColumn:
    table: str
    column: str
    header: str
    table_label: str

    @property
    def id(self) -> str:
        return f"{self.table}.{self.column}"


def build_preview_columns(selection: ColumnSelection, table: str) -> list[PreviewColumn]:
    """One descriptor per selected column of ``table``."""
    meta = get_table_meta(table)
    label = meta.title if meta else table
    return [
        PreviewColumn(table=table, column=col, header=humanize_column(col), table_label=label)
        for col in checked_for(selection, table)
    ]


def rekey_rows(columns: list[PreviewColumn], rows: list[dict]) -> list[dict]:
    """Key server rows (bare column names) by ``table.column``.

    Every expected key is present (None when the row lacks it) and at most
    MAX_PREVIEW_ROWS rows are kept.
    """
    return [
        {c.id: row.get(c.column) for c in columns}
        for row in rows[:MAX_PREVIEW_ROWS]
    ]
