"""
Column selection state.

The committed selection is one ordered, duplicate-free tuple of ColumnRef.
It only changes through the reducer functions below, each of which returns
a new ColumnSelection; per-entity views are derived with the selectors.
"""

from dataclasses import dataclass

from fieldsales.services.report_catalog import ColumnRef, columns_for, is_known_table


@dataclass(frozen=True)
class ColumnSelection:
    columns: tuple[ColumnRef, ...] = ()

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self):
        return iter(self.columns)

    def __contains__(self, ref) -> bool:
        return ref in self.columns

    def to_payload(self) -> list[dict]:
        return [ref.to_dict() for ref in self.columns]


# ── Reducer ───────────────────────────────────────────────────────────────────


def toggle_field(state: ColumnSelection, table: str, column: str) -> ColumnSelection:
    """Add ``table.column`` at the end, or remove it if already selected."""
    if not is_known_table(table):
        raise ValueError(f"Unknown report entity: {table!r}")
    if column not in columns_for(table):
        raise ValueError(f"Unknown column {column!r} for {table}")

    ref = ColumnRef(table, column)
    if ref in state.columns:
        return ColumnSelection(tuple(c for c in state.columns if c != ref))
    return ColumnSelection(state.columns + (ref,))


def clear_entity(state: ColumnSelection, table: str) -> ColumnSelection:
    """Drop every column of ``table``; other entities are untouched."""
    return ColumnSelection(tuple(c for c in state.columns if c.table != table))


def reset() -> ColumnSelection:
    return ColumnSelection()


# ── Selectors ─────────────────────────────────────────────────────────────────


def checked_for(state: ColumnSelection, table: str) -> list[str]:
    """Selected column names of ``table``, in selection order."""
    return [c.column for c in state.columns if c.table == table]


def tables_in(state: ColumnSelection) -> list[str]:
    """Entities with at least one selected column, in first-seen order."""
    seen: list[str] = []
    for ref in state.columns:
        if ref.table not in seen:
            seen.append(ref.table)
    return seen
