"""
Custom report executor: turns a list of picked columns into rows.

Two entry points:
  - run_preview: rows for a single entity, capped at the preview limit
  - run_export:  full rows for every entity touched by the selection

Both resolve flatteners through ``FLATTENERS`` and project each flat row
onto exactly the requested columns. Nothing is cached between calls.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from fieldsales.core.exceptions import InvalidRequestError, NotFoundError, UpstreamFailureError
from fieldsales.models import db
from fieldsales.services.report_catalog import ColumnRef, columns_for, is_known_table
from fieldsales.services.report_flatteners import FLATTENERS

logger = logging.getLogger(__name__)

MAX_PREVIEW_ROWS = 10


@dataclass
class ReportTable:
    """Rows of one entity, projected onto the selected columns."""

    table_id: str
    columns: list[str]
    rows: list[dict] = field(default_factory=list)


@dataclass
class PreviewData:
    entity_id: str
    columns: list[str]
    rows: list[dict]


# ═════════════════════════════════════════════════════════════════════════════
# REQUEST PARSING
# ═════════════════════════════════════════════════════════════════════════════

def parse_columns(payload) -> list[ColumnRef]:
    """Validate the ``columns`` field of a report request.

    Accepts ``[{"table": ..., "column": ...}, ...]`` (ColumnRef instances
    pass through). Raises InvalidRequestError on anything else.
    """
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise InvalidRequestError("columns must be a list")

    refs = []
    for index, item in enumerate(payload):
        if isinstance(item, ColumnRef):
            refs.append(item)
            continue
        if not isinstance(item, dict):
            raise InvalidRequestError("Each column must be an object", details={"index": index})
        table, column = item.get("table"), item.get("column")
        if not isinstance(table, str) or not table or not isinstance(column, str) or not column:
            raise InvalidRequestError(
                "Each column needs non-empty 'table' and 'column' strings",
                details={"index": index},
            )
        refs.append(ColumnRef(table, column))
    return refs


def group_columns(columns: list[ColumnRef]) -> dict[str, list[str]]:
    """Group by entity in first-seen order, dropping duplicate columns."""
    grouped: dict[str, list[str]] = {}
    for ref in columns:
        picked = grouped.setdefault(ref.table, [])
        if ref.column not in picked:
            picked.append(ref.column)
    return grouped


def clamp_limit(limit, default: int = MAX_PREVIEW_ROWS) -> int:
    if limit is None:
        return default
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise InvalidRequestError("limit must be an integer", details={"limit": limit})
    return max(1, min(limit, MAX_PREVIEW_ROWS))


# ═════════════════════════════════════════════════════════════════════════════
# EXECUTION
# ═════════════════════════════════════════════════════════════════════════════

def _flatten(table_id: str, company_id: int) -> list[dict]:
    if not is_known_table(table_id) or table_id not in FLATTENERS:
        raise NotFoundError(resource="Report entity", resource_id=table_id, company_id=company_id)
    try:
        return FLATTENERS[table_id](company_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Flattening %s failed for company %s: %s", table_id, company_id, exc,
                     extra={"company_id": company_id, "entity": table_id})
        raise UpstreamFailureError(f"Could not load {table_id}", cause=exc) from exc


def project_rows(rows: list[dict], columns: list[str]) -> list[dict]:
    """Keep exactly ``columns`` on every row; absent keys become None."""
    return [{col: row.get(col) for col in columns} for row in rows]


def _warn_unknown_columns(table_id: str, columns: list[str]) -> None:
    known = set(columns_for(table_id))
    unknown = [c for c in columns if c not in known]
    if unknown:
        logger.debug("Columns %s are not in the %s catalog; projecting as null", unknown, table_id)


def run_preview(company_id: int, columns: list[ColumnRef], *, limit=None,
                table_id: str | None = None) -> PreviewData:
    """Preview rows for one entity.

    The entity is ``table_id`` when given, else the table of the first
    column. Columns of other entities are ignored.
    """
    if not columns:
        raise InvalidRequestError("No columns selected")

    entity = table_id or columns[0].table
    if not is_known_table(entity):
        raise NotFoundError(resource="Report entity", resource_id=entity, company_id=company_id)

    grouped = group_columns(columns)
    ignored = [t for t in grouped if t != entity]
    if ignored:
        logger.debug("Preview of %s ignores columns of %s", entity, ignored)

    picked = grouped.get(entity)
    if not picked:
        raise InvalidRequestError(f"No columns selected for {entity}", details={"tableId": entity})

    limit = clamp_limit(limit)
    _warn_unknown_columns(entity, picked)
    rows = _flatten(entity, company_id)[:limit]
    return PreviewData(entity_id=entity, columns=picked, rows=project_rows(rows, picked))


def run_export(company_id: int, columns: list[ColumnRef]) -> dict[str, ReportTable]:
    """Flatten every entity in the selection once, in first-seen order."""
    if not columns:
        raise InvalidRequestError("No columns selected")

    tables: dict[str, ReportTable] = {}
    for entity, picked in group_columns(columns).items():
        _warn_unknown_columns(entity, picked)
        rows = _flatten(entity, company_id)
        tables[entity] = ReportTable(table_id=entity, columns=picked, rows=project_rows(rows, picked))
        logger.info("Export flattened %s: %d rows", entity, len(rows),
                    extra={"company_id": company_id, "entity": entity, "row_count": len(rows)})
    return tables
