"""
Custom report builder endpoints.

    POST /api/v1/custom-report      (also served at /custom-report)
        body: {"columns": [{"table": ..., "column": ...}, ...],
               "format": "json" | "csv" | "xlsx",
               "limit": 1..10,          json only, default 10
               "tableId": "<entity>"}  json only, default: first column's table
        json  → {"data": [ {column: value, ...} ]}
        csv   → application/zip, one <entity>.csv per entity
        xlsx  → workbook, one sheet per entity

    GET /api/v1/custom-report/tables
        → {"tables": [{id, title, icon, columns}, ...]}

Company scope comes from g.company_id (company-context middleware); requests
without one get 401. Every error body carries "data": [] so preview callers
can always read it.
"""

import logging

from flask import Blueprint, Response, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from fieldsales.core.exceptions import InvalidRequestError, NotFoundError, UpstreamFailureError
from fieldsales.services import custom_report_service as reports
from fieldsales.services.export_service import encode_report
from fieldsales.services.report_catalog import list_tables
from fieldsales.utils.errors import E, api_error

logger = logging.getLogger(__name__)

custom_report_bp = Blueprint("custom_report", __name__)


# ── Error handlers ────────────────────────────────────────────────────────────


@custom_report_bp.errorhandler(InvalidRequestError)
def _handle_invalid(error: InvalidRequestError):
    return api_error(E.VALIDATION_INVALID, str(error), details=error.details, data=[])


@custom_report_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error), data=[])


@custom_report_bp.errorhandler(UpstreamFailureError)
def _handle_upstream(error: UpstreamFailureError):
    logger.error("Custom report upstream failure: %s (cause: %r)", error, error.cause,
                 extra={"company_id": getattr(g, "company_id", None)})
    return api_error(E.UPSTREAM, str(error), data=[])


@custom_report_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unexpected error in custom_report_bp endpoint=%s", request.endpoint)
    return api_error(E.INTERNAL, "Internal server error", data=[])


# ═════════════════════════════════════════════════════════════════════════
# Catalog
# ═════════════════════════════════════════════════════════════════════════


@custom_report_bp.route("/api/v1/custom-report/tables", methods=["GET"])
def list_report_tables():
    """Reportable entities and their selectable columns."""
    return jsonify({"tables": [t.to_dict() for t in list_tables()]})


# ═════════════════════════════════════════════════════════════════════════
# Preview / export
# ═════════════════════════════════════════════════════════════════════════


def _handle_report_request():
    company_id = getattr(g, "company_id", None)
    if not company_id:
        return api_error(E.UNAUTHORIZED, "Unauthorized: no company context", data=[])

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    columns = reports.parse_columns(body.get("columns"))
    fmt = str(body.get("format") or "json").lower()

    if fmt == "json":
        preview = reports.run_preview(
            company_id,
            columns,
            limit=body.get("limit", current_app.config.get("CUSTOM_REPORT_PREVIEW_LIMIT")),
            table_id=body.get("tableId") or None,
        )
        return jsonify({"data": preview.rows})

    if fmt not in ("csv", "xlsx"):
        raise InvalidRequestError(
            "Unsupported format. Supported values: json, csv, xlsx.", details={"format": fmt}
        )
    if not columns:
        raise InvalidRequestError("No columns selected")

    tables = reports.run_export(company_id, columns)
    export = encode_report(tables, fmt)
    logger.info("Custom report export: %s, %d entities", export.filename, len(tables),
                extra={"company_id": company_id, "format": fmt})
    return Response(
        export.content,
        mimetype=export.mimetype,
        headers={"Content-Disposition": export.content_disposition},
    )


@custom_report_bp.route("/api/v1/custom-report", methods=["POST"])
def run_custom_report():
    """Preview (json) or export (csv / xlsx) the selected columns."""
    return _handle_report_request()


@custom_report_bp.route("/custom-report", methods=["POST"])
def run_custom_report_alias():
    return _handle_report_request()
