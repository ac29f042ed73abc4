"""
Rate limiting configuration.

The Limiter instance is created in fieldsales/__init__.py with no default
limits; this module applies the per-blueprint limits. Limits are keyed by
company when one is resolved, otherwise by remote address.

Usage:
    from fieldsales.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

from flask import g, request as flask_request

logger = logging.getLogger(__name__)

DEFAULT_CUSTOM_REPORT_LIMIT = "30/minute"

REPORT_ENDPOINTS = ("custom_report.run_custom_report", "custom_report.run_custom_report_alias")
CATALOG_ENDPOINT = "custom_report.list_report_tables"


def company_or_remote_addr():
    """Rate-limit key: the caller's company if resolved, else remote IP."""
    company_id = getattr(g, "company_id", None)
    if company_id:
        return f"company:{company_id}"
    return flask_request.remote_addr or "unknown"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits:
        - Custom report (preview + export): CUSTOM_REPORT_RATE_LIMIT, default 30/minute
        - Catalog (GET tables):              exempt

    Rate limiting is disabled in testing mode.
    """
    if not app.config.get("RATELIMIT_ENABLED", True):
        app.logger.info("Rate limiter disabled (RATELIMIT_ENABLED=False)")
        return

    report_limit = app.config.get("CUSTOM_REPORT_RATE_LIMIT", DEFAULT_CUSTOM_REPORT_LIMIT)
    # the alias route draws from the same per-company budget
    report_scope = limiter.shared_limit(report_limit, scope="custom_report", key_func=company_or_remote_addr)
    for endpoint in REPORT_ENDPOINTS:
        view = app.view_functions.get(endpoint)
        if view is not None:
            app.view_functions[endpoint] = report_scope(view)

    view = app.view_functions.get(CATALOG_ENDPOINT)
    if view is not None:
        app.view_functions[CATALOG_ENDPOINT] = limiter.exempt(view)

    app.logger.info("Rate limiter configured: custom report: %s", report_limit)
