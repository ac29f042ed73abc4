"""
Report-layer exception hierarchy.

Services raise these; the custom-report blueprint registers one handler per
type and maps them to HTTP status codes and ``E.*`` error codes.

Usage:
    from fieldsales.core.exceptions import InvalidRequestError, NotFoundError

    raise NotFoundError(resource="Report entity", resource_id="dealerz")
    raise InvalidRequestError("No columns selected")
"""


class InvalidRequestError(Exception):
    """Raised when a report request is malformed or empty.

    Maps to HTTP 400. Raised before any query is issued.

    Args:
        message: Human-readable explanation of what is wrong.
        details: Optional structured breakdown (e.g. offending item index).
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class NotFoundError(Exception):
    """Raised when a requested report entity is not in the catalog.

    Args:
        resource: Human-readable kind of thing that was looked up.
        resource_id: The identifier that was looked up.
        company_id: Optional scope, for debug logging only.
    """

    def __init__(
        self,
        resource: str,
        resource_id: int | str | None = None,
        company_id: int | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.company_id = company_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" {resource_id!r}"
        msg += " not found"
        if company_id is not None:
            msg += f" (company={company_id})"
        super().__init__(msg)


class UpstreamFailureError(Exception):
    """Raised when persistence or encoding fails mid-request.

    Maps to HTTP 502. No partial report is ever returned alongside it.

    Args:
        message: Short description of the failing step.
        cause: The original exception, kept for logging.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)
