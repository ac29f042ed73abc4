"""
HTTP client for the custom-report endpoint.

Tests inject a fake ``requests.Session`` via the constructor instead of
letting the client create a real one.

    client = CustomReportClient("https://crm.example.com", token=access_token)
    rows = client.preview([ColumnRef("dealers", "name")], table_id="dealers")
    export = client.export(selection.columns, "xlsx")
"""

import logging
import re

import requests

from fieldsales.core.export_file import ExportFile
from fieldsales.services.report_catalog import ColumnRef

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


class ReportClientError(Exception):
    """Non-2xx response (or transport failure) from the report endpoint.

    ``text`` is the raw response body, shown verbatim to the user.
    ``status_code`` is None when the request never got a response.
    """

    def __init__(self, status_code: int | None, text: str) -> None:
        self.status_code = status_code
        self.text = text
        super().__init__(f"HTTP {status_code}: {text}" if status_code else text)


def _json_list(resp: requests.Response, key: str) -> list:
    """``resp.json()[key]``; a body that is not the expected JSON is a client error."""
    try:
        payload = resp.json()
    except ValueError as exc:
        raise ReportClientError(resp.status_code, resp.text) from exc
    value = payload.get(key, []) if isinstance(payload, dict) else None
    if not isinstance(value, list):
        raise ReportClientError(resp.status_code, resp.text)
    return value


class CustomReportClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        company_id: int | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        path: str = "/api/v1/custom-report",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.timeout = timeout
        self._session = session
        self._headers = {"Content-Type": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        if company_id is not None:
            # honoured only by servers running with API_AUTH_ENABLED=false
            self._headers["X-Company-ID"] = str(company_id)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _post(self, body: dict) -> requests.Response:
        url = f"{self.base_url}{self.path}"
        try:
            resp = self.session.post(url, json=body, headers=self._headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Custom report request failed: %s", exc)
            raise ReportClientError(None, str(exc)) from exc
        if not resp.ok:
            raise ReportClientError(resp.status_code, resp.text)
        return resp

    def tables(self) -> list[dict]:
        url = f"{self.base_url}{self.path}/tables"
        try:
            resp = self.session.get(url, headers=self._headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ReportClientError(None, str(exc)) from exc
        if not resp.ok:
            raise ReportClientError(resp.status_code, resp.text)
        return _json_list(resp, "tables")

    def preview(self, columns: list[ColumnRef], table_id: str | None = None, limit: int = 10) -> list[dict]:
        """Preview rows keyed by bare column name."""
        body = {
            "columns": [c.to_dict() for c in columns],
            "format": "json",
            "limit": limit,
        }
        if table_id:
            body["tableId"] = table_id
        return _json_list(self._post(body), "data")

    def export(self, columns: list[ColumnRef], fmt: str = "xlsx") -> ExportFile:
        resp = self._post({"columns": [c.to_dict() for c in columns], "format": fmt})
        match = _FILENAME_RE.search(resp.headers.get("Content-Disposition", ""))
        filename = match.group(1) if match else f"custom-report.{'zip' if fmt == 'csv' else 'xlsx'}"
        return ExportFile(
            content=resp.content,
            filename=filename,
            mimetype=resp.headers.get("Content-Type", "application/octet-stream"),
        )
