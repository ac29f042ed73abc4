"""
API tests for the custom report endpoints.

Covers:
  - POST /api/v1/custom-report json preview (and the /custom-report alias)
  - 401 without a company, 400 on bad bodies / formats / empty selection,
    404 on unknown entities or tableId, 502 on database failures; every error
    carries data: []
  - bearer-token company resolution, inactive users, X-Company-ID gating
  - X-Request-ID / X-Request-Duration-Ms response headers
  - health endpoint and JSON 404 / 405 handlers
  - per-company rate limit shared by both report routes; catalog exempt
"""

import pytest
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy.exc import OperationalError

from fieldsales import create_app
from fieldsales.middleware.rate_limiter import init_rate_limits
from fieldsales.models import db
from fieldsales.services.jwt_service import generate_access_token
from fieldsales.services.report_flatteners import FLATTENERS

URL = "/api/v1/custom-report"


def _body(*keys, **extra):
    columns = [dict(zip(("table", "column"), k.split(".", 1))) for k in keys]
    return {"columns": columns, **extra}


# ── Preview ─────────────────────────────────────────────────────────────────


def test_preview_dealers_end_to_end(client, company, populate, company_headers):
    populate(company, "a")
    res = client.post(URL, json=_body("dealers.name", "dealers.totalPotential", format="json"),
                      headers=company_headers(company.id))
    assert res.status_code == 200
    assert res.get_json() == {"data": [{"name": "Dealer a", "totalPotential": 100.5}]}


def test_format_defaults_to_json(client, company, populate, company_headers):
    populate(company, "a")
    res = client.post(URL, json=_body("salesOrders.orderTotal"), headers=company_headers(company.id))
    assert res.status_code == 200
    assert res.get_json()["data"] == [{"orderTotal": 3405.0}]


def test_alias_route(client, company, populate, company_headers):
    populate(company, "a")
    res = client.post("/custom-report", json=_body("users.email", limit=1),
                      headers=company_headers(company.id))
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert len(data) == 1
    assert set(data[0]) == {"email"}


def test_preview_respects_table_id(client, company, populate, company_headers):
    populate(company, "a")
    res = client.post(
        URL,
        json=_body("dealers.name", "geoTracking.journeyId", tableId="geoTracking"),
        headers=company_headers(company.id),
    )
    assert res.get_json()["data"] == [{"journeyId": "J-1"}]


def test_preview_is_company_scoped(client, company, other_company, populate, company_headers):
    populate(company, "a")
    populate(other_company, "b")
    res = client.post(URL, json=_body("dealers.name"), headers=company_headers(other_company.id))
    assert res.get_json()["data"] == [{"name": "Dealer b"}]


# ── Errors ──────────────────────────────────────────────────────────────────


def test_missing_company_is_unauthorized(client):
    res = client.post(URL, json=_body("dealers.name"))
    assert res.status_code == 401
    body = res.get_json()
    assert body["code"] == "ERR_UNAUTHORIZED"
    assert body["data"] == []


@pytest.mark.parametrize("payload", [
    {"columns": []},
    {},
    {"columns": "dealers.name"},
    {"columns": [{"table": "dealers"}]},
    {"columns": [{"table": "dealers", "column": "name"}], "format": "pdf"},
    {"columns": [{"table": "dealers", "column": "name"}], "limit": "lots"},
    [],
])
def test_bad_requests(client, company, company_headers, payload):
    res = client.post(URL, json=payload, headers=company_headers(company.id))
    assert res.status_code == 400
    body = res.get_json()
    assert body["code"] == "ERR_VALIDATION_INVALID"
    assert body["data"] == []


@pytest.mark.parametrize("fmt", ["csv", "xlsx"])
def test_empty_export_is_bad_request(client, company, company_headers, fmt):
    res = client.post(URL, json={"columns": [], "format": fmt}, headers=company_headers(company.id))
    assert res.status_code == 400


def test_non_json_body_is_bad_request(client, company, company_headers):
    res = client.post(URL, data="not json", content_type="text/plain",
                      headers=company_headers(company.id))
    assert res.status_code == 400


@pytest.mark.parametrize("fmt", ["json", "xlsx"])
def test_unknown_entity_is_not_found(client, company, company_headers, fmt):
    res = client.post(URL, json=_body("dealerz.name", format=fmt), headers=company_headers(company.id))
    assert res.status_code == 404
    body = res.get_json()
    assert body["code"] == "ERR_NOT_FOUND"
    assert body["data"] == []


def test_database_failure_is_bad_gateway(client, company, company_headers, monkeypatch):
    def broken(company_id):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setitem(FLATTENERS, "dealers", broken)
    res = client.post(URL, json=_body("dealers.name", format="xlsx"),
                      headers=company_headers(company.id))
    assert res.status_code == 502
    body = res.get_json()
    assert body["code"] == "ERR_UPSTREAM"
    assert body["data"] == []


def test_unexpected_error_is_internal(client, company, company_headers, monkeypatch):
    def broken(company_id):
        raise RuntimeError("boom")

    monkeypatch.setitem(FLATTENERS, "dealers", broken)
    res = client.post(URL, json=_body("dealers.name"), headers=company_headers(company.id))
    assert res.status_code == 500
    assert res.get_json()["data"] == []


def test_unknown_table_id_is_not_found(client, company, company_headers):
    res = client.post(URL, json=_body("dealers.name", tableId="bogus"),
                      headers=company_headers(company.id))
    assert res.status_code == 404
    body = res.get_json()
    assert body["code"] == "ERR_NOT_FOUND"
    assert body["data"] == []


# ── Authentication ──────────────────────────────────────────────────────────


def test_bearer_token_resolves_company(client, company, other_company, populate):
    records = populate(company, "a")
    populate(other_company, "b")
    token = generate_access_token(records["salesman"].id)
    res = client.post(URL, json=_body("dealers.name"),
                      headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.get_json()["data"] == [{"name": "Dealer a"}]


def test_token_company_claim_cannot_widen_scope(client, company, other_company, populate):
    records = populate(company, "a")
    populate(other_company, "b")
    token = generate_access_token(records["salesman"].id, company_id=other_company.id)
    res = client.post(URL, json=_body("dealers.name"),
                      headers={"Authorization": f"Bearer {token}"})
    assert res.get_json()["data"] == [{"name": "Dealer a"}]


def test_invalid_token_is_unauthorized(client, company, company_headers):
    headers = {"Authorization": "Bearer not-a-token", **company_headers(company.id)}
    res = client.post(URL, json=_body("dealers.name"), headers=headers)
    assert res.status_code == 401


def test_inactive_user_is_unauthorized(client, company, populate):
    records = populate(company, "a")
    records["salesman"].is_active = False
    db.session.commit()
    token = generate_access_token(records["salesman"].id)
    res = client.post(URL, json=_body("dealers.name"),
                      headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_company_header_ignored_when_auth_enabled(app, client, company, company_headers, monkeypatch):
    monkeypatch.setitem(app.config, "API_AUTH_ENABLED", "true")
    res = client.post(URL, json=_body("dealers.name"), headers=company_headers(company.id))
    assert res.status_code == 401


# ── Ambient ─────────────────────────────────────────────────────────────────


def test_request_id_headers(client, company, company_headers):
    headers = {"X-Request-ID": "req-123", **company_headers(company.id)}
    res = client.post(URL, json=_body("dealers.name"), headers=headers)
    assert res.headers["X-Request-ID"] == "req-123"
    assert float(res.headers["X-Request-Duration-Ms"]) >= 0


def test_health(client):
    res = client.get("/api/v1/health")
    assert res.status_code == 200
    assert res.get_json()["status"] == "ok"


def test_unknown_route_is_json_404(client):
    res = client.get("/api/v1/nope")
    assert res.status_code == 404
    assert res.get_json()["code"] == "ERR_NOT_FOUND"


def test_get_on_report_endpoint_is_405(client):
    res = client.get(URL)
    assert res.status_code == 405


# ── Rate limiting ───────────────────────────────────────────────────────────


@pytest.fixture()
def limited_client():
    """A second app whose report endpoints allow two requests a minute."""
    limited_app = create_app("testing")
    limited_app.config.update(RATELIMIT_ENABLED=True, CUSTOM_REPORT_RATE_LIMIT="2/minute")
    report_limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
    report_limiter.init_app(limited_app)
    init_rate_limits(limited_app, report_limiter)
    with limited_app.app_context():
        yield limited_app.test_client()


def test_report_endpoint_is_rate_limited(limited_client, company_headers):
    headers = company_headers(1)
    codes = [
        limited_client.post(URL, json=_body("dealers.name"), headers=headers).status_code
        for _ in range(3)
    ]
    assert codes == [200, 200, 429]
    assert limited_client.post(URL, json=_body("dealers.name"),
                               headers=headers).get_json()["code"] == "ERR_RATE_LIMITED"


def test_alias_shares_the_report_budget(limited_client, company_headers):
    headers = company_headers(1)
    assert limited_client.post(URL, json=_body("dealers.name"), headers=headers).status_code == 200
    assert limited_client.post("/custom-report", json=_body("dealers.name"),
                               headers=headers).status_code == 200
    assert limited_client.post("/custom-report", json=_body("dealers.name"),
                               headers=headers).status_code == 429


def test_rate_limit_is_per_company(limited_client, company_headers):
    for _ in range(2):
        limited_client.post(URL, json=_body("dealers.name"), headers=company_headers(1))
    res = limited_client.post(URL, json=_body("dealers.name"), headers=company_headers(2))
    assert res.status_code == 200


def test_catalog_is_not_rate_limited(limited_client):
    codes = {limited_client.get("/api/v1/custom-report/tables").status_code for _ in range(4)}
    assert codes == {200}
