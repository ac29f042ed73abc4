"""
Tests for the per-entity flatteners.

Covers:
  - every catalog entity has a flattener, and each row carries exactly the
    catalog columns
  - rows are scoped to the requesting company
  - normalisation: decimals → float, dates, millisecond UTC timestamps,
    joined lists, name fallback to email, missing relations → None
  - ordering: most recent first, id as tie-break
  - derived sales-order fields (orderTotal, pendingPayment, estimatedDelivery)
  - flattening twice yields identical rows
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fieldsales.models import db
from fieldsales.models.attendance import GeoTracking
from fieldsales.models.sales import SalesOrder
from fieldsales.models.visit import DailyVisitReport
from fieldsales.services.report_catalog import columns_for, list_tables
from fieldsales.services.report_flatteners import (
    FLATTENERS, full_name, join_list, missing_flatteners, order_total, to_date_str, to_number,
    to_timestamp_str,
)

ALL_ENTITIES = [t.id for t in list_tables()]


# ── Helpers ─────────────────────────────────────────────────────────────────


def test_every_entity_has_a_flattener():
    assert missing_flatteners() == []
    assert set(FLATTENERS) == set(ALL_ENTITIES)


def test_to_number():
    assert to_number(Decimal("12.50")) == 12.5
    assert isinstance(to_number(Decimal("3")), float)
    assert to_number(7) == 7
    assert to_number(None) is None


def test_to_date_str():
    assert to_date_str(date(2024, 3, 1)) == "2024-03-01"
    assert to_date_str(datetime(2024, 3, 1, 23, 0, tzinfo=timezone.utc)) == "2024-03-01"
    assert to_date_str(None) is None


def test_to_timestamp_str_is_utc_with_millis():
    aware = datetime(2024, 3, 1, 9, 30, 5, 123456, tzinfo=timezone.utc)
    assert to_timestamp_str(aware) == "2024-03-01T09:30:05.123Z"
    naive = datetime(2024, 3, 1, 9, 30)
    assert to_timestamp_str(naive) == "2024-03-01T09:30:00.000Z"
    assert to_timestamp_str(date(2024, 3, 1)) == "2024-03-01T00:00:00.000Z"
    assert to_timestamp_str(None) is None


def test_join_list():
    assert join_list(["ACC", "Ambuja"]) == "ACC, Ambuja"
    assert join_list([]) == ""
    assert join_list(None) == ""
    assert join_list(None, required=False) is None


def test_full_name_falls_back_to_email(company, make_user):
    named = make_user(company, "named@example.com")
    anonymous = make_user(company, "anon@example.com", first_name=None, last_name=None)
    assert full_name(named) == "Ravi Kumar"
    assert full_name(anonymous) == "anon@example.com"
    assert full_name(None) is None


# ── Row shape ───────────────────────────────────────────────────────────────


@pytest.mark.parametrize("entity", ALL_ENTITIES)
def test_rows_carry_exactly_catalog_columns(entity, company, populate):
    populate(company, "a")
    rows = FLATTENERS[entity](company.id)
    assert rows, entity
    for row in rows:
        assert list(row) == list(columns_for(entity))


@pytest.mark.parametrize("entity", ALL_ENTITIES)
def test_rows_are_json_safe(entity, company, populate):
    populate(company, "a")
    for row in FLATTENERS[entity](company.id):
        for key, value in row.items():
            assert value is None or isinstance(value, (str, int, float, bool)), (entity, key, value)


@pytest.mark.parametrize("entity", ALL_ENTITIES)
def test_company_isolation(entity, company, other_company, populate):
    populate(company, "a")
    populate(other_company, "b")
    mine = FLATTENERS[entity](company.id)
    theirs = FLATTENERS[entity](other_company.id)
    assert mine and theirs
    assert not {r["id"] for r in mine} & {r["id"] for r in theirs}


def test_unknown_company_yields_no_rows(company, populate):
    populate(company, "a")
    for entity in ALL_ENTITIES:
        assert FLATTENERS[entity](company.id + 999) == []


def test_flattening_is_idempotent(company, populate):
    populate(company, "a")
    for entity in ALL_ENTITIES:
        assert FLATTENERS[entity](company.id) == FLATTENERS[entity](company.id)


# ── Normalisation ───────────────────────────────────────────────────────────


def test_dealer_row_normalisation(company, populate):
    records = populate(company, "a")
    row = FLATTENERS["dealers"](company.id)[0]
    assert row["id"] == records["dealer"].id
    assert row["name"] == "Dealer a"
    assert row["totalPotential"] == 100.5
    assert row["bestPotential"] == 80.25
    assert row["brandSelling"] == "Ultratech, ACC"
    assert row["associatedSalesmanName"] == "Ravi Kumar"
    assert row["dateOfBirth"] is None
    assert row["createdAt"].endswith("Z")


def test_visit_report_relations_and_timestamps(company, populate):
    populate(company, "a")
    row = FLATTENERS["dailyVisitReports"](company.id)[0]
    assert row["dealerName"] == "Dealer a"
    assert row["subDealerName"] is None
    assert row["checkInTime"] == "2024-03-01T09:30:00.000Z"
    assert row["checkOutTime"] is None
    assert row["reportDate"] == "2024-03-01"
    assert row["brandSelling"] == "ACC"
    assert row["salesmanEmail"] == "salesman-a@example.com"
    assert row["latitude"] == pytest.approx(22.5726)


def test_technical_visit_lists_are_joined(company, populate):
    populate(company, "a")
    row = FLATTENERS["technicalVisitReports"](company.id)[0]
    assert row["siteVisitBrandInUse"] == "ACC, Ambuja"
    assert row["influencerType"] == "Mason"


def test_journey_plan_and_task_names(company, populate):
    populate(company, "a")
    pjp = FLATTENERS["permanentJourneyPlans"](company.id)[0]
    assert pjp["assignedSalesmanName"] == "Ravi Kumar"
    assert pjp["creatorName"] == "Asha Sen"
    assert pjp["dealerName"] == "Dealer a"

    task = FLATTENERS["dailyTasks"](company.id)[0]
    assert task["assignedToName"] == "Ravi Kumar"
    assert task["assignedByName"] == "Asha Sen"
    assert task["relatedDealerName"] == "Dealer a"


def test_leave_application_approver(company, populate):
    populate(company, "a")
    row = FLATTENERS["salesmanLeaveApplications"](company.id)[0]
    assert row["approverName"] == "Asha Sen"
    assert row["status"] == "Pending"
    assert row["startDate"] == "2024-03-10"


def test_brand_capacity_and_scores(company, populate):
    populate(company, "a")
    cap = FLATTENERS["dealerBrandCapacities"](company.id)[0]
    assert cap["brandName"] == "Brand a"
    assert cap["capacityMT"] == 40.0
    assert cap["dealerName"] == "Dealer a"

    score = FLATTENERS["dealerReportsAndScores"](company.id)[0]
    assert score["dealerScore"] == 7.5
    assert score["lastUpdatedDate"] == "2024-03-02T00:00:00.000Z"


# ── Sales orders ────────────────────────────────────────────────────────────


def test_sales_order_derived_fields(company, populate):
    populate(company, "a")
    row = FLATTENERS["salesOrders"](company.id)[0]
    assert row["orderTotal"] == 3405.0
    assert row["receivedPayment"] == 1000.0
    assert row["pendingPayment"] == 2405.0
    assert row["estimatedDelivery"] == "2024-03-05"
    assert row["deliveryDate"] == "2024-03-05"
    assert row["area"] == "Kolkata"
    assert row["region"] == "East"
    assert row["salesmanRole"] == "junior-executive"


def test_stored_pending_payment_wins(company, populate):
    records = populate(company, "a")
    records["order"].pending_payment = Decimal("12.5")
    db.session.commit()
    row = FLATTENERS["salesOrders"](company.id)[0]
    assert row["pendingPayment"] == 12.5


def test_order_total_falls_back_to_list_price():
    order = SalesOrder(order_qty=Decimal("4"), item_price=Decimal("10.25"))
    assert order_total(order) == 41.0
    assert order_total(SalesOrder()) == 0


# ── Ordering ────────────────────────────────────────────────────────────────


def test_visit_reports_most_recent_first(company, populate):
    records = populate(company, "a")
    salesman, dealer = records["salesman"], records["dealer"]
    for day in (2, 5):
        db.session.add(DailyVisitReport(
            user_id=salesman.id, dealer_id=dealer.id, report_date=date(2024, 3, day),
            dealer_type="Dealer", location="Salt Lake", latitude=Decimal("1"),
            longitude=Decimal("1"), visit_type="Best", dealer_total_potential=Decimal("1"),
            dealer_best_potential=Decimal("1"), today_order_mt=Decimal("0"),
            today_collection_rupees=Decimal("0"), feedbacks="",
            check_in_time=datetime(2024, 3, day, 9, 0, tzinfo=timezone.utc),
        ))
    db.session.commit()
    dates = [r["reportDate"] for r in FLATTENERS["dailyVisitReports"](company.id)]
    assert dates == ["2024-03-05", "2024-03-02", "2024-03-01"]


def test_id_breaks_ties(company, populate):
    records = populate(company, "a")
    extra = GeoTracking(
        user_id=records["salesman"].id, latitude=Decimal("22.6"), longitude=Decimal("88.4"),
        recorded_at=records["geo"].recorded_at,
    )
    db.session.add(extra)
    db.session.commit()
    ids = [r["id"] for r in FLATTENERS["geoTracking"](company.id)]
    assert ids == [extra.id, records["geo"].id]
