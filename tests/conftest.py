"""
Shared pytest fixtures for the Field-Sales Reporting test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_company / make_user / make_dealer: record factories
    - populate: one record of every reportable entity for a company
    - company_headers: request headers that scope a call to a company
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fieldsales import create_app
from fieldsales.models import db as _db
from fieldsales.models.attendance import (
    GeoTracking, SalesmanAttendance, SalesmanLeaveApplication, SalesmanRating,
)
from fieldsales.models.company import Company, User
from fieldsales.models.dealer import Brand, Dealer, DealerBrandMapping, DealerReportsAndScores
from fieldsales.models.sales import SalesOrder
from fieldsales.models.visit import (
    CompetitionReport, DailyTask, DailyVisitReport, PermanentJourneyPlan, TechnicalVisitReport,
)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


def _company_headers(company_id: int) -> dict:
    return {"X-Company-ID": str(company_id)}


# ── Factories ────────────────────────────────────────────────────────────


def _make_company(name: str = "Acme Cement") -> Company:
    company = Company(company_name=name, region="East", area="Kolkata")
    _db.session.add(company)
    _db.session.flush()
    return company


def _make_user(company: Company, email: str, first_name: str | None = "Ravi",
               last_name: str | None = "Kumar", **kwargs) -> User:
    user = User(company_id=company.id, email=email, first_name=first_name,
                last_name=last_name, **kwargs)
    _db.session.add(user)
    _db.session.flush()
    return user


def _make_dealer(user: User, name: str, **kwargs) -> Dealer:
    fields = {
        "type": "Dealer-Normal",
        "region": "East",
        "area": "Kolkata",
        "phone_no": "9000000000",
        "address": "12 Park Street",
        "total_potential": Decimal("100.50"),
        "best_potential": Decimal("80.25"),
        "brand_selling": ["Ultratech", "ACC"],
    }
    fields.update(kwargs)
    dealer = Dealer(user_id=user.id, name=name, **fields)
    _db.session.add(dealer)
    _db.session.flush()
    return dealer


def _populate(company: Company, tag: str) -> dict:
    """One record of every reportable entity, owned by ``company``."""
    salesman = _make_user(company, f"salesman-{tag}@example.com")
    manager = _make_user(company, f"manager-{tag}@example.com", first_name="Asha",
                         last_name="Sen", role="manager")
    dealer = _make_dealer(salesman, f"Dealer {tag}")
    brand = Brand(name=f"Brand {tag}")
    _db.session.add(brand)
    _db.session.flush()

    pjp = PermanentJourneyPlan(
        user_id=salesman.id, created_by_id=manager.id, dealer_id=dealer.id,
        plan_date=date(2024, 3, 1), area_to_be_visited="Salt Lake",
    )
    _db.session.add(pjp)
    _db.session.flush()
    dvr = DailyVisitReport(
        user_id=salesman.id, dealer_id=dealer.id, report_date=date(2024, 3, 1),
        dealer_type="Dealer", location="Salt Lake", latitude=Decimal("22.5726"),
        longitude=Decimal("88.3639"), visit_type="Best", dealer_total_potential=Decimal("100"),
        dealer_best_potential=Decimal("80"), brand_selling=["ACC"], today_order_mt=Decimal("5"),
        today_collection_rupees=Decimal("25000"), feedbacks="Good",
        check_in_time=datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
    )
    _db.session.add(dvr)
    _db.session.flush()

    records = {
        "salesman": salesman,
        "manager": manager,
        "dealer": dealer,
        "pjp": pjp,
        "dvr": dvr,
        "brand_mapping": DealerBrandMapping(
            dealer_id=dealer.id, brand_id=brand.id, user_id=salesman.id, capacity_mt=Decimal("40"),
        ),
        "scores": DealerReportsAndScores(
            dealer_id=dealer.id, dealer_score=Decimal("7.5"), trust_worthiness_score=Decimal("8"),
            credit_worthiness_score=Decimal("6"), order_history_score=Decimal("7"),
            visit_frequency_score=Decimal("9"),
            last_updated_date=datetime(2024, 3, 2, tzinfo=timezone.utc),
        ),
        "tvr": TechnicalVisitReport(
            user_id=salesman.id, report_date=date(2024, 3, 1), visit_type="Site",
            site_name_concerned_person="Mr. Das", phone_no="9111111111",
            clients_remarks="ok", salesperson_remarks="ok",
            check_in_time=datetime(2024, 3, 1, 11, 0, tzinfo=timezone.utc),
            site_visit_brand_in_use=["ACC", "Ambuja"], influencer_type=["Mason"],
        ),
        "task": DailyTask(
            user_id=salesman.id, assigned_by_id=manager.id, related_dealer_id=dealer.id,
            pjp_id=pjp.id, task_date=date(2024, 3, 1), visit_type="Dealer Visit",
        ),
        "order": SalesOrder(
            user_id=salesman.id, dealer_id=dealer.id, dvr_id=dvr.id, pjp_id=pjp.id,
            order_date=date(2024, 3, 1), order_party_name=f"Party {tag}",
            order_qty=Decimal("10"), item_price=Decimal("350"),
            item_price_after_discount=Decimal("340.5"), received_payment=Decimal("1000"),
            delivery_date=date(2024, 3, 5),
        ),
        "competition": CompetitionReport(
            user_id=salesman.id, report_date=date(2024, 3, 1), brand_name="Ambuja",
            billing="320", nod="310", retail="335", schemes_yes_no="Yes",
            avg_scheme_cost=Decimal("5.5"),
        ),
        "attendance": SalesmanAttendance(
            user_id=salesman.id, attendance_date=date(2024, 3, 1), location_name="Office",
            in_time_timestamp=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
            in_time_latitude=Decimal("22.5"), in_time_longitude=Decimal("88.3"),
        ),
        "leave": SalesmanLeaveApplication(
            user_id=salesman.id, approver_id=manager.id, leave_type="Casual",
            start_date=date(2024, 3, 10), end_date=date(2024, 3, 11), reason="Family",
        ),
        "geo": GeoTracking(
            user_id=salesman.id, latitude=Decimal("22.5"), longitude=Decimal("88.3"),
            recorded_at=datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc), journey_id="J-1",
        ),
        "rating": SalesmanRating(user_id=salesman.id, area="Kolkata", region="East", rating=4),
    }
    for key in ("brand_mapping", "scores", "tvr", "task", "order", "competition",
                "attendance", "leave", "geo", "rating"):
        _db.session.add(records[key])
    _db.session.commit()
    return records


@pytest.fixture()
def make_company():
    return _make_company


@pytest.fixture()
def make_user():
    return _make_user


@pytest.fixture()
def make_dealer():
    return _make_dealer


@pytest.fixture()
def populate():
    return _populate


@pytest.fixture()
def company_headers():
    return _company_headers


@pytest.fixture()
def company():
    company = _make_company("Acme Cement")
    _db.session.commit()
    return company


@pytest.fixture()
def other_company():
    company = _make_company("Rival Cement")
    _db.session.commit()
    return company
