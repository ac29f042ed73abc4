#!/usr/bin/env python3
"""
Field-Sales Reporting: Demo Seed.

Creates two cement companies, each with a manager and a handful of
salesmen, and fills every reportable entity (dealers, visits, journey
plans, orders, attendance, leave, geo pings, ratings, ...) so the custom
report builder has something to preview and export.

Usage:
    python scripts/seed_demo_data.py                # reset DB + seed
    python scripts/seed_demo_data.py --no-reset     # add on top of existing data
    python scripts/seed_demo_data.py --salesmen 5 --days 14
"""

import argparse
import random
import sys
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

sys.path.insert(0, ".")

from fieldsales import create_app
from fieldsales.models import db
from fieldsales.models.attendance import (
    GeoTracking, SalesmanAttendance, SalesmanLeaveApplication, SalesmanRating,
)
from fieldsales.models.company import Company, User
from fieldsales.models.dealer import Brand, Dealer, DealerBrandMapping, DealerReportsAndScores
from fieldsales.models.sales import SalesOrder
from fieldsales.models.visit import (
    CompetitionReport, DailyTask, DailyVisitReport, PermanentJourneyPlan, TechnicalVisitReport,
)

COMPANIES = [
    ("Eastern Cement Ltd", "East", "Kolkata"),
    ("Northern Cement Ltd", "North", "Lucknow"),
]
FIRST_NAMES = ["Ravi", "Amit", "Sunita", "Priya", "Arjun", "Neha", "Vikram", "Kavita"]
LAST_NAMES = ["Kumar", "Das", "Sharma", "Sen", "Gupta", "Roy", "Singh", "Bose"]
BRANDS = ["Ultratech", "ACC", "Ambuja", "Shree", "Dalmia"]
AREAS = ["Salt Lake", "Howrah", "Dum Dum", "Behala", "Barasat"]


def _d(value) -> Decimal:
    return Decimal(str(round(value, 2)))


def _at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════
# 1. COMPANY, PEOPLE & BRANDS
# ═══════════════════════════════════════════════════════════════════════════

def seed_brands():
    brands = {}
    for name in BRANDS:
        brand = Brand.query.filter_by(name=name).first() or Brand(name=name)
        db.session.add(brand)
        brands[name] = brand
    db.session.flush()
    return brands


def seed_company(name, region, area, n_salesmen, rng):
    company = Company(company_name=name, region=region, area=area, phone_number="033-4000-0000")
    db.session.add(company)
    db.session.flush()

    slug = name.split()[0].lower()
    manager = User(
        company_id=company.id, email=f"manager@{slug}.example.com", first_name="Asha",
        last_name="Sen", role="area-manager", region=region, area=area,
    )
    db.session.add(manager)
    db.session.flush()

    salesmen = []
    for i in range(n_salesmen):
        user = User(
            company_id=company.id,
            email=f"salesman{i + 1}@{slug}.example.com",
            first_name=rng.choice(FIRST_NAMES),
            last_name=rng.choice(LAST_NAMES),
            role="junior-executive",
            phone_no=f"98{rng.randint(10000000, 99999999)}",
            region=region,
            area=area,
            reports_to_id=manager.id,
        )
        db.session.add(user)
        salesmen.append(user)
    db.session.flush()
    return company, manager, salesmen


# ═══════════════════════════════════════════════════════════════════════════
# 2. DEALERS
# ═══════════════════════════════════════════════════════════════════════════

def seed_dealers(salesman, brands, rng, count=3):
    dealers = []
    for i in range(count):
        dealer = Dealer(
            user_id=salesman.id,
            type=rng.choice(["Dealer-Normal", "Dealer-Best"]),
            name=f"{salesman.last_name} Traders {salesman.id}-{i + 1}",
            region=salesman.region,
            area=rng.choice(AREAS),
            phone_no=f"90{rng.randint(10000000, 99999999)}",
            address=f"{rng.randint(1, 200)} Station Road",
            pin_code=f"700{rng.randint(100, 999)}",
            total_potential=_d(rng.uniform(50, 500)),
            best_potential=_d(rng.uniform(20, 200)),
            brand_selling=rng.sample(BRANDS, 2),
            feedbacks="Regular buyer",
            latitude=_d(22.5 + rng.uniform(-0.2, 0.2)),
            longitude=_d(88.3 + rng.uniform(-0.2, 0.2)),
        )
        db.session.add(dealer)
        db.session.flush()

        db.session.add(DealerReportsAndScores(
            dealer_id=dealer.id,
            dealer_score=_d(rng.uniform(4, 10)),
            trust_worthiness_score=_d(rng.uniform(4, 10)),
            credit_worthiness_score=_d(rng.uniform(4, 10)),
            order_history_score=_d(rng.uniform(4, 10)),
            visit_frequency_score=_d(rng.uniform(4, 10)),
        ))
        for brand_name in dealer.brand_selling:
            db.session.add(DealerBrandMapping(
                dealer_id=dealer.id, brand_id=brands[brand_name].id, user_id=salesman.id,
                capacity_mt=_d(rng.uniform(10, 80)),
            ))
        dealers.append(dealer)
    db.session.flush()
    return dealers


# ═══════════════════════════════════════════════════════════════════════════
# 3. DAILY ACTIVITY
# ═══════════════════════════════════════════════════════════════════════════

def seed_activity(salesman, manager, dealers, days, rng):
    today = date.today()
    for offset in range(days):
        day = today - timedelta(days=offset)
        if day.weekday() == 6:
            continue
        dealer = rng.choice(dealers)

        pjp = PermanentJourneyPlan(
            user_id=salesman.id, created_by_id=manager.id, dealer_id=dealer.id,
            plan_date=day, area_to_be_visited=dealer.area,
            status="COMPLETED" if offset else "PENDING",
        )
        db.session.add(pjp)
        db.session.flush()

        db.session.add(DailyTask(
            user_id=salesman.id, assigned_by_id=manager.id, related_dealer_id=dealer.id,
            pjp_id=pjp.id, task_date=day, visit_type="Dealer Visit",
            status="Completed" if offset else "Assigned",
        ))

        check_in = _at(day, 10, rng.randint(0, 59))
        dvr = DailyVisitReport(
            user_id=salesman.id, dealer_id=dealer.id, report_date=day,
            dealer_type=dealer.type, location=dealer.area,
            latitude=dealer.latitude, longitude=dealer.longitude,
            visit_type=rng.choice(["Best", "Normal"]),
            dealer_total_potential=dealer.total_potential,
            dealer_best_potential=dealer.best_potential,
            brand_selling=dealer.brand_selling,
            today_order_mt=_d(rng.uniform(0, 20)),
            today_collection_rupees=_d(rng.uniform(0, 50000)),
            feedbacks="Stock moving well",
            check_in_time=check_in,
            check_out_time=check_in + timedelta(minutes=45),
        )
        db.session.add(dvr)
        db.session.flush()

        if rng.random() < 0.6:
            qty = _d(rng.uniform(5, 50))
            price = _d(rng.uniform(330, 380))
            db.session.add(SalesOrder(
                user_id=salesman.id, dealer_id=dealer.id, dvr_id=dvr.id, pjp_id=pjp.id,
                order_date=day, order_party_name=dealer.name, party_phone_no=dealer.phone_no,
                order_qty=qty, order_unit="MT", item_price=price,
                discount_percentage=Decimal("2"),
                item_price_after_discount=_d(float(price) * 0.98),
                received_payment=_d(float(qty) * float(price) * rng.uniform(0, 1)),
                delivery_date=day + timedelta(days=3), payment_mode="NEFT",
            ))

        if rng.random() < 0.3:
            db.session.add(TechnicalVisitReport(
                user_id=salesman.id, report_date=day, visit_type="Site Visit",
                site_name_concerned_person="Site Engineer", phone_no="9111111111",
                clients_remarks="Satisfied", salesperson_remarks="Follow up next week",
                check_in_time=_at(day, 14), site_visit_brand_in_use=rng.sample(BRANDS, 2),
                influencer_type=["Mason"], region=salesman.region, area=dealer.area,
            ))

        if rng.random() < 0.2:
            db.session.add(CompetitionReport(
                user_id=salesman.id, report_date=day, brand_name=rng.choice(BRANDS),
                billing=str(rng.randint(320, 360)), nod=str(rng.randint(300, 340)),
                retail=str(rng.randint(340, 390)), schemes_yes_no=rng.choice(["Yes", "No"]),
                avg_scheme_cost=_d(rng.uniform(0, 15)),
            ))

        db.session.add(SalesmanAttendance(
            user_id=salesman.id, attendance_date=day, location_name="Branch office",
            in_time_timestamp=_at(day, 9), out_time_timestamp=_at(day, 18),
            in_time_latitude=dealer.latitude, in_time_longitude=dealer.longitude,
        ))
        for hour in (11, 13, 16):
            db.session.add(GeoTracking(
                user_id=salesman.id, latitude=_d(float(dealer.latitude) + rng.uniform(-0.01, 0.01)),
                longitude=_d(float(dealer.longitude) + rng.uniform(-0.01, 0.01)),
                recorded_at=_at(day, hour), journey_id=f"J-{salesman.id}-{day.isoformat()}",
                battery_level=_d(rng.uniform(20, 100)),
            ))

    db.session.add(SalesmanLeaveApplication(
        user_id=salesman.id, approver_id=manager.id, leave_type="Casual",
        start_date=today + timedelta(days=7), end_date=today + timedelta(days=8),
        reason="Family function",
    ))
    db.session.add(SalesmanRating(
        user_id=salesman.id, area=salesman.area, region=salesman.region, rating=rng.randint(1, 5),
    ))


def seed_demo(n_salesmen=3, days=10, seed=42):
    rng = random.Random(seed)
    brands = seed_brands()
    for name, region, area in COMPANIES:
        company, manager, salesmen = seed_company(name, region, area, n_salesmen, rng)
        for salesman in salesmen:
            dealers = seed_dealers(salesman, brands, rng)
            seed_activity(salesman, manager, dealers, days, rng)
        db.session.commit()
        print(f"  ✅ {company.company_name}: id={company.id}, {len(salesmen)} salesmen")


def main():
    parser = argparse.ArgumentParser(description="Field-Sales Reporting demo seed")
    parser.add_argument("--salesmen", type=int, default=3, help="Salesmen per company (default: 3)")
    parser.add_argument("--days", type=int, default=10, help="Days of activity (default: 10)")
    parser.add_argument("--no-reset", action="store_true", help="Don't clear existing data")
    args = parser.parse_args()

    app = create_app()
    print(f"  🎯 DB: {app.config['SQLALCHEMY_DATABASE_URI']}\n")

    with app.app_context():
        if not args.no_reset:
            db.drop_all()
            db.create_all()
            print("  ♻️  Database reset complete\n")

        seed_demo(n_salesmen=args.salesmen, days=args.days)


if __name__ == "__main__":
    main()
