"""
Flattening layer: one function per reportable entity.

Each flattener takes a company id and returns every record of its entity
that belongs to that company, as flat dicts keyed by the catalog column
names. Relations are denormalised into display fields (``dealerName``,
``salesmanName``, ...) and values are normalised to JSON-safe scalars:

    Decimal        → float
    date           → "YYYY-MM-DD"
    datetime       → "YYYY-MM-DDTHH:MM:SS.mmmZ" (UTC; naive values are UTC)
    list of str    → "a, b, c"
    missing value  → None (keys are never omitted)

Flatteners are registered with ``@flattener("<entity id>")`` into
``FLATTENERS``; ``missing_flatteners()`` lists catalog entities that have
none. Database errors propagate to the caller.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from sqlalchemy import select
from sqlalchemy.orm import contains_eager, selectinload

from fieldsales.models import db
from fieldsales.models.attendance import (
    GeoTracking, SalesmanAttendance, SalesmanLeaveApplication, SalesmanRating,
)
from fieldsales.models.company import User
from fieldsales.models.dealer import Dealer, DealerBrandMapping, DealerReportsAndScores
from fieldsales.models.sales import SalesOrder
from fieldsales.models.visit import (
    CompetitionReport, DailyTask, DailyVisitReport, PermanentJourneyPlan, TechnicalVisitReport,
)
from fieldsales.services.report_catalog import list_tables

FlatRow = dict[str, str | int | float | bool | None]
Flattener = Callable[[int], list[FlatRow]]

FLATTENERS: dict[str, Flattener] = {}


def flattener(table_id: str):
    """Decorator to register the flattener for a catalog entity."""
    def decorator(fn):
        FLATTENERS[table_id] = fn
        return fn
    return decorator


def missing_flatteners() -> list[str]:
    """Catalog entity ids that have no registered flattener."""
    return [t.id for t in list_tables() if t.id not in FLATTENERS]


# ═════════════════════════════════════════════════════════════════════════════
# NORMALISATION HELPERS
# ═════════════════════════════════════════════════════════════════════════════

def to_number(value):
    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value)
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_date_str(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = _as_utc(value).date()
    return value.isoformat()


def to_timestamp_str(value) -> str | None:
    """ISO 8601 UTC with millisecond precision, e.g. ``2024-03-01T09:30:00.000Z``."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        # date-only value used where a timestamp is expected: midnight UTC
        value = datetime(value.year, value.month, value.day)
    value = _as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def join_list(values, *, required: bool = True) -> str | None:
    if values is None:
        return "" if required else None
    return ", ".join(str(v) for v in values)


def full_name(user) -> str | None:
    if user is None:
        return None
    return f"{user.first_name or ''} {user.last_name or ''}".strip() or user.email


def _attr(obj, name):
    return getattr(obj, name) if obj is not None else None


def _scalars(stmt) -> list:
    return db.session.execute(stmt).unique().scalars().all()


def _owned_by_company(model, company_id: int):
    """``select(model)`` restricted to rows whose salesman is in ``company_id``."""
    return (
        select(model)
        .join(model.user)
        .where(User.company_id == company_id)
        .options(contains_eager(model.user))
    )


# ═════════════════════════════════════════════════════════════════════════════
# PEOPLE & DEALERS
# ═════════════════════════════════════════════════════════════════════════════

@flattener("users")
def flatten_users(company_id: int) -> list[FlatRow]:
    stmt = (
        select(User)
        .where(User.company_id == company_id)
        .options(selectinload(User.reports_to))
        .order_by(User.created_at.desc(), User.id.desc())
    )
    return [
        {
            "id": u.id,
            "email": u.email,
            "firstName": u.first_name,
            "lastName": u.last_name,
            "role": u.role,
            "phoneNo": u.phone_no,
            "address": u.address,
            "region": u.region,
            "area": u.area,
            "isActive": u.is_active,
            "status": u.status,
            "reportsToManagerName": full_name(u.reports_to),
            "createdAt": to_timestamp_str(u.created_at),
        }
        for u in _scalars(stmt)
    ]


@flattener("dealers")
def flatten_dealers(company_id: int) -> list[FlatRow]:
    stmt = _owned_by_company(Dealer, company_id).order_by(Dealer.created_at.desc(), Dealer.id.desc())
    rows = []
    for d in _scalars(stmt):
        rows.append({
            "id": d.id,
            "type": d.type,
            "name": d.name,
            "region": d.region,
            "area": d.area,
            "phoneNo": d.phone_no,
            "address": d.address,
            "pinCode": d.pin_code,
            "feedbacks": d.feedbacks,
            "remarks": d.remarks,
            "dealerDevelopmentStatus": d.dealer_development_status,
            "dealerDevelopmentObstacle": d.dealer_development_obstacle,
            "verificationStatus": d.verification_status,
            "whatsappNo": d.whatsapp_no,
            "emailId": d.email_id,
            "businessType": d.business_type,
            "gstinNo": d.gstin_no,
            "nameOfFirm": d.name_of_firm,
            "underSalesPromoterName": d.under_sales_promoter_name,
            "panNo": d.pan_no,
            "tradeLicNo": d.trade_lic_no,
            "aadharNo": d.aadhar_no,
            "godownSizeSqFt": d.godown_size_sq_ft,
            "godownCapacityMTBags": d.godown_capacity_mt_bags,
            "godownAddressLine": d.godown_address_line,
            "godownLandMark": d.godown_land_mark,
            "godownDistrict": d.godown_district,
            "godownArea": d.godown_area,
            "godownRegion": d.godown_region,
            "godownPinCode": d.godown_pin_code,
            "residentialAddressLine": d.residential_address_line,
            "residentialLandMark": d.residential_land_mark,
            "residentialDistrict": d.residential_district,
            "residentialArea": d.residential_area,
            "residentialRegion": d.residential_region,
            "residentialPinCode": d.residential_pin_code,
            "bankAccountName": d.bank_account_name,
            "bankName": d.bank_name,
            "bankBranchAddress": d.bank_branch_address,
            "bankAccountNumber": d.bank_account_number,
            "bankIfscCode": d.bank_ifsc_code,
            "brandName": d.brand_name,
            "noOfDealers": d.no_of_dealers,
            "areaCovered": d.area_covered,
            "noOfEmployeesInSales": d.no_of_employees_in_sales,
            "declarationName": d.declaration_name,
            "declarationPlace": d.declaration_place,
            "tradeLicencePicUrl": d.trade_licence_pic_url,
            "shopPicUrl": d.shop_pic_url,
            "dealerPicUrl": d.dealer_pic_url,
            "blankChequePicUrl": d.blank_cheque_pic_url,
            "partnershipDeedPicUrl": d.partnership_deed_pic_url,
            "latitude": to_number(d.latitude),
            "longitude": to_number(d.longitude),
            "dateOfBirth": to_date_str(d.date_of_birth),
            "anniversaryDate": to_date_str(d.anniversary_date),
            "totalPotential": to_number(d.total_potential),
            "bestPotential": to_number(d.best_potential),
            "monthlySaleMT": to_number(d.monthly_sale_mt),
            "projectedMonthlySalesBestCementMT": to_number(d.projected_monthly_sales_best_cement_mt),
            "brandSelling": join_list(d.brand_selling),
            "declarationDate": to_date_str(d.declaration_date),
            "createdAt": to_timestamp_str(d.created_at),
            "updatedAt": to_timestamp_str(d.updated_at),
            "associatedSalesmanName": full_name(d.user),
        })
    return rows


@flattener("dealerReportsAndScores")
def flatten_dealer_scores(company_id: int) -> list[FlatRow]:
    stmt = (
        select(DealerReportsAndScores)
        .join(DealerReportsAndScores.dealer)
        .join(Dealer.user)
        .where(User.company_id == company_id)
        .options(contains_eager(DealerReportsAndScores.dealer))
        .order_by(DealerReportsAndScores.last_updated_date.desc(), DealerReportsAndScores.id.desc())
    )
    return [
        {
            "id": s.id,
            "dealerScore": to_number(s.dealer_score),
            "trustWorthinessScore": to_number(s.trust_worthiness_score),
            "creditWorthinessScore": to_number(s.credit_worthiness_score),
            "orderHistoryScore": to_number(s.order_history_score),
            "visitFrequencyScore": to_number(s.visit_frequency_score),
            "lastUpdatedDate": to_timestamp_str(s.last_updated_date),
            "dealerName": s.dealer.name,
            "dealerRegion": s.dealer.region,
            "dealerArea": s.dealer.area,
            "createdAt": to_timestamp_str(s.created_at),
        }
        for s in _scalars(stmt)
    ]


@flattener("dealerBrandCapacities")
def flatten_dealer_brand_capacities(company_id: int) -> list[FlatRow]:
    stmt = (
        select(DealerBrandMapping)
        .join(DealerBrandMapping.dealer)
        .join(Dealer.user)
        .where(User.company_id == company_id)
        .options(contains_eager(DealerBrandMapping.dealer), selectinload(DealerBrandMapping.brand))
        .order_by(DealerBrandMapping.dealer_id.asc(), DealerBrandMapping.id.desc())
    )
    return [
        {
            "id": m.id,
            "capacityMT": to_number(m.capacity_mt),
            "bestCapacityMT": to_number(m.best_capacity_mt),
            "brandGrowthCapacityPercent": to_number(m.brand_growth_capacity_percent),
            "userId": m.user_id,
            "brandName": _attr(m.brand, "name"),
            "dealerName": m.dealer.name,
            "dealerRegion": m.dealer.region,
            "dealerArea": m.dealer.area,
        }
        for m in _scalars(stmt)
    ]


# ═════════════════════════════════════════════════════════════════════════════
# VISITS, PLANS & TASKS
# ═════════════════════════════════════════════════════════════════════════════

@flattener("dailyVisitReports")
def flatten_daily_visit_reports(company_id: int) -> list[FlatRow]:
    stmt = (
        _owned_by_company(DailyVisitReport, company_id)
        .options(selectinload(DailyVisitReport.dealer), selectinload(DailyVisitReport.sub_dealer))
        .order_by(DailyVisitReport.report_date.desc(), DailyVisitReport.id.desc())
    )
    return [
        {
            "id": r.id,
            "reportDate": to_date_str(r.report_date),
            "dealerType": r.dealer_type,
            "dealerName": _attr(r.dealer, "name"),
            "subDealerName": _attr(r.sub_dealer, "name"),
            "location": r.location,
            "latitude": to_number(r.latitude),
            "longitude": to_number(r.longitude),
            "visitType": r.visit_type,
            "dealerTotalPotential": to_number(r.dealer_total_potential),
            "dealerBestPotential": to_number(r.dealer_best_potential),
            "brandSelling": join_list(r.brand_selling),
            "contactPerson": r.contact_person,
            "contactPersonPhoneNo": r.contact_person_phone_no,
            "todayOrderMt": to_number(r.today_order_mt),
            "todayCollectionRupees": to_number(r.today_collection_rupees),
            "overdueAmount": to_number(r.overdue_amount),
            "feedbacks": r.feedbacks,
            "solutionBySalesperson": r.solution_by_salesperson,
            "anyRemarks": r.any_remarks,
            "checkInTime": to_timestamp_str(r.check_in_time),
            "checkOutTime": to_timestamp_str(r.check_out_time),
            "timeSpentInLoc": r.time_spent_in_loc,
            "inTimeImageUrl": r.in_time_image_url,
            "outTimeImageUrl": r.out_time_image_url,
            "salesmanName": full_name(r.user),
            "salesmanEmail": r.user.email,
            "createdAt": to_timestamp_str(r.created_at),
            "updatedAt": to_timestamp_str(r.updated_at),
        }
        for r in _scalars(stmt)
    ]


@flattener("technicalVisitReports")
def flatten_technical_visit_reports(company_id: int) -> list[FlatRow]:
    stmt = _owned_by_company(TechnicalVisitReport, company_id).order_by(
        TechnicalVisitReport.report_date.desc(), TechnicalVisitReport.id.desc()
    )
    return [
        {
            "id": r.id,
            "reportDate": to_date_str(r.report_date),
            "visitType": r.visit_type,
            "siteNameConcernedPerson": r.site_name_concerned_person,
            "phoneNo": r.phone_no,
            "emailId": r.email_id,
            "clientsRemarks": r.clients_remarks,
            "salespersonRemarks": r.salesperson_remarks,
            "checkInTime": to_timestamp_str(r.check_in_time),
            "checkOutTime": to_timestamp_str(r.check_out_time),
            "inTimeImageUrl": r.in_time_image_url,
            "outTimeImageUrl": r.out_time_image_url,
            "siteVisitBrandInUse": join_list(r.site_visit_brand_in_use),
            "siteVisitStage": r.site_visit_stage,
            "conversionFromBrand": r.conversion_from_brand,
            "conversionQuantityValue": to_number(r.conversion_quantity_value),
            "conversionQuantityUnit": r.conversion_quantity_unit,
            "associatedPartyName": r.associated_party_name,
            "influencerType": join_list(r.influencer_type),
            "serviceType": r.service_type,
            "qualityComplaint": r.quality_complaint,
            "promotionalActivity": r.promotional_activity,
            "channelPartnerVisit": r.channel_partner_visit,
            "siteVisitType": r.site_visit_type,
            "dhalaiVerificationCode": r.dhalai_verification_code,
            "isVerificationStatus": r.is_verification_status,
            "meetingId": r.meeting_id,
            "region": r.region,
            "area": r.area,
            "isConverted": r.is_converted,
            "createdAt": to_timestamp_str(r.created_at),
            "updatedAt": to_timestamp_str(r.updated_at),
            "salesmanName": full_name(r.user),
            "salesmanEmail": r.user.email,
        }
        for r in _scalars(stmt)
    ]


@flattener("permanentJourneyPlans")
def flatten_permanent_journey_plans(company_id: int) -> list[FlatRow]:
    stmt = (
        _owned_by_company(PermanentJourneyPlan, company_id)
        .options(selectinload(PermanentJourneyPlan.created_by), selectinload(PermanentJourneyPlan.dealer))
        .order_by(PermanentJourneyPlan.plan_date.desc(), PermanentJourneyPlan.id.desc())
    )
    return [
        {
            "id": p.id,
            "planDate": to_date_str(p.plan_date),
            "areaToBeVisited": p.area_to_be_visited,
            "description": p.description,
            "status": p.status,
            "dealerName": _attr(p.dealer, "name"),
            "assignedSalesmanName": full_name(p.user),
            "creatorName": full_name(p.created_by),
            "createdAt": to_timestamp_str(p.created_at),
            "updatedAt": to_timestamp_str(p.updated_at),
        }
        for p in _scalars(stmt)
    ]


@flattener("dailyTasks")
def flatten_daily_tasks(company_id: int) -> list[FlatRow]:
    stmt = (
        _owned_by_company(DailyTask, company_id)
        .options(selectinload(DailyTask.assigned_by), selectinload(DailyTask.related_dealer))
        .order_by(DailyTask.task_date.desc(), DailyTask.id.desc())
    )
    return [
        {
            "id": t.id,
            "taskDate": to_date_str(t.task_date),
            "visitType": t.visit_type,
            "siteName": t.site_name,
            "description": t.description,
            "status": t.status,
            "pjpId": t.pjp_id,
            "assignedToName": full_name(t.user),
            "assignedByName": full_name(t.assigned_by),
            "relatedDealerName": _attr(t.related_dealer, "name"),
            "createdAt": to_timestamp_str(t.created_at),
        }
        for t in _scalars(stmt)
    ]


@flattener("competitionReports")
def flatten_competition_reports(company_id: int) -> list[FlatRow]:
    stmt = _owned_by_company(CompetitionReport, company_id).order_by(
        CompetitionReport.report_date.desc(), CompetitionReport.id.desc()
    )
    return [
        {
            "id": r.id,
            "reportDate": to_date_str(r.report_date),
            "brandName": r.brand_name,
            "billing": r.billing,
            "nod": r.nod,
            "retail": r.retail,
            "schemesYesNo": r.schemes_yes_no,
            "avgSchemeCost": to_number(r.avg_scheme_cost),
            "remarks": r.remarks,
            "salesmanName": full_name(r.user),
            "salesmanEmail": r.user.email,
            "createdAt": to_timestamp_str(r.created_at),
            "updatedAt": to_timestamp_str(r.updated_at),
        }
        for r in _scalars(stmt)
    ]


# ═════════════════════════════════════════════════════════════════════════════
# SALES
# ═════════════════════════════════════════════════════════════════════════════

def order_total(order: SalesOrder) -> float:
    """Quantity times the effective unit price (discounted, else list, else 0)."""
    qty = to_number(order.order_qty) or 0
    unit_price = to_number(order.item_price_after_discount)
    if unit_price is None:
        unit_price = to_number(order.item_price) or 0
    return round(qty * unit_price, 2)


@flattener("salesOrders")
def flatten_sales_orders(company_id: int) -> list[FlatRow]:
    stmt = (
        _owned_by_company(SalesOrder, company_id)
        .options(selectinload(SalesOrder.dealer))
        .order_by(SalesOrder.created_at.desc(), SalesOrder.id.desc())
    )
    rows = []
    for o in _scalars(stmt):
        total = order_total(o)
        received = to_number(o.received_payment)
        pending = to_number(o.pending_payment)
        if pending is None:
            pending = round(total - (received or 0), 2)
        delivery_date = to_date_str(o.delivery_date)
        rows.append({
            "id": o.id,
            "userId": o.user_id,
            "dealerId": o.dealer_id,
            "dvrId": o.dvr_id,
            "pjpId": o.pjp_id,
            "salesmanName": full_name(o.user),
            "salesmanRole": o.user.role,
            "dealerName": _attr(o.dealer, "name"),
            "dealerType": _attr(o.dealer, "type"),
            "dealerPhone": _attr(o.dealer, "phone_no"),
            "dealerAddress": _attr(o.dealer, "address"),
            "area": _attr(o.dealer, "area"),
            "region": _attr(o.dealer, "region"),
            "orderDate": to_date_str(o.order_date),
            "orderPartyName": o.order_party_name,
            "partyPhoneNo": o.party_phone_no,
            "partyArea": o.party_area,
            "partyRegion": o.party_region,
            "partyAddress": o.party_address,
            "deliveryDate": delivery_date,
            "deliveryArea": o.delivery_area,
            "deliveryRegion": o.delivery_region,
            "deliveryAddress": o.delivery_address,
            "deliveryLocPincode": o.delivery_loc_pincode,
            "paymentMode": o.payment_mode,
            "paymentTerms": o.payment_terms,
            "paymentAmount": to_number(o.payment_amount),
            "receivedPayment": received,
            "receivedPaymentDate": to_date_str(o.received_payment_date),
            "pendingPayment": pending,
            "orderQty": to_number(o.order_qty),
            "orderUnit": o.order_unit,
            "itemPrice": to_number(o.item_price),
            "discountPercentage": to_number(o.discount_percentage),
            "itemPriceAfterDiscount": to_number(o.item_price_after_discount),
            "itemType": o.item_type,
            "itemGrade": o.item_grade,
            "orderTotal": total,
            "estimatedDelivery": delivery_date,
            "remarks": o.remarks,
            "createdAt": to_timestamp_str(o.created_at),
            "updatedAt": to_timestamp_str(o.updated_at),
        })
    return rows


# ═════════════════════════════════════════════════════════════════════════════
# SALESMAN ACTIVITY
# ═════════════════════════════════════════════════════════════════════════════

@flattener("salesmanAttendance")
def flatten_salesman_attendance(company_id: int) -> list[FlatRow]:
    stmt = _owned_by_company(SalesmanAttendance, company_id).order_by(
        SalesmanAttendance.attendance_date.desc(), SalesmanAttendance.id.desc()
    )
    return [
        {
            "id": a.id,
            "attendanceDate": to_date_str(a.attendance_date),
            "locationName": a.location_name,
            "inTimeTimestamp": to_timestamp_str(a.in_time_timestamp),
            "outTimeTimestamp": to_timestamp_str(a.out_time_timestamp),
            "inTimeLatitude": to_number(a.in_time_latitude),
            "inTimeLongitude": to_number(a.in_time_longitude),
            "outTimeLatitude": to_number(a.out_time_latitude),
            "outTimeLongitude": to_number(a.out_time_longitude),
            "salesmanName": full_name(a.user),
            "salesmanEmail": a.user.email,
            "createdAt": to_timestamp_str(a.created_at),
        }
        for a in _scalars(stmt)
    ]


@flattener("salesmanLeaveApplications")
def flatten_salesman_leave_applications(company_id: int) -> list[FlatRow]:
    stmt = (
        _owned_by_company(SalesmanLeaveApplication, company_id)
        .options(selectinload(SalesmanLeaveApplication.approver))
        .order_by(SalesmanLeaveApplication.start_date.desc(), SalesmanLeaveApplication.id.desc())
    )
    return [
        {
            "id": la.id,
            "leaveType": la.leave_type,
            "startDate": to_date_str(la.start_date),
            "endDate": to_date_str(la.end_date),
            "reason": la.reason,
            "status": la.status,
            "adminRemarks": la.admin_remarks,
            "salesmanName": full_name(la.user),
            "salesmanEmail": la.user.email,
            "approverName": full_name(la.approver),
            "createdAt": to_timestamp_str(la.created_at),
        }
        for la in _scalars(stmt)
    ]


@flattener("geoTracking")
def flatten_geo_tracking(company_id: int) -> list[FlatRow]:
    stmt = _owned_by_company(GeoTracking, company_id).order_by(
        GeoTracking.recorded_at.desc(), GeoTracking.id.desc()
    )
    return [
        {
            "id": p.id,
            "latitude": to_number(p.latitude),
            "longitude": to_number(p.longitude),
            "recordedAt": to_timestamp_str(p.recorded_at),
            "accuracy": to_number(p.accuracy),
            "speed": to_number(p.speed),
            "activityType": p.activity_type,
            "appState": p.app_state,
            "batteryLevel": to_number(p.battery_level),
            "salesmanName": full_name(p.user),
            "salesmanEmail": p.user.email,
            "journeyId": p.journey_id,
            "createdAt": to_timestamp_str(p.created_at),
        }
        for p in _scalars(stmt)
    ]


@flattener("salesmanRating")
def flatten_salesman_ratings(company_id: int) -> list[FlatRow]:
    stmt = _owned_by_company(SalesmanRating, company_id).order_by(SalesmanRating.id.desc())
    return [
        {
            "id": r.id,
            "area": r.area,
            "region": r.region,
            "rating": r.rating,
            "salesmanName": full_name(r.user),
            "salesmanEmail": r.user.email,
        }
        for r in _scalars(stmt)
    ]
