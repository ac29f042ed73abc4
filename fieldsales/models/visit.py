"""
Field-activity models: visits, journey plans, tasks and market intel.

Models:
    - PermanentJourneyPlan: planned visit assigned to a salesman
    - DailyTask: task assigned by a manager, optionally tied to a PJP
    - DailyVisitReport: dealer visit (DVR) with order/collection figures
    - TechnicalVisitReport: site/influencer visit (TVR)
    - CompetitionReport: competitor pricing and scheme observations
"""

from datetime import datetime, timezone

from fieldsales.models import db


def _utcnow():
    return datetime.now(timezone.utc)


class PermanentJourneyPlan(db.Model):
    __tablename__ = "permanent_journey_plans"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
        comment="Salesman the plan is assigned to",
    )
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    dealer_id = db.Column(db.Integer, db.ForeignKey("dealers.id", ondelete="SET NULL"))
    plan_date = db.Column(db.Date, nullable=False)
    area_to_be_visited = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(50), nullable=False, default="PENDING")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User", foreign_keys=[user_id])
    created_by = db.relationship("User", foreign_keys=[created_by_id])
    dealer = db.relationship("Dealer")


class DailyTask(db.Model):
    __tablename__ = "daily_tasks"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_by_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    related_dealer_id = db.Column(db.Integer, db.ForeignKey("dealers.id", ondelete="SET NULL"))
    pjp_id = db.Column(db.Integer, db.ForeignKey("permanent_journey_plans.id", ondelete="SET NULL"))
    task_date = db.Column(db.Date, nullable=False)
    visit_type = db.Column(db.String(50), nullable=False)
    site_name = db.Column(db.String(255))
    description = db.Column(db.Text)
    status = db.Column(db.String(50), nullable=False, default="Assigned")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User", foreign_keys=[user_id])
    assigned_by = db.relationship("User", foreign_keys=[assigned_by_id])
    related_dealer = db.relationship("Dealer")


class DailyVisitReport(db.Model):
    __tablename__ = "daily_visit_reports"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dealer_id = db.Column(db.Integer, db.ForeignKey("dealers.id", ondelete="SET NULL"))
    sub_dealer_id = db.Column(db.Integer, db.ForeignKey("dealers.id", ondelete="SET NULL"))
    report_date = db.Column(db.Date, nullable=False)
    dealer_type = db.Column(db.String(50), nullable=False)
    location = db.Column(db.String(500), nullable=False)
    latitude = db.Column(db.Numeric(10, 7), nullable=False)
    longitude = db.Column(db.Numeric(10, 7), nullable=False)
    visit_type = db.Column(db.String(50), nullable=False)
    dealer_total_potential = db.Column(db.Numeric(12, 2), nullable=False)
    dealer_best_potential = db.Column(db.Numeric(12, 2), nullable=False)
    brand_selling = db.Column(db.JSON, nullable=False, default=list)
    contact_person = db.Column(db.String(255))
    contact_person_phone_no = db.Column(db.String(50))
    today_order_mt = db.Column(db.Numeric(12, 2), nullable=False)
    today_collection_rupees = db.Column(db.Numeric(14, 2), nullable=False)
    overdue_amount = db.Column(db.Numeric(14, 2))
    feedbacks = db.Column(db.Text, nullable=False)
    solution_by_salesperson = db.Column(db.Text)
    any_remarks = db.Column(db.Text)
    check_in_time = db.Column(db.DateTime(timezone=True), nullable=False)
    check_out_time = db.Column(db.DateTime(timezone=True))
    time_spent_in_loc = db.Column(db.String(50))
    in_time_image_url = db.Column(db.String(500))
    out_time_image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User")
    dealer = db.relationship("Dealer", foreign_keys=[dealer_id])
    sub_dealer = db.relationship("Dealer", foreign_keys=[sub_dealer_id])


class TechnicalVisitReport(db.Model):
    __tablename__ = "technical_visit_reports"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pjp_id = db.Column(db.Integer, db.ForeignKey("permanent_journey_plans.id", ondelete="SET NULL"))
    report_date = db.Column(db.Date, nullable=False)
    visit_type = db.Column(db.String(50), nullable=False)
    site_name_concerned_person = db.Column(db.String(255), nullable=False)
    phone_no = db.Column(db.String(50), nullable=False)
    email_id = db.Column(db.String(255))
    clients_remarks = db.Column(db.Text, nullable=False)
    salesperson_remarks = db.Column(db.Text, nullable=False)
    check_in_time = db.Column(db.DateTime(timezone=True), nullable=False)
    check_out_time = db.Column(db.DateTime(timezone=True))
    time_spent_in_loc = db.Column(db.String(50))
    in_time_image_url = db.Column(db.String(500))
    out_time_image_url = db.Column(db.String(500))
    site_visit_brand_in_use = db.Column(db.JSON, nullable=False, default=list)
    site_visit_stage = db.Column(db.String(100))
    conversion_from_brand = db.Column(db.String(255))
    conversion_quantity_value = db.Column(db.Numeric(12, 2))
    conversion_quantity_unit = db.Column(db.String(20))
    associated_party_name = db.Column(db.String(255))
    influencer_type = db.Column(db.JSON, nullable=False, default=list)
    service_type = db.Column(db.String(100))
    quality_complaint = db.Column(db.Text)
    promotional_activity = db.Column(db.Text)
    channel_partner_visit = db.Column(db.Text)
    site_visit_type = db.Column(db.String(50))
    dhalai_verification_code = db.Column(db.String(50))
    is_verification_status = db.Column(db.String(50))
    meeting_id = db.Column(db.String(100))
    region = db.Column(db.String(100))
    area = db.Column(db.String(100))
    latitude = db.Column(db.Numeric(10, 7))
    longitude = db.Column(db.Numeric(10, 7))
    is_converted = db.Column(db.Boolean)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User")


class CompetitionReport(db.Model):
    __tablename__ = "competition_reports"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    report_date = db.Column(db.Date, nullable=False)
    brand_name = db.Column(db.String(255), nullable=False)
    billing = db.Column(db.String(100), nullable=False)
    nod = db.Column(db.String(100), nullable=False)
    retail = db.Column(db.String(100), nullable=False)
    schemes_yes_no = db.Column(db.String(10), nullable=False)
    avg_scheme_cost = db.Column(db.Numeric(12, 2), nullable=False)
    remarks = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User")
