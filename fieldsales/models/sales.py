"""
Sales order model.

Monetary and quantity columns are Numeric; derived figures (order total,
pending payment fallback) are computed at report time, not stored.
"""

from datetime import datetime, timezone

from fieldsales.models import db


def _utcnow():
    return datetime.now(timezone.utc)


class SalesOrder(db.Model):
    __tablename__ = "sales_orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dealer_id = db.Column(db.Integer, db.ForeignKey("dealers.id", ondelete="SET NULL"))
    dvr_id = db.Column(db.Integer, db.ForeignKey("daily_visit_reports.id", ondelete="SET NULL"))
    pjp_id = db.Column(db.Integer, db.ForeignKey("permanent_journey_plans.id", ondelete="SET NULL"))

    order_date = db.Column(db.Date, nullable=False)
    order_party_name = db.Column(db.String(255), nullable=False)
    party_phone_no = db.Column(db.String(50))
    party_area = db.Column(db.String(100))
    party_region = db.Column(db.String(100))
    party_address = db.Column(db.Text)

    delivery_date = db.Column(db.Date)
    delivery_area = db.Column(db.String(100))
    delivery_region = db.Column(db.String(100))
    delivery_address = db.Column(db.Text)
    delivery_loc_pincode = db.Column(db.String(20))

    payment_mode = db.Column(db.String(50))
    payment_terms = db.Column(db.String(255))
    payment_amount = db.Column(db.Numeric(14, 2))
    received_payment = db.Column(db.Numeric(14, 2))
    received_payment_date = db.Column(db.Date)
    pending_payment = db.Column(db.Numeric(14, 2))

    order_qty = db.Column(db.Numeric(12, 3))
    order_unit = db.Column(db.String(20))
    item_price = db.Column(db.Numeric(12, 2))
    discount_percentage = db.Column(db.Numeric(5, 2))
    item_price_after_discount = db.Column(db.Numeric(12, 2))
    item_type = db.Column(db.String(20))
    item_grade = db.Column(db.String(20))
    remarks = db.Column(db.Text)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User")
    dealer = db.relationship("Dealer")

    def __repr__(self):
        return f"<SalesOrder {self.id}: {self.order_party_name}>"
