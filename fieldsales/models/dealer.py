"""
Dealer network models.

Models:
    - Dealer: dealer / sub-dealer master record owned by a salesman
    - Brand: cement brand catalogue
    - DealerBrandMapping: per-dealer capacity for a brand
    - DealerReportsAndScores: periodic dealer scoring snapshot

Dealers carry no company column of their own; they belong to the company of
the salesman in ``user_id``.
"""

from datetime import datetime, timezone

from fieldsales.models import db


def _utcnow():
    return datetime.now(timezone.utc)


class Dealer(db.Model):
    """Dealer or sub-dealer registered by a salesman."""

    __tablename__ = "dealers"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_dealer_id = db.Column(db.Integer, db.ForeignKey("dealers.id", ondelete="SET NULL"))
    type = db.Column(db.String(50), nullable=False, comment="Dealer-Normal | Dealer-Best | Sub Dealer-*")
    name = db.Column(db.String(255), nullable=False)
    region = db.Column(db.String(100), nullable=False)
    area = db.Column(db.String(100), nullable=False)
    phone_no = db.Column(db.String(50), nullable=False)
    address = db.Column(db.Text, nullable=False)
    pin_code = db.Column(db.String(20))
    latitude = db.Column(db.Numeric(10, 7))
    longitude = db.Column(db.Numeric(10, 7))
    date_of_birth = db.Column(db.Date)
    anniversary_date = db.Column(db.Date)
    total_potential = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    best_potential = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    brand_selling = db.Column(db.JSON, nullable=False, default=list)
    feedbacks = db.Column(db.Text, nullable=False, default="")
    remarks = db.Column(db.Text)
    dealer_development_status = db.Column(db.String(100))
    dealer_development_obstacle = db.Column(db.Text)
    verification_status = db.Column(db.String(30), nullable=False, default="PENDING")

    # KYC / business profile
    whatsapp_no = db.Column(db.String(50))
    email_id = db.Column(db.String(255))
    business_type = db.Column(db.String(100))
    name_of_firm = db.Column(db.String(255))
    under_sales_promoter_name = db.Column(db.String(255))
    gstin_no = db.Column(db.String(50))
    pan_no = db.Column(db.String(50))
    trade_lic_no = db.Column(db.String(100))
    aadhar_no = db.Column(db.String(50))

    # Godown
    godown_size_sq_ft = db.Column(db.Integer)
    godown_capacity_mt_bags = db.Column(db.String(100))
    godown_address_line = db.Column(db.Text)
    godown_land_mark = db.Column(db.String(255))
    godown_district = db.Column(db.String(100))
    godown_area = db.Column(db.String(100))
    godown_region = db.Column(db.String(100))
    godown_pin_code = db.Column(db.String(20))

    # Residence
    residential_address_line = db.Column(db.Text)
    residential_land_mark = db.Column(db.String(255))
    residential_district = db.Column(db.String(100))
    residential_area = db.Column(db.String(100))
    residential_region = db.Column(db.String(100))
    residential_pin_code = db.Column(db.String(20))

    # Bank
    bank_account_name = db.Column(db.String(255))
    bank_name = db.Column(db.String(255))
    bank_branch_address = db.Column(db.Text)
    bank_account_number = db.Column(db.String(50))
    bank_ifsc_code = db.Column(db.String(20))

    # Sales profile
    brand_name = db.Column(db.String(255))
    monthly_sale_mt = db.Column(db.Numeric(12, 2))
    no_of_dealers = db.Column(db.Integer)
    area_covered = db.Column(db.String(255))
    projected_monthly_sales_best_cement_mt = db.Column(db.Numeric(12, 2))
    no_of_employees_in_sales = db.Column(db.Integer)

    # Declaration & documents
    declaration_name = db.Column(db.String(255))
    declaration_place = db.Column(db.String(255))
    declaration_date = db.Column(db.Date)
    trade_licence_pic_url = db.Column(db.String(500))
    shop_pic_url = db.Column(db.String(500))
    dealer_pic_url = db.Column(db.String(500))
    blank_cheque_pic_url = db.Column(db.String(500))
    partnership_deed_pic_url = db.Column(db.String(500))

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        db.CheckConstraint("total_potential >= 0", name="ck_dealer_total_potential_non_negative"),
        db.CheckConstraint("best_potential >= 0", name="ck_dealer_best_potential_non_negative"),
    )

    user = db.relationship("User")
    parent_dealer = db.relationship("Dealer", remote_side=[id])

    def __repr__(self):
        return f"<Dealer {self.id}: {self.name}>"


class Brand(db.Model):
    __tablename__ = "brands"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<Brand {self.id}: {self.name}>"


class DealerBrandMapping(db.Model):
    """Capacity a dealer moves for one brand."""

    __tablename__ = "dealer_brand_mappings"

    id = db.Column(db.Integer, primary_key=True)
    dealer_id = db.Column(
        db.Integer, db.ForeignKey("dealers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    capacity_mt = db.Column(db.Numeric(12, 2), nullable=False)
    best_capacity_mt = db.Column(db.Numeric(12, 2))
    brand_growth_capacity_percent = db.Column(db.Numeric(5, 2))

    __table_args__ = (
        db.UniqueConstraint("dealer_id", "brand_id", name="uq_dealer_brand"),
    )

    dealer = db.relationship("Dealer")
    brand = db.relationship("Brand")


class DealerReportsAndScores(db.Model):
    """Latest computed scores for a dealer."""

    __tablename__ = "dealer_reports_and_scores"

    id = db.Column(db.Integer, primary_key=True)
    dealer_id = db.Column(
        db.Integer, db.ForeignKey("dealers.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    dealer_score = db.Column(db.Numeric(10, 2), nullable=False)
    trust_worthiness_score = db.Column(db.Numeric(10, 2), nullable=False)
    credit_worthiness_score = db.Column(db.Numeric(10, 2), nullable=False)
    order_history_score = db.Column(db.Numeric(10, 2), nullable=False)
    visit_frequency_score = db.Column(db.Numeric(10, 2), nullable=False)
    last_updated_date = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    dealer = db.relationship("Dealer")
