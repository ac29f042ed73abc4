"""
Company & User models: the tenant boundary of every report.

Every reportable record resolves to exactly one company, either directly
(``users.company_id``) or through its owning salesman.
"""

from datetime import datetime, timezone

from fieldsales.models import db


def _utcnow():
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════
# 1. COMPANIES
# ═══════════════════════════════════════════════════════════════
class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(200), nullable=False)
    office_address = db.Column(db.Text)
    is_head_office = db.Column(db.Boolean, default=True)
    phone_number = db.Column(db.String(50))
    region = db.Column(db.String(100))
    area = db.Column(db.String(100))
    admin_user_id = db.Column(db.String(100))
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    users = db.relationship("User", back_populates="company", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "company_name": self.company_name,
            "region": self.region,
            "area": self.area,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Company {self.id}: {self.company_name}>"


# ═══════════════════════════════════════════════════════════════
# 2. USERS (salesmen, managers, admins)
# ═══════════════════════════════════════════════════════════════
class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    external_user_id = db.Column(db.String(255), unique=True)  # identity-provider subject
    email = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    role = db.Column(db.String(50), nullable=False, default="junior-executive")
    phone_no = db.Column(db.String(50))
    address = db.Column(db.Text)
    region = db.Column(db.String(100))
    area = db.Column(db.String(100))
    status = db.Column(db.String(20), default="active")  # active, invited, inactive
    is_active = db.Column(db.Boolean, default=True)
    is_technical_role = db.Column(db.Boolean, default=False)
    reports_to_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        db.UniqueConstraint("company_id", "email", name="uq_user_company_email"),
    )

    company = db.relationship("Company", back_populates="users")
    reports_to = db.relationship("User", remote_side=[id])

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or self.email

    def __repr__(self):
        return f"<User {self.id}: {self.email}>"
