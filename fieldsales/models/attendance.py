"""
Salesman activity models: attendance, leave, live tracking and ratings.
"""

from datetime import datetime, timezone

from fieldsales.models import db


def _utcnow():
    return datetime.now(timezone.utc)


class SalesmanAttendance(db.Model):
    __tablename__ = "salesman_attendance"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    attendance_date = db.Column(db.Date, nullable=False)
    location_name = db.Column(db.String(500), nullable=False)
    role = db.Column(db.String(50), nullable=False, default="SALES")
    in_time_timestamp = db.Column(db.DateTime(timezone=True), nullable=False)
    out_time_timestamp = db.Column(db.DateTime(timezone=True))
    in_time_image_captured = db.Column(db.Boolean, nullable=False, default=False)
    out_time_image_captured = db.Column(db.Boolean, nullable=False, default=False)
    in_time_image_url = db.Column(db.String(500))
    out_time_image_url = db.Column(db.String(500))
    in_time_latitude = db.Column(db.Numeric(10, 7), nullable=False)
    in_time_longitude = db.Column(db.Numeric(10, 7), nullable=False)
    in_time_accuracy = db.Column(db.Numeric(10, 2))
    out_time_latitude = db.Column(db.Numeric(10, 7))
    out_time_longitude = db.Column(db.Numeric(10, 7))
    out_time_accuracy = db.Column(db.Numeric(10, 2))
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User")


class SalesmanLeaveApplication(db.Model):
    __tablename__ = "salesman_leave_applications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    approver_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    leave_type = db.Column(db.String(100), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(50), nullable=False, default="Pending")
    admin_remarks = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User", foreign_keys=[user_id])
    approver = db.relationship("User", foreign_keys=[approver_id])


class GeoTracking(db.Model):
    __tablename__ = "geo_tracking"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    latitude = db.Column(db.Numeric(10, 7), nullable=False)
    longitude = db.Column(db.Numeric(10, 7), nullable=False)
    recorded_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    accuracy = db.Column(db.Numeric(10, 2))
    speed = db.Column(db.Numeric(10, 2))
    heading = db.Column(db.Numeric(10, 2))
    altitude = db.Column(db.Numeric(10, 2))
    location_type = db.Column(db.String(50))
    activity_type = db.Column(db.String(50))
    app_state = db.Column(db.String(50))
    battery_level = db.Column(db.Numeric(5, 2))
    is_charging = db.Column(db.Boolean)
    network_status = db.Column(db.String(50))
    site_name = db.Column(db.String(255))
    journey_id = db.Column(db.String(100))
    total_distance_travelled = db.Column(db.Numeric(12, 3))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = db.relationship("User")


class SalesmanRating(db.Model):
    __tablename__ = "salesman_ratings"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    area = db.Column(db.String(100), nullable=False)
    region = db.Column(db.String(100), nullable=False)
    rating = db.Column(db.Integer, nullable=False)

    user = db.relationship("User")
