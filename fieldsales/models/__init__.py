"""
Field-Sales Reporting: SQLAlchemy models.

All models share the single ``db`` instance created here; the application
factory binds it with ``db.init_app(app)``.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
