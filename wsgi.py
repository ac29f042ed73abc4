"""
WSGI / Flask-Migrate entry point.

Usage:
    gunicorn wsgi:app
    flask --app wsgi db upgrade
    flask --app wsgi export-report --company-id 1 -c dealers.name
"""

from fieldsales import create_app

app = create_app()
