"""
WSGI entry point.

Usage:
    flask --app wsgi run
    gunicorn wsgi:app
"""

from record_state import create_app

app = create_app()
