"""
SQLAlchemy extension instance shared by all models.

Usage:
    from record_state.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
