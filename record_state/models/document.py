"""
Document Model

Reference entity carrying the record state lifecycle. created_at /
updated_at are maintained by the persistence layer; archived_at /
deleted_at come from RecordStateMixin.
"""

from datetime import datetime, timezone

from record_state.models import db
from record_state.models.state import RecordStateMixin


class Document(RecordStateMixin, db.Model):
    """A titled document that can be archived or removed."""
    __tablename__ = "documents"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), unique=True, nullable=False)
    body = db.Column(db.Text, default="")
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            **self.state_dict(),
        }

    def __repr__(self):
        return f"<Document {self.id} {self.state_name}>"
