"""
Document Service

Lists documents by state mode and drives their state transitions.
Raises record_state.core.exceptions types; the app factory maps them to
HTTP responses.
"""

import logging

from record_state.core.exceptions import ConflictError, NotFoundError, ValidationError
from record_state.models import db
from record_state.models.document import Document

logger = logging.getLogger(__name__)

# action name -> mixin method
_TRANSITIONS = {
    "activate": "set_active",
    "archive": "set_archived",
    "delete": "set_deleted",
    "remove": "remove",
}


def documents_query(mode=None, with_deleted=False):
    """Return a query over documents in the given state mode, ordered by id."""
    return Document.by_mode(mode, with_deleted=with_deleted).order_by(Document.id)


def list_documents(mode=None, with_deleted=False):
    """Return documents in the given state mode as dicts."""
    return [d.to_dict() for d in documents_query(mode, with_deleted).all()]


def get_document(doc_id):
    """Return a document regardless of its state."""
    doc = db.session.get(Document, doc_id)
    if not doc:
        raise NotFoundError(resource="Document", resource_id=doc_id)
    return doc


def create_document(data):
    """Create a new, active document."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    title = str(data.get("title") or "").strip()
    if not title:
        raise ValidationError("title is required", details={"title": "missing"})
    body = data.get("body", "")
    if body is None:
        body = ""
    if not isinstance(body, str):
        raise ValidationError("body must be a string", details={"body": "not a string"})
    if Document.query.filter_by(title=title).first():
        raise ConflictError(resource="Document", field="title", value=title)
    doc = Document(title=title, body=body)
    doc.save()
    logger.info("Created document id=%s", doc.id)
    return doc


def change_state(doc_id, action):
    """Apply a state transition and persist it."""
    method = _TRANSITIONS.get(action)
    if method is None:
        raise ValidationError(
            f"Unknown action: {action}",
            details={"action": f"expected one of {', '.join(sorted(_TRANSITIONS))}"},
        )
    doc = get_document(doc_id)
    getattr(doc, method)()
    return doc
