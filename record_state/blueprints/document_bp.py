"""
Document Blueprint

JSON API for listing documents by state and moving them between the
active, archived and removed states.

    GET  /api/v1/documents?mode=0|1|2&with_deleted=1&limit=&offset=
    POST /api/v1/documents
    GET  /api/v1/documents/<id>
    POST /api/v1/documents/<id>/<activate|archive|delete|remove>
"""

from flask import Blueprint, jsonify, request

from record_state.blueprints import paginate_query
from record_state.models.state import StateMode
from record_state.services import document_service as svc

document_bp = Blueprint("document", __name__, url_prefix="/api/v1/documents")

_TRUTHY = ("1", "true", "yes", "on")


@document_bp.route("", methods=["GET"])
def list_documents():
    """List documents in the requested state mode (default: active)."""
    mode = StateMode.coerce(request.args.get("mode"))
    with_deleted = request.args.get("with_deleted", "").lower() in _TRUTHY
    items, total = paginate_query(svc.documents_query(mode, with_deleted))
    return jsonify({
        "mode": int(mode),
        "total": total,
        "items": [d.to_dict() for d in items],
    }), 200


@document_bp.route("", methods=["POST"])
def create_document():
    """Create a new document."""
    data = request.get_json(silent=True) or {}
    doc = svc.create_document(data)
    return jsonify(doc.to_dict()), 201


@document_bp.route("/<int:doc_id>", methods=["GET"])
def get_document(doc_id):
    """Get a single document in any state."""
    return jsonify(svc.get_document(doc_id).to_dict()), 200


@document_bp.route("/<int:doc_id>/<action>", methods=["POST"])
def change_state(doc_id, action):
    """Activate, archive or remove a document."""
    doc = svc.change_state(doc_id, action)
    return jsonify(doc.to_dict()), 200
