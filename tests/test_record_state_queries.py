"""
Record State Mixin: persistence and query filters against the database.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from record_state.models import db
from record_state.models.document import Document
from record_state.models.state import StateMode


@pytest.fixture()
def corpus(make_document):
    """One document in each state, plus one archived-then-removed."""
    return {
        "active": make_document("active"),
        "archived": make_document("archived"),
        "removed": make_document("removed"),
        "archived_removed": make_document("archived_removed"),
    }


def _ids(rows):
    return sorted(d.id for d in rows)


# ═══════════════════════════════════════════════════════════════
# Persistence
# ═══════════════════════════════════════════════════════════════


class TestPersistence:

    def test_created_record_is_active(self, make_document):
        doc = make_document()
        db.session.expire_all()
        fresh = db.session.get(Document, doc.id)
        assert fresh.is_active
        assert fresh.created_at is not None

    def test_transition_is_committed(self, make_document):
        doc = make_document()
        doc.set_archived()
        db.session.expire_all()
        assert db.session.get(Document, doc.id).state_name == "archived"

    def test_deferred_transition_is_not_committed(self, make_document):
        doc = make_document()
        doc.set_deleted(save=False)
        db.session.rollback()
        assert db.session.get(Document, doc.id).is_active

    def test_archive_removed_record(self, make_document):
        doc = make_document("removed")
        doc.set_archived()
        db.session.expire_all()
        fresh = db.session.get(Document, doc.id)
        assert fresh.deleted_at is None
        assert fresh.archived_at is not None

    def test_delete_keeps_archived_at(self, make_document):
        doc = make_document("archived")
        archived_at = doc.archived_at
        doc.set_deleted()
        db.session.expire_all()
        fresh = db.session.get(Document, doc.id)
        assert fresh.archived_at == archived_at
        assert fresh.state_name == "removed"

    def test_activate_clears_both(self, make_document):
        doc = make_document("archived_removed")
        doc.set_active()
        db.session.expire_all()
        fresh = db.session.get(Document, doc.id)
        assert fresh.archived_at is None
        assert fresh.deleted_at is None

    def test_integrity_error_propagates(self, make_document):
        make_document(title="Same")
        dup = Document(title="Same")
        with pytest.raises(IntegrityError):
            dup.save()
        # Session was rolled back and is usable again
        assert Document.query.count() == 1

    def test_operational_error_propagates_unchanged(self, make_document):
        doc = make_document()
        err = OperationalError("UPDATE documents", {}, Exception("locked"))
        with patch.object(db.session, "commit", side_effect=err):
            with pytest.raises(OperationalError) as info:
                doc.set_archived()
        assert info.value is err

    def test_failed_commit_logs_no_transition(self, make_document, caplog):
        doc = make_document()
        err = OperationalError("UPDATE documents", {}, Exception("locked"))
        with caplog.at_level("INFO", logger="record_state.models.state"):
            with patch.object(db.session, "commit", side_effect=err):
                with pytest.raises(OperationalError):
                    doc.set_archived()
        assert "Archived Document" not in caplog.text
        assert "Commit failed for Document" in caplog.text

    def test_committed_transition_is_logged(self, make_document, caplog):
        doc = make_document()
        with caplog.at_level("INFO", logger="record_state.models.state"):
            doc.set_archived()
        assert f"Archived Document id={doc.id}" in caplog.text


# ═══════════════════════════════════════════════════════════════
# Query filters
# ═══════════════════════════════════════════════════════════════


class TestFilters:

    def test_only_active(self, corpus):
        assert _ids(Document.only_active().all()) == [corpus["active"].id]

    def test_only_archived(self, corpus):
        assert _ids(Document.only_archived().all()) == [corpus["archived"].id]

    def test_only_deleted(self, corpus):
        expected = _ids([corpus["removed"], corpus["archived_removed"]])
        assert _ids(Document.only_deleted().all()) == expected

    def test_only_deleted_inverted(self, corpus):
        expected = _ids([corpus["active"], corpus["archived"]])
        assert _ids(Document.only_deleted(deleted=False).all()) == expected

    def test_only_archived_inverted_is_active(self, corpus):
        assert _ids(Document.only_archived(archived=False).all()) == [corpus["active"].id]

    def test_with_deleted_bypass_on_archived(self, corpus):
        expected = _ids([corpus["archived"], corpus["archived_removed"]])
        assert _ids(Document.only_archived(with_deleted=True).all()) == expected

    def test_with_deleted_bypass_on_active(self, corpus):
        expected = _ids([corpus["active"], corpus["removed"]])
        assert _ids(Document.only_active(with_deleted=True).all()) == expected

    def test_filters_compose_with_existing_query(self, corpus):
        base = Document.query.filter(Document.title.like("Doc%"))
        assert _ids(Document.only_archived(base).all()) == [corpus["archived"].id]

    def test_filters_accept_select(self, corpus):
        stmt = Document.only_archived(select(Document))
        assert _ids(db.session.scalars(stmt).all()) == [corpus["archived"].id]

    def test_emits_null_predicates(self):
        sql = str(Document.only_archived(select(Document)))
        assert "documents.deleted_at IS NULL" in sql
        assert "documents.archived_at IS NOT NULL" in sql


class TestByMode:

    def test_mode_1_selects_archived_not_deleted(self, corpus):
        rows = Document.by_mode(1).all()
        assert _ids(rows) == [corpus["archived"].id]
        assert all(d.archived_at is not None and d.deleted_at is None for d in rows)

    @pytest.mark.parametrize("mode,key", [
        (StateMode.ACTIVE, "active"),
        ("0", "active"),
        ("1", "archived"),
    ])
    def test_single_state_modes(self, corpus, mode, key):
        assert _ids(Document.by_mode(mode).all()) == [corpus[key].id]

    def test_mode_2_selects_every_deleted(self, corpus):
        expected = _ids([corpus["removed"], corpus["archived_removed"]])
        assert _ids(Document.by_mode("2").all()) == expected

    def test_unknown_mode_is_active(self, corpus):
        assert _ids(Document.by_mode("bogus").all()) == [corpus["active"].id]

    @pytest.mark.parametrize("mode", [float("inf"), 1.9, "1.0"])
    def test_non_integer_mode_is_active(self, corpus, mode):
        assert _ids(Document.by_mode(mode).all()) == [corpus["active"].id]

    def test_mode_2_ignores_with_deleted(self, corpus):
        expected = _ids([corpus["removed"], corpus["archived_removed"]])
        assert _ids(Document.by_mode(2, with_deleted=True).all()) == expected

    def test_modes_partition_all_rows(self, corpus):
        seen = []
        for mode in StateMode:
            seen.extend(_ids(Document.by_mode(mode).all()))
        assert sorted(seen) == _ids(corpus.values())
