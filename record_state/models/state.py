"""
Record State Mixin

Adds `archived_at` / `deleted_at` timestamp columns and gives a model a
three-state lifecycle derived from them:

    active    archived_at IS NULL      AND deleted_at IS NULL
    archived  archived_at IS NOT NULL  AND deleted_at IS NULL
    removed   deleted_at IS NOT NULL   (archived_at is ignored)

Nothing is intercepted globally. Callers narrow their own queries with the
`only_*` / `by_mode` classmethods.

Usage:
    class Invoice(RecordStateMixin, db.Model):
        ...

    invoice.set_archived()              # sets archived_at, commits
    invoice.set_deleted(save=False)     # caller commits later
    invoice.state_name                  # "removed"

    Invoice.only_active().all()
    Invoice.by_mode(request.args.get("mode")).all()
    db.session.scalars(Invoice.only_archived(select(Invoice))).all()
"""

import logging
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from record_state.models import db

logger = logging.getLogger(__name__)


class RecordState(str, Enum):
    """Derived lifecycle state of a record."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    REMOVED = "removed"


class StateMode(int, Enum):
    """Mode discriminator accepted by `RecordStateMixin.by_mode`."""

    ACTIVE = 0
    ARCHIVED = 1
    DELETED = 2

    @classmethod
    def coerce(cls, value):
        """Resolve an enum, int or digit string; anything else is ACTIVE.

        Floats, bools and strings like "1.0" are not modes.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            value = value.strip()
        elif not isinstance(value, int) or isinstance(value, bool):
            return cls.ACTIVE
        try:
            return cls(int(value))
        except (TypeError, ValueError, OverflowError):
            return cls.ACTIVE


def _now():
    return datetime.now(timezone.utc)


class RecordStateMixin:
    """Mixin that adds active / archived / removed state to any SQLAlchemy model."""

    archived_at = db.Column(db.DateTime, nullable=True, default=None, index=True)
    deleted_at = db.Column(db.DateTime, nullable=True, default=None, index=True)

    # ── Transitions ──────────────────────────────────────────────────────

    def set_active(self, save=True):
        """Clear both timestamps."""
        self.archived_at = None
        self.deleted_at = None
        self._commit_transition("Activated", save)

    def set_archived(self, save=True):
        """Stamp archived_at. A removed record is brought back as archived."""
        self.archived_at = _now()
        self.deleted_at = None
        self._commit_transition("Archived", save)

    def set_deleted(self, save=True):
        """Stamp deleted_at; archived_at is left as it is."""
        self.deleted_at = _now()
        self._commit_transition("Removed", save)

    def remove(self, save=True):
        """Alias for set_deleted."""
        self.set_deleted(save=save)

    def save(self):
        """Add to the current session and commit.

        On failure the session is rolled back and the original
        SQLAlchemy exception is re-raised.
        """
        db.session.add(self)
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning("Commit failed for %s: %s", type(self).__name__, exc)
            raise

    def _commit_transition(self, verb, save):
        # Logged after a successful commit, or straight away when save=False
        name = type(self).__name__
        state = self.state_name
        if save:
            self.save()
        record_id = getattr(self, "id", None)
        logger.info(
            "%s %s id=%s", verb, name, record_id,
            extra={"model": name, "record_id": record_id, "state": state},
        )

    # ── Derived state ────────────────────────────────────────────────────

    @property
    def is_active(self):
        return self.archived_at is None and self.deleted_at is None

    @property
    def is_archived(self):
        return self.archived_at is not None and self.deleted_at is None

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    @property
    def is_removed(self):
        return self.is_deleted

    @property
    def state(self):
        if self.is_active:
            return RecordState.ACTIVE
        if self.is_archived:
            return RecordState.ARCHIVED
        return RecordState.REMOVED

    @property
    def state_name(self):
        return self.state.value

    def state_dict(self):
        return {
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "state": self.state_name,
        }

    # ── Query filters ────────────────────────────────────────────────────
    # `query` may be a legacy Query or a 2.0 Select; both expose .filter().

    @classmethod
    def only_active(cls, query=None, *, with_deleted=False):
        """Return only records that are neither archived nor removed.

        with_deleted=True drops the deleted_at predicate.
        """
        return cls.only_archived(query, archived=False, with_deleted=with_deleted)

    @classmethod
    def only_archived(cls, query=None, archived=True, *, with_deleted=False):
        """Return only archived records (archived=False: only unarchived ones).

        Removed records are excluded unless with_deleted=True.
        """
        if query is None:
            query = cls.query
        if not with_deleted:
            query = query.filter(cls.deleted_at.is_(None))
        if archived:
            return query.filter(cls.archived_at.isnot(None))
        return query.filter(cls.archived_at.is_(None))

    @classmethod
    def only_deleted(cls, query=None, deleted=True):
        """Return only removed records (deleted=False: only non-removed ones)."""
        if query is None:
            query = cls.query
        if deleted:
            return query.filter(cls.deleted_at.isnot(None))
        return query.filter(cls.deleted_at.is_(None))

    @classmethod
    def by_mode(cls, mode, query=None, *, with_deleted=False):
        """Dispatch on a StateMode (0 active, 1 archived, 2 deleted)."""
        mode = StateMode.coerce(mode)
        if mode is StateMode.ARCHIVED:
            return cls.only_archived(query, with_deleted=with_deleted)
        if mode is StateMode.DELETED:
            return cls.only_deleted(query)
        return cls.only_active(query, with_deleted=with_deleted)
