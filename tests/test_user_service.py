"""Tests for display name resolution and score bookkeeping on users."""
from types import SimpleNamespace
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from api.user.user_model import User
from api.user.user_service import DisplayNameResolver, apply_score_delta


def _session(users, failing_ids=()):
    """A session whose batch query fails while single-row lookups work."""
    db = MagicMock()
    db.query.side_effect = SQLAlchemyError("batch lookup failed")

    def get(model, user_id):
        if user_id in failing_ids:
            raise OperationalError("SELECT users", {}, Exception("connection reset"))
        return users.get(user_id)

    db.get.side_effect = get
    return db


class TestDisplayNameResolver:
    def test_falls_back_to_single_lookups(self):
        db = _session({
            "alice": SimpleNamespace(display_name="Alice"),
            "bob": SimpleNamespace(display_name="Bob"),
        })
        assert DisplayNameResolver(db).resolve(["alice", "bob"]) == {"alice": "Alice", "bob": "Bob"}
        db.rollback.assert_called()

    def test_one_failing_id_does_not_abort_the_others(self):
        db = _session(
            {"alice": SimpleNamespace(display_name="Alice"), "carol": SimpleNamespace(display_name="Carol")},
            failing_ids={"bob"},
        )
        names = DisplayNameResolver(db).resolve(["alice", "bob", "carol", "ghost"])
        assert names == {"alice": "Alice", "carol": "Carol"}
        # once for the batch query, once for bob
        assert db.rollback.call_count == 2

    def test_empty_names_are_left_out(self):
        db = _session({"dave": SimpleNamespace(display_name="")})
        assert DisplayNameResolver(db).resolve(["dave"]) == {}

    def test_no_ids_skips_the_database(self):
        db = MagicMock()
        assert DisplayNameResolver(db).resolve([]) == {}
        db.query.assert_not_called()

    def test_batch_lookup(self, db_session):
        db_session.add_all([User(id="alice", display_name="Alice"), User(id="bob", display_name="Bob")])
        db_session.commit()
        assert DisplayNameResolver(db_session).resolve(["bob", "alice", "bob"]) == {"alice": "Alice", "bob": "Bob"}


class TestApplyScoreDelta:
    def test_adds_to_stored_total_and_syncs_level(self, db_session):
        db_session.add(User(id="erin", display_name="Erin", total_score=90))
        db_session.commit()
        user = db_session.get(User, "erin")

        apply_score_delta(db_session, user, 20)
        db_session.commit()

        stored = db_session.get(User, "erin")
        assert stored.total_score == 110
        assert stored.level == 2
