"""Session store tests: one live session per account, lazy expiry, fail-closed validation."""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import AuthenticationError, InternalError
from app.models import User, UserSession
from app.models.base import as_utc
from app.services import sessions
from app.services.sessions import (
    issue_session,
    purge_expired_sessions,
    revoke_session,
    session_store_available,
    validate_session,
)
from tests.support import TestingSessionLocal, make_user, reset_database


class SessionStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        reset_database()
        self.user_id = make_user("alice")
        self.db = TestingSessionLocal()

    def tearDown(self) -> None:
        self.db.close()

    def _session_count(self) -> int:
        return self.db.query(UserSession).filter(UserSession.user_id == self.user_id).count()


class TestIssue(SessionStoreTestCase):
    def test_second_issue_invalidates_first(self) -> None:
        first = issue_session(self.db, self.user_id, ttl_hours=24).token
        second = issue_session(self.db, self.user_id, ttl_hours=24).token
        self.assertNotEqual(first, second)
        self.assertEqual(self._session_count(), 1)
        with self.assertRaises(AuthenticationError) as ctx:
            validate_session(self.db, first)
        self.assertEqual(ctx.exception.message, sessions.REASON_NO_SESSION)
        self.assertEqual(validate_session(self.db, second).id, self.user_id)

    def test_expiry_is_ttl_after_issue(self) -> None:
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        row = issue_session(self.db, self.user_id, ttl_hours=24, now=now)
        self.assertEqual(as_utc(row.expires_at), now + timedelta(hours=24))


class TestIssueRetry(unittest.TestCase):
    """A unique violation from a concurrent login is retried, then surfaces as InternalError."""

    @staticmethod
    def _conflict() -> IntegrityError:
        return IntegrityError("INSERT INTO sessions", {}, Exception("UNIQUE constraint failed"))

    def test_retries_after_conflict(self) -> None:
        db = MagicMock()
        db.commit.side_effect = [self._conflict(), None]
        row = issue_session(db, "u-1", ttl_hours=1)
        self.assertEqual(row.user_id, "u-1")
        self.assertEqual(db.commit.call_count, 2)
        db.rollback.assert_called_once()

    def test_gives_up_after_attempts(self) -> None:
        db = MagicMock()
        db.commit.side_effect = self._conflict()
        with self.assertRaises(InternalError):
            issue_session(db, "u-1", ttl_hours=1)
        self.assertEqual(db.commit.call_count, sessions.ISSUE_ATTEMPTS)


class TestValidate(SessionStoreTestCase):
    def test_unknown_token(self) -> None:
        with self.assertRaises(AuthenticationError) as ctx:
            validate_session(self.db, "no-such-token")
        self.assertEqual(ctx.exception.message, "Invalid session")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_expired_session_is_deleted(self) -> None:
        issued = datetime.now(timezone.utc) - timedelta(hours=3)
        token = issue_session(self.db, self.user_id, ttl_hours=1, now=issued).token
        with self.assertRaises(AuthenticationError) as ctx:
            validate_session(self.db, token)
        self.assertEqual(ctx.exception.message, "Session expired")
        self.assertEqual(self._session_count(), 0)
        with self.assertRaises(AuthenticationError) as ctx:
            validate_session(self.db, token)
        self.assertEqual(ctx.exception.message, "Invalid session")

    def test_deactivated_account_rejected_on_next_call(self) -> None:
        token = issue_session(self.db, self.user_id, ttl_hours=24).token
        self.assertEqual(validate_session(self.db, token).id, self.user_id)
        user = self.db.get(User, self.user_id)
        user.is_active = False
        self.db.commit()
        with self.assertRaises(AuthenticationError) as ctx:
            validate_session(self.db, token)
        self.assertEqual(ctx.exception.message, "Account is disabled")

    def test_store_failure_fails_closed(self) -> None:
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
        with self.assertRaises(AuthenticationError) as ctx:
            validate_session(db, "any-token")
        self.assertEqual(ctx.exception.message, sessions.REASON_UNVERIFIABLE)
        db.rollback.assert_called_once()


class TestRevoke(SessionStoreTestCase):
    def test_revoke_is_idempotent(self) -> None:
        token = issue_session(self.db, self.user_id, ttl_hours=24).token
        self.assertTrue(revoke_session(self.db, token))
        self.assertFalse(revoke_session(self.db, token))
        with self.assertRaises(AuthenticationError):
            validate_session(self.db, token)


class TestPurgeDisabled(unittest.TestCase):
    """When SESSION_CLEANUP_ENABLED is False, purge does nothing."""

    def test_returns_zero_and_does_not_query(self) -> None:
        settings = MagicMock()
        settings.SESSION_CLEANUP_ENABLED = False
        db = MagicMock()
        self.assertEqual(purge_expired_sessions(db, settings), 0)
        db.query.assert_not_called()


class TestPurgeNothingExpired(unittest.TestCase):
    def test_returns_zero_and_commits(self) -> None:
        settings = MagicMock()
        settings.SESSION_CLEANUP_ENABLED = True
        db = MagicMock()
        db.query.return_value.filter.return_value.delete.return_value = 0
        self.assertEqual(purge_expired_sessions(db, settings), 0)
        db.commit.assert_called_once()


class TestPurgeAgainstDatabase(SessionStoreTestCase):
    def test_only_expired_sessions_removed(self) -> None:
        bob_id = make_user("bob")
        now = datetime.now(timezone.utc)
        issue_session(self.db, self.user_id, ttl_hours=1, now=now - timedelta(hours=5))
        live = issue_session(self.db, bob_id, ttl_hours=24, now=now).token
        settings = MagicMock()
        settings.SESSION_CLEANUP_ENABLED = True

        self.assertEqual(purge_expired_sessions(self.db, settings, now=now), 1)
        self.assertEqual(self._session_count(), 0)
        self.assertEqual(validate_session(self.db, live).id, bob_id)
        self.assertEqual(purge_expired_sessions(self.db, settings, now=now), 0)


class TestSessionStoreAvailable(SessionStoreTestCase):
    def test_available(self) -> None:
        self.assertTrue(session_store_available(self.db))

    def test_unreadable_store(self) -> None:
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("no such table: sessions"))
        self.assertFalse(session_store_available(db))
        db.rollback.assert_called_once()
