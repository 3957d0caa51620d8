"""End-to-end gateway tests: login, session validation, logout, role checks on routes."""

import base64
from datetime import datetime, timedelta, timezone

from app.core.config import settings
from app.core.security import FALLBACK_MARKER
from app.models import AppRole, User, UserSession
from tests.support import (
    API,
    DEFAULT_PASSWORD,
    ApiTestCase,
    TestingSessionLocal,
    grant,
    login_body,
    make_menu,
    make_user,
    testing_engine,
)


class TestLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.home = make_menu("home", 1)
        self.packages = make_menu("packages", 2)
        self.users = make_menu("users", 3)
        grant(AppRole.USER, self.home, self.packages)
        grant(AppRole.ADMIN, self.home, self.users)
        self.user_id = make_user("dana", roles=[AppRole.USER], display_name="Dana")

    def test_login_returns_session_roles_and_menus(self) -> None:
        resp = self.client.post(f"{API}/login", json=login_body("dana"))
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertTrue(body["sessionToken"])
        self.assertIn("expiresAt", body)
        self.assertEqual(body["user"]["id"], self.user_id)
        self.assertEqual(body["user"]["displayName"], "Dana")
        self.assertEqual(body["user"]["roles"], ["user"])
        self.assertEqual([m["id"] for m in body["user"]["menus"]], [self.home, self.packages])

    def test_user_role_is_forbidden_on_admin_route(self) -> None:
        token = self.login("dana")
        resp = self.client.get(f"{API}/users", headers=self.auth(token))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"success": False, "error": "Insufficient permission"})

    def test_wrong_password(self) -> None:
        resp = self.client.post(f"{API}/login", json=login_body("dana", "not the password"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Invalid username or password.")

    def test_unknown_user_reads_like_wrong_password(self) -> None:
        resp = self.client.post(f"{API}/login", json=login_body("nobody"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Invalid username or password.")

    def test_disabled_account_cannot_log_in(self) -> None:
        make_user("idle", is_active=False)
        resp = self.client.post(f"{API}/login", json=login_body("idle"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Account is disabled")

    def test_missing_fields_are_400(self) -> None:
        resp = self.client.post(f"{API}/login", json={"username": "dana"})
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])

    def test_fallback_marker_login(self) -> None:
        encoded = base64.b64encode(DEFAULT_PASSWORD.encode("latin-1")).decode()
        resp = self.client.post(
            f"{API}/login",
            json={"username": "dana", "passwordDigest": FALLBACK_MARKER + encoded},
        )
        self.assertEqual(resp.status_code, 200)

    def test_plaintext_password_is_rejected(self) -> None:
        resp = self.client.post(
            f"{API}/login", json={"username": "dana", "passwordDigest": DEFAULT_PASSWORD}
        )
        self.assertEqual(resp.status_code, 400)


class TestSessionValidation(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = make_user("erin", roles=[AppRole.USER])

    def test_missing_header(self) -> None:
        resp = self.client.get(f"{API}/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"success": False, "error": "Unauthorized"})

    def test_unknown_token(self) -> None:
        resp = self.client.get(f"{API}/me", headers=self.auth("forged-token"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Invalid session")

    def test_me_returns_current_identity(self) -> None:
        token = self.login("erin")
        resp = self.client.get(f"{API}/me", headers=self.auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "erin")
        self.assertEqual(resp.json()["roles"], ["user"])

    def test_new_login_invalidates_previous_token(self) -> None:
        first = self.login("erin")
        second = self.login("erin")
        self.assertEqual(self.client.get(f"{API}/me", headers=self.auth(first)).status_code, 401)
        self.assertEqual(self.client.get(f"{API}/me", headers=self.auth(second)).status_code, 200)

    def test_expired_session_is_removed(self) -> None:
        token = self.login("erin")
        with TestingSessionLocal() as db:
            row = db.query(UserSession).filter(UserSession.token == token).one()
            row.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
            db.commit()
        resp = self.client.get(f"{API}/me", headers=self.auth(token))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Session expired")
        with TestingSessionLocal() as db:
            self.assertEqual(db.query(UserSession).count(), 0)

    def test_deactivation_applies_to_live_session(self) -> None:
        token = self.login("erin")
        with TestingSessionLocal() as db:
            db.get(User, self.user_id).is_active = False
            db.commit()
        resp = self.client.get(f"{API}/me", headers=self.auth(token))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Account is disabled")

    def test_logout_revokes_and_is_idempotent(self) -> None:
        token = self.login("erin")
        for _ in range(2):
            resp = self.client.post(f"{API}/logout", headers=self.auth(token))
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json(), {"success": True})
        self.assertEqual(self.client.get(f"{API}/me", headers=self.auth(token)).status_code, 401)


class TestRoleChangesTakeEffectImmediately(ApiTestCase):
    def test_revoked_admin_role_denied_on_next_request(self) -> None:
        make_user("root", roles=[AppRole.ADMIN], user_id=settings.SEED_ADMIN_ID)
        target = make_user("frank", roles=[AppRole.ADMIN])
        admin_token = self.login("root")
        frank_token = self.login("frank")
        self.assertEqual(self.client.get(f"{API}/users", headers=self.auth(frank_token)).status_code, 200)

        resp = self.client.put(
            f"{API}/users/{target}", json={"roles": ["viewer"]}, headers=self.auth(admin_token)
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["roles"], ["viewer"])
        self.assertEqual(self.client.get(f"{API}/users", headers=self.auth(frank_token)).status_code, 403)


class TestOpenRoutes(ApiTestCase):
    def test_cors_preflight_answered(self) -> None:
        resp = self.client.options(
            f"{API}/login",
            headers={
                "Origin": "http://dashboard.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")

    def test_health(self) -> None:
        resp = self.client.get(f"{API}/health/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["session_store"], "available")

    def test_health_degraded_without_sessions_table(self) -> None:
        UserSession.__table__.drop(testing_engine)
        body = self.client.get(f"{API}/health/").json()
        self.assertEqual(body["status"], "degraded")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["session_store"], "unavailable")

    def test_unknown_route_uses_error_envelope(self) -> None:
        resp = self.client.get(f"{API}/does-not-exist")
        self.assertEqual(resp.status_code, 404)
        self.assertFalse(resp.json()["success"])
