"""Shared test helpers: in-memory database, API client wiring and record factories."""

import tempfile
import unittest
from collections.abc import Generator, Iterable
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.v1.upload import get_storage
from app.core.database import enable_sqlite_foreign_keys, get_db
from app.core.security import hash_password, transport_digest
from app.main import app
from app.models import AppRole, Base, Menu, RoleMenu, User
from app.services.roles import replace_user_roles
from app.services.storage import LocalObjectStorage

API = "/api/v1"
DEFAULT_PASSWORD = "correct horse battery"

testing_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(testing_engine)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=testing_engine)


def reset_database() -> None:
    Base.metadata.drop_all(testing_engine)
    Base.metadata.create_all(testing_engine)


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_user(
    username: str,
    password: str = DEFAULT_PASSWORD,
    roles: Iterable[AppRole] = (),
    is_active: bool = True,
    user_id: str | None = None,
    display_name: str | None = None,
) -> str:
    """Insert an account with roles; returns its id."""
    with TestingSessionLocal() as db:
        user = User(
            username=username,
            password_hash=hash_password(password),
            display_name=display_name,
            is_active=is_active,
        )
        if user_id is not None:
            user.id = user_id
        db.add(user)
        db.flush()
        replace_user_roles(db, user.id, list(roles))
        db.commit()
        return user.id


def make_menu(name: str, sort_order: int, path: str | None = None) -> str:
    with TestingSessionLocal() as db:
        menu = Menu(name=name, path=path or f"/{name}", icon="icon", sort_order=sort_order)
        db.add(menu)
        db.commit()
        return menu.id


def grant(role: AppRole, *menu_ids: str) -> None:
    with TestingSessionLocal() as db:
        db.add_all([RoleMenu(role=role, menu_id=m) for m in menu_ids])
        db.commit()


def login_body(username: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
    return {"username": username, "passwordDigest": transport_digest(password)}


class ApiTestCase(unittest.TestCase):
    """Fresh database, temporary object store and a TestClient per test."""

    def setUp(self) -> None:
        reset_database()
        self._storage_dir = tempfile.TemporaryDirectory()
        self.storage = LocalObjectStorage(
            root=Path(self._storage_dir.name),
            public_base_url="http://files.test/storage",
        )
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_storage] = lambda: self.storage
        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self._storage_dir.cleanup()

    def login(self, username: str, password: str = DEFAULT_PASSWORD) -> str:
        resp = self.client.post(f"{API}/login", json=login_body(username, password))
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["sessionToken"]

    @staticmethod
    def auth(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
