import os
import sys
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from flask_jwt_extended import create_access_token

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from habitat import create_app  # noqa: E402
from habitat.core.admin.models import AuditLog  # noqa: E402,F401
from habitat.core.auth.password import hash_password  # noqa: E402
from habitat.core.properties.models import Property  # noqa: E402,F401
from habitat.core.users.models import User  # noqa: E402
from habitat.extensions import db  # noqa: E402
from habitat.habitat_platform.outbox.models import OutboxMessage  # noqa: E402,F401


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


def _alembic_config() -> AlembicConfig:
    cfg = AlembicConfig(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "habitat" / "migrations"))
    cfg.set_main_option("habitat_env", "testing")
    db_url = os.environ.get("TEST_DATABASE_URL") or "sqlite:///instance/test.db"
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


@pytest.fixture(scope="session", autouse=True)
def migrated_db():
    """Apply migrations once per session to mirror the production schema."""
    cfg = _alembic_config()
    command.upgrade(cfg, "head")
    yield
    command.downgrade(cfg, "base")


@pytest.fixture()
def app(migrated_db):
    """Per-test app; every table is emptied afterwards."""
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        db.session.rollback()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.remove()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def gateway(app):
    """The in-memory push gateway the testing config installs."""
    return app.extensions["push_gateway"]


@pytest.fixture()
def make_user(app):
    counter = {"n": 0}

    def _make(
        role="user",
        allows_notifications=None,
        push_tokens=None,
        password="correct horse",
        first_name="Aminetou",
        **fields,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=fields.pop("email", f"user{counter['n']}@example.mr"),
            password_hash=hash_password(password),
            first_name=first_name,
            role=role,
            allows_notifications=allows_notifications,
            push_tokens=push_tokens,
            **fields,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def auth_header(app):
    def _header(user: User) -> dict:
        token = create_access_token(identity=str(user.id), additional_claims={"id": user.id, "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _header
