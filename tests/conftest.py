import os
import tempfile
from datetime import timedelta

# Set environment variables BEFORE any imports that might use settings
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_qadesk.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["ENVIRONMENT"] = "test"
os.environ["FIRST_ADMIN_USERNAME"] = "admin"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "AdminTest123!"
os.environ["DEFAULT_GROUP_NAME"] = "Administrators"
os.environ["STORAGE_DIR"] = os.path.join(_test_db_dir, "storage")
os.environ["LOG_DIR"] = os.path.join(_test_db_dir, "logs")
os.environ["SMTP_HOST"] = ""
os.environ["AZURE_OPENAI_ENDPOINT"] = ""
os.environ["AZURE_OPENAI_API_KEY"] = ""
os.environ["FRONTEND_URL"] = "http://localhost:3000"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from qadesk.core.security import generate_session_token, get_password_hash, utcnow
from qadesk.db.models.group import Group as GroupModel
from qadesk.db.models.user import User as UserModel
from qadesk.main import app
from qadesk.services.storage import LocalBlobStorage


@pytest.fixture(scope="function")
def db_session(request):
    """
    Create a fresh database for each test and run migrations.

    Tests marked with @pytest.mark.foreign_keys run with SQLite foreign key
    enforcement, so deletes behave as they do on PostgreSQL.
    """
    enforce_foreign_keys = request.node.get_closest_marker("foreign_keys") is not None
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    # Enable WAL mode to reduce locking issues
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        if enforce_foreign_keys:
            cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    # Run Alembic migrations to set up the database schema and seed data
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        test_engine.dispose()

        for suffix in ["", "-wal", "-shm"]:
            path = f"{test_db_path}{suffix}"
            if os.path.exists(path):
                os.remove(path)
        if os.path.exists(temp_db_dir):
            os.rmdir(temp_db_dir)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


@pytest.fixture(scope="function")
def storage(tmp_path) -> LocalBlobStorage:
    return LocalBlobStorage(tmp_path / "blobs")


@pytest.fixture(scope="function")
def client(db_session, storage):
    """Create a test client with database and blob storage overrides."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from qadesk.api.deps import get_db, get_storage

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    yield TestClient(app)

    app.dependency_overrides.clear()


def _create_session(db: Session, user_id: int) -> str:
    from qadesk.repositories.session import create_session

    token = generate_session_token()
    create_session(db, user_id, token, utcnow() + timedelta(hours=6))
    return token


def _create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    group_id: int,
    is_admin: bool = False,
) -> UserModel:
    user = UserModel(
        username=username,
        email=email,
        password_hash=get_password_hash(password),
        group_id=group_id,
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def admin_user(db: Session) -> dict:
    """The first administrator, created by the users migration."""
    from qadesk.core.config import settings
    from qadesk.repositories.user import get_user_by_username

    user = get_user_by_username(db, settings.first_admin_username)
    if not user:
        raise RuntimeError("Admin user not found. Check migration 002.")

    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "password": settings.first_admin_password,
        "group_id": user.group_id,
    }


@pytest.fixture(scope="function")
def admin_token(db: Session, admin_user: dict) -> str:
    return _create_session(db, admin_user["id"])


@pytest.fixture(scope="function")
def team_group(db: Session) -> GroupModel:
    group = GroupModel(name="Team Alpha", description="First customer team")
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


@pytest.fixture(scope="function")
def other_group(db: Session) -> GroupModel:
    group = GroupModel(name="Team Beta", description="Second customer team")
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


@pytest.fixture(scope="function")
def member_user(db: Session, team_group: GroupModel) -> dict:
    """A regular user of Team Alpha."""
    password = "MemberPass123!"
    user = _create_user(db, "alice", "alice@example.com", password, team_group.id)
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "password": password,
        "group_id": user.group_id,
    }


@pytest.fixture(scope="function")
def member_token(db: Session, member_user: dict) -> str:
    return _create_session(db, member_user["id"])


@pytest.fixture(scope="function")
def teammate_user(db: Session, team_group: GroupModel) -> dict:
    """A second regular user of Team Alpha."""
    password = "TeammatePass123!"
    user = _create_user(db, "carol", "carol@example.com", password, team_group.id)
    return {"id": user.id, "username": user.username, "email": user.email, "password": password}


@pytest.fixture(scope="function")
def teammate_token(db: Session, teammate_user: dict) -> str:
    return _create_session(db, teammate_user["id"])


@pytest.fixture(scope="function")
def outsider_user(db: Session, other_group: GroupModel) -> dict:
    """A regular user of Team Beta."""
    password = "OutsiderPass123!"
    user = _create_user(db, "bob", "bob@example.com", password, other_group.id)
    return {"id": user.id, "username": user.username, "email": user.email, "password": password}


@pytest.fixture(scope="function")
def outsider_token(db: Session, outsider_user: dict) -> str:
    return _create_session(db, outsider_user["id"])


@pytest.fixture(scope="function")
def sent_emails(monkeypatch) -> list[dict]:
    """Capture outgoing email instead of talking to an SMTP server."""
    sent = []

    async def fake_send_email(to: str, subject: str, html: str, text: str) -> None:
        sent.append({"to": to, "subject": subject, "html": html, "text": text})

    monkeypatch.setattr("qadesk.services.email.send_email", fake_send_email)
    return sent
