"""Tests for database initialization and the credential store."""
import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError, OperationalError

from hero_platform.hero_platform.auth_service.db import (
    build_engine,
    build_session_factory,
    check_db_connection,
    init_db,
)
from hero_platform.hero_platform.auth_service.models import Hero, Language, User
from hero_platform.hero_platform.auth_service.repository import (
    UniqueViolation,
    UserRepository,
    is_unique_violation,
)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def repo(db_session):
    return UserRepository(db_session)


def test_init_db_creates_users_table(engine):
    inspector = inspect(engine)
    assert {"users", "heroes"} <= set(inspector.get_table_names())

    columns = {col["name"]: col for col in inspector.get_columns("users")}
    for col_name in ["id", "email", "password", "firstname", "lastname", "language", "token_version", "created_at"]:
        assert col_name in columns, f"Column {col_name} should exist in users table"

    assert columns["email"]["nullable"] is False
    assert columns["password"]["nullable"] is False
    assert columns["firstname"]["nullable"] is True


def test_init_db_creates_unique_email_index(engine):
    indexes = inspect(engine).get_indexes("users")
    email_idx = next(idx for idx in indexes if idx["column_names"] == ["email"])
    assert email_idx["unique"]


def test_heroes_foreign_key_to_users(engine):
    foreign_keys = inspect(engine).get_foreign_keys("heroes")
    user_fk = next((fk for fk in foreign_keys if fk["referred_table"] == "users"), None)
    assert user_fk is not None
    assert user_fk["constrained_columns"] == ["owner_id"]


def test_init_db_is_idempotent(engine):
    init_db(engine)
    assert "users" in inspect(engine).get_table_names()


def test_check_db_connection(engine):
    assert check_db_connection(build_session_factory(engine)) is True


def test_create_and_find(repo):
    user = repo.create(email="a@x.com", password="hash", firstname="Ada")
    assert user.id
    assert user.token_version == 0
    assert user.language == Language.EN

    assert repo.find_by_email("a@x.com").id == user.id
    assert repo.find_by_id(user.id).email == "a@x.com"
    assert repo.find_by_email("A@x.com") is None
    assert repo.find_by_id("missing") is None
    assert repo.find_by_id(None) is None


def test_create_duplicate_email_raises_unique_violation(repo, db_session):
    repo.create(email="a@x.com", password="hash")
    with pytest.raises(UniqueViolation) as exc_info:
        repo.create(email="a@x.com", password="other")
    assert exc_info.value.field == "email"
    assert isinstance(exc_info.value.__cause__, IntegrityError)
    # Session is usable after the rollback
    assert db_session.query(User).count() == 1


def test_create_non_unique_integrity_error_propagates(repo):
    with pytest.raises(IntegrityError) as exc_info:
        repo.create(email="a@x.com", password=None)
    assert not is_unique_violation(exc_info.value)


def test_delete_cascades_heroes(repo, db_session):
    user = repo.create(email="a@x.com", password="hash")
    db_session.add_all([Hero(name="Batman", owner_id=user.id), Hero(name="Robin", owner_id=user.id)])
    db_session.commit()

    assert repo.delete(user.id) is True
    assert repo.find_by_id(user.id) is None
    assert db_session.execute(text("SELECT COUNT(*) FROM heroes")).scalar() == 0
    assert repo.delete(user.id) is False


def test_failed_delete_rolls_back(repo, db_session, monkeypatch):
    user = repo.create(email="a@x.com", password="hash")

    def broken_commit():
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "commit", broken_commit)
    with pytest.raises(OperationalError):
        repo.delete(user.id)
    monkeypatch.undo()

    # Session is usable after the rollback and the user is still stored
    assert repo.find_by_id(user.id).email == "a@x.com"
    assert repo.bump_token_version(user) == 1


def test_bump_token_version(repo):
    user = repo.create(email="a@x.com", password="hash")
    assert repo.bump_token_version(user) == 1
    assert repo.bump_token_version(user) == 2
    assert repo.find_by_id(user.id).token_version == 2
