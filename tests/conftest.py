# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("IDENTITY_SECRET_KEY", "test-identity-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from stackit_api.api.v1.dependencies import get_notification_dispatcher  # noqa: E402
from stackit_api.core.permissions import Role  # noqa: E402
from stackit_api.db.session import Base  # noqa: E402
from stackit_api.db.session import get_db as app_get_session  # noqa: E402
from stackit_api.main import app as fastapi_app  # noqa: E402
from stackit_api.models import Answer, Question, User  # noqa: E402
from stackit_api.services.notifications import NotificationDispatcher  # noqa: E402
from tests.factories import bearer, create_answer, create_question, make_token  # noqa: E402


TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def session_factory(db_session: Session) -> Callable[[], Any]:
    """Session factory handing out the test session without closing it."""

    @contextmanager
    def _factory() -> Iterator[Session]:
        yield db_session

    return _factory


@pytest.fixture(autouse=True)
def override_dispatcher(app: FastAPI, session_factory: Callable[[], Any]) -> Iterator[None]:
    """Write notifications through the per-test session."""
    app.dependency_overrides[get_notification_dispatcher] = lambda: NotificationDispatcher(
        session_factory=session_factory
    )
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_notification_dispatcher, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _create_user(
    db: Session,
    *,
    idp_id: str,
    email: str,
    first_name: str,
    last_name: str,
    username: str,
    role: Role = Role.USER,
) -> User:
    user = User(
        idp_id=idp_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        username=username,
        role=role,
    )
    db.add(user)
    db.flush()
    db.refresh(user)
    return user


@pytest.fixture()
def author(db_session: Session) -> User:
    """User who asks the questions in most tests."""
    return _create_user(
        db_session,
        idp_id="idp|ada",
        email="ada@example.com",
        first_name="Ada",
        last_name="Lovelace",
        username="ada",
    )


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """User who answers and votes."""
    return _create_user(
        db_session,
        idp_id="idp|bob",
        email="bob@example.com",
        first_name="Bob",
        last_name="Builder",
        username="bob",
    )


@pytest.fixture()
def third_user(db_session: Session) -> User:
    return _create_user(
        db_session,
        idp_id="idp|carol",
        email="carol@example.com",
        first_name="Carol",
        last_name="Coder",
        username="carol",
    )


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return _create_user(
        db_session,
        idp_id="idp|root",
        email="root@example.com",
        first_name="Root",
        last_name="Admin",
        username="root",
        role=Role.ADMIN,
    )


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper producing authorization headers for a stored user."""

    def _headers(user: User) -> dict[str, str]:
        return bearer(make_token(user.idp_id, email=user.email))

    return _headers


@pytest.fixture()
def author_headers(author: User, headers_for: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return headers_for(author)


@pytest.fixture()
def other_headers(other_user: User, headers_for: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return headers_for(other_user)


@pytest.fixture()
def third_headers(third_user: User, headers_for: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return headers_for(third_user)


@pytest.fixture()
def admin_headers(admin_user: User, headers_for: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return headers_for(admin_user)


@pytest.fixture()
def question(db_session: Session, author: User) -> Question:
    """A question asked by ``author``."""
    return create_question(db_session, author)


@pytest.fixture()
def answer(db_session: Session, question: Question, other_user: User) -> Answer:
    """An answer by ``other_user`` to ``question``."""
    return create_answer(db_session, question, other_user)
