# tests/services/conftest.py
from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from stackit_api.db.session import Base
from stackit_api.models import Question, User
from tests.factories import create_question


@pytest.fixture()
def isolated_session() -> Iterator[tuple[Session, Question, User]]:
    """A private database for code paths that roll the session back."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    asker = User(idp_id="idp|asker", email="asker@example.com", username="asker")
    voter = User(idp_id="idp|voter", email="voter@example.com", username="voter")
    session.add_all([asker, voter])
    session.commit()
    question = create_question(session, asker)
    session.commit()
    try:
        yield session, question, voter
    finally:
        session.close()
        engine.dispose()
