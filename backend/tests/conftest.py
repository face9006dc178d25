import os

# Point the app at SQLite before it is imported so no MySQL driver connection is attempted
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PIN_HASH_ROUNDS", "1000")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from questionbank import models
from questionbank.database import get_session
from questionbank.main import app

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def _override_session():
    with Session(test_engine) as session:
        yield session


app.dependency_overrides[get_session] = _override_session


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test a fresh in-memory schema."""
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)
    yield


@pytest.fixture
def session():
    with Session(test_engine) as s:
        yield s


@pytest.fixture
def catalog(session):
    """Seed subjects and tags; returns ids keyed by name."""
    subjects = [
        models.Subject(name="Algorithms", status="Active"),
        models.Subject(name="Advanced algorithms", status="Active"),
        models.Subject(name="Databases", status="Active"),
        models.Subject(name="Legacy algorithms", status="Inactive"),
    ]
    tags = [models.Tag(name=n) for n in ("arrays", "sorting", "graphs")]
    session.add_all(subjects + tags)
    session.commit()
    ids = {s.name: s.subject_id for s in subjects}
    ids.update({t.name: t.tag_id for t in tags})
    return ids
