"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from amee_layer.carbon_store import log_delete_result
from amee_layer.database import Base
from amee_layer.models import Project

from .carbon_models import STORES, FakeConnection


@pytest.fixture
def amee():
    """A fake AMEE connection wired into every test store."""
    fake = FakeConnection()
    for store in STORES.values():
        store.connection = fake
    yield fake
    for store in STORES.values():
        store.connection = None


@pytest.fixture
def delete_results():
    results = []
    for store in STORES.values():
        store.delete_sink = results.append
    yield results
    for store in STORES.values():
        store.delete_sink = log_delete_result


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory, amee):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def project(db):
    p = Project(name="Test Project", profile_uid="PROFILE1")
    db.add(p)
    db.commit()
    return p
