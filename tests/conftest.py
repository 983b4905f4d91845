# -*- coding: utf-8 -*-
"""
測試共用 fixtures - 每個測試使用獨立的 in-memory SQLite
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app as fastapi_app
from app.models import User, UserRole
from app.services import patients as patient_service
from app.services.auth import create_access_token

# 固定的「現在」，讓月份判斷可重現
NOW = datetime(2026, 3, 15, 10, 30)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def staff(db):
    user = User(username="staff1", email="staff1@clinic.test", role=UserRole.STAFF.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    user = User(username="admin1", email="admin1@clinic.test", role=UserRole.ADMIN.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_patient(db, staff):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id_card": f"p{counter['n']:04d}",
            "name": f"Patient {counter['n']}",
            "charges": 500,
        }
        data.update(overrides)
        return patient_service.create_patient(db, data, staff)

    return _make


def _client_for(session_factory, user):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    client = TestClient(fastapi_app)
    if user is not None:
        client.headers["Authorization"] = f"Bearer {create_access_token(user.id)}"
    return client


@pytest.fixture
def client(session_factory, staff):
    yield _client_for(session_factory, staff)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def admin_client(session_factory, admin):
    yield _client_for(session_factory, admin)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(session_factory):
    yield _client_for(session_factory, None)
    fastapi_app.dependency_overrides.clear()
