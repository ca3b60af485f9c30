import os
import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test_secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GEMINI_API_KEY", "")

from stoper import db
from stoper.main import app
from stoper.db import get_session
from stoper.services.gateway import SqlGateway
from stoper.services.inventory import InventoryService


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture()
def gateway(session):
    return SqlGateway(session)


@pytest.fixture()
def inventory(gateway):
    svc = InventoryService(gateway)
    svc.ensure_catalog()
    return svc


@pytest.fixture()
def client(engine, monkeypatch):
    # lifespan seeds through db.engine, requests go through get_session
    monkeypatch.setattr(db, "engine", engine)

    def override_get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(client):
    client.post("/auth/register", json={"username": "emanuel", "password": "ph14"})
    r = client.post("/auth/login", data={"username": "emanuel", "password": "ph14"})
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
