# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nacl.signing import SigningKey
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from textstore.api.v1.endpoints.auth import create_access_token
from textstore.db.session import Base
from textstore.db.session import get_db as app_get_session
from textstore.main import app as fastapi_app
from textstore.services.record_service import RecordStore

TEST_DB_URL = "sqlite://"


@dataclass
class Identity:
    """Ed25519 test identity."""

    signing_key: SigningKey

    @property
    def pubkey(self) -> bytes:
        return bytes(self.signing_key.verify_key)

    @property
    def pubkey_hex(self) -> str:
        return self.pubkey.hex()


class FakeClock:
    """Settable clock returning Unix seconds."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 1) -> int:
        self.now += seconds
        return self.now


@pytest.fixture()
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
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(db_session: Session, clock: FakeClock) -> RecordStore:
    return RecordStore(db_session, clock=clock)


@pytest.fixture()
def make_identity() -> Callable[[], Identity]:
    return lambda: Identity(SigningKey.generate())


@pytest.fixture()
def admin(make_identity: Callable[[], Identity]) -> Identity:
    return make_identity()


@pytest.fixture()
def alice(make_identity: Callable[[], Identity]) -> Identity:
    return make_identity()


@pytest.fixture()
def bob(make_identity: Callable[[], Identity]) -> Identity:
    return make_identity()


@pytest.fixture()
def initialized_store(store: RecordStore, admin: Identity) -> RecordStore:
    store.initialize(admin.pubkey)
    return store


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(
    app: FastAPI,
    session_factory: sessionmaker[Session],
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_headers() -> Callable[[Identity], dict[str, str]]:
    """Return a factory building bearer headers for an identity."""

    def _headers(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(identity.pubkey)}"}

    return _headers
