import os
import pytest
from cryptography.fernet import Fernet

# Ensure critical env vars are set before backend imports
os.environ.setdefault("FIELD_ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("ENVIRONMENT", "test")


@pytest.fixture
def db_session(tmp_path, monkeypatch):
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")

    from backend.config import get_settings
    from backend.database import reset_engine, get_engine, get_sessionmaker
    from backend.models.base import Base

    get_settings.cache_clear()
    reset_engine()
    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    SessionLocal = get_sessionmaker()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        reset_engine()


@pytest.fixture
def client(db_session):
    from fastapi.testclient import TestClient
    from backend.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_record():
    from backend.services.validators import VisitRecord

    def _make(identifier="123456789012", name="Asha", department="ENT", **extra):
        return VisitRecord(identifier=identifier, name=name, department=department, **extra)

    return _make
