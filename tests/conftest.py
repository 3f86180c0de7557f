"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from ledger_gateway.api.main import create_app
from ledger_gateway.infrastructure.database.models import Base
from ledger_gateway.infrastructure.database.session import build_engine, get_db
from ledger_gateway.domain.models import EntryCreate
from ledger_gateway.domain.rates import HYUNDAI_CARD
from ledger_gateway.services.installment_manager import InstallmentRecordManager


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def manager(db: Session) -> InstallmentRecordManager:
    """Record manager using the max-APR estimate and requiring an issuer"""
    return InstallmentRecordManager(db, strategy="max", require_issuer=True)


@pytest.fixture
def laptop_purchase() -> EntryCreate:
    """300,000 card purchase over 6 months (15% bracket), bought 2024-01-15"""
    return EntryCreate(
        workspace_id="ws_home",
        entry_date=date(2024, 1, 15),
        type="expense",
        principal=300000,
        category_id=7,
        description="Laptop",
        is_installment=True,
        months=6,
        issuer=HYUNDAI_CARD,
    )
