"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from setbuilder.database import Base, get_db
from setbuilder.main import app
from setbuilder.models import ComponentItem, ComponentPrice, SetBarcode
from setbuilder.services.notifications import Notifier
from setbuilder.services.workflow_client import WorkflowError


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def test_engine():
    """Create a fresh in-memory database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine, for code that opens its own sessions."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def test_db(test_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client_with_db(test_db):
    """Create a test client with database session override."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class RecordingNotifier(Notifier):
    """Keeps notifications in memory."""

    def __init__(self):
        self.messages = []

    def notify(self, subject, body):
        self.messages.append((subject, body))


@pytest.fixture
def notifier():
    return RecordingNotifier()


def add_component(db, variant_id, gross_min_price=None, **fields):
    """Insert a component record (and its price row when a price is given)."""
    defaults = {
        "name1": f"Artikel {variant_id}",
        "name2": f"Name2 {variant_id}",
        "name3": f"Name3 {variant_id}",
        "short_description": f"Kurz {variant_id}",
        "external_item_id": f"EXT-{variant_id}",
        "model": f"M{variant_id}",
        "variant_name": f"V{variant_id}",
        "purchase_price": Decimal("10.00"),
        "weight_g": 500,
        "width_mm": 600,
        "length_mm": 550,
        "height_mm": 820,
        "producer_name": "Bosch",
    }
    defaults.update(fields)
    db.add(ComponentItem(variant_id=variant_id, **defaults))
    if gross_min_price is not None:
        db.add(ComponentPrice(variant_id=variant_id, gross_min_price=Decimal(gross_min_price)))
    db.commit()


def add_barcodes(db, *codes):
    for code in codes:
        db.add(SetBarcode(barcode=code, used=False))
    db.commit()


class FakeWorkflowClient:
    """Records triggered flows instead of calling the workflow API."""

    def __init__(self, error=None):
        self.flows = []
        self.error = error

    def trigger(self, flow_id):
        self.flows.append(flow_id)
        if self.error:
            raise WorkflowError(self.error)
        return "SUCCESS - flow succeeded"
