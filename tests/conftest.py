"""Pytest fixtures for testing"""

import itertools
import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from charity_ledger.api.main import create_app
from charity_ledger.api.routers import get_current_user
from charity_ledger.api.schemas import CognitoUser
from charity_ledger.core.dependencies import get_charity_operations
from charity_ledger.data_access.charity_repository import CharityRepository
from charity_ledger.data_access.donation_repository import DonationRepository
from charity_ledger.data_access.store import InMemoryRecordStore
from charity_ledger.models.charity import CharityPayload
from charity_ledger.services.donation_service import DonationService
from charity_ledger.services.operations import CharityOperations


START = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Advances one second per call so every timestamp is distinct"""

    def __init__(self, start: datetime = START):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter):04d}"


@pytest.fixture
def charity_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(name="charities")


@pytest.fixture
def name_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(name="charity-names")


@pytest.fixture
def donation_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(name="donations")


@pytest.fixture
def charities(charity_store, name_store, clock, id_factory) -> CharityRepository:
    return CharityRepository(store=charity_store, names=name_store, clock=clock, id_factory=id_factory)


@pytest.fixture
def donations(donation_store, clock, id_factory) -> DonationRepository:
    return DonationRepository(store=donation_store, clock=clock, id_factory=id_factory)


@pytest.fixture
def service(charities, donations) -> DonationService:
    return DonationService(charities=charities, donations=donations)


@pytest.fixture
def operations(charities, service) -> CharityOperations:
    return CharityOperations(charities=charities, donation_service=service)


@pytest.fixture
def red_cross() -> CharityPayload:
    return CharityPayload(name="Red Cross", member="Alice", location="NY", logo_image="img1")


@pytest.fixture
def donor_user() -> CognitoUser:
    return CognitoUser(sub="donor1", email="donor1@redcross.org", email_verified=True, name="Donor One")


@pytest.fixture
def client(operations, donor_user) -> TestClient:
    """FastAPI test client wired to the in-memory operations"""
    app = create_app()
    app.dependency_overrides[get_charity_operations] = lambda: operations
    app.dependency_overrides[get_current_user] = lambda: donor_user
    return TestClient(app)
