"""Shared fixtures: a fresh, seeded ParkingSystem per test and a Flask client."""

from datetime import datetime, timezone

import pytest

from app import create_app
from config import Settings
from parking_system import ParkingSystem

FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)
TODAY = "2024-03-15"


@pytest.fixture
def parking():
    s = ParkingSystem(clock=lambda: FIXED_NOW)
    s.initialize()
    yield s
    s.shutdown()


@pytest.fixture
def client(parking):
    app = create_app(parking, settings=Settings())
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def booking():
    """A valid reservation payload for spot A-001."""
    return {
        "zone": "A",
        "spotId": "A-001",
        "date": TODAY,
        "startTime": "09:00",
        "endTime": "11:00",
        "userId": "1",
        "vehicle": "AP09AB1234",
    }
