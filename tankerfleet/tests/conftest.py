from datetime import timedelta

import pytest

from tankerfleet.config import TestConfig
from tankerfleet.extensions import db as _db
from tankerfleet.models.driver import Driver
from tankerfleet.models.owner import Owner
from tankerfleet.models.payout_slab import PayoutSlab
from tankerfleet.models.route import Route
from tankerfleet.models.trip import Trip
from tankerfleet.server import create_app
from tankerfleet.services.push_notification_service import PushNotificationService
from tankerfleet.utils.circuit_breaker import reset_circuit_breaker
from tankerfleet.utils.timezone_utils import as_naive_utc, utc_now

STANDARD_SLABS = [(0, 49, 0), (50, 99, 50000), (100, 149, 100000), (150, 9999, 150000)]


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setattr(PushNotificationService, '_available', False)
    reset_circuit_breaker('insights_api')
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


def make_owner(name="Ravi Tankers", active=True):
    owner = Owner(name=name, email=f"{name.lower().replace(' ', '.')}@example.com")
    if active:
        owner.subscription_expires_at = as_naive_utc(utc_now()) + timedelta(days=30)
    _db.session.add(owner)
    _db.session.commit()
    return owner


def make_driver(owner, name="Suresh", device_token=None):
    driver = Driver(owner_id=owner.id, name=name, device_token=device_token)
    _db.session.add(driver)
    _db.session.commit()
    return driver


def make_route(owner, source="Lake Pump", destinations=("Sector 4", "Sector 9"), rate_per_trip=500.0):
    route = Route(owner_id=owner.id, name=Route.describe(source, list(destinations)), source=source,
                  destinations=list(destinations), rate_per_trip=rate_per_trip)
    _db.session.add(route)
    _db.session.commit()
    return route


def make_slabs(owner, slabs=STANDARD_SLABS):
    rows = [PayoutSlab(owner_id=owner.id, min_trips=lo, max_trips=hi, payout_amount=amount)
            for lo, hi, amount in slabs]
    _db.session.add_all(rows)
    _db.session.commit()
    return rows


def make_trip(driver, route, date, count=1):
    trip = Trip(owner_id=driver.owner_id, driver_id=driver.id, route_id=route.id, trip_type=route.label,
                count=count, date=date, events=[])
    _db.session.add(trip)
    _db.session.commit()
    return trip


def actor_headers(role, actor_id):
    return {'X-Actor-Role': role, 'X-Actor-Id': str(actor_id)}
