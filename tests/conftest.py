"""
Shared pytest fixtures.

API tests run against the FastAPI app with ``data_service`` functions
monkeypatched, so no PostgreSQL instance is needed.
"""

import os
from datetime import timedelta

# Must be set before config is imported
os.environ["ENABLE_EMAIL"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

import data_service
import email_service
from auth import create_access_token
from calendar_links import local_today
from main import app


def _user(user_id, name, **overrides):
    user = {
        "id": user_id,
        "email": f"{name.lower()}@example.com",
        "name": name,
        "phone": None,
        "photo_url": None,
        "ranking": "3.0",
        "gender": "male",
        "venmo_username": None,
        "zelle_handle": None,
        "is_admin": False,
        "invited_by_code": "WELCOME1",
        "created_at": None,
    }
    user.update(overrides)
    return user


@pytest.fixture
def client():
    """Create a TestClient for the app."""
    return TestClient(app)


@pytest.fixture
def users(monkeypatch):
    """Known users, resolvable through data_service.get_user_by_id."""
    registry = {
        "u-carlos": _user("u-carlos", "Carlos", venmo_username="carlos-padel", zelle_handle="carlos@example.com"),
        "u-lucia": _user("u-lucia", "Lucia", gender="female", ranking="4.0"),
        "u-marco": _user("u-marco", "Marco", ranking="2.0"),
        "u-admin": _user("u-admin", "Admin", is_admin=True),
    }
    monkeypatch.setattr(data_service, "get_user_by_id", lambda user_id: registry.get(user_id))
    return registry


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user id."""
    def _headers(user_id):
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers


@pytest.fixture
def make_match(users):
    """Build a match row with bookings for the given user ids."""
    def _make(match_id="m-1", booked=("u-carlos",), guests=(), **overrides):
        match = {
            "id": match_id,
            "title": "Sunset Doubles",
            "date": local_today() + timedelta(days=3),
            "time": "18:00",
            "duration": 90,
            "max_players": 4,
            "location": "Padel Up - Century City",
            "is_private": False,
            "is_tournament": False,
            "required_level": None,
            "gender_requirement": "all",
            "required_ladies": None,
            "required_lads": None,
            "price_per_player": None,
            "total_cost": None,
            "prize_first": None,
            "prize_second": None,
            "prize_third": None,
            "created_by": "u-carlos",
            "created_at": None,
        }
        match.update(overrides)
        match["bookings"] = [
            {
                "id": f"b-{user_id}",
                "match_id": match_id,
                "user_id": user_id,
                "created_at": None,
                "user": {k: users[user_id][k] for k in ("id", "name", "email", "photo_url", "ranking", "gender")},
            }
            for user_id in booked
        ]
        match["guests"] = [
            {"id": f"g-{i}", "match_id": match_id, "name": name, "gender": gender,
             "added_by": match["created_by"], "created_at": None}
            for i, (name, gender) in enumerate(guests)
        ]
        return match
    return _make


@pytest.fixture
def sent_emails(monkeypatch):
    """Record transactional emails instead of sending them."""
    sent = []

    def recorder(kind):
        def _send(*args, **kwargs):
            sent.append((kind, args))
            return True
        return _send

    for name in (
        "send_booking_confirmation_email",
        "send_cancellation_email",
        "send_creator_booking_notification",
        "send_creator_cancellation_notification",
        "send_password_reset_email",
    ):
        monkeypatch.setattr(email_service, name, recorder(name))
    return sent
