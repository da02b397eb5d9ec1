"""
HTTP-level tests for match listing, creation, editing and roster management.
"""

from datetime import timedelta

import pytest

import data_service
from calendar_links import local_today
from notifications import get_match_feed

ACTIVE_LOCATION = {"id": "l-1", "name": "Padel Up - Century City", "is_active": True}


@pytest.fixture
def locations(monkeypatch):
    known = {
        ACTIVE_LOCATION["name"]: ACTIVE_LOCATION,
        "Closed Club": {"id": "l-9", "name": "Closed Club", "is_active": False},
    }
    monkeypatch.setattr(data_service, "get_location_by_name", lambda name: known.get(name))
    return known


@pytest.fixture
def stored_match(monkeypatch, make_match):
    """Serve one match through data_service.get_match."""
    holder = {"match": make_match()}
    monkeypatch.setattr(data_service, "get_match",
                        lambda match_id: holder["match"] if match_id == holder["match"]["id"] else None)
    return holder


def _new_match(**overrides):
    data = {
        "title": "Sunset Doubles",
        "date": (local_today() + timedelta(days=3)).isoformat(),
        "time": "18:00",
        "duration": 90,
        "max_players": 4,
        "location": ACTIVE_LOCATION["name"],
        "price_per_player": "15.00",
    }
    data.update(overrides)
    return data


# ============================================================================
# GET /api/matches
# ============================================================================


def test_list_matches_anonymous(client, monkeypatch, make_match):
    calls = []

    def fake_list(from_date, **kwargs):
        calls.append((from_date, kwargs))
        return [make_match()]

    monkeypatch.setattr(data_service, "list_matches", fake_list)

    response = client.get("/api/matches")

    assert response.status_code == 200
    data = response.json()
    assert data[0]["player_count"] == 1
    assert data[0]["available_slots"] == 3
    assert data[0]["end_time"] == "19:30"
    assert data[0]["bookings"][0]["user"]["name"] == "Carlos"
    from_date, kwargs = calls[0]
    assert from_date == local_today()
    assert kwargs["viewer_id"] is None
    assert kwargs["viewer_is_admin"] is False


def test_list_matches_filters(client, monkeypatch, users, auth_headers):
    calls = []
    monkeypatch.setattr(data_service, "list_matches", lambda from_date, **kwargs: calls.append(kwargs) or [])

    on_date = (local_today() + timedelta(days=1)).isoformat()
    response = client.get(
        f"/api/matches?date={on_date}&location=Padel Up - Culver City&mine=true",
        headers=auth_headers("u-admin"),
    )

    assert response.status_code == 200
    assert calls[0]["on_date"].isoformat() == on_date
    assert calls[0]["location"] == "Padel Up - Culver City"
    assert calls[0]["mine"] is True
    assert calls[0]["viewer_id"] == "u-admin"
    assert calls[0]["viewer_is_admin"] is True


# ============================================================================
# GET /api/matches/{id}
# ============================================================================


def test_get_match(client, stored_match):
    response = client.get("/api/matches/m-1")
    assert response.status_code == 200
    assert response.json()["title"] == "Sunset Doubles"


def test_get_match_not_found(client, stored_match):
    response = client.get("/api/matches/m-404")
    assert response.status_code == 404
    assert response.json()["message"] == "Match not found"


def test_private_match_is_readable_by_link(client, stored_match, make_match):
    stored_match["match"] = make_match(is_private=True)
    assert client.get("/api/matches/m-1").status_code == 200


# ============================================================================
# POST /api/matches
# ============================================================================


def test_create_match(client, users, auth_headers, locations, monkeypatch, make_match):
    created = []

    def fake_create(fields, created_by):
        created.append((fields, created_by))
        return make_match(price_per_player=fields["price_per_player"], total_cost=fields["total_cost"])

    monkeypatch.setattr(data_service, "create_match", fake_create)
    announced = []

    async def fake_announce(match):
        announced.append(match)
        return 0

    monkeypatch.setattr(get_match_feed(), "announce_match", fake_announce)

    response = client.post("/api/matches", json=_new_match(), headers=auth_headers("u-carlos"))

    assert response.status_code == 201
    fields, created_by = created[0]
    assert created_by == "u-carlos"
    assert str(fields["total_cost"]) == "60.00"
    assert fields["prize_first"] is None
    assert response.json()["player_count"] == 1
    assert announced[0]["id"] == "m-1"


def test_create_private_match_is_not_announced(client, users, auth_headers, locations, monkeypatch, make_match):
    monkeypatch.setattr(data_service, "create_match", lambda fields, created_by: make_match(is_private=True))

    async def fail(match):
        pytest.fail("private matches must not be broadcast")

    monkeypatch.setattr(get_match_feed(), "announce_match", fail)

    response = client.post("/api/matches", json=_new_match(is_private=True), headers=auth_headers("u-carlos"))
    assert response.status_code == 201


def test_create_match_requires_login(client, locations):
    assert client.post("/api/matches", json=_new_match()).status_code in (401, 403)


def test_create_match_unknown_location(client, users, auth_headers, locations):
    response = client.post("/api/matches", json=_new_match(location="Nowhere"), headers=auth_headers("u-carlos"))
    assert response.status_code == 400


def test_create_match_inactive_location(client, users, auth_headers, locations):
    response = client.post("/api/matches", json=_new_match(location="Closed Club"), headers=auth_headers("u-carlos"))
    assert response.status_code == 400


def test_create_match_in_past(client, users, auth_headers, locations):
    past = (local_today() - timedelta(days=1)).isoformat()
    response = client.post("/api/matches", json=_new_match(date=past), headers=auth_headers("u-carlos"))
    assert response.status_code == 422


def test_create_tournament_validation(client, users, auth_headers, locations):
    tournament = _new_match(is_tournament=True, max_players=12, required_ladies=8, required_lads=8,
                            prize_first="200")
    response = client.post("/api/matches", json=tournament, headers=auth_headers("u-carlos"))
    assert response.status_code == 422


# ============================================================================
# PUT /api/matches/{id}
# ============================================================================


def test_update_match_by_creator(client, users, auth_headers, stored_match, monkeypatch, make_match):
    updates = []

    def fake_update(match_id, fields):
        updates.append(fields)
        return make_match(**{k: v for k, v in fields.items()})

    monkeypatch.setattr(data_service, "update_match", fake_update)

    response = client.put("/api/matches/m-1", json={"title": "Late Doubles", "time": "20:00"},
                          headers=auth_headers("u-carlos"))

    assert response.status_code == 200
    assert response.json()["title"] == "Late Doubles"
    assert updates[0]["time"] == "20:00"
    assert updates[0]["duration"] == 90
    assert updates[0]["location"] == "Padel Up - Century City"


def test_update_match_recomputes_cost(client, users, auth_headers, stored_match, monkeypatch, make_match):
    updates = []
    monkeypatch.setattr(data_service, "update_match",
                        lambda match_id, fields: updates.append(fields) or make_match(**fields))

    response = client.put("/api/matches/m-1", json={"price_per_player": "20", "max_players": 6},
                          headers=auth_headers("u-admin"))

    assert response.status_code == 200
    assert str(updates[0]["total_cost"]) == "120"


def test_update_match_forbidden_for_others(client, users, auth_headers, stored_match):
    response = client.put("/api/matches/m-1", json={"title": "Mine now"}, headers=auth_headers("u-marco"))
    assert response.status_code == 403


def test_update_match_invalid_merge(client, users, auth_headers, stored_match):
    response = client.put("/api/matches/m-1", json={"duration": 45}, headers=auth_headers("u-carlos"))
    assert response.status_code == 422


def test_update_match_cannot_shrink_below_roster(client, users, auth_headers, stored_match, make_match):
    stored_match["match"] = make_match(
        max_players=6, booked=("u-carlos", "u-lucia", "u-marco", "u-admin"), guests=[("Pat", "male")],
    )
    response = client.put("/api/matches/m-1", json={"max_players": 4}, headers=auth_headers("u-carlos"))
    assert response.status_code == 400


def test_update_match_new_location_must_be_active(client, users, auth_headers, stored_match, locations):
    response = client.put("/api/matches/m-1", json={"location": "Closed Club"}, headers=auth_headers("u-carlos"))
    assert response.status_code == 400


# ============================================================================
# DELETE /api/matches/{id}
# ============================================================================


def test_delete_match_by_admin(client, users, auth_headers, stored_match, monkeypatch):
    deleted = []
    monkeypatch.setattr(data_service, "delete_match", lambda match_id: deleted.append(match_id) or True)
    response = client.delete("/api/matches/m-1", headers=auth_headers("u-admin"))
    assert response.status_code == 200
    assert deleted == ["m-1"]


def test_delete_match_forbidden(client, users, auth_headers, stored_match, monkeypatch):
    monkeypatch.setattr(data_service, "delete_match", lambda match_id: pytest.fail("should not delete"))
    assert client.delete("/api/matches/m-1", headers=auth_headers("u-lucia")).status_code == 403


# ============================================================================
# PUT /api/matches/{id}/players
# ============================================================================


def test_set_roster_diffs_bookings(client, users, auth_headers, stored_match, monkeypatch, make_match):
    stored_match["match"] = make_match(booked=("u-carlos", "u-marco"))
    calls = []
    monkeypatch.setattr(data_service, "set_match_players",
                        lambda match_id, to_add, to_remove: calls.append((to_add, to_remove)))

    response = client.put("/api/matches/m-1/players",
                          json={"user_ids": ["u-carlos", "u-lucia", "u-lucia"]},
                          headers=auth_headers("u-carlos"))

    assert response.status_code == 200
    assert calls == [(["u-lucia"], ["u-marco"])]


def test_set_roster_respects_capacity_with_guests(client, users, auth_headers, stored_match, make_match):
    stored_match["match"] = make_match(guests=[("Pat", "male"), ("Sam", "female")])
    response = client.put("/api/matches/m-1/players",
                          json={"user_ids": ["u-carlos", "u-lucia", "u-marco"]},
                          headers=auth_headers("u-carlos"))
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot have more than 4 players"


def test_set_roster_forbidden(client, users, auth_headers, stored_match):
    response = client.put("/api/matches/m-1/players", json={"user_ids": []}, headers=auth_headers("u-marco"))
    assert response.status_code == 403


# ============================================================================
# Calendar and share links
# ============================================================================


def test_calendar_file(client, stored_match):
    response = client.get("/api/matches/m-1/calendar.ics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    date = stored_match["match"]["date"].isoformat()
    assert f'filename="padel-match-{date}.ics"' in response.headers["content-disposition"]
    assert "BEGIN:VEVENT" in response.text
    assert "UID:m-1@apexpadel" in response.text


def test_google_calendar_link(client, stored_match):
    response = client.get("/api/matches/m-1/calendar/google")
    assert response.status_code == 200
    assert response.json()["url"].startswith("https://calendar.google.com/calendar/render?")


def test_share_links(client, stored_match):
    response = client.get("/api/matches/m-1/share")
    assert response.status_code == 200
    data = response.json()
    assert data["url"].endswith("/matches/m-1")
    assert "3%20slots%20available" in data["whatsapp_url"]
    assert data["email_url"].startswith("mailto:")
