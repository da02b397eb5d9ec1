"""
HTTP-level tests for bookings, guests and payments.
"""

import pytest
from psycopg2.errors import UniqueViolation

import data_service
from data_service import BookingRejected


@pytest.fixture
def stored_match(monkeypatch, make_match):
    holder = {"match": make_match()}
    monkeypatch.setattr(data_service, "get_match",
                        lambda match_id: holder["match"] if match_id == holder["match"]["id"] else None)
    return holder


def _roster(match):
    """Roster rows as the row lock query returns them."""
    return (
        [{"user_id": b["user_id"], "gender": b["user"]["gender"]} for b in match["bookings"]]
        + [{"user_id": None, "gender": g["gender"]} for g in match["guests"]]
    )


@pytest.fixture
def locked_booking(monkeypatch, stored_match):
    """Run the route's eligibility check against the stored match, like the row lock would."""
    created = []

    def fake_create_booking(match_id, user_id, check):
        match = stored_match["match"]
        if match_id != match["id"]:
            return None
        reason = check(match, _roster(match))
        if reason:
            raise BookingRejected(reason)
        created.append(user_id)
        return {"id": f"b-{user_id}", "match_id": match_id, "user_id": user_id, "created_at": None}

    def fake_create_guest(match_id, name, gender, added_by, check):
        match = stored_match["match"]
        reason = check(match, _roster(match))
        if reason:
            raise BookingRejected(reason)
        created.append(name)
        return {"id": "g-new", "match_id": match_id, "name": name, "gender": gender, "added_by": added_by}

    monkeypatch.setattr(data_service, "create_booking", fake_create_booking)
    monkeypatch.setattr(data_service, "create_guest", fake_create_guest)
    return created


# ============================================================================
# POST /api/matches/{id}/bookings
# ============================================================================


def test_book_match(client, users, auth_headers, locked_booking, sent_emails):
    response = client.post("/api/matches/m-1/bookings", headers=auth_headers("u-lucia"))

    assert response.status_code == 201
    assert response.json()["user"]["name"] == "Lucia"
    assert locked_booking == ["u-lucia"]
    kinds = [kind for kind, _ in sent_emails]
    assert kinds == ["send_booking_confirmation_email", "send_creator_booking_notification"]
    creator = sent_emails[1][1][0]
    assert creator["id"] == "u-carlos"


def test_book_own_match_skips_creator_notice(client, users, auth_headers, stored_match, make_match,
                                             locked_booking, sent_emails):
    stored_match["match"] = make_match(booked=())
    response = client.post("/api/matches/m-1/bookings", headers=auth_headers("u-carlos"))
    assert response.status_code == 201
    assert [kind for kind, _ in sent_emails] == ["send_booking_confirmation_email"]


def test_book_match_not_found(client, users, auth_headers, locked_booking):
    response = client.post("/api/matches/m-404/bookings", headers=auth_headers("u-lucia"))
    assert response.status_code == 404


def test_book_full_match(client, users, auth_headers, stored_match, make_match, locked_booking, sent_emails):
    stored_match["match"] = make_match(booked=("u-carlos", "u-marco", "u-admin"), guests=[("Pat", "male")])
    response = client.post("/api/matches/m-1/bookings", headers=auth_headers("u-lucia"))
    assert response.status_code == 409
    assert response.json()["message"] == "This match is full"
    assert sent_emails == []


def test_book_twice(client, users, auth_headers, stored_match, make_match, locked_booking):
    # Already booked takes precedence over the match being full
    stored_match["match"] = make_match(booked=("u-carlos", "u-lucia", "u-marco", "u-admin"))
    response = client.post("/api/matches/m-1/bookings", headers=auth_headers("u-lucia"))
    assert response.status_code == 409
    assert response.json()["message"] == "You have already booked this match"


def test_book_twice_concurrently(client, users, auth_headers, monkeypatch):
    def fake_create_booking(match_id, user_id, check):
        raise UniqueViolation()

    monkeypatch.setattr(data_service, "create_booking", fake_create_booking)
    response = client.post("/api/matches/m-1/bookings", headers=auth_headers("u-lucia"))
    assert response.status_code == 409
    assert response.json()["message"] == "You have already booked this match"


def test_book_below_required_level(client, users, auth_headers, stored_match, make_match, locked_booking):
    stored_match["match"] = make_match(required_level=3.5)
    response = client.post("/api/matches/m-1/bookings", headers=auth_headers("u-marco"))
    assert response.status_code == 409
    assert response.json()["message"] == "This match requires level 3.5 or above"


def test_book_ladies_only(client, users, auth_headers, stored_match, make_match, locked_booking):
    stored_match["match"] = make_match(gender_requirement="female_only", booked=())
    assert client.post("/api/matches/m-1/bookings", headers=auth_headers("u-marco")).status_code == 409
    assert client.post("/api/matches/m-1/bookings", headers=auth_headers("u-lucia")).status_code == 201


# ============================================================================
# DELETE /api/matches/{id}/bookings/me, DELETE /api/bookings/{id}
# ============================================================================


def test_cancel_my_booking(client, users, auth_headers, stored_match, make_match, monkeypatch, sent_emails):
    stored_match["match"] = make_match(booked=("u-carlos", "u-lucia"))
    monkeypatch.setattr(data_service, "delete_booking_by_user", lambda match_id, user_id: True)

    response = client.delete("/api/matches/m-1/bookings/me", headers=auth_headers("u-lucia"))

    assert response.status_code == 200
    assert [kind for kind, _ in sent_emails] == [
        "send_cancellation_email", "send_creator_cancellation_notification",
    ]
    # Creator is told the count after the cancellation
    assert sent_emails[1][1][3] == 1


def test_cancel_without_booking(client, users, auth_headers, stored_match, monkeypatch, sent_emails):
    monkeypatch.setattr(data_service, "delete_booking_by_user", lambda match_id, user_id: False)
    response = client.delete("/api/matches/m-1/bookings/me", headers=auth_headers("u-marco"))
    assert response.status_code == 404
    assert sent_emails == []


@pytest.fixture
def booking(monkeypatch):
    row = {"id": "b-u-lucia", "match_id": "m-1", "user_id": "u-lucia", "match_created_by": "u-carlos"}
    monkeypatch.setattr(data_service, "get_booking", lambda booking_id: row if booking_id == row["id"] else None)
    return row


@pytest.mark.parametrize("user_id", ["u-lucia", "u-carlos", "u-admin"])
def test_remove_booking_allowed(client, users, auth_headers, booking, monkeypatch, user_id):
    removed = []
    monkeypatch.setattr(data_service, "delete_booking", lambda booking_id: removed.append(booking_id) or True)
    response = client.delete("/api/bookings/b-u-lucia", headers=auth_headers(user_id))
    assert response.status_code == 200
    assert removed == ["b-u-lucia"]


def test_remove_booking_forbidden(client, users, auth_headers, booking):
    assert client.delete("/api/bookings/b-u-lucia", headers=auth_headers("u-marco")).status_code == 403


def test_remove_booking_not_found(client, users, auth_headers, booking):
    assert client.delete("/api/bookings/b-nope", headers=auth_headers("u-admin")).status_code == 404


# ============================================================================
# Guests
# ============================================================================


def test_add_guest(client, users, auth_headers, stored_match, locked_booking):
    response = client.post("/api/matches/m-1/guests", json={"name": " Pat ", "gender": "male"},
                           headers=auth_headers("u-carlos"))
    assert response.status_code == 201
    assert response.json()["name"] == "Pat"
    assert response.json()["added_by"] == "u-carlos"


def test_add_guest_ignores_level(client, users, auth_headers, stored_match, make_match, locked_booking):
    stored_match["match"] = make_match(required_level=6.0)
    response = client.post("/api/matches/m-1/guests", json={"name": "Pat"}, headers=auth_headers("u-carlos"))
    assert response.status_code == 201


def test_add_guest_respects_tournament_quota(client, users, auth_headers, stored_match, make_match, locked_booking):
    stored_match["match"] = make_match(
        is_tournament=True, max_players=4, required_ladies=2, required_lads=2, prize_first=100,
        booked=("u-carlos", "u-marco"),
    )
    response = client.post("/api/matches/m-1/guests", json={"name": "Pat", "gender": "male"},
                           headers=auth_headers("u-carlos"))
    assert response.status_code == 409
    assert response.json()["message"] == "All lads spots are filled"


def test_add_guest_requires_a_spot_in_match(client, users, auth_headers, stored_match, locked_booking):
    response = client.post("/api/matches/m-1/guests", json={"name": "Pat"}, headers=auth_headers("u-marco"))
    assert response.status_code == 403


def test_remove_guest(client, users, auth_headers, stored_match, monkeypatch):
    guest = {"id": "g-1", "match_id": "m-1", "name": "Pat", "added_by": "u-lucia"}
    monkeypatch.setattr(data_service, "get_guest", lambda guest_id: guest if guest_id == "g-1" else None)
    removed = []
    monkeypatch.setattr(data_service, "delete_guest", lambda guest_id: removed.append(guest_id) or True)

    assert client.delete("/api/matches/m-1/guests/g-1", headers=auth_headers("u-marco")).status_code == 403
    assert client.delete("/api/matches/m-1/guests/g-2", headers=auth_headers("u-lucia")).status_code == 404
    assert client.delete("/api/matches/m-1/guests/g-1", headers=auth_headers("u-lucia")).status_code == 200
    assert removed == ["g-1"]


# ============================================================================
# Payments
# ============================================================================


def test_list_payments(client, users, auth_headers, stored_match, make_match, monkeypatch):
    stored_match["match"] = make_match(booked=("u-carlos", "u-lucia", "u-marco"), price_per_player="15.00")
    monkeypatch.setattr(data_service, "list_match_payments", lambda match_id: [
        {"booking_id": "b-u-carlos", "user_id": "u-carlos", "user_name": "Carlos", "paid": False, "paid_at": None},
        {"booking_id": "b-u-lucia", "user_id": "u-lucia", "user_name": "Lucia", "paid": True, "paid_at": None},
        {"booking_id": "b-u-marco", "user_id": "u-marco", "user_name": "Marco", "paid": False, "paid_at": None},
    ])

    response = client.get("/api/matches/m-1/payments", headers=auth_headers("u-lucia"))

    assert response.status_code == 200
    data = response.json()
    assert [p["paid"] for p in data["payments"]] == [True, True, False]
    assert data["paid_count"] == 2
    assert data["creator_name"] == "Carlos"
    assert data["venmo_url"].startswith("https://venmo.com/carlos-padel?txn=pay&amount=15.00&note=Padel%3A")
    assert data["zelle"]["instructions"] == "Send $15.00 with Zelle to carlos@example.com"


def test_list_payments_forbidden_for_outsiders(client, users, auth_headers, stored_match):
    assert client.get("/api/matches/m-1/payments", headers=auth_headers("u-marco")).status_code == 403


def test_mark_payment(client, users, auth_headers, booking, monkeypatch):
    calls = []

    def fake_set_payment(booking_id, paid, marked_by):
        calls.append((booking_id, paid, marked_by))
        return {"booking_id": booking_id, "paid": paid, "paid_at": None, "marked_by": marked_by}

    monkeypatch.setattr(data_service, "set_payment", fake_set_payment)

    response = client.put("/api/bookings/b-u-lucia/payment", json={"paid": True}, headers=auth_headers("u-carlos"))

    assert response.status_code == 200
    assert response.json()["paid"] is True
    assert calls == [("b-u-lucia", True, "u-carlos")]


def test_mark_payment_forbidden(client, users, auth_headers, booking, monkeypatch):
    monkeypatch.setattr(data_service, "set_payment", lambda *args: pytest.fail("should not update"))
    response = client.put("/api/bookings/b-u-lucia/payment", json={"paid": True}, headers=auth_headers("u-marco"))
    assert response.status_code == 403
