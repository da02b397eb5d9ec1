"""
Data access for users, locations, matches, bookings, guests, invites and payments.

Every function opens its own connection through ``get_db`` so each call is one
transaction. Rows come back as plain dicts (RealDictCursor).
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from psycopg2.extras import execute_values

from database import get_db

logger = logging.getLogger(__name__)

# password_hash stays inside this module
USER_COLUMNS = (
    "id, email, name, phone, photo_url, ranking, gender, venmo_username, "
    "zelle_handle, is_admin, invited_by_code, created_at"
)
PUBLIC_USER_FIELDS = [c.strip() for c in USER_COLUMNS.split(",")]

MATCH_FIELDS = [
    "title", "date", "time", "duration", "max_players", "location", "is_private",
    "is_tournament", "required_level", "gender_requirement", "required_ladies",
    "required_lads", "price_per_player", "total_cost", "prize_first", "prize_second",
    "prize_third",
]
USER_UPDATE_FIELDS = ["name", "phone", "photo_url", "ranking", "gender", "venmo_username", "zelle_handle"]
LOCATION_FIELDS = ["name", "address", "logo_url", "latitude", "longitude", "is_active"]
INVITE_UPDATE_FIELDS = ["is_active", "expires_at", "max_uses"]


class BookingRejected(Exception):
    """Raised when an eligibility check refuses a slot."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InviteUnavailable(Exception):
    """Raised when an invite ran out of uses between validation and signup."""


def _update_sql(table: str, fields: dict, allowed: list[str]) -> tuple[str, list]:
    columns = [k for k in fields if k in allowed]
    if not columns:
        raise ValueError("No updatable fields supplied")
    assignments = ", ".join(f"{column} = %s" for column in columns)
    return f"UPDATE {table} SET {assignments} WHERE id = %s RETURNING *", [fields[c] for c in columns]


# ============ USERS ============

def get_user_by_id(user_id: str) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def get_user_credentials(email: str) -> Optional[dict]:
    """User row including password_hash, for login and reset."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE email = %s", (email.strip().lower(),))
        row = cursor.fetchone()
        return dict(row) if row else None


def list_users(q: Optional[str] = None) -> list[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        if q:
            pattern = f"%{q}%"
            cursor.execute(f"""
                SELECT {USER_COLUMNS} FROM users
                WHERE name ILIKE %s OR email ILIKE %s
                ORDER BY name
            """, (pattern, pattern))
        else:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY name")
        return [dict(row) for row in cursor.fetchall()]


def create_user_with_invite(invite_id: str, email: str, password_hash: str, name: str,
                            phone: Optional[str], ranking: str, gender: str, invite_code: str) -> dict:
    """Create the profile and consume one use of the invite in a single transaction.

    Raises psycopg2.errors.UniqueViolation when the email is taken and
    InviteUnavailable when the invite was used up or deactivated meanwhile.
    """
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            UPDATE invite_codes SET current_uses = current_uses + 1
            WHERE id = %s AND is_active AND (max_uses IS NULL OR current_uses < max_uses)
        """, (invite_id,))
        if cursor.rowcount == 0:
            raise InviteUnavailable(invite_code)
        cursor.execute(f"""
            INSERT INTO users (email, password_hash, name, phone, ranking, gender, invited_by_code)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING {USER_COLUMNS}
        """, (email.strip().lower(), password_hash, name, phone, ranking, gender, invite_code))
        return dict(cursor.fetchone())


def update_user(user_id: str, fields: dict) -> Optional[dict]:
    sql, params = _update_sql("users", fields, USER_UPDATE_FIELDS)
    sql = sql.replace("RETURNING *", f"RETURNING {USER_COLUMNS}")
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params + [user_id])
        row = cursor.fetchone()
        return dict(row) if row else None


def update_password(user_id: str, password_hash: str) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("UPDATE users SET password_hash = %s WHERE id = %s", (password_hash, user_id))
        return cursor.rowcount > 0


def set_admin(user_id: str, is_admin: bool) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE users SET is_admin = %s WHERE id = %s RETURNING {USER_COLUMNS}",
            (is_admin, user_id)
        )
        row = cursor.fetchone()
        return dict(row) if row else None


# ============ LOCATIONS ============

def list_locations(include_inactive: bool = False) -> list[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        if include_inactive:
            cursor.execute("SELECT * FROM locations ORDER BY name")
        else:
            cursor.execute("SELECT * FROM locations WHERE is_active ORDER BY name")
        return [dict(row) for row in cursor.fetchall()]


def get_location_by_name(name: str) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM locations WHERE name = %s", (name,))
        row = cursor.fetchone()
        return dict(row) if row else None


def create_location(fields: dict) -> dict:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO locations (name, address, logo_url, latitude, longitude, is_active)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING *
        """, (fields["name"], fields.get("address"), fields.get("logo_url"),
              fields.get("latitude"), fields.get("longitude"), fields.get("is_active", True)))
        return dict(cursor.fetchone())


def update_location(location_id: str, fields: dict) -> Optional[dict]:
    sql, params = _update_sql("locations", fields, LOCATION_FIELDS)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params + [location_id])
        row = cursor.fetchone()
        return dict(row) if row else None


def delete_location(location_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM locations WHERE id = %s", (location_id,))
        return cursor.rowcount > 0


# ============ MATCHES ============

def _fetch_rosters(cursor, match_ids: list[str]) -> tuple[dict, dict]:
    """Bookings (with user profiles) and guests keyed by match id."""
    bookings = {match_id: [] for match_id in match_ids}
    guests = {match_id: [] for match_id in match_ids}
    if not match_ids:
        return bookings, guests

    user_select = ", ".join(f"u.{field} AS u_{field}" for field in PUBLIC_USER_FIELDS)
    cursor.execute(f"""
        SELECT b.id, b.match_id, b.user_id, b.created_at, {user_select}
        FROM bookings b
        JOIN users u ON b.user_id = u.id
        WHERE b.match_id = ANY(%s::uuid[])
        ORDER BY b.created_at
    """, (match_ids,))
    for row in cursor.fetchall():
        row = dict(row)
        user = {field: row.pop(f"u_{field}") for field in PUBLIC_USER_FIELDS}
        row["user"] = user
        bookings[row["match_id"]].append(row)

    cursor.execute("""
        SELECT * FROM guest_bookings
        WHERE match_id = ANY(%s::uuid[])
        ORDER BY created_at
    """, (match_ids,))
    for row in cursor.fetchall():
        guests[row["match_id"]].append(dict(row))

    return bookings, guests


def _with_rosters(cursor, rows: list) -> list[dict]:
    matches = [dict(row) for row in rows]
    bookings, guests = _fetch_rosters(cursor, [m["id"] for m in matches])
    for match in matches:
        match["bookings"] = bookings[match["id"]]
        match["guests"] = guests[match["id"]]
    return matches


def list_matches(from_date: date, on_date: Optional[date] = None, location: Optional[str] = None,
                 viewer_id: Optional[str] = None, viewer_is_admin: bool = False,
                 mine: bool = False) -> list[dict]:
    """Upcoming matches visible to the viewer, soonest first."""
    conditions = ["m.date >= %s"]
    params: list = [from_date]

    if on_date:
        conditions.append("m.date = %s")
        params.append(on_date)
    if location:
        conditions.append("m.location = %s")
        params.append(location)

    involved = "(m.created_by = %s OR EXISTS (SELECT 1 FROM bookings b WHERE b.match_id = m.id AND b.user_id = %s))"
    if mine and viewer_id:
        conditions.append(involved)
        params.extend([viewer_id, viewer_id])
    elif not viewer_is_admin:
        if viewer_id:
            conditions.append(f"(NOT m.is_private OR {involved})")
            params.extend([viewer_id, viewer_id])
        else:
            conditions.append("NOT m.is_private")

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"""
            SELECT m.* FROM matches m
            WHERE {" AND ".join(conditions)}
            ORDER BY m.date ASC, m.time ASC
        """, params)
        return _with_rosters(cursor, cursor.fetchall())


def get_match(match_id: str) -> Optional[dict]:
    """Match row with bookings and guests, private or not."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM matches WHERE id = %s", (match_id,))
        row = cursor.fetchone()
        if not row:
            return None
        return _with_rosters(cursor, [row])[0]


def create_match(fields: dict, created_by: str) -> dict:
    """Insert a match and book its creator.

    The creator's booking runs inside a savepoint, so if it fails the match is
    still created.
    """
    columns = [c for c in MATCH_FIELDS if c in fields]
    placeholders = ", ".join(["%s"] * (len(columns) + 1))
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"""
            INSERT INTO matches ({", ".join(columns)}, created_by)
            VALUES ({placeholders})
            RETURNING *
        """, [fields[c] for c in columns] + [created_by])
        match = dict(cursor.fetchone())

        cursor.execute("SAVEPOINT creator_booking")
        try:
            cursor.execute(
                "INSERT INTO bookings (match_id, user_id) VALUES (%s, %s)",
                (match["id"], created_by)
            )
            cursor.execute("RELEASE SAVEPOINT creator_booking")
        except Exception as e:
            cursor.execute("ROLLBACK TO SAVEPOINT creator_booking")
            logger.error(f"Failed to auto-book creator {created_by} on match {match['id']}: {e}")

        return _with_rosters(cursor, [match])[0]


def update_match(match_id: str, fields: dict) -> Optional[dict]:
    sql, params = _update_sql("matches", fields, MATCH_FIELDS)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params + [match_id])
        row = cursor.fetchone()
        if not row:
            return None
        return _with_rosters(cursor, [row])[0]


def delete_match(match_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM matches WHERE id = %s", (match_id,))
        return cursor.rowcount > 0


# ============ BOOKINGS ============

def _lock_roster(cursor, match_id: str) -> tuple[Optional[dict], list[dict]]:
    """Lock the match row and return it with its roster (users and guests)."""
    cursor.execute("SELECT * FROM matches WHERE id = %s FOR UPDATE", (match_id,))
    match = cursor.fetchone()
    if not match:
        return None, []
    cursor.execute("""
        SELECT b.user_id::text AS user_id, u.gender FROM bookings b JOIN users u ON b.user_id = u.id
        WHERE b.match_id = %s
        UNION ALL
        SELECT NULL AS user_id, g.gender FROM guest_bookings g WHERE g.match_id = %s
    """, (match_id, match_id))
    return dict(match), [dict(row) for row in cursor.fetchall()]


def create_booking(match_id: str, user_id: str,
                   check: Callable[[dict, list[dict]], Optional[str]]) -> Optional[dict]:
    """Book a user once ``check(match, roster)`` approves.

    Returns None if the match does not exist. Raises BookingRejected when
    ``check`` returns a reason and UniqueViolation when already booked.
    """
    with get_db() as conn:
        cursor = conn.cursor()
        match, roster = _lock_roster(cursor, match_id)
        if match is None:
            return None
        reason = check(match, roster)
        if reason:
            raise BookingRejected(reason)
        cursor.execute(
            "INSERT INTO bookings (match_id, user_id) VALUES (%s, %s) RETURNING *",
            (match_id, user_id)
        )
        return dict(cursor.fetchone())


def get_booking(booking_id: str) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT b.*, m.created_by AS match_created_by
            FROM bookings b JOIN matches m ON b.match_id = m.id
            WHERE b.id = %s
        """, (booking_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def delete_booking(booking_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM bookings WHERE id = %s", (booking_id,))
        return cursor.rowcount > 0


def delete_booking_by_user(match_id: str, user_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM bookings WHERE match_id = %s AND user_id = %s",
            (match_id, user_id)
        )
        return cursor.rowcount > 0


def set_match_players(match_id: str, to_add: list[str], to_remove: list[str]) -> None:
    with get_db() as conn:
        cursor = conn.cursor()
        if to_remove:
            cursor.execute(
                "DELETE FROM bookings WHERE match_id = %s AND user_id = ANY(%s::uuid[])",
                (match_id, to_remove)
            )
        if to_add:
            execute_values(
                cursor,
                "INSERT INTO bookings (match_id, user_id) VALUES %s ON CONFLICT (match_id, user_id) DO NOTHING",
                [(match_id, user_id) for user_id in to_add]
            )


# ============ GUESTS ============

def create_guest(match_id: str, name: str, gender: str, added_by: str,
                 check: Callable[[dict, list[dict]], Optional[str]]) -> Optional[dict]:
    """Hold a slot for someone without an account, subject to ``check``."""
    with get_db() as conn:
        cursor = conn.cursor()
        match, roster = _lock_roster(cursor, match_id)
        if match is None:
            return None
        reason = check(match, roster)
        if reason:
            raise BookingRejected(reason)
        cursor.execute("""
            INSERT INTO guest_bookings (match_id, name, gender, added_by)
            VALUES (%s, %s, %s, %s)
            RETURNING *
        """, (match_id, name, gender, added_by))
        return dict(cursor.fetchone())


def get_guest(guest_id: str) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM guest_bookings WHERE id = %s", (guest_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def delete_guest(guest_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM guest_bookings WHERE id = %s", (guest_id,))
        return cursor.rowcount > 0


# ============ INVITE CODES ============

def get_invite(invite_id: str) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM invite_codes WHERE id = %s", (invite_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def get_invite_by_code(code: str) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM invite_codes WHERE code = %s", (code,))
        row = cursor.fetchone()
        return dict(row) if row else None


def list_invites(created_by: Optional[str] = None) -> list[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        if created_by:
            cursor.execute(
                "SELECT * FROM invite_codes WHERE created_by = %s ORDER BY created_at DESC",
                (created_by,)
            )
        else:
            cursor.execute("SELECT * FROM invite_codes ORDER BY created_at DESC")
        return [dict(row) for row in cursor.fetchall()]


def create_invite(code: str, created_by: Optional[str], email: Optional[str] = None,
                  phone: Optional[str] = None, expires_at: Optional[datetime] = None,
                  max_uses: Optional[int] = None, notes: Optional[str] = None) -> dict:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO invite_codes (code, created_by, email, phone, expires_at, max_uses, notes)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING *
        """, (code, created_by, email, phone, expires_at, max_uses, notes))
        return dict(cursor.fetchone())


def update_invite(invite_id: str, fields: dict) -> Optional[dict]:
    sql, params = _update_sql("invite_codes", fields, INVITE_UPDATE_FIELDS)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params + [invite_id])
        row = cursor.fetchone()
        return dict(row) if row else None


def delete_invite(invite_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM invite_codes WHERE id = %s", (invite_id,))
        return cursor.rowcount > 0


# ============ PAYMENTS ============

def list_match_payments(match_id: str) -> list[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT b.id AS booking_id, b.user_id, u.name AS user_name,
                   COALESCE(p.paid, FALSE) AS paid, p.paid_at
            FROM bookings b
            JOIN users u ON b.user_id = u.id
            LEFT JOIN payments p ON p.booking_id = b.id
            WHERE b.match_id = %s
            ORDER BY b.created_at
        """, (match_id,))
        return [dict(row) for row in cursor.fetchall()]


def set_payment(booking_id: str, paid: bool, marked_by: str) -> dict:
    paid_at = datetime.now(timezone.utc) if paid else None
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO payments (booking_id, paid, paid_at, marked_by)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (booking_id)
            DO UPDATE SET paid = EXCLUDED.paid, paid_at = EXCLUDED.paid_at, marked_by = EXCLUDED.marked_by
            RETURNING *
        """, (booking_id, paid, paid_at, marked_by))
        return dict(cursor.fetchone())
