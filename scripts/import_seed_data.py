#!/usr/bin/env python3
"""
Import seed data into local database for testing.

Usage:
    python scripts/import_seed_data.py

Reads from data/seed_data.json and imports into local database.
Requires DATABASE_URL to be set in .env file.

Imported users get an unusable password and have to go through
"forgot password" to sign in.
"""

import json
import secrets
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from database import get_db, init_db

SEED_FILE = Path(__file__).parent.parent / "data" / "seed_data.json"

# Tables in foreign key order
TABLES = {
    "locations": ["id", "name", "address", "logo_url", "latitude", "longitude", "is_active", "created_at"],
    "users": [
        "id", "email", "password_hash", "name", "phone", "photo_url", "ranking", "gender",
        "venmo_username", "zelle_handle", "is_admin", "invited_by_code", "created_at",
    ],
    "invite_codes": [
        "id", "code", "created_by", "email", "phone", "expires_at", "max_uses",
        "current_uses", "is_active", "notes", "created_at",
    ],
    "matches": [
        "id", "title", "date", "time", "duration", "max_players", "location", "is_private",
        "is_tournament", "required_level", "gender_requirement", "required_ladies", "required_lads",
        "price_per_player", "total_cost", "prize_first", "prize_second", "prize_third",
        "created_by", "created_at",
    ],
    "bookings": ["id", "match_id", "user_id", "created_at"],
    "guest_bookings": ["id", "match_id", "name", "gender", "added_by", "created_at"],
    "payments": ["id", "booking_id", "paid", "paid_at", "marked_by", "created_at"],
}

# Columns never overwritten on re-import
KEEP_ON_CONFLICT = {"id", "created_at", "password_hash"}


def unusable_password() -> str:
    # Not a bcrypt hash, so no password can ever match it
    return "!" + secrets.token_hex(16)


def upsert_sql(table: str, columns: list[str]) -> str:
    updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in columns if c not in KEEP_ON_CONFLICT)
    return f"""
        INSERT INTO {table} ({", ".join(columns)})
        VALUES ({", ".join(["%s"] * len(columns))})
        ON CONFLICT (id) DO UPDATE SET {updates}
    """


def import_data():
    """Import seed data from JSON file."""
    if not SEED_FILE.exists():
        print(f"Error: {SEED_FILE} not found")
        print("Run export_prod_data.py first to create seed data")
        sys.exit(1)

    with open(SEED_FILE) as f:
        data = json.load(f)

    print(f"Loading seed data from {SEED_FILE}")
    for table in TABLES:
        print(f"  {table}: {len(data.get(table, []))}")

    # Initialize database schema
    print("\nInitializing database schema...")
    init_db()

    with get_db() as conn:
        cursor = conn.cursor()

        for table, columns in TABLES.items():
            rows = data.get(table, [])
            if table == "locations":
                # init_db may already have seeded the same venues under new ids
                cursor.execute("DELETE FROM locations WHERE name = ANY(%s) AND NOT id = ANY(%s::uuid[])",
                               ([r["name"] for r in rows], [r["id"] for r in rows]))
            sql = upsert_sql(table, columns)
            for row in rows:
                if table == "users":
                    row = {**row, "password_hash": unusable_password()}
                cursor.execute(sql, [row.get(column) for column in columns])
            print(f"Imported {len(rows)} {table}")

    print("\nSeed data imported successfully!")


if __name__ == "__main__":
    import_data()
