import logging
import psycopg2
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
from config import get_db_config
from constants import LOCATIONS, RANKING_DEFAULT

logger = logging.getLogger(__name__)


@contextmanager
def get_db():
    """Get a database connection with automatic commit/rollback."""
    config = get_db_config()
    conn = psycopg2.connect(
        host=config["host"],
        port=config["port"],
        database=config["database"],
        user=config["user"],
        password=config["password"],
        cursor_factory=RealDictCursor
    )
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    """Initialize database schema."""
    with get_db() as conn:
        cursor = conn.cursor()

        # gen_random_uuid() on PostgreSQL < 13
        cursor.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS users (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                name TEXT NOT NULL,
                phone TEXT,
                photo_url TEXT,
                ranking TEXT DEFAULT '{RANKING_DEFAULT}',
                gender TEXT NOT NULL DEFAULT 'rather_not_say'
                    CHECK(gender IN ('male', 'female', 'rather_not_say')),
                venmo_username TEXT,
                zelle_handle TEXT,
                is_admin BOOLEAN NOT NULL DEFAULT FALSE,
                invited_by_code TEXT,
                created_at TIMESTAMPTZ DEFAULT now()
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS locations (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                name TEXT NOT NULL UNIQUE,
                address TEXT,
                logo_url TEXT,
                latitude DOUBLE PRECISION,
                longitude DOUBLE PRECISION,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                created_at TIMESTAMPTZ DEFAULT now()
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS matches (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                title TEXT,
                date DATE NOT NULL,
                time TEXT NOT NULL,
                duration INTEGER NOT NULL DEFAULT 60,
                max_players INTEGER NOT NULL DEFAULT 4,
                location TEXT NOT NULL,
                is_private BOOLEAN NOT NULL DEFAULT FALSE,
                is_tournament BOOLEAN NOT NULL DEFAULT FALSE,
                required_level DOUBLE PRECISION,
                gender_requirement TEXT NOT NULL DEFAULT 'all'
                    CHECK(gender_requirement IN ('all', 'male_only', 'female_only')),
                required_ladies INTEGER,
                required_lads INTEGER,
                price_per_player NUMERIC(10, 2),
                total_cost NUMERIC(10, 2),
                prize_first NUMERIC(10, 2),
                prize_second NUMERIC(10, 2),
                prize_third NUMERIC(10, 2),
                created_by UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                created_at TIMESTAMPTZ DEFAULT now()
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_matches_date ON matches (date, time)")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS bookings (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                match_id UUID NOT NULL REFERENCES matches(id) ON DELETE CASCADE,
                user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                created_at TIMESTAMPTZ DEFAULT now(),
                UNIQUE(match_id, user_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guest_bookings (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                match_id UUID NOT NULL REFERENCES matches(id) ON DELETE CASCADE,
                name TEXT NOT NULL,
                gender TEXT NOT NULL DEFAULT 'rather_not_say'
                    CHECK(gender IN ('male', 'female', 'rather_not_say')),
                added_by UUID REFERENCES users(id) ON DELETE SET NULL,
                created_at TIMESTAMPTZ DEFAULT now()
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS invite_codes (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                code TEXT NOT NULL UNIQUE,
                created_by UUID REFERENCES users(id) ON DELETE SET NULL,
                email TEXT,
                phone TEXT,
                expires_at TIMESTAMPTZ,
                max_uses INTEGER,
                current_uses INTEGER NOT NULL DEFAULT 0,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                notes TEXT,
                created_at TIMESTAMPTZ DEFAULT now()
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS payments (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                booking_id UUID NOT NULL UNIQUE REFERENCES bookings(id) ON DELETE CASCADE,
                paid BOOLEAN NOT NULL DEFAULT FALSE,
                paid_at TIMESTAMPTZ,
                marked_by UUID REFERENCES users(id) ON DELETE SET NULL,
                created_at TIMESTAMPTZ DEFAULT now()
            )
        """)

        # Seed venues on first start only, admins manage them afterwards
        cursor.execute("SELECT COUNT(*) AS n FROM locations")
        if cursor.fetchone()["n"] == 0:
            for loc in LOCATIONS:
                cursor.execute("""
                    INSERT INTO locations (name, address, logo_url, latitude, longitude)
                    VALUES (%s, %s, %s, %s, %s)
                """, (loc["name"], loc["address"], loc["logo_url"], loc["latitude"], loc["longitude"]))
            logger.info("Seeded %d locations", len(LOCATIONS))

        conn.commit()


if __name__ == "__main__":
    init_db()
    print("Database initialized successfully")
