# backend/constants.py
"""Application constants - single source of truth for configuration values."""

# Venues seeded into the locations table on first start
LOCATIONS = [
    {
        "name": "Padel Up - Century City",
        "logo_url": "https://cdn.prod.website-files.com/6657bfd4bd5e6513709cecf5/66635e7f6ca978c79be4b35f_logo-notext.svg",
        "address": "10250 Santa Monica Blvd, Los Angeles, CA 90067",
        "latitude": 34.0583, "longitude": -118.4170,
    },
    {
        "name": "Padel Up - Culver City",
        "logo_url": "https://cdn.prod.website-files.com/6657bfd4bd5e6513709cecf5/66635e7f6ca978c79be4b35f_logo-notext.svg",
        "address": "3007 Hauser Blvd, Los Angeles, CA 90016",
        "latitude": 34.0268, "longitude": -118.3409,
    },
    {
        "name": "The Padel Courts - Hollywood",
        "logo_url": "https://img1.wsimg.com/isteam/ip/37b16837-021b-439a-bf27-a443023d5071/TPC%20Logotype%20White-643073b.png",
        "address": "5115 West Sunset Blvd, Los Angeles, CA 90027",
        "latitude": 34.0978, "longitude": -118.3096,
    },
    {
        "name": "Pura Padel - Sherman Oaks",
        "logo_url": "https://paybycourts3.s3.amazonaws.com/uploads/facility/logo/765/Pura_Padel_Colored_Logo__1_.png",
        "address": "14006 Riverside Dr, Sherman Oaks, CA 91423",
        "latitude": 34.1566, "longitude": -118.4381,
    },
]

# Match durations in minutes: 1h to 8h in 30 minute steps
DURATION_MIN = 60
DURATION_MAX = 480
DURATION_STEP = 30
DURATIONS = list(range(DURATION_MIN, DURATION_MAX + 1, DURATION_STEP))
DURATION_DEFAULT = 60

# Regular matches pick from a fixed set, tournaments are free-form
MAX_PLAYERS_OPTIONS = [4, 5, 6, 7, 8]
MAX_PLAYERS_DEFAULT = 4
TOURNAMENT_MAX_PLAYERS_MIN = 4
TOURNAMENT_MAX_PLAYERS_MAX = 100
TOURNAMENT_MAX_PLAYERS_DEFAULT = 12

# Minimum level options offered when creating a match
PLAYER_LEVELS = [
    {"value": None, "label": "All Levels"},
    {"value": 0.0, "label": "Beginner (0.0 - 1.5)"},
    {"value": 1.5, "label": "High Beginner (1.5 - 2.5)"},
    {"value": 2.5, "label": "Intermediate (2.5 - 4.0)"},
    {"value": 4.0, "label": "High Intermediate (4.0 - 5.0)"},
    {"value": 5.0, "label": "Advanced (5.0 - 6.0)"},
    {"value": 6.0, "label": "Pro / Elite (6.0 - 7.0)"},
]

GENDERS = ["male", "female", "rather_not_say"]
GENDER_REQUIREMENTS = ["all", "male_only", "female_only"]

RANKING_MIN = 0.0
RANKING_MAX = 7.0
RANKING_DEFAULT = "3.0"

MATCH_TITLE_MAX_LENGTH = 100
USER_NAME_MAX_LENGTH = 100
GUEST_NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6

INVITE_CODE_LENGTH = 8
# No I, O, 0 or 1 so codes survive being read aloud
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def time_options():
    """All HH:MM start times on a 30 minute grid, with 12-hour labels."""
    options = []
    for i in range(48):
        hours, minutes = divmod(i * 30, 60)
        period = "PM" if hours >= 12 else "AM"
        options.append({
            "value": f"{hours:02d}:{minutes:02d}",
            "label": f"{hours % 12 or 12}:{minutes:02d} {period}",
        })
    return options
