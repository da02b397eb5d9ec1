"""Player ranking bands (0.0 - 7.0 scale)."""
import re
from typing import Optional
from constants import RANKING_MIN, RANKING_MAX

RANKING_PATTERN = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")

# (low, high, level, badge color); bounds are inclusive
RANKING_BANDS = [
    (1.0, 1.49, "Beginner", "bg-green-500"),
    (1.5, 2.4, "Initiation Intermediate", "bg-green-600"),
    (2.5, 3.4, "Intermediate", "bg-blue-500"),
    (3.5, 4.4, "Intermediate High", "bg-blue-600"),
    (4.5, 5.3, "Intermediate Advanced", "bg-orange-500"),
    (5.4, 5.9, "Competition", "bg-orange-600"),
    (6.0, 7.0, "Professional", "bg-purple-600"),
]


def parse_ranking(ranking) -> Optional[float]:
    if ranking is None:
        return None
    if isinstance(ranking, str) and not RANKING_PATTERN.match(ranking.strip()):
        return None
    try:
        return float(ranking)
    except (TypeError, ValueError):
        return None


def _band(ranking):
    rank = parse_ranking(ranking)
    if rank is None:
        return None
    if rank < 1.0:
        return "Initiation", "bg-gray-500"
    for low, high, level, color in RANKING_BANDS:
        if low <= rank <= high:
            return level, color
    return None


def ranking_level(ranking) -> str:
    band = _band(ranking)
    return band[0] if band else "Unknown"


def ranking_color(ranking) -> str:
    band = _band(ranking)
    return band[1] if band else "bg-gray-500"


def validate_ranking(ranking: str) -> tuple[bool, Optional[str]]:
    """Check a user-entered ranking, returning (valid, message)."""
    ranking = str(ranking).strip()
    rank = parse_ranking(ranking)
    if rank is None or rank != rank:
        return False, "Please enter a valid number"

    if rank < RANKING_MIN or rank > RANKING_MAX:
        return False, "Ranking must be between 0.0 and 7.0"

    decimals = ranking.split(".")[1] if "." in ranking else ""
    if len(decimals) > 2:
        return False, "Maximum 2 decimal places allowed"

    return True, None
