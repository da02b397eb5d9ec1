"""Booking rules for a match roster.

The roster is every player holding a slot: registered users from ``bookings``
and guests from ``guest_bookings``. Both are plain dicts carrying at least a
``gender`` key. All checks return a human readable reason when the candidate
cannot take a slot, or ``None`` when they can.
"""
from typing import Iterable, Optional
from ranking import parse_ranking


def gender_counts(roster: Iterable[dict]) -> tuple[int, int, int]:
    """Return (ladies, lads, others) for a roster."""
    ladies = lads = others = 0
    for player in roster:
        gender = player.get("gender")
        if gender == "female":
            ladies += 1
        elif gender == "male":
            lads += 1
        else:
            others += 1
    return ladies, lads, others


def available_slots(max_players: int, player_count: int) -> int:
    return max(0, max_players - player_count)


def check_eligibility(match: dict, roster: list[dict], gender: Optional[str],
                      ranking=None, is_guest: bool = False) -> Optional[str]:
    max_players = match["max_players"]
    if len(roster) >= max_players:
        return "This match is full"

    required_level = match.get("required_level")
    if required_level is not None and not is_guest:
        rank = parse_ranking(ranking)
        if rank is None or rank < float(required_level):
            return f"This match requires level {float(required_level):.1f} or above"

    requirement = match.get("gender_requirement") or "all"
    if requirement == "male_only" and gender != "male":
        return "This match is for lads only"
    if requirement == "female_only" and gender != "female":
        return "This match is for ladies only"

    if match.get("is_tournament"):
        return _check_tournament_quota(match, roster, gender)

    return None


def _check_tournament_quota(match: dict, roster: list[dict], gender: Optional[str]) -> Optional[str]:
    if gender not in ("male", "female"):
        return "Set your gender to male or female to join tournaments"

    required_ladies = match.get("required_ladies") or 0
    required_lads = match.get("required_lads") or 0
    ladies, lads, others = gender_counts(roster)

    # Slots not reserved for either quota, shared by whoever overflows one
    open_spots = match["max_players"] - required_ladies - required_lads
    overflow = max(0, ladies - required_ladies) + max(0, lads - required_lads) + others

    if gender == "female":
        if ladies < required_ladies or overflow < open_spots:
            return None
        return "All ladies spots are filled"

    if lads < required_lads or overflow < open_spots:
        return None
    return "All lads spots are filled"


def validate_tournament(max_players: int, required_ladies: int, required_lads: int) -> Optional[str]:
    total = required_ladies + required_lads
    if total == 0:
        return "Tournaments must specify gender requirements"
    if total > max_players:
        return (
            f"Gender requirements ({required_ladies} ladies + {required_lads} lads = {total}) "
            f"cannot exceed max players ({max_players})"
        )
    return None


def diff_roster(existing_user_ids: list[str], user_ids: list[str]) -> tuple[list[str], list[str]]:
    """Return (to_add, to_remove) to turn the existing bookings into ``user_ids``."""
    existing = set(existing_user_ids)
    wanted = set(user_ids)
    to_add = []
    for user_id in user_ids:
        if user_id not in existing and user_id not in to_add:
            to_add.append(user_id)
    to_remove = [user_id for user_id in existing_user_ids if user_id not in wanted]
    return to_add, to_remove
