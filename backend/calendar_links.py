"""Date/time formatting and calendar exports for matches."""
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode
from zoneinfo import ZoneInfo
from config import TIMEZONE


def local_today(tz: str = TIMEZONE) -> date:
    """Today at the venues, which is what 'upcoming' and 'in the past' mean."""
    return datetime.now(ZoneInfo(tz)).date()


def _to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _parse_time(value: str) -> tuple[int, int]:
    hours, minutes = str(value).split(":")[:2]
    return int(hours), int(minutes)


def format_time(value: str) -> str:
    """'14:30' -> '2:30 PM'"""
    hours, minutes = _parse_time(value)
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def format_duration(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    parts = []
    if hours:
        parts.append(f"{hours} hour" if hours == 1 else f"{hours} hours")
    if mins:
        parts.append(f"{mins} minutes")
    return " ".join(parts) or "0 minutes"


def calculate_end_time(start: str, duration: int) -> str:
    hours, minutes = _parse_time(start)
    total = (hours * 60 + minutes + int(duration)) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_match_date(value) -> str:
    """Short form used in notifications, e.g. 'Sat, Oct 18'."""
    day = _to_date(value)
    return f"{day.strftime('%a, %b')} {day.day}"


def format_long_date(value) -> str:
    """Long form used in emails and shares, e.g. 'Saturday, October 18'."""
    day = _to_date(value)
    return f"{day.strftime('%A, %B')} {day.day}"


def match_start(match: dict, tz: str = TIMEZONE) -> datetime:
    hours, minutes = _parse_time(match["time"])
    day = _to_date(match["date"])
    return datetime(day.year, day.month, day.day, hours, minutes, tzinfo=ZoneInfo(tz))


def match_window(match: dict, tz: str = TIMEZONE) -> tuple[datetime, datetime]:
    start = match_start(match, tz)
    return start, start + timedelta(minutes=int(match["duration"]))


def event_summary(match: dict) -> str:
    return f"{match.get('title') or 'Padel Match'} - {match['location']}"


def event_description(match: dict, player_count: int) -> str:
    return (
        f"Padel match at {match['location']}\n"
        f"Players: {player_count}/{match['max_players']}\n"
        f"Duration: {format_duration(match['duration'])}"
    )


def google_calendar_url(match: dict, player_count: int, tz: str = TIMEZONE) -> str:
    start, end = match_window(match, tz)
    fmt = "%Y%m%dT%H%M%S"
    params = {
        "action": "TEMPLATE",
        "text": event_summary(match),
        "dates": f"{start.strftime(fmt)}/{end.strftime(fmt)}",
        "ctz": tz,
        "details": event_description(match, player_count),
        "location": match["location"],
    }
    return f"https://calendar.google.com/calendar/render?{urlencode(params)}"


def _escape_ics(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def build_ics(match: dict, player_count: int, tz: str = TIMEZONE, now: Optional[datetime] = None) -> str:
    start, end = match_window(match, tz)
    fmt = "%Y%m%dT%H%M%SZ"
    now = now or datetime.now(timezone.utc)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Apex Padel//Match//EN",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"UID:{match['id']}@apexpadel",
        f"DTSTAMP:{now.astimezone(timezone.utc).strftime(fmt)}",
        f"DTSTART:{start.astimezone(timezone.utc).strftime(fmt)}",
        f"DTEND:{end.astimezone(timezone.utc).strftime(fmt)}",
        f"SUMMARY:{_escape_ics(event_summary(match))}",
        f"DESCRIPTION:{_escape_ics(event_description(match, player_count))}",
        f"LOCATION:{_escape_ics(match['location'])}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"


def ics_filename(match: dict) -> str:
    return f"padel-match-{_to_date(match['date']).isoformat()}.ics"
