"""Deep links for paying the organizer and for sharing a match."""
from decimal import Decimal
from typing import Optional
from urllib.parse import quote, urlencode
from calendar_links import format_duration, format_long_date, format_time
from config import APP_URL


def match_url(match_id: str) -> str:
    return f"{APP_URL}/matches/{match_id}"


def payment_note(match: dict) -> str:
    return f"Padel: {match.get('title') or 'Match'} {match['date']}"


def venmo_url(username: Optional[str], amount=None, note: Optional[str] = None) -> Optional[str]:
    if not username:
        return None
    username = username.strip().lstrip("@")
    params = {"txn": "pay"}
    if amount is not None:
        params["amount"] = f"{Decimal(str(amount)):.2f}"
    if note:
        params["note"] = note
    return f"https://venmo.com/{quote(username)}?{urlencode(params, quote_via=quote)}"


def zelle_details(handle: Optional[str], amount=None) -> Optional[dict]:
    """Zelle has no public deep link, so hand back what to type in the bank app."""
    if not handle:
        return None
    handle = handle.strip()
    if amount is not None:
        instructions = f"Send ${Decimal(str(amount)):.2f} with Zelle to {handle}"
    else:
        instructions = f"Send your share with Zelle to {handle}"
    return {"handle": handle, "instructions": instructions}


def share_links(match: dict, available_slots: int) -> dict:
    url = match_url(match["id"])
    when = f"{format_long_date(match['date'])} at {format_time(match['time'])}"

    text = (
        "Join me for Padel!\n\n"
        f"{match['location']}\n"
        f"{when}\n"
        f"{format_duration(match['duration'])}\n"
        f"{available_slots} slots available\n\n"
        f"Book here: {url}"
    )

    subject = f"Join me for Padel - {match.get('title') or 'Match'}"
    body = (
        f"I'm playing padel at {match['location']} on {when}.\n\n"
        f"Join me! Click here to book: {url}\n\n"
        "Match Details:\n"
        f"- Duration: {format_duration(match['duration'])}\n"
        f"- Available Slots: {available_slots}/{match['max_players']}"
    )

    return {
        "url": url,
        "whatsapp_url": f"https://wa.me/?text={quote(text)}",
        "email_url": f"mailto:?subject={quote(subject)}&body={quote(body)}",
    }
