"""Invite code generation and validation."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from constants import INVITE_CODE_ALPHABET, INVITE_CODE_LENGTH


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    return code.strip().upper()


def expires_in(days: Optional[int], now: Optional[datetime] = None) -> Optional[datetime]:
    if not days:
        return None
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=days)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_usable(invite: dict, now: Optional[datetime] = None) -> bool:
    """Active, unexpired and not used up."""
    return validate_invite(invite, now=now)[0]


def validate_invite(invite: Optional[dict], email: Optional[str] = None, phone: Optional[str] = None,
                    now: Optional[datetime] = None) -> tuple[bool, Optional[str]]:
    """Check an invite row against a prospective signup, returning (valid, message)."""
    if not invite:
        return False, "Invalid invite code"

    if not invite.get("is_active", True):
        return False, "Invite code is no longer active"

    now = now or datetime.now(timezone.utc)
    expires_at = invite.get("expires_at")
    if expires_at and _aware(expires_at) < now:
        return False, "Invite code has expired"

    max_uses = invite.get("max_uses")
    if max_uses is not None and invite.get("current_uses", 0) >= max_uses:
        return False, "Invite code has been fully used"

    # Restrictions only apply when both sides are known
    if invite.get("email") and email and invite["email"].lower() != email.lower():
        return False, "This invite is for a different email address"

    if invite.get("phone") and phone and invite["phone"] != phone:
        return False, "This invite is for a different phone number"

    return True, None
