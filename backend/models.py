import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import Optional
from urllib.parse import quote_plus
from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from calendar_links import calculate_end_time, local_today
from constants import (
    DURATION_DEFAULT, DURATION_MAX, DURATION_MIN, DURATION_STEP,
    GUEST_NAME_MAX_LENGTH, MATCH_TITLE_MAX_LENGTH, MAX_PLAYERS_DEFAULT, MAX_PLAYERS_OPTIONS,
    PASSWORD_MIN_LENGTH, RANKING_DEFAULT, TOURNAMENT_MAX_PLAYERS_MAX, TOURNAMENT_MAX_PLAYERS_MIN,
    USER_NAME_MAX_LENGTH,
)
from eligibility import validate_tournament
from ranking import ranking_color, ranking_level, validate_ranking

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
GENDER_PATTERN = r"^(male|female|rather_not_say)$"


def _check_ranking(v):
    if v is None:
        return v
    valid, message = validate_ranking(v)
    if not valid:
        raise ValueError(message)
    return str(v).strip()


def _not_blank(v, message):
    if v is None or not v.strip():
        raise ValueError(message)
    return v.strip()


def _not_null(v, field):
    if v is None:
        raise ValueError(f"{field} cannot be cleared")
    return v


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v.strip() if isinstance(v, str) else v


# ============ AUTH & USERS ============

class SignupRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=128)
    name: str = Field(..., min_length=1, max_length=USER_NAME_MAX_LENGTH)
    phone: Optional[str] = Field(default=None, max_length=30)
    ranking: str = Field(default=RANKING_DEFAULT)
    gender: str = Field(default="rather_not_say", pattern=GENDER_PATTERN)
    invite_code: str = Field(..., min_length=1, max_length=32)

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v, "Name is required")

    @field_validator('phone', mode='before')
    @classmethod
    def blank_phone(cls, v):
        return _blank_to_none(v)

    @field_validator('ranking')
    @classmethod
    def check_ranking(cls, v):
        return _check_ranking(v)


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=128)


class PasswordUpdate(BaseModel):
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=128)


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    name: str
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    ranking: Optional[str] = None
    gender: Optional[str] = None
    venmo_username: Optional[str] = None
    zelle_handle: Optional[str] = None
    is_admin: bool = False
    invited_by_code: Optional[str] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def ranking_level(self) -> str:
        return ranking_level(self.ranking)

    @computed_field
    @property
    def ranking_color(self) -> str:
        return ranking_color(self.ranking)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=USER_NAME_MAX_LENGTH)
    phone: Optional[str] = Field(default=None, max_length=30)
    photo_url: Optional[str] = Field(default=None, max_length=500)
    ranking: Optional[str] = None
    gender: Optional[str] = Field(default=None, pattern=GENDER_PATTERN)
    venmo_username: Optional[str] = Field(default=None, max_length=50)
    zelle_handle: Optional[str] = Field(default=None, max_length=100)

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v, "Name is required")

    @field_validator('gender')
    @classmethod
    def gender_not_null(cls, v):
        return _not_null(v, "Gender")

    @field_validator('phone', 'photo_url', 'zelle_handle', mode='before')
    @classmethod
    def blanks(cls, v):
        return _blank_to_none(v)

    @field_validator('venmo_username', mode='before')
    @classmethod
    def strip_at(cls, v):
        v = _blank_to_none(v)
        return v.lstrip("@") or None if v else v

    @field_validator('ranking')
    @classmethod
    def check_ranking(cls, v):
        return _check_ranking(v)


# ============ LOCATIONS ============

class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: Optional[str] = Field(default=None, max_length=300)
    logo_url: Optional[str] = Field(default=None, max_length=500)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    is_active: bool = True


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    address: Optional[str] = Field(default=None, max_length=300)
    logo_url: Optional[str] = Field(default=None, max_length=500)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v, "Name is required")

    @field_validator('is_active')
    @classmethod
    def active_not_null(cls, v):
        return _not_null(v, "is_active")


class LocationResponse(BaseModel):
    id: str
    name: str
    address: Optional[str] = None
    logo_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def maps_url(self) -> Optional[str]:
        if not self.address:
            return None
        return f"https://www.google.com/maps/search/?api=1&query={quote_plus(self.address)}"


# ============ MATCHES ============

class MatchCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=MATCH_TITLE_MAX_LENGTH)
    date: dt.date
    time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    duration: int = Field(default=DURATION_DEFAULT)
    max_players: int = Field(default=MAX_PLAYERS_DEFAULT)
    location: str = Field(..., min_length=1)
    is_private: bool = False
    is_tournament: bool = False
    required_level: Optional[float] = Field(default=None, ge=0, le=7)
    gender_requirement: str = Field(default="all", pattern=r"^(all|male_only|female_only)$")
    required_ladies: int = Field(default=0, ge=0)
    required_lads: int = Field(default=0, ge=0)
    price_per_player: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    prize_first: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    prize_second: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    prize_third: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @field_validator('title', mode='before')
    @classmethod
    def blank_title(cls, v):
        return _blank_to_none(v)

    @field_validator('date')
    @classmethod
    def not_in_past(cls, v):
        if v < local_today():
            raise ValueError("Date cannot be in the past")
        return v

    @field_validator('time')
    @classmethod
    def on_half_hour(cls, v):
        hours, minutes = (int(part) for part in v.split(":"))
        if hours > 23 or minutes not in (0, 30):
            raise ValueError("Time must be on the hour or half hour")
        return v

    @field_validator('duration')
    @classmethod
    def valid_duration(cls, v):
        if v < DURATION_MIN or v > DURATION_MAX or v % DURATION_STEP:
            raise ValueError(f"Duration must be {DURATION_MIN}-{DURATION_MAX} minutes in {DURATION_STEP} minute steps")
        return v

    @model_validator(mode='after')
    def check_players(self):
        if self.is_tournament:
            if not TOURNAMENT_MAX_PLAYERS_MIN <= self.max_players <= TOURNAMENT_MAX_PLAYERS_MAX:
                raise ValueError(
                    f"Tournaments allow {TOURNAMENT_MAX_PLAYERS_MIN}-{TOURNAMENT_MAX_PLAYERS_MAX} players"
                )
            problem = validate_tournament(self.max_players, self.required_ladies, self.required_lads)
            if problem:
                raise ValueError(problem)
            if self.prize_first is None:
                raise ValueError("Tournaments must specify a first place prize")
        elif self.max_players not in MAX_PLAYERS_OPTIONS:
            raise ValueError(f"Max players must be one of {MAX_PLAYERS_OPTIONS}")
        return self

    def to_row(self) -> dict:
        """Column values, with tournament-only fields cleared on regular matches."""
        row = self.model_dump()
        if not self.is_tournament:
            row.update(required_ladies=None, required_lads=None,
                       prize_first=None, prize_second=None, prize_third=None)
        else:
            row["required_ladies"] = self.required_ladies or None
            row["required_lads"] = self.required_lads or None
        row["total_cost"] = (
            self.price_per_player * self.max_players if self.price_per_player is not None else None
        )
        return row


class MatchUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=MATCH_TITLE_MAX_LENGTH)
    date: Optional[dt.date] = None
    time: Optional[str] = None
    duration: Optional[int] = None
    max_players: Optional[int] = None
    location: Optional[str] = None
    is_private: Optional[bool] = None
    is_tournament: Optional[bool] = None
    required_level: Optional[float] = None
    gender_requirement: Optional[str] = None
    required_ladies: Optional[int] = None
    required_lads: Optional[int] = None
    price_per_player: Optional[Decimal] = None
    prize_first: Optional[Decimal] = None
    prize_second: Optional[Decimal] = None
    prize_third: Optional[Decimal] = None


class UserSummary(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    photo_url: Optional[str] = None
    ranking: Optional[str] = None
    gender: Optional[str] = None

    @computed_field
    @property
    def ranking_level(self) -> str:
        return ranking_level(self.ranking)


class BookingResponse(BaseModel):
    id: str
    match_id: str
    user_id: str
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None


class GuestCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=GUEST_NAME_MAX_LENGTH)
    gender: str = Field(default="rather_not_say", pattern=GENDER_PATTERN)

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v):
        return _not_blank(v, "Guest name is required")


class GuestResponse(BaseModel):
    id: str
    match_id: str
    name: str
    gender: str
    added_by: Optional[str] = None
    created_at: Optional[datetime] = None


class MatchResponse(BaseModel):
    id: str
    title: Optional[str] = None
    date: dt.date
    time: str
    duration: int
    max_players: int
    location: str
    is_private: bool = False
    is_tournament: bool = False
    required_level: Optional[float] = None
    gender_requirement: str = "all"
    required_ladies: Optional[int] = None
    required_lads: Optional[int] = None
    price_per_player: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None
    prize_first: Optional[Decimal] = None
    prize_second: Optional[Decimal] = None
    prize_third: Optional[Decimal] = None
    created_by: str
    created_at: Optional[datetime] = None
    bookings: list[BookingResponse] = []
    guests: list[GuestResponse] = []

    @computed_field
    @property
    def player_count(self) -> int:
        return len(self.bookings) + len(self.guests)

    @computed_field
    @property
    def available_slots(self) -> int:
        return max(0, self.max_players - len(self.bookings) - len(self.guests))

    @computed_field
    @property
    def end_time(self) -> str:
        return calculate_end_time(self.time, self.duration)


class RosterUpdate(BaseModel):
    user_ids: list[str]


class ShareLinksResponse(BaseModel):
    url: str
    whatsapp_url: str
    email_url: str


# ============ INVITES ============

class InviteCreate(BaseModel):
    code: Optional[str] = Field(default=None, pattern=r"^[A-Za-z0-9]{4,32}$")
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(default=None, max_length=30)
    expires_in_days: Optional[int] = Field(default=None, ge=1, le=365)
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator('code', 'email', 'phone', 'notes', mode='before')
    @classmethod
    def blanks(cls, v):
        return _blank_to_none(v)


class InviteUpdate(BaseModel):
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = Field(default=None, ge=1)

    @field_validator('is_active')
    @classmethod
    def active_not_null(cls, v):
        return _not_null(v, "is_active")


class InviteValidateRequest(BaseModel):
    code: str
    email: Optional[str] = None
    phone: Optional[str] = None


class InviteValidateResponse(BaseModel):
    valid: bool
    message: Optional[str] = None


class InviteResponse(BaseModel):
    id: str
    code: str
    created_by: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = None
    current_uses: int = 0
    is_active: bool = True
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


# ============ PAYMENTS ============

class PaymentUpdate(BaseModel):
    paid: bool


class PaymentResponse(BaseModel):
    booking_id: str
    paid: bool
    paid_at: Optional[datetime] = None
    marked_by: Optional[str] = None


class PaymentEntry(BaseModel):
    booking_id: str
    user_id: str
    user_name: str
    paid: bool
    paid_at: Optional[datetime] = None


class ZelleDetails(BaseModel):
    handle: str
    instructions: str


class MatchPaymentsResponse(BaseModel):
    match_id: str
    price_per_player: Optional[Decimal] = None
    creator_id: str
    creator_name: Optional[str] = None
    venmo_username: Optional[str] = None
    venmo_url: Optional[str] = None
    zelle: Optional[ZelleDetails] = None
    payments: list[PaymentEntry]

    @computed_field
    @property
    def paid_count(self) -> int:
        return sum(1 for p in self.payments if p.paid)
