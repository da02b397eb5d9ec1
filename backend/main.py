import datetime as dt
import logging
from typing import Optional
from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from psycopg2.errors import ForeignKeyViolation, InvalidTextRepresentation, UniqueViolation
from pydantic import ValidationError

import data_service
import email_service
from auth import (
    create_access_token, create_password_reset_token, get_current_user, get_current_user_optional,
    hash_password, require_admin, verify_password, verify_password_reset_token, verify_token,
)
from calendar_links import build_ics, format_duration, google_calendar_url, ics_filename, local_today
from config import CORS_ORIGINS, DEBUG, HOST, LOG_LEVEL, PASSWORD_RESET_EXPIRE_MINUTES, PORT, STATIC_DIR
from constants import (
    DURATIONS, GENDER_REQUIREMENTS, GENDERS, MAX_PLAYERS_OPTIONS, PLAYER_LEVELS,
    TOURNAMENT_MAX_PLAYERS_DEFAULT, TOURNAMENT_MAX_PLAYERS_MAX, TOURNAMENT_MAX_PLAYERS_MIN, time_options,
)
from data_service import BookingRejected, InviteUnavailable
from database import init_db
from eligibility import available_slots, check_eligibility, diff_roster
from invites import expires_in, generate_invite_code, is_usable, normalize_code, validate_invite
from models import (
    BookingResponse, ForgotPasswordRequest, GuestCreate, GuestResponse,
    InviteCreate, InviteResponse, InviteUpdate, InviteValidateRequest, InviteValidateResponse,
    LocationCreate, LocationResponse, LocationUpdate, LoginRequest,
    MatchCreate, MatchPaymentsResponse, MatchResponse, MatchUpdate,
    PasswordUpdate, PaymentResponse, PaymentUpdate, ResetPasswordRequest, RosterUpdate,
    ShareLinksResponse, SignupRequest, TokenResponse, UserResponse, UserUpdate,
)
from notifications import get_match_feed
from share_links import payment_note, share_links, venmo_url, zelle_details

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CLEARABLE_MATCH_FIELDS = {"title", "required_level", "price_per_player", "prize_second", "prize_third"}

app = FastAPI(
    title="Apex Padel API",
    version="1.0.0",
    docs_url="/api/docs" if DEBUG else None,
    redoc_url="/api/redoc" if DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Optional prebuilt client
if STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "status_code": exc.status_code, "message": exc.detail, "path": str(request.url.path)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(InvalidTextRepresentation)
async def invalid_id_handler(request: Request, exc: InvalidTextRepresentation):
    # Malformed UUIDs in the path can never match a row
    return JSONResponse(
        status_code=404,
        content={"error": True, "status_code": 404, "message": "Not found", "path": str(request.url.path)}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": True, "status_code": 500, "message": "Internal server error", "path": str(request.url.path)}
    )


@app.on_event("startup")
def startup():
    init_db()


def _can_manage(match: dict, user: dict) -> bool:
    return match["created_by"] == user["id"] or bool(user.get("is_admin"))


def _is_booked(match: dict, user: dict) -> bool:
    return any(b["user_id"] == user["id"] for b in match["bookings"])


def _player_count(match: dict) -> int:
    return len(match["bookings"]) + len(match["guests"])


def _match_or_404(match_id: str) -> dict:
    match = data_service.get_match(match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


def _require_manager(match: dict, user: dict):
    if not _can_manage(match, user):
        raise HTTPException(status_code=403, detail="Only the match creator can do this")


def _require_active_location(name: str):
    location = data_service.get_location_by_name(name)
    if not location or not location["is_active"]:
        raise HTTPException(status_code=400, detail=f"Unknown location '{name}'")


# ============ AUTH ============

@app.post("/api/auth/signup", response_model=TokenResponse, status_code=201)
def signup(payload: SignupRequest):
    code = normalize_code(payload.invite_code)
    invite = data_service.get_invite_by_code(code)
    valid, message = validate_invite(invite, email=payload.email, phone=payload.phone)
    if not valid:
        raise HTTPException(status_code=400, detail=message)

    try:
        user = data_service.create_user_with_invite(
            invite["id"], payload.email, hash_password(payload.password), payload.name,
            payload.phone, payload.ranking, payload.gender, code,
        )
    except UniqueViolation:
        raise HTTPException(status_code=409, detail="An account with this email already exists")
    except InviteUnavailable:
        raise HTTPException(status_code=400, detail="Invite code has been fully used")

    logger.info(f"New user {user['id']} signed up with invite {code}")
    return TokenResponse(access_token=create_access_token(user["id"]), user=UserResponse(**user))


@app.post("/api/auth/login", response_model=TokenResponse)
def login(payload: LoginRequest):
    user = data_service.get_user_credentials(payload.email)
    if not user or not verify_password(payload.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return TokenResponse(access_token=create_access_token(user["id"]), user=UserResponse(**user))


@app.get("/api/auth/me", response_model=UserResponse)
def me(user: dict = Depends(get_current_user)):
    return UserResponse(**user)


@app.post("/api/auth/forgot-password")
def forgot_password(payload: ForgotPasswordRequest, background_tasks: BackgroundTasks):
    user = data_service.get_user_credentials(payload.email)
    if user:
        token = create_password_reset_token(user["id"])
        background_tasks.add_task(
            email_service.send_password_reset_email, user, token, PASSWORD_RESET_EXPIRE_MINUTES
        )
    else:
        logger.info("Password reset requested for unknown email")
    # Unknown emails get the same answer
    return {"message": "If that email is registered, a reset link is on its way"}


@app.post("/api/auth/reset-password")
def reset_password(payload: ResetPasswordRequest):
    user_id = verify_password_reset_token(payload.token)
    if not user_id or not data_service.update_password(user_id, hash_password(payload.password)):
        raise HTTPException(status_code=400, detail="Reset link is invalid or has expired")
    return {"message": "Password updated"}


@app.put("/api/auth/password")
def update_password(payload: PasswordUpdate, user: dict = Depends(get_current_user)):
    data_service.update_password(user["id"], hash_password(payload.password))
    return {"message": "Password updated"}


# ============ USERS ============

@app.get("/api/users", response_model=list[UserResponse])
def list_users(q: Optional[str] = None, user: dict = Depends(get_current_user)):
    return [UserResponse(**row) for row in data_service.list_users(q.strip() if q else None)]


@app.put("/api/users/me", response_model=UserResponse)
def update_profile(update: UserUpdate, user: dict = Depends(get_current_user)):
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        return UserResponse(**user)
    row = data_service.update_user(user["id"], fields)
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(**row)


@app.get("/api/users/{user_id}", response_model=UserResponse)
def get_user(user_id: str, user: dict = Depends(get_current_user)):
    row = data_service.get_user_by_id(user_id)
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(**row)


@app.post("/api/users/{user_id}/admin", response_model=UserResponse)
def make_admin(user_id: str, admin: dict = Depends(require_admin)):
    row = data_service.set_admin(user_id, True)
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"Admin {admin['id']} granted admin to {user_id}")
    return UserResponse(**row)


@app.delete("/api/users/{user_id}/admin", response_model=UserResponse)
def remove_admin(user_id: str, admin: dict = Depends(require_admin)):
    if user_id == admin["id"]:
        raise HTTPException(status_code=400, detail="You cannot remove your own admin access")
    row = data_service.set_admin(user_id, False)
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"Admin {admin['id']} revoked admin from {user_id}")
    return UserResponse(**row)


# ============ LOCATIONS ============

@app.get("/api/locations", response_model=list[LocationResponse])
def list_locations(include_inactive: bool = False, user: Optional[dict] = Depends(get_current_user_optional)):
    show_all = include_inactive and bool(user and user.get("is_admin"))
    return [LocationResponse(**row) for row in data_service.list_locations(show_all)]


@app.post("/api/locations", response_model=LocationResponse, status_code=201)
def create_location(location: LocationCreate, admin: dict = Depends(require_admin)):
    try:
        row = data_service.create_location(location.model_dump())
    except UniqueViolation:
        raise HTTPException(status_code=409, detail="A location with this name already exists")
    return LocationResponse(**row)


@app.put("/api/locations/{location_id}", response_model=LocationResponse)
def update_location(location_id: str, update: LocationUpdate, admin: dict = Depends(require_admin)):
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="Nothing to update")
    try:
        row = data_service.update_location(location_id, fields)
    except UniqueViolation:
        raise HTTPException(status_code=409, detail="A location with this name already exists")
    if not row:
        raise HTTPException(status_code=404, detail="Location not found")
    return LocationResponse(**row)


@app.delete("/api/locations/{location_id}")
def delete_location(location_id: str, admin: dict = Depends(require_admin)):
    if not data_service.delete_location(location_id):
        raise HTTPException(status_code=404, detail="Location not found")
    return {"message": "Location deleted"}


# ============ MATCHES ============

@app.get("/api/matches", response_model=list[MatchResponse])
def list_matches(
    on_date: Optional[dt.date] = Query(default=None, alias="date"),
    location: Optional[str] = None,
    mine: bool = False,
    user: Optional[dict] = Depends(get_current_user_optional),
):
    rows = data_service.list_matches(
        local_today(),
        on_date=on_date,
        location=location,
        viewer_id=user["id"] if user else None,
        viewer_is_admin=bool(user and user.get("is_admin")),
        mine=mine,
    )
    return [MatchResponse(**row) for row in rows]


@app.post("/api/matches", response_model=MatchResponse, status_code=201)
def create_match(match: MatchCreate, background_tasks: BackgroundTasks, user: dict = Depends(get_current_user)):
    _require_active_location(match.location)
    row = data_service.create_match(match.to_row(), user["id"])
    response = MatchResponse(**row)
    logger.info(f"User {user['id']} created match {row['id']} at {row['location']}")

    if not row["is_private"]:
        background_tasks.add_task(get_match_feed().announce_match, response.model_dump(mode="json"))
    return response


@app.get("/api/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: str):
    # Private matches stay reachable by link so they can be shared
    return MatchResponse(**_match_or_404(match_id))


@app.put("/api/matches/{match_id}", response_model=MatchResponse)
def update_match(match_id: str, update: MatchUpdate, user: dict = Depends(get_current_user)):
    existing = _match_or_404(match_id)
    _require_manager(existing, user)

    merged = {field: existing[field] for field in data_service.MATCH_FIELDS if field != "total_cost"}
    merged["required_ladies"] = merged["required_ladies"] or 0
    merged["required_lads"] = merged["required_lads"] or 0
    for field, value in update.model_dump(exclude_unset=True).items():
        # Only optional columns can be cleared with an explicit null
        if value is not None or field in CLEARABLE_MATCH_FIELDS:
            merged[field] = value

    try:
        validated = MatchCreate(**merged)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))

    if validated.location != existing["location"]:
        _require_active_location(validated.location)

    if validated.max_players < _player_count(existing):
        raise HTTPException(
            status_code=400,
            detail=f"Match already has {_player_count(existing)} players; max players cannot be lower",
        )

    row = data_service.update_match(match_id, validated.to_row())
    if not row:
        raise HTTPException(status_code=404, detail="Match not found")
    return MatchResponse(**row)


@app.delete("/api/matches/{match_id}")
def delete_match(match_id: str, user: dict = Depends(get_current_user)):
    match = _match_or_404(match_id)
    _require_manager(match, user)
    data_service.delete_match(match_id)
    logger.info(f"User {user['id']} deleted match {match_id}")
    return {"message": "Match deleted"}


@app.put("/api/matches/{match_id}/players", response_model=MatchResponse)
def set_match_players(match_id: str, roster: RosterUpdate, user: dict = Depends(get_current_user)):
    match = _match_or_404(match_id)
    _require_manager(match, user)

    user_ids = list(dict.fromkeys(roster.user_ids))
    if len(user_ids) + len(match["guests"]) > match["max_players"]:
        raise HTTPException(status_code=400, detail=f"Cannot have more than {match['max_players']} players")

    to_add, to_remove = diff_roster([b["user_id"] for b in match["bookings"]], user_ids)
    try:
        data_service.set_match_players(match_id, to_add, to_remove)
    except (ForeignKeyViolation, InvalidTextRepresentation):
        raise HTTPException(status_code=400, detail="Roster contains an unknown user")

    return MatchResponse(**_match_or_404(match_id))


@app.get("/api/matches/{match_id}/calendar.ics")
def match_calendar_file(match_id: str):
    match = _match_or_404(match_id)
    return Response(
        content=build_ics(match, _player_count(match)),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{ics_filename(match)}"'},
    )


@app.get("/api/matches/{match_id}/calendar/google")
def match_google_calendar(match_id: str):
    match = _match_or_404(match_id)
    return {"url": google_calendar_url(match, _player_count(match))}


@app.get("/api/matches/{match_id}/share", response_model=ShareLinksResponse)
def match_share_links(match_id: str):
    match = _match_or_404(match_id)
    available = available_slots(match["max_players"], _player_count(match))
    return ShareLinksResponse(**share_links(match, available))


# ============ BOOKINGS ============

def _queue_booking_emails(background_tasks: BackgroundTasks, match: dict, player: dict, joined: bool):
    if joined:
        background_tasks.add_task(email_service.send_booking_confirmation_email, player, match)
    else:
        background_tasks.add_task(email_service.send_cancellation_email, player, match)

    if match["created_by"] == player["id"]:
        return
    creator = data_service.get_user_by_id(match["created_by"])
    if not creator:
        return
    notify = (
        email_service.send_creator_booking_notification if joined
        else email_service.send_creator_cancellation_notification
    )
    background_tasks.add_task(notify, creator, player, match, _player_count(match))


@app.post("/api/matches/{match_id}/bookings", response_model=BookingResponse, status_code=201)
def book_match(match_id: str, background_tasks: BackgroundTasks, user: dict = Depends(get_current_user)):
    def check(match, roster):
        if any(player.get("user_id") == user["id"] for player in roster):
            return "You have already booked this match"
        return check_eligibility(match, roster, user.get("gender"), ranking=user.get("ranking"))

    try:
        booking = data_service.create_booking(match_id, user["id"], check)
    except BookingRejected as e:
        raise HTTPException(status_code=409, detail=e.reason)
    except UniqueViolation:
        raise HTTPException(status_code=409, detail="You have already booked this match")
    if booking is None:
        raise HTTPException(status_code=404, detail="Match not found")

    match = data_service.get_match(match_id)
    if match:
        _queue_booking_emails(background_tasks, match, user, joined=True)

    booking["user"] = user
    return BookingResponse(**booking)


@app.delete("/api/matches/{match_id}/bookings/me")
def cancel_my_booking(match_id: str, background_tasks: BackgroundTasks, user: dict = Depends(get_current_user)):
    match = _match_or_404(match_id)
    if not data_service.delete_booking_by_user(match_id, user["id"]):
        raise HTTPException(status_code=404, detail="You have not booked this match")

    match["bookings"] = [b for b in match["bookings"] if b["user_id"] != user["id"]]
    _queue_booking_emails(background_tasks, match, user, joined=False)
    return {"message": "Booking cancelled"}


@app.delete("/api/bookings/{booking_id}")
def remove_booking(booking_id: str, user: dict = Depends(get_current_user)):
    booking = data_service.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    allowed = (
        booking["user_id"] == user["id"]
        or booking["match_created_by"] == user["id"]
        or user.get("is_admin")
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Not authorized to remove this booking")

    data_service.delete_booking(booking_id)
    return {"message": "Booking removed"}


# ============ GUESTS ============

@app.post("/api/matches/{match_id}/guests", response_model=GuestResponse, status_code=201)
def add_guest(match_id: str, guest: GuestCreate, user: dict = Depends(get_current_user)):
    match = _match_or_404(match_id)
    if not (_is_booked(match, user) or _can_manage(match, user)):
        raise HTTPException(status_code=403, detail="Only players in this match can add guests")

    def check(locked_match, roster):
        return check_eligibility(locked_match, roster, guest.gender, is_guest=True)

    try:
        row = data_service.create_guest(match_id, guest.name, guest.gender, user["id"], check)
    except BookingRejected as e:
        raise HTTPException(status_code=409, detail=e.reason)
    if row is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return GuestResponse(**row)


@app.delete("/api/matches/{match_id}/guests/{guest_id}")
def remove_guest(match_id: str, guest_id: str, user: dict = Depends(get_current_user)):
    match = _match_or_404(match_id)
    guest = data_service.get_guest(guest_id)
    if not guest or guest["match_id"] != match_id:
        raise HTTPException(status_code=404, detail="Guest not found")
    if guest["added_by"] != user["id"] and not _can_manage(match, user):
        raise HTTPException(status_code=403, detail="Not authorized to remove this guest")

    data_service.delete_guest(guest_id)
    return {"message": "Guest removed"}


# ============ PAYMENTS ============

@app.get("/api/matches/{match_id}/payments", response_model=MatchPaymentsResponse)
def list_payments(match_id: str, user: dict = Depends(get_current_user)):
    match = _match_or_404(match_id)
    if not (_is_booked(match, user) or _can_manage(match, user)):
        raise HTTPException(status_code=403, detail="Only players in this match can see payments")

    creator = data_service.get_user_by_id(match["created_by"]) or {}
    entries = data_service.list_match_payments(match_id)
    for entry in entries:
        # Whoever fronted the court fee owes themselves nothing
        if entry["user_id"] == match["created_by"]:
            entry["paid"] = True

    price = match["price_per_player"]
    return MatchPaymentsResponse(
        match_id=match_id,
        price_per_player=price,
        creator_id=match["created_by"],
        creator_name=creator.get("name"),
        venmo_username=creator.get("venmo_username"),
        venmo_url=venmo_url(creator.get("venmo_username"), price, payment_note(match)),
        zelle=zelle_details(creator.get("zelle_handle"), price),
        payments=entries,
    )


@app.put("/api/bookings/{booking_id}/payment", response_model=PaymentResponse)
def mark_payment(booking_id: str, update: PaymentUpdate, user: dict = Depends(get_current_user)):
    booking = data_service.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    allowed = (
        booking["user_id"] == user["id"]
        or booking["match_created_by"] == user["id"]
        or user.get("is_admin")
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Not authorized to update this payment")

    return PaymentResponse(**data_service.set_payment(booking_id, update.paid, user["id"]))


# ============ INVITES ============

@app.get("/api/invites", response_model=list[InviteResponse])
def list_invites(active_only: bool = False, user: dict = Depends(get_current_user)):
    rows = data_service.list_invites(None if user.get("is_admin") else user["id"])
    if active_only:
        rows = [row for row in rows if is_usable(row)]
    return [InviteResponse(**row) for row in rows]


@app.post("/api/invites", response_model=InviteResponse, status_code=201)
def create_invite(invite: InviteCreate, user: dict = Depends(get_current_user)):
    expires_at = invite.expires_at or expires_in(invite.expires_in_days)
    fields = dict(
        created_by=user["id"], email=invite.email, phone=invite.phone,
        expires_at=expires_at, max_uses=invite.max_uses, notes=invite.notes,
    )

    if invite.code:
        try:
            row = data_service.create_invite(normalize_code(invite.code), **fields)
        except UniqueViolation:
            raise HTTPException(status_code=409, detail="Invite code already exists")
        return InviteResponse(**row)

    for _ in range(5):
        try:
            return InviteResponse(**data_service.create_invite(generate_invite_code(), **fields))
        except UniqueViolation:
            logger.warning("Generated invite code collided, retrying")
    raise HTTPException(status_code=500, detail="Could not generate a unique invite code")


@app.post("/api/invites/validate", response_model=InviteValidateResponse)
def validate_invite_code(payload: InviteValidateRequest):
    invite = data_service.get_invite_by_code(normalize_code(payload.code))
    valid, message = validate_invite(invite, email=payload.email, phone=payload.phone)
    return InviteValidateResponse(valid=valid, message=message)


def _owned_invite(invite_id: str, user: dict) -> dict:
    invite = data_service.get_invite(invite_id)
    if not invite:
        raise HTTPException(status_code=404, detail="Invite not found")
    if invite["created_by"] != user["id"] and not user.get("is_admin"):
        raise HTTPException(status_code=403, detail="Not authorized to change this invite")
    return invite


@app.put("/api/invites/{invite_id}", response_model=InviteResponse)
def update_invite(invite_id: str, update: InviteUpdate, user: dict = Depends(get_current_user)):
    _owned_invite(invite_id, user)
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="Nothing to update")
    return InviteResponse(**data_service.update_invite(invite_id, fields))


@app.delete("/api/invites/{invite_id}")
def revoke_invite(invite_id: str, user: dict = Depends(get_current_user)):
    _owned_invite(invite_id, user)
    data_service.delete_invite(invite_id)
    return {"message": "Invite revoked"}


# ============ REALTIME ============

@app.websocket("/api/ws/matches")
async def match_feed_socket(websocket: WebSocket):
    """Pushes newly created public matches. Requires ?token=<jwt>."""
    await websocket.accept()

    token = websocket.query_params.get("token")
    payload = verify_token(token) if token else None
    if not payload or not payload.get("user_id") or payload.get("purpose"):
        await websocket.close(code=1008, reason="Invalid authentication token")
        return

    feed = get_match_feed()
    await feed.connect(payload["user_id"], websocket)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.debug(f"Match feed client {payload['user_id']} went away")
    finally:
        await feed.disconnect(websocket)


# ============ CONFIGURATION ============

@app.get("/api/config")
def get_config():
    return {
        "durations": [{"value": d, "label": format_duration(d)} for d in DURATIONS],
        "max_players": {
            "options": MAX_PLAYERS_OPTIONS,
            "tournament": {
                "default": TOURNAMENT_MAX_PLAYERS_DEFAULT,
                "min": TOURNAMENT_MAX_PLAYERS_MIN,
                "max": TOURNAMENT_MAX_PLAYERS_MAX,
            },
        },
        "player_levels": PLAYER_LEVELS,
        "time_options": time_options(),
        "genders": GENDERS,
        "gender_requirements": GENDER_REQUIREMENTS,
        "venues": [LocationResponse(**row).model_dump(mode="json") for row in data_service.list_locations()],
    }


# ============ HEALTH CHECK ============

@app.get("/api/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT, reload=DEBUG)
