"""
WebSocket fan-out for newly created public matches.

Delivery is best-effort: a message goes to whoever is connected at that
moment, nothing is queued for clients that reconnect later, and a socket that
fails a send is dropped.
"""

import asyncio
import json
import logging
from typing import Optional

from fastapi import WebSocket

from calendar_links import format_match_date, format_time

logger = logging.getLogger(__name__)


def new_match_message(match: dict) -> dict:
    body = (
        f"{match.get('title') or 'Match'} at {match['location']}\n"
        f"{format_match_date(match['date'])} at {format_time(match['time'])}"
    )
    return {
        "type": "match_created",
        "title": "New Padel Match Available!",
        "body": body,
        "url": f"/matches/{match['id']}",
        "match": match,
    }


class MatchFeed:
    """Set of connected sockets receiving match notifications."""

    def __init__(self):
        self.connections: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, user_id: str, websocket: WebSocket):
        async with self._lock:
            self.connections[websocket] = user_id
        logger.info(f"Match feed connected for user {user_id} ({len(self.connections)} open)")

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            user_id = self.connections.pop(websocket, None)
        if user_id:
            logger.info(f"Match feed disconnected for user {user_id}")

    async def broadcast(self, message: dict) -> int:
        """Send to every open socket; returns how many received it."""
        async with self._lock:
            targets = list(self.connections)

        payload = json.dumps(message, default=str)
        delivered = 0
        dead = []
        for websocket in targets:
            try:
                await websocket.send_text(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping match feed socket after send error: {e}")
                dead.append(websocket)

        if dead:
            async with self._lock:
                for websocket in dead:
                    self.connections.pop(websocket, None)
        return delivered

    async def announce_match(self, match: dict) -> int:
        if match.get("is_private"):
            return 0
        return await self.broadcast(new_match_message(match))


_feed: Optional[MatchFeed] = None


def get_match_feed() -> MatchFeed:
    global _feed
    if _feed is None:
        _feed = MatchFeed()
    return _feed
