"""
In-memory store of each chat's most recent search, with time-based expiry.
"""

import logging
import time
from collections.abc import Callable, Iterable
from typing import Hashable

from flacbot.models.track import Session, Track

log = logging.getLogger(__name__)


class SessionStore:
    """
    Maps an owner id (a chat or user id) to its latest ``Session``.

    One session per owner, last writer wins. None of the methods await, so each
    call runs to completion on the event loop without interleaving.
    """

    DEFAULT_MAX_AGE = 30 * 60

    def __init__(
        self,
        max_age: float = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initializes the store.

        Args:
            max_age: Seconds of inactivity after which a session is swept.
            clock: Returns the current time in seconds. Injectable for tests.
        """
        self.max_age = max_age
        self._clock = clock
        self._sessions: dict[Hashable, Session] = {}

    def put(self, owner_id: Hashable, query: str, results: Iterable[Track]) -> Session:
        """Replaces the owner's session with a new one stamped with the current time."""
        session = Session(
            owner_id=owner_id,
            query=query,
            results=tuple(results),
            created_at=self._clock(),
        )
        self._sessions[owner_id] = session
        return session

    def get(self, owner_id: Hashable) -> Session | None:
        return self._sessions.get(owner_id)

    def resolve_track(self, owner_id: Hashable, track_id: str) -> Track | None:
        """Finds a track by id in the owner's latest results."""
        session = self._sessions.get(owner_id)
        if session is None:
            return None
        return session.find(str(track_id))

    def delete(self, owner_id: Hashable) -> bool:
        return self._sessions.pop(owner_id, None) is not None

    def sweep_expired(
        self, now: float | None = None, max_age: float | None = None
    ) -> int:
        """
        Removes every session older than ``max_age`` seconds at ``now``.

        A session whose age equals ``max_age`` exactly is kept.

        Returns:
            The number of sessions removed.
        """
        now = self._clock() if now is None else now
        max_age = self.max_age if max_age is None else max_age
        expired = [
            owner_id
            for owner_id, session in self._sessions.items()
            if now - session.created_at > max_age
        ]
        for owner_id in expired:
            self.delete(owner_id)
        if expired:
            log.debug(f"Session sweep: removed {len(expired)} expired session(s).")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, owner_id: object) -> bool:
        return owner_id in self._sessions
