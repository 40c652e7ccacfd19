"""
In-memory, expiring cache of video sessions.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from tubechat.config import config
from tubechat.models.schemas import ConversationMessage, VideoSession
from tubechat.utils.error_handling import SessionNotFoundError
from tubechat.utils.logger import logging


@dataclass
class _CacheEntry:
    session: VideoSession
    created_at: float
    last_access: float


class VideoSessionStore:
    """
    Cache mapping video IDs to sessions, safe for concurrent asyncio tasks.

    An entry expires ``absolute_ttl`` seconds after it was last ``put`` or
    ``sliding_ttl`` seconds after it was last read or written, whichever comes
    first. Expired entries are dropped when touched and by ``purge_expired``.

    ``update_summary`` and ``add_conversation_message`` run their
    read-modify-write under a lock owned by the video ID, so concurrent
    updates to one session are never lost while updates to different
    sessions never wait on each other.
    """

    def __init__(
        self,
        absolute_ttl: float = config.SESSION_ABSOLUTE_TTL,
        sliding_ttl: float = config.SESSION_SLIDING_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize an empty store.

        Args:
            absolute_ttl: Seconds an entry may live after it was stored
            sliding_ttl: Seconds an entry may stay idle
            clock: Monotonic time source, in seconds
        """
        self.absolute_ttl = absolute_ttl
        self.sliding_ttl = sliding_ttl
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, video_id: str) -> bool:
        entry = self._entries.get(video_id)
        return entry is not None and not self._is_expired(entry, self._clock())

    async def get(self, video_id: str) -> Optional[VideoSession]:
        """Return the cached session, or None on a miss."""
        entry = self._live_entry(video_id)
        if entry is None:
            logging.debug(f"Cache miss for video session: {video_id}")
            return None

        logging.debug(f"Cache hit for video session: {video_id}")
        return entry.session

    async def exists(self, video_id: str) -> bool:
        """Check whether a live session is cached for the video."""
        return self._live_entry(video_id) is not None

    async def put(self, session: VideoSession) -> None:
        """Insert or replace a session, restarting both expiry clocks."""
        now = self._clock()
        self._entries[session.video_id] = _CacheEntry(session=session, created_at=now, last_access=now)
        logging.info(f"Cached video session: {session.video_id}")

    async def update_summary(self, video_id: str, summary: str) -> VideoSession:
        """
        Set the summary of a cached session.

        Args:
            video_id: ID of the video
            summary: Summary text

        Returns:
            The stored, updated session

        Raises:
            SessionNotFoundError: If no live session exists for the video
        """
        async with self._lock_for(video_id, "update summary"):
            updated = self._replace(video_id, "update summary", lambda s: s.with_summary(summary))

        logging.info(f"Updated summary for video session: {video_id}")
        return updated

    async def add_conversation_message(self, video_id: str, message: ConversationMessage) -> VideoSession:
        """
        Append a message to a cached session's conversation history.

        Args:
            video_id: ID of the video
            message: Message to append

        Returns:
            The stored, updated session

        Raises:
            SessionNotFoundError: If no live session exists for the video
        """
        async with self._lock_for(video_id, "add conversation message"):
            updated = self._replace(video_id, "add conversation message", lambda s: s.with_message(message))

        logging.debug(f"Added {message.role.value} message to video session: {video_id}")
        return updated

    def purge_expired(self) -> int:
        """
        Drop every expired entry together with its idle lock.

        Returns:
            Number of entries evicted
        """
        now = self._clock()
        expired = [vid for vid, entry in self._entries.items() if self._is_expired(entry, now)]
        for video_id in expired:
            self._evict(video_id)

        orphaned = [vid for vid, lock in self._locks.items() if vid not in self._entries and not lock.locked()]
        for video_id in orphaned:
            del self._locks[video_id]

        if expired:
            logging.info(f"Evicted {len(expired)} expired video sessions")
        return len(expired)

    def clear(self) -> None:
        """Drop all sessions and locks."""
        self._entries.clear()
        self._locks.clear()
        logging.info("Cleared video session cache")

    def _is_expired(self, entry: _CacheEntry, now: float) -> bool:
        return (
            now - entry.created_at >= self.absolute_ttl
            or now - entry.last_access >= self.sliding_ttl
        )

    def _live_entry(self, video_id: str) -> Optional[_CacheEntry]:
        """Return the entry if it is still live, refreshing its sliding window."""
        entry = self._entries.get(video_id)
        if entry is None:
            return None

        now = self._clock()
        if self._is_expired(entry, now):
            logging.debug(f"Video session expired: {video_id}")
            self._evict(video_id)
            return None

        entry.last_access = now
        return entry

    def _evict(self, video_id: str) -> None:
        self._entries.pop(video_id, None)
        lock = self._locks.get(video_id)
        if lock is not None and not lock.locked():
            del self._locks[video_id]

    def _lock_for(self, video_id: str, action: str) -> asyncio.Lock:
        # Reject before creating a lock so failed updates leave nothing behind
        if self._live_entry(video_id) is None:
            self._raise_not_found(video_id, action)
        return self._locks.setdefault(video_id, asyncio.Lock())

    def _replace(self, video_id: str, action: str, change: Callable[[VideoSession], VideoSession]) -> VideoSession:
        # The entry may have been evicted while we waited for the lock
        entry = self._live_entry(video_id)
        if entry is None:
            self._raise_not_found(video_id, action)

        updated = change(entry.session)
        self._entries[video_id] = _CacheEntry(
            session=updated,
            created_at=entry.created_at,
            last_access=entry.last_access,
        )
        return updated

    def _raise_not_found(self, video_id: str, action: str):
        logging.warning(f"Attempted to {action} for non-existent video session: {video_id}")
        raise SessionNotFoundError(
            f"Video session with ID '{video_id}' not found in cache.",
            video_id=video_id,
        )
