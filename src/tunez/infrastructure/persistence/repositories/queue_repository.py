"""SQLite implementation of the queue repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiosqlite
from pydantic import ValidationError

from tunez.domain.music.entities import Track
from tunez.domain.music.queue import clamp_cursor
from tunez.domain.music.repository import QueueRepository, QueueSnapshot
from tunez.domain.music.value_objects import RepeatMode
from tunez.domain.shared.constants import DatabaseTables
from tunez.domain.shared.datetime_utils import UtcDateTime
from tunez.domain.shared.exceptions import PersistenceError
from tunez.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from tunez.domain.music.queue import PlaybackQueue

    from ..database import Database

logger = logging.getLogger(__name__)

_ITEMS = DatabaseTables.QUEUE_ITEMS
_STATE = DatabaseTables.QUEUE_STATE


class SQLiteQueueRepository(QueueRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def save(self, queue: PlaybackQueue, provider_id: str, profile_id: str) -> None:
        tracks = queue.items()
        ranks = queue.original_ranks()
        added_at = UtcDateTime.now().unix_seconds

        try:
            async with self._db.transaction() as conn:
                await conn.execute(f"DELETE FROM {_ITEMS}")
                await conn.executemany(
                    f"""
                    INSERT INTO {_ITEMS} (
                        position, track_id, provider_id, track_json, added_at, original_position
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        self._track_to_params(
                            track,
                            position,
                            provider_id,
                            added_at,
                            ranks[position] if ranks is not None else None,
                        )
                        for position, track in enumerate(tracks)
                    ],
                )
                await conn.execute(
                    f"""
                    UPDATE {_STATE}
                    SET current_index = ?, shuffle_enabled = ?, repeat_mode = ?, profile_id = ?
                    WHERE id = 1
                    """,
                    (
                        queue.current_index,
                        int(queue.is_shuffled),
                        queue.repeat_mode.value,
                        profile_id,
                    ),
                )
        except (aiosqlite.Error, ValueError) as e:
            raise PersistenceError(
                "save", ErrorMessages.SNAPSHOT_SAVE_FAILED.format(error=e)
            ) from e

        logger.debug(LogTemplates.QUEUE_SAVED, len(tracks), profile_id)

    async def load(self) -> QueueSnapshot:
        try:
            rows = await self._db.fetch_all(f"SELECT * FROM {_ITEMS} ORDER BY position ASC")
            state = await self._db.fetch_one(f"SELECT * FROM {_STATE} WHERE id = 1")
        except aiosqlite.Error as e:
            raise PersistenceError(
                "load", ErrorMessages.SNAPSHOT_LOAD_FAILED.format(error=e)
            ) from e

        tracks: list[Track] = []
        ranks: list[int | None] = []
        provider_id = ""
        for row in rows:
            track = self._row_to_track(row)
            if track is None:
                continue
            tracks.append(track)
            ranks.append(self._parse_rank(row))
            provider_id = provider_id or row["provider_id"]

        state = state or {}
        shuffled = bool(state.get("shuffle_enabled", 0))

        repeat_mode = RepeatMode.from_persisted(state.get("repeat_mode", 0))
        if repeat_mode is None:
            logger.warning(LogTemplates.QUEUE_UNKNOWN_REPEAT, state.get("repeat_mode"))
            repeat_mode = RepeatMode.OFF

        original_ranks: list[int] | None = None
        if shuffled and ranks and all(rank is not None for rank in ranks):
            original_ranks = [rank for rank in ranks if rank is not None]

        cursor = state.get("current_index", -1)
        if not _is_int(cursor):
            logger.warning(LogTemplates.QUEUE_BAD_CURSOR, cursor)
            cursor = -1

        try:
            return QueueSnapshot(
                tracks=tracks,
                current_index=clamp_cursor(cursor, len(tracks)),
                shuffled=shuffled,
                repeat_mode=repeat_mode,
                profile_id=state.get("profile_id") or "",
                provider_id=provider_id,
                original_ranks=original_ranks,
            )
        except ValidationError as e:
            raise PersistenceError(
                "load", ErrorMessages.SNAPSHOT_LOAD_FAILED.format(error=e)
            ) from e

    async def clear(self) -> None:
        try:
            async with self._db.transaction() as conn:
                await conn.execute(f"DELETE FROM {_ITEMS}")
                await conn.execute(
                    f"""
                    UPDATE {_STATE}
                    SET current_index = -1, shuffle_enabled = 0, repeat_mode = 0, profile_id = ''
                    WHERE id = 1
                    """
                )
        except aiosqlite.Error as e:
            raise PersistenceError(
                "clear", ErrorMessages.SNAPSHOT_CLEAR_FAILED.format(error=e)
            ) from e

        logger.debug(LogTemplates.QUEUE_SNAPSHOT_CLEARED)

    @staticmethod
    def _parse_rank(row: dict[str, Any]) -> int | None:
        rank = row.get("original_position")
        if rank is None:
            return None
        if not _is_int(rank) or rank < 0:
            logger.warning(LogTemplates.QUEUE_BAD_RANK, rank, row.get("position"))
            return None
        return rank

    @staticmethod
    def _row_to_track(row: dict[str, Any]) -> Track | None:
        try:
            return Track.model_validate_json(row["track_json"])
        except (ValidationError, TypeError) as e:
            logger.warning(LogTemplates.QUEUE_ROW_SKIPPED, row.get("position"), e)
            return None

    @staticmethod
    def _track_to_params(
        track: Track,
        position: int,
        provider_id: str,
        added_at: int,
        original_position: int | None,
    ) -> tuple[Any, ...]:
        return (
            position,
            str(track.id),
            provider_id,
            track.model_dump_json(exclude_none=True),
            added_at,
            original_position,
        )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
