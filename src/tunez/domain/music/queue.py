"""The play queue: ordered tracks, a cursor, shuffle and repeat policy.

Pure data-structure logic with no I/O. The queue is owned by a single
orchestrating task and is not safe for unsynchronized concurrent mutation.

The cursor always points at a queue *entry*, not a slot: moving rows or
toggling shuffle re-locates it so the same logical track stays current.
Entries are compared by identity, so the same track queued twice is two
distinct entries.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from tunez.domain.music.entities import Track
from tunez.domain.music.value_objects import RepeatMode
from tunez.domain.shared.constants import QueueConstants
from tunez.domain.shared.exceptions import (
    EndOfQueueError,
    QueueEmptyError,
    QueueFullError,
    QueueIndexError,
)
from tunez.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from tunez.domain.music.repository import QueueSnapshot

logger = logging.getLogger(__name__)

NO_CURRENT = QueueConstants.NO_CURRENT


class _QueueEntry:
    __slots__ = ("track",)

    def __init__(self, track: Track) -> None:
        self.track = track

    def __repr__(self) -> str:
        return f"_QueueEntry({self.track.id!s})"


class PlaybackQueue:
    """Ordered track list in play order with a cursor."""

    def __init__(
        self,
        *,
        max_size: int = QueueConstants.DEFAULT_MAX_SIZE,
        rng: random.Random | None = None,
    ) -> None:
        self._max_size = max_size
        self._rng = rng or random.Random()
        self._entries: list[_QueueEntry] = []
        # Sequential order, only kept while shuffled.
        self._original: list[_QueueEntry] | None = None
        self._cursor = NO_CURRENT
        self._repeat = RepeatMode.OFF

    # ── Read accessors ───────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return (
            f"PlaybackQueue(len={len(self._entries)}, cursor={self._cursor}, "
            f"shuffled={self.is_shuffled}, repeat={self._repeat.name})"
        )

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def current_index(self) -> int:
        return self._cursor

    @property
    def is_shuffled(self) -> bool:
        return self._original is not None

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._repeat

    def items(self) -> list[Track]:
        """Tracks in play order; a fresh list on every call."""
        return [entry.track for entry in self._entries]

    def current(self) -> Track:
        """The track under the cursor.

        Raises:
            QueueEmptyError: If the queue is empty.
        """
        if self._cursor == NO_CURRENT:
            raise QueueEmptyError()
        return self._entries[self._cursor].track

    def peek_next(self) -> Track | None:
        """The track ``next()`` would return, without moving the cursor."""
        index = self._next_index()
        if index is None:
            return None
        return self._entries[index].track

    def original_ranks(self) -> list[int] | None:
        """Position of each play-order entry in the sequential order.

        ``None`` when the queue is not shuffled.
        """
        if self._original is None:
            return None
        rank_of = {id(entry): rank for rank, entry in enumerate(self._original)}
        return [rank_of[id(entry)] for entry in self._entries]

    # ── Mutations ────────────────────────────────────────────────────

    def add(self, *tracks: Track) -> int:
        """Append tracks; the first one becomes current if the queue was empty.

        Returns:
            The new queue length.

        Raises:
            QueueFullError: If the tracks do not fit; nothing is added.
        """
        self._ensure_room(len(tracks))
        new_entries = [_QueueEntry(track) for track in tracks]
        self._entries.extend(new_entries)
        if self._original is not None:
            self._original.extend(new_entries)
        if self._cursor == NO_CURRENT and self._entries:
            self._cursor = 0

        logger.debug(LogTemplates.QUEUE_ADDED, len(new_entries), len(self._entries), self._cursor)
        return len(self._entries)

    def add_next(self, track: Track) -> int:
        """Insert a track right after the cursor.

        Returns:
            The play-order index of the inserted track.
        """
        self._ensure_room(1)
        entry = _QueueEntry(track)

        if self._cursor == NO_CURRENT:
            self._entries = [entry]
            if self._original is not None:
                self._original = [entry]
            self._cursor = 0
            logger.debug(LogTemplates.QUEUE_ADDED_NEXT, track.title)
            return 0

        current = self._entries[self._cursor]
        index = self._cursor + 1
        self._entries.insert(index, entry)
        if self._original is not None:
            self._original.insert(self._index_of(self._original, current) + 1, entry)

        logger.debug(LogTemplates.QUEUE_ADDED_NEXT, track.title)
        return index

    def remove(self, index: int) -> Track:
        """Delete the track at ``index`` and keep the cursor consistent.

        Raises:
            QueueIndexError: If ``index`` is out of range.
        """
        self._check_index(index)
        entry = self._entries.pop(index)
        if self._original is not None:
            del self._original[self._index_of(self._original, entry)]

        if not self._entries:
            self._cursor = NO_CURRENT
        elif index < self._cursor:
            self._cursor -= 1
        elif index == self._cursor and self._cursor >= len(self._entries):
            self._cursor = len(self._entries) - 1

        logger.debug(LogTemplates.QUEUE_REMOVED, index, len(self._entries), self._cursor)
        return entry.track

    def move(self, from_index: int, to_index: int) -> None:
        """Move one track, keeping the cursor on the same logical track.

        Raises:
            QueueIndexError: If either index is out of range.
        """
        self._check_index(from_index)
        self._check_index(to_index)
        if from_index == to_index:
            return

        entry = self._entries.pop(from_index)
        self._entries.insert(to_index, entry)

        cursor = self._cursor
        if cursor == from_index:
            self._cursor = to_index
        elif from_index < cursor <= to_index:
            self._cursor = cursor - 1
        elif to_index <= cursor < from_index:
            self._cursor = cursor + 1

        logger.debug(LogTemplates.QUEUE_MOVED, from_index, to_index, self._cursor)

    def next(self) -> Track:
        """Advance the cursor under the repeat policy.

        ``ONE`` returns the current track without moving, ``ALL`` wraps to
        the first track.

        Raises:
            QueueEmptyError: If the queue is empty.
            EndOfQueueError: At the last track with repeat off; the cursor
                does not move.
        """
        if not self._entries:
            raise QueueEmptyError()
        index = self._next_index()
        if index is None:
            raise EndOfQueueError("next")
        self._cursor = index
        return self._entries[index].track

    def prev(self) -> Track:
        """Step the cursor back; wraps to the last track only under ``ALL``.

        Raises:
            QueueEmptyError: If the queue is empty.
            EndOfQueueError: At the first track unless repeat is ``ALL``.
        """
        if not self._entries:
            raise QueueEmptyError()
        if self._cursor > 0:
            self._cursor -= 1
        elif self._repeat is RepeatMode.ALL:
            self._cursor = len(self._entries) - 1
        else:
            raise EndOfQueueError("previous")
        return self._entries[self._cursor].track

    def set_current(self, index: int) -> Track:
        """Jump to ``index``.

        Raises:
            QueueIndexError: If ``index`` is out of range.
        """
        self._check_index(index)
        self._cursor = index
        return self._entries[index].track

    def toggle_shuffle(self) -> bool:
        """Switch between sequential and shuffled order.

        The current track stays current across the toggle. Turning shuffle
        off restores the sequential order, including tracks added while
        shuffled.

        Returns:
            The new shuffle flag.
        """
        current = self._current_entry()

        if self._original is None:
            self._original = list(self._entries)
            self._rng.shuffle(self._entries)
        else:
            self._entries = self._original
            self._original = None

        if current is not None:
            self._cursor = self._index_of(self._entries, current)

        logger.debug(LogTemplates.QUEUE_SHUFFLE_CHANGED, "on" if self.is_shuffled else "off")
        return self.is_shuffled

    def cycle_repeat(self) -> RepeatMode:
        """Cycle OFF -> ALL -> ONE -> OFF and return the new mode."""
        self._repeat = self._repeat.next_mode()
        logger.debug(LogTemplates.QUEUE_REPEAT_CHANGED, self._repeat.name)
        return self._repeat

    def clear(self) -> None:
        """Empty the queue; the shuffle flag and repeat mode are kept."""
        self._entries = []
        if self._original is not None:
            self._original = []
        self._cursor = NO_CURRENT
        logger.debug(LogTemplates.QUEUE_CLEARED)

    def restore(self, snapshot: QueueSnapshot) -> None:
        """Replace the whole state with a persisted snapshot.

        The snapshot's tracks are in play order. When it was shuffled and
        carries original ranks, the sequential order is rebuilt from them so
        a later unshuffle lands where the user left off; otherwise the play
        order doubles as the sequential order.
        """
        tracks = snapshot.tracks[: self._max_size]
        entries = [_QueueEntry(track) for track in tracks]

        original: list[_QueueEntry] | None = None
        if snapshot.shuffled:
            ranks = snapshot.original_ranks
            if ranks is not None and len(ranks) == len(snapshot.tracks):
                ranked = sorted(zip(ranks[: len(entries)], range(len(entries))))
                original = [entries[i] for _, i in ranked]
            else:
                original = list(entries)

        self._entries = entries
        self._original = original
        self._repeat = snapshot.repeat_mode
        self._cursor = clamp_cursor(snapshot.current_index, len(entries))

    # ── Internals ────────────────────────────────────────────────────

    def _next_index(self) -> int | None:
        if self._cursor == NO_CURRENT:
            return None
        if self._repeat is RepeatMode.ONE:
            return self._cursor
        if self._cursor + 1 < len(self._entries):
            return self._cursor + 1
        if self._repeat is RepeatMode.ALL:
            return 0
        return None

    def _current_entry(self) -> _QueueEntry | None:
        if self._cursor == NO_CURRENT:
            return None
        return self._entries[self._cursor]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise QueueIndexError(index, len(self._entries))

    def _ensure_room(self, count: int) -> None:
        if len(self._entries) + count > self._max_size:
            raise QueueFullError(self._max_size)

    @staticmethod
    def _index_of(entries: list[_QueueEntry], target: _QueueEntry) -> int:
        for index, entry in enumerate(entries):
            if entry is target:
                return index
        raise ValueError(f"{target!r} is not queued")


def clamp_cursor(index: int, length: int) -> int:
    """Pull a possibly stale cursor back into ``[-1, length - 1]``."""
    if length == 0:
        return NO_CURRENT
    if index >= length:
        return length - 1
    if index < 0:
        return 0
    return index
