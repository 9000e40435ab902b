# artifind/storage.py
"""
In-memory storage.

``Repository`` is the interface the routes depend on;
``InMemoryRepository`` keeps records in insertion order behind a lock,
which is all the catalogue needs today. A database-backed repository
only has to implement the same five methods.

``ChatSessionStore`` keeps the recent messages of each chat session.
"""

import abc
import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class Repository(abc.ABC, Generic[M]):
    """Storage port for catalogue records identified by a string ``id``."""

    @abc.abstractmethod
    def list(self) -> List[M]:
        """Return a snapshot of every record, in storage order."""

    @abc.abstractmethod
    def get(self, record_id: str) -> Optional[M]: ...

    @abc.abstractmethod
    def insert(self, record: M) -> M: ...

    @abc.abstractmethod
    def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[M]:
        """Apply ``changes`` to a record; ``None`` if it does not exist."""

    @abc.abstractmethod
    def delete(self, record_id: str) -> bool: ...

    @abc.abstractmethod
    def next_id(self) -> str: ...


class InMemoryRepository(Repository[M]):
    def __init__(self, model: Type[M], records: Iterable[M] = ()):
        self._model = model
        self._records: List[M] = list(records)
        self._lock = threading.Lock()
        self._last_id = max((_numeric_id(r) for r in self._records), default=0)

    def list(self) -> List[M]:
        with self._lock:
            return list(self._records)

    def get(self, record_id: str) -> Optional[M]:
        with self._lock:
            return next((r for r in self._records if r.id == record_id), None)

    def insert(self, record: M) -> M:
        with self._lock:
            if any(r.id == record.id for r in self._records):
                raise ValueError(f"{self._model.__name__} {record.id!r} already exists")
            self._records.append(record)
            self._last_id = max(self._last_id, _numeric_id(record))
        logger.info("Inserted %s %s", self._model.__name__, record.id)
        return record

    def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[M]:
        with self._lock:
            for index, current in enumerate(self._records):
                if current.id != record_id:
                    continue
                merged = current.model_dump()
                merged.update(changes)
                merged["id"] = current.id
                # Re-validate so ingestion rules (e.g. price parsing) apply to updates too
                updated = self._model.model_validate(merged)
                self._records[index] = updated
                break
            else:
                return None
        logger.info("Updated %s %s (%s)", self._model.__name__, record_id, ", ".join(sorted(changes)))
        return updated

    def delete(self, record_id: str) -> bool:
        with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.id != record_id]
            deleted = len(self._records) != before
        if deleted:
            logger.info("Deleted %s %s", self._model.__name__, record_id)
        return deleted

    def next_id(self) -> str:
        # Ids are never reused, even after the newest record is deleted
        with self._lock:
            self._last_id += 1
            return str(self._last_id)


def _numeric_id(record: BaseModel) -> int:
    try:
        return int(getattr(record, "id"))
    except (TypeError, ValueError):
        return 0


class ChatSessionStore:
    """Recent chat messages per session, oldest first.

    At most ``max_sessions`` sessions are kept; appending to a new session
    when full drops the least recently used one.
    """

    def __init__(self, max_messages: int = 20, max_sessions: int = 1000):
        self.max_messages = max_messages
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, List[Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def append(self, session_id: str, *messages: Any) -> int:
        """Add messages to a session and return how many it has seen in total.

        Only the last ``max_messages`` are kept, but the returned length
        counts the messages of this exchange as well as the kept history,
        mirroring what the client sees as the conversation length.
        """
        with self._lock:
            history = self._sessions.setdefault(session_id, [])
            self._sessions.move_to_end(session_id)
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Evicted chat session %s", evicted)
            history.extend(messages)
            length = len(history)
            del history[:-self.max_messages]
        return length

    def history(self, session_id: str, limit: Optional[int] = None) -> List[Any]:
        with self._lock:
            history = list(self._sessions.get(session_id, []))
        if limit is not None and limit > 0:
            return history[-limit:]
        return history

    def total(self, session_id: str) -> int:
        with self._lock:
            return len(self._sessions.get(session_id, []))

    def clear(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None
