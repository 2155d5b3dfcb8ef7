"""In-memory session store with TTL and size-based eviction."""
from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional
from uuid import uuid4

from sketchstack.models.architecture_plan import ArchitecturePlan
from sketchstack.models.diagram_plan import DiagramPlan


logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    id: str
    architecture_plan: ArchitecturePlan
    diagram_plan: DiagramPlan
    drawio_xml: str
    excalidraw_scene: Dict[str, Any]
    cloud_provider: str
    description: str
    share_url: str = ""
    viewer_url: str = ""
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)


@dataclass
class _SessionLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


def new_session_id() -> str:
    return f"session_{uuid4().hex[:12]}"


class SessionStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> Optional[SessionRecord]:
        ...

    @abstractmethod
    def put(self, record: SessionRecord) -> None:
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def lock(self, session_id: str) -> Any:
        """Context manager serializing writers of one session."""


class InMemorySessionStore(SessionStore):
    """Process-local store. Entries expire ``ttl_seconds`` after their last write
    and the oldest-written entries are evicted beyond ``max_entries``."""

    def __init__(
        self,
        *,
        ttl_seconds: float = 3600.0,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._records: "OrderedDict[str, tuple[float, SessionRecord]]" = OrderedDict()
        self._locks: Dict[str, _SessionLock] = {}
        self._guard = threading.Lock()

    def _expired(self, written_at: float) -> bool:
        return self.ttl_seconds > 0 and self._clock() - written_at > self.ttl_seconds

    def _evict(self) -> None:
        for session_id, (written_at, _) in list(self._records.items()):
            if not self._expired(written_at):
                break
            logger.debug("Evicting expired session %s", session_id)
            self._drop(session_id)
        while self.max_entries > 0 and len(self._records) > self.max_entries:
            session_id = next(iter(self._records))
            logger.debug("Evicting session %s (store full)", session_id)
            self._drop(session_id)

    def _drop(self, session_id: str) -> None:
        self._records.pop(session_id, None)
        entry = self._locks.get(session_id)
        # A held lock outlives its record until the last holder leaves.
        if entry is not None and entry.users == 0:
            del self._locks[session_id]

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._guard:
            entry = self._records.get(session_id)
            if entry is None:
                return None
            if self._expired(entry[0]):
                self._drop(session_id)
                return None
            return entry[1]

    def put(self, record: SessionRecord) -> None:
        with self._guard:
            self._records.pop(record.id, None)
            self._records[record.id] = (self._clock(), record)
            self._evict()

    def delete(self, session_id: str) -> bool:
        with self._guard:
            existed = session_id in self._records
            self._drop(session_id)
            return existed

    def __len__(self) -> int:
        with self._guard:
            return len(self._records)

    @contextmanager
    def lock(self, session_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(session_id, _SessionLock())
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0 and session_id not in self._records:
                    self._locks.pop(session_id, None)
