"""In-memory cache of slowly changing Jira reference data.

Entries never expire by time. They are dropped only when a mutation removes
or clears them. Every operation holds the store lock, so readers observe a
collection either before or after a ``clear``/``try_remove``, never halfway.
"""

import logging
import threading
from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from .remote.models import ProjectVersion, RemoteProject

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyedStore(Generic[T]):
    """Thread-safe keyed collection.

    Args:
        key: Function returning the key of an entry
        name: Name used in log messages
    """

    def __init__(self, key: Callable[[T], str], name: str = "entries"):
        self._key = key
        self._name = name
        self._entries: Dict[str, T] = {}
        self._lock = threading.RLock()

    def try_add(self, entries: Iterable[T]) -> None:
        """Merge entries into the store. Existing keys are overwritten."""
        with self._lock:
            for entry in entries:
                self._entries[self._key(entry)] = entry

    def try_remove(self, key: str) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug(f"Removed {key} from cached {self._name}")
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug(f"Cleared cached {self._name}")

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._entries.get(key)

    def values(self) -> List[T]:
        """Snapshot of all entries."""
        with self._lock:
            return list(self._entries.values())

    def select(self, predicate: Callable[[T], bool]) -> List[T]:
        with self._lock:
            return [e for e in self._entries.values() if predicate(e)]

    def any(self, predicate: Optional[Callable[[T], bool]] = None) -> bool:
        with self._lock:
            if predicate is None:
                return bool(self._entries)
            return any(predicate(e) for e in self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries


class JiraCache:
    """Caches shared by every service of one ``Jira`` instance."""

    def __init__(self):
        self.projects: KeyedStore[RemoteProject] = KeyedStore(
            lambda p: p.key, "projects"
        )
        self.versions: KeyedStore[ProjectVersion] = KeyedStore(
            lambda v: v.id, "versions"
        )

    def clear(self) -> None:
        self.projects.clear()
        self.versions.clear()
