"""Persistence of quiz state on a key-value store.

The whole state lives under one key as a versioned JSON envelope
(`StoredState`). Storage problems never reach the caller as crashes:

- unreadable, invalid or wrong-version data is deleted and treated as absent;
- a quota failure drops the completed-results history and retries once;
- an unavailable backend turns every operation into a logged no-op.

Only a quota failure that survives the retry propagates.
"""

import logging
from typing import Dict, List, Optional, Protocol

from pydantic import ValidationError

from .config import settings
from .errors import (
    StorageCorruptError,
    StorageError,
    StorageQuotaError,
    StorageUnavailableError,
)
from .models import QuizResult, Session, StoredState
from .timer import Clock, system_clock

logger = logging.getLogger(__name__)


# --- Backends ---
class KeyValueStore(Protocol):
    """Durable string store.

    `set` raises `StorageQuotaError` when the value does not fit; `get` raises
    `StorageCorruptError` when the stored bytes are not text; any method
    raises `StorageUnavailableError` when the backend cannot be reached.
    """

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def exists(self, key: str) -> bool: ...


class MemoryStore:
    """In-process store with an optional byte quota."""

    def __init__(self, quota_bytes: Optional[int] = None, available: bool = True):
        self.data: Dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.available = available

    def _check_available(self) -> None:
        if not self.available:
            raise StorageUnavailableError("Memory store is disabled")

    def get(self, key: str) -> Optional[str]:
        self._check_available()
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_available()
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self.data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaError(f"Quota of {self.quota_bytes} bytes exceeded")
        self.data[key] = value

    def remove(self, key: str) -> None:
        self._check_available()
        self.data.pop(key, None)

    def exists(self, key: str) -> bool:
        self._check_available()
        return key in self.data


# --- Schema validation ---
def parse_stored_state(raw: Optional[str]) -> Optional[StoredState]:
    """Strictly validate a stored envelope; None if it is not usable."""
    if raw is None or not raw.strip():
        return None
    try:
        state = StoredState.model_validate_json(raw, strict=True)
    except ValidationError as e:
        logger.warning(f"Invalid stored quiz state ({e.error_count()} errors)")
        return None
    if state.version != settings.SCHEMA_VERSION:
        logger.warning(
            f"Schema version mismatch. Expected {settings.SCHEMA_VERSION}, "
            f"got {state.version}."
        )
        return None
    return state


def is_valid_stored_state(raw: Optional[str]) -> bool:
    return parse_stored_state(raw) is not None


# --- Quiz storage ---
class QuizStorage:
    def __init__(
        self,
        store: KeyValueStore,
        key: str = settings.STORAGE_KEY,
        clock: Clock = system_clock,
    ):
        self.store = store
        self.key = key
        self.clock = clock

    def save(self, session: Session) -> None:
        state = StoredState(
            version=settings.SCHEMA_VERSION,
            current_session=session,
            completed_sessions=self.completed_results(),
            last_updated=self.clock(),
        )
        self._write(state)

    def save_result(self, result: QuizResult) -> None:
        """Append a result to the history and drop the current session."""
        history = [*self.completed_results(), result]
        state = StoredState(
            version=settings.SCHEMA_VERSION,
            current_session=None,
            completed_sessions=history[-settings.MAX_COMPLETED_RESULTS :],
            last_updated=self.clock(),
        )
        self._write(state)

    def load(self) -> Optional[StoredState]:
        try:
            raw = self.store.get(self.key)
        except StorageUnavailableError as e:
            logger.warning(f"Storage is not available: {e}")
            return None
        except StorageCorruptError as e:
            logger.warning(f"Clearing undecodable quiz state under {self.key}: {e}")
            self.clear()
            return None
        if raw is None:
            return None

        state = parse_stored_state(raw)
        if state is None:
            logger.warning(f"Clearing corrupted quiz state under {self.key}")
            self.clear()
        return state

    def clear(self) -> None:
        try:
            self.store.remove(self.key)
        except StorageError as e:
            logger.error(f"Failed to clear quiz state: {e}")

    def has_saved(self) -> bool:
        try:
            return self.store.exists(self.key)
        except StorageError as e:
            logger.error(f"Failed to check for saved quiz state: {e}")
            return False

    def completed_results(self) -> List[QuizResult]:
        state = self.load()
        return list(state.completed_sessions) if state else []

    def stored_size(self) -> int:
        """Size of the stored envelope in UTF-8 bytes."""
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.error(f"Failed to get stored state size: {e}")
            return 0
        return len(raw.encode("utf-8")) if raw else 0

    def _write(self, state: StoredState) -> None:
        try:
            try:
                self.store.set(self.key, state.to_json())
            except StorageQuotaError:
                logger.warning("Storage quota exceeded. Clearing completed sessions and retrying.")
                trimmed = state.model_copy(update={"completed_sessions": []})
                try:
                    self.store.set(self.key, trimmed.to_json())
                except StorageQuotaError as e:
                    logger.error(f"Failed to save quiz state after clearing old data: {e}")
                    raise
        except StorageUnavailableError as e:
            logger.warning(f"Storage is not available. Quiz state will not be persisted: {e}")
