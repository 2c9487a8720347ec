"""Concrete implementations for the persistent message store."""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from .errors import PersistenceError
from .models import ChatMessage

logger = logging.getLogger(__name__)

STORAGE_KEY = "quanta.chat.v2"

_MESSAGES = TypeAdapter(List[ChatMessage])


def encode(messages: List[ChatMessage]) -> str:
    """Serialize a message sequence to the persisted JSON array."""
    return _MESSAGES.dump_json(list(messages), by_alias=True).decode("utf-8")


def decode(raw: str) -> List[ChatMessage]:
    """Parse a persisted JSON array back into messages.

    Raises
    ------
    PersistenceError
        If ``raw`` is not valid JSON or does not match the message schema.
    """
    try:
        return _MESSAGES.validate_json(raw)
    except ValidationError as e:
        raise PersistenceError(f"Unreadable conversation data: {e}") from e


class Store(ABC):
    """Interface for the single durable slot holding the conversation.

    Persistence is best-effort: no method raises. ``save`` and ``clear``
    return whether they succeeded, and the last failure is kept on
    ``last_error`` so callers and tests can inspect it.
    """

    def __init__(self, key: str = STORAGE_KEY):
        self.key = key
        self.last_error: Optional[PersistenceError] = None

    @abstractmethod
    def load(self) -> List[ChatMessage]:
        """Loads the conversation, or an empty list if nothing usable is stored."""
        pass

    @abstractmethod
    def save(self, messages: List[ChatMessage]) -> bool:
        """Replaces the stored conversation with ``messages``."""
        pass

    @abstractmethod
    def clear(self) -> bool:
        """Removes the stored conversation."""
        pass

    def _failed(self, action: str, error: Exception) -> None:
        if not isinstance(error, PersistenceError):
            error = PersistenceError(str(error))
        self.last_error = error
        logger.warning("Could not %s conversation %r: %s", action, self.key, error)


class InMemory(Store):
    """Keeps serialized conversations in a dictionary of slots.

    Passing the same ``slots`` dictionary to several instances simulates a
    page reload against the same browser storage.
    """

    def __init__(self, key: str = STORAGE_KEY, slots: Optional[Dict[str, str]] = None):
        super().__init__(key)
        self._slots: Dict[str, str] = slots if slots is not None else {}

    def load(self) -> List[ChatMessage]:
        raw = self._slots.get(self.key)
        if raw is None:
            return []
        try:
            return decode(raw)
        except PersistenceError as e:
            self._failed("load", e)
            return []

    def save(self, messages: List[ChatMessage]) -> bool:
        try:
            self._slots[self.key] = encode(messages)
        except (TypeError, ValueError) as e:
            self._failed("save", e)
            return False
        self.last_error = None
        return True

    def clear(self) -> bool:
        self._slots.pop(self.key, None)
        self.last_error = None
        return True


class File(Store):
    """Saves the conversation as a JSON file named after the storage key."""

    def __init__(self, directory: str, key: str = STORAGE_KEY):
        super().__init__(key)
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def load(self) -> List[ChatMessage]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            self._failed("load", e)
            return []
        try:
            return decode(raw)
        except PersistenceError as e:
            self._failed("load", e)
            return []

    def save(self, messages: List[ChatMessage]) -> bool:
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(encode(messages), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            self._failed("save", e)
            self._discard(tmp_path)
            return False
        self.last_error = None
        return True

    def _discard(self, tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", tmp_path, e)

    def clear(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            self._failed("clear", e)
            return False
        self.last_error = None
        return True
