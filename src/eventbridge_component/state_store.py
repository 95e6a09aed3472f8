"""Persisted state storage.

The hosting framework owns where state lives; anything implementing
:class:`StateStore` can be handed to the component. The CLI uses
:class:`JsonFileStateStore`, one JSON document per instance and stage.
"""

import json
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from .models import PersistedState

logger = logging.getLogger(__name__)


@runtime_checkable
class StateStore(Protocol):
    """
    Protocol for persisted state backends.

    ``load`` returns an empty state when nothing was saved yet. Callers must
    not run overlapping deploy/remove operations against the same store;
    no locking is done here.
    """

    def load(self) -> PersistedState: ...

    def save(self, state: PersistedState) -> None: ...

    def clear(self) -> None: ...


class InMemoryStateStore:
    """State kept in memory, for embedding and tests."""

    def __init__(self, state: PersistedState | None = None) -> None:
        self._data = state.to_dict() if state else {}

    def load(self) -> PersistedState:
        return PersistedState.from_dict(self._data)

    def save(self, state: PersistedState) -> None:
        self._data = state.to_dict()

    def clear(self) -> None:
        self._data = {}


class JsonFileStateStore:
    """
    State kept in ``{directory}/{instance_name}-{stage}.json``.

    Writes go to a temporary file that replaces the document, so a crash
    mid-write never leaves a truncated state file behind.
    """

    def __init__(self, directory: str | Path, instance_name: str, stage: str) -> None:
        self.path = Path(directory) / f"{instance_name}-{stage}.json"

    def load(self) -> PersistedState:
        if not self.path.exists():
            return PersistedState()
        data = json.loads(self.path.read_text())
        return PersistedState.from_dict(data)

    def save(self, state: PersistedState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(state.to_dict(), indent=2, sort_keys=True) + "\n")
        os.replace(tmp_path, self.path)
        logger.debug("Saved state to %s", self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.debug("Cleared state at %s", self.path)
