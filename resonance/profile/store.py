from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from resonance.core import config
from resonance.errors import PersistenceFailure


class ProfileStore(Protocol):
    def load(self) -> dict[str, Any]:
        ...

    def save(self, payload: dict[str, Any]) -> None:
        ...


class JsonFileProfileStore:
    """Whole-document JSON store keyed by identity.

    Writes go to a sibling ``.tmp`` file that atomically replaces the target,
    so a crash mid-write never leaves a truncated document behind.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceFailure(f"Could not read profile store {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceFailure(f"Profile store {self.path} is not a JSON object")
        return payload

    def save(self, payload: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(".tmp")
            temp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as exc:
            raise PersistenceFailure(f"Could not write profile store {self.path}: {exc}") from exc


class InMemoryProfileStore:
    def __init__(self, payload: dict[str, Any] | None = None):
        self.payload: dict[str, Any] = json.loads(json.dumps(payload or {}))
        self.save_count = 0

    def load(self) -> dict[str, Any]:
        return json.loads(json.dumps(self.payload))

    def save(self, payload: dict[str, Any]) -> None:
        self.payload = json.loads(json.dumps(payload))
        self.save_count += 1


def build_profile_store() -> ProfileStore:
    if config.QA_MODE:
        return InMemoryProfileStore()
    return JsonFileProfileStore(config.PROFILE_STORE_PATH)
