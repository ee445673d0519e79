"""
Config store adapter — named org/admin/node identifiers persisted as JSON.

    {
        "orgs":   {"pki.io": "3620741…"},
        "admins": {"admin1": "123"},
        "nodes":  {"node1": "456", "node2": "789"}
    }

A name maps to one identifier; adding the same name again replaces it.
All file access is wrapped in Result at this adapter boundary.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from pki_io.failure import ErrorCode
from pki_io.result import Result

log = structlog.get_logger()


class ConfigData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    orgs: dict[StrictStr, StrictStr] = Field(default_factory=dict)
    admins: dict[StrictStr, StrictStr] = Field(default_factory=dict)
    nodes: dict[StrictStr, StrictStr] = Field(default_factory=dict)


class ConfigStore:
    """Key/value store of named identifiers backed by a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.data = ConfigData()

    def add_org(self, name: str, id: str) -> None:
        self.data.orgs[name] = id

    def add_admin(self, name: str, id: str) -> None:
        self.data.admins[name] = id

    def add_node(self, name: str, id: str) -> None:
        self.data.nodes[name] = id

    def org_id(self, name: str) -> Result[str]:
        return self._lookup("org", self.data.orgs, name)

    def admin_id(self, name: str) -> Result[str]:
        return self._lookup("admin", self.data.admins, name)

    def node_id(self, name: str) -> Result[str]:
        return self._lookup("node", self.data.nodes, name)

    @staticmethod
    def _lookup(kind: str, entries: dict[str, str], name: str) -> Result[str]:
        if name not in entries:
            return Result.failure(ErrorCode.NOT_FOUND, f"No {kind} named {name!r}")
        return Result.success(entries[name])

    # ──────────────────────── Persistence ────────────────────────

    def save(self) -> Result[Path]:
        """Write the store to its path, creating parent directories as needed."""
        return self._save(self.data)

    def save_org(self, name: str, id: str) -> Result[Path]:
        """Add an org and save; the in-memory entry is only kept once the write succeeded."""
        candidate = self.data.model_copy(update={"orgs": {**self.data.orgs, name: id}})
        return self._save(candidate).peek(lambda _: self._replace(candidate))

    def _save(self, data: ConfigData) -> Result[Path]:
        return Result.from_computation(
            lambda: self._write(data),
            ErrorCode.STORAGE_ERROR,
            f"Could not save config to {self.path}",
        ).peek(lambda path: log.info("config.saved", path=str(path)))

    def _write(self, data: ConfigData) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(data.model_dump_json(indent=4), encoding="utf-8")
        return self.path

    def load(self) -> Result[ConfigStore]:
        """Replace the in-memory entries with the file's content; untouched on failure."""
        if not self.path.is_file():
            return Result.failure(ErrorCode.NOT_FOUND, f"Config file not found: {self.path}")
        return (
            Result.from_computation(
                lambda: self.path.read_text(encoding="utf-8"),
                ErrorCode.STORAGE_ERROR,
                f"Could not read config from {self.path}",
            )
            .flat_map(
                lambda text: Result.from_computation(
                    lambda: json.loads(text),
                    ErrorCode.PARSE_ERROR,
                    f"Could not parse config {self.path}",
                )
            )
            .flat_map(self._validate)
            .map(self._replace)
        )

    def _validate(self, raw: object) -> Result[ConfigData]:
        try:
            return Result.success(ConfigData.model_validate(raw))
        except ValidationError as e:
            return Result.failure(ErrorCode.VALIDATION_ERROR, f"Invalid config {self.path}: {e}", e)

    def _replace(self, data: ConfigData) -> ConfigStore:
        self.data = data
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigStore):
            return NotImplemented
        return self.path == other.path and self.data == other.data

    def __repr__(self) -> str:
        return f"ConfigStore(path={str(self.path)!r})"
