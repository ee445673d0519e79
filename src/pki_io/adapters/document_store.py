"""
File document store — dumped documents kept as <root>/<name>.json.

Implements the DocumentStore port. Documents are written through their own
dump() so what lands on disk is exactly the validated transport form.

Names are plain file stems: letters, digits, ".", "_", "-" and spaces,
starting with a letter or digit. Anything else (path separators, "..")
is a VALIDATION_ERROR, so every file stays directly under the root.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from pki_io.domain.ports import DumpableDocument
from pki_io.failure import ErrorCode
from pki_io.result import Result

log = structlog.get_logger()

_SIMPLE_NAME = re.compile(r"[A-Za-z0-9][A-Za-z0-9._ -]*")


class FileDocumentStore:
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def path_for(self, name: str) -> Result[Path]:
        if not _SIMPLE_NAME.fullmatch(name):
            return Result.failure(ErrorCode.VALIDATION_ERROR, f"Invalid document name {name!r}")
        return Result.success(self._root / f"{name}.json")

    def save(self, name: str, document: DumpableDocument) -> Result[Path]:
        """Dump the document and write it under its name; overwrites an existing file."""
        return (
            self.path_for(name)
            .flat_map(
                lambda path: document.dump().flat_map(
                    lambda text: Result.from_computation(
                        lambda: self._write(path, text),
                        ErrorCode.STORAGE_ERROR,
                        f"Could not write document {name!r}",
                    )
                )
            )
            .peek(lambda written: log.info("document.saved", name=name, path=str(written)))
        )

    def read(self, name: str) -> Result[str]:
        return self.path_for(name).flat_map(lambda path: self._read(name, path))

    def _read(self, name: str, path: Path) -> Result[str]:
        if not path.is_file():
            return Result.failure(ErrorCode.NOT_FOUND, f"No document named {name!r} in {self._root}")
        return Result.from_computation(
            lambda: path.read_text(encoding="utf-8"),
            ErrorCode.STORAGE_ERROR,
            f"Could not read document {name!r}",
        )

    @staticmethod
    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path
