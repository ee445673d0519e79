"""
Ports — Protocol-based interfaces for the collaborators around the issuance core.

  Issuance core ← Ports (protocols) ← Adapters (implementations)

Adapters satisfy a port simply by implementing its methods; nothing
inherits from these classes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from pki_io.result import Result


@runtime_checkable
class IdentifierSource(Protocol):
    """
    Port: produce the next time-ordered 128-bit identifier.

    The identifier is rendered as hyphen-delimited hex groups; the serial
    allocator strips the hyphens and reads the rest as one hexadecimal number.
    """

    def __call__(self) -> str: ...


@runtime_checkable
class DumpableDocument(Protocol):
    """Port: anything that serialises itself to its JSON transport form."""

    def dump(self) -> Result[str]: ...


@runtime_checkable
class DocumentStore(Protocol):
    """
    Port: persist dumped documents by name and read them back.

    The store deals in JSON text only; turning text back into a typed
    document is the caller's job (new_ca(text), new_certificate(text), ...).
    """

    def save(self, name: str, document: DumpableDocument) -> Result[Path]: ...

    def read(self, name: str) -> Result[str]: ...
