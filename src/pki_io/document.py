"""
Document — the schema-validated envelope shared by every credential type.

A concrete document kind binds three class attributes:

  schema            pydantic model class describing the JSON envelope
  default_template  canonical empty instance (JSON text) used to seed new documents
  kind              human name used in messages and log events

Load pipeline (each stage returns Result, failures short-circuit):

  source ─→ parse (JSON text / mapping)  ──PARSE_ERROR──────┐
           ─→ validate against schema     ──VALIDATION_ERROR─┤
           ─→ store typed body on self                       └─→ Failure (body untouched)

The document never performs I/O; reading and writing files is the caller's job.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, Self, TypeAlias, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from pki_io.failure import ErrorCode
from pki_io.result import Result

D = TypeVar("D", bound=BaseModel)

DocumentSource: TypeAlias = str | bytes | Mapping[str, Any] | None

log = structlog.get_logger()


def _is_empty(source: DocumentSource) -> bool:
    if source is None:
        return True
    if isinstance(source, (str, bytes, Mapping)):
        return len(source) == 0
    return False


def _decode_json(text: str | bytes) -> Any:
    decoded = json.loads(text)
    if decoded is None:
        raise ValueError("document is null")
    return decoded


def _describe(error: ValidationError) -> str:
    """One line per offending location: 'body.dn-scope.country: Field required'."""
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc']) or '<root>'}: {detail['msg']}"
        for detail in error.errors()
    )


class Document(Generic[D]):
    """
    Base class for schema-validated documents.

    A freshly constructed document holds its schema and default template but
    no body; call load() (or use the new() factory) to populate it.
    """

    schema: ClassVar[type[BaseModel]]
    default_template: ClassVar[str]
    kind: ClassVar[str] = "Document"

    def __init__(self) -> None:
        self._data: D | None = None

    # ──────────────────────── Construction ────────────────────────

    @classmethod
    def new(cls, source: DocumentSource = None) -> Result[Self]:
        """
        Construct and load a document in one step.

        Any load failure is wrapped as DOCUMENT_ERROR; the PARSE_ERROR or
        VALIDATION_ERROR that caused it is kept as the failure's cause.
        """
        return cls().load(source).wrap_failure(
            ErrorCode.DOCUMENT_ERROR, f"Could not create new {cls.kind}"
        )

    @classmethod
    def json_schema(cls) -> dict[str, Any]:
        """The published JSON schema for this document kind (wire names, closed key sets)."""
        return cls.schema.model_json_schema(by_alias=True)

    # ──────────────────────── Body access ────────────────────────

    @property
    def data(self) -> D:
        if self._data is None:
            raise ValueError(f"{self.kind} document has no body loaded")
        return self._data

    def is_loaded(self) -> bool:
        return self._data is not None

    def _replace(self, data: D) -> None:
        self._data = data

    # ──────────────────────── Load / Dump ────────────────────────

    def load(self, source: DocumentSource = None) -> Result[Self]:
        """
        Populate the body from JSON text or a mapping.

        Empty input (None, "", b"", {}) loads the default template.
        On failure the current body, loaded or not, is left as it was.
        """
        if _is_empty(source):
            source = self.default_template
        return (
            self._parse(source)
            .flat_map(self._validate)
            .peek(self._replace)
            .map(lambda _: self)
            .peek_failure(
                lambda err: log.warning(
                    "document.load_failed", kind=self.kind, code=err.code.value, failure=err.message
                )
            )
        )

    def dump(self) -> Result[str]:
        """Serialise the body to its JSON transport form, using the wire names."""
        return Result.from_computation(
            lambda: self.data.model_dump_json(by_alias=True, indent=4),
            ErrorCode.SERIALIZATION_ERROR,
            f"Could not dump {self.kind} JSON",
        )

    def _parse(self, source: DocumentSource) -> Result[Any]:
        match source:
            case str() | bytes():
                return Result.from_computation(
                    lambda: _decode_json(source),
                    ErrorCode.PARSE_ERROR,
                    f"Could not parse {self.kind} JSON",
                )
            case Mapping():
                return Result.success(dict(source))
            case _:
                return Result.failure(
                    ErrorCode.PARSE_ERROR,
                    f"Unsupported {self.kind} input type: {type(source).__name__}",
                )

    def _validate(self, raw: Any) -> Result[D]:
        try:
            return Result.success(self.schema.model_validate(raw))
        except ValidationError as e:
            return Result.failure(
                ErrorCode.VALIDATION_ERROR,
                f"{self.kind} document does not match schema: {_describe(e)}",
                e,
            )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._data == other._data  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        if self._data is None:
            return f"{type(self).__name__}(<unloaded>)"
        return f"{type(self).__name__}(id={self._data.body.id!r}, name={self._data.body.name!r})"  # type: ignore[attr-defined]
