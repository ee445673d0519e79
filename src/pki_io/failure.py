"""
Failure description — structured error information for the failure track.

Every fallible step in credential issuance reports an ErrorCode plus a
message. When a step fails because an inner step failed, the inner
description is kept as ``cause`` so callers can see both the context
("Could not create new CA") and the root problem ("missing field body.name").
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Error taxonomy for document handling and certificate issuance.

    Document errors: PARSE, VALIDATION, SERIALIZATION, DOCUMENT
    Issuance errors: SERIAL_DERIVATION, INVALID_PARENT_TYPE, PARENT_MATERIAL,
                     SIGNING_KEY, CSR_KEY, DECODE, SIGNING
    Infrastructure:  STORAGE, NOT_FOUND, CONFIGURATION, UNKNOWN
    """

    PARSE_ERROR = "PARSE_ERROR"
    """Input is not well-formed JSON (or not a supported input type)."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Well-formed input that violates the document schema."""

    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    """In-memory document could not be dumped to its transport form."""

    DOCUMENT_ERROR = "DOCUMENT_ERROR"
    """Document construction failed; the load failure is the cause."""

    SERIAL_DERIVATION_ERROR = "SERIAL_DERIVATION_ERROR"
    """Identifier could not be read as hexadecimal."""

    INVALID_PARENT_TYPE = "INVALID_PARENT_TYPE"
    """A generation call received a parent of an unsupported type."""

    PARENT_MATERIAL_ERROR = "PARENT_MATERIAL_ERROR"
    """Parent certificate or private key could not be decoded."""

    SIGNING_KEY_ERROR = "SIGNING_KEY_ERROR"
    """Signing CA's own certificate or private key could not be decoded."""

    CSR_KEY_ERROR = "CSR_KEY_ERROR"
    """CSR public key could not be decoded."""

    DECODE_ERROR = "DECODE_ERROR"
    """Stored PEM text is empty or not valid key/certificate material."""

    SIGNING_ERROR = "SIGNING_ERROR"
    """The certificate builder rejected the template."""

    STORAGE_ERROR = "STORAGE_ERROR"
    """Reading or writing a file failed."""

    NOT_FOUND = "NOT_FOUND"
    """Requested file or record does not exist."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Settings are missing or invalid."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """Unexpected/unclassified failures."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor: code, message, optional exception, optional cause.

    >>> desc = FailureDescription(ErrorCode.VALIDATION_ERROR, "body.name: Field required")
    >>> desc.code
    <ErrorCode.VALIDATION_ERROR: 'VALIDATION_ERROR'>
    >>> desc.wrap(ErrorCode.DOCUMENT_ERROR, "Could not create new CA").cause is desc
    True
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    cause: Optional[FailureDescription] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def wrap(self, code: ErrorCode, message: str) -> FailureDescription:
        """
        Return a new description for an outer step, keeping this one as the cause.

        The outer message is suffixed with the inner one so a single log line
        still reads end to end: "Could not create new CA: body.name: Field required".
        """
        return FailureDescription(
            code=code,
            message=f"{message}: {self.message}",
            cause=self,
        )

    def root_cause(self) -> FailureDescription:
        """Follow the cause chain down to the innermost failure."""
        current = self
        while current.cause is not None:
            current = current.cause
        return current

    def full_stack_trace(self) -> str:
        """Message plus the formatted exception of the root cause, if any."""
        exception = self.root_cause().exception
        if exception is None:
            return self.message
        tb = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
        return f"{self.message}\n{tb}"
