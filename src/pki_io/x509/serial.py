"""
Serial allocator — certificate serial numbers from time-ordered identifiers.

    "0192f3a1-7c4e-5b1d-9e0f-3a6c8d2e4b71"
      → strip "-" → "0192f3a17c4e5b1d9e0f3a6c8d2e4b71"
      → int(..., 16)

Because identifiers are time-ordered, serials issued one after another in a
process never decrease. Uniqueness is practical, not cryptographic.
"""

from __future__ import annotations

from pki_io.domain.ports import IdentifierSource
from pki_io.failure import ErrorCode
from pki_io.identifiers import next_time_ordered_id
from pki_io.result import Result

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _parse_hex(identifier: str) -> int:
    clean = identifier.replace("-", "")
    if not clean or not _HEX_DIGITS.issuperset(clean):
        raise ValueError(f"identifier {identifier!r} is not hexadecimal")
    return int(clean, 16)


def new_serial(id_source: IdentifierSource = next_time_ordered_id) -> Result[int]:
    """Derive one serial number. Fails with SERIAL_DERIVATION_ERROR on a non-hex identifier."""
    return Result.from_computation(
        lambda: _parse_hex(id_source()),
        ErrorCode.SERIAL_DERIVATION_ERROR,
        "Could not scan identifier to int",
    )
