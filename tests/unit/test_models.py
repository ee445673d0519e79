"""
Unit tests for domain models — DN scope merging and model immutability.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pki_io.domain.models import DNScope


def _scope(**fields: str) -> DNScope:
    return DNScope.empty().model_copy(update=fields)


class TestDNScope:
    """Verify DNScope construction and parent inheritance."""

    def test_empty_has_all_fields_blank(self) -> None:
        """
        GIVEN DNScope.empty()
        WHEN inspected
        THEN all seven fields are empty strings.
        """
        scope = DNScope.empty()
        assert scope.model_dump() == {
            "country": "",
            "organization": "",
            "organizational_unit": "",
            "locality": "",
            "province": "",
            "street_address": "",
            "postal_code": "",
        }

    def test_parent_value_fills_empty_field(self) -> None:
        """
        GIVEN a child with empty country and a parent with country UK
        WHEN the child inherits
        THEN the child's country is UK.
        """
        merged = DNScope.empty().inherit(_scope(country="UK"))
        assert merged.country == "UK"

    def test_parent_value_overrides_child_value(self) -> None:
        """
        GIVEN a child with country FR and a parent with country UK
        WHEN the child inherits
        THEN the parent wins.
        """
        merged = _scope(country="FR").inherit(_scope(country="UK"))
        assert merged.country == "UK"

    def test_empty_parent_field_keeps_child_value(self) -> None:
        """
        GIVEN a child with locality Paris and a parent with no locality
        WHEN the child inherits
        THEN the child's locality is kept.
        """
        merged = _scope(locality="Paris").inherit(_scope(country="UK"))
        assert merged.locality == "Paris"
        assert merged.country == "UK"

    def test_inherit_does_not_mutate_inputs(self) -> None:
        """
        GIVEN a child and parent scope
        WHEN the child inherits
        THEN both originals are unchanged.
        """
        child, parent = _scope(country="FR"), _scope(country="UK")
        child.inherit(parent)
        assert child.country == "FR"
        assert parent.country == "UK"

    def test_frozen(self) -> None:
        """
        GIVEN a DNScope
        WHEN a field is assigned
        THEN ValidationError is raised.
        """
        with pytest.raises(ValidationError):
            DNScope.empty().country = "UK"  # type: ignore[misc]

    def test_validate_requires_every_field(self) -> None:
        """
        GIVEN a wire mapping missing postal-code
        WHEN validated
        THEN ValidationError is raised.
        """
        wire = DNScope.empty().model_dump(by_alias=True)
        del wire["postal-code"]
        with pytest.raises(ValidationError):
            DNScope.model_validate(wire)
