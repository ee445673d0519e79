"""
Shared test fixtures and helpers for the pki-io test suite.

Key generation dominates test time, so tests use 1024-bit RSA keys and the
root/intermediate pair is generated once per session. Tests that mutate a
CA build their own with make_ca().
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import pytest
from cryptography import x509
from cryptography.x509.oid import NameOID

from pki_io.adapters.crypto import generate_rsa_key, pem_encode_rsa_public
from pki_io.domain.models import CA_DEFAULT, CSR_DEFAULT
from pki_io.x509.ca import CA, new_ca
from pki_io.x509.csr import CSR, new_csr

TEST_KEY_SIZE = 1024
NOT_BEFORE = datetime(2024, 1, 1, tzinfo=UTC)
NOT_AFTER = datetime(2034, 1, 1, tzinfo=UTC)


def ca_source(name: str, **dn_scope: str) -> dict[str, Any]:
    """
    CA document mapping with the given name and DN scope fields.

    Keyword names use the wire spelling with underscores, e.g.
    ca_source("Root", country="UK", organizational_unit="Ops").
    """
    source = json.loads(CA_DEFAULT)
    source["body"]["name"] = name
    for field, value in dn_scope.items():
        source["body"]["dn-scope"][field.replace("_", "-")] = value
    return source


def make_ca(name: str, **dn_scope: str) -> CA:
    return new_ca(ca_source(name, **dn_scope)).value()


def make_csr(name: str, id: str = "csr-1") -> CSR:
    """CSR document carrying a fresh public key."""
    source = json.loads(CSR_DEFAULT)
    source["body"].update(
        {
            "id": id,
            "name": name,
            "public-key": pem_encode_rsa_public(generate_rsa_key(TEST_KEY_SIZE).public_key()),
        }
    )
    return new_csr(source).value()


def common_name(name: x509.Name) -> str:
    return name.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value


def attribute(name: x509.Name, oid: x509.ObjectIdentifier) -> str | None:
    values = name.get_attributes_for_oid(oid)
    return values[0].value if values else None


@pytest.fixture(scope="session")
def root_ca() -> CA:
    """Self-signed root CA "Root" with country UK. Do not mutate."""
    ca = make_ca("Root", country="UK")
    return ca.generate_root(NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE).value()


@pytest.fixture(scope="session")
def intermediate_ca(root_ca: CA) -> CA:
    """Intermediate CA signed by root_ca. Do not mutate."""
    ca = make_ca("Intermediate")
    return ca.generate_sub(root_ca, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE).value()
