"""
Unit tests for Certificate documents — standalone generation and the
issued() factory used by CA.sign.
"""

from __future__ import annotations

import json

import pytest
from cryptography.x509.oid import NameOID

from pki_io.domain.models import CERTIFICATE_DEFAULT
from pki_io.failure import ErrorCode
from pki_io.result import Result
from pki_io.x509 import certificate as certificate_module
from pki_io.x509.ca import CA
from pki_io.x509.certificate import Certificate, new_certificate
from tests.assertions import ResultAssertions
from tests.conftest import NOT_AFTER, NOT_BEFORE, TEST_KEY_SIZE, attribute, make_csr


def _certificate(name: str) -> Certificate:
    source = json.loads(CERTIFICATE_DEFAULT)
    source["body"]["name"] = name
    return new_certificate(source).value()


class TestGenerate:
    """Verify Certificate.generate with and without a parent."""

    def test_self_signed(self) -> None:
        """
        GIVEN a fresh Certificate document
        WHEN generated with no parent
        THEN it is self-issued with the placeholder subject and stores a matching key.
        """
        certificate = _certificate("standalone")

        ResultAssertions.assert_success(
            certificate.generate(None, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE)
        )

        cert = certificate.certificate().value()
        key = certificate.private_key().value()
        assert cert.issuer == cert.subject
        assert attribute(cert.subject, NameOID.ORGANIZATION_NAME) == "Mother Nature"
        assert cert.public_key().public_numbers() == key.public_key().public_numbers()
        cert.verify_directly_issued_by(cert)

    def test_signed_by_ca(self, root_ca: CA) -> None:
        """
        GIVEN a generated root CA
        WHEN a Certificate is generated with it as parent
        THEN the root is the issuer and its key verifies the signature.
        """
        certificate = _certificate("child")

        ResultAssertions.assert_success(
            certificate.generate(root_ca, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE)
        )

        cert = certificate.certificate().value()
        cert.verify_directly_issued_by(root_ca.certificate().value())

    def test_signed_by_certificate(self) -> None:
        """
        GIVEN a self-signed Certificate
        WHEN another Certificate is generated with it as parent
        THEN the first certificate is the issuer.
        """
        parent = _certificate("parent")
        parent.generate(None, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE)
        child = _certificate("child")

        ResultAssertions.assert_success(
            child.generate(parent, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE)
        )

        child.certificate().value().verify_directly_issued_by(parent.certificate().value())

    def test_invalid_parent_type_mutates_nothing(self) -> None:
        certificate = _certificate("child")
        before = certificate.dump().value()

        result = certificate.generate("parent", NOT_BEFORE, NOT_AFTER)  # type: ignore[arg-type]

        ResultAssertions.assert_failure(result, ErrorCode.INVALID_PARENT_TYPE)
        assert certificate.dump().value() == before

    def test_parent_without_private_key_is_parent_material_error(self, intermediate_ca: CA) -> None:
        """
        GIVEN a CA-issued Certificate (no private key stored)
        WHEN used as a parent
        THEN PARENT_MATERIAL_ERROR is returned and the child is unchanged.
        """
        issued = intermediate_ca.sign(make_csr("leaf")).value()
        child = _certificate("child")
        before = child.dump().value()

        result = child.generate(issued, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE)

        ResultAssertions.assert_failure(result, ErrorCode.PARENT_MATERIAL_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "Could not get parent material")
        assert child.dump().value() == before

    def test_serial_failure_mutates_nothing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """
        GIVEN an identifier source that cannot be read as a serial
        WHEN a Certificate is generated
        THEN SERIAL_DERIVATION_ERROR is returned and the document is unchanged.
        """
        monkeypatch.setattr(
            certificate_module,
            "new_serial",
            lambda: Result.failure(ErrorCode.SERIAL_DERIVATION_ERROR, "Could not scan identifier to int: 'xyz'"),
        )
        certificate = _certificate("child")
        before = certificate.dump().value()

        result = certificate.generate(None, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE)

        ResultAssertions.assert_failure(result, ErrorCode.SERIAL_DERIVATION_ERROR)
        assert certificate.dump().value() == before

    def test_unloaded_document_raises_before_key_generation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        generated: list[int] = []
        monkeypatch.setattr(certificate_module, "generate_rsa_key", generated.append)

        with pytest.raises(ValueError, match="no body loaded"):
            Certificate().generate(None, NOT_BEFORE, NOT_AFTER, key_size=TEST_KEY_SIZE)

        assert generated == []


class TestIssued:
    def test_issued_has_certificate_and_no_key(self, root_ca: CA) -> None:
        """
        GIVEN an x509 certificate
        WHEN wrapped with Certificate.issued
        THEN id, name and certificate are set and private-key stays empty.
        """
        cert = root_ca.certificate().value()

        issued = ResultAssertions.assert_success(Certificate.issued("id-1", "leaf", cert))

        assert issued.id == "id-1"
        assert issued.name == "leaf"
        assert issued.certificate().value() == cert
        assert issued.data.body.private_key == ""
