"""
Issuance building blocks shared by CA and Certificate documents.

  build_subject()         DN scope + common name → x509.Name (empty fields omitted)
  certificate_template()  serial, validity window and the fixed usage policy
  SigningMaterial         who signs: issuer name, private key, authority key id
  sign_template()         template + subject public key + SigningMaterial → x509.Certificate
  KeyedDocument           documents that store a PEM certificate and private key
  add_calendar()          years/months/days arithmetic with day-overflow normalisation

Usage policy for every certificate this package issues:
  key usage           digital signature, certificate signing (critical)
  extended key usage  client auth, server auth
  subject key id      fixed placeholder 01 02 03
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TypeVar

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.extensions import ExtensionNotFound
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from pydantic import BaseModel

from pki_io.adapters.crypto import pem_decode_rsa_private, pem_decode_x509_certificate
from pki_io.document import Document
from pki_io.domain.models import DNScope
from pki_io.failure import ErrorCode
from pki_io.result import Result

D = TypeVar("D", bound=BaseModel)

SUBJECT_KEY_ID = b"\x01\x02\x03"

# Attribute order follows the usual RDN sequence: C, ST, L, STREET, POSTALCODE, O, OU, CN.
_NAME_ATTRIBUTES = (
    ("country", NameOID.COUNTRY_NAME),
    ("province", NameOID.STATE_OR_PROVINCE_NAME),
    ("locality", NameOID.LOCALITY_NAME),
    ("street_address", NameOID.STREET_ADDRESS),
    ("postal_code", NameOID.POSTAL_CODE),
    ("organization", NameOID.ORGANIZATION_NAME),
    ("organizational_unit", NameOID.ORGANIZATIONAL_UNIT_NAME),
)


# ─────────────────────── Subject ───────────────────────


def _name_attributes(common_name: str, dn_scope: DNScope) -> list[x509.NameAttribute]:
    attributes = [
        x509.NameAttribute(oid, getattr(dn_scope, field))
        for field, oid in _NAME_ATTRIBUTES
        if getattr(dn_scope, field)
    ]
    if common_name:
        attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    return attributes


def build_subject(common_name: str, dn_scope: DNScope) -> Result[x509.Name]:
    """
    Build a subject from a DN scope plus a common name.

    Empty fields are left out entirely. Fails with VALIDATION_ERROR when a
    value is not encodable (e.g. a country that is not a two-letter code).
    """
    return Result.from_computation(
        lambda: x509.Name(_name_attributes(common_name, dn_scope)),
        ErrorCode.VALIDATION_ERROR,
        "Could not build subject",
    )


# ─────────────────────── Template ───────────────────────


def certificate_template(
    subject: x509.Name,
    serial: int,
    not_before: datetime,
    not_after: datetime,
    is_ca: bool,
) -> Result[x509.CertificateBuilder]:
    """Certificate builder with everything except issuer and subject public key."""
    return Result.from_computation(
        lambda: (
            x509.CertificateBuilder()
            .subject_name(subject)
            .serial_number(serial)
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=True,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage(
                    [ExtendedKeyUsageOID.CLIENT_AUTH, ExtendedKeyUsageOID.SERVER_AUTH]
                ),
                critical=False,
            )
            .add_extension(x509.SubjectKeyIdentifier(SUBJECT_KEY_ID), critical=False)
        ),
        ErrorCode.SIGNING_ERROR,
        "Could not build certificate template",
    )


# ─────────────────────── Signing ───────────────────────


def _extract_ski(cert: x509.Certificate) -> bytes | None:
    try:
        return cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value.digest
    except ExtensionNotFound:
        return None


@dataclass(frozen=True, slots=True)
class SigningMaterial:
    """Issuer name and key used to sign a template."""

    issuer: x509.Name
    key: rsa.RSAPrivateKey
    authority_key_id: bytes | None = None

    @staticmethod
    def self_signed(subject: x509.Name, key: rsa.RSAPrivateKey) -> SigningMaterial:
        return SigningMaterial(issuer=subject, key=key)

    @staticmethod
    def from_parent(certificate: x509.Certificate, key: rsa.RSAPrivateKey) -> SigningMaterial:
        return SigningMaterial(
            issuer=certificate.subject,
            key=key,
            authority_key_id=_extract_ski(certificate),
        )


def sign_template(
    template: x509.CertificateBuilder,
    public_key: rsa.RSAPublicKey,
    material: SigningMaterial,
) -> Result[x509.Certificate]:
    """Complete the template with issuer and subject key, then sign it with SHA-256."""

    def _sign() -> x509.Certificate:
        builder = template.issuer_name(material.issuer).public_key(public_key)
        if material.authority_key_id is not None:
            builder = builder.add_extension(
                x509.AuthorityKeyIdentifier(
                    key_identifier=material.authority_key_id,
                    authority_cert_issuer=None,
                    authority_cert_serial_number=None,
                ),
                critical=False,
            )
        return builder.sign(private_key=material.key, algorithm=hashes.SHA256())

    return Result.from_computation(_sign, ErrorCode.SIGNING_ERROR, "Could not create certificate")


# ─────────────────────── Documents holding key material ───────────────────────


class KeyedDocument(Document[D]):
    """
    A document whose body stores a PEM certificate and a PEM private key.

    CA and Certificate documents share this; a KeyedDocument can act as the
    parent that signs another certificate.
    """

    def certificate(self) -> Result[x509.Certificate]:
        return pem_decode_x509_certificate(self.data.body.certificate)  # type: ignore[attr-defined]

    def private_key(self) -> Result[rsa.RSAPrivateKey]:
        return pem_decode_rsa_private(self.data.body.private_key).wrap_failure(  # type: ignore[attr-defined]
            ErrorCode.DECODE_ERROR, "Could not decode rsa private key"
        )

    def signing_material(self) -> Result[SigningMaterial]:
        """This document's certificate and key, ready to sign a child."""
        return Result.combine(self.certificate(), self.private_key(), SigningMaterial.from_parent)


# ─────────────────────── Calendar arithmetic ───────────────────────


def add_calendar(moment: datetime, years: int = 0, months: int = 0, days: int = 0) -> datetime:
    """
    Add years, months and days; out-of-range days roll into the next month.

    2024-01-31 + 1 month → 2024-03-02 (February 31st normalises forward).
    """
    month_index = moment.month - 1 + months
    year = moment.year + years + month_index // 12
    first_of_month = moment.replace(year=year, month=month_index % 12 + 1, day=1)
    return first_of_month + timedelta(days=moment.day - 1 + days)
