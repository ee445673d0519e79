"""
Certificate document — an issued leaf certificate and (optionally) its key.

Two ways to fill one:
  - CA.sign(csr) → Certificate.issued(): certificate only, private-key stays
    empty because the requester holds the key;
  - Certificate.generate(parent, ...): standalone path with its own fresh
    key pair, self-signed or signed by a parent CA/Certificate.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from cryptography import x509

from pki_io.adapters.crypto import (
    DEFAULT_KEY_SIZE,
    generate_rsa_key,
    pem_encode_rsa_private,
    pem_encode_x509_certificate,
)
from pki_io.document import DocumentSource
from pki_io.domain.models import CERTIFICATE_DEFAULT, CertificateData, DNScope
from pki_io.failure import ErrorCode
from pki_io.result import Result
from pki_io.x509.issuance import (
    KeyedDocument,
    SigningMaterial,
    build_subject,
    certificate_template,
    sign_template,
)
from pki_io.x509.serial import new_serial

log = structlog.get_logger()

# TODO: derive the generate() subject from body.name the way CA.generate_sub does.
PLACEHOLDER_SCOPE = DNScope.empty().model_copy(update={"organization": "Mother Nature"})


class Certificate(KeyedDocument[CertificateData]):
    schema = CertificateData
    default_template = CERTIFICATE_DEFAULT
    kind = "Certificate"

    @property
    def id(self) -> str:
        return self.data.body.id

    @property
    def name(self) -> str:
        return self.data.body.name

    @classmethod
    def issued(cls, id: str, name: str, cert: x509.Certificate) -> Result[Certificate]:
        """A new Certificate document holding a CA-issued certificate and no private key."""
        return cls.new().map(
            lambda document: document._fill(id=id, name=name, certificate=pem_encode_x509_certificate(cert))
        )

    def _fill(self, **fields: str) -> Certificate:
        body = self.data.body.model_copy(update=fields)
        self._replace(self.data.model_copy(update={"body": body}))
        return self

    def generate(
        self,
        parent: KeyedDocument | None,
        not_before: datetime,
        not_after: datetime,
        *,
        key_size: int = DEFAULT_KEY_SIZE,
    ) -> Result[Certificate]:
        """
        Issue this certificate with a fresh key pair, without a CSR.

        parent None → self-signed; a CA or Certificate → signed with the
        parent's stored certificate and key; anything else → INVALID_PARENT_TYPE.
        The subject is the fixed PLACEHOLDER_SCOPE. Raises ValueError on an
        unloaded document before any key is generated.
        """
        if not self.is_loaded():
            raise ValueError(f"{self.kind} document has no body loaded")
        if parent is not None and not isinstance(parent, KeyedDocument):
            return Result.failure(
                ErrorCode.INVALID_PARENT_TYPE,
                f"Invalid parent type: {type(parent).__name__}",
            )

        key = generate_rsa_key(key_size)

        def _material(subject: x509.Name) -> Result[SigningMaterial]:
            if parent is None:
                return Result.success(SigningMaterial.self_signed(subject, key))
            return parent.signing_material().wrap_failure(
                ErrorCode.PARENT_MATERIAL_ERROR, "Could not get parent material"
            )

        return (
            build_subject("", PLACEHOLDER_SCOPE)
            .flat_map(
                lambda subject: new_serial()
                .flat_map(lambda serial: certificate_template(subject, serial, not_before, not_after, is_ca=False))
                .flat_map(
                    lambda template: _material(subject).flat_map(
                        lambda material: sign_template(template, key.public_key(), material)
                    )
                )
            )
            .map(
                lambda cert: self._fill(
                    certificate=pem_encode_x509_certificate(cert), private_key=pem_encode_rsa_private(key)
                )
            )
            .peek(lambda _: log.info("certificate.generated", name=self.name, self_signed=parent is None))
            .peek_failure(
                lambda err: log.warning(
                    "certificate.generation_failed", name=self.name, code=err.code.value, failure=err.message
                )
            )
        )


def new_certificate(source: DocumentSource = None) -> Result[Certificate]:
    return Certificate.new(source)
