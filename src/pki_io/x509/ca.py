"""
CA document — root and intermediate certificate authorities.

Generation pipeline (generate_sub):

  parent match ─→ DN scope (inherit from parent) ─→ fresh RSA key ─→ subject
      ─→ serial ─→ CA template ─→ signing material
          None      → self-signed with the fresh key
          CA        → parent's certificate + key
          otherwise → INVALID_PARENT_TYPE
      ─→ sign ─→ swap in new body (id, certificate, private-key, dn-scope)

Nothing is written to the document until signing succeeded, so a failed
generation leaves the CA exactly as it was.

Leaf issuance (sign) uses the CA's own DN scope as the authority for the
subject and returns a new Certificate document; the CA and CSR are not touched.
"""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa

from pki_io.adapters.crypto import (
    DEFAULT_KEY_SIZE,
    generate_rsa_key,
    pem_encode_rsa_private,
    pem_encode_x509_certificate,
)
from pki_io.document import DocumentSource
from pki_io.domain.models import CA_DEFAULT, CAData, DNScope
from pki_io.failure import ErrorCode
from pki_io.result import Result
from pki_io.x509.certificate import Certificate
from pki_io.x509.csr import CSR
from pki_io.x509.issuance import (
    KeyedDocument,
    SigningMaterial,
    add_calendar,
    build_subject,
    certificate_template,
    sign_template,
)
from pki_io.x509.serial import new_serial

log = structlog.get_logger()

# Validity of certificates minted by CA.sign: 5 years, 5 months, 5 days.
LEAF_TENURE = {"years": 5, "months": 5, "days": 5}


class CA(KeyedDocument[CAData]):
    schema = CAData
    default_template = CA_DEFAULT
    kind = "CA"

    @property
    def id(self) -> str:
        return self.data.body.id

    @property
    def name(self) -> str:
        return self.data.body.name

    @property
    def dn_scope(self) -> DNScope:
        return self.data.body.dn_scope

    # ──────────────────────── Generation ────────────────────────

    def generate_root(
        self,
        not_before: datetime,
        not_after: datetime,
        *,
        key_size: int = DEFAULT_KEY_SIZE,
    ) -> Result[CA]:
        """Self-sign this CA. Same as generate_sub(None, ...)."""
        return self.generate_sub(None, not_before, not_after, key_size=key_size)

    def generate_sub(
        self,
        parent: CA | None,
        not_before: datetime,
        not_after: datetime,
        *,
        key_size: int = DEFAULT_KEY_SIZE,
    ) -> Result[CA]:
        """
        Generate this CA's key pair and certificate, signed by parent (or itself).

        DN scope fields the parent has set override this CA's own; fields the
        parent leaves empty keep this CA's value. Returns the CA itself on
        success. Calling again replaces the key and certificate, which
        invalidates anything previously signed by this CA.
        """
        match parent:
            case None:
                dn_scope = self.dn_scope
            case CA():
                dn_scope = self.dn_scope.inherit(parent.dn_scope)
            case _:
                return Result.failure(
                    ErrorCode.INVALID_PARENT_TYPE,
                    f"Invalid parent type: {type(parent).__name__}",
                )

        key = generate_rsa_key(key_size)

        def _material(subject: x509.Name) -> Result[SigningMaterial]:
            if parent is None:
                return Result.success(SigningMaterial.self_signed(subject, key))
            return parent.signing_material().wrap_failure(
                ErrorCode.PARENT_MATERIAL_ERROR, "Could not get parent CA material"
            )

        return (
            build_subject(self.name, dn_scope)
            .flat_map(
                lambda subject: new_serial()
                .wrap_failure(ErrorCode.SERIAL_DERIVATION_ERROR, "Could not create serial")
                .flat_map(lambda serial: certificate_template(subject, serial, not_before, not_after, is_ca=True))
                .flat_map(
                    lambda template: _material(subject).flat_map(
                        lambda material: sign_template(template, key.public_key(), material)
                    )
                )
            )
            .map(lambda cert: self._store_generated(cert, key, dn_scope))
            .peek(
                lambda ca: log.info(
                    "ca.generated",
                    name=ca.name,
                    serial=ca.id,
                    self_signed=parent is None,
                )
            )
            .peek_failure(
                lambda err: log.warning(
                    "ca.generation_failed", name=self.name, code=err.code.value, failure=err.message
                )
            )
        )

    def _store_generated(
        self,
        cert: x509.Certificate,
        key: rsa.RSAPrivateKey,
        dn_scope: DNScope,
    ) -> CA:
        body = self.data.body.model_copy(
            update={
                "id": str(cert.serial_number),
                "certificate": pem_encode_x509_certificate(cert),
                "private_key": pem_encode_rsa_private(key),
                "dn_scope": dn_scope,
            }
        )
        self._replace(self.data.model_copy(update={"body": body}))
        return self

    # ──────────────────────── Leaf issuance ────────────────────────

    def sign(self, csr: CSR, *, now: datetime | None = None) -> Result[Certificate]:
        """
        Issue a leaf Certificate for a CSR.

        The subject is this CA's DN scope plus the CSR name as common name.
        Validity runs from now for LEAF_TENURE. The returned Certificate
        carries the CSR's id and name and an empty private-key field: the
        requester keeps its private key, the CA never sees it.
        """
        if not isinstance(csr, CSR):
            return Result.failure(
                ErrorCode.INVALID_PARENT_TYPE,
                f"Invalid CSR type: {type(csr).__name__}",
            )
        not_before = (now or datetime.now(UTC)).replace(microsecond=0)
        not_after = add_calendar(not_before, **LEAF_TENURE)

        def _issue(template: x509.CertificateBuilder) -> Result[x509.Certificate]:
            return (
                self.signing_material()
                .wrap_failure(ErrorCode.SIGNING_KEY_ERROR, "Could not get CA signing material")
                .flat_map(
                    lambda material: csr.public_key()
                    .wrap_failure(ErrorCode.CSR_KEY_ERROR, "Could not get public key from CSR")
                    .flat_map(lambda public_key: sign_template(template, public_key, material))
                )
            )

        return (
            build_subject(csr.name, self.dn_scope)
            .flat_map(
                lambda subject: new_serial()
                .wrap_failure(ErrorCode.SERIAL_DERIVATION_ERROR, "Could not create serial")
                .flat_map(lambda serial: certificate_template(subject, serial, not_before, not_after, is_ca=False))
            )
            .flat_map(_issue)
            .flat_map(lambda cert: Certificate.issued(csr.id, csr.name, cert))
            .peek(
                lambda issued: log.info(
                    "ca.signed", ca=self.name, csr_id=issued.id, name=issued.name
                )
            )
            .peek_failure(
                lambda err: log.warning(
                    "ca.sign_failed", ca=self.name, code=err.code.value, failure=err.message
                )
            )
        )


def new_ca(source: DocumentSource = None) -> Result[CA]:
    """Construct a CA document from JSON text or a mapping (empty input → default template)."""
    return CA.new(source)
