"""
CSR document — a requester's identity and public key, submitted to CA.sign.

The body has no private-key field, so a CSR cannot carry secret material.
"""

from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric import rsa

from pki_io.adapters.crypto import pem_decode_rsa_public
from pki_io.document import Document, DocumentSource
from pki_io.domain.models import CSR_DEFAULT, CSRData
from pki_io.result import Result


class CSR(Document[CSRData]):
    schema = CSRData
    default_template = CSR_DEFAULT
    kind = "CSR"

    @property
    def id(self) -> str:
        return self.data.body.id

    @property
    def name(self) -> str:
        return self.data.body.name

    def public_key(self) -> Result[rsa.RSAPublicKey]:
        return pem_decode_rsa_public(self.data.body.public_key)


def new_csr(source: DocumentSource = None) -> Result[CSR]:
    return CSR.new(source)
