"""
Domain models — the published contracts for every credential document.

Each document kind is a pydantic model tree describing the JSON envelope:

    {"scope": str, "version": int, "type": str, "options": str, "body": {...}}

The models are the schemas: required fields have no defaults, unknown keys
are forbidden (extra="forbid") and scalar fields use Strict* types so that
"1" is never accepted for an integer, nor 1 for a string. Wire names with
dashes ("private-key", "dn-scope") are field aliases; Python code uses the
snake_case names.

Models are frozen. Generation code builds a new body and swaps it in with a
single assignment, which keeps every mutation all-or-nothing.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

_DOCUMENT_CONFIG = ConfigDict(
    extra="forbid",
    frozen=True,
)


# ─────────────────────── DN scope ───────────────────────


class DNScope(BaseModel):
    """Distinguished-name fields a CA applies to every subject it issues."""

    model_config = _DOCUMENT_CONFIG

    country: StrictStr = Field(description="X.509 distinguished name country field")
    organization: StrictStr = Field(description="X.509 distinguished name organization field")
    organizational_unit: StrictStr = Field(
        alias="organizational-unit",
        description="X.509 distinguished name organizational-unit field",
    )
    locality: StrictStr = Field(description="X.509 distinguished name locality field")
    province: StrictStr = Field(description="X.509 distinguished name province field")
    street_address: StrictStr = Field(
        alias="street-address",
        description="X.509 distinguished name street-address field",
    )
    postal_code: StrictStr = Field(
        alias="postal-code",
        description="X.509 distinguished name postal-code field",
    )

    @classmethod
    def empty(cls) -> DNScope:
        return cls.model_validate({(field.alias or name): "" for name, field in cls.model_fields.items()})

    def inherit(self, parent: DNScope) -> DNScope:
        """
        Merge a parent's scope into this one, field by field.

        A non-empty parent value overrides this scope's value; an empty parent
        value leaves this scope's value (empty or not) in place.
        """
        overrides = {
            name: getattr(parent, name)
            for name in type(self).model_fields
            if getattr(parent, name)
        }
        return self.model_copy(update=overrides)


# ─────────────────────── CA document ───────────────────────


class CABody(BaseModel):
    model_config = _DOCUMENT_CONFIG

    id: StrictStr = Field(description="Entity ID")
    name: StrictStr = Field(description="Entity name")
    certificate: StrictStr = Field(description="PEM encoded X.509 certificate")
    private_key: StrictStr = Field(alias="private-key", description="PEM encoded private key")
    dn_scope: DNScope = Field(alias="dn-scope", description="Scope the DN for all child certs")


class CAData(BaseModel):
    """CA Document."""

    model_config = ConfigDict(**_DOCUMENT_CONFIG, title="CADocument")

    scope: StrictStr = Field(description="Scope of the document")
    version: StrictInt = Field(description="Document schema version")
    type: StrictStr = Field(description="Type of document")
    options: StrictStr = Field(description="Options data")
    body: CABody = Field(description="Body data")


CA_DEFAULT = """{
    "scope": "pki.io",
    "version": 1,
    "type": "ca-document",
    "options": "",
    "body": {
        "id": "",
        "name": "",
        "certificate": "",
        "private-key": "",
        "dn-scope": {
            "country": "",
            "organization": "",
            "organizational-unit": "",
            "locality": "",
            "province": "",
            "street-address": "",
            "postal-code": ""
        }
    }
}"""


# ─────────────────────── Certificate document ───────────────────────


class CertificateBody(BaseModel):
    model_config = _DOCUMENT_CONFIG

    id: StrictStr = Field(description="Entity ID")
    name: StrictStr = Field(description="Entity name")
    certificate: StrictStr = Field(description="PEM encoded X.509 certificate")
    private_key: StrictStr = Field(alias="private-key", description="PEM encoded private key")


class CertificateData(BaseModel):
    """Certificate Document."""

    model_config = ConfigDict(**_DOCUMENT_CONFIG, title="CertificateDocument")

    scope: StrictStr = Field(description="Scope of the document")
    version: StrictInt = Field(description="Document schema version")
    type: StrictStr = Field(description="Type of document")
    options: StrictStr = Field(description="Options data")
    body: CertificateBody = Field(description="Body data")


CERTIFICATE_DEFAULT = """{
    "scope": "pki.io",
    "version": 1,
    "type": "certificate-document",
    "options": "",
    "body": {
        "id": "",
        "name": "",
        "certificate": "",
        "private-key": ""
    }
}"""


# ─────────────────────── CSR document ───────────────────────


class CSRBody(BaseModel):
    """Requester identity and public key. There is deliberately no private-key field."""

    model_config = _DOCUMENT_CONFIG

    id: StrictStr = Field(description="Entity ID")
    name: StrictStr = Field(description="Entity name")
    public_key: StrictStr = Field(alias="public-key", description="PEM encoded public key")


class CSRData(BaseModel):
    """CSR Document."""

    model_config = ConfigDict(**_DOCUMENT_CONFIG, title="CSRDocument")

    scope: StrictStr = Field(description="Scope of the document")
    version: StrictInt = Field(description="Document schema version")
    type: StrictStr = Field(description="Type of document")
    options: StrictStr = Field(description="Options data")
    body: CSRBody = Field(description="Body data")


CSR_DEFAULT = """{
    "scope": "pki.io",
    "version": 1,
    "type": "csr-document",
    "options": "",
    "body": {
        "id": "",
        "name": "",
        "public-key": ""
    }
}"""
