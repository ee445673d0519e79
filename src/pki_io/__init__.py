"""
pki_io — X.509 certificate authorities, CSRs and certificates as JSON documents.

Every credential is a schema-validated JSON document (CA, Certificate, CSR).
CAs generate their own key pairs and certificates, form root → intermediate
hierarchies with inherited distinguished-name scopes, and sign CSRs into
leaf certificates.

Built on the Railway-Oriented Programming (ROP) style: every fallible
operation returns a Result instead of raising.
"""

__version__ = "0.1.0"
