"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables
  - Fall back to .env file
  - Validate types and constraints at startup

Architecture: Only AppSettings is a BaseSettings instance. Sub-settings are plain
BaseModel classes populated by AppSettings via env_nested_delimiter="__", so the env
var ROOT__NAME maps to root.name, INTERMEDIATE__DN_SCOPE__COUNTRY maps to
intermediate.dn_scope.country, etc.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pki_io.domain.models import CA_DEFAULT, DNScope

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class DNScopeSettings(BaseModel):
    """Distinguished-name fields for a CA; empty fields are left out of subjects."""

    country: str = ""
    organization: str = ""
    organizational_unit: str = ""
    locality: str = ""
    province: str = ""
    street_address: str = ""
    postal_code: str = ""

    def to_dn_scope(self) -> DNScope:
        return DNScope.empty().model_copy(update=self.model_dump())


class CASettings(BaseModel):
    """One certificate authority of the bootstrapped hierarchy."""

    name: str = Field(description="CA name, used as the subject common name")
    validity_days: int = Field(default=3650, ge=1, description="Certificate lifetime in days")
    dn_scope: DNScopeSettings = Field(default_factory=DNScopeSettings)

    def validity(self, start: datetime) -> tuple[datetime, datetime]:
        """(not_before, not_after) for a certificate starting at start."""
        return start, start + timedelta(days=self.validity_days)

    def document(self) -> dict[str, Any]:
        """CA document seed: the default template with this name and DN scope, no key material yet."""
        seed = json.loads(CA_DEFAULT)
        seed["body"]["name"] = self.name
        seed["body"]["dn-scope"] = self.dn_scope.to_dn_scope().model_dump(by_alias=True)
        return seed


class RootCASettings(CASettings):
    name: str = "Root"


class IntermediateCASettings(CASettings):
    name: str = "Intermediate"
    validity_days: int = Field(default=1825, ge=1)


class AppSettings(BaseSettings):
    """
    Root application settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    root: RootCASettings = Field(default_factory=RootCASettings)
    intermediate: IntermediateCASettings = Field(default_factory=IntermediateCASettings)

    key_size: int = Field(default=2048, ge=1024, description="RSA modulus size in bits")
    data_dir: Path = Field(default=Path(".pki-io"), description="Directory for config and documents")
    org_name: str = Field(default="pki.io")
    log_level: str = Field(default="INFO")

    @model_validator(mode="after")
    def distinct_ca_names(self) -> AppSettings:
        """Both CAs are saved under their names, so the names must differ."""
        if self.root.name == self.intermediate.name:
            raise ValueError(f"ROOT__NAME and INTERMEDIATE__NAME must differ (both are {self.root.name!r})")
        return self
