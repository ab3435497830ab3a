"""
Shared configuration management for the Annotator.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PROVENANCE_KEY = "annotator.kubernetes.io/managed-annotations"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ANNOTATOR_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class AnnotatorConfig(BaseConfig):
    """Annotator-specific configuration."""

    service_name: str = "annotator"

    # Well-known source object holding the policy text
    source_namespace: str = Field(
        default="default",
        validation_alias=AliasChoices("ANNOTATOR_SOURCE_NAMESPACE", "POD_NAMESPACE"),
    )
    source_name: str = Field(default="annotator-rules")
    policy_key: str = Field(default="rules.yaml")

    # Reserved annotation carrying the provenance marker
    provenance_key: str = Field(default=DEFAULT_PROVENANCE_KEY)


def get_config(**overrides: Optional[str]) -> AnnotatorConfig:
    """Get configuration for the annotator."""
    return AnnotatorConfig(**{k: v for k, v in overrides.items() if v is not None})
