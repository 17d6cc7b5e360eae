"""Settings for link resolution and pagination."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PAGINATION_NAMES: dict[str, str] = {
    "first": "first",
    "prev": "prev",
    "next": "next",
    "last": "last",
}


class HypermediaSettings(BaseSettings):
    """
    Link resolver configuration.
    Reads from ``HATEOAS_*`` environment variables and/or a .env file.
    """

    base_url: str = ""
    embed: set[str] = Field(default_factory=set)
    link_only: set[str] = Field(default_factory=set)
    page_size: int = Field(default=10, gt=0)

    # Link names used for pagination; keys are first/prev/next/last
    pagination_names: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PAGINATION_NAMES)
    )

    model_config = SettingsConfigDict(
        env_prefix="HATEOAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("pagination_names")
    @classmethod
    def complete_pagination_names(cls, value: dict[str, str]) -> dict[str, str]:
        unknown = set(value) - set(DEFAULT_PAGINATION_NAMES)
        if unknown:
            raise ValueError(f"Unknown pagination link keys: {sorted(unknown)}")
        return {**DEFAULT_PAGINATION_NAMES, **value}
