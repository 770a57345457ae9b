"""
SetupConfig — the validated contents of a devsetup YAML file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class PathsConfig(BaseModel):
    """Overrides for the well-known locations."""

    state_dir: Path | None = None
    cache_dir: Path | None = None
    backup_dir: Path | None = None
    log_dir: Path | None = None

    @field_validator("*", mode="after")
    @classmethod
    def _expand_user(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None


class SetupConfig(BaseModel):
    """A provisioning configuration.

    ``components`` toggles override the profile: ``true`` adds a
    component, ``false`` removes it.
    """

    profile: str | None = None
    components: dict[str, bool] = Field(default_factory=dict)
    versions: dict[str, str] = Field(default_factory=dict)
    checksums: dict[str, str] = Field(default_factory=dict)
    paths: PathsConfig = Field(default_factory=PathsConfig)
