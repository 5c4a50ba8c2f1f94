"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator

SUPPORTED_PROVIDERS = ("jira", "github")


class RemoteConfig(BaseModel):
    """One ``remotes.<name>`` entry of the project config.

    ``mapping`` is kept raw (``local_field -> "remote_field" | {...}``) and is
    compiled into rules at the start of every run.
    """

    provider: str
    project: str | None = None
    repo: str | None = None
    auth_profile: str | None = None
    filter: str | None = None
    mapping: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_target(self) -> RemoteConfig:
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"provider must be one of: {', '.join(SUPPORTED_PROVIDERS)}")
        if self.provider == "github" and not (self.repo or "").strip():
            raise ValueError("github remotes must define repo")
        if self.provider == "jira" and not (self.project or "").strip():
            raise ValueError("jira remotes must define project")
        return self

    @property
    def target(self) -> str:
        if self.provider == "github":
            return (self.repo or "").strip()
        return (self.project or "").strip()


class SyncSettings(BaseModel):
    write_reports: bool = True
    reports_dir: Path = Path("sync-reports")
    max_concurrent: int = Field(default=1, ge=1, le=10)


class TaskSyncConfig(BaseModel):
    """Project-scoped config (``tasksync.json``)."""

    default_project: str | None = None
    tasks_dir: Path = Path(".tasks")
    sync: SyncSettings = Field(default_factory=SyncSettings)
    remotes: dict[str, RemoteConfig] = Field(default_factory=dict)

    model_config = {"frozen": True}


class AuthProfile(BaseModel):
    """One ``auth_profiles.<name>`` entry of the home config."""

    provider: str | None = None
    method: str | None = None
    email_env: str | None = None
    token_env: str | None = None
    base_url: str | None = None
    api_url: str | None = None

    model_config = {"frozen": True}


class HomeConfig(BaseModel):
    """Home-scoped config; holds auth only and is never checked in."""

    auth_profiles: dict[str, AuthProfile] = Field(default_factory=dict)

    model_config = {"frozen": True}


class ResolvedAuth(BaseModel):
    """Auth profile with its secret material read from the environment."""

    profile: str
    provider: str | None = None
    method: str
    token: str
    email: str | None = None
    base_url: str | None = None

    model_config = {"frozen": True}

    def __repr__(self) -> str:
        return f"ResolvedAuth(profile={self.profile!r}, method={self.method!r})"
