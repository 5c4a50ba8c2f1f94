"""Local task contracts."""

from __future__ import annotations

from typing import TypeAlias

from pydantic import BaseModel, Field, model_validator

FieldValue: TypeAlias = str | list[str] | None


class ReferenceEntry(BaseModel):
    """Provider-scoped link between a local task and a remote issue.

    ``external_id`` is always stored normalized (no ``jira:``/``github:`` prefix).
    """

    provider: str
    external_id: str

    model_config = {"frozen": True}


class Task(BaseModel):
    id: str
    project: str
    fields: dict[str, FieldValue] = Field(default_factory=dict)
    references: list[ReferenceEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_single_reference_per_provider(self) -> Task:
        seen: set[str] = set()
        for reference in self.references:
            if reference.provider in seen:
                raise ValueError(f"task {self.id} has more than one {reference.provider} reference")
            seen.add(reference.provider)
        return self

    @property
    def title(self) -> str:
        value = self.fields.get("title")
        return value if isinstance(value, str) else ""

    def reference_for(self, provider: str) -> ReferenceEntry | None:
        for reference in self.references:
            if reference.provider == provider:
                return reference
        return None
