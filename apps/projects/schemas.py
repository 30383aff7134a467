"""
Pydantic schemas for Projects API.

Request bodies are deliberately lenient: malformed values are coerced
(order → 0, unknown status → DRAFT, non-list arrays → []) instead of
rejected. Required fields are checked by the endpoints so a missing
title/description/thumbnail is a 400, not a schema error.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from apps.projects.utils import normalize_status, parse_order, string_list

ProjectStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectInput(CamelModel):
    """Schema for creating or fully replacing a project."""
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    long_description: Optional[str] = None
    thumbnail: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    live_url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    featured: bool = False
    status: str = "DRAFT"
    order: int = 0

    @field_validator(
        "title", "slug", "description", "long_description", "thumbnail",
        "live_url", "github_url", "category",
        mode="before",
    )
    @classmethod
    def _as_text(cls, value: Any):
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("images", mode="before")
    @classmethod
    def _images(cls, value: Any):
        return string_list(value)

    @field_validator("technologies", mode="before")
    @classmethod
    def _technologies(cls, value: Any):
        return string_list(value, strip=True)

    @field_validator("featured", mode="before")
    @classmethod
    def _featured(cls, value: Any):
        return bool(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any):
        return normalize_status(value)

    @field_validator("order", mode="before")
    @classmethod
    def _order(cls, value: Any):
        return parse_order(value)


class ProjectResponse(CamelModel):
    """Schema for project responses."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    slug: str
    title: str
    description: str
    long_description: Optional[str] = None
    category: str
    technologies: list[str] = Field(default_factory=list)
    thumbnail: str
    images: list[str] = Field(default_factory=list)
    live_url: Optional[str] = None
    github_url: Optional[str] = None
    featured: bool
    order: int
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime
