"""Pydantic models for the web API."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class VersionResponse(BaseModel):
    """Application name and semantic version."""

    name: str
    version: str
