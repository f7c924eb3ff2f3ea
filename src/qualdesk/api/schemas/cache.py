"""Pydantic schemas for cache maintenance endpoints."""

from pydantic import BaseModel, Field


class CacheInvalidateRequest(BaseModel):
    key: str = Field(..., min_length=1, description="Cache key, e.g. qualifications-<owner>")


class CacheInvalidateResponse(BaseModel):
    key: str
    removed: bool


class CacheStatusResponse(BaseModel):
    keys: list[str]
    count: int
