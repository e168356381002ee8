"""Pydantic request/response models for topic endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


# --- Daily topic ---


class TopicResponse(BaseModel):
    id: str | None
    topic: str
    presenter: str
    presenter_id: str | None = None
    category: str


class HistoryEntryResponse(BaseModel):
    date: date
    topic_id: str
    topic: str
    presenter: str
    category: str


class DailyTopicResponse(BaseModel):
    date: date
    topic: TopicResponse
    source: str  # "db" or "fallback"
    history: list[HistoryEntryResponse] | None = None


class TopicHistoryResponse(BaseModel):
    history: list[HistoryEntryResponse]


class RotationResponse(BaseModel):
    rotated: bool
    date: date
    topic: TopicResponse


# --- Admin ---


class AdminTopicResponse(TopicResponse):
    id: str
    weight: float
    enabled: bool


class AdminTopicListResponse(BaseModel):
    topics: list[AdminTopicResponse]
    total: int


class TopicCountResponse(BaseModel):
    count: int


class TopicCreateRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=500)
    presenter: str = Field(min_length=1, max_length=128)
    presenter_id: str | None = Field(None, max_length=64)
    category: str = Field("general", min_length=1, max_length=64)
    weight: float = Field(1.0, gt=0)
    id: str | None = Field(None, max_length=64)


class TopicUpdateRequest(BaseModel):
    topic: str | None = Field(None, min_length=1, max_length=500)
    presenter: str | None = Field(None, min_length=1, max_length=128)
    presenter_id: str | None = Field(None, max_length=64)
    category: str | None = Field(None, min_length=1, max_length=64)
    weight: float | None = Field(None, gt=0)
    enabled: bool | None = None


class SeedResponse(BaseModel):
    added: int
