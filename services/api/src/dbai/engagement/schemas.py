"""Pydantic request/response models for streak and leaderboard endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


# --- Completions (scoring service) ---


class CompletionRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=128)
    outcome: Literal["win", "loss", "draw"]
    score: float = Field(ge=0)
    display_name: str | None = Field(None, max_length=128)


class CompletionResponse(BaseModel):
    points_earned: int
    current_streak: int
    longest_streak: int
    total_points: int


class ShareRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=128)


class ShareResponse(BaseModel):
    awarded: bool
    points: int


# --- Streaks ---


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_active_date: date | None
    total_points: int
    active_today: bool
    points_table: dict[str, int] = {}


class StreakAtRiskEntry(BaseModel):
    user_id: str
    current_streak: int
    longest_streak: int


class StreakWarningsResponse(BaseModel):
    warnings_sent: int
    users: list[StreakAtRiskEntry]
    timestamp: datetime


# --- Leaderboard ---


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: str
    display_name: str | None
    username: str | None
    debates: int
    wins: int
    current_streak: int
    longest_streak: int
    avg_score: float
    total_points: int


class LeaderboardResponse(BaseModel):
    period: str
    sort: str
    entries: list[LeaderboardEntryResponse]


# --- Stats ---


class StatsResponse(BaseModel):
    total_debates: int
    total_wins: int
    total_draws: int
    total_losses: int
    total_score: float
    week_debates: int
    week_wins: int
    week_score: float
    week_start: date
