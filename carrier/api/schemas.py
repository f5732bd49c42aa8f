"""Pydantic schemas for API."""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

# Progress values are stored in 32-bit INTEGER columns
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1


# Progress schemas
class ProgressReportIn(BaseModel):
    completed_goals: List[str] = Field(default_factory=list, alias="completedGoals")
    current_value: int = Field(0, ge=INT32_MIN, le=INT32_MAX, alias="currentValue")
    qualifying_qso_count: int = Field(0, ge=0, alias="qualifyingQsoCount")
    last_qso_date: Optional[datetime] = Field(None, alias="lastQsoDate")

    class Config:
        populate_by_name = True


class ServerProgress(BaseModel):
    completed_goals: List[str] = Field(alias="completedGoals")
    current_value: int = Field(alias="currentValue")
    percentage: float
    score: int
    rank: int
    current_tier: Optional[str] = Field(None, alias="currentTier")

    class Config:
        populate_by_name = True


class ProgressReportResult(BaseModel):
    accepted: bool
    server_progress: ServerProgress = Field(alias="serverProgress")
    new_badges: List[str] = Field(default_factory=list, alias="newBadges")

    class Config:
        populate_by_name = True


# Leaderboard schemas
class LeaderboardEntryInfo(BaseModel):
    rank: int
    callsign: str
    score: int
    current_tier: Optional[str] = Field(None, alias="currentTier")
    completed_at: Optional[datetime] = Field(None, alias="completedAt")

    class Config:
        populate_by_name = True


class Leaderboard(BaseModel):
    leaderboard: List[LeaderboardEntryInfo]
    total: int
    user_position: Optional[LeaderboardEntryInfo] = Field(None, alias="userPosition")
    last_updated: datetime = Field(alias="lastUpdated")

    class Config:
        populate_by_name = True


class SnapshotInfo(BaseModel):
    id: str
    challenge_id: str = Field(alias="challengeId")
    ended_at: datetime = Field(alias="endedAt")
    final_standings: List[Dict[str, Any]] = Field(alias="finalStandings")
    statistics: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True
