from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import Dict, Optional


# Points schemas
class PointsBreakdown(BaseModel):
    total: int = 0
    base: int = 0
    multiplier: float = 1.0
    bonus: int = 0
    categories: Dict[str, int] = Field(default_factory=dict)  # points per checklist key


class Level(BaseModel):
    min_points: int
    level: int
    label: str
    arabic: str = ""


class LifetimeTotal(BaseModel):
    total: int
    level: Level
    next_level: Optional[Level] = None
    progress: int = Field(ge=0, le=100)


class TodayProgress(BaseModel):
    completed: int
    total: int
    percentage: int


class DaySummary(BaseModel):
    date: date
    completed: int
    total: int


# Remote tracking schemas
class TrackingRowUpdate(BaseModel):
    """Body of PUT /api/tracking/{date}: the full daily record"""
    model_config = ConfigDict(extra="allow")

    fasted: bool = False
    quran: bool = False
    dhikr: bool = False
    prayer: bool = False
    masjid: bool = False


class TrackingPutResponse(BaseModel):
    success: bool = True
    date: date


class ProfileStats(BaseModel):
    tracked_days: int = 0  # at least one item done
    perfect_days: int = 0
    item_totals: Dict[str, int] = Field(default_factory=dict)  # days each checklist key was done
