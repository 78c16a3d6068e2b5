from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import date, datetime

AvailabilityStatus = Literal["available", "unavailable", "maybe"]


class AvailabilityEntry(BaseModel):
    date: date
    availability_status: AvailabilityStatus
    notes: Optional[str] = None


class TripAvailabilityEntry(BaseModel):
    date: date
    availability_status: AvailabilityStatus
    override_reason: Optional[str] = None
    synced_from_central: bool = False


class AvailabilitySet(BaseModel):
    dates: List[AvailabilityEntry] = Field(min_length=1)


class TripAvailabilitySet(BaseModel):
    dates: List[TripAvailabilityEntry] = Field(min_length=1)


class AvailabilityClear(BaseModel):
    dates: List[date] = Field(min_length=1)


class UserAvailabilityResponse(BaseModel):
    id: str
    user_id: str
    date: date
    availability_status: AvailabilityStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TripUserAvailabilityResponse(BaseModel):
    id: str
    trip_id: str
    user_id: str
    date: date
    availability_status: AvailabilityStatus
    override_reason: Optional[str] = None
    synced_from_central: bool = False
    last_sync_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MemberAvailabilityCell(BaseModel):
    user_id: str
    date: date
    status: AvailabilityStatus
    is_override: bool
    notes: Optional[str] = None
    override_reason: Optional[str] = None


class HeatmapDay(BaseModel):
    date: date
    total_members: int
    available_count: int
    maybe_count: int
    unavailable_count: int
    availability_percentage: int


class HeatmapSummary(BaseModel):
    total_days: int
    perfect_days: int
    good_days: int
    okay_days: int
    poor_days: int
    avg_availability: float
    total_members: int


class HeatmapResponse(BaseModel):
    days: List[HeatmapDay]
    summary: HeatmapSummary
    best_dates: List[HeatmapDay]


class SyncResult(BaseModel):
    synced_count: int


class SyncStatus(BaseModel):
    needs_sync: bool
    central_count: int
    trip_count: int
    last_sync: Optional[datetime] = None


class MutationResult(BaseModel):
    success: bool = True
    count: int = 0
