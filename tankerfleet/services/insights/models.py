from typing import List, Optional
from pydantic import BaseModel, Field


class TripEntryPayload(BaseModel):
    trip_type: str
    trip_count: int = Field(gt=0)
    date: str


class PastMonthSummary(BaseModel):
    month: str
    total_trips: int = Field(ge=0)
    payout: float = Field(ge=0)


class DriverInsightsRequest(BaseModel):
    """What the generative collaborator is told about a driver's month."""
    driver_id: int
    current_month_total_trips: int = Field(ge=0)
    current_slab_description: str
    estimated_payout: float = Field(ge=0)
    next_slab_description: str
    trips_needed_for_next_slab: Optional[int] = None
    current_month_trip_entries: List[TripEntryPayload] = Field(default_factory=list)
    past_month_summaries: List[PastMonthSummary] = Field(default_factory=list)


class MonthSummary(BaseModel):
    month: str
    total_trips: int = Field(ge=0)
    slab_matched: str
    payout: float = Field(ge=0)


class MonthlyReportRequest(BaseModel):
    driver_name: str
    current: MonthSummary
    previous: Optional[MonthSummary] = None
