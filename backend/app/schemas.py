"""API request / response schemas - Pydantic (shift lifecycle)."""
from datetime import date, datetime, time
from decimal import Decimal

# Alias: a field called date annotated with type date clashes in Pydantic, so annotate with DateType
DateType = date
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from app.models import (
    UserRole, ShiftStatus, BidStatus, SwapStatus, TimeOffStatus, RecurringPattern,
    DayOfWeek, TemplateShiftType, RecipientType,
)


def _check_time_window(start: Optional[time], end: Optional[time]) -> None:
    if start is not None and end is not None and start == end:
        raise ValueError("start_time and end_time must differ")


def _reject_nulls(cls, values, nullable=()):
    """PATCH bodies: omitting a field leaves it unchanged, but null is only allowed for nullable columns."""
    if isinstance(values, dict):
        bad = sorted(k for k, v in values.items() if v is None and k in cls.model_fields and k not in nullable)
        if bad:
            raise ValueError(f"{', '.join(bad)} cannot be null")
    return values


# ---------- session / identity ----------
class SessionRead(BaseModel):
    email: str
    role: UserRole
    restaurant_id: Optional[int] = None
    worker_id: Optional[int] = None
    display_name: Optional[str] = None


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)


class RestaurantRead(RestaurantCreate):
    id: int
    owner_email: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class WorkerProfileCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)


class WorkerProfileRead(WorkerProfileCreate):
    id: int
    user_email: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- shifts ----------
class ShiftBase(BaseModel):
    job_type: str = Field(..., min_length=1, max_length=50, description="Server / Bartender / Line Cook ...")
    shift_date: date = Field(..., description="Work date")
    start_time: time = Field(..., description="Start, HH:MM")
    end_time: time = Field(..., description="End, HH:MM (earlier than start = overnight)")
    hourly_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    notes: Optional[str] = None
    allow_bidding: bool = False


class ShiftCreate(ShiftBase):
    """Single shift, or a recurring series when is_recurring is set."""
    is_recurring: bool = False
    recurring_pattern: RecurringPattern = RecurringPattern.weekly

    @model_validator(mode="after")
    def _times(self):
        _check_time_window(self.start_time, self.end_time)
        return self


class ShiftUpdate(BaseModel):
    job_type: Optional[str] = Field(None, min_length=1, max_length=50)
    shift_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    hourly_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    notes: Optional[str] = None
    allow_bidding: Optional[bool] = None
    # Only the two pre-assignment states may be set by hand
    status: Optional[ShiftStatus] = None

    @model_validator(mode="before")
    @classmethod
    def _no_nulls(cls, values):
        return _reject_nulls(cls, values, nullable=("hourly_rate", "notes"))

    @field_validator("status")
    @classmethod
    def _manual_status(cls, v):
        if v is not None and v not in (ShiftStatus.open, ShiftStatus.bidding):
            raise ValueError("status can only be set to open or bidding")
        return v

    @model_validator(mode="after")
    def _times(self):
        _check_time_window(self.start_time, self.end_time)
        return self


class ShiftRead(ShiftBase):
    id: int
    restaurant_id: int
    status: ShiftStatus
    assigned_worker_id: Optional[int] = None
    assigned_worker_name: Optional[str] = None
    bids_count: int = 0
    parent_shift_id: Optional[int] = None
    version: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- bids ----------
class ShiftBidCreate(BaseModel):
    bid_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Requested hourly rate")
    message: Optional[str] = Field(None, max_length=2000)


class ShiftBidRead(BaseModel):
    id: int
    shift_id: int
    worker_id: int
    worker_name: str
    bid_amount: Decimal
    message: Optional[str] = None
    status: BidStatus
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class BidAcceptResult(BaseModel):
    """Outcome of one acceptance: the winning bid, the assigned shift and the bids it rejected."""
    bid: ShiftBidRead
    shift: ShiftRead
    rejected_bid_ids: List[int] = Field(default_factory=list)


# ---------- swaps ----------
class ShiftSwapCreate(BaseModel):
    shift_id: int
    reason: Optional[str] = Field(None, max_length=2000)
    is_open_swap: bool = True
    target_worker_name: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def _target(self):
        if not self.is_open_swap and not (self.target_worker_name or "").strip():
            raise ValueError("target_worker_name is required when is_open_swap is false")
        return self


class ShiftSwapRead(BaseModel):
    id: int
    shift_id: int
    requesting_worker_id: int
    target_worker_name: Optional[str] = None
    restaurant_id: int
    shift_date: date
    shift_time: str
    reason: Optional[str] = None
    is_open_swap: bool
    status: SwapStatus
    resolved_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- time-off ----------
class TimeOffCreate(BaseModel):
    restaurant_id: int = Field(..., description="Restaurant whose manager resolves the request")
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=2000)
    is_all_day: bool = True

    @model_validator(mode="after")
    def _range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TimeOffRead(BaseModel):
    id: int
    worker_id: int
    worker_name: str
    restaurant_id: int
    start_date: date
    end_date: date
    reason: Optional[str] = None
    is_all_day: bool
    status: TimeOffStatus
    resolved_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ---------- availability ----------
class AvailabilityBase(BaseModel):
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    is_recurring: bool = True
    is_blocked: bool = False


class AvailabilityCreate(AvailabilityBase):
    @model_validator(mode="after")
    def _window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityUpdate(BaseModel):
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_recurring: Optional[bool] = None
    is_blocked: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def _no_nulls(cls, values):
        return _reject_nulls(cls, values)

    @model_validator(mode="after")
    def _window(self):
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityRead(AvailabilityBase):
    id: int
    worker_id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AvailabilityDay(BaseModel):
    day_of_week: DayOfWeek
    blocks: List[AvailabilityRead] = Field(default_factory=list)


# ---------- shift templates ----------
class ShiftTemplateBase(BaseModel):
    template_name: str = Field(..., min_length=1, max_length=100)
    job_type: str = Field(..., min_length=1, max_length=50)
    shift_type: TemplateShiftType = TemplateShiftType.flexible
    start_time: time
    end_time: time
    days_of_week: List[DayOfWeek] = Field(default_factory=list)
    positions_needed: int = Field(1, ge=1, le=50)
    notes: Optional[str] = None

    @field_validator("days_of_week")
    @classmethod
    def _unique_days(cls, v):
        seen = []
        for d in v:
            if d not in seen:
                seen.append(d)
        return seen


class ShiftTemplateCreate(ShiftTemplateBase):
    @model_validator(mode="after")
    def _times(self):
        _check_time_window(self.start_time, self.end_time)
        return self


class ShiftTemplateUpdate(BaseModel):
    template_name: Optional[str] = Field(None, min_length=1, max_length=100)
    job_type: Optional[str] = Field(None, min_length=1, max_length=50)
    shift_type: Optional[TemplateShiftType] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    days_of_week: Optional[List[DayOfWeek]] = None
    positions_needed: Optional[int] = Field(None, ge=1, le=50)
    notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _no_nulls(cls, values):
        return _reject_nulls(cls, values, nullable=("notes",))

    @model_validator(mode="after")
    def _times(self):
        _check_time_window(self.start_time, self.end_time)
        return self


class ShiftTemplateRead(ShiftTemplateBase):
    id: int
    restaurant_id: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ShiftTemplateApply(BaseModel):
    """Materialize the template into open shifts for the week containing week_of."""
    week_of: date
    hourly_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    allow_bidding: bool = False


# ---------- calendar ----------
class CalendarDay(BaseModel):
    date: DateType
    shifts: List[ShiftRead] = Field(default_factory=list)
    time_off: List[TimeOffRead] = Field(default_factory=list)


class CalendarWeek(BaseModel):
    week_start: date
    week_end: date
    days: List[CalendarDay]


# ---------- notifications ----------
class NotificationRead(BaseModel):
    id: int
    recipient_type: RecipientType
    recipient_id: int
    title: str
    message: str
    type: str
    related_entity_id: Optional[int] = None
    is_read: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
