"""Database models - shift lifecycle (restaurants, workers, shifts, bids, swaps, time-off, availability).
Every status is a closed enum; Shift / ShiftBid / ShiftSwap / TimeOffRequest carry a version column used as an optimistic lock."""
import enum
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import String, Date, Time, Text, Numeric, ForeignKey, DateTime, Boolean, Integer, UniqueConstraint, JSON
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base


class UserRole(str, enum.Enum):
    restaurant_owner = "restaurant_owner"
    worker = "worker"
    admin = "admin"


class ShiftStatus(str, enum.Enum):
    open = "open"
    assigned = "assigned"
    bidding = "bidding"
    completed = "completed"


class BidStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class SwapStatus(str, enum.Enum):
    pending_manager = "pending_manager"
    approved = "approved"
    rejected = "rejected"


class TimeOffStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class RecurringPattern(str, enum.Enum):
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"


class DayOfWeek(str, enum.Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


class TemplateShiftType(str, enum.Enum):
    morning = "morning"
    afternoon = "afternoon"
    evening = "evening"
    night = "night"
    flexible = "flexible"


class RecipientType(str, enum.Enum):
    worker = "worker"
    restaurant = "restaurant"


# Monday-first, matches date.weekday()
WEEKDAYS = tuple(DayOfWeek)

JOB_TYPES = (
    "Server", "Bartender", "Line Cook", "Prep Cook", "Host/Hostess", "Busser",
    "Dishwasher", "Barista", "Food Runner", "Kitchen Manager", "Catering Staff", "Other",
)

# Shift states that still accept bids / edits
BIDDABLE_SHIFT_STATUSES = (ShiftStatus.open, ShiftStatus.bidding)


def _enum(enum_cls, length: int = 20):
    # Store the .value strings; no native DB enum so migrations stay portable
    return SAEnum(enum_cls, native_enum=False, length=length, values_callable=lambda e: [m.value for m in e])


class Restaurant(Base):
    """Restaurant account; owner_email is the identity used to resolve a session."""
    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), comment="Display name")
    owner_email: Mapped[str] = mapped_column(String(255), unique=True, index=True, comment="Owner login e-mail")
    address: Mapped[Optional[str]] = mapped_column(String(500), comment="Street address")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    shifts: Mapped[List["Shift"]] = relationship("Shift", back_populates="restaurant", cascade="all, delete-orphan")
    templates: Mapped[List["ShiftTemplate"]] = relationship("ShiftTemplate", back_populates="restaurant", cascade="all, delete-orphan")


class WorkerProfile(Base):
    """Temporary worker profile; user_email is the identity used to resolve a session."""
    __tablename__ = "worker_profiles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_email: Mapped[str] = mapped_column(String(255), unique=True, index=True, comment="Worker login e-mail")
    full_name: Mapped[str] = mapped_column(String(100), comment="Name shown to managers")
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Shift(Base):
    """One scheduled work slot. assigned_worker_id is set only while assigned/completed."""
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), index=True)
    job_type: Mapped[str] = mapped_column(String(50), comment="Server / Bartender / Line Cook ...")
    shift_date: Mapped[date] = mapped_column(Date, index=True, comment="Work date")
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)
    hourly_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), comment="Offered hourly rate")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[ShiftStatus] = mapped_column(_enum(ShiftStatus), default=ShiftStatus.open, index=True)
    allow_bidding: Mapped[bool] = mapped_column(Boolean, default=False)
    assigned_worker_id: Mapped[Optional[int]] = mapped_column(ForeignKey("worker_profiles.id", ondelete="SET NULL"), index=True)
    assigned_worker_name: Mapped[Optional[str]] = mapped_column(String(100))
    bids_count: Mapped[int] = mapped_column(Integer, default=0)
    parent_shift_id: Mapped[Optional[int]] = mapped_column(ForeignKey("shifts.id", ondelete="SET NULL"), index=True, comment="First shift of a recurring series")
    version: Mapped[int] = mapped_column(Integer, nullable=False, comment="Optimistic lock revision")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    restaurant: Mapped["Restaurant"] = relationship("Restaurant", back_populates="shifts")
    bids: Mapped[List["ShiftBid"]] = relationship("ShiftBid", back_populates="shift", cascade="all, delete-orphan")


class ShiftBid(Base):
    """A worker's offer on a biddable shift; one bid per worker per shift."""
    __tablename__ = "shift_bids"
    __table_args__ = (UniqueConstraint("shift_id", "worker_id", name="uq_shift_bid_worker"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    shift_id: Mapped[int] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), index=True)
    worker_id: Mapped[int] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), index=True)
    worker_name: Mapped[str] = mapped_column(String(100))
    bid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), comment="Requested hourly rate")
    message: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[BidStatus] = mapped_column(_enum(BidStatus), default=BidStatus.pending, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    shift: Mapped["Shift"] = relationship("Shift", back_populates="bids")


class ShiftSwap(Base):
    """Hand-off request for an assigned shift, resolved by the restaurant manager."""
    __tablename__ = "shift_swaps"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    shift_id: Mapped[int] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), index=True)
    requesting_worker_id: Mapped[int] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), index=True)
    target_worker_name: Mapped[Optional[str]] = mapped_column(String(100), comment="Named colleague; empty for open swaps")
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), index=True)
    shift_date: Mapped[date] = mapped_column(Date, comment="Snapshot of the shift date")
    shift_time: Mapped[str] = mapped_column(String(20), comment="Snapshot, HH:MM - HH:MM")
    reason: Mapped[Optional[str]] = mapped_column(Text)
    is_open_swap: Mapped[bool] = mapped_column(Boolean, default=True)
    status: Mapped[SwapStatus] = mapped_column(_enum(SwapStatus), default=SwapStatus.pending_manager, index=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}


class TimeOffRequest(Base):
    """Inclusive date range of unavailability, resolved by the restaurant manager."""
    __tablename__ = "time_off_requests"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    worker_id: Mapped[int] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), index=True)
    worker_name: Mapped[str] = mapped_column(String(100))
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), index=True)
    start_date: Mapped[date] = mapped_column(Date, index=True)
    end_date: Mapped[date] = mapped_column(Date, index=True)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    is_all_day: Mapped[bool] = mapped_column(Boolean, default=True)
    status: Mapped[TimeOffStatus] = mapped_column(_enum(TimeOffStatus), default=TimeOffStatus.pending, index=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}


class AvailabilityBlock(Base):
    __tablename__ = "availability_blocks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    worker_id: Mapped[int] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), index=True)
    day_of_week: Mapped[DayOfWeek] = mapped_column(_enum(DayOfWeek))
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=True, comment="Repeats every week")
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False, comment="True = unavailable window")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ShiftTemplate(Base):
    """Reusable weekly staffing pattern; applying it to a week materializes open shifts."""
    __tablename__ = "shift_templates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), index=True)
    template_name: Mapped[str] = mapped_column(String(100))
    job_type: Mapped[str] = mapped_column(String(50))
    shift_type: Mapped[TemplateShiftType] = mapped_column(_enum(TemplateShiftType), default=TemplateShiftType.flexible)
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)
    days_of_week: Mapped[List[str]] = mapped_column(JSON, default=list, comment="monday..sunday")
    positions_needed: Mapped[int] = mapped_column(Integer, default=1)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    restaurant: Mapped["Restaurant"] = relationship("Restaurant", back_populates="templates")


class Notification(Base):
    """In-app notification row; delivery channels live outside this service."""
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    recipient_type: Mapped[RecipientType] = mapped_column(_enum(RecipientType))
    recipient_id: Mapped[int] = mapped_column(Integer, index=True, comment="worker_profiles.id or restaurants.id")
    title: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(50), comment="bid_update / swap_update / time_off_update ...")
    related_entity_id: Mapped[Optional[int]] = mapped_column(Integer)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
