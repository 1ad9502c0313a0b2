"""Data models for the roster's core entities.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from dictionaries.
External identities (the game platform's user and rank ids) are plain
integers; everything generated locally uses random hex strings.
"""

from __future__ import annotations

import datetime
import uuid
from enum import Enum

from pydantic import BaseModel, Field


def _new_id() -> str:
    return uuid.uuid4().hex


class StaffStatus(str, Enum):
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    SUSPENDED = "Suspended"
    RETIRED = "Retired"


class LogKind(str, Enum):
    POINT = "Point"
    WARNING = "Warning"
    PROMOTION = "Promotion"
    DEMOTION = "Demotion"
    SHIFT = "Shift"


class MetricKind(str, Enum):
    """Counters that an administrator may grant manually."""

    POINTS = "points"
    MINUTES = "minutes"


class ExternalMember(BaseModel):
    """A group member as reported by the external roster source."""

    model_config = {"frozen": True}

    external_id: int
    display_name: str
    external_rank_id: int
    avatar_url: str | None = None


class GroupRank(BaseModel):
    """One rank of the external group (``rank`` is 0-255 on Roblox)."""

    model_config = {"frozen": True}

    external_rank_id: int
    name: str


class GroupMetadata(BaseModel):
    group_name: str
    ranks: list[GroupRank] = Field(default_factory=list)


class RankMapping(BaseModel):
    """Associates an external rank with an internal role id.

    Attributes
    ----------
    external_rank_id:
        The numeric rank reported by the external platform.
    internal_role_id:
        Opaque identifier of the internal role, resolved to a display name
        through the role registry.
    label:
        Human label, usually the external rank's own name.

    """

    external_rank_id: int
    internal_role_id: str
    label: str


class LogEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    date: datetime.date
    kind: LogKind
    description: str
    issued_by: str
    # Quantity behind a grant; ``None`` for entries without one.
    amount: int | None = None


class StaffRecord(BaseModel):
    """The tracked state of one staff member.

    ``external_id`` is the identity key used during reconciliation and is
    unique across the roster. ``logs`` is kept newest first.
    """

    id: str = Field(default_factory=_new_id)
    external_id: int
    display_name: str
    internal_role_id: str
    status: StaffStatus = StaffStatus.ACTIVE
    joined_date: datetime.date
    total_points: int = Field(default=0, ge=0)
    total_minutes: int = Field(default=0, ge=0)
    is_active_session: bool = False
    shift_started_at: datetime.datetime | None = None
    shifts_completed: int = Field(default=0, ge=0)
    avatar_ref: str = ""
    logs: list[LogEntry] = Field(default_factory=list)


class AuthUser(BaseModel):
    """An authenticated operator session."""

    id: str = Field(default_factory=lambda: "u-" + uuid.uuid4().hex[:9])
    username: str
    role: str = "admin"
    last_login: datetime.datetime
    token: str = Field(default_factory=_new_id)


class GroupConfig(BaseModel):
    group_id: str = ""
    group_name: str = ""
    is_connected: bool = False
    rank_mappings: list[RankMapping] = Field(default_factory=list)


class HRMStats(BaseModel):
    total_staff: int = 0
    active_now: int = 0
    points_issued_today: int = 0
    pending_promotions: int = 0
    total_minutes_this_week: float = 0.0


class StaffAnalysis(BaseModel):
    summary: str
    recommendation: str
    potential_rating: float = Field(ge=0, le=10)
    sentiment: str
