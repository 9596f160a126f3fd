"""Closed enumerations accepted at the API boundary."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from dictee.errors import ValidationError

E = TypeVar("E", bound=Enum)


class ActionType(str, Enum):
    HEARD = "heard"
    TYPED = "typed"
    SPOKEN = "spoken"
    READ_ALOUD = "read_aloud"
    READ_SILENT = "read_silent"


class SortKey(str, Enum):
    TIMES_HEARD = "times_heard"
    TIMES_TYPED = "times_typed"
    TIMES_SPOKEN = "times_spoken"
    TIMES_READ_ALOUD = "times_read_aloud"
    TIMES_READ_SILENT = "times_read_silent"
    TOTAL_INTERACTIONS = "total_interactions"
    ALPHABETICAL = "alphabetical"
    LAST_SEEN = "last_seen"


class CefrLevel(str, Enum):
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"


class Theme(str, Enum):
    GENERAL = "General"
    TRAVEL = "Travel"
    FOOD = "Food"
    DAILY_LIFE = "Daily Life"


class SubscriptionStatus(str, Enum):
    INACTIVE = "inactive"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"


def parse_enum(enum_cls: type[E], value, field: str) -> E:
    """Coerce *value* into a member of *enum_cls* or raise ValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}") from None
