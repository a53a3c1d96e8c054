from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized form uses camelCase keys (``minStay``, ``startDate``); attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TriggerType(str, Enum):
    SEASON = "season"
    DEMAND = "demand"
    OCCUPANCY = "occupancy"
    EVENT = "event"
    CUSTOM = "custom"


class DemandLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TriggerCondition(CamelModel):
    occupancy_threshold: float | None = Field(default=None, ge=0, le=100)
    demand_level: DemandLevel | None = None
    event_type: str | None = None


class _DateScopedRule(CamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    start_date: date
    end_date: date
    trigger_type: TriggerType = TriggerType.SEASON
    trigger_condition: TriggerCondition | None = None
    priority: int = 1
    is_active: bool = True
    description: str | None = None


class StayRule(_DateScopedRule):
    min_stay: int = Field(ge=1)
    # Not checked against min_stay here; the engine ignores a maximum below the minimum.
    max_stay: int | None = None


class WindowRule(_DateScopedRule):
    min_advance_booking: int = Field(ge=0)
    max_advance_booking: int | None = None
    last_minute_booking: bool = True


class DefaultRequirements(CamelModel):
    min_stay: int = Field(default=1, ge=1)
    max_stay: int | None = None
    min_advance_booking: int = Field(default=0, ge=0)
    max_advance_booking: int | None = None
    last_minute_booking: bool = True


class RuleSetConfig(CamelModel):
    enabled: bool = False
    minimum_stay_rules: list[StayRule] = Field(default_factory=list)
    booking_window_rules: list[WindowRule] = Field(default_factory=list)
    default_rules: DefaultRequirements = Field(default_factory=DefaultRequirements)


class RuleCreate(BaseModel):
    rule_type: Literal["minimumStay", "bookingWindow"] = Field(alias="ruleType")
    rule: dict


class RuleCreated(BaseModel):
    message: str
    rule: StayRule | WindowRule


class RuleSetOut(CamelModel):
    property_id: str
    dynamic_stay_rules: RuleSetConfig
    stored: bool
    has_active_rules: bool
