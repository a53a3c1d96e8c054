from __future__ import annotations

from datetime import date

from pydantic import Field

from stayrules.schemas.stay_rule import CamelModel, DemandLevel, StayRule, WindowRule


class OccupancySample(CamelModel):
    date: date
    occupancy_rate: float = Field(ge=0, le=100)
    demand_level: DemandLevel = DemandLevel.MEDIUM


class OccupancyUpsert(CamelModel):
    samples: list[OccupancySample] = Field(default_factory=list)


class BookingRequest(CamelModel):
    check_in_date: date
    check_out_date: date
    booking_date: date
    guests: int = Field(default=1, ge=1, le=9999)
    property_id: str = ""


class ResolvedRequirements(CamelModel):
    min_stay: int
    max_stay: int | None = None
    min_advance_booking: int
    max_advance_booking: int | None = None
    last_minute_booking: bool


class AppliedRules(CamelModel):
    stay_rule: StayRule | None = None
    window_rule: WindowRule | None = None


class ValidationResult(CamelModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    applied_rules: AppliedRules = Field(default_factory=AppliedRules)
    requirements: ResolvedRequirements


class BookingValidationOut(ValidationResult):
    summary: str


class ApplicableRules(CamelModel):
    stay_rules: list[StayRule] = Field(default_factory=list)
    window_rules: list[WindowRule] = Field(default_factory=list)
