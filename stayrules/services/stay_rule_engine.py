"""Resolve date-scoped stay and booking-window rules and check a booking against them.

Everything here is a pure function of its arguments: rule sets, occupancy
samples and the booking date are all passed in, nothing reads the clock or the
database. Booking problems are reported as strings in ``ValidationResult.errors``,
never raised.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date, timedelta
from typing import Callable, Iterable, Sequence, TypeVar

from stayrules.schemas.booking import (
    AppliedRules,
    ApplicableRules,
    BookingRequest,
    OccupancySample,
    ResolvedRequirements,
    ValidationResult,
)
from stayrules.schemas.stay_rule import (
    DefaultRequirements,
    DemandLevel,
    RuleSetConfig,
    StayRule,
    TriggerCondition,
    TriggerType,
    WindowRule,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", StayRule, WindowRule)

FAR_ADVANCE_RATIO = 0.8

# Most frequent demand level wins; equal counts resolve in this order.
DEMAND_TIE_ORDER = (DemandLevel.HIGH, DemandLevel.MEDIUM, DemandLevel.LOW)


def _stay_nights(check_in: date, check_out: date):
    cur = check_in
    while cur < check_out:
        yield cur
        cur = cur + timedelta(days=1)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def _effective_max(minimum: int, maximum: int | None) -> int | None:
    # A maximum below its minimum is a config error; treat it as unbounded.
    if maximum is None or maximum < minimum:
        return None
    return maximum


def rule_overlaps(rule: StayRule | WindowRule, start: date, end: date) -> bool:
    """True if the rule's [start_date, end_date] touches the span start..end.

    Either end of the span may fall inside the rule, or the rule may sit
    wholly inside the span.
    """
    if rule.start_date <= start <= rule.end_date:
        return True
    if rule.start_date <= end <= rule.end_date:
        return True
    return start < rule.start_date and end > rule.end_date


def samples_for_stay(booking: BookingRequest, occupancy: Iterable[OccupancySample]) -> list[OccupancySample]:
    nights = set(_stay_nights(booking.check_in_date, booking.check_out_date))
    return [s for s in occupancy if s.date in nights]


def dominant_demand_level(samples: Sequence[OccupancySample]) -> DemandLevel:
    if not samples:
        return DemandLevel.MEDIUM
    counts = Counter(s.demand_level for s in samples)
    top = max(counts.values())
    for level in DEMAND_TIE_ORDER:
        if counts[level] == top:
            return level
    return DemandLevel.MEDIUM


def average_occupancy(samples: Sequence[OccupancySample]) -> float | None:
    if not samples:
        return None
    return sum(s.occupancy_rate for s in samples) / len(samples)


def _always(condition: TriggerCondition, samples: Sequence[OccupancySample]) -> bool:
    return True


def _demand_met(condition: TriggerCondition, samples: Sequence[OccupancySample]) -> bool:
    if condition.demand_level is None:
        return False
    return dominant_demand_level(samples) == condition.demand_level


def _occupancy_met(condition: TriggerCondition, samples: Sequence[OccupancySample]) -> bool:
    if condition.occupancy_threshold is None:
        return False
    avg = average_occupancy(samples)
    # No data for the stay means the threshold cannot be confirmed.
    if avg is None:
        return False
    return avg >= condition.occupancy_threshold


TRIGGER_EVALUATORS: dict[TriggerType, Callable[[TriggerCondition, Sequence[OccupancySample]], bool]] = {
    TriggerType.SEASON: _always,
    TriggerType.EVENT: _always,
    TriggerType.CUSTOM: _always,
    TriggerType.DEMAND: _demand_met,
    TriggerType.OCCUPANCY: _occupancy_met,
}

_missing = set(TriggerType) - set(TRIGGER_EVALUATORS)
if _missing:
    raise RuntimeError(f"No trigger evaluator for: {sorted(t.value for t in _missing)}")


def trigger_condition_met(rule: StayRule | WindowRule, stay_samples: Sequence[OccupancySample] = ()) -> bool:
    """Evaluate a rule's trigger against samples already narrowed to the stay nights."""
    if rule.trigger_condition is None:
        return True
    evaluate = TRIGGER_EVALUATORS[rule.trigger_type]
    return evaluate(rule.trigger_condition, stay_samples)


def _selection_key(rule: StayRule | WindowRule) -> tuple[int, str]:
    return (-rule.priority, rule.id)


def find_applicable_rule(
    rules: Sequence[R],
    booking: BookingRequest,
    occupancy: Sequence[OccupancySample] = (),
) -> R | None:
    """Pick the governing rule of one family for a booking.

    Highest priority wins, equal priorities go to the smallest id. Returns
    None when nothing active matches both the dates and the trigger.
    """
    stay_samples = samples_for_stay(booking, occupancy)
    candidates = [
        r
        for r in rules
        if r.is_active
        and rule_overlaps(r, booking.check_in_date, booking.check_out_date)
        and trigger_condition_met(r, stay_samples)
    ]
    if not candidates:
        return None

    candidates.sort(key=_selection_key)
    selected = candidates[0]
    logger.debug(
        "Selected rule %s (priority %s) from %d candidate(s): %s",
        selected.id,
        selected.priority,
        len(candidates),
        [r.id for r in candidates],
    )
    return selected


def resolve_requirements(
    defaults: DefaultRequirements,
    *,
    stay_rule: StayRule | None = None,
    window_rule: WindowRule | None = None,
) -> ResolvedRequirements:
    min_stay, max_stay = defaults.min_stay, defaults.max_stay
    if stay_rule is not None:
        min_stay, max_stay = stay_rule.min_stay, stay_rule.max_stay

    min_adv, max_adv = defaults.min_advance_booking, defaults.max_advance_booking
    last_minute = defaults.last_minute_booking
    if window_rule is not None:
        min_adv, max_adv = window_rule.min_advance_booking, window_rule.max_advance_booking
        last_minute = window_rule.last_minute_booking

    return ResolvedRequirements(
        min_stay=min_stay,
        max_stay=_effective_max(min_stay, max_stay),
        min_advance_booking=min_adv,
        max_advance_booking=_effective_max(min_adv, max_adv),
        last_minute_booking=last_minute,
    )


def _stay_length_errors(nights: int, req: ResolvedRequirements) -> list[str]:
    errors: list[str] = []
    if nights < req.min_stay:
        errors.append(
            "Minimum stay requirement not met. "
            f"Required: {_plural(req.min_stay, 'night')}, Requested: {_plural(nights, 'night')}"
        )
    if req.max_stay is not None and nights > req.max_stay:
        errors.append(f"Maximum stay limit exceeded. Maximum: {req.max_stay} nights, Requested: {nights} nights")
    return errors


def _booking_window_errors(advance_days: int, req: ResolvedRequirements) -> list[str]:
    errors: list[str] = []
    if advance_days == 0:
        # Same-day: either blocked outright or exempt from the minimum.
        if not req.last_minute_booking:
            errors.append("Same-day bookings are not allowed for this period")
    elif advance_days < req.min_advance_booking:
        errors.append(
            "Minimum advance booking requirement not met. "
            f"Required: {_plural(req.min_advance_booking, 'day')} in advance, Current: {_plural(advance_days, 'day')}"
        )

    if req.max_advance_booking is not None and advance_days > req.max_advance_booking:
        errors.append(
            f"Booking too far in advance. Maximum: {req.max_advance_booking} days, Current: {advance_days} days"
        )
    return errors


def _booking_window_warnings(advance_days: int, req: ResolvedRequirements) -> list[str]:
    warnings: list[str] = []
    if advance_days <= 1 and req.min_advance_booking > 1:
        warnings.append("This is a last-minute booking and may be subject to additional fees")
    if req.max_advance_booking is not None and advance_days > req.max_advance_booking * FAR_ADVANCE_RATIO:
        warnings.append("This booking is quite far in advance - policies may change")
    return warnings


def validate_requirements(
    booking: BookingRequest,
    requirements: ResolvedRequirements,
    *,
    applied_rules: AppliedRules | None = None,
) -> ValidationResult:
    nights = (booking.check_out_date - booking.check_in_date).days
    advance_days = (booking.check_in_date - booking.booking_date).days

    errors = _stay_length_errors(nights, requirements) + _booking_window_errors(advance_days, requirements)
    warnings = _booking_window_warnings(advance_days, requirements)

    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        applied_rules=applied_rules or AppliedRules(),
        requirements=requirements,
    )


def validate_booking(
    request: BookingRequest,
    config: RuleSetConfig,
    occupancy: Sequence[OccupancySample] = (),
) -> ValidationResult:
    if not config.enabled:
        return validate_requirements(request, resolve_requirements(config.default_rules))

    stay_rule = find_applicable_rule(config.minimum_stay_rules, request, occupancy)
    window_rule = find_applicable_rule(config.booking_window_rules, request, occupancy)

    requirements = resolve_requirements(config.default_rules, stay_rule=stay_rule, window_rule=window_rule)
    result = validate_requirements(
        request,
        requirements,
        applied_rules=AppliedRules(stay_rule=stay_rule, window_rule=window_rule),
    )
    logger.debug(
        "Booking %s..%s for property %r: valid=%s stay_rule=%s window_rule=%s",
        request.check_in_date,
        request.check_out_date,
        request.property_id,
        result.is_valid,
        stay_rule.id if stay_rule else None,
        window_rule.id if window_rule else None,
    )
    return result


def get_applicable_rules_for_period(start: date, end: date, config: RuleSetConfig) -> ApplicableRules:
    """All active rules of each family overlapping start..end, for display.

    Triggers are not evaluated and no single rule is selected.
    """
    stay_rules = sorted(
        (r for r in config.minimum_stay_rules if r.is_active and rule_overlaps(r, start, end)),
        key=_selection_key,
    )
    window_rules = sorted(
        (r for r in config.booking_window_rules if r.is_active and rule_overlaps(r, start, end)),
        key=_selection_key,
    )
    return ApplicableRules(stay_rules=stay_rules, window_rules=window_rules)


def has_active_rules(config: RuleSetConfig) -> bool:
    if not config.enabled:
        return False
    return any(r.is_active for r in config.minimum_stay_rules) or any(
        r.is_active for r in config.booking_window_rules
    )


def get_validation_summary(result: ValidationResult) -> str:
    if not result.is_valid:
        return f"Booking cannot be processed: {', '.join(result.errors)}"

    summary = "Booking meets all requirements"
    if result.applied_rules.stay_rule or result.applied_rules.window_rule:
        summary += " (special rules applied)"
    if result.warnings:
        summary += f". Warnings: {', '.join(result.warnings)}"
    return summary
