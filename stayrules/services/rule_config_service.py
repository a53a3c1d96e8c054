from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from stayrules.core.config import get_settings
from stayrules.models.stay_rule_set import PropertyStayRules
from stayrules.schemas.stay_rule import DefaultRequirements, RuleSetConfig, StayRule, TriggerType, WindowRule

logger = logging.getLogger(__name__)

TRIGGER_TYPES = [t.value for t in TriggerType]


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_iso_date(v: Any) -> bool:
    if not isinstance(v, str) or not v:
        return False
    try:
        date.fromisoformat(v[:10])
    except ValueError:
        return False
    return True


def _check_rule_common(rule: dict, where: str, errors: list[str]) -> None:
    if not rule.get("id") or not isinstance(rule.get("id"), str):
        errors.append(f"{where}.id is required and must be a string")
    if not rule.get("name") or not isinstance(rule.get("name"), str):
        errors.append(f"{where}.name is required and must be a string")

    start_ok = _is_iso_date(rule.get("startDate"))
    end_ok = _is_iso_date(rule.get("endDate"))
    if not start_ok:
        errors.append(f"{where}.startDate is required and must be an ISO date string")
    if not end_ok:
        errors.append(f"{where}.endDate is required and must be an ISO date string")
    if start_ok and end_ok and rule["endDate"][:10] < rule["startDate"][:10]:
        errors.append(f"{where}.endDate must not be before startDate")

    if rule.get("triggerType") not in TRIGGER_TYPES:
        errors.append(f"{where}.triggerType must be one of: {', '.join(TRIGGER_TYPES)}")
    if not _is_number(rule.get("priority")):
        errors.append(f"{where}.priority must be a number")
    if not isinstance(rule.get("isActive"), bool):
        errors.append(f"{where}.isActive must be a boolean")


def _check_bounds(obj: dict, where: str, min_key: str, max_key: str, floor: int, errors: list[str]) -> None:
    minimum = obj.get(min_key)
    if not _is_number(minimum) or minimum < floor:
        errors.append(f"{where}.{min_key} must be a number >= {floor}")
    maximum = obj.get(max_key)
    if maximum is not None and (not _is_number(maximum) or (_is_number(minimum) and maximum < minimum)):
        errors.append(f"{where}.{max_key} must be a number >= {min_key}")


def _check_family(payload: dict, key: str, errors: list[str], check_rule) -> None:
    rules = payload.get(key)
    if not isinstance(rules, list):
        errors.append(f"{key} must be an array")
        return

    seen: set[str] = set()
    for index, rule in enumerate(rules):
        where = f"{key}[{index}]"
        if not isinstance(rule, dict):
            errors.append(f"{where} must be an object")
            continue
        _check_rule_common(rule, where, errors)
        check_rule(rule, where, errors)
        rule_id = rule.get("id")
        if isinstance(rule_id, str) and rule_id:
            if rule_id in seen:
                errors.append(f"{where}.id duplicates an earlier rule id '{rule_id}'")
            seen.add(rule_id)


def _check_stay_rule(rule: dict, where: str, errors: list[str]) -> None:
    _check_bounds(rule, where, "minStay", "maxStay", 1, errors)


def _check_window_rule(rule: dict, where: str, errors: list[str]) -> None:
    _check_bounds(rule, where, "minAdvanceBooking", "maxAdvanceBooking", 0, errors)
    if not isinstance(rule.get("lastMinuteBooking"), bool):
        errors.append(f"{where}.lastMinuteBooking must be a boolean")


RULE_KINDS = {
    "minimumStay": (StayRule, _check_stay_rule),
    "bookingWindow": (WindowRule, _check_window_rule),
}


def validate_rule_set(payload: Any) -> list[str]:
    """Field-by-field problems with a serialized rule set; empty when it is acceptable."""
    if not isinstance(payload, dict):
        return ["rule set must be an object"]

    errors: list[str] = []
    if not isinstance(payload.get("enabled"), bool):
        errors.append("enabled must be a boolean")

    _check_family(payload, "minimumStayRules", errors, _check_stay_rule)
    _check_family(payload, "bookingWindowRules", errors, _check_window_rule)

    defaults = payload.get("defaultRules")
    if not isinstance(defaults, dict):
        errors.append("defaultRules is required and must be an object")
    else:
        _check_bounds(defaults, "defaultRules", "minStay", "maxStay", 1, errors)
        _check_bounds(defaults, "defaultRules", "minAdvanceBooking", "maxAdvanceBooking", 0, errors)
        if not isinstance(defaults.get("lastMinuteBooking"), bool):
            errors.append("defaultRules.lastMinuteBooking must be a boolean")

    return errors


def default_rule_set(*, enabled: bool = False) -> RuleSetConfig:
    settings = get_settings()
    return RuleSetConfig(
        enabled=enabled,
        default_rules=DefaultRequirements(
            min_stay=settings.default_min_stay,
            min_advance_booking=settings.default_min_advance_booking,
            last_minute_booking=settings.default_last_minute_booking,
        ),
    )


def _to_config(row: PropertyStayRules) -> RuleSetConfig:
    return RuleSetConfig.model_validate(
        {
            "enabled": row.enabled,
            "minimumStayRules": row.minimum_stay_rules or [],
            "bookingWindowRules": row.booking_window_rules or [],
            "defaultRules": row.default_rules or {},
        }
    )


def _store(db: Session, property_id: str, config: RuleSetConfig) -> PropertyStayRules:
    data = config.model_dump(mode="json", by_alias=True)
    row = db.get(PropertyStayRules, property_id)
    if row is None:
        row = PropertyStayRules(property_id=property_id)
        db.add(row)
    row.enabled = data["enabled"]
    row.minimum_stay_rules = data["minimumStayRules"]
    row.booking_window_rules = data["bookingWindowRules"]
    row.default_rules = data["defaultRules"]
    db.commit()
    db.refresh(row)
    return row


def get_rule_set(db: Session, property_id: str) -> tuple[RuleSetConfig, bool]:
    """Stored rule set for a property, or the default one; the flag says which."""
    row = db.get(PropertyStayRules, property_id)
    if row is None:
        return default_rule_set(), False
    return _to_config(row), True


def save_rule_set(db: Session, property_id: str, payload: Any) -> RuleSetConfig:
    errors = validate_rule_set(payload)
    if errors:
        raise HTTPException(status_code=400, detail={"error": "Validation failed", "details": errors})

    try:
        config = RuleSetConfig.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": "Validation failed", "details": [err["msg"] for err in e.errors()]},
        )

    _store(db, property_id, config)
    logger.info(
        "Saved stay rules for property %s: enabled=%s stay_rules=%d window_rules=%d",
        property_id,
        config.enabled,
        len(config.minimum_stay_rules),
        len(config.booking_window_rules),
    )
    return config


def add_rule(db: Session, property_id: str, *, rule_type: str, rule: dict) -> StayRule | WindowRule:
    # RuleCreate already narrows rule_type for HTTP callers; scripts call this directly.
    if rule_type not in RULE_KINDS:
        raise HTTPException(status_code=400, detail='Invalid ruleType. Must be "minimumStay" or "bookingWindow"')
    model, check_rule = RULE_KINDS[rule_type]

    data = dict(rule)
    data["id"] = str(uuid.uuid4())
    data["priority"] = data.get("priority") or 1
    if data.get("isActive") is None:
        data["isActive"] = True

    errors: list[str] = []
    _check_rule_common(data, "rule", errors)
    check_rule(data, "rule", errors)
    if errors:
        raise HTTPException(status_code=400, detail={"error": "Validation failed", "details": errors})

    row = db.get(PropertyStayRules, property_id)
    # A property's first rule switches the rule set on.
    config = _to_config(row) if row is not None else default_rule_set(enabled=True)

    try:
        new_rule = model.model_validate(data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": "Validation failed", "details": [err["msg"] for err in e.errors()]},
        )

    if isinstance(new_rule, StayRule):
        config = config.model_copy(update={"minimum_stay_rules": [*config.minimum_stay_rules, new_rule]})
    else:
        config = config.model_copy(update={"booking_window_rules": [*config.booking_window_rules, new_rule]})

    _store(db, property_id, config)
    logger.info("Added %s rule %s to property %s", rule_type, new_rule.id, property_id)
    return new_rule
