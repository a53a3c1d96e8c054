from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from stayrules.core.deps import get_db
from stayrules.schemas.stay_rule import RuleCreate, RuleCreated, RuleSetOut
from stayrules.services.audit_service import write_audit_log
from stayrules.services.rule_config_service import add_rule, get_rule_set, save_rule_set
from stayrules.services.stay_rule_engine import has_active_rules

router = APIRouter()


@router.get("/{property_id}/stay-rules", response_model=RuleSetOut)
def get_stay_rules(property_id: str, db: Session = Depends(get_db)):
    config, stored = get_rule_set(db, property_id)
    return RuleSetOut(property_id=property_id, dynamic_stay_rules=config, stored=stored, has_active_rules=has_active_rules(config))


@router.put("/{property_id}/stay-rules", response_model=RuleSetOut)
def replace_stay_rules(property_id: str, request: Request, payload: Any = Body(...), db: Session = Depends(get_db)):
    config = save_rule_set(db, property_id, payload)

    write_audit_log(
        db,
        action_type="STAY_RULES_UPDATE",
        target_type="property",
        target_id=property_id,
        summary="Replaced dynamic stay rules",
        diff_json=config.model_dump(mode="json", by_alias=True),
        request=request,
    )
    return RuleSetOut(property_id=property_id, dynamic_stay_rules=config, stored=True, has_active_rules=has_active_rules(config))


@router.post("/{property_id}/stay-rules", response_model=RuleCreated)
def create_stay_rule(property_id: str, payload: RuleCreate, request: Request, db: Session = Depends(get_db)):
    rule = add_rule(db, property_id, rule_type=payload.rule_type, rule=payload.rule)

    write_audit_log(
        db,
        action_type="STAY_RULE_CREATE",
        target_type="property",
        target_id=property_id,
        summary=f"Added {payload.rule_type} rule",
        diff_json={"ruleType": payload.rule_type, "rule": rule.model_dump(mode="json", by_alias=True)},
        request=request,
    )
    return RuleCreated(message=f"{payload.rule_type} rule added successfully", rule=rule)
