from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stayrules.core.deps import get_db
from stayrules.schemas.booking import ApplicableRules, BookingRequest, BookingValidationOut
from stayrules.services.occupancy_service import load_occupancy
from stayrules.services.rule_config_service import get_rule_set
from stayrules.services.stay_rule_engine import (
    get_applicable_rules_for_period,
    get_validation_summary,
    validate_booking,
)

router = APIRouter()


@router.post("/{property_id}/validate-booking", response_model=BookingValidationOut)
def validate(property_id: str, payload: BookingRequest, db: Session = Depends(get_db)):
    config, _ = get_rule_set(db, property_id)
    booking = payload.model_copy(update={"property_id": property_id})

    occupancy = []
    if booking.check_out_date > booking.check_in_date:
        occupancy = load_occupancy(
            db,
            property_id=property_id,
            from_date=booking.check_in_date,
            to_date=booking.check_out_date,
        )

    result = validate_booking(booking, config, occupancy)
    return BookingValidationOut(**dict(result), summary=get_validation_summary(result))


@router.get("/{property_id}/stay-rules", response_model=ApplicableRules)
def rules_for_period(property_id: str, from_date: date, to_date: date, db: Session = Depends(get_db)):
    if to_date < from_date:
        raise HTTPException(status_code=400, detail="Invalid date range")
    config, _ = get_rule_set(db, property_id)
    return get_applicable_rules_for_period(from_date, to_date, config)
