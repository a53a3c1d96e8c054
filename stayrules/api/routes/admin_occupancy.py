from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stayrules.core.deps import get_db
from stayrules.schemas.booking import OccupancySample, OccupancyUpsert
from stayrules.services.occupancy_service import load_occupancy, upsert_occupancy

router = APIRouter()


@router.get("/{property_id}/occupancy", response_model=list[OccupancySample])
def list_occupancy(property_id: str, from_date: date, to_date: date, db: Session = Depends(get_db)):
    if to_date < from_date:
        raise HTTPException(status_code=400, detail="Invalid date range")
    return load_occupancy(db, property_id=property_id, from_date=from_date, to_date=to_date)


@router.put("/{property_id}/occupancy")
def put_occupancy(property_id: str, payload: OccupancyUpsert, db: Session = Depends(get_db)):
    count = upsert_occupancy(db, property_id=property_id, samples=payload.samples)
    return {"ok": True, "count": count}
