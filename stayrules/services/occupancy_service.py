from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from stayrules.models.occupancy import OccupancySnapshot
from stayrules.schemas.booking import OccupancySample
from stayrules.schemas.stay_rule import DemandLevel

logger = logging.getLogger(__name__)


def load_occupancy(db: Session, *, property_id: str, from_date: date, to_date: date) -> list[OccupancySample]:
    """Samples for nights from_date (inclusive) to to_date (exclusive)."""
    rows = db.execute(
        select(OccupancySnapshot)
        .where(OccupancySnapshot.property_id == property_id)
        .where(OccupancySnapshot.day >= from_date)
        .where(OccupancySnapshot.day < to_date)
        .order_by(OccupancySnapshot.day)
    ).scalars().all()

    samples: list[OccupancySample] = []
    for row in rows:
        try:
            level = DemandLevel(row.demand_level)
        except ValueError:
            logger.warning("Unknown demand level %r for property %s on %s", row.demand_level, property_id, row.day)
            level = DemandLevel.MEDIUM
        samples.append(OccupancySample(date=row.day, occupancy_rate=row.occupancy_rate, demand_level=level))
    return samples


def upsert_occupancy(db: Session, *, property_id: str, samples: list[OccupancySample]) -> int:
    if not samples:
        return 0

    days = [s.date for s in samples]
    existing = {
        row.day: row
        for row in db.execute(
            select(OccupancySnapshot)
            .where(OccupancySnapshot.property_id == property_id)
            .where(OccupancySnapshot.day.in_(days))
        ).scalars().all()
    }

    # Later samples for the same day replace earlier ones.
    for s in samples:
        row = existing.get(s.date)
        if row is None:
            row = OccupancySnapshot(property_id=property_id, day=s.date)
            db.add(row)
            existing[s.date] = row
        row.occupancy_rate = s.occupancy_rate
        row.demand_level = s.demand_level.value
    db.commit()

    logger.info("Upserted %d occupancy sample(s) for property %s", len(existing), property_id)
    return len(existing)
