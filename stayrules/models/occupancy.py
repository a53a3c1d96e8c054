from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, Float, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stayrules.db.base import Base
from stayrules.models._mixins import TimestampMixin


class OccupancySnapshot(Base, TimestampMixin):
    __tablename__ = "occupancy_snapshots"
    __table_args__ = (UniqueConstraint("property_id", "day", name="uq_occupancy_property_date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    property_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # 0-100
    occupancy_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # low | medium | high
    demand_level: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
