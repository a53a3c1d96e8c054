from __future__ import annotations

from sqlalchemy import Boolean, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from stayrules.db.base import Base
from stayrules.models._mixins import TimestampMixin


class PropertyStayRules(Base, TimestampMixin):
    __tablename__ = "property_stay_rules"

    property_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Serialized (camelCase) rule dicts, one list per family
    minimum_stay_rules: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    booking_window_rules: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    default_rules: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
