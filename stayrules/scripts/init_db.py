from __future__ import annotations

import argparse

from stayrules.db.base import Base
from stayrules.db.session import SessionLocal, engine

# Import models to register with SQLAlchemy
import stayrules.models  # noqa: F401


def main() -> int:
    parser = argparse.ArgumentParser(description="Create tables and optionally seed a property's default stay rules")
    parser.add_argument("--property-id", action="append", default=[], help="Property to seed with the default rule set")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)

    from stayrules.models.stay_rule_set import PropertyStayRules
    from stayrules.services.rule_config_service import default_rule_set

    db = SessionLocal()
    try:
        defaults = default_rule_set().model_dump(mode="json", by_alias=True)
        for property_id in args.property_id:
            if db.get(PropertyStayRules, property_id) is None:
                db.add(
                    PropertyStayRules(
                        property_id=property_id,
                        enabled=defaults["enabled"],
                        minimum_stay_rules=[],
                        booking_window_rules=[],
                        default_rules=defaults["defaultRules"],
                    )
                )
        db.commit()
    finally:
        db.close()

    print("DB initialized")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
