# Import all models so that SQLAlchemy registers them for metadata.create_all
from stayrules.models.audit_log import AuditLog
from stayrules.models.occupancy import OccupancySnapshot
from stayrules.models.stay_rule_set import PropertyStayRules

__all__ = [
    "AuditLog",
    "OccupancySnapshot",
    "PropertyStayRules",
]
