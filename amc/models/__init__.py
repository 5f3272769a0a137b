from amc.models.user import User
from amc.models.Committee import Committee, Checkpost
from amc.models.Receipt import Receipt
from amc.models.Target import Target, MonthlyTarget, CheckpostTarget
from amc.models.audit_log import AuditLog
from amc.models.system_config import SystemConfig

__all__ = [
    "User",
    "Committee",
    "Checkpost",
    "Receipt",
    "Target",
    "MonthlyTarget",
    "CheckpostTarget",
    "AuditLog",
    "SystemConfig",
]
