from typing import Optional
from app.core.audit_log import AuditLog
from app.core.config import settings
from app.core.registry import CustomerRegistry
from app.core.service import CustomerService

# AUTHORITATIVE IN-MEMORY STATE – one registry and one audit log per process.
# Created lazily so importing the app does not touch the filesystem.
_service: Optional[CustomerService] = None

def get_customer_service() -> CustomerService:
    global _service
    if _service is None:
        _service = CustomerService(
            registry=CustomerRegistry(),
            audit_log=AuditLog(settings.AUDIT_LOG_FILE, settings.AUDIT_DEFAULT_ACTOR),
        )
    return _service
