from fastapi import APIRouter, Depends
from app.core.service import CustomerService
from app.db.memory import get_customer_service

router = APIRouter()

@router.get("/health")
async def health(service: CustomerService = Depends(get_customer_service)):
    return {
        "status": "ok",
        "customers": service.registry.count(),
        "audit_log": str(service.audit_log.path),
        "last_sequence": service.audit_log.sequence
    }
