from fastapi import APIRouter, Depends, HTTPException, Query
from pathlib import Path
from typing import Optional
import logging
from app.schemas.audit import ActorChangeRequest, ExportRequest, ExportResponse
from app.schemas.statistics import AuditLogStatistics
from app.core.config import settings
from app.core.exceptions import InvalidInputError
from app.core.service import CustomerService
from app.db.memory import get_customer_service

router = APIRouter(prefix="/audit", tags=["audit"])
logger = logging.getLogger(__name__)

@router.get("/logs")
async def read_logs(
    limit: Optional[int] = Query(None, ge=0),
    action: Optional[str] = None,
    actor: Optional[str] = None,
    service: CustomerService = Depends(get_customer_service)
):
    """
    Structured entries in file order. Filters apply one at a time:
    action, then actor, then the trailing window given by limit.
    """
    audit_log = service.audit_log
    if action:
        lines = audit_log.find_by_action(action)
    elif actor:
        lines = audit_log.find_by_actor(actor)
    elif limit is not None:
        lines = audit_log.read_last(limit)
    else:
        lines = audit_log.read_all()
    return {"total": len(lines), "entries": lines}

@router.get("/stats", response_model=AuditLogStatistics)
async def log_statistics(service: CustomerService = Depends(get_customer_service)):
    return service.audit_log.statistics()

@router.put("/actor")
async def change_actor(request: ActorChangeRequest, service: CustomerService = Depends(get_customer_service)):
    try:
        service.audit_log.set_actor(request.actor)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"actor": service.audit_log.actor}

@router.post("/export", response_model=ExportResponse)
async def export_logs(request: ExportRequest, service: CustomerService = Depends(get_customer_service)):
    """Export the log to a file name relative to the configured export directory."""
    export_dir = Path(settings.AUDIT_EXPORT_DIR).resolve()
    target = (export_dir / request.destination).resolve()
    if target == export_dir or not target.is_relative_to(export_dir):
        logger.warning(f"Rejected audit log export outside {export_dir}: {request.destination}")
        raise HTTPException(status_code=400, detail="Export destination must be inside the export directory.")

    export_dir.mkdir(parents=True, exist_ok=True)
    exported = service.audit_log.export(target)
    if not exported:
        logger.error(f"Audit log export FAILED: {target}")
        raise HTTPException(status_code=500, detail="Audit log export failed.")
    return ExportResponse(destination=str(target), exported=exported)
