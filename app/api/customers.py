from fastapi import APIRouter, Depends, HTTPException
from typing import List, Literal
import logging
from app.schemas.customer import Customer
from app.schemas.operation import OperationRecord
from app.schemas.statistics import RegistryStatistics
from app.core.exceptions import DuplicateIdError, DuplicatePhoneError, InvalidInputError, NotFoundError
from app.core.service import CustomerService
from app.db.memory import get_customer_service

router = APIRouter(prefix="/customers", tags=["customers"])
logger = logging.getLogger(__name__)

# IDs that would be shadowed by the fixed routes below
RESERVED_IDS = {"search", "balance-above", "stats", "recent-operations", "by-phone"}

@router.post("", response_model=Customer, status_code=201)
async def create_customer(customer: Customer, service: CustomerService = Depends(get_customer_service)):
    if customer.id in RESERVED_IDS:
        raise HTTPException(status_code=400, detail=f"Customer ID '{customer.id}' is reserved")
    try:
        return service.add_customer(customer)
    except (DuplicateIdError, DuplicatePhoneError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("", response_model=List[Customer])
async def list_customers(
    sort: Literal["id", "name", "balance"] = "id",
    service: CustomerService = Depends(get_customer_service)
):
    return service.list_customers(sort)

@router.delete("")
async def clear_customers(service: CustomerService = Depends(get_customer_service)):
    removed = service.clear()
    logger.info(f"Registry cleared via API. Removed: {removed}")
    return {"status": "success", "removed": removed}

@router.get("/search", response_model=List[Customer])
async def search_customers(q: str = "", service: CustomerService = Depends(get_customer_service)):
    return service.registry.search_by_name(q)

@router.get("/balance-above", response_model=List[Customer])
async def customers_with_balance_above(threshold: float, service: CustomerService = Depends(get_customer_service)):
    return service.registry.filter_by_balance_above(threshold)

@router.get("/stats", response_model=RegistryStatistics)
async def registry_statistics(service: CustomerService = Depends(get_customer_service)):
    return service.registry.statistics()

@router.get("/recent-operations", response_model=List[OperationRecord])
async def recent_operations(
    limit: int = 10,
    service: CustomerService = Depends(get_customer_service)
):
    return service.registry.recent_operations(limit)

@router.get("/by-phone/{phone}", response_model=Customer)
async def get_customer_by_phone(phone: str, service: CustomerService = Depends(get_customer_service)):
    try:
        return service.get_customer_by_phone(phone)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.get("/{customer_id}", response_model=Customer)
async def get_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    try:
        return service.get_customer(customer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.delete("/{customer_id}", response_model=Customer)
async def remove_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    try:
        return service.remove_customer(customer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
