from typing import List
import logging

from app.core.audit_log import AuditLog
from app.core.exceptions import RegistryError
from app.core.registry import CustomerRegistry
from app.schemas.customer import Customer

logger = logging.getLogger(__name__)

class CustomerService:
    """
    Runs registry operations and records each one in the durable audit log.

    Registry errors are logged with append_error and re-raised unchanged.
    A failed log write never changes the outcome of the registry call.
    """

    def __init__(self, registry: CustomerRegistry, audit_log: AuditLog):
        self.registry = registry
        self.audit_log = audit_log

    def _log(self, action: str, description: str):
        if self.audit_log.append(action, description) is None:
            logger.warning(f"Audit entry for {action} was not persisted")

    def _log_error(self, action: str, error: Exception):
        if self.audit_log.append_error(action, error) is None:
            logger.warning(f"Audit error entry for {action} was not persisted")

    def add_customer(self, customer: Customer) -> Customer:
        try:
            self.registry.add(customer)
        except RegistryError as e:
            self._log_error("ADD_CUSTOMER", e)
            raise
        self._log("ADD_CUSTOMER", f"Customer {customer.id} ({customer.full_name}) added successfully")
        return customer

    def remove_customer(self, customer_id: str) -> Customer:
        try:
            customer = self.registry.remove(customer_id)
        except RegistryError as e:
            self._log_error("REMOVE_CUSTOMER", e)
            raise
        self._log("REMOVE_CUSTOMER", f"Customer {customer_id} removed successfully")
        return customer

    def get_customer(self, customer_id: str) -> Customer:
        try:
            customer = self.registry.find(customer_id)
        except RegistryError as e:
            self._log_error("LOOKUP_CUSTOMER", e)
            raise
        self._log("LOOKUP_CUSTOMER", f"Lookup performed for customer {customer_id}")
        return customer

    def get_customer_by_phone(self, phone: str) -> Customer:
        try:
            customer = self.registry.find_by_phone(phone)
        except RegistryError as e:
            self._log_error("LOOKUP_CUSTOMER", e)
            raise
        self._log("LOOKUP_CUSTOMER", f"Lookup by phone performed for customer {customer.id}")
        return customer

    def clear(self) -> int:
        removed = self.registry.count()
        self.registry.clear()
        self._log("CLEAR_REGISTRY", f"Registry cleared successfully ({removed} customers removed)")
        return removed

    def list_customers(self, sort: str = "id") -> List[Customer]:
        if sort == "name":
            return self.registry.list_sorted_by_name()
        if sort == "balance":
            return self.registry.list_sorted_by_balance_desc()
        return self.registry.list_sorted_by_id()
