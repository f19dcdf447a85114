from collections import deque
from typing import Deque, Dict, List, Optional, Set
import logging
import threading

from app.core.exceptions import DuplicateIdError, DuplicatePhoneError, InvalidInputError, NotFoundError
from app.schemas.customer import Customer
from app.schemas.operation import OperationKind, OperationRecord
from app.schemas.statistics import RegistryStatistics

logger = logging.getLogger(__name__)

# Fixed capacity of the recent-operations ring. Oldest entries are evicted first.
MAX_RECENT_OPERATIONS = 50

class CustomerRegistry:
    """
    In-memory customer store indexed by ID and by phone number.

    The ID map is the source of truth; the ID set, phone index and insertion
    log are kept in lockstep with it. Every add/remove/lookup is also pushed
    onto a bounded ring of recent operations, separate from the durable audit log.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._reset()

    def _reset(self):
        self._by_id: Dict[str, Customer] = {}
        self._known_ids: Set[str] = set()
        self._phone_index: Dict[str, str] = {}
        self._insertion_log: List[Customer] = []
        self._recent_ops: Deque[OperationRecord] = deque(maxlen=MAX_RECENT_OPERATIONS)

    def _record(self, kind: OperationKind, customer_id: str, description: str):
        # deque(maxlen=...) drops the leftmost (oldest) entry on overflow
        self._recent_ops.append(OperationRecord(kind=kind, customer_id=customer_id, description=description))

    def _ordered(self) -> List[Customer]:
        return [self._by_id[customer_id] for customer_id in sorted(self._by_id)]

    # Mutations

    def add(self, customer: Optional[Customer]):
        if customer is None:
            raise InvalidInputError("Customer must not be None")

        with self._lock:
            if customer.id in self._known_ids:
                logger.warning(f"Rejected duplicate customer ID: {customer.id}")
                raise DuplicateIdError(customer.id)
            if customer.phone in self._phone_index:
                logger.warning(f"Rejected duplicate phone for customer: {customer.id}")
                raise DuplicatePhoneError(customer.phone)

            self._by_id[customer.id] = customer
            self._known_ids.add(customer.id)
            self._phone_index[customer.phone] = customer.id
            self._insertion_log.append(customer)
            self._record(OperationKind.ADD, customer.id, "Customer added successfully")

        logger.info(f"Customer added: {customer.id}")

    def remove(self, customer_id: str) -> Customer:
        with self._lock:
            if customer_id not in self._known_ids:
                raise NotFoundError("Customer not found", customer_id)

            customer = self._by_id.pop(customer_id)
            self._known_ids.discard(customer_id)
            self._phone_index.pop(customer.phone, None)
            self._insertion_log = [c for c in self._insertion_log if c.id != customer_id]
            self._record(OperationKind.REMOVE, customer_id, "Customer removed from the system")

        logger.info(f"Customer removed: {customer_id}")
        return customer

    def clear(self):
        with self._lock:
            self._reset()
        logger.info("Registry cleared")

    # Lookups (audited in the recent-operations ring)

    def find(self, customer_id: str) -> Customer:
        with self._lock:
            if customer_id not in self._known_ids:
                raise NotFoundError("Customer not found", customer_id)
            customer = self._by_id[customer_id]
            self._record(OperationKind.LOOKUP, customer_id, "Customer looked up")
            return customer

    def find_by_phone(self, phone: str) -> Customer:
        with self._lock:
            customer_id = self._phone_index.get(phone)
            if customer_id is None:
                raise NotFoundError("No customer found with phone", phone)
            return self.find(customer_id)

    # Views (no side effects)

    def list_sorted_by_id(self) -> List[Customer]:
        with self._lock:
            return self._ordered()

    def list_sorted_by_name(self) -> List[Customer]:
        # First name is the primary key, last name breaks ties (ordinal comparison).
        with self._lock:
            return sorted(self._ordered(), key=lambda c: (c.first_name, c.last_name))

    def list_sorted_by_balance_desc(self) -> List[Customer]:
        # sorted() is stable, so equal balances keep ascending-ID order.
        with self._lock:
            return sorted(self._ordered(), key=lambda c: c.balance, reverse=True)

    def list_by_registration(self) -> List[Customer]:
        with self._lock:
            return list(self._insertion_log)

    def search_by_name(self, text: str) -> List[Customer]:
        needle = (text or "").lower()
        with self._lock:
            return [
                c for c in self._ordered()
                if needle in c.first_name.lower() or needle in c.last_name.lower()
            ]

    def filter_by_balance_above(self, threshold: float) -> List[Customer]:
        with self._lock:
            return [c for c in self._ordered() if c.balance > threshold]

    def count(self) -> int:
        return len(self._by_id)

    def exists(self, customer_id: str) -> bool:
        return customer_id in self._known_ids

    def __len__(self):
        return self.count()

    def __contains__(self, customer_id):
        return self.exists(customer_id)

    def statistics(self) -> RegistryStatistics:
        with self._lock:
            customers = self._ordered()

        total = sum(c.balance for c in customers)
        average = total / len(customers) if customers else 0.0
        # max() keeps the first maximal element, i.e. the lowest ID among ties
        top = max(customers, key=lambda c: c.balance) if customers else None

        return RegistryStatistics(
            total_customers=len(customers),
            total_balance=total,
            average_balance=average,
            top_customer=top,
        )

    def recent_operations(self, limit: int) -> List[OperationRecord]:
        if limit <= 0:
            return []
        with self._lock:
            ops = list(self._recent_ops)
        return ops[-limit:]
