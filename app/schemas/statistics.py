from pydantic import BaseModel
from typing import Optional
from app.schemas.customer import Customer

# Display value used when the registry holds no customers.
NO_CUSTOMER = "N/A"

class RegistryStatistics(BaseModel):
    total_customers: int = 0
    total_balance: float = 0.0
    average_balance: float = 0.0
    top_customer: Optional[Customer] = None

    @property
    def top_customer_name(self) -> str:
        return self.top_customer.full_name if self.top_customer else NO_CUSTOMER

    @property
    def top_balance(self) -> float:
        return self.top_customer.balance if self.top_customer else 0.0

    def render(self) -> str:
        return (
            "=== SYSTEM STATISTICS ===\n"
            f"Total Customers: {self.total_customers}\n"
            f"Total Balance: ${self.total_balance:.2f}\n"
            f"Average Balance: ${self.average_balance:.2f}\n"
            f"Top Customer by Balance: {self.top_customer_name} (${self.top_balance:.2f})"
        )

class AuditLogStatistics(BaseModel):
    total_entries: int = 0
    successful_operations: int = 0
    errors: int = 0
    current_actor: str

    def render(self) -> str:
        return (
            "=== AUDIT LOG STATISTICS ===\n"
            f"Total Entries: {self.total_entries}\n"
            f"Successful Operations: {self.successful_operations}\n"
            f"Errors Recorded: {self.errors}\n"
            f"Current Actor: {self.current_actor}"
        )
