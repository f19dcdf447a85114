from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum

class OperationKind(str, Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"
    LOOKUP = "LOOKUP"

class OperationRecord(BaseModel):
    """One entry of the registry's in-memory recent-operations ring."""
    model_config = ConfigDict(frozen=True)

    kind: OperationKind
    customer_id: str
    description: str
    timestamp: datetime = Field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.timestamp:%d/%m/%Y %H:%M:%S}] {self.kind.value} - Customer: {self.customer_id} - {self.description}"
