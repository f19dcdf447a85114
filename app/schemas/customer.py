from pydantic import BaseModel, field_validator, ValidationInfo
import re

CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

class Customer(BaseModel):
    id: str
    first_name: str
    last_name: str
    phone: str
    balance: float = 0.0

    @field_validator('id', 'first_name', 'last_name', 'phone', mode='before')
    @classmethod
    def validate_not_blank(cls, v, info: ValidationInfo):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError(f"{info.field_name} must not be blank")
            if CONTROL_CHARS.search(v):
                raise ValueError(f"{info.field_name} must not contain control characters")
        return v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
