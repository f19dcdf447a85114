from typing import Optional


class RegistryError(Exception):
    """Base class for caller-correctable registry failures."""


class InvalidInputError(RegistryError):
    pass


class DuplicateIdError(RegistryError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"A customer with ID '{customer_id}' already exists")


class DuplicatePhoneError(RegistryError):
    def __init__(self, phone: str):
        self.phone = phone
        super().__init__(f"Phone '{phone}' is already registered to another customer")


class NotFoundError(RegistryError):
    def __init__(self, message: str = "Customer not found", key: Optional[str] = None):
        self.key = key
        if key is not None:
            message = f"{message}: {key}"
        super().__init__(message)
