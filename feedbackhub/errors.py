# feedbackhub/errors.py
from typing import Iterable


class StorageError(Exception):
    """Base class for everything the store can raise."""


class NotFound(StorageError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConstraintViolation(StorageError):
    pass


class Unavailable(StorageError):
    pass


class ValidationError(Exception):
    """A submitted form is missing required fields."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__("Missing required field(s): " + ", ".join(self.missing))
