from typing import List, Optional


class RecordNotFoundError(LookupError):
    """Raised when a record does not exist or is not owned by the caller."""

    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class RecordValidationError(ValueError):
    """Raised before any write when required fields are missing or invalid."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


class VersionConflictError(Exception):
    """Raised when an update was prepared against a stale note version."""

    def __init__(self, expected_version: int, current_version: int):
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Note is at version {current_version}, expected {expected_version}"
        )


class StoreFailureError(RuntimeError):
    """Raised when the backing store rejects a read or write."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)
