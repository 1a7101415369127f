"""Errors raised by the entity store and its key-value adapters."""


class StoreError(Exception):
    """Base class for entity store errors."""


class StorageUnavailable(StoreError):
    """The key-value backend failed to complete an I/O operation."""

    def __init__(self, operation: str, key: str, reason: str = ""):
        self.operation = operation
        self.key = key
        self.reason = reason
        message = f"Storage backend unavailable during {operation} of '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AlreadyExists(StoreError):
    """An entity with the same id is already tracked for its kind."""

    def __init__(self, entity_name: str, entity_id: str):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"{entity_name} '{entity_id}' already exists")


class InvalidCursor(StoreError, ValueError):
    """A pagination cursor could not be parsed."""

    def __init__(self, cursor: str):
        self.cursor = cursor
        super().__init__(f"Invalid cursor: {cursor!r}")


class EntityNotFound(StoreError, KeyError):
    """An update required an existing entity but none was stored."""

    def __init__(self, entity_name: str, entity_id: str):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"{entity_name} '{entity_id}' not found")

    def __str__(self) -> str:
        return self.args[0]
