from typing import Any


class DataAccessException(Exception):
    """Base class for errors raised by the data-access layer itself."""
    def __init__(self, message: str, code: int = 400, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.detail = detail


class EntityNotFoundException(DataAccessException):
    """An id lookup that the caller required to succeed found no row."""
    def __init__(self, model: str, entity_id: Any):
        super().__init__(
            f"{model} with id={entity_id} not found",
            code=404,
            detail={"model": model, "id": entity_id},
        )


class AmbiguousResultException(DataAccessException):
    """A single-row lookup matched more than one row."""
    def __init__(self, model: str):
        super().__init__(f"Expected a single {model}, query matched several rows", code=409, detail={"model": model})


class InvalidArgumentException(DataAccessException, ValueError):
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message, code=400, detail=detail)
