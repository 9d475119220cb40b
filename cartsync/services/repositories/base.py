"""Base repository with shared API client."""
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cartsync.errors import NetworkError
from cartsync.services.api import ApiClient

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseRepository:
    """Base class for API-backed repositories."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    @staticmethod
    def _parse(model: Type[ModelT], data: Any, path: str) -> ModelT:
        """Validate a payload; a record the model rejects counts as malformed data."""
        if not isinstance(data, dict):
            raise NetworkError(f"GET {path}: expected an object, got {type(data).__name__}")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise NetworkError(f"GET {path}: malformed {model.__name__} record") from e
