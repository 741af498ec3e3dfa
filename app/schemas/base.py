from typing import Any, Type, TypeVar

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

ModelT = TypeVar("ModelT", bound=BaseModel)


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


def parse_body(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate a raw request body once the handler's lookups have passed.

    Failures are reported like FastAPI's own body validation.
    """
    try:
        return model.model_validate({} if payload is None else payload)
    except PydanticValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        )
