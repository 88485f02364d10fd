"""Pydantic Schemas — input validation for service operations.

Invariants:
    - Schemas validate at the system boundary (GraphQL arguments reach services as schemas)
    - Domain types from core/ used for enum fields
    - validate_input() is the only place pydantic errors become fundhost ValidationError

Design Decisions:
    - Separate from models: schemas are input contracts, models are persistence (ADR: DDD boundary)
"""

from typing import TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from fundhost.core.errors import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_input(model: type[SchemaT], data: dict) -> SchemaT:
    """Validate data against a schema, raising ValidationError on the first failure."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or None
        message = first["msg"].removeprefix("Value error, ")
        raise ValidationError(message, field=field) from e
