from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .exceptions import ConfigurationError

M = TypeVar("M", bound=BaseModel)


def validate_config(model: Type[M], value: Any) -> M:
    """Validate ``value`` against ``model`` eagerly, raising ConfigurationError on failure."""
    if isinstance(value, model):
        # Re-run validation so a mutated instance is checked again
        value = value.model_dump(by_alias=True)
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid {model.__name__}: {exc.error_count()} validation error(s)",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
