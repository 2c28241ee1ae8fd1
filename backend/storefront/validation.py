from typing import Type, TypeVar

import pydantic
from pydantic import BaseModel

from storefront.errors import ValidationError, describe_first_error

M = TypeVar("M", bound=BaseModel)


def validate_payload(model: Type[M], data: dict) -> M:
    """
    Check ``data`` against ``model`` and return the parsed instance.

    Raises ValidationError naming the first offending field. Nothing is
    written anywhere, so callers run this before touching the database or disk.
    """
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_first_error(e.errors())) from e
