"""
Input validators
"""
from functools import wraps
import inspect
import logging

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


def require_text(*field_names: str):
    """
    Decorator that rejects calls whose named string arguments are missing or blank.

    :param field_names: keyword names of the arguments to check
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            bound = inspect.signature(func).bind_partial(self, *args, **kwargs)
            missing = [
                name for name in field_names
                if not isinstance(bound.arguments.get(name), str) or not bound.arguments[name].strip()
            ]
            if missing:
                logger.warning(f"Validation failed for {func.__name__}: missing {', '.join(missing)}")
                raise ValidationError(f"Missing required fields: {', '.join(missing)}")
            return await func(self, *args, **kwargs)
        return wrapper
    return decorator
