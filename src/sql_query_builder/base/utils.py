import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


def prepare_value(data: Any) -> Any:
    """
    Recursively convert special Python types to values the SQL renderer understands.

    It handles:
    - Enum members (replaced by their value)
    - datetime, date and time objects (ISO-8601 strings)
    - Lists, tuples and sets (processing each item)
    - Pydantic URL types (converting to strings)

    Args:
        data: The value to convert

    Returns:
        The converted value, ready for formatting
    """
    # Handle None
    if data is None:
        return None

    if isinstance(data, Enum):
        return prepare_value(data.value)

    # bool, numbers and strings pass through untouched
    if isinstance(data, (bool, int, float, str)):
        return data

    if isinstance(data, (datetime, date, time)):
        return data.isoformat()

    # Handle lists
    if isinstance(data, list):
        return [prepare_value(item) for item in data]

    # Handle tuples
    if isinstance(data, tuple):
        return tuple(prepare_value(item) for item in data)

    # Handle sets, sorted so the rendered order is stable
    if isinstance(data, (set, frozenset)):
        items = [prepare_value(item) for item in data]
        try:
            return sorted(items)
        except TypeError:
            logger.debug(f"Set items are not orderable, keeping iteration order: {items!r}")
            return items

    # Handle Pydantic URL types and other special types
    module = type(data).__module__
    if module.startswith("pydantic") and not hasattr(data, "model_dump"):
        return str(data)

    # Return anything else as-is
    return data
