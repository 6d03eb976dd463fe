from datetime import date, datetime, time
from enum import Enum
from typing import Any

import httpx

from .aliases import create_index_model_name, create_property_model_name
from .metadata import describe


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return format_value(value.value)
    if isinstance(value, (date, datetime, time)):
        return value.isoformat()
    return str(value)


def flatten_model(instance: Any, prefix: str = "") -> list[tuple[str, str]]:
    """
    Inverse of binding: (composite name, raw value) pairs under the resolved aliases.
    None values are left out.
    """
    pairs: list[tuple[str, str]] = []
    descriptor = describe(type(instance))
    for prop in descriptor.properties:
        value = prop.get(instance)
        if value is None:
            continue
        name = create_property_model_name(prefix, prop.wire_name)
        pairs.extend(_flatten_value(value, prop.model, name))
    return pairs


def _flatten_value(value: Any, descriptor, name: str) -> list[tuple[str, str]]:
    if descriptor.is_complex:
        return flatten_model(value, name)
    if descriptor.is_collection:
        element = describe(descriptor.element_type)
        if element.is_complex:
            pairs = []
            for index, item in enumerate(value):
                pairs.extend(flatten_model(item, create_index_model_name(name, index)))
            return pairs
        return [(name, format_value(item)) for item in value if item is not None]
    return [(name, format_value(value))]


def to_query_params(instance: Any, prefix: str = "") -> httpx.QueryParams:
    return httpx.QueryParams(flatten_model(instance, prefix))
