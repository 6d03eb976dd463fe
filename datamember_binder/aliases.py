from dataclasses import dataclass
from typing import Any, Iterable, Protocol

from pydantic.fields import FieldInfo


@dataclass(frozen=True)
class DataMember:
    """ Explicit wire name for a property, placed in Annotated[...] metadata """
    name: str


@dataclass(frozen=True)
class BindRequired:
    pass


@dataclass(frozen=True)
class BindNever:
    pass


@dataclass(frozen=True)
class FromBody:
    """ Bind the property from the raw request body instead of a named field """
    pass


class Aliased(Protocol):
    name: str
    alias: str | None


def declared_alias(metadata: Iterable[Any], field: FieldInfo | None = None) -> str | None:
    for meta in metadata:
        if isinstance(meta, DataMember):
            return meta.name
    if field is not None:
        # AliasPath / AliasChoices describe nested lookups, not a single wire name
        if isinstance(field.validation_alias, str):
            return field.validation_alias
        if field.alias:
            return field.alias
    return None


def resolve_alias(prop: Aliased) -> str:
    return prop.alias or prop.name


def create_property_model_name(prefix: str, name: str) -> str:
    if not prefix:
        return name
    if not name:
        return prefix
    if name.startswith("["):
        return prefix + name
    return f"{prefix}.{name}"


def create_index_model_name(prefix: str, index: int | str) -> str:
    return f"{prefix}[{index}]"
