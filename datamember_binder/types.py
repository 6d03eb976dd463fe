from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar, TYPE_CHECKING

from pydantic import BaseModel, Field

from .model_state import ModelState

if TYPE_CHECKING:
    from .metadata import ModelDescriptor, PropertyDescriptor
    from .value_providers import ValueProvider

T = TypeVar("T")


class BindingSource(Enum):
    QUERY = "query"
    FORM = "form"
    BODY = "body"

    @property
    def is_greedy(self) -> bool:
        return self is BindingSource.BODY


class BindingStatus(Enum):
    NOT_ATTEMPTED = "not_attempted"
    FAILED = "failed"
    SET = "set"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def message(self) -> str:
        errors = getattr(self.error, "errors", None)
        if callable(errors):
            # pydantic ValidationError: first entry is the one that stopped the assignment
            details = errors()
            if details:
                return details[0]["msg"]
        return str(self.error)


class BindingMessages(BaseModel):
    missing_bind_required_value: str = "A value for the '{name}' parameter or property was not provided."
    attempted_value_is_invalid: str = "The value '{value}' is not valid for {name}."
    value_must_not_be_null: str = "The value '{value}' is invalid."
    invalid_body: str = "The request body is not valid for {name}: {detail}"


class BindingOptions(BaseModel):
    messages: BindingMessages = Field(default_factory=BindingMessages)
    max_recursion_depth: int = 32
    convert_empty_string_to_none: bool = True


@dataclass
class BindingResult:
    status: BindingStatus = BindingStatus.NOT_ATTEMPTED
    model: Any = None
    errors: ModelState = field(default_factory=ModelState)

    @classmethod
    def success(cls, model: Any, errors: Optional[ModelState] = None) -> "BindingResult":
        return cls(BindingStatus.SET, model, errors if errors is not None else ModelState())

    @classmethod
    def failed(cls, errors: Optional[ModelState] = None) -> "BindingResult":
        return cls(BindingStatus.FAILED, None, errors if errors is not None else ModelState())

    @classmethod
    def not_attempted(cls) -> "BindingResult":
        return cls()

    @property
    def is_model_set(self) -> bool:
        return self.status is BindingStatus.SET

    @property
    def is_valid(self) -> bool:
        return self.errors.is_valid


@dataclass(frozen=True)
class BindingContext:
    model_name: str
    descriptor: "ModelDescriptor"
    value_provider: "ValueProvider"
    options: BindingOptions = field(default_factory=BindingOptions)
    field_name: str = ""
    model: Any = None
    is_top_level: bool = False
    binding_source: Optional[BindingSource] = None
    property_filter: Optional[Callable[["PropertyDescriptor"], bool]] = None
    body: Optional[bytes] = None
    depth: int = 0

    def nested(self, prop: "PropertyDescriptor", model_name: str, model: Any = None) -> "BindingContext":
        return replace(
            self,
            model_name=model_name,
            descriptor=prop.model,
            field_name=prop.wire_name,
            model=model,
            is_top_level=False,
            binding_source=prop.binding_source,
            property_filter=None,
            depth=self.depth + 1,
        )

    def element(self, model_name: str, descriptor: "ModelDescriptor") -> "BindingContext":
        return replace(
            self,
            model_name=model_name,
            descriptor=descriptor,
            model=None,
            is_top_level=False,
            property_filter=None,
            depth=self.depth + 1,
        )
