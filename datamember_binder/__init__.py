from .aliases import BindNever, BindRequired, DataMember, FromBody, resolve_alias
from .binders import DataMemberModelBinder, DataMemberModelBinderProvider, ModelBinderFactory
from .binding import bind, bind_request, bind_sync
from .errors import ModelBindingError, ModelConstructionError, RecursionDepthExceededError
from .metadata import ModelDescriptor, PropertyDescriptor, data_contract, describe
from .model_state import ModelState, ValidationState
from .serialization import flatten_model, to_query_params
from .types import BindingMessages, BindingOptions, BindingResult, BindingSource, BindingStatus
from .validation import apply_findings, validate_model
from .value_providers import CompositeValueProvider, FormValueProvider, QueryStringValueProvider, ValueProvider, from_request

__all__ = [
    "BindNever",
    "BindRequired",
    "DataMember",
    "FromBody",
    "resolve_alias",
    "DataMemberModelBinder",
    "DataMemberModelBinderProvider",
    "ModelBinderFactory",
    "bind",
    "bind_request",
    "bind_sync",
    "ModelBindingError",
    "ModelConstructionError",
    "RecursionDepthExceededError",
    "ModelDescriptor",
    "PropertyDescriptor",
    "data_contract",
    "describe",
    "ModelState",
    "ValidationState",
    "flatten_model",
    "to_query_params",
    "BindingMessages",
    "BindingOptions",
    "BindingResult",
    "BindingSource",
    "BindingStatus",
    "apply_findings",
    "validate_model",
    "CompositeValueProvider",
    "FormValueProvider",
    "QueryStringValueProvider",
    "ValueProvider",
    "from_request",
]
