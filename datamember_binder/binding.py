import asyncio
import logging
import threading
from typing import Any, Callable, Literal, Optional

import httpx

from .binders import ModelBinderFactory
from .metadata import PropertyDescriptor, describe
from .types import BindingContext, BindingOptions, BindingResult, BindingSource
from .value_providers import ValueProvider, from_request, is_form_request

logger = logging.getLogger(__name__)

_default_factory: Optional[ModelBinderFactory] = None
_default_factory_lock = threading.Lock()


def default_factory() -> ModelBinderFactory:
    global _default_factory
    with _default_factory_lock:
        if _default_factory is None:
            _default_factory = ModelBinderFactory()
        return _default_factory


async def bind(
    model_type: Any,
    value_provider: ValueProvider,
    *,
    prefix: str = "",
    model: Any = None,
    body: Optional[bytes] = None,
    property_filter: Optional[Callable[[PropertyDescriptor], bool]] = None,
    options: Optional[BindingOptions] = None,
    factory: Optional[ModelBinderFactory] = None,
) -> BindingResult:
    """
    Bind one request to a new (or the given) instance of model_type.
    Errors are returned in result.errors; only a top-level construction failure raises.
    """
    factory = factory or default_factory()
    context = BindingContext(
        model_name=prefix,
        field_name=prefix,
        descriptor=describe(model_type),
        value_provider=value_provider,
        options=options or BindingOptions(),
        model=model,
        is_top_level=True,
        property_filter=property_filter,
        body=body,
    )
    result = await factory.create_binder(model_type).bind_model(context)
    if not result.is_valid:
        logger.debug(f"Bound {context.descriptor.name} with {result.errors.error_count} errors")
    return result


def bind_sync(model_type: Any, value_provider: ValueProvider, **kwargs) -> BindingResult:
    """Synchronous form of bind(); not for use inside a running event loop."""
    return asyncio.run(bind(model_type, value_provider, **kwargs))


async def bind_request(
    model_type: Any,
    request: httpx.Request,
    source: Literal["query", "form", "any"] = "any",
    **kwargs,
) -> BindingResult:
    binding_source = None if source == "any" else BindingSource(source)
    value_provider = from_request(request, binding_source)
    if not is_form_request(request):
        kwargs.setdefault("body", request.content or None)
    return await bind(model_type, value_provider, **kwargs)
