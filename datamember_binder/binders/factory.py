import logging
import threading
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Optional

from ..errors import ModelBindingError
from ..metadata import ModelDescriptor, PropertyDescriptor, describe
from ..types import BindingContext, BindingResult, BindingSource
from .base import ModelBinder, ModelBinderProvider
from .composite import DataMemberModelBinder
from .simple import BodyModelBinder, CollectionModelBinder, SimpleTypeModelBinder

logger = logging.getLogger(__name__)


@dataclass
class BinderProviderContext:
    factory: "ModelBinderFactory"
    descriptor: ModelDescriptor
    binding_source: Optional[BindingSource] = None

    def create_binder(self, prop: PropertyDescriptor) -> ModelBinder:
        return self.factory.create_binder(prop.annotation, prop.binding_source)

    def create_element_binder(self) -> ModelBinder:
        return self.factory.create_binder(self.descriptor.element_type)


class DataMemberModelBinderProvider:
    """ Offers the alias-aware binder for complex, non-collection types and declines everything else """

    def supports(self, model_type: Any) -> bool:
        descriptor = describe(model_type)
        return descriptor.is_complex and not descriptor.is_collection

    def get_binder(self, context: BinderProviderContext) -> Optional[ModelBinder]:
        descriptor = context.descriptor
        if not (descriptor.is_complex and not descriptor.is_collection):
            return None
        binders = {prop: context.create_binder(prop) for prop in descriptor.properties}
        return DataMemberModelBinder(binders)


class BodyModelBinderProvider:
    def get_binder(self, context: BinderProviderContext) -> Optional[ModelBinder]:
        if context.binding_source is BindingSource.BODY:
            return BodyModelBinder(context.descriptor)
        return None


class CollectionModelBinderProvider:
    def get_binder(self, context: BinderProviderContext) -> Optional[ModelBinder]:
        if context.descriptor.is_collection:
            return CollectionModelBinder(context.descriptor, context.create_element_binder())
        return None


class SimpleTypeModelBinderProvider:
    def get_binder(self, context: BinderProviderContext) -> Optional[ModelBinder]:
        if context.descriptor.is_complex or context.descriptor.is_collection:
            return None
        return SimpleTypeModelBinder(context.descriptor)


def default_providers() -> list[ModelBinderProvider]:
    return [
        BodyModelBinderProvider(),
        DataMemberModelBinderProvider(),
        CollectionModelBinderProvider(),
        SimpleTypeModelBinderProvider(),
    ]


class _PlaceholderBinder:
    """ Stands in for a binder that is still being built, e.g. for self-referencing models """

    def __init__(self, factory: "ModelBinderFactory", key: Hashable):
        self.factory = factory
        self.key = key

    async def bind_model(self, context: BindingContext) -> BindingResult:
        return await self.factory._binders[self.key].bind_model(context)


class ModelBinderFactory:
    def __init__(self, providers: Optional[Iterable[ModelBinderProvider]] = None):
        self.providers = list(providers) if providers is not None else default_providers()
        self._binders: dict[Hashable, ModelBinder] = {}
        self._building: set[Hashable] = set()
        # reentrant so the building thread can recurse into property binders
        self._lock = threading.RLock()

    def create_binder(self, annotation: Any, binding_source: Optional[BindingSource] = None) -> ModelBinder:
        key = (annotation, binding_source)
        try:
            binder = self._binders.get(key)
        except TypeError:
            return self._create(annotation, binding_source)
        if binder is not None:
            return binder

        with self._lock:
            binder = self._binders.get(key)
            if binder is not None:
                return binder
            # other threads wait on the lock, so only the building thread sees its own key here
            if key in self._building:
                return _PlaceholderBinder(self, key)

            self._building.add(key)
            try:
                binder = self._create(annotation, binding_source)
            finally:
                self._building.discard(key)
            self._binders[key] = binder
            return binder

    def _create(self, annotation: Any, binding_source: Optional[BindingSource]) -> ModelBinder:
        context = BinderProviderContext(self, describe(annotation), binding_source)
        for provider in self.providers:
            binder = provider.get_binder(context)
            if binder is not None:
                logger.debug(f"{type(provider).__name__} provides {type(binder).__name__} for {context.descriptor.name}")
                return binder
        raise ModelBindingError(f"No model binder provider supports {context.descriptor.name}")
