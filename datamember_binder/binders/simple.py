import logging
from dataclasses import replace
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from ..aliases import create_index_model_name
from ..metadata import ModelDescriptor, describe
from ..model_state import ModelState
from ..types import BindingContext, BindingOptions, BindingResult, Err, Ok
from .base import ModelBinder

logger = logging.getLogger(__name__)


class SimpleTypeModelBinder:
    """ Converts the first raw value under the field name with pydantic's lax rules """

    def __init__(self, descriptor: ModelDescriptor):
        self.descriptor = descriptor
        self._adapter = TypeAdapter(descriptor.annotation)

    def convert(self, raw: str, field_name: str, options: BindingOptions) -> Ok | Err:
        messages = options.messages
        if raw == "":
            if self.descriptor.is_nullable and options.convert_empty_string_to_none:
                return Ok(None)
            if self.descriptor.model_type is str:
                return Ok("")
            return Err(ValueError(messages.value_must_not_be_null.format(value=raw, name=field_name)))
        try:
            return Ok(self._adapter.validate_python(raw))
        except ValidationError:
            return Err(ValueError(messages.attempted_value_is_invalid.format(value=raw, name=field_name)))

    async def bind_model(self, context: BindingContext) -> BindingResult:
        values = context.value_provider.get_values(context.model_name)
        if not values:
            return BindingResult.not_attempted()

        errors = ModelState()
        raw = values[0]
        errors.set_attempted_value(context.model_name, raw)

        outcome = self.convert(raw, context.field_name or context.model_name, context.options)
        if isinstance(outcome, Err):
            logger.debug(f"Could not convert {raw!r} for {context.model_name!r} to {self.descriptor.name}")
            errors.add_error(context.model_name, outcome.message)
            return BindingResult.failed(errors)
        return BindingResult.success(outcome.value, errors)


class _SingleValueProvider:
    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value

    def contains_prefix(self, prefix: str) -> bool:
        return prefix == self.key or not prefix

    def get_value(self, key: str) -> Optional[str]:
        return self.value if key == self.key else None

    def get_values(self, key: str) -> list[str]:
        return [self.value] if key == self.key else []


class CollectionModelBinder:
    """
    Binds list/tuple/set properties. Indexed elements ("items[0].name") take
    precedence; otherwise every repeated value under the field name is one element.
    """

    def __init__(self, descriptor: ModelDescriptor, element_binder: ModelBinder):
        self.descriptor = descriptor
        self.element_binder = element_binder

    async def bind_model(self, context: BindingContext) -> BindingResult:
        provider = context.value_provider
        element_descriptor = describe(self.descriptor.element_type)
        errors = ModelState()
        items = []

        if provider.contains_prefix(create_index_model_name(context.model_name, 0)):
            index = 0
            while True:
                name = create_index_model_name(context.model_name, index)
                if not provider.contains_prefix(name):
                    break
                result = await self.element_binder.bind_model(context.element(name, element_descriptor))
                errors.merge(result.errors)
                if result.is_model_set:
                    items.append(result.model)
                index += 1
        else:
            values = provider.get_values(context.model_name)
            if not values:
                return BindingResult.not_attempted()
            for raw in values:
                element_context = replace(
                    context.element(context.model_name, element_descriptor),
                    value_provider=_SingleValueProvider(context.model_name, raw),
                )
                result = await self.element_binder.bind_model(element_context)
                errors.merge(result.errors)
                if result.is_model_set:
                    items.append(result.model)
            errors.set_attempted_value(context.model_name, ",".join(values))

        return BindingResult.success(self.descriptor.container_type(items), errors)


class BodyModelBinder:
    """ Greedy binder: validates the whole raw request body as JSON """

    def __init__(self, descriptor: ModelDescriptor):
        self.descriptor = descriptor
        self._adapter = TypeAdapter(descriptor.annotation)

    async def bind_model(self, context: BindingContext) -> BindingResult:
        if not context.body:
            return BindingResult.not_attempted()

        try:
            return BindingResult.success(self._adapter.validate_json(context.body))
        except ValidationError as e:
            errors = ModelState()
            detail = e.errors()[0]["msg"] if e.errors() else str(e)
            message = context.options.messages.invalid_body.format(
                name=context.field_name or self.descriptor.name, detail=detail
            )
            errors.add_error(context.model_name, message)
            return BindingResult.failed(errors)
