import logging
from typing import Any, Mapping

from ..aliases import create_property_model_name
from ..errors import ModelConstructionError, RecursionDepthExceededError
from ..metadata import PropertyDescriptor
from ..model_state import ModelState
from ..types import BindingContext, BindingResult, Err
from ..validation import apply_findings, validate_model
from .base import ModelBinder

logger = logging.getLogger(__name__)


class DataMemberModelBinder:
    """
    Binds a complex model property by property, looking every property up
    under its wire alias instead of its declared name.
    """

    def __init__(self, property_binders: Mapping[PropertyDescriptor, ModelBinder]):
        self.property_binders = property_binders

    async def bind_model(self, context: BindingContext) -> BindingResult:
        descriptor = context.descriptor
        if context.depth > context.options.max_recursion_depth:
            raise RecursionDepthExceededError(context.options.max_recursion_depth)

        if not self._can_create_model(context):
            logger.debug(f"Nothing submitted under {context.model_name!r}, {descriptor.name} not created")
            return BindingResult.not_attempted()

        errors = ModelState()
        model = context.model
        if model is None:
            try:
                model = descriptor.create_instance()
            except ModelConstructionError as e:
                if context.is_top_level:
                    raise
                logger.warning(f"Skipping {context.model_name!r}: {e}")
                errors.add_error(context.model_name, str(e))
                return BindingResult.failed(errors)

        messages = context.options.messages
        attempted_property_binding = False
        bound_names: list[str] = []

        for prop in descriptor.properties:
            model_name = create_property_model_name(context.model_name, prop.wire_name)
            if not self._can_bind_property(context, prop):
                errors.mark_skipped(model_name)
                continue

            property_model = None
            if prop.is_complex:
                property_model = prop.get(model)

            result = await self.property_binders[prop].bind_model(context.nested(prop, model_name, property_model))
            errors.merge(result.errors)

            if result.is_model_set:
                attempted_property_binding = True
                bound_names.append(model_name)
                self._set_property(model, prop, model_name, result.model, errors)
            elif prop.is_binding_required:
                attempted_property_binding = True
                errors.try_add_error(model_name, messages.missing_bind_required_value.format(name=prop.wire_name))

        if not attempted_property_binding and context.is_top_level and descriptor.is_binding_required:
            name = context.field_name or context.model_name or descriptor.name
            errors.try_add_error(context.model_name, messages.missing_bind_required_value.format(name=name))

        apply_findings(errors, validate_model(descriptor, model, context.model_name))
        for name in bound_names:
            if errors.is_valid_field(name):
                errors.mark_valid(name)

        return BindingResult.success(model, errors)

    def _set_property(self, model: Any, prop: PropertyDescriptor, model_name: str, value: Any, errors: ModelState) -> None:
        if prop.is_read_only:
            # complex read-only references were updated in place through the existing instance
            return
        outcome = prop.set(model, value)
        if isinstance(outcome, Err):
            logger.warning(f"Setting {prop!r} failed: {outcome.error!r}")
            errors.try_add_error(model_name, outcome.message)

    def _can_create_model(self, context: BindingContext) -> bool:
        if not context.is_top_level and context.binding_source is not None and context.binding_source.is_greedy:
            return False
        if context.is_top_level:
            return True
        return self._can_bind_any_model_properties(context)

    def _can_bind_any_model_properties(self, context: BindingContext) -> bool:
        for prop in context.descriptor.properties:
            if not self._can_bind_property(context, prop):
                continue
            if prop.binding_source is not None and prop.binding_source.is_greedy:
                return True
            model_name = create_property_model_name(context.model_name, prop.wire_name)
            if context.value_provider.contains_prefix(model_name):
                return True
        return False

    def _can_bind_property(self, context: BindingContext, prop: PropertyDescriptor) -> bool:
        descriptor_filter = context.descriptor.property_filter
        if descriptor_filter is not None and not descriptor_filter(prop):
            return False
        if context.property_filter is not None and not context.property_filter(prop):
            return False
        if not prop.is_binding_allowed:
            return False
        # only references to mutable objects can be updated through a read-only property
        return not prop.is_read_only or prop.is_complex
