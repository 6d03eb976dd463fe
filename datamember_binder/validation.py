import logging
import threading
from typing import Annotated, Any, Iterable, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from .aliases import BindNever, BindRequired, DataMember, FromBody, create_index_model_name, create_property_model_name
from .metadata import ModelDescriptor, PropertyDescriptor, describe
from .model_state import ModelState

logger = logging.getLogger(__name__)

Finding = tuple[str, str]

_BINDING_MARKERS = (DataMember, BindRequired, BindNever, FromBody)

_adapters: dict[tuple[type, str], TypeAdapter] = {}
_adapters_lock = threading.Lock()


def _build_adapter(prop: PropertyDescriptor) -> TypeAdapter:
    constraints = tuple(meta for meta in prop.metadata if not isinstance(meta, _BINDING_MARKERS))
    if constraints:
        return TypeAdapter(Annotated[(prop.annotation, *constraints)])
    return TypeAdapter(prop.annotation)


def _property_adapter(prop: PropertyDescriptor) -> TypeAdapter:
    # keyed by field, not descriptor: uncached descriptors are rebuilt per request
    key = (prop.owner, prop.name)
    adapter = _adapters.get(key)
    if adapter is None:
        adapter = _build_adapter(prop)
        with _adapters_lock:
            adapter = _adapters.setdefault(key, adapter)
    return adapter


def _find_property(descriptor: ModelDescriptor, key: str) -> Optional[PropertyDescriptor]:
    fields = getattr(descriptor.model_type, "model_fields", {})
    for prop in descriptor.properties:
        if key in (prop.name, prop.wire_name):
            return prop
        field = fields.get(prop.name)
        if field is not None and key in (field.alias, field.validation_alias):
            return prop
    return None


def error_path(descriptor: Optional[ModelDescriptor], prefix: str, loc: Iterable[Any]) -> str:
    """Translate a pydantic error location into a composite field path using wire names."""
    path = prefix
    current = descriptor
    for part in loc:
        if isinstance(part, int):
            path = create_index_model_name(path, part)
            current = describe(current.element_type) if current is not None and current.is_collection else None
            continue
        prop = _find_property(current, part) if current is not None else None
        if prop is None:
            path = create_property_model_name(path, str(part))
            current = None
        else:
            path = create_property_model_name(path, prop.wire_name)
            current = prop.model
    return path


def _validate_properties(descriptor: ModelDescriptor, instance: Any, prefix: str) -> Iterable[Finding]:
    for prop in descriptor.properties:
        if prop.is_complex:
            # nested objects are validated by their own binder
            continue
        value = prop.get(instance)
        if value is None:
            continue
        try:
            _property_adapter(prop).validate_python(value)
        except ValidationError as e:
            base = create_property_model_name(prefix, prop.wire_name)
            for error in e.errors():
                yield error_path(prop.model, base, error["loc"]), error["msg"]


def _validate_object(descriptor: ModelDescriptor, instance: Any, prefix: str) -> Iterable[Finding]:
    cls = descriptor.model_type
    if not isinstance(instance, BaseModel):
        return
    # declared names, not serialization aliases, are what validation reads back
    data = instance.model_dump(exclude_unset=True)
    try:
        cls.model_validate(data, by_name=True)
    except ValidationError as e:
        for error in e.errors():
            yield error_path(descriptor, prefix, error["loc"]), error["msg"]


def validate_model(descriptor: ModelDescriptor, instance: Any, prefix: str = "") -> list[Finding]:
    """
    Property-level validation first; object-level validation (pydantic field and
    model validators over the bound fields) only when every property passed.
    """
    findings = list(_validate_properties(descriptor, instance, prefix))
    if findings:
        logger.debug(f"{descriptor.name}: {len(findings)} property findings, skipping object-level validation")
        return findings
    return list(_validate_object(descriptor, instance, prefix))


def apply_findings(model_state: ModelState, findings: Iterable[Finding]) -> int:
    """Record findings, first one per path wins. Returns how many were recorded."""
    recorded = 0
    for path, message in findings:
        if model_state.try_add_error(path, message):
            recorded += 1
        else:
            logger.debug(f"Suppressed finding for already invalid field {path!r}: {message}")
    return recorded
