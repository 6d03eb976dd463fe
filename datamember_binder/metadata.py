import collections.abc
import dataclasses
import inspect
import threading
import types
from dataclasses import dataclass
from typing import Annotated, Any, Callable, ForwardRef, Iterable, Optional, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .aliases import BindNever, BindRequired, FromBody, declared_alias, resolve_alias
from .errors import ModelConstructionError
from .types import BindingSource, Err, Ok

_NONE_TYPE = type(None)

_COLLECTION_ORIGINS = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
}


def strip_annotated(tp: Any) -> tuple[Any, tuple]:
    if get_origin(tp) is Annotated:
        base, *extras = get_args(tp)
        return base, tuple(extras)
    return tp, ()


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return (inner type, nullable) for Optional[X] / X | None."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = get_args(tp)
        inner = [arg for arg in args if arg is not _NONE_TYPE]
        nullable = len(inner) != len(args)
        if len(inner) == 1:
            return inner[0], nullable
        return tp, nullable
    return tp, tp is Any or tp is None


def collection_info(tp: Any) -> Optional[tuple[type, Any]]:
    """(container, element type) for list/tuple/set style annotations, else None."""
    inner, _ = unwrap_optional(tp)
    origin = get_origin(inner) or inner
    try:
        container = _COLLECTION_ORIGINS.get(origin)
    except TypeError:
        return None
    if container is None:
        return None
    args = [arg for arg in get_args(inner) if arg is not Ellipsis]
    return container, args[0] if args else Any


def is_complex_type(tp: Any) -> bool:
    inner, _ = unwrap_optional(tp)
    if not inspect.isclass(inner) or get_origin(inner) is not None:
        return False
    return issubclass(inner, BaseModel) or dataclasses.is_dataclass(inner)


def _has_forward_ref(tp: Any) -> bool:
    if isinstance(tp, (str, ForwardRef)):
        return True
    return any(_has_forward_ref(arg) for arg in get_args(tp))


@dataclass(frozen=True)
class PropertyFilter:
    include: Optional[frozenset[str]] = None
    exclude: frozenset[str] = frozenset()

    def __call__(self, prop: "PropertyDescriptor") -> bool:
        names = {prop.name, prop.wire_name}
        if self.include is not None and not names & self.include:
            return False
        return not names & self.exclude


def data_contract(include: Optional[Iterable[str]] = None, exclude: Iterable[str] = (), required: bool = False):
    """
    Class decorator for binding options that apply to the whole model:
    which properties may be bound (by name or alias) and whether the model is binding-required.
    """
    def decorate(cls):
        cls.__data_contract__ = (
            PropertyFilter(frozenset(include) if include is not None else None, frozenset(exclude)),
            required,
        )
        return cls
    return decorate


@dataclass(frozen=True, eq=False)
class PropertyDescriptor:
    name: str
    annotation: Any
    owner: type
    alias: Optional[str] = None
    is_read_only: bool = False
    is_binding_required: bool = False
    is_binding_allowed: bool = True
    binding_source: Optional[BindingSource] = None
    metadata: tuple = ()

    @property
    def wire_name(self) -> str:
        return resolve_alias(self)

    @property
    def model(self) -> "ModelDescriptor":
        return describe(self.annotation)

    @property
    def is_complex(self) -> bool:
        return self.model.is_complex

    @property
    def is_collection(self) -> bool:
        return self.model.is_collection

    def get(self, instance: Any) -> Any:
        return getattr(instance, self.name, None)

    def set(self, instance: Any, value: Any) -> Ok | Err:
        try:
            setattr(instance, self.name, value)
        except Exception as e:
            return Err(e)
        return Ok(value)

    def __repr__(self) -> str:
        return f"PropertyDescriptor({self.owner.__name__}.{self.name} as {self.wire_name!r})"


@dataclass(frozen=True, eq=False)
class ModelDescriptor:
    annotation: Any
    model_type: Any
    properties: tuple[PropertyDescriptor, ...] = ()
    is_complex: bool = False
    is_collection: bool = False
    is_nullable: bool = False
    is_binding_required: bool = False
    property_filter: Optional[Callable[[PropertyDescriptor], bool]] = None
    container_type: Optional[type] = None
    element_type: Any = None

    @property
    def name(self) -> str:
        return getattr(self.model_type, "__name__", repr(self.model_type))

    def create_instance(self) -> Any:
        cls = self.model_type
        if inspect.isabstract(cls):
            raise ModelConstructionError(cls, "The type is abstract.")
        try:
            return cls()
        except Exception as e:
            raise ModelConstructionError(cls, str(e).splitlines()[0] if str(e) else None) from e


def _property_flags(metadata: tuple) -> dict[str, Any]:
    return {
        "is_binding_required": any(isinstance(meta, BindRequired) for meta in metadata),
        "is_binding_allowed": not any(isinstance(meta, BindNever) for meta in metadata),
        "binding_source": BindingSource.BODY if any(isinstance(meta, FromBody) for meta in metadata) else None,
    }


def _pydantic_properties(cls: type[BaseModel]) -> Iterable[PropertyDescriptor]:
    frozen_model = bool(cls.model_config.get("frozen"))
    hints = None
    for name, field in cls.model_fields.items():
        annotation = field.annotation
        if _has_forward_ref(annotation):
            hints = hints or get_type_hints(cls)
            annotation = hints.get(name, annotation)
        metadata = tuple(field.metadata)
        yield PropertyDescriptor(
            name=name,
            annotation=annotation,
            owner=cls,
            alias=declared_alias(metadata, field),
            is_read_only=frozen_model or bool(field.frozen),
            metadata=metadata,
            **_property_flags(metadata),
        )


def _dataclass_properties(cls: type) -> Iterable[PropertyDescriptor]:
    hints = get_type_hints(cls, include_extras=True)
    frozen = cls.__dataclass_params__.frozen
    for field in dataclasses.fields(cls):
        annotation, metadata = strip_annotated(hints.get(field.name, field.type))
        yield PropertyDescriptor(
            name=field.name,
            annotation=annotation,
            owner=cls,
            alias=declared_alias(metadata, None),
            is_read_only=frozen,
            metadata=metadata,
            **_property_flags(metadata),
        )


def _build(annotation: Any) -> ModelDescriptor:
    inner, nullable = unwrap_optional(annotation)
    collection = collection_info(annotation)
    if collection is not None:
        container, element = collection
        return ModelDescriptor(
            annotation=annotation,
            model_type=container,
            is_collection=True,
            is_nullable=nullable,
            container_type=container,
            element_type=element,
        )
    if not is_complex_type(inner):
        return ModelDescriptor(annotation=annotation, model_type=inner, is_nullable=nullable)

    if issubclass(inner, BaseModel):
        properties = tuple(_pydantic_properties(inner))
    else:
        properties = tuple(_dataclass_properties(inner))
    property_filter, required = getattr(inner, "__data_contract__", (None, False))
    return ModelDescriptor(
        annotation=annotation,
        model_type=inner,
        properties=properties,
        is_complex=True,
        is_nullable=nullable,
        is_binding_required=required,
        property_filter=property_filter,
    )


_descriptors: dict[Any, ModelDescriptor] = {}
_lock = threading.Lock()


def describe(annotation: Any) -> ModelDescriptor:
    """Descriptor for a type, built on first use and shared afterwards."""
    try:
        return _descriptors[annotation]
    except KeyError:
        pass
    except TypeError:
        # unhashable annotation, e.g. Literal over a list
        return _build(annotation)
    descriptor = _build(annotation)
    with _lock:
        return _descriptors.setdefault(annotation, descriptor)
