from .base import ModelBinder, ModelBinderProvider
from .composite import DataMemberModelBinder
from .factory import (
    BinderProviderContext,
    BodyModelBinderProvider,
    CollectionModelBinderProvider,
    DataMemberModelBinderProvider,
    ModelBinderFactory,
    SimpleTypeModelBinderProvider,
    default_providers,
)
from .simple import BodyModelBinder, CollectionModelBinder, SimpleTypeModelBinder

__all__ = [
    "ModelBinder",
    "ModelBinderProvider",
    "DataMemberModelBinder",
    "BinderProviderContext",
    "BodyModelBinderProvider",
    "CollectionModelBinderProvider",
    "DataMemberModelBinderProvider",
    "ModelBinderFactory",
    "SimpleTypeModelBinderProvider",
    "default_providers",
    "BodyModelBinder",
    "CollectionModelBinder",
    "SimpleTypeModelBinder",
]
