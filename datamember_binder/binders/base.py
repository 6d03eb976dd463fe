from typing import Optional, Protocol, TYPE_CHECKING

from ..types import BindingContext, BindingResult

if TYPE_CHECKING:
    from .factory import BinderProviderContext


class ModelBinder(Protocol):
    async def bind_model(self, context: BindingContext) -> BindingResult:
        ...


class ModelBinderProvider(Protocol):
    def get_binder(self, context: "BinderProviderContext") -> Optional[ModelBinder]:
        ...
