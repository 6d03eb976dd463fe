from typing import Any


class ModelBindingError(Exception):
    pass


class ModelConstructionError(ModelBindingError):
    def __init__(self, model_type: Any, reason: str | None = None):
        self.model_type = model_type
        self.reason = reason
        name = getattr(model_type, "__name__", repr(model_type))
        message = (
            f"Could not create an instance of type '{name}'. Model bound complex types "
            f"must not be abstract and must be constructible without arguments."
        )
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class RecursionDepthExceededError(ModelBindingError):
    def __init__(self, depth: int):
        self.depth = depth
        super().__init__(f"Model binding exceeded the maximum recursion depth of {depth}.")
