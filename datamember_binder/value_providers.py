import codecs
import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

import httpx

from .types import BindingSource

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

QueryParamTypes = httpx.QueryParams | Mapping[str, Any] | Sequence[tuple[str, Any]] | str | bytes


class ValueProvider(Protocol):
    def contains_prefix(self, prefix: str) -> bool:
        ...

    def get_value(self, key: str) -> Optional[str]:
        ...

    def get_values(self, key: str) -> list[str]:
        ...


def _matches_prefix(key: str, prefix: str) -> bool:
    if not key.startswith(prefix):
        return False
    return len(key) == len(prefix) or key[len(prefix)] in ".["


class QueryStringValueProvider:
    def __init__(self, params: QueryParamTypes = None, encoding: str = "utf-8"):
        if isinstance(params, bytes):
            # client-supplied bytes; bad sequences become U+FFFD
            params = params.decode(encoding, errors="replace")
        self.params = params if isinstance(params, httpx.QueryParams) else httpx.QueryParams(params if params is not None else {})

    def contains_prefix(self, prefix: str) -> bool:
        if not prefix:
            return len(self.params) > 0
        return any(_matches_prefix(key, prefix) for key in self.params.keys())

    def get_value(self, key: str) -> Optional[str]:
        return self.params.get(key)

    def get_values(self, key: str) -> list[str]:
        return self.params.get_list(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.params)!r})"


class FormValueProvider(QueryStringValueProvider):
    """ Fields of an urlencoded request body """


class CompositeValueProvider:
    def __init__(self, providers: Iterable[ValueProvider] = ()):
        self.providers = list(providers)

    def contains_prefix(self, prefix: str) -> bool:
        return any(provider.contains_prefix(prefix) for provider in self.providers)

    def get_value(self, key: str) -> Optional[str]:
        for provider in self.providers:
            value = provider.get_value(key)
            if value is not None:
                return value
        return None

    def get_values(self, key: str) -> list[str]:
        for provider in self.providers:
            values = provider.get_values(key)
            if values:
                return values
        return []


def is_form_request(request: httpx.Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE


def form_charset(request: httpx.Request) -> str:
    content_type = request.headers.get("content-type", "")
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() != "charset":
            continue
        charset = value.strip().strip('"')
        try:
            return codecs.lookup(charset).name
        except LookupError:
            logger.warning(f"Unknown form charset {charset!r}, decoding as utf-8")
    return "utf-8"


def from_request(request: httpx.Request, source: Optional[BindingSource] = None) -> CompositeValueProvider:
    """
    Value provider over a request: form fields first, then the query string.
    Pass a source to restrict the lookup to one of them.
    """
    providers: list[ValueProvider] = []
    if source in (None, BindingSource.FORM) and is_form_request(request):
        providers.append(FormValueProvider(request.content, form_charset(request)))
    if source in (None, BindingSource.QUERY):
        providers.append(QueryStringValueProvider(request.url.params))
    return CompositeValueProvider(providers)
