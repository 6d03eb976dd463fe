"""Tests for the request-level entry points and round trips."""

from __future__ import annotations

import httpx
import pytest

from datamember_binder import QueryStringValueProvider, bind, bind_request, bind_sync, flatten_model, to_query_params
from tests.models import Coordinates, DemoFormModel, Order, Person, Wrapper


class TestBindSync:
    """Tests for the synchronous entry point."""

    def test_bind_sync(self) -> None:
        """bind_sync gives the same result as bind."""
        result = bind_sync(DemoFormModel, QueryStringValueProvider("foo=hello&bar=3&baz=1&baz=2"))

        assert result.model.text_box == "hello"
        assert result.model.check_box_list == [1, 2]
        assert result.is_valid


class TestBindRequest:
    """Tests for binding httpx requests."""

    @pytest.mark.asyncio
    async def test_from_query(self) -> None:
        """GET query strings bind by alias."""
        request = httpx.Request("GET", "http://testserver/demo/get", params={"foo": "hello", "bar": "3", "baz": ["1", "2"]})

        result = await bind_request(DemoFormModel, request, source="query")

        assert result.model == DemoFormModel(foo="hello", bar=3, baz=[1, 2])
        assert result.is_valid

    @pytest.mark.asyncio
    async def test_from_form(self) -> None:
        """Urlencoded form posts bind by alias."""
        request = httpx.Request("POST", "http://testserver/demo/post", data={"foo": "hello", "bar": "3", "baz": ["1", "2"]})

        result = await bind_request(DemoFormModel, request, source="form")

        assert result.model == DemoFormModel(foo="hello", bar=3, baz=[1, 2])

    @pytest.mark.asyncio
    async def test_source_restriction(self) -> None:
        """Restricting the source ignores the other one."""
        request = httpx.Request("POST", "http://testserver/demo/post?foo=query", data={"foo": "form"})

        assert (await bind_request(DemoFormModel, request, source="query")).model.text_box == "query"
        assert (await bind_request(DemoFormModel, request, source="form")).model.text_box == "form"
        assert (await bind_request(DemoFormModel, request)).model.text_box == "form"

    @pytest.mark.asyncio
    async def test_json_body_feeds_greedy_binder(self) -> None:
        """A JSON body is handed to body-bound properties."""
        request = httpx.Request("POST", "http://testserver/wrap?env.t=tag", json={"x": 7})

        result = await bind_request(Wrapper, request)

        assert result.model.envelope.tag == "tag"
        assert result.model.envelope.payload.x == 7

    @pytest.mark.asyncio
    async def test_non_utf8_form_body_does_not_raise(self) -> None:
        """A form body with bytes that are not utf-8 still binds."""
        request = httpx.Request(
            "POST",
            "http://testserver/demo/post",
            content=b"foo=caf\xe9&bar=3",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )

        result = await bind_request(DemoFormModel, request)

        assert result.model.text_box == "caf\ufffd"
        assert result.model.dropdown_list == 3
        assert result.is_valid


class TestRoundTrip:
    """Binding then flattening reproduces the submitted fields."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("model_type", "query"),
        [
            (DemoFormModel, "foo=hello&bar=3&baz=1&baz=2"),
            (Person, "n=Bob&child.st=Main&child.zip=12345"),
            (Order, "lines[0].id=a&lines[0].q=2&lines[1].id=b&lines[1].q=0&tag=red"),
            (Coordinates, "la=1.5&lo=-2.25"),
        ],
    )
    async def test_round_trip(self, model_type, query: str) -> None:
        """flatten_model emits the same aliased pairs that were bound."""
        result = await bind(model_type, QueryStringValueProvider(query))

        assert flatten_model(result.model) == httpx.QueryParams(query).multi_items()

    def test_to_query_params(self) -> None:
        """to_query_params prefixes every name and skips None values."""
        params = to_query_params(DemoFormModel(foo="x", bar=0), prefix="m")

        assert str(params) == "m.foo=x&m.bar=0"
