"""Tests for alias resolution, composite names and descriptors."""

from __future__ import annotations

from typing import Optional

import pytest

from datamember_binder import describe, resolve_alias
from datamember_binder.aliases import create_index_model_name, create_property_model_name
from datamember_binder.types import BindingSource
from tests.models import Account, Coordinates, DemoFormModel, Envelope, FrozenPoint, Mixed, Node, Profile, Search, Signup


class TestResolveAlias:
    """Tests for resolve_alias."""

    def test_pydantic_alias_is_wire_name(self) -> None:
        """Field(alias=...) becomes the wire name."""
        names = [resolve_alias(prop) for prop in describe(DemoFormModel).properties]
        assert names == ["foo", "bar", "baz"]

    def test_unaliased_property_keeps_declared_name(self) -> None:
        """Without an alias the declared name is used."""
        plain = describe(Mixed).properties[0]
        assert plain.alias is None
        assert resolve_alias(plain) == "plain"

    def test_data_member_marker_wins_over_pydantic_alias(self) -> None:
        """DataMember in Annotated metadata takes precedence."""
        marked = describe(Mixed).properties[2]
        assert resolve_alias(marked) == "m"

    def test_dataclass_uses_data_member(self) -> None:
        """Dataclass fields read their alias from DataMember."""
        assert [prop.wire_name for prop in describe(Coordinates).properties] == ["la", "lo"]

    def test_resolution_is_stable(self) -> None:
        """The same descriptor always resolves to the same alias."""
        prop = describe(DemoFormModel).properties[1]
        assert resolve_alias(prop) == resolve_alias(prop) == "bar"


class TestModelNames:
    """Tests for composite name helpers."""

    @pytest.mark.parametrize(
        ("prefix", "name", "expected"),
        [
            ("", "foo", "foo"),
            ("model", "foo", "model.foo"),
            ("model", "", "model"),
            ("model", "[0]", "model[0]"),
            ("a.b", "c", "a.b.c"),
        ],
    )
    def test_property_model_name(self, prefix: str, name: str, expected: str) -> None:
        """Property names are joined with a dot."""
        assert create_property_model_name(prefix, name) == expected

    def test_index_model_name(self) -> None:
        """Indexes are appended in brackets."""
        assert create_index_model_name("lines", 2) == "lines[2]"
        assert create_index_model_name("", 0) == "[0]"


class TestDescribe:
    """Tests for model descriptors."""

    def test_descriptor_is_cached(self) -> None:
        """describe returns the same descriptor for the same type."""
        assert describe(DemoFormModel) is describe(DemoFormModel)

    def test_classification(self) -> None:
        """Simple, collection and complex types are told apart."""
        assert describe(DemoFormModel).is_complex
        assert not describe(int).is_complex
        assert describe(list[int]).is_collection
        assert describe(Optional[list[int]]).is_nullable
        assert not describe(str).is_collection

    def test_binding_markers(self) -> None:
        """BindRequired, BindNever and FromBody set the property flags."""
        code = describe(Signup).properties[0]
        internal = describe(Profile).properties[2]
        payload = describe(Envelope).properties[1]
        assert code.is_binding_required
        assert not internal.is_binding_allowed
        assert payload.binding_source is BindingSource.BODY

    def test_read_only_properties(self) -> None:
        """Frozen fields and frozen dataclasses are read-only."""
        owner, settings = describe(Account).properties
        assert owner.is_read_only and settings.is_read_only
        assert settings.is_complex
        assert describe(FrozenPoint).properties[0].is_read_only

    def test_data_contract_options(self) -> None:
        """The class decorator sets the filter and the required flag."""
        profile = describe(Profile)
        assert profile.property_filter is not None
        assert [prop.name for prop in profile.properties if profile.property_filter(prop)] == ["display", "internal"]
        assert describe(Search).is_binding_required

    def test_self_reference_resolves(self) -> None:
        """A self-referencing property describes the same model type."""
        nested = describe(Node).properties[1].model
        assert nested.is_complex
        assert nested.model_type is Node
