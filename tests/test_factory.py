"""Tests for binder providers and the binder factory."""

from __future__ import annotations

import threading
from typing import Optional

import pytest

from datamember_binder import DataMemberModelBinder, DataMemberModelBinderProvider, ModelBinderFactory, describe
from datamember_binder.binders import (
    BinderProviderContext,
    BodyModelBinder,
    CollectionModelBinder,
    CollectionModelBinderProvider,
    SimpleTypeModelBinder,
    SimpleTypeModelBinderProvider,
)
from datamember_binder.errors import ModelBindingError
from datamember_binder.types import BindingSource
from tests.models import Address, DemoFormModel, Node, Payload


class _SlowProvider(DataMemberModelBinderProvider):
    def __init__(self) -> None:
        self.entered = threading.Event()
        self.release = threading.Event()

    def get_binder(self, context: BinderProviderContext):
        if context.descriptor.model_type is DemoFormModel and not self.entered.is_set():
            self.entered.set()
            self.release.wait(5)
        return super().get_binder(context)


class TestDataMemberModelBinderProvider:
    """Tests for DataMemberModelBinderProvider."""

    @pytest.mark.parametrize("model_type", [DemoFormModel, Optional[Address], Node])
    def test_supports_complex_types(self, model_type) -> None:
        """Complex, non-collection types are supported."""
        assert DataMemberModelBinderProvider().supports(model_type)

    @pytest.mark.parametrize("model_type", [int, str, Optional[int], list[int], list[Address], tuple[str, ...]])
    def test_declines_everything_else(self, model_type) -> None:
        """Primitives, strings and collections are left to other binders."""
        provider = DataMemberModelBinderProvider()
        assert not provider.supports(model_type)
        assert provider.get_binder(BinderProviderContext(ModelBinderFactory(), describe(model_type))) is None

    def test_creates_one_sub_binder_per_property(self) -> None:
        """Every declared property gets its own binder."""
        binder = DataMemberModelBinderProvider().get_binder(BinderProviderContext(ModelBinderFactory(), describe(DemoFormModel)))

        assert isinstance(binder, DataMemberModelBinder)
        kinds = {prop.name: type(sub) for prop, sub in binder.property_binders.items()}
        assert kinds == {
            "text_box": SimpleTypeModelBinder,
            "dropdown_list": SimpleTypeModelBinder,
            "check_box_list": CollectionModelBinder,
        }


class TestModelBinderFactory:
    """Tests for ModelBinderFactory."""

    def test_binder_selection(self) -> None:
        """Each kind of type gets the matching binder."""
        factory = ModelBinderFactory()
        assert isinstance(factory.create_binder(DemoFormModel), DataMemberModelBinder)
        assert isinstance(factory.create_binder(int), SimpleTypeModelBinder)
        assert isinstance(factory.create_binder(list[int]), CollectionModelBinder)
        assert isinstance(factory.create_binder(Payload, BindingSource.BODY), BodyModelBinder)

    def test_binders_are_cached(self) -> None:
        """The same type and source give the same binder."""
        factory = ModelBinderFactory()
        assert factory.create_binder(DemoFormModel) is factory.create_binder(DemoFormModel)
        assert factory.create_binder(Payload) is not factory.create_binder(Payload, BindingSource.BODY)

    def test_self_referencing_type(self) -> None:
        """Self-referencing models do not recurse forever."""
        binder = ModelBinderFactory().create_binder(Node)
        assert isinstance(binder, DataMemberModelBinder)

    def test_no_provider(self) -> None:
        """A factory whose providers all decline raises."""
        factory = ModelBinderFactory(providers=[DataMemberModelBinderProvider()])
        with pytest.raises(ModelBindingError):
            factory.create_binder(int)

    def test_custom_provider_order(self) -> None:
        """Providers are consulted in the given order."""
        factory = ModelBinderFactory(providers=[SimpleTypeModelBinderProvider(), DataMemberModelBinderProvider()])
        assert isinstance(factory.create_binder(DemoFormModel), DataMemberModelBinder)
        assert isinstance(factory.create_binder(str), SimpleTypeModelBinder)

    def test_concurrent_first_use_waits_for_the_build(self) -> None:
        """A second thread asking while a binder is built gets the finished binder."""
        provider = _SlowProvider()
        factory = ModelBinderFactory(providers=[provider, CollectionModelBinderProvider(), SimpleTypeModelBinderProvider()])
        results = {}

        builder = threading.Thread(target=lambda: results.setdefault("builder", factory.create_binder(DemoFormModel)))
        builder.start()
        assert provider.entered.wait(5)

        waiter = threading.Thread(target=lambda: results.setdefault("waiter", factory.create_binder(DemoFormModel)))
        waiter.start()
        waiter.join(0.1)
        assert waiter.is_alive()

        provider.release.set()
        builder.join(5)
        waiter.join(5)

        assert isinstance(results["builder"], DataMemberModelBinder)
        assert results["waiter"] is results["builder"]
