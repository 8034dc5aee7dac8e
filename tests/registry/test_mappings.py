"""
Tests for the MappingsRegistry class.
"""

import logging
from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from fieldseal.models import FieldMapping, SealedField, SealedModel, do_not_encrypt, table_aad_override
from fieldseal.registry import MappingsRegistry


@dataclass
class LegacyInvoice:
    """A record type that is not a pydantic model."""

    number: str
    amount: int


class TestMappingsRegistry:
    """Tests for the MappingsRegistry class."""

    def test_pydantic_models_are_introspected(self, registry: MappingsRegistry) -> None:
        """Test that plain pydantic models need no registration."""

        class Plain(BaseModel):
            name: str
            size: int = 0

        mappings = registry.field_mappings(Plain)
        assert [m.attribute_name for m in mappings] == ["name", "size"]
        assert not any(m.primary_key for m in mappings)

    def test_mappings_are_cached(self, registry: MappingsRegistry) -> None:
        """Test that the same mappings are returned on every call."""

        class Cached(SealedModel):
            id: str = SealedField(hash_key=True)

        assert registry.field_mappings(Cached) is registry.field_mappings(Cached)

    def test_unregistered_type_is_rejected(self, registry: MappingsRegistry) -> None:
        """Test that an unknown non-pydantic type raises TypeError."""
        with pytest.raises(TypeError):
            registry.field_mappings(LegacyInvoice)

    def test_explicit_registration(self, registry: MappingsRegistry) -> None:
        """Test registering a type with explicit mappings and markers."""
        registry.register(
            LegacyInvoice,
            [
                FieldMapping("number", "number", hash_key=True),
                FieldMapping("amount", "amount"),
            ],
            table_name="invoices",
            do_not_encrypt=True,
            handle_unknown_attributes=True,
            table_aad_override="billing",
        )

        assert [m.name for m in registry.field_mappings(LegacyInvoice)] == ["number", "amount"]
        assert registry.do_not_encrypt(LegacyInvoice) is True
        assert registry.do_not_touch(LegacyInvoice) is False
        assert registry.handle_unknown_attributes(LegacyInvoice) is True
        assert registry.table_aad_override(LegacyInvoice) == "billing"
        assert registry.table_name(LegacyInvoice) == "invoices"
        assert registry.key_names(LegacyInvoice) == ("number", None)
        assert registry.model_type("LegacyInvoice") is LegacyInvoice

    def test_decorator_and_registered_markers_combine(self, registry: MappingsRegistry) -> None:
        """Test that decorator markers survive explicit registration."""

        @do_not_encrypt
        class Decorated:
            pass

        registry.register(Decorated, [], handle_unknown_attributes=True)

        assert registry.do_not_encrypt(Decorated) is True
        assert registry.handle_unknown_attributes(Decorated) is True

    def test_marker_queries_from_decorators(self, registry: MappingsRegistry) -> None:
        """Test marker queries on a decorated pydantic model."""

        @table_aad_override("people")
        class Person(SealedModel):
            id: str = SealedField(hash_key=True)

        assert registry.table_aad_override(Person) == "people"
        assert registry.do_not_touch(Person) is False
        assert registry.do_not_encrypt(Person) is False
        assert registry.handle_unknown_attributes(Person) is False

    def test_key_names(self, registry: MappingsRegistry) -> None:
        """Test resolving hash and range key attribute names."""

        class Event(SealedModel):
            stream: str = SealedField(hash_key=True, alias="streamId")
            seq: int = SealedField(range_key=True)
            body: str = ""

        class Keyless(SealedModel):
            body: str = ""

        assert registry.key_names(Event) == ("streamId", "seq")
        assert registry.key_names(Keyless) == (None, None)

    def test_unknown_model_name(self, registry: MappingsRegistry) -> None:
        """Test that looking up an unknown model name raises KeyError."""
        with pytest.raises(KeyError):
            registry.model_type("DoesNotExist")

    def test_clear(self, registry: MappingsRegistry) -> None:
        """Test that clear forgets registrations."""
        registry.register(LegacyInvoice, [FieldMapping("number", "number", hash_key=True)])
        registry.clear()

        assert registry.model_types() == {}
        with pytest.raises(TypeError):
            registry.field_mappings(LegacyInvoice)

    def test_default_instance_is_shared(self) -> None:
        """Test that instance() returns the same registry every time."""
        assert MappingsRegistry.instance() is MappingsRegistry.instance()

    def test_name_collision_is_logged(self, registry: MappingsRegistry, caplog: pytest.LogCaptureFixture) -> None:
        """Test that replacing a model registered under the same name logs a warning."""

        def define() -> type:
            class Widget:
                pass

            return Widget

        first, second = define(), define()

        with caplog.at_level(logging.WARNING, logger="fieldseal"):
            registry.register_model(first)
            registry.register_model(first)
            assert not caplog.records

            registry.register_model(second)

        assert registry.model_type("Widget") is second
        assert len(caplog.records) == 1
        assert "Widget" in caplog.records[0].getMessage()
