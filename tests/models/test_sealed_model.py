"""
Tests for the SealedModel class and model markers.
"""

from typing import Optional

import pytest
from pydantic import Field

from fieldseal.models import (
    FieldMapping,
    SealedField,
    SealedModel,
    TypeMarker,
    do_not_encrypt,
    do_not_touch,
    handle_unknown_attributes,
    table_aad_override,
    type_markers,
)
from fieldseal.registry import MappingsRegistry


class TestSealedField:
    """Tests for SealedField declarations."""

    def test_markers_become_field_mappings(self) -> None:
        """Test that field markers are read back as FieldMapping flags."""

        class Order(SealedModel):
            customer: str = SealedField(hash_key=True)
            placed_at: str = SealedField(range_key=True)
            version: int = SealedField(0, version=True)
            sku: str = SealedField(do_not_encrypt=True)
            trace: Optional[str] = SealedField(None, do_not_touch=True)
            total: float

        mappings = {m.name: m for m in Order.field_mappings()}

        assert mappings["customer"].hash_key and mappings["customer"].primary_key
        assert mappings["placed_at"].range_key and mappings["placed_at"].primary_key
        assert mappings["version"].version and not mappings["version"].primary_key
        assert mappings["sku"].do_not_encrypt
        assert mappings["trace"].do_not_touch
        assert mappings["total"] == FieldMapping(name="total", attribute_name="total")

    def test_field_order_is_preserved(self) -> None:
        """Test that mappings follow field declaration order."""

        class Ordered(SealedModel):
            c: int = 0
            a: int = 0
            b: int = 0

        assert [m.name for m in Ordered.field_mappings()] == ["c", "a", "b"]

    def test_alias_is_the_attribute_name(self) -> None:
        """Test that a field alias is used as the stored attribute name."""

        class Aliased(SealedModel):
            user_id: str = SealedField(hash_key=True, alias="userId")
            display_name: str = Field(alias="displayName")

        mappings = {m.name: m for m in Aliased.field_mappings()}
        assert mappings["user_id"].attribute_name == "userId"
        assert mappings["display_name"].attribute_name == "displayName"

        # Population by field name still works
        model = Aliased(user_id="u-1", display_name="Ada")
        assert model.model_dump(by_alias=True) == {"userId": "u-1", "displayName": "Ada"}

    def test_sealed_field_defaults(self) -> None:
        """Test that defaults and factories pass through to pydantic."""

        class Defaults(SealedModel):
            id: str = SealedField(hash_key=True)
            tags: list[str] = SealedField(default_factory=list, do_not_encrypt=True)
            count: int = SealedField(5)

        model = Defaults(id="x")
        assert model.tags == []
        assert model.count == 5

    def test_existing_json_schema_extra_is_kept(self) -> None:
        """Test that SealedField keeps caller supplied json_schema_extra."""

        class Documented(SealedModel):
            id: str = SealedField(hash_key=True, json_schema_extra={"example": "abc"})

        extra = Documented.model_fields["id"].json_schema_extra
        assert extra["example"] == "abc"
        assert extra["fieldseal"]["hash_key"] is True

    def test_serialization_alias_is_the_attribute_name(self) -> None:
        """Test that the name used by model_dump(by_alias=True) is the attribute name."""

        class Split(SealedModel):
            id: str = SealedField(hash_key=True)
            ssn: str = Field(serialization_alias="SSN")

        mappings = {m.name: m for m in Split.field_mappings()}
        assert mappings["ssn"].attribute_name == "SSN"
        assert set(Split(id="x", ssn="1").model_dump(by_alias=True)) == {"id", "SSN"}

    @pytest.mark.parametrize("option", ["serialization_alias", "validation_alias"])
    def test_sealed_field_rejects_split_aliases(self, option: str) -> None:
        """Test that SealedField refuses aliases that differ between dump and load."""
        with pytest.raises(ValueError):
            SealedField(**{option: "SSN"})


class TestTypeMarkers:
    """Tests for the type-level marker decorators."""

    def test_decorators_record_markers(self) -> None:
        """Test that each decorator records its marker."""

        @do_not_encrypt
        @handle_unknown_attributes
        @table_aad_override("shared")
        class Marked(SealedModel):
            id: str = SealedField(hash_key=True)

        markers = type_markers(Marked)
        assert markers[TypeMarker.DO_NOT_ENCRYPT] is True
        assert markers[TypeMarker.HANDLE_UNKNOWN_ATTRIBUTES] is True
        assert markers[TypeMarker.TABLE_AAD_OVERRIDE] == "shared"
        assert TypeMarker.DO_NOT_TOUCH not in markers

    def test_markers_are_inherited_but_not_shared(self) -> None:
        """Test that subclasses inherit markers without changing the parent."""

        @do_not_encrypt
        class Parent(SealedModel):
            id: str = SealedField(hash_key=True)

        @do_not_touch
        class Child(Parent):
            pass

        assert TypeMarker.DO_NOT_ENCRYPT in type_markers(Child)
        assert TypeMarker.DO_NOT_TOUCH in type_markers(Child)
        assert TypeMarker.DO_NOT_TOUCH not in type_markers(Parent)

    def test_markers_on_plain_classes(self) -> None:
        """Test that markers work on classes that are not models."""

        @do_not_touch
        class Plain:
            pass

        assert type_markers(Plain) == {TypeMarker.DO_NOT_TOUCH: True}
        assert type_markers(object) == {}

    def test_table_aad_override_requires_name(self) -> None:
        """Test that an empty override table name is rejected."""
        with pytest.raises(ValueError):
            table_aad_override("")


class TestModelRegistration:
    """Tests for registration of sealed models by name."""

    def test_subclasses_register_by_name(self) -> None:
        """Test that defining a SealedModel registers it with the default registry."""

        class RegisteredWidget(SealedModel):
            id: str = SealedField(hash_key=True)

        registry = MappingsRegistry.instance()
        assert registry.model_type("RegisteredWidget") is RegisteredWidget
        assert "RegisteredWidget" in registry.model_types()

    def test_table_name_class_variable(self) -> None:
        """Test the table_name class variable and its class name default."""

        class Gadget(SealedModel):
            table_name = "gadgets"
            id: str = SealedField(hash_key=True)

        class Gizmo(SealedModel):
            id: str = SealedField(hash_key=True)

        registry = MappingsRegistry.instance()
        assert registry.table_name(Gadget) == "gadgets"
        assert registry.table_name(Gizmo) == "Gizmo"

        # table_name is a class variable, not a field
        assert "table_name" not in Gadget.model_fields
