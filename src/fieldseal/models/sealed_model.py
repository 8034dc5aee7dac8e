"""
Base sealed model implementation.

This module provides the foundation for models whose attributes are
encrypted and signed on their way to the store. Fields are ordinary
pydantic fields; ``SealedField`` attaches the per-field markers the
classifier reads.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined


# Key under json_schema_extra holding the field markers
FIELD_MARKERS_KEY = "fieldseal"


def SealedField(
    default: Any = PydanticUndefined,
    *,
    hash_key: bool = False,
    range_key: bool = False,
    version: bool = False,
    do_not_encrypt: bool = False,
    do_not_touch: bool = False,
    **kwargs: Any,
) -> Any:
    """
    Declare a model field with sealing markers.

    Args:
        default: Default value, as for ``pydantic.Field``
        hash_key: The field is the partition key (signed, never encrypted)
        range_key: The field is the sort key (signed, never encrypted)
        version: The field is an optimistic-locking version counter
        do_not_encrypt: Sign the field but store it in plaintext
        do_not_touch: Neither encrypt nor sign the field
        **kwargs: Passed through to ``pydantic.Field``

    Returns:
        A pydantic ``FieldInfo`` carrying the markers

    Raises:
        ValueError: If a separate serialization or validation alias is given
    """
    # One stored name for writes and reads
    for split_alias in ("serialization_alias", "validation_alias"):
        if split_alias in kwargs:
            raise ValueError(f"SealedField does not accept {split_alias}; use alias")

    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[FIELD_MARKERS_KEY] = {
        "hash_key": hash_key,
        "range_key": range_key,
        "version": version,
        "do_not_encrypt": do_not_encrypt,
        "do_not_touch": do_not_touch,
    }
    return Field(default, json_schema_extra=extra, **kwargs)


@dataclass(frozen=True)
class FieldMapping:
    """
    One field of a model type as seen by the classifier.

    ``name`` is the Python attribute name; ``attribute_name`` is the name the
    value is stored under.
    """

    name: str
    attribute_name: str
    hash_key: bool = False
    range_key: bool = False
    version: bool = False
    do_not_encrypt: bool = False
    do_not_touch: bool = False

    @property
    def primary_key(self) -> bool:
        return self.hash_key or self.range_key

    @classmethod
    def from_field_info(cls, name: str, field_info: FieldInfo) -> "FieldMapping":
        """
        Build a mapping from a pydantic field.

        Args:
            name: The field name on the model
            field_info: The pydantic field definition

        Returns:
            FieldMapping for the field
        """
        extra = field_info.json_schema_extra
        markers = extra.get(FIELD_MARKERS_KEY, {}) if isinstance(extra, dict) else {}
        # The record is written with model_dump(by_alias=True)
        attribute_name = field_info.serialization_alias or field_info.alias or name
        return cls(name=name, attribute_name=attribute_name, **markers)


class SealedModel(BaseModel):
    """
    Base class for models stored through the sealing layer.

    Subclasses are registered by class name with the default mappings
    registry so they can be looked up by the policy API and the CLI.
    """

    model_config = ConfigDict(populate_by_name=True)

    # Physical table the model is stored in; defaults to the class name
    table_name: ClassVar[str | None] = None

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)

        from ..registry.mappings import MappingsRegistry
        MappingsRegistry.instance().register_model(cls)

    @classmethod
    def field_mappings(cls) -> tuple[FieldMapping, ...]:
        """Get the field mappings of this model from the default registry."""
        from ..registry.mappings import MappingsRegistry
        return MappingsRegistry.instance().field_mappings(cls)
