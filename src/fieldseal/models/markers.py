"""
Type-level markers for sealed models.

Markers are applied as class decorators and recorded on the class, so they
are inherited by subclasses:

    @handle_unknown_attributes
    @table_aad_override("books")
    class Book(SealedModel):
        ...
"""

from enum import Enum
from typing import Any, Callable, Mapping, TypeVar


C = TypeVar("C", bound=type)

MARKERS_ATTR = "__seal_markers__"


class TypeMarker(str, Enum):
    """Markers that can be placed on a model type."""

    # Neither encrypt nor sign any attribute of the type
    DO_NOT_TOUCH = "do_not_touch"

    # Sign but never encrypt any attribute of the type
    DO_NOT_ENCRYPT = "do_not_encrypt"

    # Protect attributes found in stored records but absent from the model
    HANDLE_UNKNOWN_ATTRIBUTES = "handle_unknown_attributes"

    # Bind signatures to this table name instead of the physical table
    TABLE_AAD_OVERRIDE = "table_aad_override"


def _mark(cls: C, marker: TypeMarker, value: Any = True) -> C:
    # Copy so a subclass never writes into its parent's markers
    markers = dict(getattr(cls, MARKERS_ATTR, {}))
    markers[marker] = value
    setattr(cls, MARKERS_ATTR, markers)
    return cls


def type_markers(model_type: type) -> Mapping[TypeMarker, Any]:
    """
    Get the markers recorded on a model type.

    Args:
        model_type: The model class

    Returns:
        Mapping of marker to marker value (True, or the override table name)
    """
    return getattr(model_type, MARKERS_ATTR, {})


def do_not_touch(cls: C) -> C:
    """Exempt every attribute of the decorated type from encryption and signing."""
    return _mark(cls, TypeMarker.DO_NOT_TOUCH)


def do_not_encrypt(cls: C) -> C:
    """Sign, but never encrypt, the attributes of the decorated type."""
    return _mark(cls, TypeMarker.DO_NOT_ENCRYPT)


def handle_unknown_attributes(cls: C) -> C:
    """Sign (and unless ``do_not_encrypt``, decrypt) attributes unknown to the model."""
    return _mark(cls, TypeMarker.HANDLE_UNKNOWN_ATTRIBUTES)


def table_aad_override(table_name: str) -> Callable[[C], C]:
    """
    Bind record signatures to ``table_name`` rather than the physical table.

    The override only changes the encryption context; where records are
    read from and written to is still decided by the caller.

    Args:
        table_name: Table name to use for the encryption context

    Returns:
        A class decorator
    """
    if not table_name:
        raise ValueError("table_aad_override requires a table name")

    def decorator(cls: C) -> C:
        return _mark(cls, TypeMarker.TABLE_AAD_OVERRIDE, table_name)

    return decorator
