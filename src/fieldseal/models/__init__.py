"""
Model interfaces for fieldseal.

This module provides the sealed model base class, field declarations and
the type-level markers read by the classifier.
"""

from .markers import (
    TypeMarker,
    do_not_encrypt,
    do_not_touch,
    handle_unknown_attributes,
    table_aad_override,
    type_markers,
)
from .sealed_model import FieldMapping, SealedField, SealedModel

__all__ = [
    "FieldMapping",
    "SealedField",
    "SealedModel",
    "TypeMarker",
    "do_not_encrypt",
    "do_not_touch",
    "handle_unknown_attributes",
    "table_aad_override",
    "type_markers",
]
