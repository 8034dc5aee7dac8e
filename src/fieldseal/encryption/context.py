"""
Operation parameters and encryption context.
"""

from dataclasses import dataclass, field
from typing import Any

from ..registry.mappings import ModelMetadataProvider


Record = dict[str, Any]


@dataclass
class TransformParameters:
    """
    Parameters of a single save or load, supplied by the persistence layer.

    Attributes:
        model_type: The model class being saved or loaded
        table_name: Physical table the record is stored in
        hash_key_name: Stored name of the partition key attribute
        range_key_name: Stored name of the sort key attribute, if any
        attribute_values: The record being transformed
        is_partial_update: The write replaces only some attributes
    """

    model_type: type
    table_name: str
    hash_key_name: str | None
    range_key_name: str | None
    attribute_values: Record = field(default_factory=dict)
    is_partial_update: bool = False


@dataclass(frozen=True)
class EncryptionContext:
    """Context bound to a record's signature for one encrypt or decrypt call."""

    table_name: str
    hash_key_name: str | None
    range_key_name: str | None
    model_type: type
    attribute_values: Record


def build_context(
    params: TransformParameters, provider: ModelMetadataProvider
) -> EncryptionContext:
    """
    Build the encryption context for an operation.

    A table AAD override on the model type replaces the table name in the
    context only; the record is still stored in ``params.table_name``.

    Args:
        params: The operation parameters
        provider: Metadata provider used to look up the override

    Returns:
        A fresh encryption context
    """
    override = provider.table_aad_override(params.model_type)
    return EncryptionContext(
        table_name=override if override is not None else params.table_name,
        hash_key_name=params.hash_key_name,
        range_key_name=params.range_key_name,
        model_type=params.model_type,
        attribute_values=params.attribute_values,
    )
