"""
fieldseal - field-level encryption and signing for stored records.

This package decides, per model type, which attributes of a record are
encrypted and signed, which are only signed, and which are left alone, and
drives a record encryptor with that policy at save and load time.
"""

from .config import FieldSealConfig
from .exceptions import MappingError
from .models import (
    FieldMapping,
    SealedField,
    SealedModel,
    do_not_encrypt,
    do_not_touch,
    handle_unknown_attributes,
    table_aad_override,
)
from .registry import MappingsRegistry
from .encryption import (
    AttributeEncryptor,
    ClassPolicy,
    EncryptionFlag,
    RecordEncryptor,
    TransformParameters,
)

__version__ = "0.1.0"

__all__ = [
    "AttributeEncryptor",
    "ClassPolicy",
    "EncryptionFlag",
    "FieldMapping",
    "FieldSealConfig",
    "MappingError",
    "MappingsRegistry",
    "RecordEncryptor",
    "SealedField",
    "SealedModel",
    "TransformParameters",
    "do_not_encrypt",
    "do_not_touch",
    "handle_unknown_attributes",
    "table_aad_override",
]
