"""
Encryption for fieldseal.

This module provides the classifier that decides which attributes are
encrypted and signed, the attribute encryptor hooks, and the default
record encryptor.
"""

from .attribute_encryptor import AttributeEncryptor
from .classifier import ClassificationCache, classify, default_cache
from .context import EncryptionContext, TransformParameters, build_context
from .flags import ClassPolicy, EncryptionFlag
from .record_encryptor import (
    EncryptionAlgorithm,
    EncryptionMetadata,
    Encryptor,
    RecordEncryptor,
)

__all__ = [
    "AttributeEncryptor",
    "ClassPolicy",
    "ClassificationCache",
    "EncryptionAlgorithm",
    "EncryptionContext",
    "EncryptionFlag",
    "EncryptionMetadata",
    "Encryptor",
    "RecordEncryptor",
    "TransformParameters",
    "build_context",
    "classify",
    "default_cache",
]
