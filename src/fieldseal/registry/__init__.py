"""
Model metadata registry for fieldseal.

This module provides the per-type field mappings and marker queries the
classifier is built on.
"""

from .mappings import MappingsRegistry, ModelMetadataProvider

__all__ = ["MappingsRegistry", "ModelMetadataProvider"]
