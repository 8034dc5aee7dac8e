"""
Model metadata registry.

This module answers the questions the classifier asks about a model type:
which fields it has, which of them are keys or version counters, and which
markers the type and its fields carry. Pydantic models are introspected;
other types can be registered explicitly.
"""

import logging
from typing import Any, Mapping, Protocol, Sequence

from pydantic import BaseModel

from ..models.markers import TypeMarker, type_markers
from ..models.sealed_model import FieldMapping


logger = logging.getLogger(__name__)


class ModelMetadataProvider(Protocol):
    """Static capability queries about a model type."""

    def field_mappings(self, model_type: type) -> Sequence[FieldMapping]: ...

    def do_not_touch(self, model_type: type) -> bool: ...

    def do_not_encrypt(self, model_type: type) -> bool: ...

    def handle_unknown_attributes(self, model_type: type) -> bool: ...

    def table_aad_override(self, model_type: type) -> str | None: ...


class MappingsRegistry:
    """
    Registry of field mappings and markers per model type.

    Mappings for a type are computed on first use and cached for the life
    of the registry. Model metadata must not change after first use.
    """

    _instance: "MappingsRegistry | None" = None

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._mappings: dict[type, tuple[FieldMapping, ...]] = {}

        # Markers and table names of explicitly registered types
        self._registered_markers: dict[type, dict[TypeMarker, Any]] = {}
        self._registered_tables: dict[type, str] = {}

        # Model types by class name, for lookups from the API and CLI
        self._models_by_name: dict[str, type] = {}

    @classmethod
    def instance(cls) -> "MappingsRegistry":
        """
        Get the process-wide default registry.

        Returns:
            The shared registry instance
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(
        self,
        model_type: type,
        mappings: Sequence[FieldMapping],
        *,
        table_name: str | None = None,
        do_not_touch: bool = False,
        do_not_encrypt: bool = False,
        handle_unknown_attributes: bool = False,
        table_aad_override: str | None = None,
    ) -> None:
        """
        Register a model type that is not a pydantic model.

        Markers given here are combined with any decorator markers on the
        type.

        Args:
            model_type: The model class
            mappings: Field mappings, in field order
            table_name: Physical table name; defaults to the class name
            do_not_touch: Type-level do-not-touch marker
            do_not_encrypt: Type-level do-not-encrypt marker
            handle_unknown_attributes: Type-level unknown attribute marker
            table_aad_override: Table name to bind signatures to
        """
        markers: dict[TypeMarker, Any] = {}
        if do_not_touch:
            markers[TypeMarker.DO_NOT_TOUCH] = True
        if do_not_encrypt:
            markers[TypeMarker.DO_NOT_ENCRYPT] = True
        if handle_unknown_attributes:
            markers[TypeMarker.HANDLE_UNKNOWN_ATTRIBUTES] = True
        if table_aad_override:
            markers[TypeMarker.TABLE_AAD_OVERRIDE] = table_aad_override

        self._mappings[model_type] = tuple(mappings)
        self._registered_markers[model_type] = markers
        if table_name:
            self._registered_tables[model_type] = table_name
        self.register_model(model_type)

        logger.debug("Registered %s with %d fields", model_type.__name__, len(mappings))

    def register_model(self, model_type: type) -> None:
        """
        Make a model type resolvable by its class name.

        A later type with the same class name replaces the earlier one.

        Args:
            model_type: The model class
        """
        name = model_type.__name__
        previous = self._models_by_name.get(name)
        if previous is not None and previous is not model_type:
            logger.warning(
                "Model name %s now refers to %s.%s, replacing %s.%s",
                name,
                model_type.__module__,
                model_type.__qualname__,
                previous.__module__,
                previous.__qualname__,
            )
        self._models_by_name[name] = model_type

    def model_type(self, name: str) -> type:
        """
        Get a registered model type by class name.

        Args:
            name: The class name

        Returns:
            The model class

        Raises:
            KeyError: If no model type is registered under the name
        """
        if name not in self._models_by_name:
            raise KeyError(f"Model type {name} is not registered")
        return self._models_by_name[name]

    def model_types(self) -> dict[str, type]:
        """Get all registered model types by class name."""
        return dict(self._models_by_name)

    def field_mappings(self, model_type: type) -> tuple[FieldMapping, ...]:
        """
        Get the field mappings of a model type.

        Args:
            model_type: The model class

        Returns:
            Field mappings in field declaration order

        Raises:
            TypeError: If the type is neither registered nor a pydantic model
        """
        mappings = self._mappings.get(model_type)
        if mappings is not None:
            return mappings

        if not (isinstance(model_type, type) and issubclass(model_type, BaseModel)):
            raise TypeError(
                f"{model_type!r} is not a pydantic model and has not been registered"
            )

        mappings = tuple(
            FieldMapping.from_field_info(name, field_info)
            for name, field_info in model_type.model_fields.items()
        )
        return self._mappings.setdefault(model_type, mappings)

    def _markers(self, model_type: type) -> Mapping[TypeMarker, Any]:
        registered = self._registered_markers.get(model_type)
        if not registered:
            return type_markers(model_type)
        return {**type_markers(model_type), **registered}

    def do_not_touch(self, model_type: type) -> bool:
        return bool(self._markers(model_type).get(TypeMarker.DO_NOT_TOUCH, False))

    def do_not_encrypt(self, model_type: type) -> bool:
        return bool(self._markers(model_type).get(TypeMarker.DO_NOT_ENCRYPT, False))

    def handle_unknown_attributes(self, model_type: type) -> bool:
        return bool(
            self._markers(model_type).get(TypeMarker.HANDLE_UNKNOWN_ATTRIBUTES, False)
        )

    def table_aad_override(self, model_type: type) -> str | None:
        return self._markers(model_type).get(TypeMarker.TABLE_AAD_OVERRIDE)

    def key_names(self, model_type: type) -> tuple[str | None, str | None]:
        """
        Get the stored names of the hash and range key attributes.

        Args:
            model_type: The model class

        Returns:
            Tuple of (hash key name, range key name), either may be None
        """
        hash_key_name = None
        range_key_name = None
        for mapping in self.field_mappings(model_type):
            if mapping.hash_key:
                hash_key_name = mapping.attribute_name
            if mapping.range_key:
                range_key_name = mapping.attribute_name
        return hash_key_name, range_key_name

    def table_name(self, model_type: type) -> str:
        """
        Get the physical table name of a model type.

        Args:
            model_type: The model class

        Returns:
            The registered table name, the model's ``table_name`` class
            variable, or the class name
        """
        if model_type in self._registered_tables:
            return self._registered_tables[model_type]
        return getattr(model_type, "table_name", None) or model_type.__name__

    def clear(self) -> None:
        """Forget all cached and registered metadata."""
        self._mappings.clear()
        self._registered_markers.clear()
        self._registered_tables.clear()
        self._models_by_name.clear()
