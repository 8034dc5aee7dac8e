# mapper.py - Sealed record mapper

"""
This module saves and loads sealed models.

The mapper is the persistence layer the attribute encryptor plugs into: it
turns a model into a record, calls ``encode`` exactly once per save and
``decode`` exactly once per load, and moves records in and out of the
document store.
"""

import logging
from typing import TypeVar

from pydantic import BaseModel

from .db.arangodb import ArangoDBClient
from .encryption.attribute_encryptor import AttributeEncryptor
from .encryption.context import TransformParameters
from .registry.mappings import MappingsRegistry


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

KEY_SEPARATOR = ":"


class SealedMapper:
    """
    Saves models through an attribute encryptor into a record store.

    Example:
        >>> encryptor = AttributeEncryptor(RecordEncryptor())
        >>> mapper = SealedMapper(encryptor, ArangoDBClient())
        >>> mapper.save(Book(id="b-1", title="Dune"))
        'b-1'
        >>> mapper.load(Book, "b-1").title
        'Dune'
    """

    def __init__(
        self,
        attribute_encryptor: AttributeEncryptor,
        db: ArangoDBClient | None = None,
        registry: MappingsRegistry | None = None,
    ) -> None:
        """
        Initialize the mapper.

        Args:
            attribute_encryptor: Hooks applied to every save and load
            db: Record store; a new ArangoDB client if not given
            registry: Mappings registry for key and table names
        """
        self.attribute_encryptor = attribute_encryptor
        self.db = db if db is not None else ArangoDBClient()
        self.registry = registry or MappingsRegistry.instance()

    def _params(self, model_type: type, record: dict[str, object], partial: bool = False) -> TransformParameters:
        hash_key_name, range_key_name = self.registry.key_names(model_type)
        if hash_key_name is None:
            raise ValueError(f"Model {model_type.__name__} has no hash key")

        return TransformParameters(
            model_type=model_type,
            table_name=self.registry.table_name(model_type),
            hash_key_name=hash_key_name,
            range_key_name=range_key_name,
            attribute_values=record,
            is_partial_update=partial,
        )

    @staticmethod
    def _document_key(hash_value: object, range_value: object = None) -> str:
        if range_value is None:
            return str(hash_value)
        return f"{hash_value}{KEY_SEPARATOR}{range_value}"

    def save(self, model: BaseModel, *, partial_update: bool = False) -> str:
        """
        Seal and store a model.

        Args:
            model: The model to store
            partial_update: The record only carries the changed attributes.
                Sealed records must be saved whole; see AttributeEncryptor.

        Returns:
            The document key of the stored record

        Raises:
            ValueError: If the model type has no hash key
            MappingError: If the record cannot be sealed
        """
        model_type = type(model)
        record = model.model_dump(
            mode="json", by_alias=True, exclude_unset=partial_update
        )
        params = self._params(model_type, record, partial_update)

        key = self._document_key(
            record.get(params.hash_key_name),
            record.get(params.range_key_name) if params.range_key_name else None,
        )

        sealed = self.attribute_encryptor.encode(params)
        self.db.put(params.table_name, key, sealed)

        logger.debug("Saved %s %s", model_type.__name__, key)
        return key

    def load(self, model_type: type[T], hash_value: object, range_value: object = None) -> T:
        """
        Load and unseal a model.

        Args:
            model_type: The model class to instantiate
            hash_value: Hash key value
            range_value: Range key value, for models with a range key

        Returns:
            Instance of the model class

        Raises:
            ValueError: If the record is not found
            MappingError: If the record fails verification or decryption
        """
        table = self.registry.table_name(model_type)
        stored = self.db.get(table, self._document_key(hash_value, range_value))

        record = self.attribute_encryptor.decode(self._params(model_type, stored))
        return model_type.model_validate(record)

    def delete(self, model_type: type[BaseModel], hash_value: object, range_value: object = None) -> None:
        """
        Delete a stored model.

        Args:
            model_type: The model class
            hash_value: Hash key value
            range_value: Range key value, for models with a range key
        """
        table = self.registry.table_name(model_type)
        self.db.delete(table, self._document_key(hash_value, range_value))
