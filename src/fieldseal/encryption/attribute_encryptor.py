"""
Attribute encryptor.

``AttributeEncryptor`` is the hook a persistence layer calls once per save
(``encode``) and once per load (``decode``). It looks up the cached policy
of the model type, builds the encryption context and hands both to the
record encryptor.

Only use ``encode`` for writes that replace the whole record. A partial
update re-signs a subset of the attributes while the stored signature
covers all of them, which leaves the stored record unreadable. Partial
updates are logged as errors but are not rejected.
"""

import logging

from ..exceptions import MappingError
from ..registry.mappings import ModelMetadataProvider
from .classifier import ClassificationCache, default_cache
from .context import Record, TransformParameters, build_context
from .flags import ClassPolicy, EncryptionFlag
from .record_encryptor import Encryptor


logger = logging.getLogger(__name__)


class AttributeEncryptor:
    """
    Encrypts and signs all non-key attributes of a record before storage,
    and verifies and decrypts them after loading.
    """

    def __init__(
        self,
        encryptor: Encryptor,
        metadata_provider: ModelMetadataProvider | None = None,
        cache: ClassificationCache | None = None,
    ) -> None:
        """
        Initialize the attribute encryptor.

        Args:
            encryptor: The record encryptor to drive
            metadata_provider: Source of model metadata; defaults to the
                process-wide mappings registry
            cache: Classification cache; defaults to the process-wide cache
                when no provider is given, else a new cache for the provider
        """
        self.encryptor = encryptor

        if cache is None:
            cache = (
                default_cache()
                if metadata_provider is None
                else ClassificationCache(metadata_provider)
            )
        self.cache = cache
        self.metadata_provider = metadata_provider or cache.provider

    def get_policy(self, model_type: type) -> ClassPolicy:
        """
        Get the classification policy of a model type.

        Args:
            model_type: The model class

        Returns:
            The cached policy
        """
        return self.cache.get_policy(model_type)

    def encode(self, params: TransformParameters) -> Record:
        """
        Encrypt and sign a record on its way to the store.

        Args:
            params: The save parameters

        Returns:
            The record to store; ``params.attribute_values`` itself if the
            model type is exempt

        Raises:
            MappingError: If the record encryptor fails
        """
        policy = self.get_policy(params.model_type)

        if policy.do_not_touch:
            return params.attribute_values

        if params.is_partial_update:
            logger.error(
                "Partial update of %s with encryption enabled; this can corrupt "
                "signed and encrypted data. Save whole records instead.",
                params.model_type.__name__,
            )

        try:
            return self.encryptor.encrypt_record(
                params.attribute_values,
                policy.field_policies,
                build_context(params, self.metadata_provider),
            )
        except Exception as e:
            raise MappingError(
                f"Failed to encrypt {params.model_type.__name__}: {e}", cause=e
            ) from e

    def decode(self, params: TransformParameters) -> Record:
        """
        Verify and decrypt a record loaded from the store.

        Args:
            params: The load parameters

        Returns:
            The plaintext record; ``params.attribute_values`` itself if the
            model type is exempt

        Raises:
            MappingError: If the record encryptor fails
        """
        if self.get_policy(params.model_type).do_not_touch:
            return params.attribute_values

        field_policies = self.effective_policies(params)

        try:
            return self.encryptor.decrypt_record(
                params.attribute_values,
                field_policies,
                build_context(params, self.metadata_provider),
            )
        except Exception as e:
            raise MappingError(
                f"Failed to decrypt {params.model_type.__name__}: {e}", cause=e
            ) from e

    def effective_policies(
        self, params: TransformParameters
    ) -> dict[str, frozenset[EncryptionFlag]]:
        """
        Reconcile the static policy with the attributes of a stored record.

        Attributes of the record that the model does not declare get the
        type's unknown attribute policy. The encryptor's reserved attributes
        are left out. Exempt types get their (empty) static policy as is.

        Args:
            params: The load parameters

        Returns:
            Flags per attribute name
        """
        return self.get_policy(params.model_type).reconcile(
            params.attribute_values,
            reserved=(
                self.encryptor.signature_field_name,
                self.encryptor.material_description_field_name,
            ),
        )
