"""
Field classification.

``classify`` turns the static metadata of a model type into a
``ClassPolicy``. ``ClassificationCache`` memoizes the result per type.

The cache takes no lock. Two threads missing the cache for the same type
may both classify it; the results are equal because classification is a
pure function of metadata that is frozen after first use, and
``dict.setdefault`` publishes only one of them. If a metadata provider could
ever answer differently for the same type, this cache would need explicit
synchronization.
"""

import logging

from ..registry.mappings import MappingsRegistry, ModelMetadataProvider
from .flags import NO_FLAGS, ClassPolicy, EncryptionFlag


logger = logging.getLogger(__name__)


def classify(model_type: type, provider: ModelMetadataProvider) -> ClassPolicy:
    """
    Compute the encryption policy of a model type.

    Args:
        model_type: The model class
        provider: Source of field mappings and marker queries

    Returns:
        The policy for every statically known attribute, plus the policy for
        attributes unknown to the model
    """
    if provider.do_not_touch(model_type):
        return ClassPolicy({}, do_not_touch=True, unknown_attribute_policy=NO_FLAGS)

    type_do_not_encrypt = provider.do_not_encrypt(model_type)

    field_policies: dict[str, frozenset[EncryptionFlag]] = {}
    for mapping in provider.field_mappings(model_type):
        flags: set[EncryptionFlag] = set()
        if not mapping.do_not_touch:
            if not (
                type_do_not_encrypt
                or mapping.do_not_encrypt
                or mapping.primary_key
                or mapping.version
            ):
                flags.add(EncryptionFlag.ENCRYPT)
            flags.add(EncryptionFlag.SIGN)
        field_policies[mapping.attribute_name] = frozenset(flags)

    unknown: set[EncryptionFlag] = set()
    if provider.handle_unknown_attributes(model_type):
        unknown.add(EncryptionFlag.SIGN)
        if not type_do_not_encrypt:
            unknown.add(EncryptionFlag.ENCRYPT)

    return ClassPolicy(
        field_policies,
        do_not_touch=False,
        unknown_attribute_policy=frozenset(unknown),
    )


class ClassificationCache:
    """Process-lifetime memo of ``classify`` results keyed by model type."""

    def __init__(self, provider: ModelMetadataProvider) -> None:
        """
        Initialize the cache.

        Args:
            provider: Metadata provider the cached policies are computed from
        """
        self.provider = provider
        self._policies: dict[type, ClassPolicy] = {}

    def get_policy(self, model_type: type) -> ClassPolicy:
        """
        Get the policy of a model type, classifying it on first use.

        Args:
            model_type: The model class

        Returns:
            The cached policy
        """
        policy = self._policies.get(model_type)
        if policy is None:
            policy = self._policies.setdefault(
                model_type, classify(model_type, self.provider)
            )
            logger.debug("Classified %s", model_type.__name__)
        return policy

    def __contains__(self, model_type: type) -> bool:
        return model_type in self._policies

    def clear(self) -> None:
        """Drop every cached policy."""
        self._policies.clear()


_default_cache: ClassificationCache | None = None


def default_cache() -> ClassificationCache:
    """
    Get the process-wide cache bound to the default mappings registry.

    Returns:
        The shared classification cache
    """
    global _default_cache
    if _default_cache is None:
        _default_cache = ClassificationCache(MappingsRegistry.instance())
    return _default_cache
