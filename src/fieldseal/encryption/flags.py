"""
Encryption flags and per-type policies.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


class EncryptionFlag(str, Enum):
    """Treatment applied to a single attribute."""

    ENCRYPT = "ENCRYPT"
    SIGN = "SIGN"


FieldPolicies = Mapping[str, frozenset[EncryptionFlag]]

NO_FLAGS: frozenset[EncryptionFlag] = frozenset()


@dataclass(frozen=True)
class ClassPolicy:
    """
    Encryption policy derived for one model type.

    Attributes:
        field_policies: Flags per stored attribute name of the static model
        do_not_touch: The whole type is exempt from encryption and signing
        unknown_attribute_policy: Flags for stored attributes that are not
            part of the static model
    """

    field_policies: FieldPolicies = field(default_factory=lambda: MappingProxyType({}))
    do_not_touch: bool = False
    unknown_attribute_policy: frozenset[EncryptionFlag] = NO_FLAGS

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        object.__setattr__(
            self, "field_policies", MappingProxyType(dict(self.field_policies))
        )

    def reconcile(
        self, attribute_names: Iterable[str], reserved: Iterable[str] = ()
    ) -> dict[str, frozenset[EncryptionFlag]]:
        """
        Extend the static policy to the attributes of a stored record.

        Attributes the model does not declare get the unknown attribute
        policy, except the ``reserved`` names. Exempt types keep their
        (empty) static policy.

        Args:
            attribute_names: Attribute names present in a stored record
            reserved: Names never added, such as the signature attribute

        Returns:
            Flags per attribute name
        """
        policies = dict(self.field_policies)
        if self.do_not_touch:
            return policies

        excluded = set(reserved)
        for name in attribute_names:
            if name not in policies and name not in excluded:
                policies[name] = self.unknown_attribute_policy
        return policies

    def to_dict(self) -> dict[str, object]:
        """
        Convert the policy to a JSON-friendly dictionary.

        Returns:
            Dictionary with sorted flag names per attribute
        """
        return {
            "do_not_touch": self.do_not_touch,
            "fields": {
                name: sorted(flag.value for flag in flags)
                for name, flags in self.field_policies.items()
            },
            "unknown_attributes": sorted(
                flag.value for flag in self.unknown_attribute_policy
            ),
        }
