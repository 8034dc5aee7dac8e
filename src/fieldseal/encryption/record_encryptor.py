"""
Record encryption implementation.

This module defines the ``Encryptor`` interface the attribute encryptor
drives, and ``RecordEncryptor``, its default implementation: attributes
flagged ENCRYPT are sealed with AES-GCM, and attributes flagged SIGN are
covered, together with the table and key names of the encryption context,
by an HMAC-SHA256 signature stored alongside the record.
"""

import base64
import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..config import FieldSealConfig
from ..exceptions import DecryptionError, SignatureVerificationError
from .context import EncryptionContext, Record
from .flags import EncryptionFlag, FieldPolicies


logger = logging.getLogger(__name__)

DEV_MASTER_KEY = "dev-only-encryption-key-do-not-use-in-production"

NONCE_SIZE = 12  # 96-bit nonce for GCM
TAG_SIZE = 16


class EncryptionAlgorithm(str, Enum):
    """Supported encryption algorithms."""

    AES_GCM = "AES-GCM"


@dataclass
class EncryptionMetadata:
    """
    Material description of a sealed record.

    This contains the information needed to derive the record's keys again,
    and is stored in plaintext next to the record.
    """

    # Encryption algorithm used
    algorithm: EncryptionAlgorithm

    # Salt used for key derivation, base64
    salt: str

    # When the record was sealed
    created_at: str

    # Version of the sealing format
    version: str = "1.0"

    def to_dict(self) -> dict[str, str]:
        """
        Convert metadata to a dictionary for storage.

        Returns:
            Dictionary representation of the metadata
        """
        return {
            "algorithm": self.algorithm.value,
            "salt": self.salt,
            "created_at": self.created_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "EncryptionMetadata":
        """
        Create metadata from a dictionary.

        Args:
            data: Dictionary containing metadata fields

        Returns:
            EncryptionMetadata instance
        """
        return cls(
            algorithm=EncryptionAlgorithm(data["algorithm"]),
            salt=data["salt"],
            created_at=data["created_at"],
            version=data.get("version", "1.0"),
        )


class Encryptor(Protocol):
    """Encrypts and signs whole records under a per-attribute policy."""

    @property
    def signature_field_name(self) -> str: ...

    @property
    def material_description_field_name(self) -> str: ...

    def encrypt_record(
        self, record: Record, field_policies: FieldPolicies, context: EncryptionContext
    ) -> Record: ...

    def decrypt_record(
        self, record: Record, field_policies: FieldPolicies, context: EncryptionContext
    ) -> Record: ...


class RecordEncryptor:
    """
    Default record encryptor.

    Each record gets a fresh salt; a 512-bit key is derived from the master
    key with PBKDF2 and split into an AES-256 key and an HMAC key.
    """

    def __init__(
        self,
        master_key: str | None = None,
        *,
        algorithm: str | None = None,
        key_iterations: int | None = None,
        signature_field_name: str | None = None,
        material_description_field_name: str | None = None,
    ) -> None:
        """
        Initialize the record encryptor.

        Args:
            master_key: Optional master encryption key
            algorithm: Encryption algorithm name, defaults to configuration
            key_iterations: PBKDF2 iterations, defaults to configuration
            signature_field_name: Reserved attribute holding the signature
            material_description_field_name: Reserved attribute holding the
                material description

        Raises:
            ValueError: If the algorithm is not supported
        """
        self.master_key = master_key or self._get_master_key()

        # Fail stop without a key
        if not self.master_key:
            logger.critical("No master encryption key provided or found in environment")
            sys.exit(1)

        self.algorithm = EncryptionAlgorithm(
            algorithm or FieldSealConfig.get("encryption.algorithm", "AES-GCM")
        )
        self.key_iterations = int(
            key_iterations or FieldSealConfig.get("encryption.key_iterations", 100000)
        )
        self._signature_field_name = signature_field_name or FieldSealConfig.get(
            "encryption.signature_field", "*field_seal_sig*"
        )
        self._material_description_field_name = (
            material_description_field_name
            or FieldSealConfig.get("encryption.material_description_field", "*field_seal_desc*")
        )

    @property
    def signature_field_name(self) -> str:
        return self._signature_field_name

    @property
    def material_description_field_name(self) -> str:
        return self._material_description_field_name

    def _get_master_key(self) -> str:
        """
        Get the master encryption key from the environment or configuration.

        Returns:
            The master key, or an empty string if none is available
        """
        key = os.environ.get("FIELDSEAL_ENCRYPTION_KEY")
        if key:
            return key

        key = FieldSealConfig.get("encryption.key")
        if key:
            return key

        if FieldSealConfig.is_dev_mode():
            logger.warning("Using the development encryption key")
            return DEV_MASTER_KEY

        return ""

    def derive_keys(self, salt: bytes) -> tuple[bytes, bytes]:
        """
        Derive the encryption and signing keys of a record.

        Args:
            salt: The record's salt

        Returns:
            Tuple of (AES key, HMAC key)
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=64,
            salt=salt,
            iterations=self.key_iterations,
        )
        key_material = kdf.derive(self.master_key.encode("utf-8"))
        return key_material[:32], key_material[32:]

    def encrypt_record(
        self, record: Record, field_policies: FieldPolicies, context: EncryptionContext
    ) -> Record:
        """
        Encrypt and sign a record.

        Attributes without flags, and attributes not in ``field_policies``,
        are copied unchanged.

        Args:
            record: The plaintext record
            field_policies: Flags per attribute name
            context: The encryption context

        Returns:
            A new record with encrypted values, the material description and
            the signature
        """
        salt = os.urandom(16)
        encryption_key, signing_key = self.derive_keys(salt)

        metadata = EncryptionMetadata(
            algorithm=self.algorithm,
            salt=base64.b64encode(salt).decode("utf-8"),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        description = json.dumps(metadata.to_dict(), sort_keys=True)

        sealed = dict(record)
        for name, flags in field_policies.items():
            if EncryptionFlag.ENCRYPT in flags and name in sealed:
                sealed[name] = self._encrypt_value(encryption_key, name, sealed[name])

        sealed[self.material_description_field_name] = description
        sealed[self.signature_field_name] = base64.b64encode(
            self._signature(signing_key, sealed, field_policies, context, description)
        ).decode("utf-8")
        return sealed

    def decrypt_record(
        self, record: Record, field_policies: FieldPolicies, context: EncryptionContext
    ) -> Record:
        """
        Verify and decrypt a record.

        Args:
            record: The stored record
            field_policies: Flags per attribute name
            context: The encryption context

        Returns:
            A new record with decrypted values and without the reserved
            attributes

        Raises:
            SignatureVerificationError: If the signature or material
                description is missing or the signature does not match
            DecryptionError: If an encrypted value cannot be decrypted
        """
        sig_name = self.signature_field_name
        desc_name = self.material_description_field_name

        # Nothing was protected, so nothing was signed
        if sig_name not in record and not any(field_policies.values()):
            return dict(record)

        if sig_name not in record or desc_name not in record:
            raise SignatureVerificationError("Record is not signed")

        description = record[desc_name]
        try:
            metadata = EncryptionMetadata.from_dict(json.loads(description))
            salt = base64.b64decode(metadata.salt)
            signature = base64.b64decode(record[sig_name])
        except (TypeError, ValueError, KeyError) as e:
            raise SignatureVerificationError(f"Malformed material description: {e}") from e

        encryption_key, signing_key = self.derive_keys(salt)

        h = hmac.HMAC(signing_key, hashes.SHA256())
        h.update(self._signing_payload(record, field_policies, context, description))
        try:
            h.verify(signature)
        except InvalidSignature as e:
            raise SignatureVerificationError("Record signature does not match") from e

        opened = {k: v for k, v in record.items() if k not in (sig_name, desc_name)}
        for name, flags in field_policies.items():
            if EncryptionFlag.ENCRYPT in flags and name in opened:
                opened[name] = self._decrypt_value(encryption_key, name, opened[name])
        return opened

    def _signing_payload(
        self,
        record: Record,
        field_policies: FieldPolicies,
        context: EncryptionContext,
        description: str,
    ) -> bytes:
        payload = {
            "table": context.table_name,
            "hash_key": context.hash_key_name,
            "range_key": context.range_key_name,
            "material_description": description,
            "attributes": {
                name: record[name]
                for name, flags in field_policies.items()
                if EncryptionFlag.SIGN in flags and name in record
            },
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def _signature(
        self,
        signing_key: bytes,
        record: Record,
        field_policies: FieldPolicies,
        context: EncryptionContext,
        description: str,
    ) -> bytes:
        h = hmac.HMAC(signing_key, hashes.SHA256())
        h.update(self._signing_payload(record, field_policies, context, description))
        return h.finalize()

    def _encrypt_value(self, key: bytes, name: str, value: Any) -> str:
        """
        Encrypt a single attribute value.

        The attribute name is authenticated as associated data, so a
        ciphertext cannot be moved to another attribute.

        Args:
            key: The record's AES key
            name: Stored attribute name
            value: JSON-serializable value

        Returns:
            Base64 of nonce, ciphertext and tag
        """
        value_bytes = json.dumps(value).encode("utf-8")
        iv = os.urandom(NONCE_SIZE)

        encryptor = Cipher(algorithms.AES(key), modes.GCM(iv)).encryptor()
        encryptor.authenticate_additional_data(name.encode("utf-8"))
        ciphertext = encryptor.update(value_bytes) + encryptor.finalize()

        return base64.b64encode(iv + ciphertext + encryptor.tag).decode("utf-8")

    def _decrypt_value(self, key: bytes, name: str, value: Any) -> Any:
        """
        Decrypt a single attribute value.

        Args:
            key: The record's AES key
            name: Stored attribute name
            value: Value produced by ``_encrypt_value``

        Returns:
            The decrypted value
        """
        if not isinstance(value, str):
            raise DecryptionError(f"Attribute {name} is not an encrypted value")

        try:
            data = base64.b64decode(value, validate=True)
        except ValueError as e:
            raise DecryptionError(f"Attribute {name} is not valid base64") from e

        if len(data) < NONCE_SIZE + TAG_SIZE:
            raise DecryptionError(f"Attribute {name} is too short to be encrypted")

        iv = data[:NONCE_SIZE]
        ciphertext = data[NONCE_SIZE:-TAG_SIZE]
        tag = data[-TAG_SIZE:]

        decryptor = Cipher(algorithms.AES(key), modes.GCM(iv, tag)).decryptor()
        decryptor.authenticate_additional_data(name.encode("utf-8"))
        try:
            decrypted_bytes = decryptor.update(ciphertext) + decryptor.finalize()
        except InvalidTag as e:
            raise DecryptionError(f"Attribute {name} failed authentication") from e

        return json.loads(decrypted_bytes.decode("utf-8"))
