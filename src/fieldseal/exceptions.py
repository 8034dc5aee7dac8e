"""
Exceptions raised by fieldseal.

``MappingError`` is the only error the transform hooks raise; it always
carries the underlying encryptor failure as its cause.
"""


class MappingError(Exception):
    """A record could not be transformed on its way to or from the store."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class EncryptorError(Exception):
    """Base class for failures inside a record encryptor."""


class SignatureVerificationError(EncryptorError):
    """The record signature is missing or does not match its contents."""


class DecryptionError(EncryptorError):
    """An encrypted attribute could not be decrypted under the given context."""
