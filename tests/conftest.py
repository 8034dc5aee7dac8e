"""
Pytest configuration for fieldseal tests.
"""

import os
from typing import Any, Generator
from unittest.mock import MagicMock

import pytest

from fieldseal.config import FieldSealConfig
from fieldseal.encryption import RecordEncryptor
from fieldseal.registry import MappingsRegistry


SIGNATURE_FIELD = "*sig*"
DESCRIPTION_FIELD = "*desc*"


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Start every test from the default configuration.

    Removes any FIELDSEAL_* environment variables for the duration of the
    test and re-initializes the configuration.
    """
    for key in list(os.environ):
        if key.startswith("FIELDSEAL_"):
            monkeypatch.delenv(key)

    FieldSealConfig.initialize()

    yield

    FieldSealConfig._config = {}
    FieldSealConfig._initialized = False


@pytest.fixture
def dev_mode_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the test in development mode."""
    monkeypatch.setenv("FIELDSEAL_MODE", "DEV")
    FieldSealConfig.initialize()


@pytest.fixture
def prod_mode_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the test in production mode."""
    monkeypatch.setenv("FIELDSEAL_MODE", "PROD")
    FieldSealConfig.initialize()


@pytest.fixture
def registry() -> MappingsRegistry:
    """Provide a registry isolated from the process-wide one."""
    return MappingsRegistry()


@pytest.fixture
def record_encryptor() -> RecordEncryptor:
    """
    Provide a record encryptor with a fixed key.

    Key derivation uses few iterations to keep the tests fast.
    """
    return RecordEncryptor(master_key="test-master-key-for-unit-testing", key_iterations=1000)


@pytest.fixture
def mock_encryptor() -> MagicMock:
    """
    Provide a mock encryptor.

    ``encrypt_record`` adds a fake signature; ``decrypt_record`` strips it.
    """
    encryptor = MagicMock()
    encryptor.signature_field_name = SIGNATURE_FIELD
    encryptor.material_description_field_name = DESCRIPTION_FIELD

    def encrypt(record: dict[str, Any], field_policies: Any, context: Any) -> dict[str, Any]:
        return {**record, SIGNATURE_FIELD: "signature", DESCRIPTION_FIELD: "{}"}

    def decrypt(record: dict[str, Any], field_policies: Any, context: Any) -> dict[str, Any]:
        return {
            k: v for k, v in record.items() if k not in (SIGNATURE_FIELD, DESCRIPTION_FIELD)
        }

    encryptor.encrypt_record.side_effect = encrypt
    encryptor.decrypt_record.side_effect = decrypt
    return encryptor
