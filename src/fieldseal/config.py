"""
Configuration management for fieldseal.

This module provides configuration utilities for controlling the
development/production mode, key derivation and signing settings, logging
and the document store connection.
"""

import logging
import os
import sys
from copy import deepcopy
from pathlib import Path

import yaml


logger = logging.getLogger(__name__)


def _merge(target: dict, source: dict) -> None:
    """Recursively merge ``source`` into ``target``."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


class FieldSealConfig:
    """
    Configuration for fieldseal.

    Values are resolved from the built-in defaults, then an optional YAML
    file, then environment variables.
    """

    # Default configuration values
    _default_config: dict[str, object] = {
        "mode": "DEV",  # DEV or PROD
        "encryption": {
            "algorithm": "AES-GCM",
            "key_derivation": "PBKDF2",
            "key_iterations": 100000,
            "signature_field": "*field_seal_sig*",
            "material_description_field": "*field_seal_desc*",
        },
        "logging": {
            "level": "INFO",
        },
        "database": {
            "url": "http://localhost:8529",
            "database": "fieldseal",
            "username": "root",
            "password": "",
        },
        "service": {
            "host": "0.0.0.0",
            "port": 8000,
        },
    }

    # Instance configuration values, loaded from file or environment
    _config: dict[str, object] = {}

    # Flag indicating if the configuration has been initialized
    _initialized: bool = False

    @classmethod
    def initialize(cls, config_path: str | None = None) -> None:
        """
        Initialize the configuration.

        Args:
            config_path: Optional path to a YAML configuration file
        """
        # Deep copy so nested sections are never shared with the defaults
        cls._config = deepcopy(cls._default_config)

        if config_path:
            cls._load_from_file(config_path)

        cls._load_from_env()

        cls._initialized = True

    @classmethod
    def _load_from_file(cls, config_path: str) -> None:
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file
        """
        path = Path(config_path)
        if not path.exists():
            logger.critical("Configuration file not found: %s", config_path)
            sys.exit(1)

        try:
            with open(path, "r") as f:
                file_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.critical("Error loading configuration file: %s", e)
            sys.exit(1)

        if file_config:
            _merge(cls._config, file_config)

    @classmethod
    def _load_from_env(cls) -> None:
        """Load configuration from environment variables."""
        env_mode = os.environ.get("FIELDSEAL_MODE")
        if env_mode in ("DEV", "PROD"):
            cls._config["mode"] = env_mode

        env_iterations = os.environ.get("FIELDSEAL_KEY_ITERATIONS")
        if env_iterations and env_iterations.isdigit():
            cls._config["encryption"]["key_iterations"] = int(env_iterations)

        env_log_level = os.environ.get("FIELDSEAL_LOG_LEVEL")
        if env_log_level:
            cls._config["logging"]["level"] = env_log_level.upper()

        # Database connection overrides
        for env_name, key in (
            ("FIELDSEAL_DB_URL", "url"),
            ("FIELDSEAL_DB_NAME", "database"),
            ("FIELDSEAL_DB_USERNAME", "username"),
            ("FIELDSEAL_DB_PASSWORD", "password"),
        ):
            value = os.environ.get(env_name)
            if value:
                cls._config["database"][key] = value

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Ensure the configuration is initialized."""
        if not cls._initialized:
            cls.initialize()

    @classmethod
    def get(cls, key: str, default: object = None) -> object:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve, dotted for nested values
            default: Default value to return if key is not found

        Returns:
            The configuration value, or default if not found
        """
        cls._ensure_initialized()

        if "." in key:
            value = cls._config
            for part in key.split("."):
                if isinstance(value, dict) and part in value:
                    value = value[part]
                else:
                    return default
            return value

        return cls._config.get(key, default)

    @classmethod
    def is_dev_mode(cls) -> bool:
        """
        Check if the system is in development mode.

        Returns:
            True if in development mode, False otherwise
        """
        return cls.get("mode") == "DEV"

    @classmethod
    def get_log_level(cls) -> str:
        """Get the configured log level name."""
        return str(cls.get("logging.level", "INFO"))

    @classmethod
    def get_database_url(cls) -> str:
        """
        Get the database URL.

        Returns:
            The URL of the database
        """
        return cls.get("database.url", "http://localhost:8529")

    @classmethod
    def get_database_credentials(cls) -> dict:
        """
        Get the database credentials.

        Returns:
            Dictionary containing database credentials
        """
        return {
            "username": cls.get("database.username", "root"),
            "password": cls.get("database.password", ""),
            "database": cls.get("database.database", "fieldseal"),
        }

    @classmethod
    def load_from_secrets_file(cls, file_path: str) -> None:
        """
        Load configuration from a secrets file.

        Secrets files hold the same sections as the main configuration
        file, typically the encryption key and database password.

        Args:
            file_path: Path to the secrets file
        """
        cls._ensure_initialized()

        path = Path(file_path)
        if not path.exists():
            logger.warning("Secrets file not found: %s", file_path)
            return

        try:
            with open(path, "r") as f:
                secrets = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.critical("Error loading secrets file: %s", e)
            sys.exit(1)

        if secrets:
            _merge(cls._config, secrets)

        logger.info("Loaded configuration from secrets file: %s", file_path)
