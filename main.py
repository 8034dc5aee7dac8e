#!/usr/bin/env python3
"""
fieldseal entry point.

This script starts the policy inspection API, or prints the encryption
policy of a single model, based on command line arguments.
"""

import argparse
import importlib
import json
import logging
import os
import sys

from fieldseal.config import FieldSealConfig
from fieldseal.encryption.classifier import default_cache
from fieldseal.log import configure_logging
from fieldseal.registry.mappings import MappingsRegistry


logger = logging.getLogger("fieldseal.main")


def parse_args() -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="fieldseal policy service")

    # API server options
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind to (default: service.host, 0.0.0.0)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind to (default: service.port, 8000)"
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--mode",
        choices=["DEV", "PROD"],
        help="Override operation mode (DEV or PROD)"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )

    parser.add_argument(
        "--model",
        action="append",
        default=[],
        metavar="MODULE",
        help="Import a module defining sealed models before serving (repeatable)"
    )

    parser.add_argument(
        "--show-policy",
        metavar="MODULE:CLASS",
        help="Print the encryption policy of a model and exit"
    )

    return parser.parse_args()


def load_model(path: str) -> type:
    """
    Import a model class given as ``module:Class``.

    Args:
        path: Module path and class name separated by a colon

    Returns:
        The model class
    """
    module_name, _, class_name = path.partition(":")
    if not class_name:
        raise ValueError(f"Expected MODULE:CLASS, got {path!r}")
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


def show_policy(path: str) -> None:
    """Print the policy of a model as JSON."""
    model_type = load_model(path)
    registry = MappingsRegistry.instance()

    policy = default_cache().get_policy(model_type).to_dict()
    policy["model"] = model_type.__name__
    policy["table_name"] = registry.table_name(model_type)
    policy["context_table_name"] = (
        registry.table_aad_override(model_type) or policy["table_name"]
    )
    print(json.dumps(policy, indent=2))


def main() -> None:
    """Main entry point for fieldseal."""
    args = parse_args()

    if args.mode:
        os.environ["FIELDSEAL_MODE"] = args.mode

    FieldSealConfig.initialize(args.config)
    configure_logging()

    # Look for secrets file in standard location
    secrets_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".secrets", "fieldseal.yaml")
    if os.path.exists(secrets_file):
        FieldSealConfig.load_from_secrets_file(secrets_file)

    if args.show_policy:
        show_policy(args.show_policy)
        return

    for module_name in args.model:
        importlib.import_module(module_name)

    # Imported late so --show-policy does not need the server stack
    from fieldseal.service import start_api

    host = args.host or FieldSealConfig.get("service.host", "0.0.0.0")
    port = args.port or int(FieldSealConfig.get("service.port", 8000))
    logger.info("fieldseal - %s mode", FieldSealConfig.get("mode"))

    try:
        start_api(host=host, port=port, reload=args.reload)
    except KeyboardInterrupt:
        logger.info("Service stopped")
        sys.exit(0)


if __name__ == "__main__":
    main()
