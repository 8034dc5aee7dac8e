"""
fieldseal policy service.

This module provides the REST API reporting how registered models are
encrypted and signed.
"""

from .api import app, get_policy, list_policies, resolve_policy, start_api, use_encryptor

__all__ = ["app", "get_policy", "list_policies", "resolve_policy", "start_api", "use_encryptor"]
