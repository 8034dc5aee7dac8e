"""
Database integration for fieldseal.

This module provides the document store sealed records are kept in, with
current support for ArangoDB.
"""

from .arangodb import ArangoDBClient

__all__ = ["ArangoDBClient"]
