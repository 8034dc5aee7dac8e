"""
ArangoDB client for fieldseal.

This module stores sealed records in ArangoDB using the python-arango
driver. Each table is a collection; each record is one document keyed by
the record's primary key.
"""

import logging
import sys
from datetime import datetime, timezone

from arango import ArangoClient
from arango.exceptions import ArangoError, CollectionCreateError

from ..config import FieldSealConfig


logger = logging.getLogger(__name__)


class ArangoDBClient:
    """
    ArangoDB record store.

    Records are stored under the ``record`` attribute of their document so
    that their attribute names never clash with ArangoDB system attributes.
    """

    def __init__(self, client: ArangoClient | None = None) -> None:
        """
        Initialize the ArangoDB client.

        Args:
            client: Optional preconfigured driver client
        """
        db_config = FieldSealConfig.get_database_credentials()
        db_url = FieldSealConfig.get_database_url()

        # Collections known to exist
        self._tables: set[str] = set()

        try:
            self.client = client or ArangoClient(hosts=db_url)
            self.db = self.client.db(
                name=db_config["database"],
                username=db_config["username"],
                password=db_config["password"],
                verify=True,
            )
        except ArangoError as e:
            logger.critical("Failed to connect to ArangoDB at %s: %s", db_url, e)
            sys.exit(1)

    def ensure_table(self, table: str) -> None:
        """
        Ensure the collection for a table exists, creating it if needed.

        Args:
            table: Table name
        """
        if table in self._tables:
            return

        if not self.db.has_collection(table):
            try:
                logger.info("Creating collection: %s", table)
                self.db.create_collection(table)
            except CollectionCreateError as e:
                # Lost a creation race with another writer
                if not self.db.has_collection(table):
                    raise
                logger.debug("Collection %s already created: %s", table, e)

        self._tables.add(table)

    def put(self, table: str, key: str, record: dict[str, object]) -> None:
        """
        Store a record, replacing any record with the same key.

        Args:
            table: Table name
            key: Document key
            record: The record to store
        """
        self.ensure_table(table)

        document = {
            "_key": key,
            "stored_at": datetime.now(timezone.utc).isoformat(),
            "record": record,
        }
        self.db.collection(table).insert(document, overwrite=True)

    def get(self, table: str, key: str) -> dict[str, object]:
        """
        Get a stored record.

        Args:
            table: Table name
            key: Document key

        Returns:
            The stored record

        Raises:
            ValueError: If no record is stored under the key
        """
        self.ensure_table(table)

        document = self.db.collection(table).get(key)
        if document is None:
            raise ValueError(f"Document {key} not found in {table}")

        return document["record"]

    def delete(self, table: str, key: str) -> None:
        """
        Delete a stored record. Deleting a missing record is not an error.

        Args:
            table: Table name
            key: Document key
        """
        self.ensure_table(table)
        self.db.collection(table).delete(key, ignore_missing=True)

    def close(self) -> None:
        """Close the database connection."""
        self.client.close()
