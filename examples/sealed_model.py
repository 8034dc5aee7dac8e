"""
Example of sealing a model without a database.

This example shows which attributes end up encrypted, which are only
signed, and how the record is restored on load.
"""

import json
import os
from typing import Optional

from fieldseal import (
    AttributeEncryptor,
    FieldSealConfig,
    RecordEncryptor,
    SealedField,
    SealedModel,
    TransformParameters,
    handle_unknown_attributes,
)


# Define a sealed model with keys and exempt fields
@handle_unknown_attributes
class Book(SealedModel):
    """
    Book model with a mix of protected and exempt fields.
    """

    table_name = "books"

    # Keys are signed but stay readable for lookups
    id: str = SealedField(hash_key=True)
    revision: int = SealedField(0, version=True)

    # Encrypted and signed
    title: str
    authors: list[str] = []

    # Signed, stored in plaintext
    isbn: Optional[str] = SealedField(None, do_not_encrypt=True)

    # Neither encrypted nor signed
    note: Optional[str] = SealedField(None, do_not_touch=True)


def main() -> None:
    """Example usage of the attribute encryptor."""
    os.environ["FIELDSEAL_MODE"] = "DEV"
    os.environ["FIELDSEAL_ENCRYPTION_KEY"] = "example-master-key-for-demonstration"
    FieldSealConfig.initialize()

    encryptor = AttributeEncryptor(RecordEncryptor())

    book = Book(id="b-1", title="Dune", authors=["Frank Herbert"], isbn="978-0441013593", note="shelf 3")

    print("\nPolicy:")
    print(json.dumps(encryptor.get_policy(Book).to_dict(), indent=2))

    params = TransformParameters(
        model_type=Book,
        table_name=Book.table_name,
        hash_key_name="id",
        range_key_name=None,
        attribute_values=book.model_dump(mode="json"),
    )
    stored = encryptor.encode(params)

    print("\nStored record:")
    print(json.dumps(stored, indent=2))

    params.attribute_values = stored
    restored = Book.model_validate(encryptor.decode(params))

    print("\nRestored model:")
    print(restored)


if __name__ == "__main__":
    main()
