"""Errors raised by the record store."""


class RecordStoreError(Exception):
    """Base class for record store failures."""


class FileReadError(RecordStoreError, OSError):
    """The uploaded file could not be read to completion."""


class EncryptionError(RecordStoreError):
    """A field could not be encrypted or decrypted.

    Wrong keys and corrupted ciphertext are reported the same way.
    """


class StorageUnavailable(RecordStoreError):
    """The database could not be reached or a transaction failed to commit."""


class StorageTimeout(StorageUnavailable):
    """A storage call did not complete within the configured timeout."""


class RecordNotFound(RecordStoreError):
    """No record with the requested id exists for this user."""

    def __init__(self, collection: str, record_id):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record {record_id} not found")


class RecordConflict(RecordStoreError):
    """A write violated a uniqueness constraint."""
