"""
Error types shared by the store adapters and the server actions.
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Invalid user input. The message is shown to the user as is."""


class ConfigurationError(RuntimeError):
    """A required setting (bucket, credentials, API key) is missing."""


class DocumentNotFound(LookupError):
    """An update targeted a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Document {collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class BlobNotFound(LookupError):
    """A blob operation targeted a path that does not exist."""


class IndexRequired(RuntimeError):
    """
    The store rejected a filtered + ordered query because the composite index
    has not been created yet. It must be provisioned out-of-band.
    """
