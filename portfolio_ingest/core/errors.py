"""Ingestion exception hierarchy.

Library code raises these typed errors; deciding whether a failure ends the
process is left to ``portfolio_ingest.services.error_policy``.
"""


class IngestError(Exception):
    """Base exception for all ingestion service failures."""


class StorageError(IngestError):
    """Raised when the backing store cannot be opened, read or written."""


class FetchError(IngestError):
    """Raised when the portfolio API cannot be reached or its body read."""


class ConfigError(IngestError):
    """Raised for invalid runtime configuration."""
