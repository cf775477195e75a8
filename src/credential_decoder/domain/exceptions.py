from __future__ import annotations

from typing import Iterable, List


class DecodeError(Exception):
    """Base class for barcode decoding failures."""
    pass


class InvalidPayloadError(DecodeError):
    """Raised when a decoder matched the input but could not decode it."""

    def __init__(self, scheme: str, message: str) -> None:
        super().__init__(f"Invalid {scheme} payload: {message}")
        self.scheme = scheme


class SchemaValidationError(InvalidPayloadError):
    """Raised when a decoded payload violates its published JSON schema."""

    def __init__(self, scheme: str, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__(scheme, f"schema violations: {self.errors}")


class RemoteFetchError(DecodeError):
    """Raised when a schema or value-set document cannot be downloaded."""

    def __init__(self, uri: str, message: str) -> None:
        super().__init__(f"Failed to fetch {uri}: {message}")
        self.uri = uri
