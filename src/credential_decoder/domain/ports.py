from __future__ import annotations

from typing import Any, Mapping, Protocol

from .entities import DecodeResult


class Decoder(Protocol):
    """
    Port for one barcode scheme.

    Implementations live in the adapters layer (mdoc, HCERT, NZCP, JWT).
    """

    def is_match(self, input: str) -> bool:
        """
        Cheap syntactic test (prefix / header shape). Must not decode.
        """
        ...

    def decode(self, input: str) -> DecodeResult:
        """
        Decode a matched input.

        Raises:
          - InvalidPayloadError (or a subclass) when any stage fails
        """
        ...


class PayloadValidator(Protocol):
    """
    Port for optional semantic validation of a decoded payload.
    """

    def validate_or_raise(self, record: Mapping[str, Any]) -> Mapping[str, Any]:
        ...
