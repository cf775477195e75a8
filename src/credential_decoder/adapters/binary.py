"""
Binary stages shared by the CBOR-based schemes:

    bytes -> inflate_if_compressed -> decode_cose_envelope -> decode_cbor_map
"""

from __future__ import annotations

import logging
import zlib
from typing import Any, Dict

import cbor2
from cbor2 import CBORTag

from ..domain.constants import ZLIB_MAGIC

log = logging.getLogger(__name__)

# RFC 8949 sec. 3.4.5.1, "Encoded CBOR data item"
EMBEDDED_CBOR_TAG = 24


def inflate_if_compressed(buffer: bytes) -> bytes:
    """
    Inflate `buffer` when it starts with a zlib header, else return it as is.

    Zlib magic headers:
      78 01 - no compression / low
      78 9C - default compression
      78 DA - best compression
    """
    if buffer and buffer[0] == ZLIB_MAGIC:
        inflated = zlib.decompress(buffer)
        log.debug("Inflated %d bytes to %d", len(buffer), len(inflated))
        return inflated
    return bytes(buffer)


def unwrap_cbor_tags(value: Any) -> Any:
    """Strip CBOR tags (e.g. tag 18, COSE_Sign1) down to the tagged item."""
    while isinstance(value, CBORTag):
        value = value.value
    return value


def decode_cbor(data: bytes) -> Any:
    return cbor2.loads(data)


def decode_cose_envelope(data: bytes) -> bytes:
    """
    Return the payload bytes of a COSE_Sign1-shaped envelope.

    COSE_Sign1 = [protected, unprotected, payload, signature]; the payload is
    always at index 2.
    """
    envelope = unwrap_cbor_tags(cbor2.loads(data))
    if not isinstance(envelope, (list, tuple)) or len(envelope) < 3:
        raise ValueError(f"Not a COSE envelope: {type(envelope).__name__}")

    payload = envelope[2]
    if not isinstance(payload, (bytes, bytearray)):
        raise ValueError("COSE payload is detached or not a byte string")
    return bytes(payload)


def decode_cbor_map(data: bytes) -> Dict[Any, Any]:
    decoded = cbor2.loads(data)
    if not isinstance(decoded, dict):
        raise ValueError(f"Expected a CBOR map, got {type(decoded).__name__}")
    return dict(decoded)


def decode_embedded_cbor(item: Any) -> Any:
    """Decode a tag-24 embedded item, or a bare byte string holding CBOR."""
    if isinstance(item, CBORTag):
        if item.tag != EMBEDDED_CBOR_TAG:
            raise ValueError(f"Unexpected CBOR tag {item.tag}")
        item = item.value
    if not isinstance(item, (bytes, bytearray)):
        raise ValueError("Embedded CBOR item is not a byte string")
    return cbor2.loads(item)
