"""
Text-to-bytes alphabets used by the barcode schemes.

- Base45    (RFC 9285)          HCERT
- Base32    (RFC 4648 sec. 6)   NZCP
- Base64URL (RFC 4648 sec. 5)   mdoc / JWT
"""

from __future__ import annotations

import base64

import base45


def b45decode(text: str) -> bytes:
    """Raises ValueError on characters outside the Base45 alphabet."""
    return base45.b45decode(text)


def b32decode(text: str) -> bytes:
    # Barcodes drop the trailing "=" padding.
    padded = text + "=" * (-len(text) % 8)
    return base64.b32decode(padded)


def b64url_decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)
