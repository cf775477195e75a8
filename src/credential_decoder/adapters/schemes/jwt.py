from __future__ import annotations

import jwt
from jwt.exceptions import PyJWTError

from .base import SchemeDecoder, compact
from ...domain.constants import JWT_META_CLAIMS, SchemeName
from ...domain.entities import DecodeResult


class JWTDecoder(SchemeDecoder):
    """
    Generic compact JWT, decoded without signature verification.

    Matching parses the protected header, which is the most expensive test
    in the registry; keep this decoder last.

    Registered time claims are copied through in seconds (no x1000).
    """

    scheme = SchemeName.JWT.value

    def is_match(self, input: str) -> bool:
        try:
            return bool(jwt.get_unverified_header(input))
        except (PyJWTError, ValueError, TypeError):
            return False

    def decode(self, input: str) -> DecodeResult:
        self._log.debug("Decoding %s payload (%d chars)", self.scheme, len(input))
        return self._guarded(self._decode_body, input)

    def _decode_body(self, body: str) -> DecodeResult:
        claims = jwt.decode(body, options={"verify_signature": False})
        meta = compact({name: claims.get(name) for name in JWT_META_CLAIMS})
        return DecodeResult(raw=dict(claims), data=dict(claims), meta=meta)
