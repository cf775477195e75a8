from __future__ import annotations

import re
from typing import Any, Mapping

from ..binary import decode_cbor_map, decode_cose_envelope, inflate_if_compressed, unwrap_cbor_tags
from ..codecs import b32decode
from .base import SchemeDecoder, compact, seconds_to_millis
from ...domain.constants import CwtClaim, SchemeName
from ...domain.entities import DecodeResult
from ...domain.value_objects import CwtId


class NZCPDecoder(SchemeDecoder):
    """
    New Zealand COVID Pass.

    According to the NZCP spec, the QR code content SHALL be prefixed by
    the Context Identifier string "NZCP:/"; only version 1 is supported.

    Base32 > Zlib > COSE > CBOR (CWT) > W3C verifiable credential

    https://nzcp.covid19.health.nz
    """

    scheme = SchemeName.NZCP.value
    pattern = re.compile(r"^NZCP:/1/(.+)$")

    def _decode_body(self, body: str) -> DecodeResult:
        buffer = inflate_if_compressed(b32decode(body))
        claims = decode_cbor_map(decode_cose_envelope(buffer))

        # https://w3c.github.io/vc-data-model/
        vc: Any = claims.get("vc")
        if not isinstance(vc, Mapping):
            raise ValueError("missing verifiable credential claim 'vc'")

        # some issuers wrap the CWT ID in a typed-array tag (64)
        cti_bytes = unwrap_cbor_tags(claims.get(CwtClaim.CTI))
        if cti_bytes is not None and not isinstance(cti_bytes, (bytes, bytearray)):
            raise ValueError(f"CWT ID must be a byte string, got {type(cti_bytes).__name__}")
        cti = CwtId(bytes(cti_bytes)) if cti_bytes is not None else None

        meta = compact({
            "iss": claims.get(CwtClaim.ISS),
            "iat": seconds_to_millis(claims.get(CwtClaim.NBF)),  # NZCP carries issuance in nbf (5)
            "exp": seconds_to_millis(claims.get(CwtClaim.EXP)),
            "cti": str(cti) if cti is not None else None,
            "jti": cti.urn if cti is not None else None,
        })
        return DecodeResult(raw=claims, data=dict(vc), meta=meta)
