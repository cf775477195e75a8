from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional

from ..binary import decode_cbor_map, decode_cose_envelope, inflate_if_compressed
from ..codecs import b45decode
from .base import SchemeDecoder, compact, seconds_to_millis
from ...domain.constants import CwtClaim, HCERT_CLAIM_KEY, HCERT_KINDS, SchemeName
from ...domain.entities import DecodeResult
from ...domain.ports import PayloadValidator


def hcert_kind(hcert: Mapping[str, Any]) -> Optional[str]:
    for key, kind in HCERT_KINDS:
        if hcert.get(key) is not None:
            return kind
    return None


class HCERTDecoder(SchemeDecoder):
    """
    EU Digital COVID Certificate.

    According to the HCERT spec, the QR code content SHALL be prefixed by
    the Context Identifier string "HC1:".

    Base45 > Zlib > COSE > CBOR (CWT) > hcert

    https://github.com/ehn-dcc-development/hcert-spec/blob/main/hcert_spec.md
    """

    scheme = SchemeName.HCERT.value
    pattern = re.compile(r"^HC1:?(.+)$")

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        validator: Optional[PayloadValidator] = None,
    ) -> None:
        super().__init__(logger)
        self._validator = validator

    def _decode_body(self, body: str) -> DecodeResult:
        buffer = inflate_if_compressed(b45decode(body))

        # https://github.com/ehn-dcc-development/hcert-spec/blob/main/hcert_spec.md#331-cwt-structure-overview
        claims = decode_cbor_map(decode_cose_envelope(buffer))

        container = claims.get(CwtClaim.HCERT)
        if not isinstance(container, Mapping) or HCERT_CLAIM_KEY not in container:
            raise ValueError(f"missing hcert claim {int(CwtClaim.HCERT)}/{HCERT_CLAIM_KEY}")
        hcert: Dict[str, Any] = container[HCERT_CLAIM_KEY]
        if not isinstance(hcert, Mapping):
            raise ValueError("hcert claim is not a map")

        if self._validator is not None:
            self._validator.validate_or_raise(hcert)

        meta = compact({
            "iss": claims.get(CwtClaim.ISS),  # ISO 3166-1 alpha-2
            "iat": seconds_to_millis(claims.get(CwtClaim.IAT)),
            "exp": seconds_to_millis(claims.get(CwtClaim.EXP)),
            "kind": hcert_kind(hcert),
        })
        return DecodeResult(raw=claims, data=dict(hcert), meta=meta)
