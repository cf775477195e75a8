from __future__ import annotations

import base64
import datetime
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from cbor2 import CBORTag


def json_safe(obj: Any) -> Any:
    """
    Convert a decoded CBOR/JWT structure into something `json.dumps` accepts.

    - bytes       -> {"_b64": <base64url, unpadded>}
    - CBORTag     -> {"tag": n, "value": ...}
    - date/time   -> ISO-8601 string
    - map keys    -> str
    """
    if isinstance(obj, (bytes, bytearray)):
        return {"_b64": base64.urlsafe_b64encode(bytes(obj)).decode("ascii").rstrip("=")}
    if isinstance(obj, CBORTag):
        return {"tag": obj.tag, "value": json_safe(obj.value)}
    if isinstance(obj, Mapping):
        return {str(k): json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(v) for v in obj]
    if isinstance(obj, (datetime.datetime, datetime.date)):
        return obj.isoformat()
    if isinstance(obj, uuid.UUID):
        return str(obj)
    return obj


@dataclass(slots=True)
class DecodeResult:
    """
    Outcome of decoding a single barcode.

    - raw:  full structural decode, keyed by claim key (int or str)
    - data: the credential subject / body
    - meta: issuer, validity window (ms since epoch for CWT schemes) and
            other pass-relevant identifiers
    """
    raw: Dict[Any, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "DecodeResult":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (self.raw or self.data or self.meta)

    @property
    def kind(self) -> Optional[str]:
        return self.meta.get("kind")

    @property
    def issuer(self) -> Optional[str]:
        return self.meta.get("iss")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw": json_safe(self.raw),
            "data": json_safe(self.data),
            "meta": json_safe(self.meta),
        }
