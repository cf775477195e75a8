# src/credential_decoder/domain/value_objects.py

from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .constants import EC_CURVES


# --- Key material --------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DeviceKey:
    """
    EC public key from an mdoc device engagement, in JWK shape.

    Curves outside EC_CURVES stay unresolved (`crv` is None) rather than
    being guessed.
    """
    x: bytes
    y: bytes
    crv: Optional[str] = None
    alg: str = "EC"

    @classmethod
    def from_cose(cls, curve_id: Any, x: bytes, y: bytes) -> "DeviceKey":
        return cls(x=bytes(x), y=bytes(y), crv=EC_CURVES.get(curve_id))

    def to_jwk(self) -> Dict[str, str]:
        jwk = {
            "alg": self.alg,
            "crv": self.crv,
            "x": base64.b64encode(self.x).decode("ascii"),
            "y": base64.b64encode(self.y).decode("ascii"),
        }
        return {k: v for k, v in jwk.items() if v is not None}


# --- Token identifiers ---------------------------------------------------


@dataclass(frozen=True, slots=True)
class CwtId:
    """
    16-byte CWT ID (claim 7), rendered with the standard UUID layout.
    """
    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != 16:
            raise ValueError(f"CWT ID must be 16 bytes, got {len(self.value)}")

    def __str__(self) -> str:
        return str(uuid.UUID(bytes=bytes(self.value)))

    @property
    def urn(self) -> str:
        return f"urn:uuid:{self}"
