from __future__ import annotations

import re

from ..binary import decode_cbor, decode_embedded_cbor
from ..codecs import b64url_decode
from .base import SchemeDecoder, compact
from ...domain.constants import CoseKeyParam, DeviceEngagementKey, SchemeName
from ...domain.entities import DecodeResult
from ...domain.value_objects import DeviceKey


class MDocDeviceEngagementDecoder(SchemeDecoder):
    """
    ISO/IEC 18013-5 device engagement QR code.

    Base64URL (RFC 4648) > CBOR > DeviceEngagement

        DeviceEngagement = {
          0: tstr,                       ; version
          1: [cipherSuite, #6.24(bstr)], ; security, embedded COSE_Key
          2: [* DeviceRetrievalMethod],  ; 1: nfc, 2: ble, 3: wifiAware
        }

    There is no subject in a device engagement, so `data` is always empty.
    """

    scheme = SchemeName.MDOC.value
    pattern = re.compile(r"^mdoc:?:?(.+)$")

    def _decode_body(self, body: str) -> DecodeResult:
        engagement = decode_cbor(b64url_decode(body))
        if not isinstance(engagement, dict):
            raise ValueError("Device engagement is not a CBOR map")

        security = engagement[DeviceEngagementKey.SECURITY]
        cipher_suite, encoded_device_key = security[0], security[1]

        device_key = decode_embedded_cbor(encoded_device_key)
        if not isinstance(device_key, dict):
            raise ValueError("Device key is not a COSE_Key map")

        jwk = DeviceKey.from_cose(
            device_key.get(CoseKeyParam.EC2_CRV),
            device_key[CoseKeyParam.EC2_X],
            device_key[CoseKeyParam.EC2_Y],
        ).to_jwk()

        meta = compact({
            "version": engagement.get(DeviceEngagementKey.VERSION),
            "security": {
                "keyType": device_key.get(CoseKeyParam.KTY),
                "cipherSuite": cipher_suite,
                "deviceKey": jwk,
            },
            "deviceRetrievalMethods": engagement.get(
                DeviceEngagementKey.DEVICE_RETRIEVAL_METHODS
            ),
        })
        return DecodeResult(raw=dict(engagement), data={}, meta=meta)
