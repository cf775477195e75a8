# Inverse transforms used to build barcode fixtures.

import base64
import zlib

import base45
import cbor2
from cbor2 import CBORTag

COSE_SIGN1_TAG = 18


def cose_sign1(payload: bytes, tagged: bool = True) -> bytes:
    envelope = [cbor2.dumps({1: -7}), {4: b"kid-1"}, payload, b"\x00" * 64]
    return cbor2.dumps(CBORTag(COSE_SIGN1_TAG, envelope) if tagged else envelope)


def b45encode(data: bytes) -> str:
    encoded = base45.b45encode(data)
    return encoded.decode("ascii") if isinstance(encoded, bytes) else encoded


def hcert_barcode(claims: dict, *, compress: bool = True, prefix: str = "HC1:") -> str:
    data = cose_sign1(cbor2.dumps(claims))
    if compress:
        data = zlib.compress(data, 9)
    return prefix + b45encode(data)


def hcert_claims(hcert: dict, *, iss="AT", iat=1620000000, exp=1650000000) -> dict:
    return {1: iss, 4: exp, 6: iat, -260: {1: hcert}}


def nzcp_barcode(claims: dict, *, compress: bool = False) -> str:
    data = cose_sign1(cbor2.dumps(claims))
    if compress:
        data = zlib.compress(data)
    return "NZCP:/1/" + base64.b32encode(data).decode("ascii").rstrip("=")


def mdoc_barcode(engagement: dict, prefix: str = "mdoc:") -> str:
    encoded = base64.urlsafe_b64encode(cbor2.dumps(engagement)).decode("ascii").rstrip("=")
    return prefix + encoded


def device_engagement(curve: int = 1, x: bytes = b"\x01" * 32, y: bytes = b"\x02" * 32,
                      embed_tag: bool = True) -> dict:
    cose_key = cbor2.dumps({1: 2, -1: curve, -2: x, -3: y})
    return {
        0: "1.0",
        1: [1, CBORTag(24, cose_key) if embed_tag else cose_key],
        2: [[2, 1, {0: False, 1: True}]],
    }


VACCINATION = {
    "ver": "1.3.0",
    "nam": {"fn": "Musterfrau", "fnt": "MUSTERFRAU", "gn": "Gabriele", "gnt": "GABRIELE"},
    "dob": "1998-02-26",
    "v": [{
        "tg": "840539006",
        "vp": "1119349007",
        "mp": "EU/1/20/1528",
        "ma": "ORG-100030215",
        "dn": 1,
        "sd": 2,
        "dt": "2021-02-18",
        "co": "AT",
        "is": "Ministry of Health, Austria",
        "ci": "URN:UVCI:01:AT:10807843F94AEE0EE5093FBC254BD813#B",
    }],
}

TEST_RESULT = {
    "ver": "1.3.0",
    "nam": {"fn": "Musterfrau", "fnt": "MUSTERFRAU"},
    "dob": "1998-02-26",
    "t": [{"tg": "840539006", "tt": "LP6464-4", "tr": "260415000", "co": "AT"}],
}

RECOVERY = {
    "ver": "1.3.0",
    "nam": {"fn": "Musterfrau", "fnt": "MUSTERFRAU"},
    "dob": "1998-02-26",
    "r": [{"tg": "840539006", "fr": "2021-01-10", "co": "AT"}],
}

NZCP_CTI = bytes.fromhex("60a4f54d4e304332be33ad78b1eafa4b")


def nzcp_claims(*, cti: bytes = NZCP_CTI) -> dict:
    return {
        1: "did:web:nzcp.covid19.health.nz",
        5: 1635883530,
        4: 1951416330,
        7: cti,
        "vc": {
            "@context": [
                "https://www.w3.org/2018/credentials/v1",
                "https://nzcp.covid19.health.nz/contexts/v1",
            ],
            "version": "1.0.0",
            "type": ["VerifiableCredential", "PublicCovidPass"],
            "credentialSubject": {
                "givenName": "Jack",
                "familyName": "Sparrow",
                "dob": "1960-04-16",
            },
        },
    }
