from enum import Enum, IntEnum


class SchemeName(str, Enum):
    MDOC = "mdoc"
    HCERT = "hcert"
    NZCP = "nzcp"
    JWT = "jwt"


# Most specific prefix first; JWT needs a header parse so it always goes last.
DEFAULT_SCHEME_ORDER = (
    SchemeName.MDOC,
    SchemeName.HCERT,
    SchemeName.NZCP,
    SchemeName.JWT,
)


class CwtClaim(IntEnum):
    """CBOR Web Token claim keys (RFC 8392) plus the HCERT container."""
    ISS = 1
    SUB = 2
    AUD = 3
    EXP = 4
    NBF = 5
    IAT = 6
    CTI = 7
    HCERT = -260


class CoseKeyParam(IntEnum):
    KTY = 1
    EC2_CRV = -1
    EC2_X = -2
    EC2_Y = -3


class DeviceEngagementKey(IntEnum):
    VERSION = 0
    SECURITY = 1
    DEVICE_RETRIEVAL_METHODS = 2


class ValidationMode(str, Enum):
    OFF = "off"
    LENIENT = "lenient"
    STRICT = "strict"


# https://www.iana.org/assignments/cose/cose.xhtml#elliptic-curves
EC_CURVES = {
    1: "P-256",
    2: "P-384",
}

# Checked in this order on the hcert object; first present wins.
HCERT_KINDS = (
    ("v", "Vaccination"),
    ("t", "Test"),
    ("r", "Recovery"),
)

HCERT_CLAIM_KEY = 1

ZLIB_MAGIC = 0x78

JWT_META_CLAIMS = ("iss", "sub", "aud", "jti", "nbf", "exp", "iat")
