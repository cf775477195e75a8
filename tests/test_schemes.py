# tests/test_schemes.py
import base64
import uuid

import cbor2
import jwt
import pytest

from credential_decoder.adapters.schemes.hcert import HCERTDecoder, hcert_kind
from credential_decoder.adapters.schemes.jwt import JWTDecoder
from credential_decoder.adapters.schemes.mdoc import MDocDeviceEngagementDecoder
from credential_decoder.adapters.schemes.nzcp import NZCPDecoder
from credential_decoder.domain.exceptions import InvalidPayloadError

from builders import (
    NZCP_CTI,
    RECOVERY,
    TEST_RESULT,
    VACCINATION,
    b45encode,
    device_engagement,
    hcert_barcode,
    hcert_claims,
    mdoc_barcode,
    nzcp_barcode,
    nzcp_claims,
)
from samples import HCERT_SAMPLE, NZCP_MOH_EXAMPLE, NZCP_SAMPLE


# --- HCERT -----------------------------------------------------------------


def test_hcert_match():
    decoder = HCERTDecoder()

    assert decoder.is_match("HC1:NCFOXN")
    assert decoder.is_match("HC1NCFOXN")
    assert not decoder.is_match("NZCP:/1/ABC")
    assert not decoder.is_match("hc1:NCFOXN")


def test_hcert_vaccination():
    result = HCERTDecoder().decode(hcert_barcode(hcert_claims(VACCINATION)))

    assert result.data == VACCINATION
    assert result.meta == {
        "iss": "AT",
        "iat": 1620000000 * 1000,
        "exp": 1650000000 * 1000,
        "kind": "Vaccination",
    }
    assert result.raw[1] == "AT"
    assert result.raw[-260] == {1: VACCINATION}


@pytest.mark.parametrize(
    "hcert, kind",
    [(VACCINATION, "Vaccination"), (TEST_RESULT, "Test"), (RECOVERY, "Recovery")],
)
def test_hcert_kind(hcert, kind):
    result = HCERTDecoder().decode(hcert_barcode(hcert_claims(hcert)))
    assert result.kind == kind


def test_hcert_kind_priority():
    assert hcert_kind({"v": [], "t": [{}], "r": [{}]}) == "Vaccination"
    assert hcert_kind({"t": [{}], "r": [{}]}) == "Test"
    assert hcert_kind({"v": None, "r": [{}]}) == "Recovery"
    assert hcert_kind({"ver": "1.3.0"}) is None


def test_hcert_without_compression_or_colon():
    barcode = hcert_barcode(hcert_claims(TEST_RESULT), compress=False, prefix="HC1")
    result = HCERTDecoder().decode(barcode)

    assert result.data == TEST_RESULT
    assert result.meta["iat"] == 1620000000000


def test_hcert_missing_optional_claims_are_omitted():
    result = HCERTDecoder().decode(hcert_barcode({-260: {1: RECOVERY}}))
    assert result.meta == {"kind": "Recovery"}


def test_hcert_invalid_base45_character():
    with pytest.raises(InvalidPayloadError) as excinfo:
        HCERTDecoder().decode("HC1:NCFOXN~~~")

    assert excinfo.value.scheme == "hcert"
    assert "Invalid hcert payload" in str(excinfo.value)


def test_hcert_missing_container():
    with pytest.raises(InvalidPayloadError, match="-260"):
        HCERTDecoder().decode(hcert_barcode({1: "AT", 4: 1, 6: 1}))


def test_hcert_corrupt_cbor():
    with pytest.raises(InvalidPayloadError):
        HCERTDecoder().decode("HC1:" + b45encode(b"\xd2\x84\xff"))


def test_hcert_published_sample():
    result = HCERTDecoder().decode(HCERT_SAMPLE)

    assert result.meta == {
        "iss": "NZ",
        "iat": 1633980511000,
        "exp": 1672531200000,
        "kind": "Vaccination",
    }
    assert result.data["ver"] == "1.3.0"
    assert result.data["nam"]["gn"] == "Jon"
    assert result.data["v"][0]["tg"] == "840539006"


# --- NZCP ------------------------------------------------------------------


def test_nzcp_match():
    decoder = NZCPDecoder()

    assert decoder.is_match("NZCP:/1/2KCEVIQ")
    assert not decoder.is_match("NZCP:/2/2KCEVIQ")
    assert not decoder.is_match("HC1:2KCEVIQ")


def test_nzcp_decode():
    claims = nzcp_claims()
    result = NZCPDecoder().decode(nzcp_barcode(claims))

    assert result.data == claims["vc"]
    assert result.data["credentialSubject"]["givenName"] == "Jack"
    assert result.meta == {
        "iss": "did:web:nzcp.covid19.health.nz",
        "iat": 1635883530000,
        "exp": 1951416330000,
        "cti": "60a4f54d-4e30-4332-be33-ad78b1eafa4b",
        "jti": "urn:uuid:60a4f54d-4e30-4332-be33-ad78b1eafa4b",
    }


def test_nzcp_compressed():
    result = NZCPDecoder().decode(nzcp_barcode(nzcp_claims(), compress=True))
    assert result.meta["cti"] == str(uuid.UUID(bytes=NZCP_CTI))


def test_nzcp_jti_is_urn_of_cti():
    result = NZCPDecoder().decode(NZCP_SAMPLE)

    assert result.meta["jti"] == "urn:uuid:" + result.meta["cti"]
    assert uuid.UUID(result.meta["cti"])
    assert result.meta["cti"] == "931b0161-0324-4f01-a57a-4e249d0b7aaf"


def test_nzcp_published_sample():
    result = NZCPDecoder().decode(NZCP_SAMPLE)

    subject = result.data["credentialSubject"]
    assert subject == {"givenName": "Hattie", "familyName": "Gilbert", "dob": "1988-01-31"}
    assert result.data["type"] == ["VerifiableCredential", "PublicCovidPass"]
    assert result.meta["iss"] == "did:web:xxx"
    assert result.meta["iat"] == 1633985048000
    assert result.meta["exp"] == 1649713448000


def test_nzcp_moh_worked_example():
    result = NZCPDecoder().decode(NZCP_MOH_EXAMPLE)

    assert result.data["credentialSubject"] == {
        "givenName": "Jack",
        "familyName": "Sparrow",
        "dob": "1960-04-16",
    }
    assert result.data["version"] == "1.0.0"
    assert result.meta == {
        "iss": "did:web:nzcp.covid19.health.nz",
        "iat": 1635883530000,
        "exp": 1951416330000,
        "cti": "60a4f54d-4e30-4332-be33-ad78b1eafa4b",
        "jti": "urn:uuid:60a4f54d-4e30-4332-be33-ad78b1eafa4b",
    }


def test_nzcp_bad_cti_length():
    with pytest.raises(InvalidPayloadError, match="16 bytes"):
        NZCPDecoder().decode(nzcp_barcode(nzcp_claims(cti=b"\x01\x02")))


@pytest.mark.parametrize("cti", [16, "60a4f54d4e304332be33ad78b1eafa4b", [1, 2]])
def test_nzcp_cti_must_be_bytes(cti):
    with pytest.raises(InvalidPayloadError, match="byte string"):
        NZCPDecoder().decode(nzcp_barcode(nzcp_claims(cti=cti)))


def test_nzcp_missing_vc():
    claims = nzcp_claims()
    del claims["vc"]

    with pytest.raises(InvalidPayloadError) as excinfo:
        NZCPDecoder().decode(nzcp_barcode(claims))
    assert excinfo.value.scheme == "nzcp"


def test_nzcp_invalid_base32():
    with pytest.raises(InvalidPayloadError):
        NZCPDecoder().decode("NZCP:/1/0189")


# --- mdoc ------------------------------------------------------------------


def test_mdoc_match():
    decoder = MDocDeviceEngagementDecoder()

    assert decoder.is_match("mdoc:owBjMS4w")
    assert decoder.is_match("mdoc::owBjMS4w")
    assert not decoder.is_match("HC1:owBjMS4w")


def test_mdoc_device_engagement():
    x, y = b"\x01" * 32, b"\x02" * 32
    result = MDocDeviceEngagementDecoder().decode(mdoc_barcode(device_engagement(1, x, y)))

    assert result.data == {}
    assert result.meta["version"] == "1.0"
    assert result.meta["security"] == {
        "keyType": 2,
        "cipherSuite": 1,
        "deviceKey": {
            "alg": "EC",
            "crv": "P-256",
            "x": base64.b64encode(x).decode("ascii"),
            "y": base64.b64encode(y).decode("ascii"),
        },
    }
    assert result.meta["deviceRetrievalMethods"] == [[2, 1, {0: False, 1: True}]]
    assert result.raw[0] == "1.0"


def test_mdoc_p384_and_bare_device_key_bytes():
    barcode = mdoc_barcode(device_engagement(curve=2, embed_tag=False), prefix="mdoc::")
    result = MDocDeviceEngagementDecoder().decode(barcode)

    assert result.meta["security"]["deviceKey"]["crv"] == "P-384"


def test_mdoc_unknown_curve_is_left_unresolved():
    result = MDocDeviceEngagementDecoder().decode(mdoc_barcode(device_engagement(curve=3)))

    assert "crv" not in result.meta["security"]["deviceKey"]


def test_mdoc_missing_security():
    with pytest.raises(InvalidPayloadError) as excinfo:
        MDocDeviceEngagementDecoder().decode(mdoc_barcode({0: "1.0"}))
    assert excinfo.value.scheme == "mdoc"


def test_mdoc_not_cbor_map():
    encoded = base64.urlsafe_b64encode(cbor2.dumps([1, 2])).decode("ascii").rstrip("=")
    with pytest.raises(InvalidPayloadError):
        MDocDeviceEngagementDecoder().decode("mdoc:" + encoded)


# --- JWT -------------------------------------------------------------------


def _token(claims, key="test-signing-secret-with-32-plus-bytes"):
    return jwt.encode(claims, key, algorithm="HS256")


def test_jwt_match():
    decoder = JWTDecoder()

    assert decoder.is_match(_token({"sub": "a"}))
    assert not decoder.is_match("hello")
    assert not decoder.is_match("not.a.jwt")
    assert not decoder.is_match("")


def test_jwt_meta_copied_in_seconds():
    claims = {
        "iss": "https://issuer.example",
        "sub": "user-1",
        "aud": "wallet",
        "jti": "abc",
        "nbf": 1600000000,
        "iat": 1600000000,
        "exp": 1600003600,
        "name": "Jane",
    }
    result = JWTDecoder().decode(_token(claims))

    assert result.data == claims
    assert result.raw == claims
    assert result.meta == {k: claims[k] for k in ("iss", "sub", "aud", "jti", "nbf", "exp", "iat")}


def test_jwt_signature_not_verified():
    result = JWTDecoder().decode(_token({"sub": "x", "exp": 1}, key="another-signing-secret-with-32-plus-bytes"))
    assert result.meta == {"sub": "x", "exp": 1}


def _b64json(text):
    return base64.urlsafe_b64encode(text.encode()).decode().rstrip("=")


def test_jwt_rejected_header_is_not_a_match():
    # PyJWT refuses a non-string key id while parsing the header
    header = _b64json('{"alg":"none","kid":123}')
    token = header + "." + _b64json('{"sub":"x"}') + "."
    decoder = JWTDecoder()

    assert not decoder.is_match(token)
    with pytest.raises(InvalidPayloadError) as excinfo:
        decoder.decode(token)
    assert excinfo.value.scheme == "jwt"


def test_jwt_bad_payload():
    header = base64.urlsafe_b64encode(b'{"alg":"none","typ":"JWT"}').decode().rstrip("=")
    with pytest.raises(InvalidPayloadError) as excinfo:
        JWTDecoder().decode(f"{header}.%%%.")
    assert excinfo.value.scheme == "jwt"


def test_decoders_do_not_share_state():
    decoder = HCERTDecoder()
    barcode = hcert_barcode(hcert_claims(VACCINATION))

    first = decoder.decode(barcode)
    first.data["v"][0]["tg"] = "mutated"
    second = decoder.decode(barcode)

    assert second.data == VACCINATION
