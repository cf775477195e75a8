"""
credential_decoder

Pluggable decoders that turn verifiable-credential barcodes (ISO 18013-5
mdoc engagement, EU DCC / HCERT, NZ COVID Pass, generic JWT) into a
structured DecodeResult for wallet-pass generation.
"""

__version__ = "0.1.0"

from .domain.entities import DecodeResult
from .domain.constants import SchemeName, ValidationMode, DEFAULT_SCHEME_ORDER
from .domain.exceptions import (
    DecodeError,
    InvalidPayloadError,
    SchemaValidationError,
    RemoteFetchError,
)
from .domain.value_objects import DeviceKey, CwtId
from .domain.ports import Decoder, PayloadValidator

from .application.use_cases.decode import DecodeBarcodeUseCase, build_decoders, decode

# Scheme adapters
from .adapters.schemes.mdoc import MDocDeviceEngagementDecoder
from .adapters.schemes.hcert import HCERTDecoder
from .adapters.schemes.nzcp import NZCPDecoder
from .adapters.schemes.jwt import JWTDecoder
from .adapters.dcc.schema import DccSchemaValidator

from .config import DecoderSettings, settings_from_env
from .integrations.common.decoder_factory import (
    DecoderService,
    create_decoder_service,
    create_decoder_service_from_env,
)

__all__ = [
    "__version__",
    # domain core
    "DecodeResult",
    "SchemeName",
    "ValidationMode",
    "DEFAULT_SCHEME_ORDER",
    "DeviceKey",
    "CwtId",
    "Decoder",
    "PayloadValidator",
    # exceptions
    "DecodeError",
    "InvalidPayloadError",
    "SchemaValidationError",
    "RemoteFetchError",
    # use cases
    "DecodeBarcodeUseCase",
    "build_decoders",
    "decode",
    # adapters
    "MDocDeviceEngagementDecoder",
    "HCERTDecoder",
    "NZCPDecoder",
    "JWTDecoder",
    "DccSchemaValidator",
    # wiring
    "DecoderSettings",
    "settings_from_env",
    "DecoderService",
    "create_decoder_service",
    "create_decoder_service_from_env",
]
