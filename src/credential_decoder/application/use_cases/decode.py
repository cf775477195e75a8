from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ...adapters.dcc.schema import DccSchemaValidator
from ...adapters.schemes.hcert import HCERTDecoder
from ...adapters.schemes.jwt import JWTDecoder
from ...adapters.schemes.mdoc import MDocDeviceEngagementDecoder
from ...adapters.schemes.nzcp import NZCPDecoder
from ...config.settings import DecoderSettings
from ...domain.constants import DEFAULT_SCHEME_ORDER, SchemeName, ValidationMode
from ...domain.entities import DecodeResult
from ...domain.ports import Decoder

log = logging.getLogger(__name__)


def _hcert_validator(settings: DecoderSettings, logger: logging.Logger) -> Optional[DccSchemaValidator]:
    if settings.validation is ValidationMode.OFF:
        return None
    return DccSchemaValidator(
        mode=settings.validation,
        schema_repo=settings.schema_repo,
        valuesets_repo=settings.valuesets_repo,
        timeout_seconds=settings.fetch_timeout_seconds,
        cache_ttl_seconds=settings.schema_cache_ttl_seconds,
        cache_max_entries=settings.schema_cache_max_entries,
        logger=logger,
    )


def build_decoders(
        settings: DecoderSettings | None = None,
        logger: logging.Logger | None = None,
        order: Sequence[SchemeName] = DEFAULT_SCHEME_ORDER,
) -> List[Decoder]:
    """
    Build the scheme decoders in dispatch order (MDoc, HCERT, NZCP, JWT by
    default). JWT must stay last: its match test parses a header.
    """
    settings = settings or DecoderSettings()
    logger = logger or log

    factories: Dict[SchemeName, Callable[[], Decoder]] = {
        SchemeName.MDOC: lambda: MDocDeviceEngagementDecoder(logger),
        SchemeName.HCERT: lambda: HCERTDecoder(logger, validator=_hcert_validator(settings, logger)),
        SchemeName.NZCP: lambda: NZCPDecoder(logger),
        SchemeName.JWT: lambda: JWTDecoder(logger),
    }
    return [factories[SchemeName(name)]() for name in order]


def decode(decoders: Sequence[Decoder], barcode: str) -> DecodeResult:
    """
    Delegate to the first decoder whose `is_match` accepts `barcode`.

    A matched decoder's failure propagates; there is no fall-through to the
    next scheme. No match yields the empty result.
    """
    for decoder in decoders:
        if decoder.is_match(barcode):
            return decoder.decode(barcode)
    log.debug("No decoder matched input (%d chars)", len(barcode))
    return DecodeResult.empty()


@dataclass(slots=True)
class DecodeBarcodeUseCase:
    """
    Application use case:
    - pick the scheme decoder for a barcode
    - return its DecodeResult

    Raises:
        InvalidPayloadError (incl. SchemaValidationError)
        RemoteFetchError
    """

    decoders: Sequence[Decoder]

    def execute(self, barcode: str) -> DecodeResult:
        return decode(self.decoders, barcode.strip())
