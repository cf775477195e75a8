from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from ...application.use_cases.decode import DecodeBarcodeUseCase, build_decoders
from ...config.env import settings_from_env
from ...config.settings import DecoderSettings
from ...domain.constants import ValidationMode
from ...domain.entities import DecodeResult


@dataclass(slots=True)
class DecoderService:
    """
    Framework-agnostic decoding facade.

    Integrations (FastAPI, CLI) adapt this to their own request handling.
    """

    decode_use_case: DecodeBarcodeUseCase

    def decode(self, barcode: str) -> DecodeResult:
        """Barcode -> DecodeResult (or raise decode exceptions)."""
        return self.decode_use_case.execute(barcode)

    def decode_json(self, barcode: str) -> Dict[str, Any]:
        """Barcode -> JSON-safe {raw, data, meta}."""
        return self.decode(barcode).to_dict()


def create_decoder_service(
        settings: DecoderSettings | None = None,
        *,
        logger: logging.Logger | None = None,
) -> DecoderService:
    """
    High-level factory: settings -> DecoderService.

    - builds the ordered scheme decoders
    - wires DecodeBarcodeUseCase
    """
    decoders = build_decoders(settings, logger)
    return DecoderService(decode_use_case=DecodeBarcodeUseCase(decoders=decoders))


def create_decoder_service_from_env(
        *,
        validation: ValidationMode | None = None,
        logger: logging.Logger | None = None,
) -> DecoderService:
    """
    Same as `create_decoder_service`, with settings read from the environment.

    `validation` overrides HCERT_VALIDATION when given.
    """
    settings = settings_from_env()
    if validation is not None:
        settings.validation = validation
    return create_decoder_service(settings, logger=logger)
