from __future__ import annotations

from fastapi import APIRouter

from .router import DecodeRequest, FastAPIDecoder
from ..common.decoder_factory import DecoderService, create_decoder_service
from ...config.settings import DecoderSettings


def create_decode_router(
    service: DecoderService | None = None,
    *,
    settings: DecoderSettings | None = None,
    prefix: str = "/decode",
) -> APIRouter:
    """
    High-level helper for FastAPI apps:

    - Creates a DecoderService from settings (unless one is given)
    - Exposes GET {prefix}?barcode=... and POST {prefix} {"barcode": ...}

        app.include_router(create_decode_router())
    """
    service = service or create_decoder_service(settings)
    return FastAPIDecoder(service=service).router(prefix=prefix)


__all__ = ["DecodeRequest", "FastAPIDecoder", "create_decode_router"]
