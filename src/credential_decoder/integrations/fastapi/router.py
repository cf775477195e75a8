from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from ..common.decoder_factory import DecoderService
from ...domain.exceptions import (
    InvalidPayloadError,
    RemoteFetchError,
    SchemaValidationError,
)

log = logging.getLogger(__name__)


class DecodeRequest(BaseModel):
    barcode: str


@dataclass(slots=True)
class FastAPIDecoder:
    """
    FastAPI integration: maps decode exceptions onto HTTP errors.
    """

    service: DecoderService

    def decode(self, barcode: str) -> Dict[str, Any]:
        log.info("Decode barcode payload (%d chars)", len(barcode))
        try:
            return self.service.decode_json(barcode)
        except SchemaValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": str(exc), "scheme": exc.scheme, "errors": exc.errors},
            ) from exc
        except InvalidPayloadError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": str(exc), "scheme": exc.scheme},
            ) from exc
        except RemoteFetchError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"message": str(exc)},
            ) from exc

    def router(self, prefix: str = "/decode") -> APIRouter:
        router = APIRouter(tags=["Decoder"])

        @router.get(prefix)
        def decode_query(barcode: str = Query(..., min_length=1)) -> Dict[str, Any]:
            return self.decode(barcode)

        @router.post(prefix)
        def decode_body(body: DecodeRequest) -> Dict[str, Any]:
            return self.decode(body.barcode)

        return router
