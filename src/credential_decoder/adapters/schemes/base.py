from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional, Pattern

from ...domain.entities import DecodeResult
from ...domain.exceptions import DecodeError, InvalidPayloadError
from ...domain.ports import Decoder

log = logging.getLogger(__name__)


class SchemeDecoder(Decoder):
    """
    Common plumbing for scheme adapters.

    Subclasses set `scheme` and `pattern` (one capture group holding the
    encoded body) and implement `_decode_body`. Any failure below the prefix
    strip is logged and re-raised as InvalidPayloadError naming the scheme.
    """

    scheme: str = ""
    pattern: Pattern[str] = re.compile(r"(?!)")

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or log

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def is_match(self, input: str) -> bool:
        return self.pattern.match(input) is not None

    def decode(self, input: str) -> DecodeResult:
        self._log.debug("Decoding %s payload (%d chars)", self.scheme, len(input))

        match = self.pattern.match(input)
        if not match:
            raise InvalidPayloadError(
                self.scheme, f"payload does not conform to {self.scheme} format"
            )
        return self._guarded(self._decode_body, match.group(1))

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _decode_body(self, body: str) -> DecodeResult:
        raise NotImplementedError

    def _guarded(self, fn: Callable[[Any], DecodeResult], arg: Any) -> DecodeResult:
        try:
            return fn(arg)
        except DecodeError:
            # already carries scheme context
            raise
        except Exception as exc:
            self._log.error(
                "Failed to decode %s input: %s: %s",
                self.scheme,
                type(exc).__name__,
                exc,
            )
            raise InvalidPayloadError(self.scheme, str(exc) or type(exc).__name__) from exc


def seconds_to_millis(value: Any) -> Optional[int]:
    """CWT NumericDate (seconds) -> milliseconds since epoch."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"NumericDate must be a number, got {type(value).__name__}")
    return int(value * 1000)


def compact(mapping: dict) -> dict:
    """Drop absent (None) entries."""
    return {k: v for k, v in mapping.items() if v is not None}
