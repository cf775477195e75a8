from __future__ import annotations

import os
from typing import Callable, TypeVar

from .settings import DecoderSettings
from ..adapters.dcc.schema import DCC_JSON_SCHEMA_REPO, DCC_VALUESETS_REPO
from ..domain.constants import ValidationMode

T = TypeVar("T")


def settings_from_env() -> DecoderSettings:
    def _parsed(key: str, parse: Callable[[str], T], default: T) -> T:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return parse(raw.strip())
        except ValueError as exc:
            raise RuntimeError(f"Invalid value for {key}: {raw!r}") from exc

    def _positive(parse: Callable[[str], T]) -> Callable[[str], T]:
        def inner(raw: str) -> T:
            value = parse(raw)
            if value <= 0:
                raise ValueError("must be positive")
            return value
        return inner

    return DecoderSettings(
        validation=_parsed(
            "HCERT_VALIDATION",
            lambda raw: ValidationMode(raw.lower()),
            ValidationMode.OFF,
        ),
        schema_repo=os.getenv("DCC_SCHEMA_REPO") or DCC_JSON_SCHEMA_REPO,
        valuesets_repo=os.getenv("DCC_VALUESETS_REPO") or DCC_VALUESETS_REPO,
        schema_cache_ttl_seconds=_parsed("DCC_SCHEMA_CACHE_TTL", _positive(float), 3600.0),
        fetch_timeout_seconds=_parsed("DCC_FETCH_TIMEOUT", _positive(float), 10.0),
    )
