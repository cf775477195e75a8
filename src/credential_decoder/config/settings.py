from __future__ import annotations

from dataclasses import dataclass

from ..adapters.dcc.schema import DCC_JSON_SCHEMA_REPO, DCC_VALUESETS_REPO
from ..domain.constants import ValidationMode


@dataclass(slots=True)
class DecoderSettings:
    """
    Decoder wiring settings.

    Host code decides how to construct this (env, config file, etc.).
    """
    # HCERT schema validation: off / lenient (skip on fetch failure) / strict
    validation: ValidationMode = ValidationMode.OFF

    schema_repo: str = DCC_JSON_SCHEMA_REPO
    valuesets_repo: str = DCC_VALUESETS_REPO
    schema_cache_ttl_seconds: float = 3600.0
    schema_cache_max_entries: int = 10
    fetch_timeout_seconds: float = 10.0

    @property
    def validation_enabled(self) -> bool:
        return self.validation is not ValidationMode.OFF
