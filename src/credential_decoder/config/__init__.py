"""
credential_decoder.config

- DecoderSettings: scheme decoder wiring (HCERT validation mode, DCC
  schema/value-set repositories, cache TTL, fetch timeout).
- settings_from_env: build DecoderSettings from environment variables.
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import DecoderSettings

__all__ = [
    "DecoderSettings",
    "settings_from_env",
]
