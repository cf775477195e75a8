# src/credential_decoder/cli.py

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Sequence

from .domain.constants import ValidationMode
from .domain.exceptions import DecodeError
from .integrations.common.decoder_factory import create_decoder_service_from_env


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="credential-decoder",
        description="Decode an mdoc / HCERT / NZCP / JWT barcode payload to JSON",
    )

    parser.add_argument(
        "barcode",
        help="Barcode text, e.g. 'HC1:...' or 'NZCP:/1/...' ('-' reads stdin).",
    )
    parser.add_argument(
        "--validation",
        "-V",
        choices=[m.value for m in ValidationMode],
        help="HCERT schema validation mode (default from env HCERT_VALIDATION, else off).",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("CREDENTIAL_DECODER_LOG", "WARNING").upper(),
        help="Logging level (default from env CREDENTIAL_DECODER_LOG, else WARNING).",
    )

    return parser.parse_args(args=argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    barcode = sys.stdin.read() if args.barcode == "-" else args.barcode

    try:
        validation = ValidationMode(args.validation) if args.validation else None
        service = create_decoder_service_from_env(validation=validation)
        result = service.decode_json(barcode)
    except (DecodeError, RuntimeError) as exc:
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 1

    json.dump({"ok": True, "result": result}, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
