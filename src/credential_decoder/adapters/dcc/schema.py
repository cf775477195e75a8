from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import requests
from jsonschema import Draft202012Validator, ValidationError, validators

from .cache import SingleFlightCache
from ...domain.constants import SchemeName, ValidationMode
from ...domain.exceptions import RemoteFetchError, SchemaValidationError
from ...domain.ports import PayloadValidator

log = logging.getLogger(__name__)

DCC_JSON_SCHEMA_REPO = "https://raw.githubusercontent.com/ehn-dcc-development/ehn-dcc-schema"
DCC_JSON_SCHEMA_FILE = "DCC.combined-schema.json"

DCC_VALUESETS_REPO = "https://raw.githubusercontent.com/ehn-dcc-development/ehn-dcc-valuesets"
# schema `valueset-uri` -> file in the value-set repository
DCC_VALUESETS = {
    "valuesets/country-2-codes.json": "country-2-codes.json",
    "valuesets/disease-agent-targeted.json": "disease-agent-targeted.json",
    "valuesets/test-manf.json": "test-manf.json",
    "valuesets/test-result.json": "test-result.json",
    "valuesets/test-type.json": "test-type.json",
    "valuesets/vaccine-mah-manf.json": "vaccine-mah-manf.json",
    "valuesets/vaccine-medicinal-product.json": "vaccine-medicinal-product.json",
    "valuesets/vaccine-prophylaxis.json": "vaccine-prophylaxis.json",
}

VALUESET_KEYWORD = "valueset-uri"
DEFAULT_CACHE_KEY = "default"


def branch_for(version: Optional[str]) -> str:
    return f"release/{version}" if version else "main"


class _ValuesetSubstitution(ValidationError):
    """
    Not a violation: carries the display value for a coded field up to
    `iter_errors`, where jsonschema has filled in its path. Only yielded
    by the resolving pass, never while collecting violations.
    """

    def __init__(self, message: str, display: Any = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.display = display


def _valueset_keyword(valuesets: Mapping[str, Mapping[str, Any]], report_matches: bool = False):
    def check(validator, uri, instance, schema) -> Iterator[ValidationError]:
        if not isinstance(instance, str):
            # type mismatches are reported by the `type` keyword
            return

        valueset = valuesets.get(uri)
        if valueset is None:
            yield ValidationError(f"No valueset found with [{uri}]")
            return

        entry = (valueset.get("valueSetValues") or {}).get(instance)
        if entry is None:
            yield ValidationError(f"No value found from [{uri}] with key [{instance}]")
            return

        if report_matches:
            display = entry.get("display", instance) if isinstance(entry, Mapping) else entry
            yield _ValuesetSubstitution(f"{instance!r} -> {display!r}", display=display)

    return check


def _substitutions(errors: Sequence[ValidationError]) -> List[Tuple[List[Any], Any]]:
    found: List[Tuple[List[Any], Any]] = []
    for error in errors:
        if isinstance(error, _ValuesetSubstitution):
            found.append((list(error.absolute_path), error.display))
        elif error.validator in ("anyOf", "oneOf") and error.context:
            found.extend(_clean_branch(error.context) or [])
    return found


def _clean_branch(context: Sequence[ValidationError]) -> Optional[List[Tuple[List[Any], Any]]]:
    """
    Substitutions of the first composed branch that failed only because of
    resolved codes, or None when every branch holds a real violation.
    """
    branches: Dict[Any, List[ValidationError]] = {}
    for error in context:
        branches.setdefault(error.relative_schema_path[0], []).append(error)

    for branch in branches.values():
        if all(_only_substitutions(error) for error in branch):
            return _substitutions(branch)
    return None


def _only_substitutions(error: ValidationError) -> bool:
    if isinstance(error, _ValuesetSubstitution):
        return True
    if error.validator in ("anyOf", "oneOf") and error.context:
        return _clean_branch(error.context) is not None
    return False


def _substitute(instance: Any, path: Sequence[Any], value: Any) -> Any:
    if not path:
        return value
    target = instance
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    return instance


@dataclass(slots=True)
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    # copy of the record with value-set codes replaced by their display text
    instance: Any = None

    @property
    def valid(self) -> bool:
        return not self.errors


class DccSchemaValidator(PayloadValidator):
    """
    Best-effort validation of an HCERT payload against the published
    EU DCC JSON schema and value-sets.

    Documents are downloaded from GitHub and cached per schema version
    (`ver` in the payload, "main" branch when absent).

    Fetch failure policy follows `mode`:
      - LENIENT: log a warning and skip validation
      - STRICT:  raise RemoteFetchError
    Schema violations raise SchemaValidationError in both modes.
    """

    def __init__(
        self,
        *,
        mode: ValidationMode = ValidationMode.LENIENT,
        schema_repo: str = DCC_JSON_SCHEMA_REPO,
        valuesets_repo: str = DCC_VALUESETS_REPO,
        timeout_seconds: float = 10.0,
        cache_ttl_seconds: float = 3600.0,
        cache_max_entries: int = 10,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._mode = mode
        self._schema_repo = schema_repo.rstrip("/")
        self._valuesets_repo = valuesets_repo.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._log = logger or log

        self._schemas: SingleFlightCache[Dict[str, Any]] = SingleFlightCache(
            ttl_seconds=cache_ttl_seconds, max_entries=cache_max_entries
        )
        self._valuesets: SingleFlightCache[Dict[str, Any]] = SingleFlightCache(
            ttl_seconds=cache_ttl_seconds, max_entries=cache_max_entries
        )

    @property
    def mode(self) -> ValidationMode:
        return self._mode

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def validate_or_raise(self, record: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Returns:
            The display-resolved copy of `record`, or `record` itself when
            validation was skipped.

        Raises:
            SchemaValidationError
            RemoteFetchError (STRICT mode only)
        """
        if self._mode is ValidationMode.OFF:
            return record

        try:
            report = self.validate(record)
        except RemoteFetchError as exc:
            if self._mode is ValidationMode.STRICT:
                raise
            self._log.warning("Skipping DCC schema validation: %s", exc)
            return record

        if not report.valid:
            raise SchemaValidationError(SchemeName.HCERT.value, report.errors)
        return report.instance

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate(self, record: Mapping[str, Any]) -> ValidationReport:
        version = record.get("ver") if isinstance(record, Mapping) else None
        schema = self.fetch_json_schema(version)
        valuesets = self.fetch_valuesets()
        return validate_with_valuesets(record, schema, valuesets)

    # ------------------------------------------------------------------ #
    # Remote documents
    # ------------------------------------------------------------------ #

    def fetch_json_schema(self, version: Optional[str] = None) -> Dict[str, Any]:
        key = version or DEFAULT_CACHE_KEY
        uri = f"{self._schema_repo}/{branch_for(version)}/{DCC_JSON_SCHEMA_FILE}"
        return self._schemas.get_or_load(key, lambda: self._get_json(uri))

    def fetch_valuesets(self) -> Dict[str, Any]:
        return self._valuesets.get_or_load(DEFAULT_CACHE_KEY, self._load_valuesets)

    def _load_valuesets(self) -> Dict[str, Any]:
        branch = branch_for(None)
        return {
            key: self._get_json(f"{self._valuesets_repo}/{branch}/{filename}")
            for key, filename in DCC_VALUESETS.items()
        }

    def _get_json(self, uri: str) -> Dict[str, Any]:
        self._log.debug("Fetching %s", uri)
        try:
            response = self._session.get(uri, timeout=self._timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            self._log.error("Failed to download DCC document %s: %s", uri, exc)
            raise RemoteFetchError(uri, str(exc)) from exc


def validate_with_valuesets(
    record: Any,
    schema: Mapping[str, Any],
    valuesets: Mapping[str, Mapping[str, Any]],
) -> ValidationReport:
    """
    Validate `record` against `schema`, resolving every field annotated with
    `valueset-uri` through `valuesets`.

    Violations come from a plain pass where a known code is simply valid.
    A second pass reports known codes as substitutions so jsonschema fills
    in their paths.
    """
    base = validators.validator_for(schema, default=Draft202012Validator)
    checker = validators.extend(base, {VALUESET_KEYWORD: _valueset_keyword(valuesets)})
    resolver = validators.extend(
        base, {VALUESET_KEYWORD: _valueset_keyword(valuesets, report_matches=True)}
    )

    errors = [f"{error.json_path}: {error.message}" for error in checker(schema).iter_errors(record)]

    instance = copy.deepcopy(record)
    for path, display in _substitutions(list(resolver(schema).iter_errors(record))):
        instance = _substitute(instance, path, display)

    return ValidationReport(errors=errors, instance=instance)
