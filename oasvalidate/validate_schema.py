"""Validation of JSON payloads against OpenAPI schema objects.

A schema is given as a mapping that holds a JSON schema. Its dialect is taken
from its ``$schema`` keyword and defaults to JSON Schema 2020-12, the dialect
of OpenAPI 3.1. The schema is rendered to YAML so that every failure can be
pointed at a line and column of the rendered schema.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import jsonschema
import jsonschema.exceptions
import jsonschema.validators
import yaml

from oasvalidate.locate import locate_schema_property_node, node_line_and_column

SCHEMA = "schema"
REQUEST_BODY = "requestBody"
HOW_TO_FIX_INVALID_SCHEMA = "Ensure that the object being submitted, matches the schema correctly"
SCHEMA_FAILED_MESSAGE = "schema does not pass validation"

_INSTANCE_INDEX = re.compile(r"^/(\d+)")


@dataclass
class SchemaValidationFailure:
    """One violation of a schema, located in the payload and in the schema."""

    reason: str
    location: str
    deep_location: str = ""
    absolute_location: str = ""
    line: int = 0
    column: int = 0
    reference_schema: str = ""
    reference_object: str = ""
    original_error: Exception | None = None


@dataclass
class ValidationError:
    """A validation problem, with the schema violations that caused it."""

    message: str
    reason: str
    validation_type: str
    validation_sub_type: str = ""
    spec_line: int = 0
    spec_col: int = 0
    how_to_fix: str = ""
    context: str = ""
    schema_validation_errors: list[SchemaValidationFailure] = field(default_factory=list)


def _json_type(value: Any) -> str | None:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return None


def _unsupported_type(value: Any) -> type | None:
    """Return the type of the first value that has no JSON counterpart, if any."""
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                return type(key)
            found = _unsupported_type(item)
            if found is not None:
                return found
        return None
    if isinstance(value, (list, tuple)):
        return next((t for t in map(_unsupported_type, value) if t is not None), None)
    return None if _json_type(value) else type(value)


def _key(key: Any) -> str:
    return key if isinstance(key, str) else json.dumps(key)


def _plain(value: Any) -> Any:
    """Turn mappings into dicts with string keys and tuples into lists."""
    if isinstance(value, Mapping):
        return {_key(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _pointer(parts: Any) -> str:
    return "".join("/" + str(p).replace("~", "~0").replace("/", "~1") for p in parts)


def _quote(value: Any) -> str:
    return f"'{value}'" if isinstance(value, str) else json.dumps(value)


def _describe(error: jsonschema.exceptions.ValidationError) -> str:
    keyword = error.validator
    expected = error.validator_value
    if keyword == "type":
        wanted = [expected] if isinstance(expected, str) else list(expected)
        return f"got {_json_type(error.instance)}, want {' or '.join(wanted)}"
    if keyword == "required" and isinstance(error.instance, Mapping):
        missing = [name for name in expected if name not in error.instance]
        if len(missing) == 1:
            return f"missing property {_quote(missing[0])}"
        if missing:
            return "missing properties " + ", ".join(_quote(name) for name in missing)
    if keyword == "enum":
        return "value must be one of " + ", ".join(_quote(v) for v in expected)
    if keyword == "const":
        return f"value must be {_quote(expected)}"
    return error.message


def _leaves(
    error: jsonschema.exceptions.ValidationError,
) -> Iterator[jsonschema.exceptions.ValidationError]:
    if error.context:
        for sub in error.context:
            yield from _leaves(sub)
    else:
        yield error


def _compile(schema: Any) -> jsonschema.protocols.Validator:
    cls = jsonschema.validators.validator_for(schema, default=jsonschema.Draft202012Validator)
    cls.check_schema(schema)
    return cls(schema, format_checker=cls.FORMAT_CHECKER)


def _type_key_position(root: yaml.Node | None) -> tuple[int, int]:
    if isinstance(root, yaml.MappingNode):
        for key, _ in root.value:
            if isinstance(key, yaml.ScalarNode) and key.value == "type":
                return key.start_mark.line + 1, key.start_mark.column + 1
    return 1, 0


class SchemaValidator:
    """Validates payloads against schema objects."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self._lock = threading.Lock()

    def validate_schema_string(
        self, schema: Mapping[str, Any] | None, payload: str
    ) -> tuple[bool, list[ValidationError]]:
        """Validate a JSON document held in a string."""
        return self._validate(schema, payload.encode("utf-8"), None)

    def validate_schema_object(
        self, schema: Mapping[str, Any] | None, payload: Any
    ) -> tuple[bool, list[ValidationError]]:
        """Validate an already decoded object."""
        return self._validate(schema, None, payload)

    def validate_schema_bytes(
        self, schema: Mapping[str, Any] | None, payload: bytes
    ) -> tuple[bool, list[ValidationError]]:
        """Validate a JSON document held in bytes."""
        return self._validate(schema, bytes(payload), None)

    def _validate(
        self, schema: Mapping[str, Any] | None, payload: bytes | None, decoded: Any
    ) -> tuple[bool, list[ValidationError]]:
        if schema is None:
            self.logger.info(
                "schema is empty and cannot be validated. This generally means the schema "
                "is missing from the spec, or could not be read."
            )
            return False, []

        with self._lock:
            plain_schema = _plain(schema)
            rendered = yaml.safe_dump(
                plain_schema, sort_keys=False, allow_unicode=True, default_flow_style=False
            )
        payload_text = payload.decode("utf-8", errors="replace") if payload else ""

        if decoded is None and payload:
            try:
                decoded = json.loads(payload)
            except ValueError as exc:
                return False, [self._undecodable(str(exc), rendered, payload_text)]

        try:
            validator = _compile(plain_schema)
        except jsonschema.exceptions.SchemaError as exc:
            return False, [self._undecodable(str(exc), rendered, payload_text)]

        if decoded is None:
            return True, []

        root = yaml.compose(rendered)
        unsupported = _unsupported_type(decoded)
        if unsupported is not None:
            failures = [
                SchemaValidationFailure(
                    reason=f"invalid jsonType {unsupported.__name__}",
                    location="",
                    reference_schema=rendered,
                    reference_object=payload_text,
                )
            ]
        else:
            instance = _plain(decoded)
            errors = list(validator.iter_errors(instance))
            if not errors:
                return True, []
            failures = list(self._failures(errors, root, rendered, instance, payload_text))

        line, column = _type_key_position(root)
        return False, [
            ValidationError(
                message=SCHEMA_FAILED_MESSAGE,
                reason="Schema failed to validate against the contract requirements",
                validation_type=SCHEMA,
                spec_line=line,
                spec_col=column,
                how_to_fix=HOW_TO_FIX_INVALID_SCHEMA,
                context=rendered,
                schema_validation_errors=failures,
            )
        ]

    @staticmethod
    def _undecodable(reason: str, rendered: str, payload_text: str) -> ValidationError:
        return ValidationError(
            message=SCHEMA_FAILED_MESSAGE,
            reason=f"The schema cannot be decoded: {reason}",
            validation_type=REQUEST_BODY,
            validation_sub_type=SCHEMA,
            spec_line=1,
            spec_col=0,
            how_to_fix=HOW_TO_FIX_INVALID_SCHEMA,
            context=rendered,
            schema_validation_errors=[
                SchemaValidationFailure(
                    reason=reason,
                    location="unavailable",
                    reference_schema=rendered,
                    reference_object=payload_text,
                )
            ],
        )

    @staticmethod
    def _failures(
        errors: list[jsonschema.exceptions.ValidationError],
        root: yaml.Node | None,
        rendered: str,
        instance: Any,
        payload_text: str,
    ) -> Iterator[SchemaValidationFailure]:
        for top in errors:
            for error in _leaves(top):
                keyword_location = _pointer(error.absolute_schema_path)
                instance_location = _pointer(error.absolute_path)
                reference_object = ""
                match = _INSTANCE_INDEX.match(instance_location)
                if match and isinstance(instance, list):
                    reference_object = json.dumps(instance[int(match.group(1))], indent=2)
                failure = SchemaValidationFailure(
                    reason=_describe(error),
                    location=instance_location,
                    deep_location=keyword_location,
                    absolute_location=f"schema#{keyword_location}",
                    reference_schema=rendered,
                    reference_object=reference_object or payload_text,
                    original_error=top,
                )
                located = locate_schema_property_node(root, keyword_location)
                if located is not None:
                    failure.line, failure.column = node_line_and_column(located)
                yield failure