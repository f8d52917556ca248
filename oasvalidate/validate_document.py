"""Validation of a whole OpenAPI document against the OpenAPI specification schema."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import jsonschema.exceptions
import yaml

from oasvalidate.locate import locate_schema_property_node, node_line_and_column
from oasvalidate.validate_schema import (
    HOW_TO_FIX_INVALID_SCHEMA,
    SCHEMA,
    SchemaValidationFailure,
    ValidationError,
    _compile,
    _describe,
    _leaves,
    _plain,
    _pointer,
)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _DocumentLoader(yaml.SafeLoader):
    """Safe loader that leaves dates and times as strings, as JSON would."""


_DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def validate_openapi_document(
    document: str | bytes, api_schema: str | bytes | Mapping[str, Any]
) -> tuple[bool, list[ValidationError]]:
    """Validate an OpenAPI document, given as YAML or JSON text, against ``api_schema``.

    ``api_schema`` is the JSON schema of the specification version the
    document claims, either as JSON text or as a mapping. Returns whether the
    document is valid and, if not, a single error holding every violation.
    Raises ``ValueError`` when the text does not hold a mapping.
    """
    root = yaml.compose(document, Loader=_DocumentLoader)
    data = yaml.load(document, Loader=_DocumentLoader)
    if not isinstance(root, yaml.MappingNode) or not isinstance(data, Mapping):
        raise ValueError("the document is not an OpenAPI document: it does not hold a mapping")
    spec = _plain(data)
    version = spec.get("openapi", spec.get("swagger", ""))

    schema = json.loads(api_schema) if isinstance(api_schema, (str, bytes)) else _plain(api_schema)
    validator = _compile(schema)

    errors = list(validator.iter_errors(spec))
    if not errors:
        return True, []

    failures: list[SchemaValidationFailure] = []
    for top in errors:
        failures.extend(_document_failures(top, root))

    return False, [
        ValidationError(
            message="Document does not pass validation",
            reason=f"OpenAPI document is not valid according to the {version} specification",
            validation_type=SCHEMA,
            how_to_fix=HOW_TO_FIX_INVALID_SCHEMA,
            schema_validation_errors=failures,
        )
    ]


def _document_failures(
    top: jsonschema.exceptions.ValidationError, root: yaml.Node
) -> list[SchemaValidationFailure]:
    failures = []
    for error in _leaves(top):
        keyword_location = _pointer(error.absolute_schema_path)
        if not keyword_location:
            continue
        instance_location = _pointer(error.absolute_path)
        failure = SchemaValidationFailure(
            reason=_describe(error),
            location=instance_location,
            deep_location=keyword_location,
            absolute_location=f"schema#{keyword_location}",
            original_error=top,
        )
        located = locate_schema_property_node(root, instance_location)
        if located is not None:
            failure.line, failure.column = node_line_and_column(located)
        failures.append(failure)
    return failures