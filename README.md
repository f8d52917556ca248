# oasvalidate

Validate JSON payloads against OpenAPI 3.x schema objects. Validate whole
OpenAPI documents against the specification's own JSON Schema.

Failures come back as `ValidationError` records. Each record holds a list of
`SchemaValidationFailure` entries. An entry gives:

- the reason for the failure;
- the instance location and the keyword location, as JSON pointers;
- where it can be found, the line and column of the violated part of the
  schema (for payloads) or of the document (for documents).

## Installation

```
pip install oasvalidate
```

To run the tests, install the `test` extra:

```
pip install "oasvalidate[test]"
pytest
```

## Validating a payload against a schema

A schema is a mapping that holds a JSON schema. Its dialect comes from its
`$schema` keyword. Without one, JSON Schema 2020-12 is used, which is the
dialect of OpenAPI 3.1.

```python
from oasvalidate.validate_schema import SchemaValidator

schema = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "patties": {"type": "integer"},
        "vegetarian": {"type": "boolean"},
    },
}

validator = SchemaValidator()  # or SchemaValidator(some_logging_logger)

valid, errors = validator.validate_schema_string(
    schema, '{"name": "Big Mac", "patties": 2, "vegetarian": true}'
)
assert valid and not errors

valid, errors = validator.validate_schema_object(
    schema, {"name": "Big Mac", "patties": "two"}
)
for error in errors:
    print(error.message)            # "schema does not pass validation"
    for failure in error.schema_validation_errors:
        print(failure.reason, failure.location, failure.line, failure.column)
        # got string, want integer /patties ...
```

There are three entry points:

- `validate_schema_string` takes JSON text.
- `validate_schema_bytes` takes raw bytes.
- `validate_schema_object` takes data that has already been decoded.

Each one returns a `(valid, errors)` pair.

Behaviour in particular cases:

- If the schema is `None`, the call logs a message at INFO level and returns
  `(False, [])`.
- If the JSON cannot be decoded, the call returns a single `ValidationError`
  with `validation_type` `"requestBody"` and `validation_sub_type`
  `"schema"`. Its one failure has location `"unavailable"`. No exception is
  raised.
- A schema that is not itself a valid JSON schema is reported in the same way.
- A decoded object that holds a value with no JSON counterpart is reported as
  an `invalid jsonType <type>` failure.

The schema is rendered to YAML, and that text is kept in `context` and in
each failure's `reference_schema`. Line and column numbers point into this
rendered text. When a failure lies in an element of a top-level array, that
element is re-encoded as JSON and placed in `reference_object`. Otherwise
`reference_object` holds the original payload.

## Validating an OpenAPI document

```python
from oasvalidate.validate_document import validate_openapi_document

valid, errors = validate_openapi_document(document_text, api_schema)
```

`document_text` is the OpenAPI document as YAML or JSON text. Dates in it are
kept as strings.

`api_schema` is the JSON schema of the specification version that the
document declares. Pass it either as JSON text or as a mapping.

On failure the function returns one `ValidationError` with the message
`"Document does not pass validation"`. The error holds every violation, and
each violation is located by line and column in the document. If the text
does not hold a mapping, the function raises `ValueError`.

## Specification schemas

`oasvalidate.openapi_schemas` provides `load_schema_3_0(schema)` and
`load_schema_3_1(schema)`. Each function takes a local copy of the
specification schema as text and fetches the published copy over the network.

- If the published copy differs from the local one (compared by MD5), the
  published copy is returned.
- If the copies are the same, or the fetch fails, the local copy is returned.

The result is cached for each version. Call `clear_cache()` to drop the
cached values.

Two lower-level functions are also available:

- `extract_schema(url, local)` performs one comparison against any URL.
- `get_file(url)` returns the body at a URL. It still returns the body when
  the response has an error status, and raises `OSError` when the URL cannot
  be fetched.

## Locating nodes

`oasvalidate.locate` provides three functions:

- `json_pointer_to_segments` splits a JSON pointer such as
  `/paths/~1pets/get/responses` or `#/components/schemas/Pet` into keys.
- `locate_schema_property_node(doc, json_path)` finds the node that the
  pointer names in a tree from `yaml.compose`. It returns `None` if there is
  no such node.
- `node_line_and_column(node)` gives a 1-based line and column for the node.
  For a mapping or a list, the line is that of the key which holds it.

## What this package does not do

- It does not validate HTTP requests or responses: there is no path matching
  and no checking of parameters, headers, cookies or security requirements.
  It validates payloads and documents only.
- It does not ship the OpenAPI specification schemas. Pass them in yourself.
- It has no command-line interface.