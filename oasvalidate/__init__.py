"""Validation of JSON payloads against OpenAPI schemas and of OpenAPI documents against the specification schema."""

__version__ = "0.1.0"
__all__ = ["openapi_schemas", "locate", "validate_schema", "validate_document"]