"""
Schema validation for gitdeploy.

Enforces JSON Schema validation at the configuration boundary.
Fails hard with clear errors when data doesn't match schema.
"""

import json
from pathlib import Path

import jsonschema


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _get_schemas_dir() -> Path:
    """Get path to the packaged schemas directory."""
    return Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def validate(data: dict, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Dictionary to validate
        schema_name: Schema name (e.g., "deploy")

    Raises:
        ValidationError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise ValidationError(schema_name, e.message, path) from None
