"""
Centralized JSON Schema Loading Module.

Schemas are loaded from the JSON files next to this module once, at import
time, and exposed as module-level constants. A missing or malformed schema
file makes the import fail immediately with the path that was checked.
"""
import json
from pathlib import Path
from typing import Dict, Any

SCHEMA_DIR = Path(__file__).parent


def _load_schema(schema_filename: str) -> Dict[str, Any]:
    """
    Load a JSON schema file from the schema directory.

    Args:
        schema_filename: Name of the JSON schema file (e.g., "links_schema.json")

    Returns:
        Parsed JSON schema as a dictionary, ready for use with jsonschema

    Raises:
        FileNotFoundError: If the schema file doesn't exist at the expected location.
        json.JSONDecodeError: If the schema file contains invalid JSON.
    """
    schema_path = SCHEMA_DIR / schema_filename

    if not schema_path.exists():
        raise FileNotFoundError(
            f"Schema file not found: {schema_path}. "
            f"Expected location: {SCHEMA_DIR}"
        )

    try:
        with open(schema_path, "r") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise json.JSONDecodeError(
            f"Invalid JSON in schema file {schema_filename}: {e.msg}",
            e.doc,
            e.pos
        ) from e


# Discovery result document written to links.json by `webmention query`
LINKS_SCHEMA = _load_schema("links_schema.json")


def get_links_schema() -> Dict[str, Any]:
    """Get the links.json JSON schema (the same object as LINKS_SCHEMA)."""
    return LINKS_SCHEMA
