"""Schema Package - JSON Schema Loading and Validation.

Schemas are stored as JSON files in src/schema/, loaded once when this
package is imported, and exposed as constants.

Available Schemas:
    LINKS_SCHEMA: JSON Schema (Draft 7) for the links.json document written
        by `webmention query <source> <output-dir>`.

Usage:
    from jsonschema import validate
    from schema import LINKS_SCHEMA
    validate(instance=document, schema=LINKS_SCHEMA)
"""
from .schema import LINKS_SCHEMA, get_links_schema

__all__ = ["LINKS_SCHEMA", "get_links_schema"]
