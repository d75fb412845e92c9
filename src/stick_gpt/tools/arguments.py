"""Parsing and validation of tool-call arguments.

Models send tool arguments as JSON text. This module turns that text into an
argument dict and checks it against a subset of JSON Schema (required keys,
basic property types and ``additionalProperties: false``). Anything that does
not fit raises ArgumentParseError.
"""

import json
from typing import Any

from stick_gpt.exceptions import ArgumentParseError

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
    "null": (type(None),),
}


def parse_arguments(text: str | None) -> dict[str, Any]:
    """Parse tool-call argument text into a dict.

    Empty or missing text is treated as no arguments.

    Raises:
        ArgumentParseError: If the text is not a JSON object
    """
    if text is None or not text.strip():
        return {}

    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ArgumentParseError(f"Invalid JSON in tool arguments: {e}") from e

    if not isinstance(value, dict):
        raise ArgumentParseError(
            f"Tool arguments must be a JSON object, got {type(value).__name__}"
        )
    return value


def matches_json_type(value: Any, expected: str) -> bool:
    """Check whether a Python value matches a basic JSON Schema type.

    Booleans are not accepted as integers or numbers. Unknown types match
    anything.
    """
    python_types = _JSON_TYPES.get(expected)
    if python_types is None:
        return True
    if isinstance(value, bool) and expected in ("integer", "number"):
        return False
    return isinstance(value, python_types)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def schema_problems(schema: Any) -> list[str]:
    """List the ways a parameter schema cannot be used by validate_arguments().

    Only the parts validate_arguments() reads are checked: ``properties``
    must be an object, each property ``type`` a string or list of strings,
    and ``required`` a list of strings.
    """
    if schema is None:
        return []
    if not isinstance(schema, dict):
        return [f"parameters must be an object, got {type(schema).__name__}"]

    problems = []
    properties = schema.get("properties", {})
    if not isinstance(properties, dict):
        problems.append("'properties' must be an object")
        properties = {}

    for name, prop in properties.items():
        if not isinstance(prop, dict) or "type" not in prop:
            continue
        expected = prop["type"]
        if not (isinstance(expected, str) or _is_string_list(expected)):
            problems.append(f"type of property '{name}' must be a string or list of strings")

    if "required" in schema and not _is_string_list(schema["required"]):
        problems.append("'required' must be a list of strings")

    return problems


def validate_arguments(args: dict[str, Any], schema: dict[str, Any] | None) -> None:
    """Validate arguments against a tool's parameter schema.

    Args:
        args: Parsed arguments
        schema: JSON Schema object declared by the tool, or None

    Raises:
        ArgumentParseError: On a missing required key, an unknown key when
            additionalProperties is false, or a type mismatch
    """
    if not schema:
        return

    properties = schema.get("properties")
    if not isinstance(properties, dict):
        properties = {}
    required = schema.get("required")
    if not isinstance(required, list):
        required = []

    missing = [name for name in required if name not in args]
    if missing:
        raise ArgumentParseError(f"Missing required argument(s): {', '.join(missing)}")

    if schema.get("additionalProperties", True) is False:
        unknown = [name for name in args if name not in properties]
        if unknown:
            raise ArgumentParseError(f"Unknown argument(s) not allowed: {', '.join(unknown)}")

    for name, value in args.items():
        prop = properties.get(name)
        if not isinstance(prop, dict) or "type" not in prop:
            continue
        expected = prop["type"]
        options = expected if isinstance(expected, list) else [expected]
        if not any(matches_json_type(value, option) for option in options):
            raise ArgumentParseError(
                f"Argument '{name}' should be of type {' or '.join(options)}, "
                f"got {type(value).__name__}"
            )
