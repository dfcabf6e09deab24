"""Structural type inference from sample JSON values, rendered as TypeScript."""

import re
from typing import Any

from pydantic import BaseModel

# Objects nested deeper than this collapse to an opaque record type.
MAX_DEPTH = 3
# Arrays do not count towards MAX_DEPTH, so a body like [[[...]]] would
# recurse once per level. Past this many levels the array is left opaque
# so inference stays within the interpreter recursion limit.
MAX_ARRAY_NESTING = 32

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class InferredType(BaseModel):
    """A recursive description of a JSON value's shape."""

    kind: str  # null / undefined / string / number / boolean / array / unknown_array / object / unknown_record / unknown
    element: "InferredType | None" = None
    properties: dict[str, "InferredType"] = {}


InferredType.model_rebuild()

_SCALARS = {
    "null": "null",
    "undefined": "undefined",
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "unknown_array": "unknown[]",
    "unknown_record": "Record<string, unknown>",
    "unknown": "unknown",
}


def infer(value: Any, depth: int = 0) -> InferredType:
    """Derive the structural type of a parsed JSON value."""
    if value is None:
        return InferredType(kind="null")
    if isinstance(value, list):
        if not value or depth > MAX_ARRAY_NESTING:
            return InferredType(kind="unknown_array")
        return InferredType(kind="array", element=infer(value[0], depth + 1))
    if isinstance(value, dict):
        if depth > MAX_DEPTH or not value:
            return InferredType(kind="unknown_record")
        return InferredType(
            kind="object",
            properties={str(k): infer(v, depth + 1) for k, v in value.items()},
        )
    if isinstance(value, bool):
        return InferredType(kind="boolean")
    if isinstance(value, (int, float)):
        return InferredType(kind="number")
    if isinstance(value, str):
        return InferredType(kind="string")
    return InferredType(kind="unknown")


def property_name(name: str) -> str:
    """Quote property names that are not plain identifiers."""
    if IDENTIFIER_RE.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_type(t: InferredType, indent: int = 0) -> str:
    """Render an inferred type as a TypeScript type expression."""
    if t.kind == "array":
        element = render_type(t.element, indent) if t.element else "unknown"
        return f"{element}[]"
    if t.kind == "object":
        return "{\n" + render_fields(t, indent + 1) + "\n" + "  " * indent + "}"
    return _SCALARS.get(t.kind, "unknown")


def render_fields(t: InferredType, indent: int = 1) -> str:
    pad = "  " * indent
    return "\n".join(
        f"{pad}{property_name(name)}: {render_type(field, indent)};"
        for name, field in t.properties.items()
    )


def render_declaration(name: str, sample: Any) -> str:
    """Render an exported interface (objects) or type alias (anything else)."""
    if isinstance(sample, dict):
        if not sample:
            return f"export interface {name} {{\n  [key: string]: unknown;\n}}"
        return f"export interface {name} {{\n{render_fields(infer(sample))}\n}}"
    return f"export type {name} = {render_type(infer(sample))};"
