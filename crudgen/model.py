"""
Model descriptor

Normalized name and field data derived from CLI input. Everything the
templates and patchers need is computed here once per invocation.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Tuple

IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
MODEL_NAME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9_]*$')

DEFAULT_FIELD_TYPE = "string"

# Primary key column generated by every table
RESERVED_FIELD_NAMES = {"id"}

# Words that cannot name a binding in an ES module
JS_RESERVED_WORDS = frozenset({
    "arguments", "await", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "eval", "export",
    "extends", "false", "finally", "for", "function", "if", "implements",
    "import", "in", "instanceof", "interface", "let", "new", "null", "package",
    "private", "protected", "public", "return", "static", "super", "switch",
    "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
    "yield",
})

# Bindings declared by the generated query module and db.js
GENERATED_MODULE_NAMES = {"db", "query", "queries"}

# Locals of the generated controller handlers, which destructure every field
CONTROLLER_LOCALS = {"db", "next", "req", "res", "row"}

JS_TYPES = {
    "string": "string",
    "text": "string",
    "int": "number",
    "integer": "number",
    "float": "number",
    "number": "number",
    "decimal": "number",
    "bool": "boolean",
    "boolean": "boolean",
    "date": "Date",
    "datetime": "Date",
    "json": "Object",
}


@dataclass(frozen=True)
class Field:
    """A single model field (column)."""

    name: str
    type: str = DEFAULT_FIELD_TYPE

    @classmethod
    def parse(cls, spec: str) -> "Field":
        """
        Parse a `name:type` field spec.

        Examples:
            name        -> Field("name", "string")
            age:int     -> Field("age", "int")
            title:      -> Field("title", "string")

        Raises:
            ValueError: If the name or type is not a valid identifier
        """
        name, _, field_type = spec.strip().partition(':')
        name = name.strip()
        field_type = field_type.strip() or DEFAULT_FIELD_TYPE

        if not IDENTIFIER_RE.match(name):
            raise ValueError(f"Invalid field name in '{spec}': must be a valid identifier")
        if name.lower() in RESERVED_FIELD_NAMES:
            raise ValueError(f"Field name '{name}' is reserved for the primary key")
        if name in JS_RESERVED_WORDS or name in CONTROLLER_LOCALS:
            raise ValueError(f"Field name '{name}' is reserved in the generated controller")
        if not IDENTIFIER_RE.match(field_type):
            raise ValueError(f"Invalid field type in '{spec}': must be a valid identifier")

        return cls(name=name, type=field_type.lower())

    @property
    def js_type(self) -> str:
        return JS_TYPES.get(self.type, "*")


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Normalized model name and fields.

    Attributes:
        name: Lowercase model name, used for identifiers and file names
        display_name: Name with its first letter capitalized, for messages
        plural_name: name + "s", used for route paths and table names
        fields: Ordered field definitions
    """

    name: str
    display_name: str
    plural_name: str
    fields: Tuple[Field, ...] = ()

    @classmethod
    def from_input(cls, raw_name: str, field_specs: Iterable[str] = ()) -> "ModelDescriptor":
        """
        Build a descriptor from a raw model name and `name:type` specs.

        Examples:
            ("Author", ["name", "age:int"]) -> name="author",
                display_name="Author", plural_name="authors"

        Raises:
            ValueError: On an invalid model name or field spec, or duplicate fields
        """
        raw_name = (raw_name or "").strip()
        validate_model_name(raw_name)

        fields = []
        seen = set()
        for spec in field_specs:
            field = Field.parse(spec)
            if field.name in seen:
                raise ValueError(f"Duplicate field name: '{field.name}'")
            seen.add(field.name)
            fields.append(field)

        name = raw_name.lower()
        return cls(
            name=name,
            display_name=raw_name[0].upper() + raw_name[1:],
            plural_name=name + "s",
            fields=tuple(fields),
        )

    @property
    def table_name(self) -> str:
        return self.plural_name

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.fields)


def validate_model_name(name: str) -> None:
    """
    Validate a raw model name.

    Raises:
        ValueError: If the name is empty or not usable as a JS identifier
    """
    if not name:
        raise ValueError("Model name cannot be empty")
    if not MODEL_NAME_RE.match(name):
        raise ValueError(
            f"'{name}' is not a valid model name "
            "(must start with a letter and contain only letters, numbers, underscores)"
        )
    if name.lower() in JS_RESERVED_WORDS or name.lower() in GENERATED_MODULE_NAMES:
        raise ValueError(
            f"'{name}' cannot be used as a model name: "
            "it clashes with a JavaScript keyword or a generated identifier"
        )
