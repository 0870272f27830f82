"""Type resolution: logical block types -> Java declarations.

Logical types are tokens such as `Number` or `String`. Nested types are written
as colon-delimited chains, outermost first: `Array:Number` is an array of
numbers and maps to `YailList<Double>`. Only containers (`Array`, `Map` and
registered classes) take an element type; an unknown outer type maps to
`Object` with no arguments.

| Logical | Slot      | Element (generic argument) |
|---------|-----------|----------------------------|
| Object  | Object    | Object                     |
| Array   | YailList  | YailList                   |
| Map     | HashMap   | HashMap                    |
| Boolean | boolean   | Boolean                    |
| String  | String    | String                     |
| Colour  | String    | String                     |
| Number  | double    | Double                     |
| Var     | Var       | Var                        |
"""

from __future__ import annotations

from typing import Callable, Iterable

UNKNOWN_TYPE = "Object"
DYNAMIC_TYPE = "Var"
TYPE_SEPARATOR = ":"

TYPE_MAPPING: dict[str, str] = {
    "Object": "Object",
    "Array": "YailList",
    "Map": "HashMap",
    "Boolean": "boolean",
    "String": "String",
    "Colour": "String",
    "Number": "double",
    "Var": "Var",
}

# Generic arguments cannot be primitives, so element positions use boxed forms
SUBTYPE_MAPPING: dict[str, str] = {
    "Object": "Object",
    "Array": "YailList",
    "Map": "HashMap",
    "Boolean": "Boolean",
    "String": "String",
    "Colour": "String",
    "Number": "Double",
    "Var": "Var",
}

CONTAINER_TYPES = frozenset({"Array", "Map"})

DEFAULT_EQUIVALENCES: dict[str, str] = {
    "Colour": "String",
}

Warn = Callable[[str, str], None]


def _ignore(category: str, message: str) -> None:
    pass


class TypeResolver:
    """Collapses candidate type sets and maps logical types to Java.

    Never raises: anything it cannot make sense of becomes UNKNOWN_TYPE and is
    reported through `warn(category, message)`.
    """

    def __init__(self, warn: Warn | None = None) -> None:
        self.equivalences: dict[str, str] = dict(DEFAULT_EQUIVALENCES)
        self.classes: dict[str, str] = {}
        self._warn: Warn = warn if warn is not None else _ignore

    def add_equivalence(self, logical: str, canonical: str) -> None:
        """Treat `logical` as the same type as `canonical`."""
        self.equivalences[logical] = canonical

    def register_class(self, logical: str, java_class: str) -> None:
        """Map a block-defined logical type straight to a Java class."""
        self.classes[logical] = java_class

    def canonical(self, logical: str) -> str:
        """Replace every token of a (possibly nested) type by its equivalence class."""
        tokens = logical.split(TYPE_SEPARATOR)
        return TYPE_SEPARATOR.join(self.equivalences.get(t, t) for t in tokens)

    def resolve(self, candidates: Iterable[str]) -> str:
        """Collapse the logical types flowing into one slot down to a single type.

        Equivalent types merge and duplicates drop. A bare container loses to a
        more specific nested form of itself (`Array` + `Array:Number` ->
        `Array:Number`). Anything else that stays ambiguous, and the empty set,
        resolve to UNKNOWN_TYPE.
        """
        resolved: list[str] = []
        for candidate in sorted(c for c in candidates if c):
            typ = self.canonical(candidate)
            if typ not in resolved:
                resolved.append(typ)
        specific = [
            t
            for t in resolved
            if not any(o != t and o.startswith(t + TYPE_SEPARATOR) for o in resolved)
        ]
        if len(specific) == 1:
            return specific[0]
        return UNKNOWN_TYPE

    def map_type(self, logical: str | None) -> str:
        """Compute the Java declaration for a logical type."""
        tokens = logical.split(TYPE_SEPARATOR) if logical else []
        return self._map_tokens(TYPE_MAPPING, tokens)

    def compute_java_type(self, candidates: Iterable[str]) -> str:
        return self.map_type(self.resolve(candidates))

    def _map_tokens(self, table: dict[str, str], tokens: list[str]) -> str:
        if not tokens or not tokens[0]:
            self._warn("type", "empty type, using " + UNKNOWN_TYPE)
            tokens = [UNKNOWN_TYPE]
        key = tokens[0]
        canonical = self.equivalences.get(key, key)
        if key in table:
            java = table[key]
        elif key in self.classes:
            java = self.classes[key]
        elif canonical in table:
            java = table[canonical]
        else:
            self._warn("type", "unknown type '" + key + "', using " + UNKNOWN_TYPE)
            return UNKNOWN_TYPE
        if len(tokens) == 1:
            return java
        # Only containers take generic arguments
        if canonical in CONTAINER_TYPES or key in self.classes:
            return java + "<" + self._map_tokens(SUBTYPE_MAPPING, tokens[1:]) + ">"
        element = TYPE_SEPARATOR.join(tokens[1:])
        self._warn("type", "type '" + key + "' has no element type, ignoring '" + element + "'")
        return java
