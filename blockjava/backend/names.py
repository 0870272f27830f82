"""Name registry: logical names -> collision-free Java identifiers.

One registry serves every category so a helper function can never shadow a user
variable or procedure. Names are stable for the life of a generation run.
"""

from __future__ import annotations

import re
from typing import Iterable

# Name categories
VARIABLE = "VARIABLE"
PROCEDURE = "PROCEDURE"
CLASS = "CLASS"

JAVA_RESERVED = frozenset(
    {
        "abstract",
        "assert",
        "boolean",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "class",
        "const",
        "continue",
        "default",
        "do",
        "double",
        "else",
        "enum",
        "extends",
        "final",
        "finally",
        "float",
        "for",
        "goto",
        "if",
        "implements",
        "import",
        "instanceof",
        "int",
        "interface",
        "long",
        "native",
        "new",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "short",
        "static",
        "strictfp",
        "super",
        "switch",
        "synchronized",
        "this",
        "throw",
        "throws",
        "transient",
        "try",
        "void",
        "volatile",
        "while",
        "true",
        "false",
        "null",
        "var",
        "yield",
        "record",
        "_",
    }
)

# java.lang and runtime classes the generated unit refers to by simple name
JAVA_CLASSES = frozenset(
    {
        "Boolean",
        "Byte",
        "Character",
        "Class",
        "ComponentContainer",
        "DecimalFormat",
        "Double",
        "Exception",
        "Float",
        "HashMap",
        "Integer",
        "Long",
        "Math",
        "NumberFormat",
        "Object",
        "Short",
        "String",
        "System",
        "Var",
        "YailList",
    }
)

_ILLEGAL_RE = re.compile(r"[^A-Za-z0-9_$]")


def safe_name(name: str) -> str:
    """Turn an arbitrary logical name into a legal Java identifier stem."""
    if not name:
        return "unnamed"
    result = _ILLEGAL_RE.sub("_", name.replace(" ", "_"))
    if result[0].isdigit():
        result = "my_" + result
    return result


class NameDB:
    """Issues emitted identifiers.

    Invariants:
    - distinct (name, category) pairs never share an emitted identifier
    - reserved words are never issued
    - get_name is idempotent until reset()
    """

    def __init__(self, reserved_words: Iterable[str] = ()) -> None:
        self.reserved: set[str] = set(JAVA_RESERVED) | set(JAVA_CLASSES)
        self.reserved.update(reserved_words)
        self._db: dict[tuple[str, str], str] = {}
        self._issued: set[str] = set()

    def add_reserved_words(self, words: Iterable[str]) -> None:
        self.reserved.update(words)

    def reset(self) -> None:
        """Forget every binding. Reserved words survive."""
        self._db = {}
        self._issued = set()

    def get_name(self, name: str, category: str) -> str:
        """Return the identifier bound to (name, category), binding a fresh one on first use."""
        key: tuple[str, str] = (name, category)
        existing = self._db.get(key)
        if existing is not None:
            return existing
        result = self.get_distinct_name(name, category)
        self._db[key] = result
        return result

    def get_distinct_name(self, name: str, category: str) -> str:
        """Issue a new identifier derived from `name` that nothing else holds.

        Collisions with issued or reserved names get a counter suffix: foo, foo2, foo3...
        """
        stem = safe_name(name)
        candidate = stem
        suffix = 1
        while candidate in self._issued or candidate in self.reserved:
            suffix += 1
            candidate = stem + str(suffix)
        self._issued.add(candidate)
        return candidate

    def claim(self, name: str, category: str) -> str:
        """Bind (name, category) to `name` verbatim, skipping the reserved check.

        For identifiers the generated unit must spell exactly, such as a base
        class or interface. Later requests for the same identifier get a suffix.
        """
        key: tuple[str, str] = (name, category)
        self._db[key] = name
        self._issued.add(name)
        return name

    def is_issued(self, identifier: str) -> bool:
        return identifier in self._issued
