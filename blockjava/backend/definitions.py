"""Side outputs collected while blocks emit: imports and helper functions.

Both are deduplicated by key and emitted in a deterministic order, so the same
workspace always produces the same file no matter how often, or in what order,
blocks ask for them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Union

from .names import PROCEDURE, NameDB

# Replaced by the emitted function name when a helper body is recorded
FUNCTION_NAME_PLACEHOLDER = "{{FUNCTION_NAME}}"

STATIC_MARKER = "static"


def normalize_import(name: str) -> str:
    """`import java.util.List;`, `java.util.List;` and `java.util.List` are the same import."""
    name = name.strip()
    if name.startswith("import "):
        name = name[len("import ") :]
    return name.rstrip(";").strip()


class ImportSet:
    """Duplicate-free set of imports, rendered in sorted order."""

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._names: set[str] = set()
        for name in initial:
            self.add(name)

    def __contains__(self, name: str) -> bool:
        return normalize_import(name) in self._names

    def __len__(self) -> int:
        return len(self._names)

    def add(self, name: str) -> None:
        normalized = normalize_import(name)
        if normalized:
            self._names.add(normalized)

    def get_imports(self, extra: Iterable[str] | None = None) -> list[str]:
        """All imports, with `extra` merged in, sorted lexicographically."""
        if extra:
            for name in extra:
                self.add(name)
        return sorted(self._names)


# --- Helper bodies ---


@dataclass(frozen=True)
class Eager:
    """Helper body known up front."""

    lines: tuple[str, ...]


@dataclass(frozen=True)
class Lazy:
    """Helper body built on first request."""

    factory: Callable[[], Union[str, list[str]]]


HelperBody = Union[Eager, Lazy]


@dataclass
class Signature:
    """Parameter names and return type of a helper, for its doc comment."""

    params: list[str] = field(default_factory=list)
    returns: str | None = None


@dataclass
class HelperDefinition:
    logical_name: str
    function_name: str
    text: str
    signature: Signature | None

    @property
    def is_static(self) -> bool:
        """A helper is static-like when the marker appears in its first three words."""
        return STATIC_MARKER in self.text.lstrip().split(" ")[:3]


_TYPE_TOKEN_RE = re.compile(r"[\w$.]+(?:\s*<[^()]*>)?(?:\s*\[\s*\])*")
# Leading annotations, with or without arguments
_ANNOTATIONS_RE = re.compile(r"^(?:\s*@[\w$.]+(?:\s*\([^()]*\))?)*\s*")


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not inside generic brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for c in text:
        if c == "<":
            depth += 1
        elif c == ">":
            depth -= 1
        if c == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(c)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def parse_signature(text: str) -> Signature | None:
    """Read parameter names and return type off a helper's declaration line.

    Returns None when the text does not start with a method declaration (no
    parenthesis, or a statement or initializer before the first one). Leading
    annotations are skipped.
    """
    decl = _ANNOTATIONS_RE.sub("", text, count=1)
    head, paren, rest = decl.partition("(")
    if not paren or ";" in head or "=" in head:
        return None
    words = _TYPE_TOKEN_RE.findall(head)
    returns: str | None = words[-2] if len(words) >= 2 else None
    if returns in ("void", "public"):
        returns = None
    params: list[str] = []
    for param in _split_top_level(rest.split(")", 1)[0]):
        params.append(param.split()[-1])
    return Signature(params, returns)


def _materialize(body: HelperBody) -> str:
    if isinstance(body, Lazy):
        produced = body.factory()
        if isinstance(produced, str):
            return produced
        return "\n".join(produced)
    return "\n".join(body.lines)


def as_body(body: Union[HelperBody, str, list[str], tuple[str, ...], Callable[[], object]]) -> HelperBody:
    """Wrap the forms callers pass to provide_function into a HelperBody."""
    if isinstance(body, (Eager, Lazy)):
        return body
    if isinstance(body, str):
        return Eager((body,))
    if isinstance(body, (list, tuple)):
        return Eager(tuple(body))
    if callable(body):
        return Lazy(body)
    raise ValueError("helper body must be text, a list of lines or a callable")


class HelperRegistry:
    """Helper functions requested during emission, each recorded exactly once."""

    def __init__(self, names: NameDB) -> None:
        self._names = names
        self._defs: dict[str, HelperDefinition] = {}

    def __contains__(self, logical_name: str) -> bool:
        return logical_name in self._defs

    def __len__(self) -> int:
        return len(self._defs)

    def provide_function(
        self,
        logical_name: str,
        body: Union[HelperBody, str, list[str], tuple[str, ...], Callable[[], object]],
        signature: Signature | None = None,
    ) -> str:
        """Record a helper on first request and return its emitted name.

        Later requests for the same logical name return the same emitted name and
        never touch the body. A lazy body is built immediately on first request.
        Without an explicit signature one is read off the declaration line.
        """
        existing = self._defs.get(logical_name)
        if existing is not None:
            return existing.function_name
        function_name = self._names.get_distinct_name(logical_name, PROCEDURE)
        self.define(logical_name, function_name, body, signature)
        return function_name

    def define(
        self,
        key: str,
        function_name: str,
        body: Union[HelperBody, str, list[str], tuple[str, ...], Callable[[], object]],
        signature: Signature | None = None,
    ) -> None:
        """Record a definition whose emitted name the caller already owns.

        Used for user procedures, which are named through the name registry
        like any other user identifier. Redefining a key replaces it.
        """
        text = _materialize(as_body(body)).replace(FUNCTION_NAME_PLACEHOLDER, function_name)
        if signature is None:
            signature = parse_signature(text)
        self._defs[key] = HelperDefinition(key, function_name, text, signature)

    def get(self, logical_name: str) -> HelperDefinition | None:
        return self._defs.get(logical_name)

    def ordered(self) -> list[HelperDefinition]:
        """Static-like helpers first, then instance-like; alphabetical by logical name within each."""
        defs = sorted(self._defs.values(), key=lambda d: d.logical_name)
        static = [d for d in defs if d.is_static]
        instance = [d for d in defs if not d.is_static]
        return static + instance
