"""Type representation for the type oracle.

Types are plain objects compared by `type_to_string`. Object types load their
members lazily so recursive interfaces resolve without looping.
"""

from __future__ import annotations

from typing import Callable


class Type:
    """Base for all types."""

    def __repr__(self) -> str:
        return "Type(" + type_to_string(self) + ")"


class Primitive(Type):
    """any, unknown, never, void, undefined, null, number, string, boolean, object."""

    def __init__(self, name: str):
        self.name: str = name


ANY = Primitive("any")
UNKNOWN = Primitive("unknown")
NEVER = Primitive("never")
VOID = Primitive("void")
UNDEFINED = Primitive("undefined")
NULL = Primitive("null")
NUMBER = Primitive("number")
STRING = Primitive("string")
BOOLEAN = Primitive("boolean")
OBJECT = Primitive("object")

PRIMITIVES: dict[str, Primitive] = {
    "any": ANY,
    "unknown": UNKNOWN,
    "never": NEVER,
    "void": VOID,
    "undefined": UNDEFINED,
    "null": NULL,
    "number": NUMBER,
    "string": STRING,
    "boolean": BOOLEAN,
    "object": OBJECT,
}


class Literal(Type):
    """A literal type: "hello", 42, true."""

    def __init__(self, value: str | float | bool):
        self.value: str | float | bool = value

    @property
    def base(self) -> Primitive:
        if isinstance(self.value, bool):
            return BOOLEAN
        if isinstance(self.value, str):
            return STRING
        return NUMBER


class ArrayOf(Type):
    def __init__(self, element: Type):
        self.element: Type = element


class Tuple(Type):
    def __init__(self, elements: list[Type]):
        self.elements: list[Type] = elements


class ObjectShape(Type):
    """Object type with named properties and an optional string index signature.

    `name` is set for interfaces and aliases and is what gets printed.
    `loader` fills the members on first access.
    """

    def __init__(
        self,
        properties: dict[str, Type] | None = None,
        index: Type | None = None,
        name: str | None = None,
        loader: Callable[[ObjectShape], None] | None = None,
    ):
        self.name: str | None = name
        self._properties: dict[str, Type] = properties if properties is not None else {}
        self._index: Type | None = index
        self._loader: Callable[[ObjectShape], None] | None = loader

    def _load(self) -> None:
        if self._loader is not None:
            loader = self._loader
            self._loader = None
            loader(self)

    @property
    def properties(self) -> dict[str, Type]:
        self._load()
        return self._properties

    @property
    def index(self) -> Type | None:
        self._load()
        return self._index

    def set_members(self, properties: dict[str, Type], index: Type | None) -> None:
        self._properties = properties
        self._index = index


class FunctionSig(Type):
    def __init__(self, params: list[tuple[str, Type]], ret: Type):
        self.params: list[tuple[str, Type]] = params
        self.ret: Type = ret


class Union(Type):
    """2+ members, flattened and deduplicated. Build with `union()`."""

    def __init__(self, members: list[Type]):
        self.members: list[Type] = members


# ============================================================
# CONSTRUCTION
# ============================================================


def union(types: list[Type]) -> Type:
    """Flatten, deduplicate, absorb into any/unknown, collapse true|false."""
    flat: list[Type] = []
    for t in types:
        if isinstance(t, Union):
            flat.extend(t.members)
        else:
            flat.append(t)
    members: list[Type] = []
    seen: set[str] = set()
    for t in flat:
        if t is ANY:
            return ANY
        if t is NEVER:
            continue
        key = type_to_string(t)
        if key in seen:
            continue
        seen.add(key)
        members.append(t)
    if UNKNOWN in members:
        return UNKNOWN
    if "true" in seen and "false" in seen:
        members = [m for m in members if not (isinstance(m, Literal) and isinstance(m.value, bool))]
        members.append(BOOLEAN)
    if BOOLEAN in members:
        members = [m for m in members if not (isinstance(m, Literal) and isinstance(m.value, bool))]
    if len(members) == 0:
        return NEVER
    if len(members) == 1:
        return members[0]
    return Union(members)


def widen(t: Type) -> Type:
    """Literal types widen to their primitive (`let` bindings, return inference)."""
    if isinstance(t, Literal):
        return t.base
    if isinstance(t, Union):
        return union([widen(m) for m in t.members])
    return t


def remove_nullish(t: Type) -> Type:
    if isinstance(t, Union):
        return union([m for m in t.members if m is not NULL and m is not UNDEFINED])
    if t is NULL or t is UNDEFINED:
        return NEVER
    return t


# ============================================================
# QUERIES
# ============================================================


def is_assignable(t: Type, kind: str) -> bool:
    """Whether a value of type t can be used where `kind` is required.

    kind: "boolean" | "number" | "string" | "array" | "object". `any` and
    `never` are assignable to everything; `null` and `undefined` are too,
    as under tsc without strictNullChecks.
    """
    if t is ANY or t is NEVER or t is NULL or t is UNDEFINED:
        return True
    if isinstance(t, Union):
        for member in t.members:
            if not is_assignable(member, kind):
                return False
        return True
    if isinstance(t, Literal):
        return t.base.name == kind
    if isinstance(t, Primitive):
        return t.name == kind
    if isinstance(t, ArrayOf) or isinstance(t, Tuple):
        return kind == "array" or kind == "object"
    if isinstance(t, ObjectShape) or isinstance(t, FunctionSig):
        return kind == "object"
    return False


def is_any_or_unknown(t: Type) -> bool:
    return t is ANY or t is UNKNOWN


# ============================================================
# RENDERING
# ============================================================


def _format_number(value: float) -> str:
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _quote(value: str) -> str:
    out = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return '"' + out + '"'


def type_to_string(t: Type) -> str:
    """Render a type the way tsc prints it."""
    if isinstance(t, Primitive):
        return t.name
    if isinstance(t, Literal):
        if isinstance(t.value, bool):
            return "true" if t.value else "false"
        if isinstance(t.value, str):
            return _quote(t.value)
        return _format_number(t.value)
    if isinstance(t, ArrayOf):
        inner = type_to_string(t.element)
        if isinstance(t.element, Union) or isinstance(t.element, FunctionSig):
            inner = "(" + inner + ")"
        return inner + "[]"
    if isinstance(t, Tuple):
        return "[" + ", ".join(type_to_string(e) for e in t.elements) + "]"
    if isinstance(t, ObjectShape):
        if t.name is not None:
            return t.name
        parts: list[str] = []
        if t.index is not None:
            parts.append("[x: string]: " + type_to_string(t.index) + ";")
        for key, value in t.properties.items():
            parts.append(key + ": " + type_to_string(value) + ";")
        if len(parts) == 0:
            return "{}"
        return "{ " + " ".join(parts) + " }"
    if isinstance(t, FunctionSig):
        params = ", ".join(name + ": " + type_to_string(p) for name, p in t.params)
        return "(" + params + ") => " + type_to_string(t.ret)
    if isinstance(t, Union):
        return " | ".join(type_to_string(m) for m in t.members)
    return "?"
