"""Constant pool: integer ids bound to strings, classes, methods and friends.

Each id is a slot that can be rebound. A later reference to the id resolves
to the newest binding; values already resolved are immutable and keep the
old binding.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Union

from graphdump.core.exceptions import PoolCycleDetected, UnresolvedPoolReference


class PoolObject:
    """Base class for structured pool values."""

    def describe(self) -> str:
        return str(self)


@dataclass(frozen=True)
class PoolRef(PoolObject):
    """A reference to another pool slot inside a composite value."""

    id: int


@dataclass(frozen=True)
class PoolClass(PoolObject):
    """A Java class, or an enum class with its constant names."""

    name: str
    enum_values: tuple[Any, ...] | None = None

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True)
class PoolEnum(PoolObject):
    """An enum constant: its class and ordinal."""

    enum_class: Any
    ordinal: int

    @property
    def name(self) -> str:
        values = getattr(self.enum_class, "enum_values", None)
        if values is not None and 0 <= self.ordinal < len(values):
            return str(values[self.ordinal])
        return str(self.ordinal)

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True)
class PoolSignature(PoolObject):
    """A method signature: argument type names and a return type name."""

    args: tuple[Any, ...]
    return_type: Any

    def describe(self) -> str:
        return f"({', '.join(str(a) for a in self.args)}){self.return_type}"


@dataclass(frozen=True)
class PoolMethod(PoolObject):
    """A method: declaring class, name, signature and modifiers."""

    declaring_class: Any
    name: Any
    signature: Any
    modifiers: int = 0
    code_length: int = -1

    def describe(self) -> str:
        declaring = describe_value(self.declaring_class)
        args = ""
        if isinstance(self.signature, PoolSignature):
            args = ", ".join(_simple_type(a) for a in self.signature.args)
        return f"{declaring.rsplit('.', 1)[-1]}.{self.name}({args})"


@dataclass(frozen=True)
class PoolField(PoolObject):
    """A field: declaring class, name, type name and modifiers."""

    field_class: Any
    name: Any
    type_name: Any
    modifiers: int = 0

    def describe(self) -> str:
        return f"{describe_value(self.field_class).rsplit('.', 1)[-1]}.{self.name}"


@dataclass(frozen=True)
class EdgeInfo:
    """Descriptor of one input or output slot of a node class."""

    name: str
    indirect: bool = False
    input_type: str | None = None


@dataclass(frozen=True)
class PoolNodeClass(PoolObject):
    """A compiler node class with its label template and edge descriptors."""

    node_class: Any
    name_template: str
    inputs: tuple[EdgeInfo, ...] = ()
    outputs: tuple[EdgeInfo, ...] = ()

    @property
    def name(self) -> str:
        return describe_value(self.node_class)

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True)
class SourceLocation:
    uri: str
    location: str
    line: int
    start: int = -1
    end: int = -1

    def describe(self) -> str:
        return f"{self.uri}:{self.line}"


@dataclass(frozen=True)
class PoolSourcePosition(PoolObject):
    """A bytecode position, its language-level locations, and its caller."""

    method: Any
    bci: int
    locations: tuple[SourceLocation, ...] = ()
    caller: Any = None

    def chain(self) -> list[PoolSourcePosition]:
        """This position followed by its callers, innermost first."""
        positions: list[PoolSourcePosition] = []
        current: Any = self
        while isinstance(current, PoolSourcePosition):
            positions.append(current)
            current = current.caller
        return positions

    def describe(self) -> str:
        return f"{describe_value(self.method)} @ {self.bci}"


@dataclass(frozen=True)
class PoolNodeRef(PoolObject):
    """A reference to a node by id, as a property value."""

    node_id: int
    node_class: Any

    def describe(self) -> str:
        return f"{self.node_id}"


PoolValue = Union[str, PoolObject, None]


def describe_value(value: Any) -> str:
    """Human-readable text for a property or pool value."""
    if isinstance(value, PoolObject):
        return value.describe()
    return str(value)


def _simple_type(name: Any) -> str:
    return describe_value(name).rsplit(".", 1)[-1]


def _has_refs(value: Any) -> bool:
    if isinstance(value, PoolRef):
        return True
    if isinstance(value, tuple):
        return any(_has_refs(item) for item in value)
    if isinstance(value, PoolObject) and hasattr(value, "__dataclass_fields__"):
        value_fields = fields(value)  # type: ignore[arg-type]
        return any(_has_refs(getattr(value, f.name)) for f in value_fields)
    return False


class ConstantPool:
    """Growable slot array mapping pool ids to values.

    One pool belongs to one open document; create a fresh pool per file.
    """

    def __init__(self) -> None:
        self._slots: dict[int, PoolValue] = {}
        self._composite: set[int] = set()

    def define(self, id: int, value: PoolValue) -> None:
        """Bind ``value`` to ``id``, replacing any earlier binding."""
        self._slots[id] = value
        if _has_refs(value):
            self._composite.add(id)
        else:
            self._composite.discard(id)

    def is_defined(self, id: int) -> bool:
        return id in self._slots

    def resolve(self, id: int, offset: int | None = None) -> PoolValue:
        """Return the current value of ``id`` with nested references resolved."""
        return self._resolve(id, (), offset)

    def resolve_value(self, value: Any, offset: int | None = None) -> Any:
        """Replace every PoolRef inside ``value`` by its current binding."""
        return self._substitute(value, (), offset)

    def reset(self) -> None:
        self._slots.clear()
        self._composite.clear()

    def _resolve(self, id: int, active: tuple[int, ...], offset: int | None) -> PoolValue:
        if id in active:
            path = " -> ".join(str(i) for i in (*active, id))
            raise PoolCycleDetected(f"Pool reference cycle {path}", offset)
        if id not in self._slots:
            raise UnresolvedPoolReference(f"Pool id {id} is not defined", offset)
        if id not in self._composite:
            return self._slots[id]
        return self._substitute(self._slots[id], (*active, id), offset)

    def _substitute(self, value: Any, active: tuple[int, ...], offset: int | None) -> Any:
        if isinstance(value, PoolRef):
            return self._resolve(value.id, active, offset)
        if isinstance(value, tuple):
            return tuple(self._substitute(item, active, offset) for item in value)
        if isinstance(value, PoolObject) and hasattr(value, "__dataclass_fields__"):
            changes = {}
            for f in fields(value):  # type: ignore[arg-type]
                current = getattr(value, f.name)
                resolved = self._substitute(current, active, offset)
                if resolved is not current:
                    changes[f.name] = resolved
            return replace(value, **changes) if changes else value  # type: ignore[type-var]
        return value

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, id: object) -> bool:
        return id in self._slots
