"""Unit tests for the constant pool."""

import pytest

from graphdump.bgv.pool import (
    ConstantPool,
    PoolClass,
    PoolEnum,
    PoolMethod,
    PoolRef,
    PoolSignature,
    PoolSourcePosition,
    SourceLocation,
    describe_value,
)
from graphdump.core.exceptions import PoolCycleDetected, UnresolvedPoolReference


def make_method(declaring_class: object = "Fib", name: str = "fib") -> PoolMethod:
    """Create a method whose declaring class may be a PoolRef."""
    return PoolMethod(declaring_class, name, PoolSignature(("int",), "int"))


class TestConstantPool:
    """Tests for define/resolve."""

    def test_resolve_defined(self) -> None:
        pool = ConstantPool()
        pool.define(3, "fib")
        assert pool.resolve(3) == "fib"
        assert 3 in pool
        assert len(pool) == 1

    def test_rebinding_returns_newest_value(self) -> None:
        pool = ConstantPool()
        pool.define(0, "first")
        pool.define(0, "second")
        assert pool.resolve(0) == "second"

    def test_rebinding_does_not_change_resolved_values(self) -> None:
        pool = ConstantPool()
        pool.define(1, PoolClass("Fib"))
        pool.define(2, make_method(PoolRef(1)))
        resolved = pool.resolve(2)

        pool.define(1, PoolClass("Other"))

        assert isinstance(resolved, PoolMethod)
        assert resolved.declaring_class == PoolClass("Fib")
        assert pool.resolve(2).declaring_class == PoolClass("Other")

    def test_unresolved_reference(self) -> None:
        pool = ConstantPool()
        with pytest.raises(UnresolvedPoolReference) as exc_info:
            pool.resolve(42, offset=17)

        assert "42" in str(exc_info.value)
        assert exc_info.value.offset == 17

    def test_nested_references_resolve_recursively(self) -> None:
        pool = ConstantPool()
        pool.define(1, "Fib")
        pool.define(2, PoolClass("Fib"))
        pool.define(3, make_method(PoolRef(2), "fib"))
        pool.define(4, PoolSourcePosition(PoolRef(3), 12))

        position = pool.resolve(4)

        assert isinstance(position, PoolSourcePosition)
        assert position.method.describe() == "Fib.fib(int)"

    def test_self_reference_is_a_cycle(self) -> None:
        pool = ConstantPool()
        pool.define(5, make_method(PoolRef(5)))
        with pytest.raises(PoolCycleDetected):
            pool.resolve(5)

    def test_transitive_cycle(self) -> None:
        pool = ConstantPool()
        pool.define(1, make_method(PoolRef(2)))
        pool.define(2, make_method(PoolRef(1)))
        with pytest.raises(PoolCycleDetected) as exc_info:
            pool.resolve(1)

        assert "1 -> 2 -> 1" in str(exc_info.value)

    def test_shared_reference_is_not_a_cycle(self) -> None:
        """Two fields naming the same slot are fine."""
        pool = ConstantPool()
        pool.define(1, "int")
        pool.define(2, PoolSignature((PoolRef(1), PoolRef(1)), PoolRef(1)))
        signature = pool.resolve(2)
        assert signature == PoolSignature(("int", "int"), "int")

    def test_reset(self) -> None:
        pool = ConstantPool()
        pool.define(0, "x")
        pool.reset()
        assert not pool.is_defined(0)
        with pytest.raises(UnresolvedPoolReference):
            pool.resolve(0)


class TestDescribe:
    """Tests for human-readable pool values."""

    def test_method(self) -> None:
        assert make_method().describe() == "Fib.fib(int)"

    def test_method_with_qualified_class(self) -> None:
        signature = PoolSignature(("int", "long"), "int")
        method = PoolMethod(PoolClass("com.example.Fib"), "fib", signature)
        assert method.describe() == "Fib.fib(int, long)"

    def test_enum_uses_class_values(self) -> None:
        enum_class = PoolClass("InputType", ("Value", "State"))
        assert PoolEnum(enum_class, 1).name == "State"
        assert PoolEnum(enum_class, 7).name == "7"

    def test_source_position_chain(self) -> None:
        outer = PoolSourcePosition(make_method(name="main"), 3)
        location = SourceLocation("fib.js", "fib.js:3", 3)
        inner = PoolSourcePosition(make_method(), 12, (location,), outer)
        assert inner.chain() == [inner, outer]
        assert inner.locations[0].describe() == "fib.js:3"

    def test_describe_value_plain(self) -> None:
        assert describe_value("x") == "x"
        assert describe_value(3) == "3"
        assert describe_value(PoolClass("a.b.C")) == "a.b.C"
