"""
Tests for variable environments.
"""

import pytest

from loxpy import Token, TokenType, LoxRuntimeError
from loxpy.runtime import Environment, UNINITIALIZED


def name(text, line=1):
    return Token(TokenType.IDENTIFIER, text, None, line)


class TestDefineAndGet:
    """Test binding and lookup."""

    def test_define_then_get(self):
        env = Environment()
        env.define("a", 1.0)
        assert env.get(name("a")) == 1.0

    def test_redefine_replaces(self):
        env = Environment()
        env.define("a", 1.0)
        env.define("a", "two")
        assert env.get(name("a")) == "two"

    def test_nil_is_a_value(self):
        env = Environment()
        env.define("a", None)
        assert env.get(name("a")) is None

    def test_lookup_walks_outward(self):
        outer = Environment()
        outer.define("a", 1.0)
        inner = Environment(Environment(outer))
        assert inner.get(name("a")) == 1.0

    def test_inner_shadows_outer(self):
        outer = Environment()
        outer.define("a", 1.0)
        inner = Environment(outer)
        inner.define("a", 2.0)
        assert inner.get(name("a")) == 2.0
        assert outer.get(name("a")) == 1.0

    def test_undefined(self):
        env = Environment(Environment())
        with pytest.raises(LoxRuntimeError) as exc_info:
            env.get(name("missing", line=7))
        assert str(exc_info.value) == "Undefined variable 'missing'.\n[line 7]"
        assert exc_info.value.token.lexeme == "missing"

    def test_is_global(self):
        outer = Environment()
        assert outer.is_global
        assert not Environment(outer).is_global


class TestUninitialized:
    """Test declared-but-unassigned variables."""

    def test_reading_uninitialized_faults(self):
        env = Environment()
        env.define_uninitialized("a")
        assert env.values["a"] is UNINITIALIZED
        with pytest.raises(LoxRuntimeError, match="Variable 'a' is not initialized."):
            env.get(name("a"))

    def test_assignment_initializes(self):
        env = Environment()
        env.define_uninitialized("a")
        env.assign(name("a"), 3.0)
        assert env.get(name("a")) == 3.0

    def test_uninitialized_shadow_hides_outer(self):
        outer = Environment()
        outer.define("a", 1.0)
        inner = Environment(outer)
        inner.define_uninitialized("a")
        with pytest.raises(LoxRuntimeError, match="not initialized"):
            inner.get(name("a"))


class TestAssign:
    """Test assignment to existing bindings."""

    def test_assign_updates_innermost_binding(self):
        outer = Environment()
        outer.define("a", 1.0)
        middle = Environment(outer)
        middle.define("a", 2.0)
        inner = Environment(middle)

        inner.assign(name("a"), 3.0)

        assert middle.get(name("a")) == 3.0
        assert outer.get(name("a")) == 1.0
        assert "a" not in inner.values

    def test_assign_never_creates(self):
        env = Environment()
        with pytest.raises(LoxRuntimeError, match="Undefined variable 'b'."):
            env.assign(name("b"), 1.0)
        assert "b" not in env.values
