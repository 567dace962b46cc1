"""
Tests for the once-only evaluation guard.

These tests verify:
    - Each bound expression runs exactly once, in declared order
    - Logical names are rewritten to fresh identifiers
    - Duplicate names fail at construction
    - Unbound names fail only when the code runs
"""

import itertools
import logging

import pytest
from cgkit.errors import DuplicateNameError, UnboundNameError
from cgkit.expressions import (
    BinaryExpression,
    BinaryOperator,
    Block,
    Let,
    Literal,
    Name,
    Ref,
    call,
)
from cgkit.identifiers import Identifier, fresh
from cgkit.interpreter import evaluate
from cgkit.once_only import BindingSet, OnceOnly, once_only, substitute


class Counter:
    """Side-effecting expression source that records its calls."""

    def __init__(self, name, log):
        self.name = name
        self.log = log
        self.count = 0

    def __call__(self):
        self.count += 1
        self.log.append(self.name)
        return self.count * 10


def add(*exprs):
    total = exprs[0]
    for e in exprs[1:]:
        total = BinaryExpression(operator=BinaryOperator.ADD, left=total, right=e)
    return total


class TestSingleEvaluation:
    """Test the exactly-once guarantee."""

    def test_zero_one_and_five_references(self):
        """Each counter is incremented once, in declared order."""
        log = []
        a, b, c = Counter("a", log), Counter("b", log), Counter("c", log)
        body = Block((
            add(Name("b")),
            add(*[Name("c")] * 5),
        ))

        code = once_only([("a", call(a)), ("b", call(b)), ("c", call(c))], body)
        assert log == []

        result = evaluate(code)
        assert (a.count, b.count, c.count) == (1, 1, 1)
        assert log == ["a", "b", "c"]
        assert result == 50

    def test_running_twice_evaluates_twice(self):
        """Each execution evaluates each expression once."""
        log = []
        a = Counter("a", log)
        code = once_only([("x", call(a))], add(Name("x"), Name("x")))
        assert evaluate(code) == 20
        assert evaluate(code) == 40
        assert a.count == 2

    def test_mapping_bindings_keep_insertion_order(self):
        log = []
        code = once_only(
            {"second": call(Counter("second", log)), "first": call(Counter("first", log))},
            Literal(None),
        )
        evaluate(code)
        assert log == ["second", "first"]

    def test_empty_binding_set(self):
        code = once_only([], Literal(7))
        assert code.bindings == ()
        assert evaluate(code) == 7


class TestHygiene:
    """Test capture avoidance."""

    def test_body_names_become_refs(self):
        code = once_only([("x", Literal(1))], add(Name("x"), Name("x")))
        ident = code.bindings[0][0]
        assert code.body == add(Ref(ident), Ref(ident))

    def test_binding_identifier_uses_name_as_hint(self):
        code = once_only([("x", Literal(1))], Name("x"))
        assert code.bindings[0][0].hint == "x"

    def test_caller_expression_not_rewritten(self):
        """Names inside the caller's expression refer to the caller's scope."""
        code = once_only([("x", add(Name("x"), Literal(1)))], Name("x"))
        assert code.bindings[0][1] == add(Name("x"), Literal(1))
        assert evaluate(code, {"x": 41}) == 42

    def test_no_capture_of_surrounding_name(self):
        """A free name shared with the surrounding program still resolves outside."""
        code = once_only([("y", Literal(100))], add(Name("y"), Name("z")))
        assert evaluate(code, {"y": -1, "z": 5}) == 105

    def test_nested_expansions_do_not_collide(self):
        """Two expansions with the same logical name use different identifiers."""
        inner = once_only([("x", Literal(2))], add(Name("x"), Name("x")))
        outer = once_only([("x", Literal(10))], add(Name("x"), inner))
        assert outer.bindings[0][0] != inner.bindings[0][0]
        assert evaluate(outer) == 14

    def test_callable_body_receives_refs(self):
        seen = {}

        def body(refs):
            seen.update(refs)
            return add(refs["x"], Name("y"))

        code = once_only([("x", Literal(1)), ("y", Literal(2))], body)
        assert set(seen) == {"x", "y"}
        assert seen["x"] == Ref(code.bindings[0][0])
        assert evaluate(code) == 3


class TestErrors:
    """Test error conditions."""

    def test_duplicate_name(self):
        with pytest.raises(DuplicateNameError) as exc_info:
            once_only([("x", Literal(1)), ("x", Literal(2))], Name("x"))
        assert exc_info.value.name == "x"

    def test_duplicate_name_fails_before_body(self):
        """The body builder is never called for an invalid binding set."""
        called = []
        with pytest.raises(DuplicateNameError):
            once_only([("x", Literal(1)), ("x", Literal(2))], lambda refs: called.append(refs))
        assert called == []

    def test_unbound_name_is_not_a_construction_error(self):
        code = once_only([("x", Literal(1))], Name("missing"))
        assert code.body == Name("missing")

    def test_unbound_name_surfaces_at_execution(self):
        code = once_only([("x", Literal(1))], Name("missing"))
        with pytest.raises(UnboundNameError):
            evaluate(code)

    def test_non_expression_binding(self):
        with pytest.raises(TypeError):
            once_only([("x", 1)], Name("x"))

    def test_non_expression_body(self):
        with pytest.raises(TypeError):
            once_only([("x", Literal(1))], "x + x")


class TestBindingSet:
    """Test Phase A."""

    def test_mints_two_distinct_identifiers_per_name(self):
        bs = BindingSet.build([("a", Literal(1)), ("b", Literal(2))])
        idents = [i for e in bs.entries for i in (e.binding, e.holder)]
        assert len(set(idents)) == 4

    def test_names_keep_order(self):
        bs = BindingSet.build([("b", Literal(1)), ("a", Literal(2))])
        assert bs.names == ("b", "a")

    def test_holders_pair_binding_with_original_expression(self):
        expr = Literal(3)
        bs = BindingSet.build([("a", expr)])
        entry = bs.entries[0]
        assert bs.holders() == {entry.holder: (entry.binding, expr)}


class TestOnceOnly:
    """Test the reusable wrapper."""

    def test_fresh_identifiers_per_wrap(self):
        wrapper = OnceOnly([("x", Literal(1))])
        first = wrapper.wrap(Name("x"))
        second = wrapper(Name("x"))
        assert first.bindings[0][0] != second.bindings[0][0]

    def test_duplicates_checked_on_creation(self):
        with pytest.raises(DuplicateNameError):
            OnceOnly([("x", Literal(1)), ("x", Literal(1))])

    def test_accepts_generator_of_pairs(self):
        counter = itertools.count(1)
        wrapper = OnceOnly((name, call(lambda: next(counter))) for name in "ab")
        assert evaluate(wrapper.wrap(add(Name("a"), Name("b")))) == 3


class TestSubstitute:
    """Test substitution."""

    def test_rewrites_inside_nested_let(self):
        inner = fresh("i")
        target = Ref(fresh("t"))
        expr = Let(bindings=((inner, Name("x")),), body=Name("x"))
        assert substitute(expr, {"x": target}) == Let(bindings=((inner, target),), body=target)

    def test_unknown_names_untouched(self):
        assert substitute(Name("q"), {}) == Name("q")


class TestLogging:
    """Test debug logging of expansions."""

    def test_debug_record_when_enabled(self, caplog):
        caplog.set_level(logging.DEBUG, logger="cgkit.once_only")
        code = once_only([("x", Literal(1))], Name("x"))
        assert str(code.bindings[0][0]) in caplog.text

    def test_message_not_built_when_disabled(self, caplog, monkeypatch):
        """Identifiers are not formatted unless DEBUG is enabled."""
        rendered = []
        monkeypatch.setattr(Identifier, "__str__", lambda self: rendered.append(self) or "id")
        caplog.set_level(logging.WARNING, logger="cgkit.once_only")
        once_only([("x", Literal(1)), ("y", Literal(2))], Name("x"))
        assert rendered == []
        assert caplog.records == []
