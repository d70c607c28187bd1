import ast

import numpy as np
import pandas as pd
import pytest

from explicit_promise import (
    DataMask,
    Environment,
    NameResolutionError,
    PreconditionError,
    eval2,
    explicit,
    quote,
)
from explicit_promise.evaluation import has_nested_scope

# -----------------------------------------------------
# Literals
# -----------------------------------------------------

@pytest.mark.parametrize("value", [1, 2.5, 1 + 2j, "mpg > 31", True, False, None, b"raw"])
def test_literals_evaluate_to_themselves(value):
    assert eval2(value) == value


def test_vectors_are_returned_unchanged(records):
    arr = np.array([1, 2, 3])
    assert eval2(arr) is arr
    column = records["mpg"]
    assert eval2(column) is column
    assert eval2(np.float64(1.5)) == 1.5


def test_quoted_constant_is_unwrapped():
    assert eval2(quote("5")) == 5
    assert eval2(quote("'text'")) == "text"


def test_literal_short_circuits_data_and_env():
    # No lookup happens, so a bad env is never looked at
    assert eval2(7, data=None, env=object()) == 7

# -----------------------------------------------------
# Names and expressions
# -----------------------------------------------------

def test_name_resolves_in_env(env):
    assert eval2(quote("x"), env=env) == 2


def test_expression_resolves_in_env(env):
    assert eval2(quote("x * 10 + y"), env=env) == 23


def test_default_env_is_the_callers_scope():
    z = 4
    assert eval2(quote("z * 2")) == 8


def test_env_can_be_a_plain_mapping():
    assert eval2(quote("a + b"), env={"a": 1, "b": 2}) == 3
    assert eval2(quote("len(items)"), env={"items": [1, 2]}) == 2


def test_expression_wrapper_is_unwrapped(env):
    assert eval2(ast.parse("x + y", mode="eval"), env=env) == 5


def test_hand_built_nodes_without_locations(env):
    node = ast.BinOp(left=ast.Name(id="x", ctx=ast.Load()), op=ast.Add(), right=ast.Constant(value=1))
    assert eval2(node, env=env) == 3
    assert eval2(node, env={"x": 9}) == 10

# -----------------------------------------------------
# Data context
# -----------------------------------------------------

def test_data_takes_precedence_over_env(env):
    assert eval2(quote("x"), {"x": "data"}, {"x": "env"}) == "data"
    assert eval2(quote("x + 1"), {"x": 40}, env) == 41


def test_names_missing_from_data_fall_back_to_env(env):
    assert eval2(quote("x + y"), {"x": 10}, env) == 13


def test_dataframe_columns_shadow_env(records, env):
    result = eval2(quote("mpg > 31"), records, env)
    assert list(result) == [False, False, True]


def test_record_set_is_a_data_context():
    rows = [{"mpg": 21}, {"mpg": 30}, {"mpg": 32}]
    assert list(eval2(quote("mpg > 31"), rows, {})) == [False, False, True]


def test_structured_array_is_a_data_context():
    arr = np.array([(21, 6), (32, 4)], dtype=[("mpg", "i8"), ("cyl", "i8")])
    assert list(eval2(quote("mpg * cyl"), arr, {})) == [126, 128]


def test_environment_as_data(env):
    data = Environment({"a": 1})
    assert eval2(quote("a + x"), data, env) == 3


def test_series_as_data(records):
    row = records.loc["Honda Civic"]
    assert eval2(quote("mpg / cyl"), row, {}) == 7.5


def test_nested_scopes_see_data_and_env(records):
    result = eval2(quote("list(map(lambda v: v + offset, mpg))"), records, {"offset": 1})
    assert result == [22, 31, 33]


def test_assignment_expressions_do_not_touch_env():
    scope = {}
    assert eval2(quote("(k := 3) + k"), env=scope) == 6
    assert scope == {}

# -----------------------------------------------------
# Explicit promises
# -----------------------------------------------------

def test_promise_environment_replaces_env():
    p = explicit("x", env={"x": 1})
    assert eval2(p, env={"x": 2}) == 1


def test_promise_with_data(records):
    def make():
        return explicit("mpg > 31")

    assert list(eval2(make(), records)) == [False, False, True]


def test_promise_sum_from_constructing_scope():
    def make():
        x, y = 2, 3
        return explicit("x + y")

    assert eval2(make()) == 5


def test_tagged_third_party_promise():
    class Formula:
        __explicit_promise__ = True

        def __init__(self, expression, env):
            self.expression = expression
            self.env = env

    f = Formula(quote("a * 2"), Environment.from_mapping({"a": 4}))
    assert eval2(f) == 8


def test_promise_of_a_constant():
    assert eval2(explicit(42)) == 42

# -----------------------------------------------------
# Errors
# -----------------------------------------------------

def test_unbound_name_raises(records):
    with pytest.raises(NameResolutionError) as excinfo:
        eval2(quote("hp > 100"), records, {})
    assert excinfo.value.name == "hp"


def test_unbound_name_is_a_name_error(env):
    with pytest.raises(NameError):
        eval2(quote("missing"), env=env)


def test_builtins_are_not_visible_in_a_bare_environment():
    with pytest.raises(NameResolutionError):
        eval2(quote("len(v)"), env=Environment({"v": [1]}))


@pytest.mark.parametrize("value", [[1, 2], (1, 2), {"a": 1}, {1, 2}, object()])
def test_non_literal_non_expression_raises(value):
    with pytest.raises(PreconditionError):
        eval2(value)


def test_precondition_error_is_a_type_error():
    with pytest.raises(TypeError):
        eval2([1, 2, 3])


def test_bad_env_raises():
    with pytest.raises(PreconditionError):
        eval2(quote("x"), env=5)


def test_bad_data_raises():
    with pytest.raises(PreconditionError):
        eval2(quote("x"), data=42, env={"x": 1})
    with pytest.raises(PreconditionError):
        eval2(quote("x"), data=np.arange(3), env={"x": 1})


def test_errors_from_the_expression_propagate():
    with pytest.raises(ZeroDivisionError):
        eval2(quote("1 / zero"), {"zero": 0}, {})

    class Boom(Exception):
        pass

    def explode():
        raise Boom()

    with pytest.raises(Boom):
        eval2(quote("explode()"), env={"explode": explode})


def test_name_errors_inside_called_code_are_not_converted():
    def broken():
        return undefined_global  # noqa: F821

    with pytest.raises(NameError) as excinfo:
        eval2(quote("broken()"), env={"broken": broken})
    assert not isinstance(excinfo.value, NameResolutionError)


@pytest.mark.parametrize(
    "source",
    [
        "sum(v for v in mpg if v > limit)",
        "[v > limit for v in mpg]",
        "{v: limit for v in mpg}",
        "list(map(lambda v: v > limit, mpg))",
    ],
)
def test_unbound_name_in_nested_scope_raises(records, source):
    with pytest.raises(NameResolutionError) as excinfo:
        eval2(quote(source), records, {})
    assert excinfo.value.name == "limit"


def test_name_errors_from_called_code_in_nested_scope_pass_through():
    def broken(v):
        return undefined_global  # noqa: F821

    with pytest.raises(NameError) as excinfo:
        eval2(quote("[broken(v) for v in items]"), env={"items": [1], "broken": broken})
    assert not isinstance(excinfo.value, NameResolutionError)

# -----------------------------------------------------
# Nested scopes
# -----------------------------------------------------

def test_has_nested_scope():
    assert not has_nested_scope(quote("mpg > 31"))
    assert not has_nested_scope(quote("f(x, y=2)[0]"))
    assert has_nested_scope(quote("lambda v: v"))
    assert has_nested_scope(quote("sum(v for v in mpg)"))
    assert has_nested_scope(quote("f([v for v in mpg])"))
    assert has_nested_scope(quote("{k: v for k, v in pairs}"))


def test_flat_expressions_do_not_copy_bindings(monkeypatch, records):
    def no_flatten(self):
        raise AssertionError("bindings were copied")

    monkeypatch.setattr(DataMask, "flatten", no_flatten)
    assert list(eval2(quote("mpg > 31"), records, {})) == [False, False, True]
    assert eval2(quote("abs(x)"), env={"x": -3}) == 3
