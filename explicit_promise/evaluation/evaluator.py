"""Deferred evaluation of quoted expressions and explicit promises."""

from __future__ import annotations

import ast
import copy
import logging
import sys
from typing import Any

from explicit_promise import LazyExpr
from explicit_promise.errors import NameResolutionError, PreconditionError
from explicit_promise.evaluation.data_mask import DataMask
from explicit_promise.evaluation.quote_forms import is_atomic, is_call, is_name
from explicit_promise.logger import get_logger
from explicit_promise.types.environment import Environment
from explicit_promise.types.promise import is_explicit_promise

logger = get_logger(__name__)


def eval2(x: LazyExpr, data: Any = None, env: Environment | None = None) -> Any:
    """Evaluate a quoted expression or an explicit promise.

    An explicit promise brings its own environment, replacing `env`. Atomic
    values are returned unchanged. Otherwise `x` must be a compound expression
    or a name; it is evaluated with names looked up in `data` first, then in
    `env`, which defaults to the scope of the function calling eval2().
    """
    if is_explicit_promise(x):
        env = x.env
        x = x.expression

    if isinstance(x, ast.Expression):
        x = x.body
    if isinstance(x, ast.Constant):
        return x.value
    if is_atomic(x):
        return x
    if not (is_call(x) or is_name(x)):
        raise PreconditionError(
            f"eval2 expects a literal, a name, a quoted expression or an explicit "
            f"promise, not {type(x).__name__}"
        )

    if env is None:
        frame = sys._getframe(1)
        try:
            env = Environment.from_frame(frame)
        finally:
            del frame
    else:
        env = Environment.coerce(env)

    return evaluate(x, DataMask(data, env))


_FILENAME = "<eval2>"

_NESTED_SCOPES = (ast.Lambda, ast.GeneratorExp, ast.ListComp, ast.SetComp, ast.DictComp)


def has_nested_scope(expr: ast.AST) -> bool:
    """True if `expr` contains a lambda, generator expression or comprehension."""
    return any(isinstance(node, _NESTED_SCOPES) for node in ast.walk(expr))


def _raised_in_expression(exc: BaseException) -> bool:
    tb = exc.__traceback__
    if tb is None:
        return False
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_code.co_filename == _FILENAME


def evaluate(expr: ast.expr, mask: DataMask) -> Any:
    """Compile and run `expr` with `mask` as its local namespace.

    Nested scopes in the expression (lambdas, generator expressions,
    comprehensions) cannot see a locals mapping, so they get a flattened copy
    of the mask as globals. Unbound names in those scopes are reported as
    NameResolutionError; NameErrors raised by code the expression calls
    propagate unchanged.
    """
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("evaluating %s against %r", ast.unparse(expr), mask)
    tree = ast.fix_missing_locations(ast.Expression(body=copy.deepcopy(expr)))
    code = compile(tree, filename=_FILENAME, mode="eval")
    if has_nested_scope(expr):
        globals_ = mask.flatten()
        globals_.setdefault("__builtins__", {})
    else:
        globals_ = {"__builtins__": {}}
    try:
        return eval(code, globals_, mask)
    except NameResolutionError:
        raise
    except NameError as exc:
        if not _raised_in_expression(exc):
            raise
        name = getattr(exc, "name", None)
        raise NameResolutionError(f"object '{name}' not found", name=name) from exc
