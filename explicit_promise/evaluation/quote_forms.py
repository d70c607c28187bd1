"""Quoting: turning source text into expressions and capturing scopes.

Python evaluates call arguments before the callee runs, so the expression to
defer is handed over as source text or as an `ast` node. The scope is captured
reflectively from the calling frame.
"""

from __future__ import annotations

import ast
import sys
from typing import Any

import numpy as np
import pandas as pd

from explicit_promise import LazyExpr
from explicit_promise.errors import ExpressionSyntaxError, PreconditionError
from explicit_promise.logger import get_logger
from explicit_promise.types.environment import Environment
from explicit_promise.types.promise import ExplicitPromise, is_explicit_promise

logger = get_logger(__name__)

_SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes)
_VECTOR_TYPES = (np.ndarray, np.generic, pd.Series, pd.Index, pd.Categorical)


def is_atomic(x: Any) -> bool:
    """True for literal values and vectors, which evaluate to themselves."""
    return isinstance(x, _SCALAR_TYPES) or isinstance(x, _VECTOR_TYPES)


def is_name(x: Any) -> bool:
    return isinstance(x, ast.Name)


def is_call(x: Any) -> bool:
    """True for compound expressions: any expression node but a name or a constant."""
    return isinstance(x, ast.expr) and not isinstance(x, (ast.Name, ast.Constant))


def quote(source: str | ast.AST) -> ast.expr:
    """Parse `source` into an expression node without evaluating it."""
    if isinstance(source, ast.Expression):
        return source.body
    if isinstance(source, ast.expr):
        return source
    if not isinstance(source, str):
        raise PreconditionError(
            f"Cannot quote a value of type {type(source).__name__}; pass source text"
        )
    try:
        tree = ast.parse(source.strip(), filename="<quote>", mode="eval")
    except SyntaxError as exc:
        raise ExpressionSyntaxError(f"Cannot parse expression {source!r}: {exc.msg}") from exc
    return tree.body


def caller_env(depth: int = 1) -> Environment:
    """Environment of the frame `depth` levels above the function calling this.

    caller_env() inside `f` is the scope `f` was called from.
    """
    if depth < 0:
        raise PreconditionError("depth must not be negative")
    # 0: caller_env, 1: the function asking, 2: its caller
    frame = sys._getframe(depth + 1)
    try:
        return Environment.from_frame(frame)
    finally:
        del frame


def explicit(expr: LazyExpr, env: Environment | None = None) -> ExplicitPromise:
    """Make an expression explicit: pair it with the scope it belongs to.

    `expr` is source text or an `ast` node, as written at the call site.
    Atomic values are quoted as constants and an explicit promise is returned
    unchanged. `env` defaults to the scope of the function calling explicit().
    """
    if is_explicit_promise(expr):
        return expr

    if isinstance(expr, (str, ast.AST)):
        expression = quote(expr)
    elif is_atomic(expr):
        expression = ast.Constant(value=expr)
    else:
        raise PreconditionError(
            f"Cannot make a value of type {type(expr).__name__} explicit"
        )

    if env is None:
        frame = sys._getframe(1)
        try:
            env = Environment.from_frame(frame)
        finally:
            del frame
    else:
        env = Environment.coerce(env)

    promise = ExplicitPromise(expression, env)
    logger.debug("captured %s in %s", promise, env)
    return promise
