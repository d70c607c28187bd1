"""The explicit promise: an unevaluated expression paired with its scope."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Any

from explicit_promise.types.environment import Environment


@dataclass(frozen=True, eq=False)
class ExplicitPromise:
    """An expression together with the environment it was written in.

    Equivalent to a one-sided formula: `expression` is the right hand side,
    `env` is where names in it are looked up. Both fields are fixed at
    construction; the environment is shared, not copied.
    """

    expression: ast.expr
    env: Environment

    # Tag checked by is_explicit_promise; other (expression, env) types may set it too
    __explicit_promise__ = True

    def __str__(self) -> str:
        return "~" + ast.unparse(self.expression)

    def __repr__(self) -> str:
        return f"<ExplicitPromise {self} in {self.env}>"


def is_explicit_promise(x: Any) -> bool:
    """True if `x` carries the explicit promise shape, however it was built.

    The shape is the tag on the type plus an `expression` and an `env`.
    """
    if getattr(type(x), "__explicit_promise__", False) is not True:
        return False
    return hasattr(x, "expression") and hasattr(x, "env")
