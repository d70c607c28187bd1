# Core type aliases for explicit_promise.
# Expressions are Python `ast` nodes; scopes are Environment chains.
#
# Naming guidance:
# - Expr:     a quoted expression, as produced by `quote`.
# - LazyExpr: anything `explicit` and `eval2` accept: source text, an `ast`
#             node, an explicit promise, or an atomic value.
# The aliases are defined before the submodules are imported, which import them.

import ast
from typing import Any

Expr = ast.expr
LazyExpr = Any

from explicit_promise.errors import (  # noqa: E402
    ExplicitPromiseError,
    ExpressionSyntaxError,
    NameResolutionError,
    PreconditionError,
)
from explicit_promise.types import Environment, ExplicitPromise, is_explicit_promise  # noqa: E402
from explicit_promise.evaluation import (  # noqa: E402
    DataMask,
    caller_env,
    eval2,
    explicit,
    is_atomic,
    is_call,
    is_name,
    quote,
    subset,
    subset_q,
)

# A one-sided formula and an explicit promise are the same shape
is_formula = is_explicit_promise

__version__ = "0.1.0"

__all__ = [
    "DataMask",
    "Environment",
    "ExplicitPromise",
    "ExplicitPromiseError",
    "Expr",
    "ExpressionSyntaxError",
    "LazyExpr",
    "NameResolutionError",
    "PreconditionError",
    "caller_env",
    "eval2",
    "explicit",
    "is_atomic",
    "is_call",
    "is_explicit_promise",
    "is_formula",
    "is_name",
    "quote",
    "subset",
    "subset_q",
]
