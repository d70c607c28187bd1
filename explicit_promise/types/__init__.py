from .environment import Environment
from .promise import ExplicitPromise, is_explicit_promise

__all__ = ["Environment", "ExplicitPromise", "is_explicit_promise"]
