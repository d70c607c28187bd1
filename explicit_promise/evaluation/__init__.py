from .quote_forms import caller_env, explicit, is_atomic, is_call, is_name, quote
from .data_mask import DataMask, as_data_context
from .evaluator import eval2, evaluate, has_nested_scope
from .subset import subset, subset_q

__all__ = [
    "DataMask",
    "as_data_context",
    "caller_env",
    "eval2",
    "evaluate",
    "explicit",
    "has_nested_scope",
    "is_atomic",
    "is_call",
    "is_name",
    "quote",
    "subset",
    "subset_q",
]
