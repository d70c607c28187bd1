"""Row selection with conditions written in terms of the data's columns.

`subset_q` is the standard evaluation version: the condition arrives quoted
(or as an explicit promise) and is evaluated with `eval2`. `subset` is the
non-standard evaluation wrapper that makes its condition explicit in the
caller's scope first.
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping
from typing import Any

import numpy as np
import pandas as pd

from explicit_promise import LazyExpr
from explicit_promise.errors import PreconditionError
from explicit_promise.evaluation.data_mask import as_data_context
from explicit_promise.evaluation.evaluator import eval2
from explicit_promise.evaluation.quote_forms import caller_env, explicit
from explicit_promise.logger import get_logger
from explicit_promise.types.environment import Environment

logger = get_logger(__name__)


def _as_frame(data: Any) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, Mapping):
        return pd.DataFrame(dict(data))
    data = as_data_context(data)
    if not isinstance(data, pd.DataFrame):
        raise PreconditionError(f"Cannot select rows of {type(data).__name__}")
    return data


def _check_logical(values: np.ndarray) -> None:
    # Conditions must be logical or numeric; missing values are allowed
    if values.dtype.kind in "biuf":
        return
    if values.dtype.kind == "O" and all(
        v is None or v is pd.NA or isinstance(v, (bool, np.bool_, numbers.Number))
        for v in values
    ):
        return
    raise PreconditionError(
        f"Condition must be logical or numeric, got values of dtype {values.dtype}"
    )


def subset_q(data: Any, cond: LazyExpr, env: Environment | None = None) -> pd.DataFrame:
    """Rows of `data` for which `cond` is true; missing results count as false."""
    frame = _as_frame(data)
    if env is None:
        env = caller_env()
    r = eval2(cond, frame, env)

    if np.ndim(r) == 0:
        r = np.repeat(r, len(frame))
    values = np.asarray(r)
    if values.shape != (len(frame),):
        raise PreconditionError(
            f"Condition must give one value per row ({len(frame)}), got shape {values.shape}"
        )
    _check_logical(values)
    keep = pd.Series(values, index=frame.index)
    keep = keep.where(keep.notna(), False).astype(bool)
    logger.debug("subset kept %d of %d rows", int(keep.sum()), len(frame))
    return frame.loc[keep.to_numpy()]


def subset(data: Any, cond: LazyExpr) -> pd.DataFrame:
    """Like subset_q, with names in `cond` not found in the data looked up
    where subset() was called.
    """
    cond = explicit(cond, caller_env())
    return subset_q(data, cond)
