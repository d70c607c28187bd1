"""Name resolution for evaluation against a data context.

A DataMask is the locals mapping handed to `eval`. Names resolve against,
in order: names bound by the expression itself (`:=`), the fields of the
data, then the enclosing Environment. Lookups that fail raise
NameResolutionError, which is not a KeyError, so `eval` never falls back to
its globals for a name the mask does not know.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any, Iterator, Optional

import numpy as np
import pandas as pd

from explicit_promise.errors import NameResolutionError, PreconditionError
from explicit_promise.types.environment import Environment


def as_data_context(data: Any) -> Any:
    """Normalise `data` into something with field lookup by name.

    Environments and mapping-like values (dicts, DataFrames, Series) are used
    as they are. A sequence of records or a numpy structured array becomes a
    DataFrame.
    """
    if isinstance(data, Environment):
        return data
    if isinstance(data, np.ndarray):
        if data.dtype.names is None:
            raise PreconditionError("numpy data must be a structured array with named fields")
        return pd.DataFrame(data)
    if hasattr(data, "keys") and hasattr(data, "__getitem__"):
        return data
    if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        if all(isinstance(row, Mapping) for row in data):
            return pd.DataFrame.from_records(list(data))
    raise PreconditionError(
        f"data must be a mapping, a DataFrame, a record set or an Environment, "
        f"not {type(data).__name__}"
    )


def _has_field(data: Any, name: str) -> bool:
    if isinstance(data, Environment):
        return name in data
    if isinstance(data, pd.DataFrame):
        return name in data.columns
    try:
        return name in data.keys()
    except TypeError:
        return False


def _get_field(data: Any, name: str) -> Any:
    if isinstance(data, Environment):
        return data.lookup(name)
    return data[name]


def _field_names(data: Any) -> list[str]:
    if isinstance(data, Environment):
        return list(data.flatten())
    return [k for k in data.keys() if isinstance(k, str)]


class DataMask(MutableMapping):
    """Layer a data context over an Environment for name lookup."""

    def __init__(self, data: Any, env: Environment):
        self.data: Optional[Any] = None if data is None else as_data_context(data)
        self.env: Environment = env
        # Bindings made by the expression; never written back to data or env
        self._overlay: dict[str, Any] = {}

    def __getitem__(self, name: str) -> Any:
        if name in self._overlay:
            return self._overlay[name]
        if self.data is not None and _has_field(self.data, name):
            return _get_field(self.data, name)
        env = self.env.find(name)
        if env is None:
            raise NameResolutionError(f"object '{name}' not found", name=name)
        return env.vars[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._overlay[name] = value

    def __delitem__(self, name: str) -> None:
        del self._overlay[name]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        if name in self._overlay:
            return True
        if self.data is not None and _has_field(self.data, name):
            return True
        return name in self.env

    def __iter__(self) -> Iterator[str]:
        return iter(self.flatten())

    def __len__(self) -> int:
        return len(self.flatten())

    def flatten(self) -> dict[str, Any]:
        """All visible bindings as one dict, data shadowing the environment."""
        flat = self.env.flatten()
        if self.data is not None:
            for name in _field_names(self.data):
                flat[name] = _get_field(self.data, name)
        flat.update(self._overlay)
        return flat

    def __repr__(self) -> str:
        fields = _field_names(self.data) if self.data is not None else []
        return f"<DataMask fields={fields} env={self.env}>"
