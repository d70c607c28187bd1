"""Scopes for explicit_promise.

An Environment binds names to Python values and links to an enclosing scope
via `outer`. Environments captured from a Python frame form the chain
locals -> globals -> builtins, so an expression evaluated against one sees
the same names the code at that frame saw.
"""

from __future__ import annotations

import builtins
from io import StringIO
from types import FrameType
from typing import Any, Iterator, Mapping, MutableMapping, Optional

from explicit_promise.config import CAPTURE_SNAPSHOT, get_capture_mode
from explicit_promise.errors import NameResolutionError, PreconditionError


class Environment:
    """Hierarchical mapping from names to values."""

    __slots__ = ("vars", "outer", "label")

    def __init__(
        self,
        vars: Optional[Mapping[str, Any]] = None,
        outer: Optional[Environment] = None,
        label: str | None = None,
    ):
        # Frame locals may be a read-through proxy rather than a dict
        self.vars: Mapping[str, Any] = {} if vars is None else vars
        self.outer: Environment | None = outer
        self.label: str | None = label

    # --- Construction ---
    @classmethod
    def base(cls) -> Environment:
        """A root environment holding only the builtins."""
        return cls(builtins.__dict__, label="builtins")

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], outer: Optional[Environment] = None
    ) -> Environment:
        """Wrap a plain mapping, enclosed by the builtins unless `outer` is given."""
        if outer is None:
            outer = cls.base()
        return cls(mapping, outer)

    @classmethod
    def from_frame(cls, frame: FrameType) -> Environment:
        """Capture the scope chain of a Python frame."""
        builtins_env = cls(frame.f_builtins, label="builtins")
        module_name = frame.f_globals.get("__name__", "?")
        globals_env = cls(frame.f_globals, builtins_env, label=module_name)
        if frame.f_locals is frame.f_globals:
            # Module level: locals are the globals
            return globals_env
        f_locals = frame.f_locals
        if get_capture_mode() == CAPTURE_SNAPSHOT:
            f_locals = dict(f_locals)
        return cls(f_locals, globals_env, label=frame.f_code.co_name)

    @classmethod
    def coerce(cls, env: Any) -> Environment:
        """Accept an Environment or a plain mapping of names."""
        if isinstance(env, Environment):
            return env
        if isinstance(env, Mapping):
            return cls.from_mapping(env)
        raise PreconditionError(
            f"env must be an Environment or a mapping, not {type(env).__name__}"
        )

    # --- Bindings ---
    def define(self, name: str, value: Any) -> None:
        """Bind `name` to `value` in this frame.

        Raises PreconditionError if this frame's bindings are read-only.
        """
        if not isinstance(name, str):
            raise PreconditionError(f"Cannot define {name!r} as a name")
        if not isinstance(self.vars, MutableMapping):
            raise PreconditionError(f"Cannot define {name} in a read-only scope")
        self.vars[name] = value

    def update(self, mapping: Mapping[str, Any]) -> None:
        """Bulk-define a mapping of name -> value in the current frame."""
        for k, v in mapping.items():
            self.define(k, v)

    def find(self, name: str) -> Optional[Environment]:
        """Find the nearest environment in the chain that binds `name`."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.vars:
                return env
            env = env.outer
        return None

    def lookup(self, name: str) -> Any:
        """Look up the value bound to `name`, innermost scope first.

        Raises NameResolutionError if not found.
        """
        env = self.find(name)
        if env is None:
            raise NameResolutionError(f"object '{name}' not found", name=name)
        return env.vars[name]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def chain(self) -> Iterator[Environment]:
        """Iterate over this environment and its enclosing scopes."""
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env.outer

    def flatten(self) -> dict[str, Any]:
        """All visible bindings as one dict; inner bindings shadow outer ones."""
        flat: dict[str, Any] = {}
        for env in reversed(list(self.chain())):
            flat.update(env.vars)
        return flat

    # --- Display ---
    def _write_vars(self, buffer: StringIO) -> None:
        """Write this frame's variable names into the buffer in a compact form."""
        if self.label == "builtins":
            buffer.write("{<builtins>}")
            return
        names = [k for k in self.vars if isinstance(k, str) and not k.startswith("__")]
        buffer.write("{")
        buffer.write(", ".join(names))
        buffer.write("}")

    def __str__(self) -> str:
        """Human-readable single-frame view with an indicator for parent."""
        with StringIO() as buffer:
            if self.label:
                buffer.write(f"{self.label}: ")
            self._write_vars(buffer)
            if self.outer is not None:
                buffer.write(" -> ...")
            return buffer.getvalue()

    def __repr__(self) -> str:
        """Chain representation for debugging purposes."""
        with StringIO() as buffer:
            buffer.write("<Environment chain: ")
            parts = []
            for env in self.chain():
                env_buf = StringIO()
                if env.label:
                    env_buf.write(f"{env.label}=")
                env._write_vars(env_buf)
                parts.append(env_buf.getvalue())
            buffer.write(" -> ".join(parts))
            buffer.write(">")
            return buffer.getvalue()
