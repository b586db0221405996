# runtpl/core/engine/scope.py
from types import MappingProxyType
from typing import Mapping, Sequence, Tuple

from runtpl.exceptions import PathError, UnresolvedVariableError
from .value import Value, kind_of


class Scope:
    """Immutable stack of read-only binding frames, innermost last.

    ``push`` returns a new Scope sharing the outer frames, so a loop
    iteration never mutates the frames of its caller.
    """

    __slots__ = ("_frames",)

    def __init__(self, frames: Tuple[Mapping[str, Value], ...]):
        self._frames = frames

    @classmethod
    def root(cls, context: Mapping[str, Value]) -> "Scope":
        return cls((MappingProxyType(dict(context)),))

    def push(self, name: str, value: Value) -> "Scope":
        return Scope(self._frames + (MappingProxyType({name: value}),))

    def lookup(self, path: Sequence[str]) -> Value:
        # innermost frame binding the head wins; the rest of the path walks objects.
        head = path[0]
        for frame in reversed(self._frames):
            if head in frame:
                current = frame[head]
                break
        else:
            raise UnresolvedVariableError(path)

        for depth, segment in enumerate(path[1:], start=1):
            if not isinstance(current, dict):
                raise PathError(path[:depth], segment, kind_of(current))
            if segment not in current:
                raise UnresolvedVariableError(path[:depth + 1])
            current = current[segment]
        return current
