# runtpl/core/engine/nodes.py
"""AST node types produced by the parser. All nodes are immutable."""
from dataclasses import dataclass
from typing import Tuple, Union

from .value import Value


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class VarRef:
    path: Tuple[str, ...]
    offset: int = 0

    @property
    def dotted(self) -> str:
        return ".".join(self.path)


@dataclass(frozen=True)
class BuiltinCall:
    name: str
    # named arguments in source order; values are literals or VarRefs.
    args: Tuple[Tuple[str, Union[Value, VarRef]], ...]
    offset: int = 0


Expr = Union[VarRef, BuiltinCall]


@dataclass(frozen=True)
class Loop:
    item_name: str
    source: Expr
    body: Tuple["Node", ...]
    offset: int = 0


Node = Union[Text, VarRef, Loop, BuiltinCall]


@dataclass(frozen=True)
class Template:
    # root of a parsed template; a plain node sequence, not a loop.
    body: Tuple[Node, ...]
    source_name: str = "<template>"
