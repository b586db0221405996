# runtpl/core/engine/extractor.py
"""
Static analysis of a Template: which variables must the caller supply?

The walk mirrors the evaluator, but instead of data it tracks which names
are bound by enclosing loops. References whose head is a loop item are
satisfied by the loop and are never surfaced at the top level; they only
describe the shape of the list the loop iterates over. The result is a
scaffold, a nested skeleton of the expected data:

* a variable used as a plain value      -> ``""``
* a variable navigated with dotted paths -> nested object
* a variable used as a loop source       -> ``[]``, or ``[{...}]`` with an
  example element when loop items are themselves navigated
"""
from typing import Dict, Iterable, Optional

import structlog

from .nodes import BuiltinCall, Loop, Node, Template, Text, VarRef
from .value import Value, ValueObject

log = structlog.get_logger(__name__)

PLACEHOLDER = ""


class _Shape:
    # mutable shape of one value as inferred from its uses.
    __slots__ = ("fields", "element")

    def __init__(self):
        self.fields: Dict[str, "_Shape"] = {}
        self.element: Optional["_Shape"] = None

    def field(self, name: str) -> "_Shape":
        if name not in self.fields:
            self.fields[name] = _Shape()
        return self.fields[name]

    def as_list(self) -> "_Shape":
        # the shape of this list's elements.
        if self.element is None:
            self.element = _Shape()
        return self.element

    def materialize(self) -> Value:
        if self.element is not None:
            if self.element.fields or self.element.element is not None:
                return [self.element.materialize()]
            return []
        if self.fields:
            return {name: shape.materialize() for name, shape in self.fields.items()}
        return PLACEHOLDER


class _Extractor:
    def __init__(self):
        self.root = _Shape()

    def _shape_for(self, ref: VarRef, bindings: Dict[str, _Shape]) -> _Shape:
        head, rest = ref.path[0], ref.path[1:]
        shape = bindings[head] if head in bindings else self.root.field(head)
        for segment in rest:
            shape = shape.field(segment)
        return shape

    def _visit_call(self, call: BuiltinCall, bindings: Dict[str, _Shape]):
        for _name, arg_value in call.args:
            if isinstance(arg_value, VarRef):
                self._shape_for(arg_value, bindings)

    def visit(self, nodes: Iterable[Node], bindings: Dict[str, _Shape]):
        for node in nodes:
            if isinstance(node, Text):
                continue
            if isinstance(node, VarRef):
                self._shape_for(node, bindings)
            elif isinstance(node, BuiltinCall):
                self._visit_call(node, bindings)
            elif isinstance(node, Loop):
                if isinstance(node.source, VarRef):
                    item_shape = self._shape_for(node.source, bindings).as_list()
                else:
                    self._visit_call(node.source, bindings)
                    # items come from the function; their uses need no input.
                    item_shape = _Shape()
                self.visit(node.body, {**bindings, node.item_name: item_shape})


def extract_variables(template: Template) -> ValueObject:
    """Builds the scaffold of free variables referenced by ``template``."""
    extractor = _Extractor()
    extractor.visit(template.body, {})
    scaffold = {name: shape.materialize() for name, shape in extractor.root.fields.items()}
    log.debug("variables_extracted", source=template.source_name, variables=list(scaffold))
    return scaffold
