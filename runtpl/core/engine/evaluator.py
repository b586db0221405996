# runtpl/core/engine/evaluator.py
"""
Evaluates a parsed Template against a data context.

Rendering is a depth-first walk of the AST with an immutable Scope: every
loop iteration pushes a one-binding frame for its item, so inner loop
variables shadow outer ones only inside their own body. Output is collected
into a list and joined once at the end, so a failure never yields partial text.
"""
from typing import Dict, List, Mapping, Optional

import structlog

from runtpl.exceptions import TemplateTypeError, UnknownFunctionError
from .builtins import BUILTIN_FUNCTIONS, BuiltinFunction, call_builtin
from .nodes import BuiltinCall, Expr, Loop, Node, Template, Text, VarRef
from .scope import Scope
from .value import Value, ValueObject, kind_of, normalize_value, stringify

log = structlog.get_logger(__name__)


class Renderer:
    """Renders templates using a fixed set of built-in functions."""

    def __init__(self, functions: Optional[Mapping[str, BuiltinFunction]] = None):
        self.functions: Dict[str, BuiltinFunction] = dict(BUILTIN_FUNCTIONS if functions is None else functions)

    def render(self, template: Template, context: Mapping[str, Value]) -> str:
        log.debug("rendering_template", source=template.source_name, context_keys=list(context.keys()))
        scope = Scope.root(normalize_value(context))
        output: List[str] = []
        self._render_nodes(template.body, scope, output)
        rendered = "".join(output)
        log.debug("template_rendered", source=template.source_name, length=len(rendered))
        return rendered

    def _render_nodes(self, nodes, scope: Scope, output: List[str]):
        for node in nodes:
            self._render_node(node, scope, output)

    def _render_node(self, node: Node, scope: Scope, output: List[str]):
        if isinstance(node, Text):
            output.append(node.text)
        elif isinstance(node, VarRef):
            output.append(stringify(scope.lookup(node.path)))
        elif isinstance(node, Loop):
            self._render_loop(node, scope, output)
        elif isinstance(node, BuiltinCall):
            raise TemplateTypeError(
                f"function calls are only allowed as loop sources, but '{node.name}(...)' is used as a value"
            )
        else:
            raise TypeError(f"unknown template node: {node!r}")

    def _render_loop(self, loop: Loop, scope: Scope, output: List[str]):
        items = self.evaluate(loop.source, scope)
        if not isinstance(items, list):
            raise TemplateTypeError(
                f"loop source must be a list, but '{_describe(loop.source)}' is a {kind_of(items)}"
            )
        for item in items:
            self._render_nodes(loop.body, scope.push(loop.item_name, item), output)

    def evaluate(self, expr: Expr, scope: Scope) -> Value:
        if isinstance(expr, VarRef):
            return scope.lookup(expr.path)
        return self._call(expr, scope)

    def _call(self, call: BuiltinCall, scope: Scope) -> Value:
        function = self.functions.get(call.name)
        if function is None:
            raise UnknownFunctionError(call.name)
        args: ValueObject = {}
        for arg_name, arg_value in call.args:
            if isinstance(arg_value, VarRef):
                args[arg_name] = scope.lookup(arg_value.path)
            else:
                args[arg_name] = normalize_value(arg_value)
        log.debug("calling_builtin", function=call.name, args=sorted(args))
        return normalize_value(call_builtin(call.name, function, args))


def _describe(expr: Expr) -> str:
    if isinstance(expr, VarRef):
        return expr.dotted
    return f"{expr.name}(...)"


def render(template: Template, context: Mapping[str, Value], functions: Optional[Mapping[str, BuiltinFunction]] = None) -> str:
    """Renders ``template`` against ``context``; see Renderer."""
    return Renderer(functions).render(template, context)
