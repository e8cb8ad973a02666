from __future__ import annotations

import typing as tp

from ..pass_base import Analysis, AnalysisObject, Context, handles
from ...lang import ir
from ...lang.records import lookup_field_value


def is_value(t: ir.Term) -> bool:
    while isinstance(t, ir.RecordField):
        if not is_value(t.value):
            return False
        t = t.rest
    return isinstance(t, (ir.Abs, ir.RecordEnd))

def step(t: ir.Term) -> tp.Optional[ir.Term]:
    """One call-by-value reduction step, or None for values and stuck terms."""
    ctx = Context()
    return Stepper()(t, ctx).term

def is_stuck(t: ir.Term) -> bool:
    return not is_value(t) and step(t) is None

class StepResult(AnalysisObject):
    def __init__(self, term: tp.Optional[ir.Term]):
        self.term = term

# Small-step call-by-value semantics. Every handler commits to the leftmost
# non-value subterm, so at most one rule fires for any term.
class Stepper(Analysis):
    enable_memoization = False
    requires = ()
    produces = (StepResult,)
    name = "step"

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        return StepResult(self.visit(root))

    def visit(self, node: ir.Node) -> tp.Optional[ir.Term]:
        raise TypeError(f"Only terms can step, got {node!r}")

    @handles(ir.Var, ir.Abs, ir.RecordEnd)
    def _(self, node: ir.Term):
        # Values and free variables have no rule
        return None

    @handles(ir.App)
    def _(self, node: ir.App):
        fn, arg = node.fn, node.arg
        if not is_value(fn):
            fn_ = self.visit(fn)
            return None if fn_ is None else node.replace(fn_, arg)
        if not is_value(arg):
            arg_ = self.visit(arg)
            return None if arg_ is None else node.replace(fn, arg_)
        if isinstance(fn, ir.Abs):
            from ..transforms.substitution import substitute
            return substitute(fn.param, arg, fn.body)
        # Applying a record value
        return None

    @handles(ir.Proj)
    def _(self, node: ir.Proj):
        record = node.record
        if not is_value(record):
            record_ = self.visit(record)
            return None if record_ is None else node.replace(record_)
        return lookup_field_value(node.label, record)

    @handles(ir.RecordField)
    def _(self, node: ir.RecordField):
        # Find the first cell whose value (or non-cell tail) is not a value
        prefix: tp.List[ir.RecordField] = []
        cell: ir.Term = node
        while isinstance(cell, ir.RecordField) and is_value(cell.value):
            prefix.append(cell)
            cell = cell.rest
        if isinstance(cell, ir.RecordField):
            value_ = self.visit(cell.value)
            if value_ is None:
                return None
            new = cell.replace(value_, cell.rest)
        elif is_value(cell):
            return None
        else:
            new = self.visit(cell)
            if new is None:
                return None
        for done in reversed(prefix):
            new = done.replace(done.value, new)
        return new
