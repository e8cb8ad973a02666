from __future__ import annotations

import typing as tp

from ..pass_base import Analysis, AnalysisObject, Context, handles
from ...lang import ir


def free_vars(node: ir.Node) -> tp.FrozenSet[str]:
    ctx = Context()
    return FreeVarGetter()(node, ctx).vars

def appears_free_in(x: str, t: ir.Term) -> bool:
    return x in free_vars(t)

def is_closed(t: ir.Term) -> bool:
    return not free_vars(t)

class VarSet(AnalysisObject):
    def __init__(self, vars: tp.FrozenSet[str]):
        self.vars = vars

class FreeVarGetter(Analysis):
    requires = ()
    produces = (VarSet,)
    name = 'free_var_getter'

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        return VarSet(self.visit(root))

    # App, Proj, RecordField: free in either child. Types contribute nothing.
    def visit(self, node: ir.Node) -> tp.FrozenSet[str]:
        child_vars: tp.Tuple[tp.FrozenSet[str], ...] = self.visit_children(node)
        return frozenset().union(*child_vars)

    @handles(ir.Var)
    def _(self, node: ir.Var):
        return frozenset((node.name,))

    @handles(ir.Abs)
    def _(self, node: ir.Abs):
        _, body_vars = self.visit_children(node)
        return body_vars - {node.param}
