from __future__ import annotations
from ..pass_base import Transform, Context, AnalysisObject, handles
from ..analyses.free_vars import free_vars
from ...lang import ir
from ...lang.envs import fresh


def substitute(x: str, replacement: ir.Term, target: ir.Term) -> ir.Term:
    """target[x := replacement]"""
    ctx = Context(SubMapping(x, replacement))
    return SubstitutionPass()(target, ctx)

class SubMapping(AnalysisObject):
    def __init__(self, name: str, replacement: ir.Term):
        if not isinstance(replacement, ir.Term):
            raise TypeError(f"Can only substitute Terms, got {replacement!r}")
        self.name = name
        self.replacement = replacement

class SubstitutionPass(Transform):
    requires = (SubMapping,)
    produces = ()
    name = "substitution"

    def run(self, root: ir.Node, ctx: Context):
        sub = ctx.get(SubMapping)
        self.x = sub.name
        self.replacement = sub.replacement
        self.replacement_fvs = free_vars(sub.replacement)
        return self.visit(root)

    # Types never mention term variables
    @handles(ir.Type)
    def _(self, node: ir.Type):
        return node

    @handles(ir.Var)
    def _(self, node: ir.Var):
        if node.name == self.x:
            return self.replacement
        return node

    @handles(ir.Abs)
    def _(self, node: ir.Abs):
        y = node.param
        if y == self.x:
            return node
        body = node.body
        body_fvs = free_vars(body)
        if self.x not in body_fvs:
            return node
        if y in self.replacement_fvs:
            # The binder would capture a free variable of the replacement
            z = fresh(y, self.replacement_fvs | body_fvs | {self.x})
            body = substitute(y, ir.Var(z), body)
            y = z
        return ir.Abs(y, node.paramT, self.visit(body))
