from __future__ import annotations

import typing as tp

from ..pass_base import Context, AnalysisObject, Analysis, handles
from ..envobj import TypeEnvObj
from .well_formed import well_formed
from ...errors import IllTyped
from ...lang import ir
from ...lang.envs import TypeEnv
from ...lang.records import is_record_type, is_record_term, lookup_field_type


def type_of(t: ir.Term, env: tp.Optional[TypeEnv] = None) -> ir.Type:
    """Type of `t` under `env`, raising IllTyped when there is no derivation."""
    ctx = Context(TypeEnvObj(env))
    return TypeCheckingPass()(t, ctx).T

def has_type(env: tp.Optional[TypeEnv], t: ir.Term) -> tp.Optional[ir.Type]:
    """Type of `t` under `env`, or None when there is no derivation."""
    try:
        return type_of(t, env)
    except IllTyped:
        return None

class TypeCheckResult(AnalysisObject):
    """Type of the root plus `Tmap`, mapping id(node) to the type derived for
    every subterm.

    Keys are object identities, not structure. A node object that appears at
    several positions of the tree keeps only the type from the position
    checked last (the rightmost one).
    """
    def __init__(self, T: ir.Type, Tmap: tp.Dict[int, ir.Type]):
        self.T = T
        self.Tmap = Tmap

# Syntax-directed typing judgment: one rule per term constructor, so a
# derivation is unique when it exists.
class TypeCheckingPass(Analysis):
    # The context changes under binders, so results are not reusable by node
    enable_memoization = False
    requires = (TypeEnvObj,)
    produces = (TypeCheckResult,)
    name = "type_checking"

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        self.env: TypeEnv = ctx.get(TypeEnvObj).env
        self.Tmap: tp.Dict[int, ir.Type] = {}
        T = self.visit(root)
        return TypeCheckResult(T, self.Tmap)

    def visit(self, node: ir.Node) -> ir.Type:
        raise IllTyped(f"Cannot type non-term {node!r}", node)

    def _record(self, node: ir.Term, T: ir.Type) -> ir.Type:
        self.Tmap[id(node)] = T
        return T

    @handles(ir.Var)
    def _(self, node: ir.Var):
        T = self.env[node.name]
        if T is None:
            raise IllTyped(f"Unbound variable {node.name}", node)
        # Nothing else certifies a declared variable type
        if not well_formed(T):
            raise IllTyped(f"Variable {node.name} has ill-formed type {T}", node)
        return self._record(node, T)

    @handles(ir.Abs)
    def _(self, node: ir.Abs):
        paramT = node.paramT
        if not well_formed(paramT):
            raise IllTyped(f"Parameter {node.param} has ill-formed type {paramT}", node)
        outer = self.env
        self.env = outer.extend(node.param, paramT)
        try:
            bodyT = self.visit(node.body)
        finally:
            self.env = outer
        return self._record(node, ir.ArrowT(paramT, bodyT))

    @handles(ir.App)
    def _(self, node: ir.App):
        fnT = self.visit(node.fn)
        argT = self.visit(node.arg)
        if not isinstance(fnT, ir.ArrowT):
            raise IllTyped(f"Applying a non-function of type {fnT}", node)
        if fnT.argT != argT:
            raise IllTyped(f"Argument type {argT} does not match parameter type {fnT.argT}", node)
        return self._record(node, fnT.resT)

    @handles(ir.Proj)
    def _(self, node: ir.Proj):
        recordT = self.visit(node.record)
        fieldT = lookup_field_type(node.label, recordT)
        if fieldT is None:
            raise IllTyped(f"No field {node.label} in {recordT}", node)
        return self._record(node, fieldT)

    @handles(ir.RecordEnd)
    def _(self, node: ir.RecordEnd):
        return self._record(node, ir.RecordEndT())

    @handles(ir.RecordField)
    def _(self, node: ir.RecordField):
        # Type the cells head to tail in a loop, then build the type back to front
        cells: tp.List[ir.RecordField] = []
        valueTs: tp.List[ir.Type] = []
        tail: ir.Term = node
        while isinstance(tail, ir.RecordField):
            cells.append(tail)
            valueTs.append(self.visit(tail.value))
            tail = tail.rest
        restT = self.visit(tail)
        if not is_record_type(restT):
            raise IllTyped(f"Record tail has non-record type {restT}", cells[-1])
        if not is_record_term(tail):
            raise IllTyped("Record tail is not a record term", cells[-1])
        for cell, valueT in zip(reversed(cells), reversed(valueTs)):
            restT = self._record(cell, ir.RecordFieldT(cell.label, valueT, restT))
        return restT
