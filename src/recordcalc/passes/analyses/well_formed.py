from __future__ import annotations

from ..pass_base import Analysis, AnalysisObject, Context, handles
from ...lang import ir
from ...lang.records import is_record_type


def well_formed(T: ir.Type) -> bool:
    ctx = Context()
    return WellFormednessPass()(T, ctx).ok

class WellFormedResult(AnalysisObject):
    def __init__(self, ok: bool):
        self.ok = ok

# Every record-type tail must itself be shaped like a record type, all the
# way down. The representation cannot express this, so it is checked here.
class WellFormednessPass(Analysis):
    requires = ()
    produces = (WellFormedResult,)
    name = "well_formedness"

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        return WellFormedResult(self.visit(root))

    def visit(self, node: ir.Node) -> bool:
        raise TypeError(f"Well-formedness is defined on types, got {node!r}")

    @handles(ir.BaseT, ir.RecordEndT)
    def _(self, node: ir.Type) -> bool:
        return True

    @handles(ir.ArrowT)
    def _(self, node: ir.ArrowT) -> bool:
        argT_ok, resT_ok = self.visit_children(node)
        return argT_ok and resT_ok

    @handles(ir.RecordFieldT)
    def _(self, node: ir.RecordFieldT) -> bool:
        # Loop along the spine; only field types are visited recursively
        cell: ir.Type = node
        while isinstance(cell, ir.RecordFieldT):
            if not self.visit(cell.fieldT) or not is_record_type(cell.rest):
                return False
            cell = cell.rest
        return True
