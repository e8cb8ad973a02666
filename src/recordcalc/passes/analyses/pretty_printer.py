from __future__ import annotations
from ..pass_base import Analysis, AnalysisObject, Context, handles
from ...lang import ir
from ...lang.records import fields, chain_end

def pretty(node: ir.Node) -> str:
    ctx = Context()
    return PrettyPrinterPass()(node, ctx).text

class PrettyPrintedExpr(AnalysisObject):
    def __init__(self, text: str):
        self.text = text

class PrettyPrinterPass(Analysis):
    """Render types and terms in conventional notation.

    - Arrows associate to the right: `A → B → C`
    - Application associates to the left: `f x y`
    - Abstraction extends as far right as possible: `λx:A. f x`
    - Records list their cells head to tail: `{i1 = v, i2 = w}`; a chain
      whose tail is not a record is shown as `{i1 = v | tail}`

    The result is stored in the context as a `PrettyPrintedExpr` object.
    """
    requires = ()
    produces = (PrettyPrintedExpr,)
    name = "pretty_printer"

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        return PrettyPrintedExpr(self.visit(root))

    def visit(self, node: ir.Node) -> str:
        raise NotImplementedError(f"{node.__class__.__name__} not implemented in PrettyPrinterPass")

    def _chain(self, node: ir.Node, sep: str) -> str:
        cells = [f"{label}{sep}{self.visit(elem)}" for label, elem in fields(node)]
        body = ", ".join(cells)
        end = chain_end(node)
        if not isinstance(end, (ir.RecordEndT, ir.RecordEnd)):
            body = f"{body} | {self.visit(end)}"
        return "{" + body + "}"

    ##############################
    ## Types
    ##############################

    @handles(ir.BaseT)
    def _(self, node: ir.BaseT) -> str:
        return node.name

    @handles(ir.ArrowT)
    def _(self, node: ir.ArrowT) -> str:
        arg_str, res_str = self.visit_children(node)
        if isinstance(node.argT, ir.ArrowT):
            arg_str = f"({arg_str})"
        return f"{arg_str} → {res_str}"

    @handles(ir.RecordEndT, ir.RecordFieldT)
    def _(self, node: ir.Type) -> str:
        return self._chain(node, ": ")

    ##############################
    ## Terms
    ##############################

    @handles(ir.Var)
    def _(self, node: ir.Var) -> str:
        return node.name

    @handles(ir.Abs)
    def _(self, node: ir.Abs) -> str:
        T_str, body_str = self.visit_children(node)
        return f"λ{node.param}:{T_str}. {body_str}"

    @handles(ir.App)
    def _(self, node: ir.App) -> str:
        fn_str, arg_str = self.visit_children(node)
        if isinstance(node.fn, ir.Abs):
            fn_str = f"({fn_str})"
        if isinstance(node.arg, (ir.App, ir.Abs)):
            arg_str = f"({arg_str})"
        return f"{fn_str} {arg_str}"

    @handles(ir.Proj)
    def _(self, node: ir.Proj) -> str:
        record_str, = self.visit_children(node)
        if isinstance(node.record, (ir.App, ir.Abs)):
            record_str = f"({record_str})"
        return f"{record_str}.{node.label}"

    @handles(ir.RecordEnd, ir.RecordField)
    def _(self, node: ir.Term) -> str:
        return self._chain(node, " = ")
