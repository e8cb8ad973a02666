import pytest

from recordcalc.lang import ir
from recordcalc.lang.envs import TypeEnv
from recordcalc.passes import Context, PassManager, Analysis, AnalysisObject, Transform, TypeEnvObj, handles
from recordcalc.passes.analyses import TypeCheckingPass, TypeCheckResult, FreeVarGetter, VarSet

A = ir.BaseT("A")


class Count(AnalysisObject):
    def __init__(self, n):
        self.n = n


class VarCounter(Analysis):
    requires = ()
    produces = (Count,)
    name = "var_counter"

    def run(self, root, ctx):
        return Count(self.visit(root))

    def visit(self, node):
        return sum(self.visit_children(node))

    @handles(ir.Var)
    def _(self, node: ir.Var):
        return 1


class RenameVars(Transform):
    name = "rename_vars"

    @handles()
    def _(self, node: ir.Var):
        return ir.Var(node.name.upper())


def test_analysis_dispatch():
    t = ir.App(ir.Var("f"), ir.Abs("x", A, ir.App(ir.Var("x"), ir.Var("f"))))
    assert VarCounter()(t, Context()).n == 3


def test_transform_dispatch_from_annotation():
    t = ir.App(ir.Var("f"), ir.Abs("x", A, ir.Var("x")))
    assert RenameVars()(t, Context()) == ir.App(ir.Var("F"), ir.Abs("x", A, ir.Var("X")))


def test_transform_keeps_identity_when_unchanged():
    t = ir.Abs("x", A, ir.RecordEnd())
    assert RenameVars()(t, Context()) is t


def test_analysis_must_define_run():
    with pytest.raises(ValueError):
        class NoRun(Analysis):
            name = "no_run"


def test_analysis_must_return_analysis_object():
    class Bad(Analysis):
        name = "bad"

        def run(self, root, ctx):
            return 1

    with pytest.raises(RuntimeError):
        Bad()(ir.RecordEnd(), Context())


def test_context():
    ctx = Context(Count(1))
    assert ctx.get(Count).n == 1
    assert ctx.try_get(VarSet) is None
    assert ctx.get(VarSet, None) is None
    with pytest.raises(KeyError):
        ctx.get(VarSet)
    with pytest.raises(ValueError):
        ctx.add(Count(2), replace=False)
    ctx.add(Count(2))
    assert ctx.get(Count).n == 2


def test_pass_manager_collects_analyses(capsys):
    t = ir.Abs("x", A, ir.Var("y"))
    ctx = Context(TypeEnvObj(TypeEnv({"y": A})))
    pm = PassManager(FreeVarGetter(), TypeCheckingPass(), RenameVars(), verbose=True)
    out = pm.run(t, ctx)
    assert out == ir.Abs("x", A, ir.Var("Y"))
    assert ctx.get(VarSet).vars == {"y"}
    assert ctx.get(TypeCheckResult).T == ir.ArrowT(A, A)
    printed = capsys.readouterr().out
    assert "P: FreeVarGetter" in printed
    assert "P: RenameVars" in printed
