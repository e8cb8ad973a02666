import pytest

from recordcalc import IllTyped
from recordcalc.lang import ir
from recordcalc.lang.envs import TypeEnv
from recordcalc.lang.records import record, record_type
from recordcalc.passes import Context, TypeEnvObj
from recordcalc.passes.analyses import has_type, type_of, TypeCheckingPass, TypeCheckResult

A, B = ir.BaseT("A"), ir.BaseT("B")
EMPTY = TypeEnv()


def _id(x, T):
    return ir.Abs(x, T, ir.Var(x))


def test_project_after_apply():
    """λ over a record, projected after application, types at the field type."""
    paramT = record_type(("i1", ir.ArrowT(A, A)), ("i2", ir.ArrowT(B, B)))
    t = ir.App(
        ir.Abs("a", paramT, ir.Proj(ir.Var("a"), "i2")),
        record(("i1", _id("a", A)), ("i2", _id("a", B))),
    )
    assert has_type(EMPTY, t) == ir.ArrowT(B, B)


def test_record_tail_must_be_record_term():
    """A tail variable of record type is still rejected."""
    env = TypeEnv({"a": record_type(("i2", ir.ArrowT(A, A)))})
    t = ir.RecordField("i1", _id("a", B), ir.Var("a"))
    assert has_type(env, ir.Var("a")) == record_type(("i2", ir.ArrowT(A, A)))
    assert has_type(env, t) is None


def test_record_tail_must_have_record_type():
    t = ir.RecordField("i1", _id("a", A), _id("b", B))
    assert has_type(EMPTY, t) is None


def test_parameter_type_must_match_exactly():
    """Width and order of record fields both matter for application."""
    env = TypeEnv({"y": A})
    fn = ir.Abs("a", record_type(("i1", A)), ir.Proj(ir.Var("a"), "i1"))
    wide = record(("i1", ir.Var("y")), ("i2", ir.Var("y")))
    assert has_type(env, wide) == record_type(("i1", A), ("i2", A))
    assert has_type(env, ir.App(fn, wide)) is None
    assert has_type(env, ir.App(fn, record(("i1", ir.Var("y"))))) == A

    fn2 = ir.Abs("a", record_type(("i1", A), ("i2", B)), ir.Var("a"))
    env2 = env.extend("z", B)
    swapped = record(("i2", ir.Var("z")), ("i1", ir.Var("y")))
    in_order = record(("i1", ir.Var("y")), ("i2", ir.Var("z")))
    assert has_type(env2, ir.App(fn2, swapped)) is None
    assert has_type(env2, ir.App(fn2, in_order)) == record_type(("i1", A), ("i2", B))


def test_var():
    assert has_type(TypeEnv({"x": A}), ir.Var("x")) == A
    assert has_type(EMPTY, ir.Var("x")) is None


def test_var_with_ill_formed_declared_type():
    env = TypeEnv({"x": ir.RecordFieldT("i1", A, B)})
    assert has_type(env, ir.Var("x")) is None


def test_abs():
    assert has_type(EMPTY, _id("x", A)) == ir.ArrowT(A, A)
    assert has_type(EMPTY, ir.Abs("x", ir.RecordFieldT("i1", A, B), ir.RecordEnd())) is None


def test_abs_binding_shadows_context():
    env = TypeEnv({"a": A})
    assert has_type(env, _id("a", B)) == ir.ArrowT(B, B)
    # and the outer binding is back afterwards
    t = ir.App(ir.Abs("f", ir.ArrowT(B, B), ir.Var("a")), _id("a", B))
    assert has_type(env, t) == A


def test_app():
    env = TypeEnv({"x": A, "f": ir.ArrowT(A, B)})
    assert has_type(env, ir.App(ir.Var("f"), ir.Var("x"))) == B
    assert has_type(env, ir.App(ir.Var("x"), ir.Var("x"))) is None
    assert has_type(env, ir.App(ir.Var("f"), ir.Var("f"))) is None
    assert has_type(EMPTY, ir.App(ir.RecordEnd(), ir.RecordEnd())) is None


def test_proj():
    env = TypeEnv({"r": record_type(("i1", A), ("i2", B), ("i1", B))})
    assert has_type(env, ir.Proj(ir.Var("r"), "i1")) == A
    assert has_type(env, ir.Proj(ir.Var("r"), "i2")) == B
    assert has_type(env, ir.Proj(ir.Var("r"), "i3")) is None
    assert has_type(EMPTY, ir.Proj(ir.RecordEnd(), "i1")) is None
    assert has_type(EMPTY, ir.Proj(_id("x", A), "i1")) is None


def test_records():
    assert has_type(EMPTY, ir.RecordEnd()) == ir.RecordEndT()
    t = record(("i1", _id("x", A)), ("i1", _id("x", B)))
    assert has_type(EMPTY, t) == record_type(("i1", ir.ArrowT(A, A)), ("i1", ir.ArrowT(B, B)))


def test_type_of_raises_with_node():
    bad = ir.Proj(ir.RecordEnd(), "i1")
    t = _id("x", ir.ArrowT(A, A))
    t = ir.App(t, bad)
    with pytest.raises(IllTyped) as excinfo:
        type_of(t)
    assert excinfo.value.node == bad
    # IllTyped is a TypeError too
    with pytest.raises(TypeError):
        type_of(bad)


def test_type_map_covers_subterms():
    t = ir.App(_id("x", A), ir.Var("y"))
    ctx = Context(TypeEnvObj(TypeEnv({"y": A})))
    res = TypeCheckingPass()(t, ctx)
    assert isinstance(res, TypeCheckResult)
    assert res.T == A
    assert res.Tmap[id(t)] == A
    assert res.Tmap[id(t.fn)] == ir.ArrowT(A, A)
    assert res.Tmap[id(t.fn.body)] == A


def test_requires_type_env():
    with pytest.raises(RuntimeError):
        TypeCheckingPass()(ir.RecordEnd(), Context())


def test_types_are_not_terms():
    assert has_type(EMPTY, A) is None


def test_wide_records():
    """Typing a long record never overflows the stack."""
    n = 1000
    T = record_type(*[(f"l{i}", A) for i in range(n)])
    assert has_type(EMPTY, _id("r", T)) == ir.ArrowT(T, T)
    assert has_type(TypeEnv({"r": T}), ir.Proj(ir.Var("r"), f"l{n - 1}")) == A
    wider = record_type(("i1", A), rest=T)
    assert has_type(TypeEnv({"r": wider}), ir.Var("r")) == wider

    t = record(*[(f"l{i}", _id("x", A)) for i in range(n)])
    ctx = Context(TypeEnvObj(EMPTY))
    res = TypeCheckingPass()(t, ctx)
    assert res.T == record_type(*[(f"l{i}", ir.ArrowT(A, A)) for i in range(n)])
    assert res.Tmap[id(t.rest)] == res.T.rest

    bad = record(*[(f"l{i}", _id("x", A)) for i in range(n)], rest=_id("x", A))
    assert has_type(EMPTY, bad) is None


def test_type_map_shared_node_keeps_last_position():
    x = ir.Var("x")
    AA = ir.ArrowT(A, A)
    t = ir.App(ir.Abs("x", AA, ir.Abs("y", A, x)), ir.Abs("x", A, x))
    ctx = Context(TypeEnvObj(EMPTY))
    res = TypeCheckingPass()(t, ctx)
    assert res.T == ir.ArrowT(A, AA)
    # x is typed at A→A under the first binder and at A under the second
    assert res.Tmap[id(x)] == A
