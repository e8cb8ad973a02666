import pytest

from recordcalc import OutOfFuel, StuckTerm
from recordcalc.lang import ir
from recordcalc.lang.records import record, record_type
from recordcalc.passes import Context, Fuel
from recordcalc.passes.analyses import step, is_value, is_stuck, evaluate, normalize, EvalPass, EvalResult

A, B = ir.BaseT("A"), ir.BaseT("B")


def _id(x, T):
    return ir.Abs(x, T, ir.Var(x))


def _omega():
    # ill-typed, steps to itself forever
    w = ir.Abs("x", A, ir.App(ir.Var("x"), ir.Var("x")))
    return ir.App(w, w)


def test_values():
    assert is_value(_id("x", A))
    assert is_value(ir.RecordEnd())
    assert is_value(record(("i1", _id("x", A)), ("i2", record())))
    assert not is_value(record(("i1", ir.Var("x"))))
    assert not is_value(record(("i1", _id("x", A)), rest=ir.Var("r")))
    assert not is_value(ir.Var("x"))
    assert not is_value(ir.App(_id("x", A), _id("x", A)))


def test_values_do_not_step():
    for v in (_id("x", A), ir.RecordEnd(), record(("i1", _id("x", A)))):
        assert step(v) is None
        assert not is_stuck(v)


def test_project_after_apply():
    paramT = record_type(("i1", ir.ArrowT(A, A)), ("i2", ir.ArrowT(B, B)))
    arg = record(("i1", _id("a", A)), ("i2", _id("a", B)))
    t = ir.App(ir.Abs("a", paramT, ir.Proj(ir.Var("a"), "i2")), arg)
    t1 = step(t)
    assert t1 == ir.Proj(arg, "i2")
    assert step(t1) == _id("a", B)
    res = evaluate(t)
    assert res.term == _id("a", B)
    assert res.steps == 2
    assert res.is_value


def test_project_literal_steps_once():
    t = ir.Proj(record(("i1", _id("a", A))), "i1")
    assert step(t) == _id("a", A)
    assert step(step(t)) is None
    assert evaluate(t).steps == 1


def test_projection_resolves_first_occurrence():
    t = ir.Proj(record(("i1", _id("a", A)), ("i1", _id("a", B))), "i1")
    assert step(t) == _id("a", A)


def test_function_reduced_before_argument():
    inner = ir.App(_id("f", ir.ArrowT(A, A)), _id("x", A))
    arg = ir.App(_id("y", ir.RecordEndT()), ir.RecordEnd())
    t = ir.App(inner, arg)
    assert step(t) == ir.App(_id("x", A), arg)


def test_argument_reduced_before_call():
    arg = ir.App(_id("y", ir.RecordEndT()), ir.RecordEnd())
    t = ir.App(_id("x", ir.RecordEndT()), arg)
    assert step(t) == ir.App(_id("x", ir.RecordEndT()), ir.RecordEnd())


def test_record_fields_left_to_right():
    redex = ir.App(_id("y", ir.RecordEndT()), ir.RecordEnd())
    t = record(("i1", redex), ("i2", redex))
    t1 = step(t)
    assert t1 == record(("i1", ir.RecordEnd()), ("i2", redex))
    t2 = step(t1)
    assert t2 == record(("i1", ir.RecordEnd()), ("i2", ir.RecordEnd()))
    assert is_value(t2)


def test_projection_target_reduced_first():
    redex = ir.App(_id("y", ir.RecordEndT()), record(("i1", _id("x", A))))
    t = ir.Proj(redex, "i1")
    assert step(t) == ir.Proj(record(("i1", _id("x", A))), "i1")


@pytest.mark.parametrize("t", [
    ir.Proj(ir.RecordEnd(), "i1"),
    ir.Proj(record(("i2", _id("x", A))), "i1"),
    ir.Proj(_id("x", A), "i1"),
    ir.App(ir.RecordEnd(), ir.RecordEnd()),
    ir.Var("x"),
    ir.App(ir.Var("f"), _id("x", A)),
    record(("i1", _id("x", A)), rest=ir.Var("r")),
])
def test_stuck(t):
    assert step(t) is None
    assert is_stuck(t)
    res = evaluate(t)
    assert res.stuck
    assert res.steps == 0
    with pytest.raises(StuckTerm):
        res.unwrap()


def test_stuck_after_steps():
    t = ir.Proj(ir.App(_id("r", ir.RecordEndT()), ir.RecordEnd()), "i1")
    res = evaluate(t)
    assert res.steps == 1
    assert res.term == ir.Proj(ir.RecordEnd(), "i1")
    assert res.stuck


def test_self_reproducing_term_still_steps():
    t = _omega()
    assert step(t) == t


def test_fuel():
    with pytest.raises(OutOfFuel) as excinfo:
        evaluate(_omega(), max_steps=10)
    assert excinfo.value.partial.steps == 10
    # fuel is only consumed by steps that happen
    t = ir.Proj(record(("i1", _id("a", A))), "i1")
    assert evaluate(t, max_steps=1).term == _id("a", A)
    with pytest.raises(OutOfFuel):
        evaluate(t, max_steps=0)


def test_fuel_from_context():
    res = EvalPass()(ir.RecordEnd(), Context(Fuel(0)))
    assert isinstance(res, EvalResult)
    assert res.term == ir.RecordEnd()
    with pytest.raises(ValueError):
        Fuel(-1)


def test_trace_and_inputs_untouched():
    t = ir.Proj(record(("i1", _id("a", A))), "i1")
    copy = ir.Proj(record(("i1", _id("a", A))), "i1")
    res = evaluate(t)
    assert res.trace[0] is t
    assert res.trace[-1] == _id("a", A)
    assert t == copy
    assert normalize(t) == _id("a", A)


def test_verbose_trace(capsys):
    evaluate(ir.Proj(record(("i1", _id("a", A))), "i1"), verbose=True)
    out = capsys.readouterr().out.splitlines()
    assert out == ["   {i1 = λa:A. a}.i1", "-> λa:A. a"]
    evaluate(ir.Proj(ir.RecordEnd(), "i1"), verbose=True)
    assert "(stuck)" in capsys.readouterr().out


def test_stepping_a_type_is_an_error():
    with pytest.raises(TypeError):
        step(A)


def test_wide_record_steps_last_field():
    n = 1000
    values = [(f"l{i}", _id("x", A)) for i in range(n)]
    v = record(*values)
    assert is_value(v)
    assert step(v) is None

    redex = ir.App(_id("x", ir.ArrowT(A, A)), _id("y", A))
    t = record(*values, ("last", redex))
    assert not is_value(t)
    assert step(t) == record(*values, ("last", _id("y", A)))
    assert not is_stuck(record(*values, rest=ir.App(_id("x", A), _id("y", A))))
    assert is_stuck(record(*values, rest=ir.Var("r")))
