from __future__ import annotations

import sys
import typing as tp
from dataclasses import dataclass, field

from ..lang import ir
from ..lang.envs import TypeEnv
from ..lang.records import record, record_type
from ..passes import Context, PassManager, TypeEnvObj, Fuel
from ..passes.analyses import TypeCheckingPass, TypeCheckResult, EvalPass, EvalResult

A, B = ir.BaseT("A"), ir.BaseT("B")

@dataclass
class Program:
    name: str
    term: ir.Term
    env: TypeEnv = field(default_factory=TypeEnv)
    # None means the program is expected to be ill typed
    expected_type: tp.Optional[ir.Type] = None
    expected_value: tp.Optional[ir.Term] = None

def _id(x: str, T: ir.Type) -> ir.Term:
    return ir.Abs(x, T, ir.Var(x))

def build_project_after_apply_program() -> Program:
    paramT = record_type(("i1", ir.ArrowT(A, A)), ("i2", ir.ArrowT(B, B)))
    fn = ir.Abs("a", paramT, ir.Proj(ir.Var("a"), "i2"))
    arg = record(("i1", _id("a", A)), ("i2", _id("a", B)))
    return Program(
        "project_after_apply",
        ir.App(fn, arg),
        expected_type=ir.ArrowT(B, B),
        expected_value=_id("a", B),
    )

def build_tail_not_record_program() -> Program:
    t = ir.RecordField("i1", _id("a", B), ir.Var("a"))
    env = TypeEnv({"a": record_type(("i2", ir.ArrowT(A, A)))})
    return Program("tail_not_record", t, env)

def build_record_width_mismatch_program() -> Program:
    fn = ir.Abs("a", record_type(("i1", A)), ir.Proj(ir.Var("a"), "i1"))
    arg = record(("i1", ir.Var("y")), ("i2", ir.Var("y")))
    return Program("record_width_mismatch", ir.App(fn, arg), TypeEnv({"y": A}))

def build_record_order_mismatch_program() -> Program:
    fn = ir.Abs("a", record_type(("i1", ir.ArrowT(A, A)), ("i2", ir.ArrowT(B, B))), ir.Proj(ir.Var("a"), "i1"))
    arg = record(("i2", _id("b", B)), ("i1", _id("b", A)))
    return Program("record_order_mismatch", ir.App(fn, arg))

def build_project_literal_program() -> Program:
    t = ir.Proj(record(("i1", _id("a", A))), "i1")
    return Program("project_literal", t, expected_type=ir.ArrowT(A, A), expected_value=_id("a", A))

def build_shadowed_label_program() -> Program:
    t = ir.Proj(record(("i1", _id("a", A)), ("i1", _id("a", B))), "i1")
    return Program("shadowed_label", t, expected_type=ir.ArrowT(A, A), expected_value=_id("a", A))

def build_nested_record_program() -> Program:
    innerT = record_type(("i2", ir.ArrowT(B, B)))
    inner = record(("i2", _id("b", B)))
    fn = ir.Abs("r", record_type(("i1", innerT)), ir.Proj(ir.Proj(ir.Var("r"), "i1"), "i2"))
    # the record's field is itself a redex, evaluated before the call
    arg = record(("i1", ir.App(_id("x", innerT), inner)))
    return Program(
        "nested_record",
        ir.App(fn, arg),
        expected_type=ir.ArrowT(B, B),
        expected_value=_id("b", B),
    )

def build_missing_field_program() -> Program:
    return Program("missing_field", ir.Proj(ir.RecordEnd(), "i1"))

def get_program(name: str) -> Program:
    build_name = f"build_{name}_program"
    if not hasattr(sys.modules[__name__], build_name):
        raise ValueError(f"Program {name} not found")
    return getattr(sys.modules[__name__], build_name)()

def program_names() -> tp.List[str]:
    prefix, suffix = "build_", "_program"
    return sorted(n[len(prefix):-len(suffix)] for n in vars(sys.modules[__name__]) if n.startswith(prefix) and n.endswith(suffix))

def run_program(program: Program, max_steps: tp.Optional[int] = None, verbose: bool = False) -> tp.Tuple[ir.Type, EvalResult]:
    """Type check then evaluate; raises IllTyped when there is no derivation."""
    ctx = Context(TypeEnvObj(program.env), Fuel(max_steps))
    pm = PassManager(TypeCheckingPass(), EvalPass(verbose=verbose), verbose=verbose)
    pm.run(program.term, ctx)
    return ctx.get(TypeCheckResult).T, ctx.get(EvalResult)
