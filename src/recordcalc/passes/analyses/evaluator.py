from __future__ import annotations

import typing as tp

from ..pass_base import Analysis, AnalysisObject, Context
from ..envobj import Fuel
from .step import step, is_value
from .pretty_printer import pretty
from ...errors import OutOfFuel, StuckTerm
from ...lang import ir


def evaluate(t: ir.Term, max_steps: tp.Optional[int] = None, verbose: bool = False) -> EvalResult:
    ctx = Context(Fuel(max_steps))
    return EvalPass(verbose=verbose)(t, ctx)

def normalize(t: ir.Term, max_steps: tp.Optional[int] = None) -> ir.Term:
    return evaluate(t, max_steps).term

class EvalResult(AnalysisObject):
    """Outcome of driving `step` until no rule applies.

    `trace` holds every intermediate term, starting with the input, so
    `trace[-1] is term` and `len(trace) == steps + 1`.
    """
    def __init__(self, trace: tp.List[ir.Term]):
        self.trace = trace

    @property
    def term(self) -> ir.Term:
        return self.trace[-1]

    @property
    def steps(self) -> int:
        return len(self.trace) - 1

    @property
    def is_value(self) -> bool:
        return is_value(self.term)

    @property
    def stuck(self) -> bool:
        return not self.is_value

    def unwrap(self) -> ir.Term:
        if self.stuck:
            raise StuckTerm(self.term)
        return self.term

    def __repr__(self):
        status = "stuck" if self.stuck else "value"
        return f"EvalResult({status} after {self.steps} steps: {self.term})"

class EvalPass(Analysis):
    enable_memoization = False
    requires = ()
    produces = (EvalResult,)
    name = "evaluator"

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def run(self, root: ir.Node, ctx: Context) -> AnalysisObject:
        max_steps = ctx.get(Fuel, Fuel()).max_steps
        trace = [root]
        t = root
        if self.verbose:
            print(f"   {pretty(t)}")
        while True:
            t_ = step(t)
            if t_ is None:
                break
            if max_steps is not None and len(trace) > max_steps:
                raise OutOfFuel(max_steps, EvalResult(trace))
            t = t_
            trace.append(t)
            if self.verbose:
                print(f"-> {pretty(t)}")
        if self.verbose and not is_value(t):
            print("   (stuck)")
        return EvalResult(trace)
