from __future__ import annotations

import typing as tp
from dataclasses import dataclass, field

from ..errors import OutOfFuel
from ..lang import ir
from ..lang.envs import TypeEnv
from ..lang.records import is_record_term, lookup_field_type, lookup_field_value
from ..passes.analyses import (
    well_formed, has_type, step, is_value, evaluate, free_vars, is_closed, pretty,
)
from ..passes.transforms import substitute

# Each property below is the executable form of a universally quantified
# statement about the calculus: it is checked at one instance and returns
# True when the premise fails or the conclusion holds.

def wf_lookup_propagates(T: ir.Type, label: str) -> bool:
    """A field of a well-formed record type is well formed."""
    fieldT = lookup_field_type(label, T)
    if not well_formed(T) or fieldT is None:
        return True
    return well_formed(fieldT)

def typing_implies_wf(env: TypeEnv, t: ir.Term) -> bool:
    T = has_type(env, t)
    return T is None or well_formed(T)

def field_lookup_in_value(v: ir.Term, label: str) -> bool:
    """Projecting a field the type promises out of a closed value succeeds
    and yields a value of the promised field type."""
    if not is_value(v):
        return True
    T = has_type(TypeEnv(), v)
    if T is None:
        return True
    fieldT = lookup_field_type(label, T)
    if fieldT is None:
        return True
    vi = lookup_field_value(label, v)
    return vi is not None and has_type(TypeEnv(), vi) == fieldT

def progress(t: ir.Term) -> bool:
    if has_type(TypeEnv(), t) is None:
        return True
    return is_value(t) or step(t) is not None

def preservation(t: ir.Term) -> bool:
    T = has_type(TypeEnv(), t)
    if T is None:
        return True
    t_ = step(t)
    if t_ is None:
        return True
    return has_type(TypeEnv(), t_) == T

def substitution_preserves_typing(env: TypeEnv, x: str, U: ir.Type, v: ir.Term, t: ir.Term) -> bool:
    S = has_type(env.extend(x, U), t)
    if S is None or has_type(TypeEnv(), v) != U:
        return True
    return has_type(env, substitute(x, v, t)) == S

def step_preserves_record_shape(t: ir.Term) -> bool:
    if not is_record_term(t):
        return True
    t_ = step(t)
    return t_ is None or is_record_term(t_)

def step_relation(t: ir.Term) -> tp.List[ir.Term]:
    """All results of the reduction rules read as independent inference rules.

    Unlike `step`, no rule is preferred over another; each rule whose premises
    hold contributes a result. Determinism means this list never has more
    than one element.
    """
    out: tp.List[ir.Term] = []
    if isinstance(t, ir.App):
        out += [ir.App(fn_, t.arg) for fn_ in step_relation(t.fn)]
        if is_value(t.fn):
            out += [ir.App(t.fn, arg_) for arg_ in step_relation(t.arg)]
        if isinstance(t.fn, ir.Abs) and is_value(t.arg):
            out.append(substitute(t.fn.param, t.arg, t.fn.body))
    elif isinstance(t, ir.Proj):
        out += [ir.Proj(r_, t.label) for r_ in step_relation(t.record)]
        if is_value(t.record):
            vi = lookup_field_value(t.label, t.record)
            if vi is not None:
                out.append(vi)
    elif isinstance(t, ir.RecordField):
        out += [ir.RecordField(t.label, v_, t.rest) for v_ in step_relation(t.value)]
        if is_value(t.value):
            out += [ir.RecordField(t.label, t.value, r_) for r_ in step_relation(t.rest)]
    return out

def determinism(t: ir.Term) -> bool:
    results = step_relation(t)
    if len(results) > 1:
        return False
    expected = results[0] if results else None
    return step(t) == expected

##############################
## Whole-program checking
##############################

@dataclass
class Counterexample:
    property: str
    term: ir.Node
    detail: str = ""

    def __str__(self):
        detail = f" ({self.detail})" if self.detail else ""
        return f"{self.property} fails on {pretty(self.term)}{detail}"

@dataclass
class PropertyReport:
    checked: int = 0
    counterexamples: tp.List[Counterexample] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.counterexamples

    def check(self, name: str, holds: bool, term: ir.Node, detail: str = ""):
        self.checked += 1
        if not holds:
            self.counterexamples.append(Counterexample(name, term, detail))

    def merge(self, other: 'PropertyReport') -> 'PropertyReport':
        return PropertyReport(self.checked + other.checked, self.counterexamples + other.counterexamples)

    def __str__(self):
        if self.ok:
            return f"{self.checked} checks passed"
        lines = [f"{len(self.counterexamples)} of {self.checked} checks failed:"]
        lines += [f"  {c}" for c in self.counterexamples]
        return "\n".join(lines)

def _labels(node: ir.Node) -> tp.Set[str]:
    labels = {node.label} if isinstance(node, (ir.RecordFieldT, ir.RecordField, ir.Proj)) else set()
    for child in node:
        labels |= _labels(child)
    return labels

def _subterms(node: ir.Node) -> tp.Iterator[ir.Node]:
    yield node
    for child in node:
        yield from _subterms(child)

def check_term(t: ir.Term, report: tp.Optional[PropertyReport] = None) -> PropertyReport:
    """Check every closed-term property at `t` (and at its closed redexes)."""
    if report is None:
        report = PropertyReport()
    empty = TypeEnv()
    report.check("typing_implies_wf", typing_implies_wf(empty, t), t)
    report.check("progress", progress(t), t)
    report.check("preservation", preservation(t), t)
    report.check("determinism", determinism(t), t)
    report.check("step_preserves_record_shape", step_preserves_record_shape(t), t)
    T = has_type(empty, t)
    if T is not None:
        for label in sorted(_labels(T) | _labels(t)):
            report.check("wf_lookup_propagates", wf_lookup_propagates(T, label), T, label)
            report.check("field_lookup_in_value", field_lookup_in_value(t, label), t, label)
    for sub in _subterms(t):
        if isinstance(sub, ir.App) and isinstance(sub.fn, ir.Abs) and is_closed(sub.fn) and is_closed(sub.arg):
            lam = sub.fn
            holds = substitution_preserves_typing(empty, lam.param, lam.paramT, sub.arg, lam.body)
            report.check("substitution_preserves_typing", holds, sub)
    return report

def check_program(t: ir.Term, max_steps: tp.Optional[int] = 1000) -> PropertyReport:
    """Check every closed-term property along the whole evaluation of `t`."""
    report = PropertyReport()
    if not is_closed(t):
        report.check("closed", False, t, f"free variables {sorted(free_vars(t))}")
        return report
    try:
        trace = evaluate(t, max_steps).trace
    except OutOfFuel as e:
        trace = e.partial.trace
    for term in trace:
        check_term(term, report)
    return report
