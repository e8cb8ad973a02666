from __future__ import annotations

import typing as tp
import numpy as np

from ..lang import ir
from ..lang.envs import TypeEnv
from ..lang.records import record_type, record

class TermGenerator:
    """Random types and terms for exercising the metatheory properties.

    `term_of` only builds terms that have exactly the requested type under
    the given context; it returns None when it cannot inhabit the type
    (base types have no introduction form, so they are only reachable
    through variables). `any_term` builds arbitrary, usually ill-typed, terms.
    """
    def __init__(self,
        seed: int = 0,
        bases: tp.Sequence[str] = ("A", "B"),
        labels: tp.Sequence[str] = ("i1", "i2", "i3"),
        names: tp.Sequence[str] = ("a", "b", "c"),
        max_depth: int = 3,
        rng: tp.Optional[np.random.Generator] = None,
    ):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.bases = tuple(bases)
        self.labels = tuple(labels)
        self.names = tuple(names)
        self.max_depth = max_depth

    def _pick(self, seq: tp.Sequence):
        return seq[int(self.rng.integers(len(seq)))]

    def _coin(self, p: float = 0.5) -> bool:
        return bool(self.rng.random() < p)

    def _width(self, hi: int = 3) -> int:
        return int(self.rng.integers(0, hi + 1))

    ##############################
    ## Types
    ##############################

    def wf_type(self, depth: tp.Optional[int] = None) -> ir.Type:
        if depth is None:
            depth = self.max_depth
        if depth <= 0:
            return ir.BaseT(self._pick(self.bases)) if self._coin(0.7) else ir.RecordEndT()
        kind = self._pick(("base", "arrow", "record"))
        if kind == "base":
            return ir.BaseT(self._pick(self.bases))
        if kind == "arrow":
            return ir.ArrowT(self.wf_type(depth - 1), self.wf_type(depth - 1))
        # duplicate labels are allowed on purpose
        pairs = [(self._pick(self.labels), self.wf_type(depth - 1)) for _ in range(self._width())]
        return record_type(*pairs)

    def any_type(self, depth: tp.Optional[int] = None) -> ir.Type:
        """Like wf_type, but record tails may be any type."""
        if depth is None:
            depth = self.max_depth
        if depth <= 0:
            return self._pick((ir.BaseT(self._pick(self.bases)), ir.RecordEndT()))
        kind = self._pick(("base", "arrow", "end", "field"))
        if kind == "base":
            return ir.BaseT(self._pick(self.bases))
        if kind == "arrow":
            return ir.ArrowT(self.any_type(depth - 1), self.any_type(depth - 1))
        if kind == "end":
            return ir.RecordEndT()
        return ir.RecordFieldT(self._pick(self.labels), self.any_type(depth - 1), self.any_type(depth - 1))

    def inhabited(self, T: ir.Type, env: TypeEnv) -> bool:
        # Conservative: only direct variable lookups count for base types
        if any(U == T for _, U in env.items()):
            return True
        if isinstance(T, ir.ArrowT):
            return self.inhabited(T.resT, env.extend("_", T.argT))
        if isinstance(T, ir.RecordEndT):
            return True
        if isinstance(T, ir.RecordFieldT):
            return self.inhabited(T.fieldT, env) and self.inhabited(T.rest, env)
        return False

    ##############################
    ## Well-typed terms
    ##############################

    def term_of(self, T: ir.Type, env: tp.Optional[TypeEnv] = None, depth: tp.Optional[int] = None) -> tp.Optional[ir.Term]:
        if env is None:
            env = TypeEnv()
        if depth is None:
            depth = self.max_depth
        options = ["intro"]
        if any(U == T for _, U in env.items()):
            options.append("var")
        if depth > 0:
            options += ["app", "proj"]
        order = [options[i] for i in self.rng.permutation(len(options))]
        for option in order:
            t = getattr(self, f"_{option}")(T, env, depth)
            if t is not None:
                return t
        return None

    def value_of(self, T: ir.Type) -> tp.Optional[ir.Term]:
        # With no variables and no depth only introduction forms remain
        return self.term_of(T, TypeEnv(), depth=0)

    def closed_term(self, depth: tp.Optional[int] = None, tries: int = 20) -> tp.Optional[tp.Tuple[ir.Term, ir.Type]]:
        for _ in range(tries):
            T = self.wf_type()
            t = self.term_of(T, TypeEnv(), depth)
            if t is not None:
                return t, T
        return None

    def _var(self, T: ir.Type, env: TypeEnv, depth: int):
        matches = [name for name, U in env.items() if U == T]
        if not matches:
            return None
        return ir.Var(self._pick(matches))

    def _intro(self, T: ir.Type, env: TypeEnv, depth: int):
        if isinstance(T, ir.ArrowT):
            x = self._pick(self.names)
            body = self.term_of(T.resT, env.extend(x, T.argT), depth - 1)
            return None if body is None else ir.Abs(x, T.argT, body)
        if isinstance(T, ir.RecordEndT):
            return ir.RecordEnd()
        if isinstance(T, ir.RecordFieldT):
            value = self.term_of(T.fieldT, env, depth - 1)
            # the tail must itself be a record term, so always introduce it
            rest = self._intro(T.rest, env, depth - 1)
            if value is None or rest is None:
                return None
            return ir.RecordField(T.label, value, rest)
        return None

    def _app(self, T: ir.Type, env: TypeEnv, depth: int):
        U = self.wf_type(min(depth - 1, 1))
        if not self.inhabited(U, env):
            return None
        fn = self.term_of(ir.ArrowT(U, T), env, depth - 1)
        arg = self.term_of(U, env, depth - 1)
        if fn is None or arg is None:
            return None
        return ir.App(fn, arg)

    def _proj(self, T: ir.Type, env: TypeEnv, depth: int):
        label = self._pick(self.labels)
        others = [l for l in self.labels if l != label]
        # fields before `label` must not shadow it
        prefix = [(self._pick(others), self.wf_type(0)) for _ in range(self._width(1))] if others else []
        suffix = [(self._pick(self.labels), self.wf_type(0)) for _ in range(self._width(1))]
        R = record_type(*prefix, (label, T), *suffix)
        r = self.term_of(R, env, depth - 1)
        return None if r is None else ir.Proj(r, label)

    ##############################
    ## Arbitrary terms
    ##############################

    def any_term(self, depth: tp.Optional[int] = None) -> ir.Term:
        if depth is None:
            depth = self.max_depth
        if depth <= 0:
            return self._pick((ir.Var(self._pick(self.names)), ir.RecordEnd()))
        kind = self._pick(("var", "app", "abs", "proj", "end", "field", "record"))
        if kind == "var":
            return ir.Var(self._pick(self.names))
        if kind == "app":
            return ir.App(self.any_term(depth - 1), self.any_term(depth - 1))
        if kind == "abs":
            return ir.Abs(self._pick(self.names), self.any_type(1), self.any_term(depth - 1))
        if kind == "proj":
            return ir.Proj(self.any_term(depth - 1), self._pick(self.labels))
        if kind == "end":
            return ir.RecordEnd()
        if kind == "field":
            return ir.RecordField(self._pick(self.labels), self.any_term(depth - 1), self.any_term(depth - 1))
        pairs = [(self._pick(self.labels), self.any_term(depth - 1)) for _ in range(self._width())]
        return record(*pairs)
