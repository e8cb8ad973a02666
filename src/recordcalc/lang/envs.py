from __future__ import annotations
from . import ir
import typing as tp

# Identifiers are plain strings; equality is string equality.
Identifier = str

class TypeEnv:
    """Finite partial map from identifiers to types (the typing context Γ).

    Extension never mutates: `extend` returns a new environment in which the
    new binding shadows any earlier binding for the same name.
    """
    def __init__(self, vars: tp.Optional[tp.Mapping[Identifier, ir.Type]] = None):
        self.vars: tp.Dict[Identifier, ir.Type] = dict(vars) if vars is not None else {}
        for name, T in self.vars.items():
            if not isinstance(T, ir.Type):
                raise TypeError(f"Binding for {name} must be a Type, got {T!r}")

    def __getitem__(self, name: Identifier) -> tp.Optional[ir.Type]:
        return self.vars.get(name, None)

    def __contains__(self, name: Identifier):
        return name in self.vars

    def __iter__(self):
        return iter(self.vars)

    def __len__(self):
        return len(self.vars)

    def items(self):
        return self.vars.items()

    def extend(self, name: Identifier, T: ir.Type) -> 'TypeEnv':
        new_vars = dict(self.vars)
        new_vars[name] = T
        return TypeEnv(new_vars)

    def __eq__(self, other):
        return isinstance(other, TypeEnv) and self.vars == other.vars

    def __repr__(self):
        inner = ", ".join(f"{name}: {T}" for name, T in self.vars.items())
        return f"TypeEnv({{{inner}}})"


def fresh(base: Identifier, avoid: tp.Iterable[Identifier]) -> Identifier:
    """Return `base` primed enough times to miss every name in `avoid`."""
    avoid = set(avoid)
    name = base
    while name in avoid:
        name = name + "'"
    return name
