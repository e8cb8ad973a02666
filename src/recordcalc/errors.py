from __future__ import annotations
import typing as tp

if tp.TYPE_CHECKING:
    from .lang import ir


class CalculusError(Exception):
    ...


class IllTyped(CalculusError, TypeError):
    """No typing rule applies to `node`."""
    def __init__(self, msg: str, node: tp.Optional[ir.Node] = None):
        super().__init__(msg)
        self.node = node


class StuckTerm(CalculusError):
    """A term that is not a value and has no applicable step."""
    def __init__(self, term: ir.Term):
        super().__init__(f"No step available, not a value: {term}")
        self.term = term


class OutOfFuel(CalculusError, RuntimeError):
    def __init__(self, max_steps: int, partial):
        super().__init__(f"Evaluation did not finish within {max_steps} steps")
        self.max_steps = max_steps
        self.partial = partial
