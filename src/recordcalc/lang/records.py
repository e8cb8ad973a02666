from __future__ import annotations
from . import ir
import typing as tp

# Record type/term chains are nested two-constructor cells, not Python
# sequences. These helpers are the only place that knows the cell classes.

def is_record_type(T: ir.Node) -> bool:
    # Outermost constructor only
    return isinstance(T, (ir.RecordEndT, ir.RecordFieldT))

def is_record_term(t: ir.Node) -> bool:
    return isinstance(t, (ir.RecordEnd, ir.RecordField))

def _lookup(label: str, chain: ir.Node, cell: tp.Type[ir.Node]) -> tp.Optional[ir.Node]:
    # Head-to-tail scan; the first cell carrying `label` wins
    node = chain
    while isinstance(node, cell):
        head, rest = node._children
        if node.label == label:
            return head
        node = rest
    return None

def lookup_field_type(label: str, T: ir.Type) -> tp.Optional[ir.Type]:
    return _lookup(label, T, ir.RecordFieldT)

def lookup_field_value(label: str, t: ir.Term) -> tp.Optional[ir.Term]:
    return _lookup(label, t, ir.RecordField)

def fields(chain: ir.Node) -> tp.Iterator[tp.Tuple[str, ir.Node]]:
    """Yield (label, element) for each cell, stopping at the first non-cell.

    Works for both type chains and term chains. Shadowed duplicates are
    yielded too.
    """
    node = chain
    while isinstance(node, (ir.RecordFieldT, ir.RecordField)):
        head, rest = node._children
        yield node.label, head
        node = rest

def chain_end(chain: ir.Node) -> ir.Node:
    """The node that terminates a chain (normally the end marker)."""
    node = chain
    while isinstance(node, (ir.RecordFieldT, ir.RecordField)):
        node = node._children[1]
    return node

def record_type(*pairs: tp.Tuple[str, ir.Type], rest: tp.Optional[ir.Type] = None) -> ir.Type:
    T = rest if rest is not None else ir.RecordEndT()
    for label, fieldT in reversed(pairs):
        T = ir.RecordFieldT(label, fieldT, T)
    return T

def record(*pairs: tp.Tuple[str, ir.Term], rest: tp.Optional[ir.Term] = None) -> ir.Term:
    t = rest if rest is not None else ir.RecordEnd()
    for label, value in reversed(pairs):
        t = ir.RecordField(label, value, t)
    return t
