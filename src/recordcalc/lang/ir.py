from __future__ import annotations
import typing as tp

# Base class for IR
class Node:
    _fields: tp.Tuple[str, ...] = ()
    _numc: int = 0
    def __init__(self, *children: 'Node'):
        for child in children:
            if not isinstance(child, Node):
                raise TypeError(f"Expected Node, got {child}")
        if len(children) != self._numc:
            raise TypeError(f"Expected {self._numc} children, got {len(children)}")
        self._children: tp.Tuple[Node, ...] = children
        self._key = self._gen_key()
        self._hash = hash(self._key)

    # Shallow key: children contribute their cached hashes, so building and
    # hashing a long record chain never recurses
    def _gen_key(self):
        child_hashes = tuple(c._hash for c in self._children)
        fields = tuple(getattr(self, field) for field in self._fields)
        return (self.__class__.__name__, fields, child_hashes)

    def __iter__(self):
        return iter(self._children)

    def __repr__(self):
        field_str = ",".join([f"{k}={v!r}" for k, v in self.field_dict.items()])
        if field_str:
            field_str = f"[{field_str}]"
        return f"{self.__class__.__name__}{field_str}({', '.join(repr(c) for c in self._children)})"

    def __str__(self):
        from ..passes.analyses.pretty_printer import pretty
        return pretty(self)

    @property
    def field_dict(self):
        return {f: getattr(self, f) for f in self._fields}

    def replace(self, *new_children: 'Node', **kwargs: tp.Any) -> 'Node':
        new_fields = {**self.field_dict, **kwargs}
        if new_children == self._children and new_fields == self.field_dict:
            return self
        return type(self)._build(new_children, new_fields)

    @classmethod
    def _build(cls, children: tp.Tuple['Node', ...], fields: tp.Dict[str, tp.Any]) -> 'Node':
        # Constructors take fields first, then children (e.g. Abs(param, T, body))
        return cls(*fields.values(), *children)

    def eq(self, other):
        # Walks both trees with an explicit stack; long record chains are deep
        work = [(self, other)]
        while work:
            a, b = work.pop()
            if a is b:
                continue
            if not isinstance(b, Node) or a._key != b._key:
                return False
            work.extend(zip(a._children, b._children))
        return True

    # Structural equality: nodes are immutable, so the key never changes
    def __eq__(self, other):
        return self.eq(other)

    def __hash__(self):
        return self._hash


##############################
## Types
##############################

class Type(Node):
    def __init__(self, *children: Type):
        for child in children:
            if not isinstance(child, Type):
                raise TypeError(f"{self.__class__.__name__} children must be Types, got {child!r}")
        super().__init__(*children)


# Opaque ground type tagged by an identifier
class BaseT(Type):
    _fields = ("name",)
    _numc = 0
    __match_args__ = ("name",)
    def __init__(self, name: str):
        self.name = name
        super().__init__()


class ArrowT(Type):
    _numc = 2
    __match_args__ = ("argT", "resT")
    def __init__(self, argT: Type, resT: Type):
        super().__init__(argT, resT)

    @property
    def argT(self) -> Type:
        return self._children[0]

    @property
    def resT(self) -> Type:
        return self._children[1]


# The empty record type
class RecordEndT(Type):
    _numc = 0
    __match_args__ = ()
    def __init__(self):
        super().__init__()


# One labeled cell of a record type chain. `rest` is not required to be a
# record type here; see well_formed.
class RecordFieldT(Type):
    _fields = ("label",)
    _numc = 2
    __match_args__ = ("label", "fieldT", "rest")
    def __init__(self, label: str, fieldT: Type, rest: Type):
        self.label = label
        super().__init__(fieldT, rest)

    @property
    def fieldT(self) -> Type:
        return self._children[0]

    @property
    def rest(self) -> Type:
        return self._children[1]


##############################
## Terms
##############################

class Term(Node):
    ...


class Var(Term):
    _fields = ("name",)
    _numc = 0
    __match_args__ = ("name",)
    def __init__(self, name: str):
        self.name = name
        super().__init__()


class App(Term):
    _numc = 2
    __match_args__ = ("fn", "arg")
    def __init__(self, fn: Term, arg: Term):
        _expect_terms(self, fn, arg)
        super().__init__(fn, arg)

    @property
    def fn(self) -> Term:
        return self._children[0]

    @property
    def arg(self) -> Term:
        return self._children[1]


# (λparam:paramT. body)
class Abs(Term):
    _fields = ("param",)
    _numc = 2
    __match_args__ = ("param", "paramT", "body")
    def __init__(self, param: str, paramT: Type, body: Term):
        if not isinstance(paramT, Type):
            raise TypeError(f"Abs parameter type must be a Type, got {paramT!r}")
        _expect_terms(self, body)
        self.param = param
        super().__init__(paramT, body)

    @property
    def paramT(self) -> Type:
        return self._children[0]

    @property
    def body(self) -> Term:
        return self._children[1]


class Proj(Term):
    _fields = ("label",)
    _numc = 1
    __match_args__ = ("record", "label")
    def __init__(self, record: Term, label: str):
        _expect_terms(self, record)
        self.label = label
        super().__init__(record)

    @property
    def record(self) -> Term:
        return self._children[0]

    @classmethod
    def _build(cls, children, fields):
        return cls(*children, **fields)


class RecordEnd(Term):
    _numc = 0
    __match_args__ = ()
    def __init__(self):
        super().__init__()


class RecordField(Term):
    _fields = ("label",)
    _numc = 2
    __match_args__ = ("label", "value", "rest")
    def __init__(self, label: str, value: Term, rest: Term):
        _expect_terms(self, value, rest)
        self.label = label
        super().__init__(value, rest)

    @property
    def value(self) -> Term:
        return self._children[0]

    @property
    def rest(self) -> Term:
        return self._children[1]


def _expect_terms(node: Node, *children: Node):
    for child in children:
        if not isinstance(child, Term):
            raise TypeError(f"{node.__class__.__name__} children must be Terms, got {child!r}")
