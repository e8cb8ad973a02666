from .ir import Node, Type, Term
from .ir import BaseT, ArrowT, RecordEndT, RecordFieldT
from .ir import Var, App, Abs, Proj, RecordEnd, RecordField
from .envs import TypeEnv, Identifier, fresh
from .records import is_record_type, is_record_term, lookup_field_type, lookup_field_value, record_type, record
