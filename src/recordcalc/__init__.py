# Syntax
from .lang.ir import BaseT, ArrowT, RecordEndT, RecordFieldT
from .lang.ir import Var, App, Abs, Proj, RecordEnd, RecordField
_syntax = ['BaseT', 'ArrowT', 'RecordEndT', 'RecordFieldT', 'Var', 'App', 'Abs', 'Proj', 'RecordEnd', 'RecordField']

# Contexts and records
from .lang.envs import TypeEnv
from .lang.records import is_record_type, is_record_term, lookup_field_type, lookup_field_value, record_type, record
_records = ['TypeEnv', 'is_record_type', 'is_record_term', 'lookup_field_type', 'lookup_field_value', 'record_type', 'record']

# Judgments and semantics
from .passes.analyses import well_formed, has_type, type_of, step, is_value, is_stuck, evaluate, normalize
from .passes.analyses import free_vars, appears_free_in, is_closed, pretty
from .passes.transforms import substitute
_semantics = [
    'well_formed', 'has_type', 'type_of', 'step', 'is_value', 'is_stuck', 'evaluate', 'normalize',
    'free_vars', 'appears_free_in', 'is_closed', 'pretty', 'substitute',
]

# Errors
from .errors import CalculusError, IllTyped, StuckTerm, OutOfFuel
_errors = ['CalculusError', 'IllTyped', 'StuckTerm', 'OutOfFuel']

# Programs
from .programs import get_program, run_program, Program
_programs = ['get_program', 'run_program', 'Program']

__all__ = [
    *_syntax,
    *_records,
    *_semantics,
    *_errors,
    *_programs,
]
