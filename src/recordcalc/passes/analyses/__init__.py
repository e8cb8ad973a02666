# Import all the analysis passes and their corresponding Analysis Object (if exists)
from .well_formed import WellFormednessPass, WellFormedResult, well_formed
from .free_vars import FreeVarGetter, VarSet, free_vars, appears_free_in, is_closed
from .type_check import TypeCheckingPass, TypeCheckResult, type_of, has_type
from .step import Stepper, StepResult, step, is_value, is_stuck
from .evaluator import EvalPass, EvalResult, evaluate, normalize
from .pretty_printer import PrettyPrinterPass, PrettyPrintedExpr, pretty
