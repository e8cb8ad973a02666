from .properties import (
    wf_lookup_propagates,
    typing_implies_wf,
    field_lookup_in_value,
    progress,
    preservation,
    substitution_preserves_typing,
    step_preserves_record_shape,
    step_relation,
    determinism,
    check_term,
    check_program,
    Counterexample,
    PropertyReport,
)
from .generators import TermGenerator
