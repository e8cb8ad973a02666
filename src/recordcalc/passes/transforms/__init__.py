#Import all the transform passes
from .substitution import SubstitutionPass, SubMapping, substitute
