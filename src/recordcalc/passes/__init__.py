from .pass_base import PassManager, Context, AnalysisObject, Analysis, Transform, handles
from .envobj import TypeEnvObj, Fuel
