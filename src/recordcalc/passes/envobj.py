from .pass_base import AnalysisObject
from ..lang.envs import TypeEnv
import typing as tp

# Common Analysis Objects
class TypeEnvObj(AnalysisObject):
    def __init__(self, env: tp.Optional[TypeEnv] = None):
        self.env = env if env is not None else TypeEnv()

# Step limit for the evaluator; None means unbounded
class Fuel(AnalysisObject):
    def __init__(self, max_steps: tp.Optional[int] = None):
        if max_steps is not None and max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {max_steps}")
        self.max_steps = max_steps
