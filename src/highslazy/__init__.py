from .infinity import inf
from .errors import \
    EngineFailure, \
    CallbackFailure, \
    InvalidStateError, \
    OutOfRangeError, \
    NotSolvedError
from .constraint import LinearConstraint, LinearExpression, buildConstraints
from .options import Focus, LPSolver, PreSolver, SolverOptions
from .events import CallbackEvent, CallbackPhase
from .solution import SolutionAccessor
from .callback import Callback
from .model import Model

__all__ = ["inf",
           "EngineFailure",
           "CallbackFailure",
           "InvalidStateError",
           "OutOfRangeError",
           "NotSolvedError",
           "LinearConstraint",
           "LinearExpression",
           "buildConstraints",
           "Focus",
           "LPSolver",
           "PreSolver",
           "SolverOptions",
           "CallbackEvent",
           "CallbackPhase",
           "SolutionAccessor",
           "Callback",
           "Model",
           ]
