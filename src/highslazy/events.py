from __future__ import annotations
import numpy as np
from enum import Enum
from typing import Any, Optional


class CallbackPhase(Enum):
    """
    Search events at which the engine hands control to the callback.
    """

    IDLE = 0
    GLOBAL_PROGRESS = 1
    INTEGER_CANDIDATE_FOUND = 2
    SEARCH_NODE_RELAXED = 3


class CallbackEvent(object):
    """
    A single engine event, tagged with its phase.

    Attributes:
        phase: The search event.
        objective: Engine's best objective (GLOBAL_PROGRESS), possibly an engine infinity sentinel.
        bound: Engine's best bound (GLOBAL_PROGRESS), possibly an engine infinity sentinel.
        runtime: Engine running time in seconds (GLOBAL_PROGRESS).
        values: Candidate assignment (INTEGER_CANDIDATE_FOUND) or relaxation solution (SEARCH_NODE_RELAXED).
    """

    __slots__ = ["phase", "objective", "bound", "runtime", "values"]

    def __init__(
        self,
        phase: CallbackPhase,
        objective: Optional[float] = None,
        bound: Optional[float] = None,
        runtime: Optional[float] = None,
        values: Optional[np.ndarray[Any, np.dtype[np.float64]]] = None,
    ):
        self.phase = phase
        self.objective = objective
        self.bound = bound
        self.runtime = runtime
        self.values = values

    def __repr__(self):
        return f"CallbackEvent({self.phase.name})"

    @staticmethod
    def globalProgress(objective: float, bound: float, runtime: Optional[float] = None):
        return CallbackEvent(CallbackPhase.GLOBAL_PROGRESS, objective=objective, bound=bound, runtime=runtime)

    @staticmethod
    def integerCandidate(values: np.ndarray[Any, np.dtype[np.float64]]):
        return CallbackEvent(CallbackPhase.INTEGER_CANDIDATE_FOUND, values=values)

    @staticmethod
    def nodeRelaxed(values: Optional[np.ndarray[Any, np.dtype[np.float64]]] = None):
        return CallbackEvent(CallbackPhase.SEARCH_NODE_RELAXED, values=values)
