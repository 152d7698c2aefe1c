from __future__ import annotations
import numpy as np
from typing import Any, Optional

from .errors import InvalidStateError, OutOfRangeError
from .events import CallbackPhase


class SolutionAccessor(object):
    """
    Read/write view of the engine's solution state during a single callback event.

    Candidate values can only be read while an integer candidate is being separated, and a solution
    can only be written while a relaxed search node is being processed.
    """

    __slots__ = ["phase", "num_variables", "values", "staged_idxs", "staged_vals"]

    def __init__(
        self,
        phase: CallbackPhase,
        num_variables: int,
        values: Optional[np.ndarray[Any, np.dtype[np.float64]]] = None,
    ):
        self.phase = phase
        self.num_variables = num_variables
        self.values = values
        self.staged_idxs: list[int] = []
        self.staged_vals: list[float] = []

    def __check_index(self, index: int):
        if not 0 <= index < self.num_variables:
            raise OutOfRangeError(f"Variable index {index} out of range [0, {self.num_variables}).")

    def readLabel(self, index: int) -> float:
        """
        Value of a variable in the integer candidate being separated.
        """
        if self.phase != CallbackPhase.INTEGER_CANDIDATE_FOUND:
            raise InvalidStateError(f"Candidate labels are not available during {self.phase.name}.")

        self.__check_index(index)
        return float(self.values[index])

    def readRelaxation(self, index: int) -> float:
        """
        Value of a variable in the relaxation solution at the current search node, if the engine supplied one.
        """
        if self.phase != CallbackPhase.SEARCH_NODE_RELAXED or self.values is None:
            raise InvalidStateError(f"Relaxation values are not available during {self.phase.name}.")

        self.__check_index(index)
        return float(self.values[index])

    def writeLabel(self, index: int, value: float):
        """
        Stages a value for a variable in the solution offered back to the engine.
        """
        if self.phase != CallbackPhase.SEARCH_NODE_RELAXED:
            raise InvalidStateError(f"Labels can only be written during SEARCH_NODE_RELAXED, not {self.phase.name}.")

        self.__check_index(index)

        # later writes to the same variable replace earlier ones
        if index in self.staged_idxs:
            self.staged_vals[self.staged_idxs.index(index)] = float(value)
        else:
            self.staged_idxs.append(index)
            self.staged_vals.append(float(value))

    def isComplete(self) -> bool:
        return len(self.staged_idxs) == self.num_variables

    def staged(self):
        """
        Returns the staged (indices, values) arrays, sorted by variable index.
        """
        idxs = np.asarray(self.staged_idxs, dtype=np.int32)
        order = np.argsort(idxs, kind="stable")
        return idxs[order], np.asarray(self.staged_vals, dtype=np.float64)[order]
