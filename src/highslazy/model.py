from __future__ import annotations
import logging
import time
import numpy as np
from typing import Any, Iterable, Optional, Sequence

from highspy import Highs, HighsModelStatus, HighsStatus

from .callback import Callback
from .constraint import LinearConstraint, buildConstraints
from .engine import CallbackBridge
from .errors import EngineFailure, InvalidStateError, NotSolvedError, OutOfRangeError, checkStatus
from .infinity import fromEngine, inf, toEngine
from .options import Focus, LPSolver, PreSolver, SolverOptions

logger = logging.getLogger(__name__)


class Model(object):
    """
    Binary program min c'x subject to linear constraints, solved by HiGHS with an optional Callback.

    Variables are identified by their zero-based index, assigned in the order they are added.
    """

    def __init__(self, options: Optional[SolverOptions] = None):
        self._highs = Highs()
        self._highs.silent()

        self.options = SolverOptions() if options is None else options

        # index -> engine handle, immutable once added
        self._variables: list[Any] = []
        self._costs = np.zeros(0, dtype=np.float64)
        self._start: Optional[np.ndarray[Any, np.dtype[np.float64]]] = None
        self._priorities: dict[int, int] = {}
        self._callback: Optional[Callback] = None
        self._pending: list[LinearConstraint] = []
        self._started = False
        self._solved = False

        self.__applyOptions()

    @property
    def numberOfVariables(self) -> int:
        return len(self._variables)

    @property
    def numberOfConstraints(self) -> int:
        return self._highs.numConstrs

    @property
    def status(self) -> str:
        """
        HiGHS model status of the last run, e.g. "Optimal".
        """
        return self._highs.modelStatusToString(self._highs.getModelStatus())

    #
    # configuration
    #
    def __setOption(self, name: str, value: Any):
        checkStatus(self._highs.setOptionValue(name, value), f"setOptionValue({name!r})")

    def __applyOptions(self):
        for name, value in self.options.toHighsOptions().items():
            self.__setOption(name, value)

    def setTimeLimit(self, numberOfSeconds: float):
        self.options.time_limit = float(numberOfSeconds)
        self.__applyOptions()

    def setNumberOfThreads(self, numberOfThreads: int):
        self.options.threads = int(numberOfThreads)
        self.__applyOptions()

    def setAbsoluteGap(self, gap: float):
        self.options.absolute_gap = float(gap)
        self.__applyOptions()

    def setRelativeGap(self, gap: float):
        self.options.relative_gap = float(gap)
        self.__applyOptions()

    def setFocus(self, focus: Focus):
        self.options.focus = focus
        self.__applyOptions()

    def setCutoff(self, cutoff: float):
        self.options.cutoff = float(cutoff)
        self.__applyOptions()

    def setVerbosity(self, verbosity: bool):
        self.options.verbose = bool(verbosity)
        self.__applyOptions()

    def setLPSolver(self, lpSolver: LPSolver):
        self.options.lp_solver = lpSolver
        self.__applyOptions()

    def setPreSolver(self, preSolver: PreSolver, passes: int = -1):
        self.options.presolver = preSolver
        self.options.presolve_passes = int(passes)
        self.__applyOptions()

    def numberOfThreads(self) -> int:
        return self.options.threads

    def absoluteGap(self) -> float:
        return self.options.absolute_gap

    def relativeGap(self) -> float:
        return self.options.relative_gap

    #
    # model building
    #
    def __checkIndex(self, index: int):
        if not 0 <= int(index) < self.numberOfVariables:
            raise OutOfRangeError(f"Variable index {index} out of range [0, {self.numberOfVariables}).")

    def _checkIndices(self, indices: Iterable[int]) -> list[int]:
        """
        Validates every index, including those of expressions that produce no rows.
        """
        indices = [int(i) for i in indices]

        for i in indices:
            self.__checkIndex(i)

        return indices

    def _objectiveValue(self, values: np.ndarray[Any, np.dtype[np.float64]]) -> float:
        return float(np.dot(self._costs, values[: self.numberOfVariables]))

    def addVariables(self, coefficients: Iterable[float]) -> int:
        """
        Adds one binary variable per objective coefficient.

        Args:
            coefficients: Objective coefficient of each new variable.

        Raises:
            InvalidStateError: If optimization has already started.

        Returns:
            Index of the first added variable (the current variable count if nothing was added).
        """
        if self._started:
            raise InvalidStateError("Variables cannot be added once optimization has started.")

        obj = [float(c) for c in coefficients]
        first = self.numberOfVariables

        if len(obj) == 0:
            return first

        handles = self._highs.addBinaries(len(obj), obj=obj, name=[f"x{i}" for i in range(first, first + len(obj))])
        self._variables.extend(handles)
        self._costs = np.concatenate([self._costs, np.asarray(obj, dtype=np.float64)])
        return first

    def addConstraint(
        self,
        indices: Iterable[int],
        coefficients: Iterable[float],
        lowerBound: float,
        upperBound: float,
    ) -> int:
        """
        Adds lowerBound <= sum(coefficients[i] * x[indices[i]]) <= upperBound to the model.

        Raises:
            OutOfRangeError: If an index does not refer to an existing variable.

        Returns:
            The number of rows added (0, 1 or 2).
        """
        indices = self._checkIndices(indices)
        rows = buildConstraints(indices, coefficients, lowerBound, upperBound)

        for row in rows:
            self.__addRow(row)

        return len(rows)

    def __addRow(self, row: LinearConstraint):
        handles = np.asarray([int(self._variables[i]) for i in row.indices], dtype=np.int32)
        status = self._highs.addRow(toEngine(row.lower), toEngine(row.upper), len(handles), handles, row.coefficients)
        checkStatus(status, "addConstraint")

    def setStart(self, values: Iterable[float]):
        """
        Sets an advisory initial value for every variable, in index order.
        """
        start = np.asarray([float(v) for v in values], dtype=np.float64)

        if len(start) != self.numberOfVariables:
            raise ValueError(f"Expected {self.numberOfVariables} start values, got {len(start)}.")

        self._start = start

    def setBranchPriority(self, variableIndex: int, branchPriority: int):
        """
        Records a branching priority hint.  HiGHS does not expose branching priorities, so this does not
        change the search.
        """
        self.__checkIndex(variableIndex)
        self._priorities[int(variableIndex)] = int(branchPriority)

    def branchPriority(self, variableIndex: int) -> int:
        self.__checkIndex(variableIndex)
        return self._priorities.get(int(variableIndex), 0)

    def setCallback(self, callback: Callback):
        if callback.model is not self:
            raise InvalidStateError("Callback was created for a different model.")
        self._callback = callback

    #
    # lazy constraints, staged by the callback during a run
    #
    def _stageLazyConstraints(self, rows: Sequence[LinearConstraint]):
        self._pending.extend(rows)

    def _hasPendingConstraints(self) -> bool:
        return len(self._pending) > 0

    def _numPendingConstraints(self) -> int:
        return len(self._pending)

    def __flushLazyConstraints(self) -> int:
        rows, self._pending = self._pending, []

        for row in rows:
            self.__addRow(row)

        return len(rows)

    #
    # solve
    #
    def __hasSolution(self) -> bool:
        return bool(self._highs.getSolution().value_valid)

    def __incumbent(self):
        return np.asarray(self._highs.getSolution().col_value, dtype=np.float64)[: self.numberOfVariables]

    def __run(self, time_limit: float, warm_start: Optional[tuple[Any, Any]] = None):
        self.__setOption("time_limit", toEngine(max(time_limit, 0.0)))
        checkStatus(self._highs.clearSolver(), "clearSolver")

        if warm_start is not None:
            idxs, vals = warm_start
            checkStatus(self._highs.setSolution(len(idxs), idxs, vals), "setStart")
        elif self._start is not None:
            idxs = np.arange(self.numberOfVariables, dtype=np.int32)
            checkStatus(self._highs.setSolution(len(idxs), idxs, self._start), "setStart")

        return self._highs.solve()

    def optimize(self):
        """
        Solves the model.  With a callback registered, HiGHS is re-run whenever the callback adds lazy
        constraints, until a run finishes without new ones or the time limit is spent.

        Raises:
            EngineFailure: If HiGHS reports an error.
            CallbackFailure: If a callback hook raised.  Lazy constraints added before are kept.
        """
        self._started = True
        self._solved = False

        if self._callback is None:
            checkStatus(self.__run(self.options.time_limit), "optimize", self.status)
            self._solved = self.__hasSolution()
            return

        self._callback.reset()

        # candidates must be reported in the original variable space
        self.__setOption("presolve", "off")
        deadline = time.monotonic() + self.options.time_limit
        warm_start = None
        restarts = 0

        try:
            with CallbackBridge(self, self._callback) as bridge:
                while True:
                    status = self.__run(deadline - time.monotonic(), warm_start)
                    added = self.__flushLazyConstraints()

                    if bridge.failure is not None:
                        raise bridge.failure

                    checkStatus(status, "optimize", self.status)

                    if added == 0 and self._highs.getModelStatus() == HighsModelStatus.kInterrupt:
                        raise EngineFailure(
                            int(HighsStatus.kWarning),
                            "run was interrupted without pending lazy constraints",
                            "optimize",
                        )

                    if added == 0 and self.__hasSolution():
                        bridge.separateIncumbent(self.__incumbent())
                        added = self.__flushLazyConstraints()

                        if bridge.failure is not None:
                            raise bridge.failure

                    bridge.reportBound(self._highs.getInfo().mip_dual_bound)

                    if added == 0:
                        self._solved = self.__hasSolution()
                        break

                    restarts += 1
                    logger.info("added %d lazy constraints, restarting HiGHS (restart %d)", added, restarts)

                    if time.monotonic() >= deadline:
                        logger.warning("time limit reached before all lazy constraints were enforced")
                        break

                    warm_start = bridge.heuristic_solution

                logger.debug("%d integer candidates separated, %d restarts", bridge.candidates, restarts)
        finally:
            self.__applyOptions()

    #
    # results
    #
    def __checkSolved(self):
        if not self._solved:
            raise NotSolvedError("No solution available; call optimize() first.")

    def objective(self) -> float:
        self.__checkSolved()
        return fromEngine(self._highs.getInfo().objective_function_value)

    def bound(self) -> float:
        self.__checkSolved()
        return fromEngine(self._highs.getInfo().mip_dual_bound)

    def gap(self) -> float:
        objective = self.objective()
        return (objective - self.bound()) / (1.0 + abs(objective))

    def label(self, variableIndex: int) -> float:
        self.__checkSolved()
        self.__checkIndex(variableIndex)
        return float(self._highs.val(self._variables[variableIndex]))

    def labels(self) -> np.ndarray[Any, np.dtype[np.float64]]:
        self.__checkSolved()
        return self.__incumbent()
