from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from .constraint import buildConstraints
from .errors import CallbackFailure, EngineFailure, InvalidStateError
from .events import CallbackEvent, CallbackPhase
from .infinity import fromEngine, inf
from .solution import SolutionAccessor

if TYPE_CHECKING:
    from .model import Model

logger = logging.getLogger(__name__)


class Callback(ABC):
    """
    Injects problem knowledge into the engine's branch-and-cut search.

    Subclasses implement two hooks:
        separateAndAddLazyConstraints: called for every integer candidate the engine finds. Reads the
            candidate with label() and registers violated constraints with addLazyConstraint().
        computeFeasibleSolution: called at the next relaxed search node after a candidate was found.
            May write a (complete) assignment with setLabel(); the engine validates it and may adopt
            it as the incumbent.  Doing nothing is allowed.

    Example:
        >>> class NoPairs(Callback):
        ...     def separateAndAddLazyConstraints(self):
        ...         if self.label(0) + self.label(1) > 1.5:
        ...             self.addLazyConstraint([0, 1], [1, 1], -inf, 1)
        ...
        ...     def computeFeasibleSolution(self):
        ...         pass
        >>>
        >>> model.setCallback(NoPairs(model))
        >>> model.optimize()
    """

    def __init__(self, model: Model):
        self.model = model
        self.reset()

    @abstractmethod
    def separateAndAddLazyConstraints(self):
        """
        Inspects the current integer candidate and adds a lazy constraint for each violated problem constraint.
        Must be deterministic for a given candidate and must not write a solution.
        """

    @abstractmethod
    def computeFeasibleSolution(self):
        """
        Optionally writes a feasible assignment with setLabel() at a relaxed search node.
        """

    def reset(self):
        """
        Restores the initial bookkeeping state.  Called at the start of every optimize().
        """
        self._objective_best = inf
        self._objective_bound = -inf
        self._pending_heuristic = False
        self._runtime = 0.0
        self._accessor: Optional[SolutionAccessor] = None

    @property
    def objectiveBest(self) -> float:
        """
        Best objective of an integer candidate that passed separation so far (inf if none).
        """
        return self._objective_best

    @property
    def objectiveBound(self) -> float:
        """
        Best proven lower bound reported by the engine so far (-inf if none).
        """
        return self._objective_bound

    @property
    def gap(self) -> float:
        if self._objective_best == inf or self._objective_bound == -inf:
            return inf
        return (self._objective_best - self._objective_bound) / (1.0 + abs(self._objective_best))

    @property
    def pendingHeuristic(self) -> bool:
        return self._pending_heuristic

    @property
    def runtime(self) -> float:
        return self._runtime

    def dispatch(self, event: CallbackEvent):
        """
        Handles one engine event.

        Args:
            event: The tagged engine event.

        Raises:
            CallbackFailure: If a hook raised.  The session must be aborted.

        Returns:
            For SEARCH_NODE_RELAXED, the staged (indices, values) arrays if the heuristic wrote a solution,
            None otherwise.
        """
        if event.phase == CallbackPhase.GLOBAL_PROGRESS:
            self.__progress(event)

        elif event.phase == CallbackPhase.INTEGER_CANDIDATE_FOUND:
            accessor = SolutionAccessor(event.phase, self.model.numberOfVariables, event.values)
            self.__run(self.separateAndAddLazyConstraints, accessor)
            self._pending_heuristic = True

        elif event.phase == CallbackPhase.SEARCH_NODE_RELAXED and self._pending_heuristic:
            accessor = SolutionAccessor(event.phase, self.model.numberOfVariables, event.values)

            try:
                self.__run(self.computeFeasibleSolution, accessor)
            finally:
                self._pending_heuristic = False

            if len(accessor.staged_idxs) > 0:
                logger.debug(
                    "heuristic staged %d of %d values",
                    len(accessor.staged_idxs),
                    accessor.num_variables,
                )
                return accessor.staged()

        return None

    def __progress(self, event: CallbackEvent):
        # objective and bound only ever improve within a session
        if event.objective is not None:
            self._objective_best = min(self._objective_best, fromEngine(event.objective))

        if event.bound is not None:
            self._objective_bound = max(self._objective_bound, fromEngine(event.bound))

        if event.runtime is not None:
            self._runtime = float(event.runtime)

    def __run(self, hook: Callable[[], Any], accessor: SolutionAccessor):
        self._accessor = accessor

        try:
            hook()
        except CallbackFailure:
            raise
        except EngineFailure as e:
            raise CallbackFailure(f"{e.message} while executing {hook.__name__}", e.code) from e
        except Exception as e:
            raise CallbackFailure(f"{type(e).__name__}: {e} while executing {hook.__name__}") from e
        finally:
            self._accessor = None

    def __active(self, operation: str) -> SolutionAccessor:
        if self._accessor is None:
            raise InvalidStateError(f"{operation} is only available inside a callback hook.")
        return self._accessor

    # only available in separateAndAddLazyConstraints
    def label(self, variableIndex: int) -> float:
        return self.__active("label").readLabel(variableIndex)

    # only available in computeFeasibleSolution
    def setLabel(self, variableIndex: int, value: float):
        self.__active("setLabel").writeLabel(variableIndex, value)

    # only available in computeFeasibleSolution
    def relaxation(self, variableIndex: int) -> float:
        return self.__active("relaxation").readRelaxation(variableIndex)

    def addLazyConstraint(
        self,
        indices: Iterable[int],
        coefficients: Iterable[float],
        lowerBound: float,
        upperBound: float,
    ) -> int:
        """
        Registers a lazy constraint lowerBound <= sum(coefficients[i] * x[indices[i]]) <= upperBound.

        Returns:
            The number of rows handed to the engine (0, 1 or 2).
        """
        self.__active("addLazyConstraint")
        indices = self.model._checkIndices(indices)
        rows = buildConstraints(indices, coefficients, lowerBound, upperBound)
        self.model._stageLazyConstraints(rows)

        for row in rows:
            logger.debug("lazy constraint %r", row)

        return len(rows)
