from __future__ import annotations
import logging
import numpy as np
from typing import TYPE_CHECKING, Any, Optional

from highspy import HighsStatus, cb

from .errors import CallbackFailure, EngineFailure
from .events import CallbackEvent
from .infinity import fromEngine, inf

if TYPE_CHECKING:
    from highspy.highs import HighsCallbackEvent
    from .callback import Callback
    from .model import Model

logger = logging.getLogger(__name__)


class CallbackBridge(object):
    """
    Connects a Callback to the HiGHS callback interface for the duration of one optimize() call.

    HiGHS callbacks are translated into tagged events:
        kCallbackMipInterrupt    -> GLOBAL_PROGRESS
        kCallbackMipSolution     -> INTEGER_CANDIDATE_FOUND
        kCallbackMipUserSolution -> SEARCH_NODE_RELAXED

    HiGHS cannot reject a candidate or change the model while it runs, so lazy constraints are buffered by
    the model and the run is interrupted at the next opportunity.  The model then adds the buffered rows
    and runs again.  A hook failure is kept and re-raised once the engine has returned control.

    Progress objectives come only from candidates that passed separation, since the engine keeps a
    candidate as its incumbent even after a lazy constraint has cut it off.  Dual bounds are taken from
    every run: a bound on a relaxation of the full model is still valid for the full model.
    """

    def __init__(self, model: Model, callback: Callback):
        self.model = model
        self.callback = callback
        self.failure: Optional[EngineFailure] = None
        self.heuristic_solution: Optional[tuple[np.ndarray[Any, np.dtype[np.int32]], np.ndarray[Any, np.dtype[np.float64]]]] = None
        self.candidates = 0
        self.best_feasible = inf
        self._clean: set[tuple[float, ...]] = set()

        highs = model._highs
        self._subscriptions = [
            (highs.cbMipInterrupt, self._onInterrupt),
            (highs.cbMipSolution, self._onSolution),
            (highs.callbacks[int(cb.HighsCallbackType.kCallbackMipUserSolution)], self._onUserSolution),
        ]

    def __enter__(self):
        for event, fn in self._subscriptions:
            event.subscribe(fn)
        return self

    def __exit__(self, *exc_info: Any):
        for event, fn in self._subscriptions:
            event.unsubscribe(fn)

    @staticmethod
    def _key(values: np.ndarray[Any, np.dtype[np.float64]]):
        return tuple(np.round(values, 6).tolist())

    def _values(self, solution: Any, operation: str, required: bool = True):
        n = self.model.numberOfVariables
        values = np.asarray(solution, dtype=np.float64).ravel()

        if values.shape[0] < n:
            if required:
                self.failure = self.failure or EngineFailure(
                    int(HighsStatus.kError),
                    f"solution has {values.shape[0]} values, expected {n}",
                    operation,
                )
            return None

        return values[:n]

    def _forward(self, event: CallbackEvent):
        if self.failure is not None:
            return None

        try:
            return self.callback.dispatch(event)
        except CallbackFailure as e:
            logger.debug("aborting HiGHS run: %s", e)
            self.failure = e
            return None

    def _interruptIfNeeded(self, e: HighsCallbackEvent):
        # the input block is reused across runs, so the flag is set both ways
        if e.data_in is not None:
            e.data_in.user_interrupt = self.failure is not None or self.model._hasPendingConstraints()

    def _verified(self, objective: float) -> Optional[float]:
        # the engine incumbent may be a candidate that a lazy constraint has cut off
        objective = fromEngine(objective)

        if self.best_feasible == inf or abs(objective - self.best_feasible) > 1e-9 * (1.0 + abs(objective)):
            return None
        return objective

    def _onInterrupt(self, e: HighsCallbackEvent):
        out = e.data_out
        objective = self._verified(out.mip_primal_bound)
        self._forward(CallbackEvent.globalProgress(objective, out.mip_dual_bound, out.running_time))
        self._interruptIfNeeded(e)

    def _onSolution(self, e: HighsCallbackEvent):
        values = self._values(e.data_out.mip_solution, "kCallbackMipSolution")

        if values is not None:
            self.separate(values)

        self._interruptIfNeeded(e)

    def _onUserSolution(self, e: HighsCallbackEvent):
        values = self._values(e.data_out.mip_solution, "kCallbackMipUserSolution", required=False)
        staged = self._forward(CallbackEvent.nodeRelaxed(values))

        if staged is not None and e.data_in is not None:
            idxs, vals = staged

            if len(idxs) == self.model.numberOfVariables:
                status = e.data_in.setSolution(vals)
                self.heuristic_solution = staged
            else:
                status = e.data_in.setSolution(idxs, vals)

            if status == HighsStatus.kError:
                logger.warning("HiGHS rejected the heuristic solution (%d values)", len(idxs))

        self._interruptIfNeeded(e)

    def separate(self, values: np.ndarray[Any, np.dtype[np.float64]]) -> bool:
        """
        Passes an integer candidate to the callback.

        Returns:
            True if the callback registered lazy constraints for it.
        """
        before = self.model._numPendingConstraints()
        self.candidates += 1
        self._forward(CallbackEvent.integerCandidate(values))

        if self.failure is not None:
            return False

        if self.model._numPendingConstraints() == before:
            self._clean.add(self._key(values))
            objective = self.model._objectiveValue(values)
            self.best_feasible = min(self.best_feasible, objective)
            self._forward(CallbackEvent.globalProgress(objective, None))
            return False

        return True

    def separateIncumbent(self, values: np.ndarray[Any, np.dtype[np.float64]]) -> bool:
        """
        Separates the final incumbent of a run, unless it already passed separation during the run.
        """
        if self._key(values) in self._clean:
            return False
        return self.separate(values)

    def reportBound(self, bound: float):
        """
        Forwards the dual bound of a finished run.  HiGHS may finish small models without a MIP interrupt.
        """
        self._forward(CallbackEvent.globalProgress(None, bound))
