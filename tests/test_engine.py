import unittest
from types import SimpleNamespace
import numpy as np
import highspy
from highslazy import Callback, Model, inf
from highslazy.engine import CallbackBridge


class PairCallback(Callback):
    """
    Cuts off x0 + x1 > 1.
    """

    def separateAndAddLazyConstraints(self):
        if self.label(0) + self.label(1) > 1.5:
            self.addLazyConstraint([0, 1], [1, 1], -inf, 1)

    def computeFeasibleSolution(self):
        pass


class TestCallbackBridge(unittest.TestCase):
    def get_bridge(self):
        """
        min -x0 - x1 - 2x2
        """
        model = Model()
        model.addVariables([-1, -1, -2])
        cb = PairCallback(model)
        model.setCallback(cb)
        return model, cb, CallbackBridge(model, cb)

    def interrupt_event(self, primal=highspy.kHighsInf, dual=-highspy.kHighsInf, interrupt=False):
        return SimpleNamespace(
            data_out=SimpleNamespace(mip_primal_bound=primal, mip_dual_bound=dual, running_time=0.1),
            data_in=SimpleNamespace(user_interrupt=interrupt),
        )

    def solution_event(self, *values):
        return SimpleNamespace(
            data_out=SimpleNamespace(mip_solution=np.array(values, dtype=np.float64)),
            data_in=SimpleNamespace(user_interrupt=False),
        )

    def test_interrupt_flag_is_cleared(self):
        model, cb, bridge = self.get_bridge()

        # a flag left over from an earlier run must not stop this one
        e = self.interrupt_event(interrupt=True)
        bridge._onInterrupt(e)
        self.assertFalse(e.data_in.user_interrupt)

    def test_interrupt_on_pending_rows(self):
        model, cb, bridge = self.get_bridge()
        bridge._onSolution(self.solution_event(1, 1, 1))
        self.assertEqual(model._numPendingConstraints(), 1)

        e = self.interrupt_event()
        bridge._onInterrupt(e)
        self.assertTrue(e.data_in.user_interrupt)

    def test_rejected_incumbent_objective(self):
        model, cb, bridge = self.get_bridge()

        # [1, 1, 1] is cut off, the engine still reports it as its incumbent
        self.assertTrue(bridge.separate(np.array([1.0, 1.0, 1.0])))
        bridge._onInterrupt(self.interrupt_event(primal=-4, dual=-4))
        self.assertEqual(cb.objectiveBest, inf)
        self.assertEqual(cb.objectiveBound, -4)

        self.assertFalse(bridge.separate(np.array([1.0, 0.0, 1.0])))
        self.assertEqual(cb.objectiveBest, -3)

        bridge._onInterrupt(self.interrupt_event(primal=-3, dual=-3.5))
        self.assertEqual(cb.objectiveBest, -3)
        self.assertEqual(cb.objectiveBound, -3.5)

    def test_incumbent_separated_once(self):
        model, cb, bridge = self.get_bridge()
        self.assertFalse(bridge.separate(np.array([0.0, 1.0, 1.0])))
        self.assertFalse(bridge.separateIncumbent(np.array([0.0, 1.0, 1.0])))
        self.assertEqual(bridge.candidates, 1)

    def test_report_bound(self):
        model, cb, bridge = self.get_bridge()
        bridge.reportBound(-3)
        self.assertEqual(cb.objectiveBound, -3)
        self.assertEqual(cb.objectiveBest, inf)

        bridge.reportBound(-highspy.kHighsInf)
        self.assertEqual(cb.objectiveBound, -3)
