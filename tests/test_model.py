import unittest
import numpy as np
from highslazy import (
    Callback,
    Focus,
    InvalidStateError,
    LPSolver,
    Model,
    NotSolvedError,
    OutOfRangeError,
    PreSolver,
    SolverOptions,
    inf,
)

class NoopCallback(Callback):
    def separateAndAddLazyConstraints(self):
        pass

    def computeFeasibleSolution(self):
        pass

class TestModel(unittest.TestCase):
    def get_basic_model(self):
        """
        min x0 + 2x1 + 3x2
        s.t.
        x0 + x1 + x2 == 1
        """
        model = Model()
        model.addVariables([1, 2, 3])
        model.addConstraint([0, 1, 2], [1, 1, 1], 1, 1)
        return model

    def test_add_variables(self):
        model = Model()
        self.assertEqual(model.numberOfVariables, 0)
        self.assertEqual(model.addVariables([1, 2, 3]), 0)
        self.assertEqual(model.addVariables([4, 5]), 3)
        self.assertEqual(model.numberOfVariables, 5)

        # empty addition is a no-op returning the current count
        self.assertEqual(model.addVariables([]), 5)
        self.assertEqual(model.numberOfVariables, 5)

    def test_add_variables_from_generator(self):
        model = Model()
        self.assertEqual(model.addVariables(float(i) for i in range(4)), 0)
        self.assertEqual(model.numberOfVariables, 4)

    def test_add_constraint(self):
        model = Model()
        model.addVariables([1, 1, 1])
        self.assertEqual(model.numberOfConstraints, 0)
        self.assertEqual(model.addConstraint([0, 1], [1, 1], 1, 1), 1)
        self.assertEqual(model.addConstraint([0, 1, 2], [1, 1, 1], 1, 2), 2)
        self.assertEqual(model.addConstraint([1, 2], [1, 1], -inf, 1), 1)
        self.assertEqual(model.addConstraint([1, 2], [1, 1], -inf, inf), 0)
        self.assertEqual(model.numberOfConstraints, 4)

    def test_add_constraint_out_of_range(self):
        model = Model()
        model.addVariables([1, 1])
        self.assertRaises(OutOfRangeError, model.addConstraint, [0, 2], [1, 1], -inf, 1)
        self.assertRaises(OutOfRangeError, model.addConstraint, [-1], [1], -inf, 1)

        # nothing was added
        self.assertEqual(model.numberOfConstraints, 0)

    def test_add_free_constraint_out_of_range(self):
        model = Model()
        model.addVariables([1, 1])

        # no rows are emitted for a free expression, its indices are still checked
        self.assertRaises(OutOfRangeError, model.addConstraint, [0, 7], [1, 1], -inf, inf)
        self.assertEqual(model.addConstraint([0, 1], [1, 1], -inf, inf), 0)
        self.assertEqual(model.numberOfConstraints, 0)

    def test_add_constraint_mismatched_lengths(self):
        model = Model()
        model.addVariables([1, 1])
        self.assertRaises(ValueError, model.addConstraint, [0, 1], [1], -inf, 1)

    def test_not_solved(self):
        model = self.get_basic_model()
        self.assertRaises(NotSolvedError, model.objective)
        self.assertRaises(NotSolvedError, model.bound)
        self.assertRaises(NotSolvedError, model.gap)
        self.assertRaises(NotSolvedError, model.label, 0)
        self.assertRaises(NotSolvedError, model.labels)

    def test_optimize(self):
        model = self.get_basic_model()
        model.optimize()
        self.assertEqual(model.status, "Optimal")
        self.assertAlmostEqual(model.objective(), 1)
        self.assertLessEqual(model.bound(), model.objective() + 1e-6)
        self.assertLessEqual(model.gap(), 1e-4)
        self.assertEqual([round(model.label(i)) for i in range(3)], [1, 0, 0])
        self.assertEqual(list(np.round(model.labels())), [1, 0, 0])
        self.assertRaises(OutOfRangeError, model.label, 3)

    def test_optimize_two_sided(self):
        """
        min -x0 - x1 - x2
        s.t.
        1 <= x0 + x1 + x2 <= 2
        """
        model = Model()
        model.addVariables([-1, -1, -1])
        model.addConstraint([0, 1, 2], [1, 1, 1], 1, 2)
        model.optimize()
        self.assertAlmostEqual(model.objective(), -2)
        self.assertAlmostEqual(sum(model.labels()), 2)

    def test_optimize_with_noop_callback(self):
        model = self.get_basic_model()
        model.setCallback(NoopCallback(model))
        model.optimize()
        self.assertAlmostEqual(model.objective(), 1)
        self.assertEqual(list(np.round(model.labels())), [1, 0, 0])

    def test_progress_with_noop_callback(self):
        """
        min -x0 - ... - x29
        s.t.
        x0 + x1 <= 1
        """
        model = Model()
        model.addVariables([-1] * 30)
        model.addConstraint([0, 1], [1, 1], -inf, 1)
        cb = NoopCallback(model)
        model.setCallback(cb)
        model.optimize()

        # progress is reported even when HiGHS never fires its MIP interrupt
        self.assertAlmostEqual(model.objective(), -29)
        self.assertAlmostEqual(cb.objectiveBest, -29)
        self.assertLessEqual(cb.objectiveBound, model.objective() + 1e-6)
        self.assertGreater(cb.objectiveBound, -inf)

    def test_infeasible(self):
        model = Model()
        model.addVariables([1, 1])
        model.addConstraint([0, 1], [1, 1], 3, 3)
        model.optimize()
        self.assertRaises(NotSolvedError, model.objective)
        self.assertRaises(NotSolvedError, model.labels)

    def test_add_variables_after_optimize(self):
        model = self.get_basic_model()
        model.optimize()
        self.assertRaises(InvalidStateError, model.addVariables, [1])
        self.assertEqual(model.numberOfVariables, 3)

    def test_start(self):
        model = self.get_basic_model()
        self.assertRaises(ValueError, model.setStart, [1, 0])
        model.setStart([0, 0, 1])
        model.optimize()
        self.assertAlmostEqual(model.objective(), 1)

    def test_branch_priority(self):
        model = self.get_basic_model()
        self.assertEqual(model.branchPriority(1), 0)
        model.setBranchPriority(1, 5)
        self.assertEqual(model.branchPriority(1), 5)
        self.assertRaises(OutOfRangeError, model.setBranchPriority, 3, 1)
        self.assertRaises(OutOfRangeError, model.branchPriority, 3)

    def test_foreign_callback(self):
        model = self.get_basic_model()
        other = self.get_basic_model()
        self.assertRaises(InvalidStateError, model.setCallback, NoopCallback(other))

    def test_options(self):
        model = Model(SolverOptions(threads=2, absolute_gap=1e-3))
        self.assertEqual(model.numberOfThreads(), 2)
        self.assertEqual(model.absoluteGap(), 1e-3)
        self.assertEqual(model.relativeGap(), 1e-4)

        model.setNumberOfThreads(1)
        model.setAbsoluteGap(1e-5)
        model.setRelativeGap(1e-2)
        self.assertEqual(model.numberOfThreads(), 1)
        self.assertEqual(model.absoluteGap(), 1e-5)
        self.assertEqual(model.relativeGap(), 1e-2)

    def test_setters_then_optimize(self):
        model = self.get_basic_model()
        model.setTimeLimit(30)
        model.setFocus(Focus.FEASIBILITY)
        model.setCutoff(10)
        model.setVerbosity(False)
        model.setLPSolver(LPSolver.DUAL_SIMPLEX)
        model.setPreSolver(PreSolver.NONE, passes=3)
        model.optimize()
        self.assertAlmostEqual(model.objective(), 1)
        self.assertEqual(model.options.time_limit, 30)
        self.assertEqual(model.options.presolve_passes, 3)
