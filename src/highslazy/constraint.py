from __future__ import annotations
import numpy as np
from typing import Any, Iterable, Optional, Sequence, Union

from .infinity import inf


class LinearExpression(object):
    """
    A sparse linear expression sum(coefficient_i * variable_i) over variable indices.
    """

    __slots__ = ["idxs", "vals"]

    def __init__(self, idxs: Optional[Iterable[int]] = None, vals: Optional[Iterable[float]] = None):
        self.idxs: list[int] = [] if idxs is None else [int(i) for i in idxs]
        self.vals: list[float] = [] if vals is None else [float(v) for v in vals]

        if len(self.idxs) != len(self.vals):
            raise ValueError("Variable indices and coefficients must have the same length.")

    def __repr__(self):
        return f"LinearExpression({self.idxs}, {self.vals})"

    def unique_elements(self):
        """
        Collects unique variables and sums their corresponding values.  Keeps all values (including zeros).
        """
        # sort by groups for fast unique
        groups = np.asarray(self.idxs, dtype=np.int32)
        order = np.argsort(groups, kind="stable")
        groups = groups[order]

        # get unique groups
        index = np.ones(len(groups), dtype=bool)
        index[:-1] = groups[1:] != groups[:-1]

        values = np.asarray(self.vals, dtype=np.float64)[order]

        if index.all():
            return groups, values

        values = np.cumsum(values)[index]
        groups = groups[index]

        # calculate the correct sum (diff of cumsum)
        values[1:] = values[1:] - values[:-1]
        return groups, values


class LinearConstraint(object):
    """
    A single row lower <= expression <= upper, with at most one finite side unless lower == upper.
    """

    __slots__ = ["indices", "coefficients", "lower", "upper"]

    def __init__(
        self,
        indices: np.ndarray[Any, np.dtype[np.int32]],
        coefficients: np.ndarray[Any, np.dtype[np.float64]],
        lower: float,
        upper: float,
    ):
        self.indices = indices
        self.coefficients = coefficients
        self.lower = lower
        self.upper = upper

    def __repr__(self):
        terms = " + ".join(f"{v:g}*x{i}" for i, v in zip(self.indices, self.coefficients))
        return f"LinearConstraint({terms or '0'} {self.sense} {self.rhs:g})"

    @property
    def sense(self) -> str:
        if self.lower == self.upper:
            return "=="
        return ">=" if self.lower != -inf else "<="

    @property
    def rhs(self) -> float:
        return self.upper if self.sense == "<=" else self.lower

    def evaluate(self, values: Union[Sequence[float], np.ndarray[Any, np.dtype[np.float64]]]) -> float:
        return float(sum(v * values[int(i)] for i, v in zip(self.indices, self.coefficients)))

    def isSatisfied(
        self,
        values: Union[Sequence[float], np.ndarray[Any, np.dtype[np.float64]]],
        tolerance: float = 1e-6,
    ) -> bool:
        activity = self.evaluate(values)
        return self.lower - tolerance <= activity <= self.upper + tolerance


def buildConstraints(
    indices: Iterable[int],
    coefficients: Iterable[float],
    lowerBound: float,
    upperBound: float,
) -> list[LinearConstraint]:
    """
    Folds a sparse (index, coefficient) sequence into one linear expression and emits its bound constraints.

    Args:
        indices: Variable indices of the terms.
        coefficients: Coefficient of each term, parallel to indices.
        lowerBound: Lower bound of the expression (-inf to omit).
        upperBound: Upper bound of the expression (inf to omit).

    Returns:
        A single equality constraint if the bounds coincide; otherwise one constraint per finite bound (possibly none).
    """
    expr = LinearExpression(indices, coefficients)
    idxs, vals = expr.unique_elements()
    lowerBound = float(lowerBound)
    upperBound = float(upperBound)

    if lowerBound == upperBound:
        return [LinearConstraint(idxs, vals, lowerBound, upperBound)]

    rows = []

    if lowerBound != -inf:
        rows.append(LinearConstraint(idxs, vals, lowerBound, inf))

    if upperBound != inf:
        rows.append(LinearConstraint(idxs, vals, -inf, upperBound))

    return rows
