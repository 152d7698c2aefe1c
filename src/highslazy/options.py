"""
Solver configuration.

These settings are passed through to HiGHS unchanged in meaning; the package
itself never interprets them.  Options can be set via:
1. The Model setters (setTimeLimit, setFocus, ...)
2. A SolverOptions instance passed to Model
3. Environment variables (HIGHSLAZY_*) via SolverOptions.fromEnvironment()

Example:
    >>> options = SolverOptions(time_limit=60, threads=4)
    >>> model = Model(options)
"""

import logging
import os
from dataclasses import dataclass, fields
from enum import Enum, auto
from typing import Any, Mapping, Optional

from .infinity import inf, toEngine

logger = logging.getLogger(__name__)


class Focus(Enum):
    FEASIBILITY = auto()
    OPTIMALITY = auto()
    BESTBOUND = auto()
    BALANCED = auto()


class LPSolver(Enum):
    PRIMAL_SIMPLEX = auto()
    DUAL_SIMPLEX = auto()
    BARRIER = auto()
    SIFTING = auto()


class PreSolver(Enum):
    AUTO = auto()
    PRIMAL = auto()
    DUAL = auto()
    NONE = auto()


# HiGHS steers MIP search effort through the share of work spent in primal heuristics
_HEURISTIC_EFFORT = {
    Focus.FEASIBILITY: 0.3,
    Focus.OPTIMALITY: 0.05,
    Focus.BESTBOUND: 0.0,
    Focus.BALANCED: 0.05,
}

# HiGHS simplex_strategy values: 1 = serial dual, 4 = primal
_LP_SOLVER = {
    LPSolver.PRIMAL_SIMPLEX: {"solver": "simplex", "simplex_strategy": 4},
    LPSolver.DUAL_SIMPLEX: {"solver": "simplex", "simplex_strategy": 1},
    LPSolver.BARRIER: {"solver": "ipm"},
    LPSolver.SIFTING: {"solver": "simplex", "simplex_strategy": 1},  # no sifting in HiGHS, use dual simplex
}

_PRESOLVE = {
    PreSolver.AUTO: "choose",
    PreSolver.PRIMAL: "on",
    PreSolver.DUAL: "on",
    PreSolver.NONE: "off",
}


@dataclass
class SolverOptions:
    """
    Pass-through configuration for the HiGHS engine.

    Attributes:
        time_limit: Wall clock limit in seconds for a whole optimize() call (inf = no limit)
        threads: Number of engine threads (0 = engine default)
        absolute_gap: Absolute optimality gap at which the search stops
        relative_gap: Relative optimality gap at which the search stops
        focus: Search emphasis
        cutoff: Objective cutoff; solutions worse than this are discarded (inf = none)
        verbose: Whether HiGHS writes its log to the console
        lp_solver: Algorithm for LP relaxations (None = engine default)
        presolver: Presolve mode
        presolve_passes: Number of presolve passes (-1 = engine default)
    """

    time_limit: float = inf
    threads: int = 0
    absolute_gap: float = 1e-6
    relative_gap: float = 1e-4
    focus: Focus = Focus.BALANCED
    cutoff: float = inf
    verbose: bool = False
    lp_solver: Optional[LPSolver] = None
    presolver: PreSolver = PreSolver.AUTO
    presolve_passes: int = -1

    def toHighsOptions(self) -> dict[str, Any]:
        """
        Maps the configuration to HiGHS option names and values.
        """
        options: dict[str, Any] = {
            "time_limit": toEngine(self.time_limit),
            "threads": int(self.threads),
            "mip_abs_gap": float(self.absolute_gap),
            "mip_rel_gap": float(self.relative_gap),
            "mip_heuristic_effort": _HEURISTIC_EFFORT[self.focus],
            "objective_bound": toEngine(self.cutoff),
            "output_flag": bool(self.verbose),
            "presolve": _PRESOLVE[self.presolver],
        }

        if self.lp_solver is not None:
            options.update(_LP_SOLVER[self.lp_solver])

        if self.presolve_passes != -1:
            logger.debug("HiGHS has no presolve pass limit; ignoring presolve_passes=%d", self.presolve_passes)

        return options

    @classmethod
    def fromEnvironment(cls, environ: Optional[Mapping[str, str]] = None) -> "SolverOptions":
        """
        Builds options from HIGHSLAZY_<FIELD> environment variables, e.g. HIGHSLAZY_TIME_LIMIT=30.
        Unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        for f in fields(cls):
            raw = environ.get(f"HIGHSLAZY_{f.name.upper()}")

            if raw is None:
                continue

            if f.name in ("focus", "presolver", "lp_solver"):
                enum = {"focus": Focus, "presolver": PreSolver, "lp_solver": LPSolver}[f.name]

                try:
                    values[f.name] = enum[raw.strip().upper()]
                except KeyError:
                    raise ValueError(f"Invalid value {raw!r} for HIGHSLAZY_{f.name.upper()}") from None

            elif f.name == "verbose":
                values[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif f.name in ("threads", "presolve_passes"):
                values[f.name] = int(raw)
            else:
                values[f.name] = float(raw)

        return cls(**values)
