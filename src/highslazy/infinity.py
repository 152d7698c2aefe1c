import math

from highspy import kHighsInf

inf = math.inf


def fromEngine(value: float) -> float:
    """
    Translates an engine value to Python floats, mapping the engine's infinity sentinel (and anything beyond it) to signed math.inf.
    """
    value = float(value)

    if value >= kHighsInf:
        return inf
    elif value <= -kHighsInf:
        return -inf
    return value


def toEngine(value: float) -> float:
    """
    Translates a bound literal to the engine's representation of infinity.
    """
    value = float(value)

    if value == inf:
        return kHighsInf
    elif value == -inf:
        return -kHighsInf
    return value
