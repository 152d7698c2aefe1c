import logging
from typing import Optional

from highspy import HighsStatus

logger = logging.getLogger(__name__)


class EngineFailure(RuntimeError):
    """
    HiGHS reported an error while an operation was running.

    Attributes:
        code: The HiGHS status code reported for the failure.
        message: The engine's message.
        operation: The operation being attempted (e.g. "addConstraint", "optimize").
    """

    def __init__(self, code: int, message: str, operation: str):
        super().__init__(f"HiGHS error {code}: {message} while executing {operation}")
        self.code = code
        self.message = message
        self.operation = operation


class CallbackFailure(EngineFailure):
    """
    A user hook raised inside a solver callback. The optimization session is aborted.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(int(HighsStatus.kError) if code is None else code, message, "HiGHS callback")


class InvalidStateError(RuntimeError):
    pass


class OutOfRangeError(IndexError):
    pass


class NotSolvedError(RuntimeError):
    pass


def checkStatus(status: HighsStatus, operation: str, message: Optional[str] = None):
    """
    Raises EngineFailure if a HiGHS call returned kError.  Warnings are logged and otherwise ignored.
    """
    if status == HighsStatus.kError:
        raise EngineFailure(int(status), message or f"{operation} returned {status.name}", operation)

    if status == HighsStatus.kWarning:
        logger.debug("HiGHS returned a warning while executing %s", operation)
