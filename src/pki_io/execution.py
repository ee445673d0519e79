"""
Execution contexts — separate WHAT (pure issuance logic) from HOW it runs.

Issuance functions describe what should happen and return Result[T].
An ExecutionContext wraps their evaluation with cross-cutting behaviour
(timing and structured logging here) without the issuance code knowing.

    result = LoggingExecutionContext(operation="bootstrap").execute(
        lambda: bootstrap_hierarchy(settings, store, config_store)
    )
"""

from __future__ import annotations

import time
from typing import Callable, Protocol, TypeVar, runtime_checkable

import structlog

from pki_io.failure import ErrorCode, FailureDescription
from pki_io.result import Failure, Result

T = TypeVar("T")
log = structlog.get_logger()


@runtime_checkable
class ExecutionContext(Protocol):
    """Anything with execute(computation) -> Result[T]."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]: ...


class NoOpExecutionContext:
    """Passthrough context — runs the computation as is."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


class LoggingExecutionContext:
    """
    Log entry, duration and outcome of a Result computation.

    An exception escaping the computation is turned into an UNKNOWN_ERROR
    Failure so the caller always gets a Result back.
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        log.info("execution.started", operation=self._operation)
        start = time.monotonic()

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            log.error(
                "execution.crashed",
                operation=self._operation,
                elapsed=round(time.monotonic() - start, 3),
                error=str(e),
            )
            return Failure(
                FailureDescription(ErrorCode.UNKNOWN_ERROR, f"Execution failed: {e}", e)
            )

        elapsed = round(time.monotonic() - start, 3)
        if result.is_success():
            log.info("execution.completed", operation=self._operation, elapsed=elapsed, state="SUCCESS")
        else:
            log.warning(
                "execution.completed",
                operation=self._operation,
                elapsed=elapsed,
                state="FAILURE",
                code=result.error().code.value,
                failure=result.error().message,
            )
        return result
