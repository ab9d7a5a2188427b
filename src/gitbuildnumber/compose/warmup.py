"""Background initialization of the expression evaluator."""

import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

import structlog

from gitbuildnumber.compose.evaluators import BaseExpressionEvaluator

logger = structlog.get_logger(__name__)


def _create_and_initialize(factory: Callable[[], BaseExpressionEvaluator]) -> Optional[BaseExpressionEvaluator]:
    start = time.perf_counter()
    try:
        evaluator = factory()
        evaluator.initialize()
    except Exception as e:
        logger.error("evaluator_initialization_failed", error=str(e))
        return None
    logger.debug(
        "evaluator_initialized",
        engine=evaluator.name,
        duration_ms=round((time.perf_counter() - start) * 1000),
    )
    return evaluator


class EvaluatorWarmup:
    """Initializes an evaluator on a worker thread while Git is being read.

    join() waits for the result exactly once; it returns None instead of
    raising when initialization failed.
    """

    def __init__(self, future: Future, executor: ThreadPoolExecutor) -> None:
        self._future = future
        self._executor = executor

    @classmethod
    def start(cls, factory: Callable[[], BaseExpressionEvaluator]) -> "EvaluatorWarmup":
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="evaluator-warmup")
        future = executor.submit(_create_and_initialize, factory)
        return cls(future, executor)

    def join(self) -> Optional[BaseExpressionEvaluator]:
        try:
            return self._future.result()
        finally:
            self._executor.shutdown(wait=False)

    def cancel(self) -> bool:
        """Abandon the warm-up without waiting for it.

        Returns:
            True if initialization had not started yet and will not run
        """
        cancelled = self._future.cancel()
        self._executor.shutdown(wait=False)
        if cancelled:
            logger.debug("evaluator_warmup_cancelled")
        return cancelled
