"""
Post-commit side effects (notifications, realtime emits, last-active updates).

Best-effort only: a failing task is logged and dropped, never raised into the request
that scheduled it. One dispatcher per process, built in main.lifespan and shut down there.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class SideEffectDispatcher:
    """Runs fire-and-forget tasks on a small thread pool."""

    def __init__(self, max_workers: int = 4):
        self._executor: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="side_effect",
        )

    def submit(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        if self._executor is None:
            logger.warning("Dispatcher is shut down; dropping side effect %s", name)
            return
        self._executor.submit(self._run, name, fn, args, kwargs)

    @staticmethod
    def _run(name: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        try:
            fn(*args, **kwargs)
        except Exception as e:
            logger.warning("Side effect %s failed: %s", name, e, exc_info=True)

    def shutdown(self, wait: bool = True) -> None:
        executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)


class InlineDispatcher(SideEffectDispatcher):
    """Same contract, but runs each task in the caller's thread (scripts, tests)."""

    def __init__(self):
        self._executor = None
        self._closed = False

    def submit(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        if self._closed:
            logger.warning("Dispatcher is shut down; dropping side effect %s", name)
            return
        self._run(name, fn, args, kwargs)

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
