"""Run independent jobs on a thread pool and collect their results in order."""

from __future__ import annotations

import concurrent.futures
import os
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")

__all__ = ["ParallelExecutionError", "ParallelTimeoutError", "run_parallel"]


class ParallelExecutionError(RuntimeError):
    """A job passed to :func:`run_parallel` raised.

    ``index`` is the position of the job in the input and ``cause`` the
    exception it raised, also chained as ``__cause__``.
    """

    def __init__(self, *, index: int, task: str, cause: BaseException) -> None:
        super().__init__(f"parallel task {index} ({task}) failed: {cause}")
        self.index = index
        self.task = task
        self.cause = cause


class ParallelTimeoutError(TimeoutError):
    def __init__(self, *, timeout: float, completed: int, total: int) -> None:
        super().__init__(
            f"only {completed} of {total} parallel task(s) finished within {timeout:.3f}s"
        )
        self.timeout = timeout
        self.completed = completed
        self.total = total


def run_parallel(
    tasks: Iterable[Callable[[], T]],
    *,
    max_workers: int | None = None,
    timeout: float | None = None,
) -> list[T]:
    """Call every job in ``tasks`` concurrently and return the results in input order.

    The first job to fail stops the run: jobs that have not started are
    cancelled and the failure is raised as :class:`ParallelExecutionError`.
    ``timeout`` bounds the whole run and raises :class:`ParallelTimeoutError`.
    """

    jobs = list(tasks)
    for index, job in enumerate(jobs):
        if not callable(job):
            raise TypeError(f"task at position {index} is not callable: {job!r}")
    if not jobs:
        return []

    results: dict[int, T] = {}
    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=_worker_count(max_workers, len(jobs)), thread_name_prefix="libras-parallel"
    )
    try:
        positions = {executor.submit(job): index for index, job in enumerate(jobs)}
        try:
            for future in concurrent.futures.as_completed(positions, timeout=timeout):
                index = positions[future]
                error = future.exception()
                if error is not None:
                    raise ParallelExecutionError(
                        index=index, task=_describe(jobs[index]), cause=error
                    ) from error
                results[index] = future.result()
        except concurrent.futures.TimeoutError:
            raise ParallelTimeoutError(
                timeout=float(timeout or 0.0), completed=len(results), total=len(jobs)
            ) from None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return [results[index] for index in range(len(jobs))]


def _worker_count(requested: int | None, jobs: int) -> int:
    if requested is not None and requested > 0:
        return min(requested, jobs)
    return max(1, min(jobs, (os.cpu_count() or 1) * 4))


def _describe(job: Callable[[], object]) -> str:
    func = getattr(job, "func", job)
    name = getattr(func, "__qualname__", None) or getattr(func, "__name__", None)
    module = getattr(func, "__module__", None)
    return f"{module}.{name}" if name and module else repr(job)
