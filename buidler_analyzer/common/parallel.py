"""Parallel execution utilities based on concurrent.futures."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")
DEFAULT_MAX_WORKERS = 8


def run_parallel(
    tasks: Dict[str, Callable[[], T]],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Dict[str, T]:
    """Runs named callables in parallel and returns their results by name.

    Waits for the whole batch. If any task raised, the first failure (in
    submission order) is re-raised and no results are returned.
    """
    if not tasks:
        return {}

    results: Dict[str, T] = {}
    errors: Dict[str, Exception] = {}

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(tasks)))) as executor:
        future_to_key = {
            executor.submit(func): key
            for key, func in tasks.items()
        }

        for future in as_completed(future_to_key):
            key = future_to_key[future]
            try:
                results[key] = future.result()
                logger.debug("Parallel task completed: %s", key)
            except Exception as exc:
                logger.warning("Parallel task failed: %s - %s", key, exc)
                errors[key] = exc

    if errors:
        first_key = next(key for key in tasks if key in errors)
        raise errors[first_key]

    return results


def map_parallel(
    func: Callable[[T], R],
    items: Iterable[T],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[R]:
    """Applies func to every item in parallel; results keep the input order."""
    items = list(items)
    results = run_parallel(
        {str(i): (lambda item=item: func(item)) for i, item in enumerate(items)},
        max_workers=max_workers,
    )
    return [results[str(i)] for i in range(len(items))]
