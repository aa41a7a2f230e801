import logging
from collections.abc import Awaitable, Callable, Collection, Iterable, Iterator, Sequence
from itertools import batched

logger = logging.getLogger(__name__)


def partition[T](inputs: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yields successive lists of at most ``size`` items, in input order."""
    if size < 1:
        raise ValueError(f"Partition size must be positive, got {size}.")
    for chunk in batched(inputs, size):
        yield list(chunk)


async def execute_large_inputs[K, R](
    inputs: Collection[K],
    function: Callable[[list[K]], Awaitable[Sequence[R]]],
    partition_size: int,
) -> list[R]:
    """
    Runs a lookup over an unbounded collection of keys without exceeding the
    store's bind-parameter ceiling.

    The keys are split into chunks of at most ``partition_size`` and ``function``
    is awaited once per chunk. Results are concatenated in chunk order; nothing
    is said about the order of rows relative to the input keys. Duplicate keys
    are passed through as-is.

    An empty collection returns an empty list WITHOUT calling ``function``, so
    callers never pay a round trip for nothing.

    Args:
        inputs: The lookup keys (ids, logins, ...).
        function: Coroutine function querying one chunk of keys.
        partition_size: Maximum number of keys per call.
    """
    if partition_size < 1:
        raise ValueError(f"Partition size must be positive, got {partition_size}.")
    if not inputs:
        return []

    results: list[R] = []
    calls = 0
    for chunk in partition(inputs, partition_size):
        results.extend(await function(chunk))
        calls += 1

    logger.debug("Resolved %d keys in %d partition(s) of at most %d", len(inputs), calls, partition_size)
    return results
