"""Optimistic mutation helper.

Every client-side mutation follows the same three steps:
    1. Apply the change locally and keep a snapshot of the previous state
    2. Issue the request
    3. On failure restore the snapshot and re-raise; on success reconcile
       local state with the server row

Failures are never swallowed. Callers decide how to surface the error.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

log = structlog.get_logger(__name__)

SnapshotT = TypeVar("SnapshotT")
ResultT = TypeVar("ResultT")


async def optimistic_mutation(
    apply: Callable[[], SnapshotT],
    request: Callable[[], Awaitable[ResultT]],
    restore: Callable[[SnapshotT], None],
    reconcile: Callable[[ResultT], None] | None = None,
) -> ResultT:
    """Run ``request`` with ``apply`` already visible locally.

    Args:
        apply: Applies the local change and returns a snapshot of the
            state it replaced.
        request: Issues the network call.
        restore: Puts the snapshot back if the request fails.
        reconcile: Adopts the server's answer after success.

    Returns:
        Whatever ``request`` returned.

    Raises:
        Exception: Re-raises the request's exception after restoring.
    """
    snapshot = apply()
    try:
        result = await request()
    except Exception as e:
        restore(snapshot)
        log.warning("optimistic_mutation_reverted", error_type=type(e).__name__)
        raise
    if reconcile is not None:
        reconcile(result)
    return result
