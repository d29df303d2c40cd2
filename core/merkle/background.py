"""
Module 02 - Background Tree Builds
Runs large tree builds off the caller's thread, with cancellation.

Module ID: M02

Tree construction is pure CPU work with no side effects, so cancelling a
build just discards it. The worker polls a cancellation flag while encoding
leaves and between tree levels; nothing is persisted until the caller
receives a finished MerkleTree.
"""
from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Sequence

from core.merkle.merkle_tree import MerkleTree, build_merkle_tree_from_leaves
from core.schemas.distribution import Recipient
from core.schemas.errors import BuildCancelledException


logger = logging.getLogger(__name__)

# Leaves encoded between cancellation checks
CANCEL_CHECK_INTERVAL = 1024


class TreeBuildTask:
    """
    A single tree build running on a worker thread.

    Example:
        >>> task = TreeBuildTask(recipients).start()
        >>> tree = task.result(timeout=30)
    """

    def __init__(
        self,
        recipients: Sequence[Recipient],
        *,
        executor: concurrent.futures.Executor | None = None,
    ) -> None:
        self._recipients = list(recipients)
        self._cancel_event = threading.Event()
        self._executor = executor
        self._future: concurrent.futures.Future[MerkleTree] | None = None

    @property
    def future(self) -> concurrent.futures.Future[MerkleTree]:
        if self._future is None:
            raise RuntimeError("Tree build has not been started")
        return self._future

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def start(self) -> "TreeBuildTask":
        """Submit the build to the executor (a private one if none was given)."""
        if self._future is not None:
            raise RuntimeError("Tree build already started")

        if self._executor is None:
            pool = concurrent.futures.ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="merkle-build"
            )
            self._future = pool.submit(self._run)
            # Queued work still runs; this only stops the pool taking more
            pool.shutdown(wait=False)
        else:
            self._future = self._executor.submit(self._run)

        logger.info("Started background tree build for %d recipients", len(self._recipients))
        return self

    def cancel(self) -> None:
        """Request cancellation; the in-progress build is discarded."""
        self._cancel_event.set()
        if self._future is not None:
            self._future.cancel()
        logger.info("Cancelled background tree build")

    def result(self, timeout: float | None = None) -> MerkleTree:
        """
        Wait for the finished tree.

        Raises:
            BuildCancelledException: If the build was cancelled
            EmptyDistributionException: If there were no recipients
            AmountOverflowException: If an amount does not fit 32 bytes
            concurrent.futures.TimeoutError: If timeout elapses first
        """
        try:
            return self.future.result(timeout=timeout)
        except concurrent.futures.CancelledError as e:
            raise BuildCancelledException() from e

    def _check_cancelled(self, encoded: int) -> None:
        if self._cancel_event.is_set():
            raise BuildCancelledException(
                details={"encoded_leaves": encoded, "leaf_count": len(self._recipients)}
            )

    def _run(self) -> MerkleTree:
        leaves: list[bytes] = []
        for i, recipient in enumerate(self._recipients):
            if i % CANCEL_CHECK_INTERVAL == 0:
                self._check_cancelled(i)
            leaves.append(recipient.leaf())
        return build_merkle_tree_from_leaves(leaves, should_stop=self._cancel_event.is_set)


async def build_merkle_tree_async(
    recipients: Sequence[Recipient],
    *,
    executor: concurrent.futures.Executor | None = None,
) -> MerkleTree:
    """
    Build a tree without blocking the event loop.

    Cancelling the awaiting task cancels the build.
    """
    task = TreeBuildTask(recipients, executor=executor).start()
    try:
        return await asyncio.wrap_future(task.future)
    except asyncio.CancelledError:
        task.cancel()
        raise


__all__ = [
    "CANCEL_CHECK_INTERVAL",
    "TreeBuildTask",
    "build_merkle_tree_async",
]
